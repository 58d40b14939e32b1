from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest
from eth_account import Account

from wallet_bridge.chain_state import ChainState
from wallet_bridge.dispatcher import RpcDispatcher
from wallet_bridge.signer import SignerContext
from wallet_bridge.transport import RpcTransport
from wallet_bridge.types import ChainBinding, TransactionIntent

TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_ADDRESS = Account.from_key(TEST_PRIVATE_KEY).address
DEFAULT_RPC_URL = "http://rpc.default"
DUMMY_TX_HASH = "0x" + "ab" * 32


class DummyTransport(RpcTransport):
    """Transport that records calls instead of doing HTTP."""

    def __init__(self, rpc_url: str = DEFAULT_RPC_URL, responses: dict[str, Any] | None = None):
        super().__init__(rpc_url)
        self.responses = responses or {}
        self.calls: list[tuple[str, list[Any]]] = []

    def send(self, method: str, params: Sequence[Any]) -> Any:
        self.calls.append((method, list(params)))
        return self.responses.get(method, {"echo": method, "params": list(params)})


class RecordingSigner(SignerContext):
    """Signer that captures transaction intents instead of broadcasting."""

    def __init__(self, account, transport):
        super().__init__(account, transport)
        self.intents: list[TransactionIntent] = []

    def send_transaction(self, intent: TransactionIntent) -> str:
        self.intents.append(intent)
        return DUMMY_TX_HASH


@pytest.fixture
def transport() -> DummyTransport:
    return DummyTransport()


@pytest.fixture
def signer(transport: DummyTransport) -> RecordingSigner:
    return RecordingSigner(Account.from_key(TEST_PRIVATE_KEY), transport)


@pytest.fixture
def chain_state(signer: RecordingSigner) -> ChainState:
    binding = ChainBinding(chain_id=1, rpc_url=DEFAULT_RPC_URL, signer=signer)
    return ChainState(binding, transport_factory=DummyTransport)


@pytest.fixture
def dispatcher(chain_state: ChainState) -> RpcDispatcher:
    return RpcDispatcher(chain_state)
