"""Interpret EIP-1193 wallet requests coming from the page."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from web3 import Web3

from .chain_state import ChainState
from .exceptions import IdentityMismatchError, InvalidRequestError
from .types import ChainBinding, LastTransactionRecord, TransactionIntent, normalise_params
from .utils import (
    coerce_quantity,
    decode_chain_id,
    encode_chain_id,
    message_to_bytes,
    parse_typed_data,
)

logger = logging.getLogger(__name__)

Handler = Callable[[ChainBinding, list[Any]], Any]


class RpcDispatcher:
    """Dispatch wallet methods to the signer or chain state, forwarding everything else.

    Specialised methods are answered locally; any other method is sent verbatim
    to the active endpoint, so this is a fallback design rather than an
    allow-list.
    """

    def __init__(
        self,
        chain_state: ChainState,
        last_transaction: LastTransactionRecord | None = None,
    ) -> None:
        self._chain_state = chain_state
        self._last_transaction = last_transaction or LastTransactionRecord()
        self._handlers: dict[str, Handler] = {
            "eth_requestAccounts": self._accounts,
            "eth_accounts": self._accounts,
            "eth_chainId": self._chain_id,
            "net_version": self._net_version,
            "personal_sign": self._personal_sign,
            "eth_sign": self._eth_sign,
            "eth_signTypedData": self._sign_typed_data,
            "eth_signTypedData_v4": self._sign_typed_data,
            "wallet_switchEthereumChain": self._switch_chain,
            "wallet_addEthereumChain": self._add_chain,
            "eth_sendTransaction": self._send_transaction,
        }

    @property
    def chain_state(self) -> ChainState:
        return self._chain_state

    @property
    def last_transaction(self) -> LastTransactionRecord:
        return self._last_transaction

    def handle(self, method: Any, params: Any = None) -> Any:
        if not isinstance(method, str) or not method:
            raise InvalidRequestError("Request method is required", method=None)

        args = normalise_params(params)
        binding = self._chain_state.snapshot()
        handler = self._handlers.get(method)

        logger.debug("Dispatching %s (chain_id=%s)", method, binding.chain_id)
        if handler is None:
            return binding.signer.transport.send(method, args)
        return handler(binding, args)

    # ------------------------------------------------------------------
    # Accounts & chain
    # ------------------------------------------------------------------
    def _accounts(self, binding: ChainBinding, params: list[Any]) -> list[str]:
        return [binding.signer.address]

    def _chain_id(self, binding: ChainBinding, params: list[Any]) -> str:
        return encode_chain_id(binding.chain_id)

    def _net_version(self, binding: ChainBinding, params: list[Any]) -> str:
        return str(binding.chain_id)

    def _switch_chain(self, binding: ChainBinding, params: list[Any]) -> None:
        descriptor = _first_mapping(params, "wallet_switchEthereumChain")
        if descriptor.get("chainId") is None:
            raise InvalidRequestError(
                "chainId is required", method="wallet_switchEthereumChain"
            )

        self._chain_state.switch_chain(decode_chain_id(descriptor["chainId"]))
        return None

    def _add_chain(self, binding: ChainBinding, params: list[Any]) -> None:
        descriptor = _first_mapping(params, "wallet_addEthereumChain")

        rpc_urls = descriptor.get("rpcUrls") or []
        if isinstance(rpc_urls, str):
            rpc_urls = [rpc_urls]
        if not isinstance(rpc_urls, list | tuple):
            raise InvalidRequestError(
                "rpcUrls must be an array of URLs", method="wallet_addEthereumChain"
            )

        rpc_url = rpc_urls[0] if rpc_urls else None
        if rpc_urls and (not isinstance(rpc_url, str) or not rpc_url.strip()):
            raise InvalidRequestError(
                "rpcUrls must contain non-empty strings",
                method="wallet_addEthereumChain",
                details={"rpcUrl": repr(rpc_url)},
            )

        raw_chain_id = descriptor.get("chainId")
        chain_id = decode_chain_id(raw_chain_id) if raw_chain_id else None

        self._chain_state.add_chain(rpc_url=rpc_url, chain_id=chain_id)
        return None

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------
    def _personal_sign(self, binding: ChainBinding, params: list[Any]) -> str:
        message = _param(params, 0, "personal_sign", "message")
        self._check_identity(binding, _optional(params, 1), "personal_sign")
        return binding.signer.sign_message(message_to_bytes(message))

    def _eth_sign(self, binding: ChainBinding, params: list[Any]) -> str:
        message = _param(params, 1, "eth_sign", "message")
        self._check_identity(binding, _optional(params, 0), "eth_sign")
        return binding.signer.sign_message(message_to_bytes(message))

    def _sign_typed_data(self, binding: ChainBinding, params: list[Any]) -> str:
        typed_data = _param(params, 1, "eth_signTypedData", "typedData")
        self._check_identity(binding, _optional(params, 0), "typed data")
        domain, types, message = parse_typed_data(typed_data)
        return binding.signer.sign_typed_data(domain, types, message)

    def _send_transaction(self, binding: ChainBinding, params: list[Any]) -> str:
        request = _first_mapping(params, "eth_sendTransaction")
        self._check_identity(binding, request.get("from"), "eth_sendTransaction")

        intent = build_transaction_intent(request, binding.chain_id)
        tx_hash = binding.signer.send_transaction(intent)

        self._last_transaction.hash = tx_hash
        logger.info("Transaction sent: %s", tx_hash)
        return tx_hash

    @staticmethod
    def _check_identity(binding: ChainBinding, candidate: Any, context: str) -> None:
        if not candidate:
            return

        expected = binding.signer.address
        if not isinstance(candidate, str) or candidate.lower() != expected.lower():
            raise IdentityMismatchError(
                f"Unexpected signer for {context}: {candidate}",
                address=str(candidate),
                expected=expected,
            )


def build_transaction_intent(request: Mapping[str, Any], chain_id: int) -> TransactionIntent:
    """Normalise an ``eth_sendTransaction`` object, pinning it to ``chain_id``.

    Any ``chainId`` in ``request`` is ignored.
    """
    to = request.get("to")
    if to:
        if not isinstance(to, str) or not Web3.is_address(to):
            raise InvalidRequestError(
                "Invalid transaction recipient",
                method="eth_sendTransaction",
                details={"to": repr(to)},
            )
        to = Web3.to_checksum_address(to)
    else:
        to = None

    data = request.get("data") or request.get("input") or None
    gas = request.get("gas")
    if gas is None:
        gas = request.get("gasLimit")

    return TransactionIntent(
        chain_id=chain_id,
        to=to,
        value=coerce_quantity(request.get("value"), "value"),
        data=data,
        nonce=coerce_quantity(request.get("nonce"), "nonce"),
        gas=coerce_quantity(gas, "gas"),
        gas_price=coerce_quantity(request.get("gasPrice"), "gasPrice"),
        max_fee_per_gas=coerce_quantity(request.get("maxFeePerGas"), "maxFeePerGas"),
        max_priority_fee_per_gas=coerce_quantity(
            request.get("maxPriorityFeePerGas"), "maxPriorityFeePerGas"
        ),
    )


def _param(params: list[Any], index: int, method: str, name: str) -> Any:
    value = _optional(params, index)
    if value is None:
        raise InvalidRequestError(f"{name} is required", method=method)
    return value


def _optional(params: list[Any], index: int) -> Any:
    return params[index] if len(params) > index else None


def _first_mapping(params: list[Any], method: str) -> Mapping[str, Any]:
    value = _optional(params, 0)
    if not isinstance(value, Mapping):
        raise InvalidRequestError(f"{method} expects an object parameter", method=method)
    return value
