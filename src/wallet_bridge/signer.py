"""Signing primitives bound to the currently selected endpoint."""

from __future__ import annotations

import logging
from typing import Any, cast

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from .exceptions import ConfigurationError, SigningError
from .transport import RpcTransport
from .types import Address, TransactionIntent

logger = logging.getLogger(__name__)


class SignerContext:
    """One private key bound to one transport.

    The address is derived once from the key and survives rebinding; only the
    broadcast path is rebuilt when the endpoint changes.
    """

    def __init__(self, account: LocalAccount, transport: RpcTransport) -> None:
        self._account = account
        self._transport = transport
        self._web3: Web3 = transport.web3()
        self._apply_account_middleware(self._web3, account)

    @classmethod
    def from_key(cls, private_key: str, transport: RpcTransport) -> SignerContext:
        try:
            account = cast(LocalAccount, Account.from_key(private_key))
        except Exception as exc:
            raise ConfigurationError(
                "Failed to derive signer account from provided private key",
                field="private_key",
                details={"error": str(exc)},
            ) from exc
        return cls(account, transport)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def address(self) -> Address:
        return self._account.address

    @property
    def transport(self) -> RpcTransport:
        return self._transport

    @property
    def web3(self) -> Web3:
        return self._web3

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------
    def sign_message(self, data: bytes) -> str:
        """Sign raw bytes with the EIP-191 personal-message prefix."""

        try:
            signed = self._account.sign_message(encode_defunct(primitive=data))
        except Exception as exc:
            raise SigningError("Failed to sign message", details={"error": str(exc)}) from exc
        return signed.signature.to_0x_hex()

    def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> str:
        """Sign EIP-712 structured data; ``types`` must not include ``EIP712Domain``."""

        try:
            signed = self._account.sign_typed_data(
                domain_data=domain,
                message_types=types,
                message_data=message,
            )
        except Exception as exc:
            raise SigningError("Failed to sign typed data", details={"error": str(exc)}) from exc
        return signed.signature.to_0x_hex()

    def send_transaction(self, intent: TransactionIntent) -> str:
        """Sign and broadcast ``intent`` through the bound endpoint, returning its hash."""

        tx_params = intent.as_tx_params(self.address)
        logger.info(
            "Submitting transaction to=%s chain_id=%s via %s",
            intent.to,
            intent.chain_id,
            self._transport.rpc_url,
        )
        tx_hash = self._web3.eth.send_transaction(tx_params)  # type: ignore[arg-type]
        return tx_hash.to_0x_hex()

    # ------------------------------------------------------------------
    # Rebinding
    # ------------------------------------------------------------------
    def rebind(self, transport: RpcTransport) -> SignerContext:
        """Return a signer for the same account broadcasting through ``transport``."""
        return SignerContext(self._account, transport)

    def _apply_account_middleware(self, web3: Web3, account: LocalAccount) -> None:
        web3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))  # type: ignore[arg-type]
        web3.eth.default_account = account.address
