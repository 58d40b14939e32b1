"""Type definitions and data models for the wallet bridge."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidRequestError

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .signer import SignerContext


Address = str  # Ethereum address, checksummed when produced locally
Wei = int


@dataclass(frozen=True)
class RpcRequest:
    """A single EIP-1193 ``{method, params}`` call received from the page."""

    method: str
    params: list[Any] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> RpcRequest:
        """Validate a raw payload crossing the page boundary."""

        if not isinstance(payload, Mapping):
            raise InvalidRequestError(
                "Request payload must be an object", details={"payload": repr(payload)}
            )

        method = payload.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidRequestError("Request method is required", method=None)

        return cls(method=method, params=normalise_params(payload.get("params")))


def normalise_params(params: Any) -> list[Any]:
    """Return ``params`` as a list; ``None`` becomes empty, a lone object is wrapped."""

    if params is None:
        return []
    if isinstance(params, list | tuple):
        return list(params)
    if isinstance(params, Mapping):
        return [params]

    raise InvalidRequestError("Request params must be an array", details={"params": repr(params)})


@dataclass(frozen=True)
class TransactionIntent:
    """Normalised ``eth_sendTransaction`` request ready for signing."""

    chain_id: int
    to: Address | None = None
    value: Wei | None = None
    data: str | None = None
    nonce: int | None = None
    gas: int | None = None
    gas_price: Wei | None = None
    max_fee_per_gas: Wei | None = None
    max_priority_fee_per_gas: Wei | None = None

    def as_tx_params(self, sender: Address) -> dict[str, Any]:
        """Return web3 ``TxParams`` with unset fields omitted so middleware fills them."""

        params: dict[str, Any] = {"from": sender, "chainId": self.chain_id}
        optional = {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "nonce": self.nonce,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
        }
        params.update({key: value for key, value in optional.items() if value is not None})
        return params


@dataclass(frozen=True)
class ChainBinding:
    """Immutable snapshot of the active chain id, endpoint and the signer bound to it."""

    chain_id: int
    rpc_url: str
    signer: SignerContext


@dataclass
class LastTransactionRecord:
    """Most recent successful submission; overwritten, never appended."""

    hash: str | None = None


@dataclass
class ClaimOutcome:
    """Result of a claim flow run."""

    url: str
    tx_hash: str | None = None
    connect_clicked: bool = False

    @property
    def transaction_sent(self) -> bool:
        return self.tx_hash is not None
