"""Raw JSON-RPC transport to an Ethereum-compatible endpoint."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, cast

import requests
from web3 import HTTPProvider, Web3
from web3.types import RPCEndpoint

from .config import DEFAULT_REQUEST_TIMEOUT
from .exceptions import INTERNAL_ERROR_CODE, TransportError
from .utils import decode_chain_id

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_ID_HEX = "0x1"


class RpcTransport:
    """Send JSON-RPC calls verbatim to one endpoint and surface its errors unchanged."""

    def __init__(
        self,
        rpc_url: str,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._provider = HTTPProvider(
            rpc_url,
            request_kwargs={"timeout": request_timeout},
            session=session,
            exception_retry_configuration=None,
        )

    @property
    def provider(self) -> HTTPProvider:
        return self._provider

    def web3(self) -> Web3:
        """Return a fresh ``Web3`` bound to this endpoint."""
        return Web3(self._provider)

    def send(self, method: str, params: Sequence[Any]) -> Any:
        """Forward ``(method, params)`` and return the endpoint's ``result`` untouched."""

        logger.debug("Forwarding %s to %s", method, self.rpc_url)
        try:
            response = self._provider.make_request(cast(RPCEndpoint, method), list(params))
        except requests.RequestException as exc:
            raise TransportError(
                f"RPC request {method} failed",
                endpoint=self.rpc_url,
                details={"error": str(exc)},
            ) from exc

        error = response.get("error")
        if error:
            if isinstance(error, dict):
                raise TransportError(
                    str(error.get("message", "RPC error")),
                    endpoint=self.rpc_url,
                    code=error.get("code", INTERNAL_ERROR_CODE),
                    data=error.get("data"),
                )
            raise TransportError(str(error), endpoint=self.rpc_url)

        return response.get("result")

    def chain_id(self) -> int:
        """Query ``eth_chainId``; a null answer is read as mainnet."""
        return decode_chain_id(self.send("eth_chainId", []) or DEFAULT_CHAIN_ID_HEX)
