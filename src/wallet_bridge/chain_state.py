"""Process-wide active chain selection."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .transport import RpcTransport
from .types import ChainBinding

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str], RpcTransport]


class ChainState:
    """Lock-protected cell holding the active chain id, endpoint and bound signer.

    Every mutation swaps in a new immutable ``ChainBinding``, so readers holding
    a snapshot never observe an endpoint paired with another endpoint's signer.
    """

    def __init__(self, binding: ChainBinding, transport_factory: TransportFactory) -> None:
        self._binding = binding
        self._transport_factory = transport_factory
        self._lock = threading.Lock()

    def snapshot(self) -> ChainBinding:
        with self._lock:
            return self._binding

    @property
    def chain_id(self) -> int:
        return self.snapshot().chain_id

    def switch_chain(self, chain_id: int) -> ChainBinding:
        """Point at ``chain_id`` without touching the endpoint or signer."""

        with self._lock:
            self._binding = ChainBinding(
                chain_id=chain_id,
                rpc_url=self._binding.rpc_url,
                signer=self._binding.signer,
            )
            binding = self._binding
        logger.info("Switched active chain to %s", chain_id)
        return binding

    def add_chain(self, rpc_url: str | None = None, chain_id: int | None = None) -> ChainBinding:
        """Rebind endpoint and signer together and/or update the chain id."""

        signer = None
        if rpc_url:
            # The new transport is built outside the lock; construction does no I/O.
            signer = self.snapshot().signer.rebind(self._transport_factory(rpc_url))

        with self._lock:
            current = self._binding
            if signer is not None and rpc_url is not None:
                self._binding = ChainBinding(
                    chain_id=current.chain_id if chain_id is None else chain_id,
                    rpc_url=rpc_url,
                    signer=signer,
                )
            elif chain_id is not None:
                self._binding = ChainBinding(
                    chain_id=chain_id, rpc_url=current.rpc_url, signer=current.signer
                )
            binding = self._binding

        if rpc_url:
            logger.info("Rebound signer to RPC endpoint %s", rpc_url)
        if chain_id is not None:
            logger.info("Active chain set to %s", chain_id)
        return binding
