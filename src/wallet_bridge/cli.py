"""Process entry point: inject the wallet and run the claim flow."""

from __future__ import annotations

import logging
from functools import partial

import requests
from playwright.sync_api import sync_playwright

from .chain_state import ChainState
from .config import BridgeConfig, load_config
from .dispatcher import RpcDispatcher
from .exceptions import WalletBridgeError
from .flow import FlowDriver
from .keystore import ensure_private_key
from .provider import install_provider
from .signer import SignerContext
from .transport import RpcTransport
from .types import ChainBinding, ClaimOutcome

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_dispatcher(
    config: BridgeConfig, private_key: str, session: requests.Session | None = None
) -> RpcDispatcher:
    """Wire transport, signer and chain state for the configured endpoint."""

    transport_factory = partial(
        RpcTransport, request_timeout=config.request_timeout, session=session
    )
    transport = transport_factory(config.rpc_url)
    signer = SignerContext.from_key(private_key, transport)

    logger.info("Using wallet address: %s", signer.address)
    logger.info("RPC endpoint: %s", config.rpc_url)

    binding = ChainBinding(
        chain_id=transport.chain_id(),
        rpc_url=config.rpc_url,
        signer=signer,
    )
    return RpcDispatcher(ChainState(binding, transport_factory))


def run(config: BridgeConfig) -> ClaimOutcome:
    private_key = ensure_private_key(config.private_key_file)

    with requests.Session() as session:
        dispatcher = build_dispatcher(config, private_key, session)
        driver = FlowDriver(config.flow, dispatcher.last_transaction)

        with sync_playwright() as pw:
            browser = pw.chromium.launch(headless=config.headless)
            try:
                context = browser.new_context()
                try:
                    page = context.new_page()
                    install_provider(page, dispatcher)
                    return driver.run(page)
                finally:
                    context.close()
            finally:
                browser.close()


def main() -> int:
    try:
        config = load_config()
    except WalletBridgeError as exc:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("%s", exc.message)
        return 1

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    try:
        run(config)
    except WalletBridgeError as exc:
        logger.error("%s", exc.message)
        return 1
    except Exception:
        logger.exception("Unexpected failure")
        return 1
    return 0
