"""Example: Open a dapp with the injected wallet and connect without claiming."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from playwright.sync_api import sync_playwright

from wallet_bridge import ensure_private_key, install_provider, load_config
from wallet_bridge.cli import build_dispatcher

load_dotenv()

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

DAPP_URL = os.getenv("DAPP_URL", "https://app.uniswap.org")


def main() -> None:
    """Inject the wallet, load the dapp and request accounts from inside the page."""

    config = load_config()
    private_key = ensure_private_key(config.private_key_file)
    dispatcher = build_dispatcher(config, private_key)

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=config.headless)
        context = browser.new_context()
        try:
            page = context.new_page()
            install_provider(page, dispatcher)
            page.goto(DAPP_URL, wait_until="domcontentloaded", timeout=config.claim_timeout_ms)

            accounts = page.evaluate("window.ethereum.request({ method: 'eth_requestAccounts' })")
            chain_id = page.evaluate("window.ethereum.request({ method: 'eth_chainId' })")
            print(f"Page sees accounts={accounts} chainId={chain_id}")
        finally:
            context.close()
            browser.close()


if __name__ == "__main__":
    main()
