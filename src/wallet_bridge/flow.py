"""Claim flow orchestration on top of a Playwright page."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .config import FlowConfig
from .exceptions import UITimeoutError
from .types import ClaimOutcome, LastTransactionRecord

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from playwright.sync_api import Locator, Page

logger = logging.getLogger(__name__)


class FlowDriver:
    """Navigate, connect and click the claim control, then report any submitted hash."""

    def __init__(self, config: FlowConfig, last_transaction: LastTransactionRecord) -> None:
        self._config = config
        self._last_transaction = last_transaction
        self._connect_label = re.compile(config.connect_pattern, re.IGNORECASE)
        self._claim_label = re.compile(config.claim_pattern, re.IGNORECASE)

    def run(self, page: Page) -> ClaimOutcome:
        config = self._config
        outcome = ClaimOutcome(url=config.target_url)

        self._navigate(page)
        outcome.connect_clicked = self._click_connect(page)
        self._click_claim(page)

        page.wait_for_timeout(config.settle_ms)

        outcome.tx_hash = self._last_transaction.hash
        if outcome.tx_hash:
            logger.info("Claim transaction sent: %s", outcome.tx_hash)
        else:
            logger.info(
                "No eth_sendTransaction call detected. The site may use an off-chain claim flow."
            )
        return outcome

    def _navigate(self, page: Page) -> None:
        url = self._config.target_url
        timeout = self._config.claim_timeout_ms
        logger.info("Navigating to %s", url)
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightTimeoutError as exc:
            raise UITimeoutError(
                f"Navigation to {url} timed out",
                control="navigation",
                timeout_ms=timeout,
                details={"error": str(exc)},
            ) from exc

    def _click_connect(self, page: Page) -> bool:
        """Best effort: a missing connect control is not an error."""

        button = self._button(page, self._connect_label)
        try:
            button.wait_for(state="visible", timeout=self._config.connect_timeout_ms)
            button.click(timeout=self._config.connect_timeout_ms)
        except PlaywrightTimeoutError:
            logger.info("No connect control found; continuing")
            return False

        logger.info("Clicked connect/start button")
        return True

    def _click_claim(self, page: Page) -> None:
        button = self._button(page, self._claim_label)
        timeout = self._config.claim_timeout_ms
        try:
            button.wait_for(state="visible", timeout=timeout)
            button.click(timeout=timeout)
        except PlaywrightTimeoutError as exc:
            raise UITimeoutError(
                "Claim control did not become clickable",
                control="claim",
                timeout_ms=timeout,
                details={"error": str(exc)},
            ) from exc

        logger.info("Clicked claim button")

    @staticmethod
    def _button(page: Page, label: re.Pattern[str]) -> Locator:
        return page.get_by_role("button", name=label).first
