"""Navigation and readiness waits on a live page.

Two timeout policies:

* navigation and base readiness are required; a timeout raises RenderError
  and ends the request
* the deferred review feed is an enhancement; a timeout is logged and the
  snapshot is taken without it
"""

import logging
import time
from typing import Callable

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from marketscrape.config import (
    BASE_READY_TIMEOUT_MS,
    NAVIGATION_TIMEOUT_MS,
    REVIEW_SECTION_TIMEOUT_MS,
    SETTLE_DELAY_MS,
    SETTLE_INTERVAL_MS,
    SETTLE_STABLE_CHECKS,
    SETTLE_TIMEOUT_MS,
)
from marketscrape.errors import RenderError
from marketscrape.logging_config import get_logger, log_scrape_event

__all__ = ["PageRenderer"]

logger = get_logger("renderer")


class PageRenderer:
    """Drives one page from navigation to the final HTML snapshot."""

    def __init__(self, page: Page, clock: Callable[[], float] = time.monotonic):
        self.page = page
        self._clock = clock

    def navigate(self, url: str, timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> None:
        """Open ``url`` and wait for DOMContentLoaded.

        Raises:
            RenderError: On timeout or browser failure.
        """
        try:
            self.page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            logger.error(f"Navigation timed out after {timeout_ms}ms: {url}")
            raise RenderError(f"Timed out loading page after {timeout_ms / 1000:.0f}s: {url}") from e
        except PlaywrightError as e:
            logger.error(f"Navigation failed for {url}: {e}")
            raise RenderError(f"Failed to render page {url}: {e}") from e

    def wait_for_base_ready(self, timeout_ms: int = BASE_READY_TIMEOUT_MS) -> None:
        """Wait until the document has a body.

        Raises:
            RenderError: If no body shows up in time.
        """
        try:
            self.page.wait_for_selector("body", state="attached", timeout=timeout_ms)
        except PlaywrightError as e:
            logger.error(f"Page body never appeared: {e}")
            raise RenderError(f"Page did not finish loading: {e}") from e

    def _remaining_ms(self, deadline: float) -> int:
        return int((deadline - self._clock()) * 1000)

    def _log_deferred_timeout(self, selector: str, timeout_ms: int) -> None:
        log_scrape_event(
            "deferred_section_timeout",
            {
                "message": f"Deferred section {selector!r} did not appear within {timeout_ms}ms, continuing",
                "selector": selector,
                "timeout_ms": timeout_ms,
            },
            level=logging.WARNING,
            logger_name="renderer",
        )

    def wait_for_deferred_section(
        self,
        selector: str,
        scroll_anchor: str,
        timeout_ms: int = REVIEW_SECTION_TIMEOUT_MS,
    ) -> bool:
        """Scroll ``scroll_anchor`` into view and wait for ``selector`` to attach.

        Scrolling and waiting share one ``timeout_ms`` budget. Best-effort:
        returns False (after logging a warning) on timeout or any browser
        error instead of raising.
        """
        deadline = self._clock() + timeout_ms / 1000
        try:
            anchor = self.page.locator(scroll_anchor)
            if anchor.count() > 0:
                anchor.first.scroll_into_view_if_needed(timeout=timeout_ms)
            else:
                # Lazy sections only mount once the user scrolls near them
                self.page.mouse.wheel(0, 4000)

            remaining_ms = self._remaining_ms(deadline)
            if remaining_ms <= 0:
                self._log_deferred_timeout(selector, timeout_ms)
                return False
            self.page.wait_for_selector(selector, state="attached", timeout=remaining_ms)
            return True
        except PlaywrightTimeoutError:
            self._log_deferred_timeout(selector, timeout_ms)
            return False
        except PlaywrightError as e:
            logger.warning(f"Waiting for {selector!r} failed, continuing without it: {e}")
            return False

    def settle(
        self,
        item_selector: str,
        min_wait_ms: int = SETTLE_DELAY_MS,
        interval_ms: int = SETTLE_INTERVAL_MS,
        stable_checks: int = SETTLE_STABLE_CHECKS,
        timeout_ms: int = SETTLE_TIMEOUT_MS,
    ) -> bool:
        """Give late DOM mutations time to finish.

        Waits ``min_wait_ms``, then polls the number of ``item_selector``
        matches until it is unchanged for ``stable_checks`` consecutive checks
        or ``timeout_ms`` elapses. Returns whether the count stabilized.
        This narrows the race with client-side rendering but cannot close it.
        """
        try:
            if min_wait_ms > 0:
                self.page.wait_for_timeout(min_wait_ms)

            previous = None
            stable = 0
            elapsed = 0
            while stable < stable_checks and elapsed < timeout_ms:
                current = self.page.locator(item_selector).count()
                if current == previous:
                    stable += 1
                else:
                    stable = 0
                    previous = current
                self.page.wait_for_timeout(interval_ms)
                elapsed += interval_ms
        except PlaywrightError as e:
            logger.warning(f"Settling on {item_selector!r} failed: {e}")
            return False

        if stable < stable_checks:
            logger.debug(f"{item_selector!r} still changing after {timeout_ms}ms")
        return stable >= stable_checks

    def content(self) -> str:
        """Serialized HTML of the current DOM.

        Raises:
            RenderError: If the page can no longer be read.
        """
        try:
            return self.page.content()
        except PlaywrightError as e:
            logger.error(f"Could not read page content: {e}")
            raise RenderError(f"Failed to capture page content: {e}") from e
