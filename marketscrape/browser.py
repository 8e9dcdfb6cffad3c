"""Headless browser lifecycle.

A :class:`BrowserSession` owns one Chromium process for the duration of one
request. Use it as a context manager so the process is closed on every exit
path::

    with BrowserSession() as session:
        session.page.goto(url)
        html = session.page.content()
"""

from typing import Any, Callable, Dict, List, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Route, sync_playwright

from marketscrape.config import (
    ACCEPT_LANGUAGE,
    BLOCKED_RESOURCE_TYPES,
    CHROMIUM_EXECUTABLE_PATH,
    LOCAL_LAUNCH_ARGS,
    SERVERLESS_LAUNCH_ARGS,
    USER_AGENT,
    VIEWPORT,
    is_serverless,
)
from marketscrape.errors import RenderError
from marketscrape.logging_config import get_logger

__all__ = ["BrowserSession", "launch_options", "block_heavy_resources"]

logger = get_logger("browser")


def launch_options(serverless: Optional[bool] = None) -> Dict[str, Any]:
    """Chromium launch options for the current execution environment.

    Serverless runtimes ship a trimmed Chromium build at a fixed path; local
    and container runs use Playwright's bundled browser with the sandbox off.
    """
    if serverless is None:
        serverless = is_serverless()
    if serverless:
        return {
            "headless": True,
            "executable_path": CHROMIUM_EXECUTABLE_PATH,
            "args": list(SERVERLESS_LAUNCH_ARGS),
        }
    return {"headless": True, "args": list(LOCAL_LAUNCH_ARGS)}


def block_heavy_resources(route: Route) -> None:
    """Abort images, stylesheets, fonts and media; let everything else through."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


class BrowserSession:
    """One Chromium process plus a configured page.

    ``release()`` is idempotent and closes page, context, browser and the
    Playwright driver in that order, logging (never raising) close failures.
    """

    def __init__(
        self,
        playwright_factory: Callable[[], Any] = sync_playwright,
        serverless: Optional[bool] = None,
    ):
        self._playwright_factory = playwright_factory
        self._serverless = serverless
        self._playwright = None
        self._browser = None
        self._context = None
        self.page = None
        self.acquired = False
        self.released = False

    def __enter__(self) -> "BrowserSession":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def acquire(self) -> "BrowserSession":
        """Launch the browser and open a page.

        Raises:
            RenderError: If the browser cannot be started. Anything that was
                already started is shut down first.
        """
        if self.acquired:
            return self

        options = launch_options(self._serverless)
        logger.debug(f"Launching Chromium ({'serverless' if options.get('executable_path') else 'local'})")
        self.acquired = True

        try:
            self._playwright = self._playwright_factory().start()
            self._browser = self._playwright.chromium.launch(**options)
            self._context = self._browser.new_context(
                user_agent=USER_AGENT,
                viewport=dict(VIEWPORT),
                extra_http_headers={"Accept-Language": ACCEPT_LANGUAGE},
            )
            self.page = self._context.new_page()
            self.page.route("**/*", block_heavy_resources)
        except (PlaywrightError, OSError) as e:
            logger.error(f"Browser launch failed: {e}")
            self.release()
            raise RenderError(f"Failed to launch browser: {e}") from e

        return self

    def _close(self, name: str, closer: Callable[[], None]) -> None:
        try:
            closer()
        except PlaywrightError as e:
            # Already gone (crashed or closed by a failing step)
            logger.debug(f"Ignoring error while closing {name}: {e}")

    def release(self) -> None:
        """Close everything this session opened. Safe to call more than once."""
        if self.released or not self.acquired:
            return
        self.released = True

        steps: List[tuple] = [
            ("page", self.page, "close"),
            ("context", self._context, "close"),
            ("browser", self._browser, "close"),
            ("playwright", self._playwright, "stop"),
        ]
        for name, handle, method in steps:
            if handle is not None:
                self._close(name, getattr(handle, method))

        self.page = None
        self._context = None
        self._browser = None
        self._playwright = None
        logger.debug("Browser session released")
