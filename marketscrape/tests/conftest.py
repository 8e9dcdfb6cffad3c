"""Shared fixtures for the scraper test suite.

Nothing here touches the network or starts a real browser: Playwright is
replaced by the small fakes below, which record how they were used.
"""

from pathlib import Path
from typing import List, Optional

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    def count(self) -> int:
        return self.page.selector_counts.get(self.selector, 0)

    @property
    def first(self) -> "FakeLocator":
        return self

    def scroll_into_view_if_needed(self, timeout: Optional[int] = None) -> None:
        self.page.scrolled_to.append(self.selector)


class FakeMouse:
    def __init__(self):
        self.wheels: List[tuple] = []

    def wheel(self, dx: int, dy: int) -> None:
        self.wheels.append((dx, dy))


class FakePage:
    """Stands in for playwright.sync_api.Page."""

    def __init__(self, stack: "FakeBrowserStack"):
        self.stack = stack
        self.html = stack.html
        self.selector_counts = dict(stack.selector_counts)
        self.missing_selectors = set(stack.missing_selectors)
        self.routes: List[tuple] = []
        self.visited: List[str] = []
        self.scrolled_to: List[str] = []
        self.waits: List[int] = []
        self.mouse = FakeMouse()
        self.closed = False

    def route(self, pattern: str, handler) -> None:
        self.routes.append((pattern, handler))

    def goto(self, url: str, wait_until: str = "load", timeout: Optional[int] = None) -> None:
        self.visited.append(url)
        if self.stack.navigation_error is not None:
            raise self.stack.navigation_error

    def wait_for_selector(self, selector: str, state: str = "visible", timeout: Optional[int] = None):
        if selector in self.missing_selectors:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return object()

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)

    def content(self) -> str:
        if self.stack.content_error is not None:
            raise self.stack.content_error
        return self.html

    def close(self) -> None:
        if self.closed:
            raise PlaywrightError("Target page, context or browser has been closed")
        self.closed = True
        self.stack.page_closes += 1


class FakeContext:
    def __init__(self, stack: "FakeBrowserStack", **options):
        self.stack = stack
        self.options = options

    def new_page(self) -> FakePage:
        page = FakePage(self.stack)
        self.stack.pages.append(page)
        return page

    def close(self) -> None:
        self.stack.context_closes += 1


class FakeBrowser:
    def __init__(self, stack: "FakeBrowserStack"):
        self.stack = stack

    def new_context(self, **options) -> FakeContext:
        context = FakeContext(self.stack, **options)
        self.stack.contexts.append(context)
        return context

    def close(self) -> None:
        self.stack.browser_closes += 1


class FakeChromium:
    def __init__(self, stack: "FakeBrowserStack"):
        self.stack = stack

    def launch(self, **options) -> FakeBrowser:
        self.stack.launch_options.append(options)
        if self.stack.launch_error is not None:
            raise self.stack.launch_error
        self.stack.launches += 1
        return FakeBrowser(self.stack)


class FakePlaywright:
    def __init__(self, stack: "FakeBrowserStack"):
        self.chromium = FakeChromium(stack)
        self.stack = stack

    def stop(self) -> None:
        self.stack.stops += 1


class FakeBrowserStack:
    """Configurable fake for ``sync_playwright`` with usage counters.

    Pass ``stack.factory`` wherever a ``playwright_factory`` is expected.
    """

    def __init__(
        self,
        html: str = "<html><body></body></html>",
        selector_counts: Optional[dict] = None,
        missing_selectors: Optional[set] = None,
        navigation_error: Optional[Exception] = None,
        launch_error: Optional[Exception] = None,
        content_error: Optional[Exception] = None,
    ):
        self.html = html
        self.selector_counts = selector_counts or {}
        self.missing_selectors = missing_selectors or set()
        self.navigation_error = navigation_error
        self.launch_error = launch_error
        self.content_error = content_error

        self.starts = 0
        self.stops = 0
        self.launches = 0
        self.browser_closes = 0
        self.context_closes = 0
        self.page_closes = 0
        self.launch_options: List[dict] = []
        self.contexts: List[FakeContext] = []
        self.pages: List[FakePage] = []

    def factory(self):
        stack = self

        class _Manager:
            def start(self) -> FakePlaywright:
                stack.starts += 1
                return FakePlaywright(stack)

        return _Manager()


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def product_html():
    return load_fixture("product_page.html")


@pytest.fixture
def legacy_product_html():
    return load_fixture("product_page_legacy.html")


@pytest.fixture
def shipping_fee_html():
    return load_fixture("shipping_fee.html")


@pytest.fixture
def fake_stack_factory():
    """Build FakeBrowserStack instances and keep them for assertions."""
    stacks: List[FakeBrowserStack] = []

    def make(**kwargs) -> FakeBrowserStack:
        stack = FakeBrowserStack(**kwargs)
        stacks.append(stack)
        return stack

    make.stacks = stacks
    return make
