"""
Browser session abstraction and Playwright provider.

The step interpreter only talks to ``BrowserSession`` and ``BrowserElement``.
``PlaywrightSessionProvider`` builds sessions backed by a remote Playwright
browser server, or a locally launched browser when no endpoint is set.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)

from ..core.exceptions import ElementNotFound, SessionAcquisitionError
from ..steps.locators import Locator, LocatorStrategy


BROWSER_ALIASES = {
    "chromium": "chromium",
    "chrome": "chromium",
    "edge": "chromium",
    "firefox": "firefox",
    "webkit": "webkit",
    "safari": "webkit",
}


def to_selector(locator: Locator) -> str:
    """Translate a locator into a Playwright selector string."""
    if locator.strategy == LocatorStrategy.XPATH:
        return f"xpath={locator.value}"
    if locator.strategy == LocatorStrategy.ID:
        return f"id={locator.value}"
    if locator.strategy == LocatorStrategy.NAME:
        escaped = locator.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'css=[name="{escaped}"]'
    return f"css={locator.value}"


class BrowserElement(ABC):
    """A located element inside a browser session."""

    @abstractmethod
    async def click(self) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    @abstractmethod
    async def send_keys(self, text: str) -> None:
        ...

    @abstractmethod
    async def text(self) -> str:
        ...


class BrowserSession(ABC):
    """An exclusive browser session owned by a single run."""

    @abstractmethod
    async def navigate(self, url: str) -> None:
        ...

    @abstractmethod
    async def wait_for_element(
        self, locator: Locator, timeout_ms: int
    ) -> BrowserElement:
        """Wait until the element exists; raise ElementNotFound on timeout."""

    @abstractmethod
    async def find_element(self, locator: Locator) -> BrowserElement:
        """Look the element up immediately; raise ElementNotFound if absent."""

    @abstractmethod
    async def close(self) -> None:
        ...


class PlaywrightElement(BrowserElement):
    """BrowserElement backed by a Playwright element handle."""

    def __init__(self, handle: ElementHandle):
        self._handle = handle

    async def click(self) -> None:
        await self._handle.click()

    async def clear(self) -> None:
        await self._handle.fill("")

    async def send_keys(self, text: str) -> None:
        await self._handle.press_sequentially(text)

    async def text(self) -> str:
        return await self._handle.inner_text()


class PlaywrightSession(BrowserSession):
    """BrowserSession backed by a single Playwright page."""

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        logger: Optional[logging.Logger] = None,
    ):
        self._playwright = playwright
        self._browser = browser
        self._context = context
        self._page = page
        self.logger = logger or logging.getLogger(__name__)
        self._closed = False

    @property
    def page(self) -> Page:
        return self._page

    async def navigate(self, url: str) -> None:
        self.logger.debug(f"Navigating to: {url}")
        await self._page.goto(url)

    async def wait_for_element(
        self, locator: Locator, timeout_ms: int
    ) -> BrowserElement:
        selector = to_selector(locator)
        self.logger.debug(f"Waiting for selector: {selector}")
        try:
            handle = await self._page.wait_for_selector(
                selector, state="attached", timeout=timeout_ms
            )
        except PlaywrightTimeoutError:
            raise ElementNotFound(str(locator), timeout_ms)
        if handle is None:
            raise ElementNotFound(str(locator), timeout_ms)
        return PlaywrightElement(handle)

    async def find_element(self, locator: Locator) -> BrowserElement:
        handle = await self._page.query_selector(to_selector(locator))
        if handle is None:
            raise ElementNotFound(str(locator))
        return PlaywrightElement(handle)

    async def close(self) -> None:
        """Close page, context and browser, then stop Playwright."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._context.close()
            await self._browser.close()
        finally:
            await self._playwright.stop()


class PlaywrightSessionProvider:
    """
    Builds one exclusive Playwright session per call.

    With an endpoint the provider connects to a running Playwright browser
    server (``BrowserType.connect``); without one it launches a browser
    locally.
    """

    def __init__(
        self,
        headless: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.headless = headless
        self.logger = logger or logging.getLogger(__name__)

    async def build(self, endpoint: str, browser_kind: str) -> BrowserSession:
        """
        Build a new browser session.

        Args:
            endpoint: Remote browser server websocket endpoint, or "" to launch locally
            browser_kind: Browser name (chromium, firefox, webkit or an alias)

        Returns:
            A session owned exclusively by the caller

        Raises:
            SessionAcquisitionError: If the browser cannot be reached or launched
        """
        engine = BROWSER_ALIASES.get((browser_kind or "").lower())
        if engine is None:
            raise SessionAcquisitionError(
                f"Unsupported browser: {browser_kind}",
                endpoint=endpoint,
                browser=browser_kind,
            )

        self.logger.info(
            f"Building {engine} session",
            extra={"metadata": {"endpoint": endpoint or "local", "browser": engine}},
        )

        playwright = await async_playwright().start()
        try:
            browser_type = getattr(playwright, engine)
            if endpoint:
                browser = await browser_type.connect(endpoint)
            else:
                browser = await browser_type.launch(headless=self.headless)
            context = await browser.new_context(ignore_https_errors=True)
            page = await context.new_page()
        except Exception as e:
            await playwright.stop()
            raise SessionAcquisitionError(
                f"Failed to acquire browser session: {e}",
                endpoint=endpoint,
                browser=engine,
            ) from e

        return PlaywrightSession(playwright, browser, context, page, self.logger)
