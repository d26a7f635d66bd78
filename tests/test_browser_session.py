"""
Unit tests for the Playwright-backed browser session and provider.

Playwright objects are mocked; no browser is started.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from automation_service.browser.session import (
    PlaywrightElement,
    PlaywrightSession,
    PlaywrightSessionProvider,
    to_selector,
)
from automation_service.core.exceptions import ElementNotFound, SessionAcquisitionError
from automation_service.steps.locators import resolve


@pytest.fixture
def playwright_objects():
    """Create mocked playwright, browser, context and page objects."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.query_selector = AsyncMock()

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.stop = AsyncMock()
    for engine in ("chromium", "firefox", "webkit"):
        browser_type = getattr(playwright, engine)
        browser_type.connect = AsyncMock(return_value=browser)
        browser_type.launch = AsyncMock(return_value=browser)

    return playwright, browser, context, page


@pytest.fixture
def session(playwright_objects):
    playwright, browser, context, page = playwright_objects
    return PlaywrightSession(playwright, browser, context, page)


def patched_async_playwright(playwright):
    manager = MagicMock()
    manager.start = AsyncMock(return_value=playwright)
    return patch(
        "automation_service.browser.session.async_playwright",
        return_value=manager,
    )


class TestToSelector:
    """Test cases for locator to selector translation."""

    @pytest.mark.parametrize(
        "text,selector",
        [
            ("#submit", "css=#submit"),
            ("css=form > button", "css=form > button"),
            ("id=username", "id=username"),
            ("xpath=//main", "xpath=//main"),
            ("name=email", 'css=[name="email"]'),
            ('name=a"b', 'css=[name="a\\"b"]'),
        ],
    )
    def test_selectors(self, text, selector):
        assert to_selector(resolve(text)) == selector


@pytest.mark.asyncio
class TestPlaywrightSession:
    """Test cases for PlaywrightSession."""

    async def test_navigate(self, session, playwright_objects):
        page = playwright_objects[3]

        await session.navigate("http://app.test/login")

        page.goto.assert_awaited_once_with("http://app.test/login")

    async def test_wait_for_element_returns_element(self, session, playwright_objects):
        page = playwright_objects[3]
        handle = MagicMock()
        page.wait_for_selector.return_value = handle

        element = await session.wait_for_element(resolve("id=user"), 750)

        assert isinstance(element, PlaywrightElement)
        page.wait_for_selector.assert_awaited_once_with(
            "id=user", state="attached", timeout=750
        )

    async def test_wait_timeout_raises_element_not_found(self, session, playwright_objects):
        page = playwright_objects[3]
        page.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 750ms exceeded")

        with pytest.raises(ElementNotFound) as exc_info:
            await session.wait_for_element(resolve("#user"), 750)

        assert exc_info.value.locator == "css=#user"
        assert exc_info.value.timeout_ms == 750

    async def test_find_element_missing(self, session, playwright_objects):
        playwright_objects[3].query_selector.return_value = None

        with pytest.raises(ElementNotFound):
            await session.find_element(resolve("css=body"))

    async def test_element_operations(self, session, playwright_objects):
        handle = MagicMock()
        handle.click = AsyncMock()
        handle.fill = AsyncMock()
        handle.press_sequentially = AsyncMock()
        handle.inner_text = AsyncMock(return_value="Welcome")
        playwright_objects[3].query_selector.return_value = handle

        element = await session.find_element(resolve("css=body"))
        await element.click()
        await element.clear()
        await element.send_keys("alice")

        assert await element.text() == "Welcome"
        handle.click.assert_awaited_once()
        handle.fill.assert_awaited_once_with("")
        handle.press_sequentially.assert_awaited_once_with("alice")

    async def test_close_releases_everything_once(self, session, playwright_objects):
        playwright, browser, context, _page = playwright_objects

        await session.close()
        await session.close()

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    async def test_close_stops_playwright_when_browser_close_fails(
        self, session, playwright_objects
    ):
        playwright, browser, _context, _page = playwright_objects
        browser.close.side_effect = RuntimeError("disconnected")

        with pytest.raises(RuntimeError):
            await session.close()

        playwright.stop.assert_awaited_once()


@pytest.mark.asyncio
class TestPlaywrightSessionProvider:
    """Test cases for PlaywrightSessionProvider.build()."""

    async def test_connects_to_remote_endpoint(self, playwright_objects):
        playwright, browser, context, page = playwright_objects

        with patched_async_playwright(playwright):
            session = await PlaywrightSessionProvider().build("ws://grid:3000/", "chromium")

        playwright.chromium.connect.assert_awaited_once_with("ws://grid:3000/")
        playwright.chromium.launch.assert_not_awaited()
        browser.new_context.assert_awaited_once_with(ignore_https_errors=True)
        assert session.page is page

    async def test_launches_locally_without_endpoint(self, playwright_objects):
        playwright = playwright_objects[0]

        with patched_async_playwright(playwright):
            await PlaywrightSessionProvider(headless=False).build("", "firefox")

        playwright.firefox.launch.assert_awaited_once_with(headless=False)

    @pytest.mark.parametrize("alias,engine", [("chrome", "chromium"), ("edge", "chromium"), ("Safari", "webkit")])
    async def test_browser_aliases(self, playwright_objects, alias, engine):
        playwright = playwright_objects[0]

        with patched_async_playwright(playwright):
            await PlaywrightSessionProvider().build("ws://grid:3000/", alias)

        getattr(playwright, engine).connect.assert_awaited_once()

    async def test_unsupported_browser(self, playwright_objects):
        playwright = playwright_objects[0]

        with patched_async_playwright(playwright) as mock_async_playwright:
            with pytest.raises(SessionAcquisitionError) as exc_info:
                await PlaywrightSessionProvider().build("ws://grid:3000/", "opera")

        assert "Unsupported browser" in exc_info.value.message
        mock_async_playwright.assert_not_called()

    async def test_connection_failure_stops_playwright(self, playwright_objects):
        playwright = playwright_objects[0]
        playwright.chromium.connect.side_effect = RuntimeError("connection refused")

        with patched_async_playwright(playwright):
            with pytest.raises(SessionAcquisitionError) as exc_info:
                await PlaywrightSessionProvider().build("ws://grid:3000/", "chromium")

        assert "connection refused" in exc_info.value.message
        assert exc_info.value.endpoint == "ws://grid:3000/"
        playwright.stop.assert_awaited_once()
