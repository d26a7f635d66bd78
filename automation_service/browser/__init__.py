"""Browser session abstraction and the Playwright-backed provider."""

from .session import (
    BrowserElement,
    BrowserSession,
    PlaywrightSession,
    PlaywrightSessionProvider,
    to_selector,
)

__all__ = [
    "BrowserElement",
    "BrowserSession",
    "PlaywrightSession",
    "PlaywrightSessionProvider",
    "to_selector",
]
