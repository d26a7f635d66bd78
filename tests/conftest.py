"""
Pytest configuration and shared fixtures for Test Automation Service tests.

Provides an in-memory browser session, a session provider that records
what it builds, and common configuration, store and collaborator mocks.
"""

import asyncio
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from automation_service.browser.session import BrowserElement, BrowserSession
from automation_service.core.config import Config
from automation_service.core.exceptions import ElementNotFound
from automation_service.execution.orchestrator import SuiteOrchestrator
from automation_service.steps.interpreter import StepInterpreter
from automation_service.steps.locators import Locator
from automation_service.storage.store import InMemoryRunRecordStore


class FakeElement(BrowserElement):
    """Element that records interactions on its session."""

    def __init__(self, session: "FakeBrowserSession", key: str, text: str = ""):
        self.session = session
        self.key = key
        self._text = text
        self.value = "prefilled"

    async def click(self) -> None:
        self.session.actions.append(("click", self.key))

    async def clear(self) -> None:
        self.value = ""
        self.session.actions.append(("clear", self.key))

    async def send_keys(self, text: str) -> None:
        self.value += text
        self.session.actions.append(("send_keys", self.key, text))

    async def text(self) -> str:
        return self._text


class FakeBrowserSession(BrowserSession):
    """
    In-memory browser session.

    Elements are keyed by their locator text (``css=#user``). An optional
    gate makes element waits block until the test releases it.
    """

    def __init__(
        self,
        elements: Iterable[str] = (),
        body_text: str = "",
        delay: float = 0.0,
        gate: Optional[asyncio.Event] = None,
        close_error: Optional[Exception] = None,
    ):
        self.elements: Dict[str, FakeElement] = {
            key: FakeElement(self, key) for key in elements
        }
        self.body_text = body_text
        self.delay = delay
        self.gate = gate
        self.close_error = close_error
        self.visited: List[str] = []
        self.actions: List[Tuple] = []
        self.wait_timeouts: List[int] = []
        self.closed = False
        self.on_close: Optional[Callable[[], None]] = None

    async def navigate(self, url: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.visited.append(url)

    async def wait_for_element(self, locator: Locator, timeout_ms: int) -> BrowserElement:
        self.wait_timeouts.append(timeout_ms)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        element = self.elements.get(str(locator))
        if element is None:
            raise ElementNotFound(str(locator), timeout_ms)
        return element

    async def find_element(self, locator: Locator) -> BrowserElement:
        if str(locator) == "css=body":
            return FakeElement(self, "body", text=self.body_text)
        element = self.elements.get(str(locator))
        if element is None:
            raise ElementNotFound(str(locator))
        return element

    async def close(self) -> None:
        self.closed = True
        if self.on_close is not None:
            self.on_close()
        if self.close_error is not None:
            raise self.close_error


class FakeSessionProvider:
    """Session provider that builds FakeBrowserSessions and tracks them."""

    def __init__(
        self,
        factory: Optional[Callable[[], FakeBrowserSession]] = None,
        error: Optional[Exception] = None,
    ):
        self.factory = factory or FakeBrowserSession
        self.error = error
        self.builds: List[Tuple[str, str]] = []
        self.sessions: List[FakeBrowserSession] = []
        self.open_sessions = 0
        self.max_open_sessions = 0

    async def build(self, endpoint: str, browser_kind: str) -> FakeBrowserSession:
        self.builds.append((endpoint, browser_kind))
        if self.error is not None:
            raise self.error
        session = self.factory()
        self.sessions.append(session)
        self.open_sessions += 1
        self.max_open_sessions = max(self.max_open_sessions, self.open_sessions)
        session.on_close = self._session_closed
        return session

    def _session_closed(self) -> None:
        self.open_sessions -= 1


@pytest.fixture
def temp_config(tmp_path):
    """Create a configuration isolated from the host environment."""
    config = Config()
    config.logs_dir = tmp_path / "logs"
    config.default_browser = "chromium"
    config.step_timeout_ms = 50
    config.max_concurrent_sessions = 4
    config.base_url = "http://app.test"
    config.browser_endpoint = "ws://grid.test:3000/"
    config.notification_service_url = ""
    config.monitoring_service_url = ""
    config.report_base_url = "http://reports.test/reports"
    return config


@pytest.fixture
def store():
    """Create an empty in-memory run record store."""
    return InMemoryRunRecordStore()


@pytest.fixture
def session_provider():
    """Create a provider of empty fake browser sessions."""
    return FakeSessionProvider()


@pytest.fixture
def fake_session_factory():
    """Expose FakeBrowserSession for tests that build their own sessions."""
    return FakeBrowserSession


@pytest.fixture
def provider_factory():
    """Expose FakeSessionProvider for tests that need a custom provider."""
    return FakeSessionProvider


@pytest.fixture
def mock_gateway():
    """Create a mock notification gateway."""
    gateway = MagicMock()
    gateway.notify_event = AsyncMock(return_value=True)
    gateway.send_log = AsyncMock(return_value=True)
    return gateway


@pytest.fixture
def mock_environment():
    """Create a mock environment provisioner."""
    environment = MagicMock()

    async def setup(env_name):
        return {"seeded": True, "env": env_name}

    environment.setup = AsyncMock(side_effect=setup)
    environment.teardown = AsyncMock()
    return environment


@pytest.fixture
def orchestrator(temp_config, store, session_provider, mock_gateway, mock_environment):
    """Create an orchestrator wired to fakes and mocks."""
    return SuiteOrchestrator(
        config=temp_config,
        store=store,
        session_provider=session_provider,
        gateway=mock_gateway,
        environment=mock_environment,
        interpreter=StepInterpreter(timeout_ms=temp_config.step_timeout_ms),
    )


@pytest.fixture
def login_suite_data():
    """Suite payload for a single login test case."""
    return {
        "name": "Login",
        "description": "Login flow",
        "environment": "staging",
        "test_cases": [
            {
                "name": "user can log in",
                "steps": [
                    "navigate:/login",
                    "type:css=#user|alice",
                    "click:css=#submit",
                    "assert:text=Welcome",
                ],
                "expected_result": "Welcome page is shown",
            }
        ],
    }
