"""
Step interpreter.

Executes parsed step commands against a browser session and returns the
log line for each one. Failures are wrapped in a single StepFailure that
carries the raw step text; retry and skip decisions belong to the caller.
"""

import logging
from typing import Optional, TYPE_CHECKING

from ..core.exceptions import AssertionFailed, StepFailure
from .commands import (
    AssertText,
    Click,
    Command,
    Navigate,
    Type,
    WaitFor,
    parse_step,
)
from .locators import Locator, LocatorStrategy

if TYPE_CHECKING:
    from ..browser.session import BrowserSession


DEFAULT_STEP_TIMEOUT_MS = 10000

BODY_LOCATOR = Locator(LocatorStrategy.CSS, "body")


class StepInterpreter:
    """Runs one raw step at a time against a browser session."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_STEP_TIMEOUT_MS,
        logger: Optional[logging.Logger] = None,
    ):
        self.timeout_ms = timeout_ms
        self.logger = logger or logging.getLogger(__name__)

    async def execute(self, session: "BrowserSession", base_url: str, raw_step: str) -> str:
        """
        Parse and execute a single step.

        Args:
            session: Browser session owned by the current run
            base_url: Base URL prepended to relative navigation targets
            raw_step: Step text as stored in the test case

        Returns:
            Log line describing what the step did

        Raises:
            StepFailure: If the step could not be carried out
        """
        command = parse_step(raw_step)
        try:
            return await self._run(session, base_url, command)
        except StepFailure:
            raise
        except Exception as e:
            self.logger.debug(f"Step failed: {raw_step} - {e}")
            raise StepFailure(raw_step, e) from e

    async def _run(self, session: "BrowserSession", base_url: str, command: Command) -> str:
        if isinstance(command, Navigate):
            url = command.resolve_url(base_url)
            await session.navigate(url)
            return f"navigate -> {url}"

        if isinstance(command, Click):
            element = await session.wait_for_element(command.locator, self.timeout_ms)
            await element.click()
            return f"click -> {command.locator_text}"

        if isinstance(command, Type):
            element = await session.wait_for_element(command.locator, self.timeout_ms)
            await element.clear()
            await element.send_keys(command.text)
            return f"type -> {command.locator_text} | {command.text}"

        if isinstance(command, WaitFor):
            await session.wait_for_element(command.locator, self.timeout_ms)
            return f"wait -> {command.locator_text}"

        if isinstance(command, AssertText):
            body = await session.find_element(BODY_LOCATOR)
            text = await body.text()
            if command.expected not in text:
                raise AssertionFailed(command.expected)
            return f'assert:text -> found "{command.expected}"'

        self.logger.warning(f"Unknown step: {command.raw}")
        return f"unknown step -> {command.raw}"
