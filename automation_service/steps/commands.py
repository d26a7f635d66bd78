"""
Step language parser.

Parses raw step strings into command values without touching a browser:

- ``navigate:<path or url>``
- ``click:<locator>``
- ``type:<locator>|<text>``
- ``wait:<locator>``
- ``assert:text=<expected>``

Parsing never fails. Text that matches none of the prefixes becomes an
``Unknown`` command, which the interpreter logs and skips over.
"""

import re
from dataclasses import dataclass
from typing import Union

from .locators import Locator, resolve


NAVIGATE_PREFIX = "navigate:"
CLICK_PREFIX = "click:"
TYPE_PREFIX = "type:"
WAIT_PREFIX = "wait:"
ASSERT_TEXT_PREFIX = "assert:text="

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


@dataclass(frozen=True)
class Navigate:
    target: str

    def resolve_url(self, base_url: str) -> str:
        """Absolute targets are used as-is; anything else is joined onto base_url."""
        if _SCHEME.match(self.target):
            return self.target
        return f"{base_url}{self.target}"


@dataclass(frozen=True)
class Click:
    locator_text: str
    locator: Locator


@dataclass(frozen=True)
class Type:
    locator_text: str
    locator: Locator
    text: str


@dataclass(frozen=True)
class WaitFor:
    locator_text: str
    locator: Locator


@dataclass(frozen=True)
class AssertText:
    expected: str


@dataclass(frozen=True)
class Unknown:
    raw: str


Command = Union[Navigate, Click, Type, WaitFor, AssertText, Unknown]


def parse_step(raw: str) -> Command:
    """
    Parse one raw step string into a command.

    Args:
        raw: Step text as stored in a test case

    Returns:
        The parsed command; ``Unknown`` for unrecognized text
    """
    step = str(raw or "")

    if step.startswith(NAVIGATE_PREFIX):
        return Navigate(step[len(NAVIGATE_PREFIX):].strip())

    if step.startswith(CLICK_PREFIX):
        locator_text = step[len(CLICK_PREFIX):].strip()
        return Click(locator_text, resolve(locator_text))

    if step.startswith(TYPE_PREFIX):
        rest = step[len(TYPE_PREFIX):].strip()
        locator_text, _, text = rest.partition("|")
        locator_text = locator_text.strip()
        return Type(locator_text, resolve(locator_text), text)

    if step.startswith(WAIT_PREFIX):
        locator_text = step[len(WAIT_PREFIX):].strip()
        return WaitFor(locator_text, resolve(locator_text))

    if step.startswith(ASSERT_TEXT_PREFIX):
        return AssertText(step[len(ASSERT_TEXT_PREFIX):])

    return Unknown(step)
