"""
Step language components.

Locator resolution, the pure step parser and the effectful interpreter that
runs parsed steps against a browser session.
"""

from .locators import Locator, LocatorStrategy, resolve
from .commands import (
    AssertText,
    Click,
    Command,
    Navigate,
    Type,
    Unknown,
    WaitFor,
    parse_step,
)
from .interpreter import StepInterpreter

__all__ = [
    "Locator",
    "LocatorStrategy",
    "resolve",
    "AssertText",
    "Click",
    "Command",
    "Navigate",
    "Type",
    "Unknown",
    "WaitFor",
    "parse_step",
    "StepInterpreter",
]
