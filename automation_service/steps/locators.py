"""
Locator resolution for step targets.

Turns compact selector text such as ``id=username`` or ``xpath=//form``
into a strategy/value pair. Unrecognized input falls back to CSS.
"""

from dataclasses import dataclass
from enum import Enum


class LocatorStrategy(Enum):
    """Element lookup strategies understood by step targets."""

    CSS = "css"
    ID = "id"
    NAME = "name"
    XPATH = "xpath"


@dataclass(frozen=True)
class Locator:
    """A strategy and value identifying one UI element."""

    strategy: LocatorStrategy
    value: str

    def __str__(self) -> str:
        return f"{self.strategy.value}={self.value}"


_STRATEGIES = {strategy.value: strategy for strategy in LocatorStrategy}


def resolve(text: str) -> Locator:
    """
    Resolve ``<strategy>=<value>`` text into a Locator.

    The strategy prefix is case-insensitive and only the first ``=`` splits,
    so values may themselves contain ``=``. Anything without a recognized
    prefix becomes a CSS locator over the whole input.

    Args:
        text: Locator description from a step

    Returns:
        Resolved locator
    """
    strategy, sep, value = text.partition("=")
    if sep:
        known = _STRATEGIES.get(strategy.strip().lower())
        if known is not None:
            return Locator(known, value)
    return Locator(LocatorStrategy.CSS, text)
