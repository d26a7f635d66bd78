"""
Unit tests for locator resolution.
"""

import pytest

from automation_service.steps.locators import Locator, LocatorStrategy, resolve


class TestResolve:
    """Test cases for resolve()."""

    @pytest.mark.parametrize(
        "text,strategy,value",
        [
            ("id=username", LocatorStrategy.ID, "username"),
            ("name=email", LocatorStrategy.NAME, "email"),
            ("xpath=//form/button", LocatorStrategy.XPATH, "//form/button"),
            ("css=.login-form", LocatorStrategy.CSS, ".login-form"),
        ],
    )
    def test_known_strategies(self, text, strategy, value):
        assert resolve(text) == Locator(strategy, value)

    def test_strategy_prefix_is_case_insensitive(self):
        assert resolve("ID=username") == Locator(LocatorStrategy.ID, "username")
        assert resolve("XPath=//a") == Locator(LocatorStrategy.XPATH, "//a")

    def test_bare_selector_falls_back_to_css(self):
        assert resolve("#submit") == Locator(LocatorStrategy.CSS, "#submit")

    def test_unknown_prefix_keeps_whole_text_as_css(self):
        locator = resolve("data-test=login")

        assert locator.strategy == LocatorStrategy.CSS
        assert locator.value == "data-test=login"

    def test_only_first_equals_splits(self):
        assert resolve("css=input[name=q]") == Locator(LocatorStrategy.CSS, "input[name=q]")
        assert resolve("xpath=//a[@id='x']") == Locator(LocatorStrategy.XPATH, "//a[@id='x']")

    def test_empty_value_after_strategy(self):
        assert resolve("id=") == Locator(LocatorStrategy.ID, "")

    def test_str_round_trips_through_resolve(self):
        locator = resolve("name=email")

        assert str(locator) == "name=email"
        assert resolve(str(locator)) == locator

    def test_locator_is_hashable(self):
        seen = {resolve("id=a"), resolve("id=a"), resolve("css=a")}

        assert len(seen) == 2
