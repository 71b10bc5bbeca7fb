"""
Unit tests for the action script parser and step execution
"""

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analytics_agent.agents.interpreter import ActionScriptInterpreter
from analytics_agent.errors import AutomationError
from analytics_agent.models.actions import ClickStep, SelectStep, TypeStep, UnknownStep

from conftest import FakeAutomation


class TestParse:

    @pytest.fixture
    def interpreter(self):
        return ActionScriptInterpreter(settle_delay=0)

    def test_single_click(self, interpreter):
        assert interpreter.parse("click|#submit") == [ClickStep("#submit")]

    def test_single_type(self, interpreter):
        assert interpreter.parse("type|#name|John") == [TypeStep("#name", "John")]

    def test_select(self, interpreter):
        assert interpreter.parse("select|#state|CA") == [SelectStep("#state", "CA")]

    def test_click_then_type(self, interpreter):
        assert interpreter.parse("click|#a|type|#b|x") == [ClickStep("#a"), TypeStep("#b", "x")]

    def test_unknown_kind_consumes_one_token(self, interpreter):
        steps = interpreter.parse("foo|bar")
        assert steps[0] == UnknownStep("foo")
        # "bar" starts the next (also malformed) token stream
        assert steps[1:] == [UnknownStep("bar")]

    def test_unknown_then_valid_step_recovers(self, interpreter):
        assert interpreter.parse("hover|click|#cta") == [UnknownStep("hover"), ClickStep("#cta")]

    def test_insufficient_tokens(self, interpreter):
        assert interpreter.parse("type|#name") == [UnknownStep("type"), UnknownStep("#name")]
        assert interpreter.parse("click") == [UnknownStep("click")]

    def test_kind_is_case_insensitive_and_trimmed(self, interpreter):
        assert interpreter.parse(" Click |#go") == [ClickStep("#go")]

    def test_typed_value_kept_literally(self, interpreter):
        assert interpreter.parse("type|#q| hello world ") == [TypeStep("#q", " hello world ")]

    def test_blank_script(self, interpreter):
        assert interpreter.parse("") == []
        assert interpreter.parse("   ") == []
        assert interpreter.parse(None) == []

    def test_trailing_pipe_ignored(self, interpreter):
        assert interpreter.parse("click|#a|") == [ClickStep("#a")]


class TestExecute:

    def test_steps_run_in_order(self):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        interpreter = ActionScriptInterpreter(settle_delay=1.0, sleep=fake_sleep)
        driver = FakeAutomation()
        steps = interpreter.parse("click|#a|type|#b|x|select|#c|y")

        performed = asyncio.run(interpreter.execute(steps, driver))

        assert performed == 3
        assert driver.calls == [("click", "#a"), ("type", "#b", "x"), ("select", "#c", "y")]
        assert sleeps == [1.0, 1.0, 1.0]

    def test_unknown_steps_are_skipped_but_settle(self):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        interpreter = ActionScriptInterpreter(settle_delay=0.5, sleep=fake_sleep)
        driver = FakeAutomation()

        performed = asyncio.run(interpreter.run_script("wiggle|click|#a", driver))

        assert performed == 1
        assert driver.calls == [("click", "#a")]
        assert len(sleeps) == 2

    def test_missing_element_stops_the_script(self):
        interpreter = ActionScriptInterpreter(settle_delay=0)
        driver = FakeAutomation(missing_locators={"#gone"})

        with pytest.raises(AutomationError) as excinfo:
            asyncio.run(interpreter.run_script("click|#gone|click|#next", driver))

        assert excinfo.value.locator == "#gone"
        assert driver.calls == []

    def test_empty_script_does_nothing(self):
        interpreter = ActionScriptInterpreter(settle_delay=0)
        driver = FakeAutomation()
        assert asyncio.run(interpreter.run_script("", driver)) == 0
        assert driver.calls == []
