"""
Action Script Interpreter

Parses the pipe-delimited action language used in the sheet's action column
and replays it through an automation driver, one step at a time.

    click|#submit                  -> ClickStep('#submit')
    type|#name|John                -> TypeStep('#name', 'John')
    select|#state|CA               -> SelectStep('#state', 'CA')
    click|#a|type|#b|x             -> ClickStep('#a'), TypeStep('#b', 'x')
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..models.actions import ActionStep, ClickStep, SelectStep, TypeStep, UnknownStep
from .browser import AutomationDriver

# Tokens consumed by each action kind, the kind itself included
ACTION_ARITY = {
    "click": 2,
    "type": 3,
    "select": 3,
}


class ActionScriptInterpreter:
    """Turns action scripts into steps and drives them in order"""

    def __init__(self, settle_delay: float = 1.0,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        self.settle_delay = settle_delay
        self._sleep = sleep or asyncio.sleep
        self.logger = logging.getLogger(self.__class__.__name__)

    def parse(self, script: Optional[str]) -> List[ActionStep]:
        """Parse an action script into an ordered list of steps"""
        if not script or not script.strip():
            return []

        tokens = script.split('|')
        steps: List[ActionStep] = []
        index = 0

        while index < len(tokens):
            kind = tokens[index].strip().lower()

            if not kind:
                index += 1
                continue

            arity = ACTION_ARITY.get(kind)
            if arity is None or index + arity > len(tokens):
                # Unknown kind or not enough tokens left: skip one token only
                steps.append(UnknownStep(raw=tokens[index]))
                index += 1
                continue

            locator = tokens[index + 1].strip()
            if kind == "click":
                steps.append(ClickStep(locator=locator))
            elif kind == "type":
                steps.append(TypeStep(locator=locator, value=tokens[index + 2]))
            else:
                steps.append(SelectStep(locator=locator, value=tokens[index + 2]))
            index += arity

        return steps

    async def execute(self, steps: List[ActionStep], driver: AutomationDriver) -> int:
        """Run steps sequentially; returns the number of steps actually performed.

        AutomationError propagates to the caller, which fails the current row.
        """
        performed = 0

        for position, step in enumerate(steps, 1):
            if isinstance(step, ClickStep):
                await driver.click(step.locator)
                self.logger.info(f"Step {position}: clicked {step.locator}")
                performed += 1
            elif isinstance(step, TypeStep):
                await driver.type(step.locator, step.value)
                self.logger.info(f"Step {position}: typed \"{step.value}\" into {step.locator}")
                performed += 1
            elif isinstance(step, SelectStep):
                await driver.select(step.locator, step.value)
                self.logger.info(f"Step {position}: selected \"{step.value}\" in {step.locator}")
                performed += 1
            else:
                self.logger.warning(f"Step {position}: skipping unknown action token '{step.raw}'")

            # Analytics calls can lag behind the UI
            if self.settle_delay > 0:
                await self._sleep(self.settle_delay)

        return performed

    async def run_script(self, script: Optional[str], driver: AutomationDriver) -> int:
        """Parse and execute a script in one go"""
        steps = self.parse(script)
        if not steps:
            return 0
        self.logger.debug(f"Parsed {len(steps)} steps from '{script}'")
        return await self.execute(steps, driver)
