"""
Shared fixtures and fakes for the analytics agent tests
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analytics_agent.config import HarnessConfig
from analytics_agent.errors import ElementNotFoundError
from analytics_agent.storage.audit_store import AuditStore


class FakeSheetClient:
    """In-memory SheetClient; can be told to fail writes to given cells"""

    def __init__(self, rows: Optional[List[List[str]]] = None, failing_cells=()):
        self.rows = rows or []
        self.failing_cells = set(failing_cells)
        self.writes: Dict[str, List[List[str]]] = {}
        self.write_attempts: List[str] = []

    def read_range(self, range_name: str) -> List[List[str]]:
        return [list(row) for row in self.rows]

    def write_range(self, range_name: str, values: List[List[str]]) -> None:
        self.write_attempts.append(range_name)
        if range_name in self.failing_cells:
            raise RuntimeError(f"quota exceeded for {range_name}")
        self.writes[range_name] = values


class FakeAutomation:
    """AutomationDriver that records calls and can emit network traffic"""

    def __init__(self, missing_locators=(), on_action: Optional[Callable[[str, str], None]] = None):
        self.calls: List[tuple] = []
        self.missing_locators = set(missing_locators)
        self.on_action = on_action

    async def visit(self, url: str) -> None:
        self.calls.append(("visit", url))
        if self.on_action:
            self.on_action("visit", url)

    async def click(self, locator: str) -> None:
        self._check(locator, "click")
        self.calls.append(("click", locator))
        if self.on_action:
            self.on_action("click", locator)

    async def type(self, locator: str, text: str) -> None:
        self._check(locator, "type")
        self.calls.append(("type", locator, text))
        if self.on_action:
            self.on_action("type", locator)

    async def select(self, locator: str, value: str) -> None:
        self._check(locator, "select")
        self.calls.append(("select", locator, value))
        if self.on_action:
            self.on_action("select", locator)

    def _check(self, locator: str, action: str) -> None:
        if locator in self.missing_locators:
            raise ElementNotFoundError(f"{locator} not attached", action=action, locator=locator)


@pytest.fixture
def audit_store(tmp_path):
    store = AuditStore(str(tmp_path / "audit.db"), timezone="America/New_York")
    yield store
    store.close()


@pytest.fixture
def fast_config(tmp_path):
    """Config with all delays shortened for tests"""
    config = HarnessConfig()
    config.actions.settle_delay = 0
    config.actions.row_delay = 0
    config.capture.capture_timeout = 0.3
    config.capture.quiet_period = 0.05
    config.capture.poll_interval = 0.01
    config.output.output_directory = str(tmp_path / "results")
    config.output.save_summary = False
    return config
