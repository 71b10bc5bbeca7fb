"""
Error hierarchy for the analytics verification harness

Only ConfigurationError is fatal. Everything else is scoped to a single row,
step or write and is caught by the component that owns that scope.
"""
from typing import Optional


class HarnessError(Exception):
    """Base class for harness errors"""


class ConfigurationError(HarnessError):
    """Missing or invalid credentials, spreadsheet id or database descriptor"""

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = list(issues or [])

    def __str__(self) -> str:
        base = super().__str__()
        if self.issues:
            return f"{base}: " + "; ".join(self.issues)
        return base


class AutomationError(HarnessError):
    """A browser step could not be completed within its wait budget"""

    def __init__(self, message: str, action: Optional[str] = None, locator: Optional[str] = None):
        super().__init__(message)
        self.action = action
        self.locator = locator


class ElementNotFoundError(AutomationError):
    """Element never attached to the DOM"""


class ElementNotVisibleError(AutomationError):
    """Element attached but never became visible"""


class NavigationError(AutomationError):
    """Page navigation failed or timed out"""


class UnexpectedPageError(AutomationError):
    """The page raised a runtime error that is not on the ignore list"""


class WriteBackError(HarnessError):
    """A spreadsheet cell update failed"""


class AuditStoreError(HarnessError):
    """An audit table write failed"""
