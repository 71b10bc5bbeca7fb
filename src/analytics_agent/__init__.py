"""
Analytics Agent

Spreadsheet-driven verification of analytics tracking calls: replay user
actions in a browser, capture the analytics hits they trigger, and reconcile
the captured parameters against expected values.
"""

__version__ = "1.0.0"

from .config import HarnessConfig
from .errors import (
    HarnessError, ConfigurationError, AutomationError,
    ElementNotFoundError, ElementNotVisibleError, NavigationError,
    UnexpectedPageError, WriteBackError, AuditStoreError
)

__all__ = [
    'HarnessConfig',
    'HarnessError',
    'ConfigurationError',
    'AutomationError',
    'ElementNotFoundError',
    'ElementNotVisibleError',
    'NavigationError',
    'UnexpectedPageError',
    'WriteBackError',
    'AuditStoreError'
]
