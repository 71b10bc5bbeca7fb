"""
Analytics Agent Data Models

This module contains all the data classes used throughout the harness.
"""

from .test_case import TestCase, CANONICAL_COLUMNS, LEGACY_COLUMNS
from .actions import ActionStep, ClickStep, TypeStep, SelectStep, UnknownStep
from .capture import RawInterception, CapturedRequest
from .verdict import (
    VerdictStatus, VerdictReason, Verdict, AuditRecord,
    WriteBackResult, PersistResult, RunSummary
)

__all__ = [
    'TestCase',
    'CANONICAL_COLUMNS',
    'LEGACY_COLUMNS',
    'ActionStep',
    'ClickStep',
    'TypeStep',
    'SelectStep',
    'UnknownStep',
    'RawInterception',
    'CapturedRequest',
    'VerdictStatus',
    'VerdictReason',
    'Verdict',
    'AuditRecord',
    'WriteBackResult',
    'PersistResult',
    'RunSummary'
]
