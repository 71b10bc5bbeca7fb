"""
Verdict and audit record models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class VerdictStatus(Enum):
    """Outcome written to the status column"""
    PASS = "Pass"
    FAIL = "Fail"


class VerdictReason(Enum):
    """Why a verdict came out the way it did"""
    MATCHED = "matched"
    NO_CAPTURE = "no_capture"
    VALUE_MISMATCH = "value_mismatch"
    EMPTY_EXPECTED = "empty_expected"
    AUTOMATION_ERROR = "automation_error"


@dataclass(frozen=True)
class Verdict:
    """Reconciliation outcome for one test case"""
    row_index: int
    field_name: str
    expected_value: str
    actual_value: Optional[str]
    status: VerdictStatus
    reason: VerdictReason = VerdictReason.NO_CAPTURE

    @property
    def passed(self) -> bool:
        return self.status is VerdictStatus.PASS


@dataclass
class AuditRecord:
    """One row of the append-only analytics_data table"""
    analytic_id: str
    url: str
    fieldname: str
    value: str
    action: str
    status: str
    created_at: str


@dataclass
class WriteBackResult:
    """Outcome of writing statuses back to the sheet"""
    written: List[int] = field(default_factory=list)
    failed_rows: List[int] = field(default_factory=list)

    @property
    def is_partial_failure(self) -> bool:
        return bool(self.failed_rows)


@dataclass
class PersistResult:
    """Outcome of appending audit records"""
    inserted: int = 0
    failed_rows: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_rows


@dataclass
class RunSummary:
    """Totals for one harness run"""
    started_at: str
    total: int = 0
    passed: int = 0
    failed: int = 0
    captures: int = 0
    automation_failures: List[int] = field(default_factory=list)
    write_back: WriteBackResult = field(default_factory=WriteBackResult)
    persist: PersistResult = field(default_factory=PersistResult)
    duration: Optional[float] = None

    def get_pass_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def get_summary(self) -> Dict[str, Any]:
        return {
            'started_at': self.started_at,
            'duration': self.duration,
            'total_cases': self.total,
            'passed': self.passed,
            'failed': self.failed,
            'pass_rate': f"{self.get_pass_rate():.1f}%",
            'captures_buffered': self.captures,
            'automation_failures': list(self.automation_failures),
            'write_back_failures': list(self.write_back.failed_rows),
            'audit_rows_inserted': self.persist.inserted,
            'audit_failures': list(self.persist.failed_rows),
        }
