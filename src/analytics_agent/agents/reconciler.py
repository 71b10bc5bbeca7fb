"""
Reconciliation Engine

Compares every test case against the captured analytics hits and produces one
verdict per case, in input order.
"""
import logging
from typing import Iterable, List, Optional, Sequence

from ..models.capture import CapturedRequest
from ..models.test_case import TestCase
from ..models.verdict import Verdict, VerdictReason, VerdictStatus
from .capture import RequestCaptureBuffer

SCOPE_ROW = "row"
SCOPE_RUN = "run"


def normalize(value: Optional[str]) -> str:
    """Trimmed, lower-cased comparison form; None becomes ''"""
    if value is None:
        return ""
    return str(value).strip().lower()


class ReconciliationEngine:
    """Assigns Pass/Fail verdicts from buffered captures.

    With the `row` scope a case only sees captures tagged with its own row
    (plus untagged ones, e.g. from a HAR replay). The `run` scope lets every
    case see the whole buffer.
    """

    def __init__(self, match_scope: str = SCOPE_ROW):
        if match_scope not in (SCOPE_ROW, SCOPE_RUN):
            raise ValueError(f"Unknown match scope: {match_scope}")
        self.match_scope = match_scope
        self.logger = logging.getLogger(self.__class__.__name__)

    def eligible_captures(self, test_case: TestCase,
                          captures: Sequence[CapturedRequest]) -> List[CapturedRequest]:
        if self.match_scope == SCOPE_RUN:
            return list(captures)
        return [c for c in captures if c.origin_row is None or c.origin_row == test_case.row_index]

    def evaluate(self, test_case: TestCase, captures: Sequence[CapturedRequest],
                 automation_failed: bool = False) -> Verdict:
        """Verdict for a single case"""
        field_name = test_case.field_name
        expected = normalize(test_case.expected_value)

        if automation_failed:
            return self._verdict(test_case, None, VerdictStatus.FAIL, VerdictReason.AUTOMATION_ERROR)

        if not expected:
            self.logger.warning(f"Row {test_case.row_index}: empty expected value for '{field_name}', marking Fail")
            return self._verdict(test_case, None, VerdictStatus.FAIL, VerdictReason.EMPTY_EXPECTED)

        actual_value = None
        for capture in self.eligible_captures(test_case, captures):
            observed = capture.get_param(field_name)
            if observed is None:
                continue
            actual_value = observed
            if normalize(observed) == expected:
                self.logger.info(f"Field: {field_name}, Expected: \"{expected}\", Actual: \"{normalize(observed)}\" -> Pass")
                return self._verdict(test_case, observed, VerdictStatus.PASS, VerdictReason.MATCHED)

        if actual_value is None:
            self.logger.warning(f"Field \"{field_name}\" not found in any captured request for row {test_case.row_index}")
            return self._verdict(test_case, None, VerdictStatus.FAIL, VerdictReason.NO_CAPTURE)

        self.logger.info(f"Field: {field_name}, Expected: \"{expected}\", Actual: \"{normalize(actual_value)}\" -> Fail")
        return self._verdict(test_case, actual_value, VerdictStatus.FAIL, VerdictReason.VALUE_MISMATCH)

    def reconcile(self, test_cases: Sequence[TestCase], buffer: RequestCaptureBuffer,
                  failed_rows: Iterable[int] = ()) -> List[Verdict]:
        """One verdict per test case, same order as the input"""
        captures = buffer.entries()
        failed = set(failed_rows)

        verdicts = [
            self.evaluate(test_case, captures, automation_failed=test_case.row_index in failed)
            for test_case in test_cases
        ]

        passed = sum(1 for v in verdicts if v.passed)
        self.logger.info(f"Reconciled {len(verdicts)} cases against {len(captures)} captures: "
                         f"{passed} passed, {len(verdicts) - passed} failed")
        return verdicts

    @staticmethod
    def apply(test_cases: Sequence[TestCase], verdicts: Sequence[Verdict]) -> None:
        """Copy verdict statuses onto the test cases"""
        for test_case, verdict in zip(test_cases, verdicts):
            test_case.status = verdict.status.value

    @staticmethod
    def _verdict(test_case: TestCase, actual: Optional[str], status: VerdictStatus,
                 reason: VerdictReason) -> Verdict:
        return Verdict(
            row_index=test_case.row_index,
            field_name=test_case.field_name,
            expected_value=test_case.expected_value,
            actual_value=actual,
            status=status,
            reason=reason,
        )
