"""
Result Sink

Writes verdict statuses back into the sheet and appends audit records.
Every write is independent: one failure is logged and recorded, the rest
still go through.
"""
import logging
from typing import Optional, Sequence

from ..config import SheetConfig
from ..models.test_case import TestCase
from ..models.verdict import PersistResult, Verdict, WriteBackResult
from ..sheets.base import SheetClient, status_cell
from ..storage.audit_store import AuditStore


class ResultSink:
    """Spreadsheet write-back and audit persistence"""

    def __init__(self, sheet_client: SheetClient, sheet_config: SheetConfig,
                 audit_store: Optional[AuditStore] = None):
        self.sheet_client = sheet_client
        self.sheet_config = sheet_config
        self.audit_store = audit_store
        self.logger = logging.getLogger(self.__class__.__name__)

    def write_back(self, verdicts: Sequence[Verdict]) -> WriteBackResult:
        """Write each verdict into its row's status cell"""
        result = WriteBackResult()

        for verdict in verdicts:
            cell = status_cell(self.sheet_config, verdict.row_index)
            try:
                self.sheet_client.write_range(cell, [[verdict.status.value]])
            except Exception as e:
                self.logger.error(f"Failed to update status for {cell}: {e}")
                result.failed_rows.append(verdict.row_index)
                continue

            self.logger.info(f"Update result for {cell}: {verdict.status.value}")
            result.written.append(verdict.row_index)

        if result.is_partial_failure:
            self.logger.warning(f"Status write-back failed for {len(result.failed_rows)} of {len(verdicts)} rows")
        return result

    def persist(self, test_cases: Sequence[TestCase]) -> PersistResult:
        """Append one audit record per test case, in input order"""
        result = PersistResult()
        if self.audit_store is None:
            self.logger.info("Audit store disabled, skipping persistence")
            return result

        try:
            self.audit_store.ensure_schema()
        except Exception as e:
            self.logger.error(f"Audit table unavailable, no rows persisted: {e}")
            result.failed_rows.extend(test_case.row_index for test_case in test_cases)
            return result

        for test_case in test_cases:
            try:
                self.audit_store.insert_record(self.audit_store.build_record(test_case))
            except Exception as e:
                self.logger.error(f"Failed to persist audit row for {test_case.id}: {e}")
                result.failed_rows.append(test_case.row_index)
                continue
            result.inserted += 1

        self.logger.info(f"Persisted {result.inserted} audit rows")
        return result
