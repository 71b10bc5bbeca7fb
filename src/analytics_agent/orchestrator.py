#!/usr/bin/env python3
"""
Analytics Verification Orchestrator
Loads test cases, replays them in a browser, reconciles the captured analytics
hits and records the outcome
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .agents.browser import (
    AutomationDriver, BrowserSession, NetworkListener, PageErrorPolicy, PlaywrightAutomation
)
from .agents.capture import RequestCaptureBuffer
from .agents.har import replay_har
from .agents.interpreter import ActionScriptInterpreter
from .agents.reconciler import ReconciliationEngine
from .agents.sink import ResultSink
from .config import HarnessConfig
from .errors import AutomationError
from .models.test_case import TestCase
from .models.verdict import RunSummary, Verdict
from .sheets.base import SheetClient, load_test_cases
from .storage.audit_store import AuditStore
from .utils.helpers import Timer, get_timestamp, save_json_results


class AnalyticsVerificationOrchestrator:
    """Runs the load -> replay -> reconcile -> record pipeline"""

    def __init__(self, config: HarnessConfig, sheet_client: SheetClient,
                 audit_store: Optional[AuditStore] = None):
        self.config = config
        self.sheet_client = sheet_client
        self.audit_store = audit_store
        self.logger = logging.getLogger(self.__class__.__name__)

        self.interpreter = ActionScriptInterpreter(settle_delay=config.actions.settle_delay)
        self.reconciler = ReconciliationEngine(match_scope=config.capture.match_scope)
        self.sink = ResultSink(sheet_client, config.sheet, audit_store)

    def new_buffer(self) -> RequestCaptureBuffer:
        return RequestCaptureBuffer(
            required_params=self.config.capture.required_params,
            include_row_field=self.config.capture.include_row_field,
        )

    def load(self) -> List[TestCase]:
        return load_test_cases(self.sheet_client, self.config.sheet)

    async def process_row(self, test_case: TestCase, automation: AutomationDriver,
                          buffer: RequestCaptureBuffer,
                          page_errors: Optional[PageErrorPolicy] = None) -> int:
        """Visit, act and wait for captures for one row; returns captures seen"""
        capture = self.config.capture
        buffer.begin_row(test_case)
        if page_errors:
            page_errors.begin_row()

        try:
            await automation.visit(test_case.url)
            await self.interpreter.run_script(test_case.action_script, automation)
            captured = await buffer.wait_for_captures(
                test_case.row_index,
                timeout=capture.capture_timeout,
                quiet_period=capture.quiet_period,
                poll_interval=capture.poll_interval,
            )
            if page_errors:
                page_errors.raise_if_unexpected()
        finally:
            buffer.end_row()

        self.logger.info(f"Row {test_case.row_index} ({test_case.id}): {captured} captures")
        return captured

    async def process_rows(self, test_cases: Sequence[TestCase], automation: AutomationDriver,
                           buffer: RequestCaptureBuffer,
                           page_errors: Optional[PageErrorPolicy] = None) -> List[int]:
        """Process rows strictly in order; returns row indexes that failed to automate"""
        failed_rows: List[int] = []

        for position, test_case in enumerate(test_cases, 1):
            self.logger.info(f"[{position}/{len(test_cases)}] {test_case.url} "
                             f"field={test_case.field_name} action='{test_case.action_script}'")
            try:
                await self.process_row(test_case, automation, buffer, page_errors)
            except AutomationError as e:
                self.logger.error(f"Row {test_case.row_index} ({test_case.id}) failed: {e}")
                failed_rows.append(test_case.row_index)

            if self.config.actions.row_delay > 0:
                await asyncio.sleep(self.config.actions.row_delay)

        return failed_rows

    def finalize(self, test_cases: Sequence[TestCase], buffer: RequestCaptureBuffer,
                 failed_rows: Sequence[int] = (), started_at: Optional[str] = None) -> RunSummary:
        """Reconcile, write statuses back and append audit rows"""
        verdicts: List[Verdict] = self.reconciler.reconcile(test_cases, buffer, failed_rows)
        self.reconciler.apply(test_cases, verdicts)

        summary = RunSummary(started_at=started_at or get_timestamp())
        summary.total = len(verdicts)
        summary.passed = sum(1 for v in verdicts if v.passed)
        summary.failed = summary.total - summary.passed
        summary.captures = len(buffer)
        summary.automation_failures = list(failed_rows)
        summary.write_back = self.sink.write_back(verdicts)
        summary.persist = self.sink.persist(test_cases)
        return summary

    async def run(self) -> RunSummary:
        """Full run against a live browser"""
        started_at = get_timestamp()
        test_cases = self.load()
        buffer = self.new_buffer()

        with Timer("Analytics verification run") as timer:
            if not test_cases:
                self.logger.info("No valid data to process.")
                failed_rows: List[int] = []
            else:
                async with BrowserSession(self.config.playwright) as session:
                    listener = NetworkListener(buffer, self.config.capture.method,
                                               self.config.capture.url_pattern)
                    listener.attach(session.page)
                    page_errors = PageErrorPolicy(self.config.actions.ignorable_page_errors)
                    page_errors.attach(session.page)
                    automation = PlaywrightAutomation(
                        session.page,
                        element_timeout=self.config.actions.element_timeout,
                        navigation_timeout=self.config.playwright.timeout,
                        wait_until=self.config.playwright.wait_until,
                    )
                    failed_rows = await self.process_rows(test_cases, automation, buffer, page_errors)

            summary = self.finalize(test_cases, buffer, failed_rows, started_at)

        summary.duration = timer.elapsed
        self._save_summary(summary)
        self.logger.info(str(timer))
        return summary

    def run_offline(self, har_path: str) -> RunSummary:
        """Reconcile the sheet against a HAR export instead of a live browser"""
        started_at = get_timestamp()
        test_cases = self.load()
        buffer = self.new_buffer()

        with Timer("Offline reconciliation") as timer:
            kept = replay_har(har_path, buffer, self.config.capture.method,
                              self.config.capture.url_pattern)
            self.logger.info(f"Buffered {kept} captures from {har_path}")
            summary = self.finalize(test_cases, buffer, (), started_at)

        summary.duration = timer.elapsed
        self._save_summary(summary)
        return summary

    def _save_summary(self, summary: RunSummary) -> None:
        if not self.config.output.save_summary:
            return
        path = Path(self.config.output.output_directory) / f"run_summary_{summary.started_at}.json"
        save_json_results(summary.get_summary(), str(path))
        self.logger.info(f"Run summary saved to {path}")
