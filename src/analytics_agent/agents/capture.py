#!/usr/bin/env python3
"""
Request Capture Buffer

Decodes intercepted analytics hits, applies the required-parameter filter and
keeps the accepted hits for the rest of the run. Hits are tagged with the row
that was being processed when they arrived, so reconciliation can tell which
action caused them.
"""

import asyncio
import logging
import time
import uuid
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.capture import CapturedRequest, RawInterception
from ..models.test_case import TestCase
from ..utils.url_utils import contains_any, decode_component, decode_payload_events, extract_query


def generate_request_id() -> str:
    """Time-based id with a random suffix; unique within a run, not ordered"""
    return f"request_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class RequestCaptureBuffer:
    """Append-only store of accepted captures for a single run"""

    def __init__(self, required_params: Optional[Sequence[str]] = None,
                 include_row_field: bool = True):
        self.required_params = list(required_params or [])
        self.include_row_field = include_row_field
        self.logger = logging.getLogger(self.__class__.__name__)

        self._entries: Dict[str, CapturedRequest] = {}
        self._row_counts: Dict[Optional[int], int] = {}
        self.current_row: Optional[int] = None
        self.current_extra_required: List[str] = []
        self.rejected = 0
        self.observed = 0

    def reset(self) -> None:
        """Start a fresh run"""
        self._entries = {}
        self._row_counts = {}
        self.current_row = None
        self.current_extra_required = []
        self.rejected = 0
        self.observed = 0

    # Row context

    def begin_row(self, test_case: TestCase) -> None:
        """Tag subsequent captures with this row"""
        self.current_row = test_case.row_index
        self.current_extra_required = []
        if self.include_row_field and test_case.field_name:
            self.current_extra_required.append(test_case.field_name)

    def end_row(self) -> None:
        self.current_row = None
        self.current_extra_required = []

    # Producer side

    def is_accepted(self, payload_text: str, extra_required: Iterable[str] = ()) -> bool:
        """A payload passes when any required name occurs in its decoded text"""
        required = list(self.required_params) + list(extra_required)
        return contains_any(payload_text, required)

    def observe(self, raw: RawInterception) -> List[CapturedRequest]:
        """Capture using the current row context"""
        return self.on_capture(raw, origin_row=self.current_row,
                               extra_required=self.current_extra_required)

    def on_capture(self, raw: RawInterception, origin_row: Optional[int] = None,
                   extra_required: Iterable[str] = ()) -> List[CapturedRequest]:
        """Decode and filter one intercepted call.

        Returns the accepted captures (one per batched event); an empty list
        means the call was rejected.
        """
        self.observed += 1
        extra_required = list(extra_required)
        query = extract_query(raw.url)
        body_lines = [line for line in (raw.post_data or "").splitlines() if line.strip()]

        accepted: List[CapturedRequest] = []
        for index, params in enumerate(decode_payload_events(raw.url, raw.post_data)):
            payload_text = decode_component(query)
            if body_lines:
                payload_text = f"{payload_text}&{decode_component(body_lines[index])}"

            if not self.is_accepted(payload_text, extra_required):
                self.rejected += 1
                self.logger.debug(f"Skipping capture without required parameters: {raw.url[:120]}")
                continue

            request_id = generate_request_id()
            while request_id in self._entries:
                request_id = generate_request_id()

            entry = CapturedRequest(
                request_id=request_id,
                url=raw.url,
                method=raw.method.upper(),
                http_status=raw.status,
                response_headers=dict(raw.response_headers),
                timestamp=raw.timestamp,
                params=params,
                origin_row=origin_row,
            )
            self._entries[request_id] = entry
            self._row_counts[origin_row] = self._row_counts.get(origin_row, 0) + 1
            accepted.append(entry)
            self.logger.debug(f"Buffered {request_id} for row {origin_row}: {params}")

        return accepted

    async def wait_for_captures(self, origin_row: Optional[int], timeout: float = 10.0,
                                quiet_period: float = 2.0, poll_interval: float = 0.1) -> int:
        """Wait for captures tagged with `origin_row`.

        Returns once at least one capture arrived and nothing new came in for
        `quiet_period`, or when `timeout` elapses. Returns the number of new
        captures for the row.
        """
        loop = asyncio.get_running_loop()
        start = loop.time()
        deadline = start + timeout
        baseline = self.count_for_row(origin_row)
        last_count = baseline
        last_change = start

        while True:
            now = loop.time()
            current = self.count_for_row(origin_row)
            if current != last_count:
                last_count = current
                last_change = now

            received = current - baseline
            if received > 0 and now - last_change >= quiet_period:
                break
            if now >= deadline:
                if received == 0:
                    self.logger.warning(f"No analytics capture for row {origin_row} within {timeout}s")
                break

            await asyncio.sleep(min(poll_interval, max(deadline - now, 0)))

        return self.count_for_row(origin_row) - baseline

    # Consumer side (read-only)

    def entries(self) -> List[CapturedRequest]:
        return list(self._entries.values())

    def get(self, request_id: str) -> Optional[CapturedRequest]:
        return self._entries.get(request_id)

    def for_row(self, row_index: Optional[int]) -> List[CapturedRequest]:
        return [entry for entry in self._entries.values() if entry.origin_row == row_index]

    def count_for_row(self, row_index: Optional[int]) -> int:
        return self._row_counts.get(row_index, 0)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, request_id: str) -> bool:
        return request_id in self._entries

    def statistics(self) -> Dict[str, int]:
        return {
            'observed_calls': self.observed,
            'buffered_captures': len(self._entries),
            'rejected_payloads': self.rejected,
            'rows_with_captures': len([row for row in self._row_counts if row is not None]),
        }
