"""
Unit tests for the request capture buffer
"""

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analytics_agent.agents.capture import RequestCaptureBuffer, generate_request_id
from analytics_agent.models.capture import RawInterception
from analytics_agent.models.test_case import TestCase

COLLECT = "https://region1.analytics.google.com/g/collect"


def hit(query: str, post_data=None, status=204) -> RawInterception:
    return RawInterception(method="POST", url=f"{COLLECT}?{query}", status=status,
                           response_headers={"content-type": "text/plain"},
                           timestamp="2024-05-01T10:00:00", post_data=post_data)


def case(row_index=0, field_name="ep.Action", expected="Submit") -> TestCase:
    return TestCase(id=f"TC{row_index}", url="https://x.test", field_name=field_name,
                    expected_value=expected, action_script="click|#btn", row_index=row_index)


class TestRequiredParameterFilter:
    """Test the required-parameter payload filter"""

    @pytest.fixture
    def buffer(self):
        return RequestCaptureBuffer(required_params=["ep.Action", "ep.Category", "ep.Label"])

    def test_accepts_capture_with_a_required_param(self, buffer):
        accepted = buffer.on_capture(hit("v=2&en=click&ep.Action=Submit"))
        assert len(accepted) == 1
        assert len(buffer) == 1
        assert accepted[0].params["ep.Action"] == "Submit"

    def test_rejects_capture_without_required_params(self, buffer):
        accepted = buffer.on_capture(hit("v=2&en=page_view&dl=https%3A%2F%2Fx.test"))
        assert accepted == []
        assert len(buffer) == 0
        assert buffer.rejected == 1

    def test_substring_match_on_decoded_query(self, buffer):
        # ep.Label only appears once the query is percent-decoded
        accepted = buffer.on_capture(hit("v=2&ep%2ELabel=Hero"))
        assert len(accepted) == 1

    def test_extra_required_from_row_field(self, buffer):
        assert buffer.on_capture(hit("en=page_view&dt=Home")) == []
        accepted = buffer.on_capture(hit("en=page_view&dt=Home"), extra_required=["dt"])
        assert len(accepted) == 1

    def test_capture_fields_are_kept(self, buffer):
        entry = buffer.on_capture(hit("ep.Action=Go", status=200), origin_row=3)[0]
        assert entry.http_status == 200
        assert entry.method == "POST"
        assert entry.response_headers == {"content-type": "text/plain"}
        assert entry.timestamp == "2024-05-01T10:00:00"
        assert entry.origin_row == 3
        assert buffer.get(entry.request_id) is entry
        assert entry.request_id in buffer

    def test_batched_body_filters_each_event(self, buffer):
        body = "en=page_view\nen=click&ep.Action=Apply"
        accepted = buffer.on_capture(hit("v=2&tid=G-1", post_data=body))
        assert len(accepted) == 1
        assert accepted[0].params["ep.Action"] == "Apply"
        assert accepted[0].params["tid"] == "G-1"
        assert buffer.rejected == 1


class TestRowContext:
    """Test row tagging of observed captures"""

    def test_observe_tags_with_current_row(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])
        buffer.begin_row(case(row_index=4))
        buffer.observe(hit("ep.Action=Submit"))
        buffer.end_row()
        buffer.observe(hit("ep.Action=Late"))

        assert [e.params["ep.Action"] for e in buffer.for_row(4)] == ["Submit"]
        assert [e.params["ep.Action"] for e in buffer.for_row(None)] == ["Late"]
        assert buffer.count_for_row(4) == 1

    def test_row_field_becomes_required_during_row(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"], include_row_field=True)
        buffer.begin_row(case(field_name="dt"))
        assert len(buffer.observe(hit("en=page_view&dt=Home"))) == 1
        buffer.end_row()
        assert buffer.observe(hit("en=page_view&dt=Home")) == []

    def test_row_field_ignored_when_disabled(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"], include_row_field=False)
        buffer.begin_row(case(field_name="dt"))
        assert buffer.observe(hit("en=page_view&dt=Home")) == []

    def test_reset_clears_everything(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])
        buffer.begin_row(case())
        buffer.observe(hit("ep.Action=Submit"))
        buffer.reset()
        assert len(buffer) == 0
        assert buffer.current_row is None
        assert buffer.statistics()['observed_calls'] == 0


class TestIdentifiers:

    def test_ids_are_unique(self):
        ids = {generate_request_id() for _ in range(2000)}
        assert len(ids) == 2000

    def test_id_format(self):
        assert generate_request_id().startswith("request_")

    def test_many_captures_keep_distinct_entries(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])
        for i in range(200):
            buffer.on_capture(hit(f"ep.Action=a{i}"))
        assert len(buffer) == 200


class TestWaitForCaptures:
    """Test the bounded capture wait"""

    def test_timeout_without_captures(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])

        async def scenario():
            loop = asyncio.get_running_loop()
            start = loop.time()
            received = await buffer.wait_for_captures(0, timeout=0.2, quiet_period=0.05, poll_interval=0.01)
            return received, loop.time() - start

        received, elapsed = asyncio.run(scenario())
        assert received == 0
        assert 0.15 <= elapsed < 1.0

    def test_returns_after_quiet_period(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])
        buffer.begin_row(case(row_index=0))

        async def scenario():
            loop = asyncio.get_running_loop()
            loop.call_later(0.02, buffer.observe, hit("ep.Action=One"))
            loop.call_later(0.05, buffer.observe, hit("ep.Action=Two"))
            start = loop.time()
            received = await buffer.wait_for_captures(0, timeout=5.0, quiet_period=0.1, poll_interval=0.01)
            return received, loop.time() - start

        received, elapsed = asyncio.run(scenario())
        assert received == 2
        assert elapsed < 2.0

    def test_counts_only_new_captures_for_the_row(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])
        buffer.on_capture(hit("ep.Action=Earlier"), origin_row=0)
        buffer.on_capture(hit("ep.Action=Other"), origin_row=1)

        received = asyncio.run(buffer.wait_for_captures(0, timeout=0.1, quiet_period=0.01, poll_interval=0.01))
        assert received == 0


class TestStatistics:

    def test_statistics(self):
        buffer = RequestCaptureBuffer(required_params=["ep.Action"])
        buffer.on_capture(hit("ep.Action=a"), origin_row=0)
        buffer.on_capture(hit("en=page_view"), origin_row=0)
        buffer.on_capture(hit("ep.Action=b"))

        stats = buffer.statistics()
        assert stats == {
            'observed_calls': 3,
            'buffered_captures': 2,
            'rejected_payloads': 1,
            'rows_with_captures': 1,
        }
