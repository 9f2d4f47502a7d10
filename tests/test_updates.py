"""Tests for pushing totals back to Airtable."""

import logging

from clients.airtable import AirtableClient
from config import TargetConfig
from conftest import FakeResponse, FakeSession, FakeSleep
from sync.models import UpdateInstruction
from sync.updates import FieldRef, RecordSink, RequestPacer

TARGET = TargetConfig("appA", "tblB")
OK = FakeResponse(200, {"id": "rec"})


def _sink(session, sleep=None, api_key="key", raised_id="fldRaised", donations_id="fldDonations"):
    return RecordSink(
        AirtableClient(api_key, session=session),
        raised_field=FieldRef("Raised", raised_id),
        donations_field=FieldRef("Donations", donations_id),
        pacer=RequestPacer(0.2, sleep=sleep or FakeSleep()),
    )


def _instructions(n):
    return [UpdateInstruction(f"rec{i}", 10.0 * i, i) for i in range(1, n + 1)]


class TestPayload:
    def test_writes_name_and_id_for_each_value(self):
        session = FakeSession([OK])
        _sink(session).push_updates(TARGET, [UpdateInstruction("rec1", 15.0, 3)])

        assert session.calls[0]["json"] == {"fields": {
            "Raised": 15.0,
            "fldRaised": 15.0,
            "Donations": 3,
            "fldDonations": 3,
        }}
        assert session.calls[0]["url"].endswith("/appA/tblB/rec1")

    def test_field_ids_are_optional(self):
        session = FakeSession([OK])
        _sink(session, raised_id="", donations_id="").push_updates(TARGET, _instructions(1))
        assert session.calls[0]["json"] == {"fields": {"Raised": 10.0, "Donations": 1}}


class TestPushUpdates:
    def test_all_succeed(self):
        session = FakeSession(default=OK)
        result = _sink(session).push_updates(TARGET, _instructions(3))

        assert (result.success_count, result.error_count) == (3, 0)
        assert [c["method"] for c in session.calls] == ["PATCH"] * 3

    def test_delay_between_requests_only(self):
        """No wait before the first request, one before each later one."""
        sleep = FakeSleep()
        _sink(FakeSession(default=OK), sleep=sleep).push_updates(TARGET, _instructions(4))
        assert sleep.calls == [0.2, 0.2, 0.2]

    def test_failures_do_not_stop_the_batch(self, connection_error, caplog):
        session = FakeSession([
            FakeResponse(422, {"error": "INVALID_VALUE_FOR_COLUMN"}),
            connection_error,
            OK,
        ])

        with caplog.at_level(logging.ERROR):
            result = _sink(session).push_updates(TARGET, _instructions(3))

        assert (result.success_count, result.error_count) == (1, 2)
        assert len(session.calls) == 3
        assert "Failed to update record rec1: Response code 422" in caplog.text
        assert "Error updating record rec2" in caplog.text

    def test_only_200_counts_as_success(self):
        session = FakeSession([FakeResponse(204, None)])
        result = _sink(session).push_updates(TARGET, _instructions(1))
        assert (result.success_count, result.error_count) == (0, 1)

    def test_missing_api_key(self):
        session = FakeSession()
        result = _sink(session, api_key="").push_updates(TARGET, _instructions(2))

        assert (result.success_count, result.error_count) == (0, 2)
        assert session.calls == []

    def test_dry_run_sends_nothing(self):
        session = FakeSession()
        sleep = FakeSleep()
        result = _sink(session, sleep=sleep).push_updates(TARGET, _instructions(2), dry_run=True)

        assert (result.success_count, result.error_count) == (2, 0)
        assert session.calls == []
        assert sleep.calls == []

    def test_empty_batch(self):
        result = _sink(FakeSession()).push_updates(TARGET, [])
        assert (result.success_count, result.error_count) == (0, 0)


class TestRequestPacer:
    def test_zero_delay_never_sleeps(self):
        sleep = FakeSleep()
        pacer = RequestPacer(0, sleep=sleep)
        for i in range(3):
            pacer.before_request(i)
        assert sleep.calls == []
