"""Shared test doubles."""

from datetime import datetime, timezone

import pytest
import requests

from clients.airtable import AirtableClient
from config import SyncSettings, TargetConfig
from sync.form_totals import FormTotalsSync
from sync.records import RecordSource
from sync.sheet import SheetReader
from sync.updates import FieldRef, RecordSink, RequestPacer

PREFIX = "https://secure.actblue.com/donate/"
HEADER = ["form_name", "dollars_raised", "num_of_donations"]


class FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json = json_data

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Stands in for requests.Session; replays queued responses in order.

    A queued exception is raised instead of returned. When the queue is
    empty, `default` is returned.
    """

    def __init__(self, responses=None, default=None):
        self.responses = list(responses or [])
        self.default = default
        self.calls = []

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers,
            "params": params,
            "json": json,
        })
        item = self.responses.pop(0) if self.responses else self.default
        if item is None:
            raise AssertionError(f"Unexpected request: {method} {url}")
        if isinstance(item, Exception):
            raise item
        return item

    def calls_for(self, method):
        return [c for c in self.calls if c["method"] == method]


class FakeTableReader:
    def __init__(self, sheets=None):
        self.sheets = sheets or {}

    def get_values(self, sheet_name):
        return self.sheets.get(sheet_name)


class MemoryStore:
    def __init__(self, data=None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class FakeSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def airtable_record(record_id, url=None, field="ActBlue Page"):
    fields = {} if url is None else {field: url}
    return {"id": record_id, "fields": fields}


def records_page(*records, offset=None):
    body = {"records": list(records)}
    if offset:
        body["offset"] = offset
    return FakeResponse(200, body)


def make_settings(targets=None, **overrides):
    values = dict(
        api_key="key-test",
        targets=targets if targets is not None else [TargetConfig("appBase1", "tblTable1")],
        sheet_name="raw_import",
        url_prefix=PREFIX,
        raised_field_id="fldRaised",
        donations_field_id="fldDonations",
    )
    values.update(overrides)
    return SyncSettings(**values)


def make_sync(session, sheets, settings=None, sleep=None):
    settings = settings or make_settings()
    client = AirtableClient(settings.api_key, session=session)
    return FormTotalsSync(
        settings,
        source=RecordSource(client, settings.url_prefix, settings.url_field, settings.url_field_id),
        reader=SheetReader(FakeTableReader(sheets)),
        sink=RecordSink(
            client,
            raised_field=FieldRef(settings.raised_field, settings.raised_field_id),
            donations_field=FieldRef(settings.donations_field, settings.donations_field_id),
            pacer=RequestPacer(0.2, sleep=sleep or FakeSleep()),
        ),
    )


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
