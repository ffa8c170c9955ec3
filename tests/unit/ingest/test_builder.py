"""
Module: test_builder.py
Description: Unit tests for building payloads from change notifications.

Covers the header-row and watched-column filters, field order per
change type, form answers and cell value normalization.
"""

import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from sheethook.ingest.builder import PayloadBuilder, column_name, normalize_value
from sheethook.models.notification import ChangeNotification
from sheethook.models.payload import ChangeType

FIXED_TIMESTAMP = "2024-01-15T10:30:00.000Z"


def _builder(watched_column=None):
    return PayloadBuilder(watched_column, clock=lambda: FIXED_TIMESTAMP)


class TestFilters:
    """Test cases for notifications that must not produce payloads."""

    def test_edit_outside_watched_column_is_discarded(self, sample_edit_notification):
        sample_edit_notification["column"] = 2
        notification = ChangeNotification(**sample_edit_notification)

        assert _builder(watched_column=5).build(notification) is None
        assert "not the watched column" in _builder(watched_column=5).discard_reason(notification)

    def test_edit_on_watched_column_builds_edit_payload(self, sample_edit_notification):
        sample_edit_notification["column"] = 2
        notification = ChangeNotification(**sample_edit_notification)

        payload = _builder(watched_column=2).build(notification)

        assert payload is not None
        assert payload.change_type == ChangeType.EDIT
        assert payload["change_type"] == "EDIT"
        assert payload["edited_column"] == "Email"

    def test_unset_watched_column_means_last_column(self, sample_edit_notification):
        builder = _builder()
        assert builder.build(ChangeNotification(**sample_edit_notification)) is not None

        sample_edit_notification["column"] = 4
        assert builder.build(ChangeNotification(**sample_edit_notification)) is None

    def test_header_row_is_always_discarded(self, sample_edit_notification):
        sample_edit_notification["row"] = 1
        notification = ChangeNotification(**sample_edit_notification)

        assert _builder().build(notification) is None
        assert _builder(watched_column=5).build(notification) is None
        assert _builder().discard_reason(notification) == "header row"

        for kind in ("INSERT_ROW", "FORM_SUBMIT"):
            other = ChangeNotification(kind=kind, row=1, headers=["A"], values=["x"])
            assert _builder().build(other) is None

    def test_inserts_and_submissions_ignore_column(self):
        headers = ["Name", "Status"]
        for kind in ("INSERT_ROW", "FORM_SUBMIT"):
            notification = ChangeNotification(kind=kind, row=9, column=1, headers=headers, values=["Bo", "New"])
            payload = _builder(watched_column=2).build(notification)
            assert payload is not None
            assert payload["change_type"] == kind


class TestPayloadShape:
    """Test cases for payload fields and their order."""

    def test_edit_payload_field_order(self, sample_edit_notification):
        payload = _builder().build(ChangeNotification(**sample_edit_notification))

        assert list(payload.data) == [
            "row_number", "timestamp", "change_type",
            "edited_column", "old_value", "new_value",
            "Name", "Email", "Team", "Notes", "Status",
        ]
        assert payload.as_dict() == {
            "row_number": 7,
            "timestamp": FIXED_TIMESTAMP,
            "change_type": "EDIT",
            "edited_column": "Status",
            "old_value": "Pending",
            "new_value": "Approved",
            "Name": "Ada",
            "Email": "ada@example.com",
            "Team": "Core",
            "Notes": "",
            "Status": "Approved",
        }

    def test_insert_payload_has_no_edit_fields(self):
        notification = ChangeNotification(
            kind="INSERT_ROW",
            row=12,
            headers=["Name", "Amount"],
            values=["Cy", 42]
        )
        payload = _builder().build(notification)

        assert list(payload.data) == ["row_number", "timestamp", "change_type", "Name", "Amount"]
        assert payload["Amount"] == 42

    def test_form_submission_prefers_named_values(self):
        notification = ChangeNotification(
            kind="FORM_SUBMIT",
            row=5,
            headers=["Timestamp", "Email", "Topics"],
            values=["1/15/2024 10:30:00", "row@example.com", ""],
            named_values={"Email": ["form@example.com"], "Topics": ["Billing", "Support"]}
        )
        payload = _builder().build(notification)

        assert payload["Timestamp"] == "1/15/2024 10:30:00"
        assert payload["Email"] == "form@example.com"
        assert payload["Topics"] == "Billing, Support"

    def test_named_values_ignored_for_edits(self, sample_edit_notification):
        sample_edit_notification["named_values"] = {"Name": ["Other"]}
        payload = _builder().build(ChangeNotification(**sample_edit_notification))
        assert payload["Name"] == "Ada"

    def test_missing_trailing_values_become_empty(self):
        notification = ChangeNotification(kind="INSERT_ROW", row=3, headers=["A", "B", "C"], values=["x"])
        payload = _builder().build(notification)
        assert [payload["A"], payload["B"], payload["C"]] == ["x", "", ""]

    def test_blank_and_reserved_headers_are_skipped(self):
        notification = ChangeNotification(
            kind="INSERT_ROW",
            row=3,
            headers=["Name", "", "timestamp", "  ", "Team"],
            values=["Ada", "ignored", "2020-01-01", "ignored", "Core"]
        )
        payload = _builder().build(notification)

        assert list(payload.data) == ["row_number", "timestamp", "change_type", "Name", "Team"]
        assert payload["timestamp"] == FIXED_TIMESTAMP

    def test_duplicate_header_keeps_first_position_and_last_value(self):
        notification = ChangeNotification(
            kind="INSERT_ROW",
            row=3,
            headers=["Tag", "Name", "Tag"],
            values=["first", "Ada", "second"]
        )
        payload = _builder().build(notification)

        assert list(payload.data)[3:] == ["Tag", "Name"]
        assert payload["Tag"] == "second"

    def test_key_order_is_stable_for_same_headers(self, sample_edit_notification):
        builder = _builder()
        first = builder.build(ChangeNotification(**sample_edit_notification))
        sample_edit_notification["values"] = ["Bo", "bo@example.com", "Ops", "late", "Approved"]
        second = builder.build(ChangeNotification(**sample_edit_notification))
        assert list(first.data) == list(second.data)

    def test_default_clock_produces_utc_iso_timestamp(self, sample_edit_notification):
        payload = PayloadBuilder().build(ChangeNotification(**sample_edit_notification))
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", payload.timestamp)

    def test_invalid_watched_column(self):
        with pytest.raises(ValueError):
            PayloadBuilder(watched_column=0)


class TestNormalization:
    """Test cases for cell value normalization."""

    def test_scalars_pass_through(self):
        for value in ["text", 3, 2.5, True, False]:
            assert normalize_value(value) == value

    def test_blank_cell_becomes_empty_string(self):
        assert normalize_value(None) == ""

    def test_datetime_becomes_utc_iso(self):
        moment = datetime(2024, 1, 15, 12, 30, tzinfo=timezone(timedelta(hours=2)))
        assert normalize_value(moment) == "2024-01-15T10:30:00.000Z"

    def test_date_decimal_and_other_values(self):
        assert normalize_value(date(2024, 1, 15)) == "2024-01-15"
        assert normalize_value(Decimal("19.99")) == 19.99
        assert normalize_value(float("nan")) == "nan"
        assert normalize_value(["a", "b"]) == "['a', 'b']"

    def test_column_name_fallback(self):
        headers = ["Name", "", "Status"]
        assert column_name(headers, 1) == "Name"
        assert column_name(headers, 2) == "column_2"
        assert column_name(headers, 7) == "column_7"
