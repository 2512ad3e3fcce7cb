# tests/test_alert_normalizer.py
"""Unit tests for raw alert normalization."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime
from app.services.alert_normalizer import (
    normalize_alert, has_category, map_severity, map_status, LOCATION_MAX_LENGTH,
)
from app.utils.time_utils import parse_timestamp


class TestCategoryMapping:
    def test_types_array_mapped_case_insensitively(self):
        event = normalize_alert({"types": ["intrusion", "Fire", "CROWDED"], "severity": "high"})
        assert event.types == ["INTRUSION", "FIRE", "CROWDED"]

    def test_unknown_category_becomes_other(self):
        event = normalize_alert({"types": ["intrusion", "alien-landing"]})
        assert event.types == ["INTRUSION", "OTHER"]

    def test_legacy_type_wrapped(self):
        assert normalize_alert({"type": "movement"}).types == ["MOVEMENT"]

    def test_types_array_wins_over_legacy_type(self):
        assert normalize_alert({"types": ["flood"], "type": "fire"}).types == ["FLOOD"]

    def test_empty_types_falls_back_to_legacy(self):
        assert normalize_alert({"types": [], "type": "traffic"}).types == ["TRAFFIC"]

    def test_missing_category_defaults_to_other(self):
        assert normalize_alert({}).types == ["OTHER"]
        assert normalize_alert({"types": []}).types == ["OTHER"]
        assert normalize_alert({"types": None, "type": ""}).types == ["OTHER"]

    def test_none_is_a_real_category(self):
        assert normalize_alert({"types": ["none"]}).types == ["NONE"]

    def test_has_category(self):
        assert has_category({"types": ["fire"]})
        assert has_category({"type": "fire"})
        assert not has_category({"types": []})
        assert not has_category({})


class TestSeverityAndStatus:
    def test_known_severities(self):
        for raw, expected in [("critical", "CRITICAL"), ("HIGH", "HIGH"), (" Medium ", "MEDIUM"), ("low", "LOW")]:
            assert map_severity(raw) == expected

    def test_unknown_severity_is_low(self):
        for raw in ["urgent", "", None, 5, "severe"]:
            assert map_severity(raw) == "LOW"

    def test_known_statuses(self):
        assert map_status("investigating") == "INVESTIGATING"
        assert map_status("Resolved") == "RESOLVED"

    def test_unknown_or_missing_status_is_unresolved(self):
        for raw in ["closed", None, "", 1]:
            assert map_status(raw) == "UNRESOLVED"
        assert normalize_alert({"severity": "high"}).status == "UNRESOLVED"


class TestOtherFields:
    def test_timestamp_with_z_becomes_naive_utc(self):
        event = normalize_alert({"timestamp": "2025-03-15T08:24:00Z"})
        assert event.timestamp == datetime(2025, 3, 15, 8, 24)

    def test_timestamp_with_offset_converted_to_utc(self):
        event = normalize_alert({"timestamp": "2025-03-15T10:24:00+02:00"})
        assert event.timestamp == datetime(2025, 3, 15, 8, 24)

    def test_bad_timestamp_uses_now(self):
        before = datetime.utcnow()
        event = normalize_alert({"timestamp": "yesterday-ish"})
        assert before <= event.timestamp <= datetime.utcnow()

    def test_location_and_description_trimmed(self):
        event = normalize_alert({"location": "  North Perimeter ", "description": " fence "})
        assert event.location == "North Perimeter"
        assert event.description == "fence"

    def test_sensor_data_passed_through(self):
        data = {"video": True, "weather": {"temp": 18, "conditions": "Clear"}}
        assert normalize_alert({"sensorData": data}).sensor_data == data

    def test_non_dict_input_never_raises(self):
        event = normalize_alert("not an alert")
        assert event.types == ["OTHER"]
        assert event.severity == "LOW"
        assert event.status == "UNRESOLVED"
        assert event.sensor_data is None


class TestOutOfRangeInput:
    def test_offset_past_datetime_range_uses_now(self):
        for stamp in ["0001-01-01T00:00:00+05:00", "9999-12-31T23:59:59-05:00"]:
            before = datetime.utcnow()
            event = normalize_alert({"types": ["fire"], "severity": "high",
                                     "location": "Gate", "timestamp": stamp})
            assert before <= event.timestamp <= datetime.utcnow()
            assert event.types == ["FIRE"]

    def test_parse_timestamp_returns_none_on_overflow(self):
        assert parse_timestamp("0001-01-01T00:00:00+05:00") is None
        assert parse_timestamp("9999-12-31T23:59:59-05:00") is None
        assert parse_timestamp("2025-03-15T08:24:00Z") == datetime(2025, 3, 15, 8, 24)

    def test_long_location_truncated(self):
        event = normalize_alert({"location": "Perimeter " * 100})
        assert len(event.location) <= LOCATION_MAX_LENGTH
        assert event.location.startswith("Perimeter Perimeter")
        assert not event.location.endswith(" ")

    def test_blank_location_defaults(self):
        assert normalize_alert({"location": "   "}).location == "Unknown location"
