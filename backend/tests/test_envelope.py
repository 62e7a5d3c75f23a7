"""
WebVault Backend — Response Envelope Tests
============================================

What we test:
    ✅ success / fail / error builders produce the exact shapes
    ✅ ISO and local timestamp formats
    ✅ pydantic error conversion into field-keyed messages
"""

import re
from datetime import datetime, timezone

from webvault.schemas.envelope import (
    ROOT_ERROR_KEY,
    error,
    fail,
    field_errors,
    format_timestamp,
    success,
)

MOMENT = datetime(2024, 5, 1, 8, 30, 15, 123000, tzinfo=timezone.utc)


class TestTimestamps:
    def test_iso_format_has_milliseconds_and_z(self):
        assert format_timestamp("iso", MOMENT) == "2024-05-01T08:30:15.123Z"

    def test_local_format_uses_configured_zone(self):
        # Asia/Shanghai is UTC+8 with no DST
        assert format_timestamp("local", MOMENT) == "2024-05-01 16:30:15"

    def test_naive_datetime_is_treated_as_utc(self):
        naive = datetime(2024, 1, 1, 0, 0, 0)
        assert format_timestamp("iso", naive) == "2024-01-01T00:00:00.000Z"

    def test_default_is_current_iso_time(self):
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", format_timestamp())


class TestBuilders:
    def test_success_shape(self):
        envelope = success({"x": 1}, message="ok", request_id="rid-1", timestamp="T")
        assert envelope.model_dump(by_alias=True) == {
            "status": "success",
            "code": 0,
            "message": "ok",
            "data": {"x": 1},
            "requestId": "rid-1",
            "timestamp": "T",
        }

    def test_fail_shape(self):
        envelope = fail(
            {"title": ["Title is required"]},
            message="Validation failed",
            request_id="rid-2",
            timestamp="T",
        )
        assert envelope.model_dump(by_alias=True) == {
            "status": "fail",
            "code": "validation_failed",
            "message": "Validation failed",
            "errors": {"title": ["Title is required"]},
            "requestId": "rid-2",
            "timestamp": "T",
        }

    def test_error_shape_has_no_errors_key(self):
        dumped = error("boom", code="internal_error", request_id="rid-3", timestamp="T").model_dump(
            by_alias=True
        )
        assert dumped == {
            "status": "error",
            "code": "internal_error",
            "message": "boom",
            "requestId": "rid-3",
            "timestamp": "T",
        }

    def test_builders_are_pure_given_explicit_inputs(self):
        first = success([1, 2], request_id="r", timestamp="T").model_dump()
        second = success([1, 2], request_id="r", timestamp="T").model_dump()
        assert first == second

    def test_missing_request_id_outside_a_request_is_none(self):
        assert success(timestamp="T").request_id is None


class TestFieldErrors:
    def test_strips_location_prefix_and_value_error_prefix(self):
        errors = field_errors(
            [
                {
                    "type": "value_error",
                    "loc": ("body", "adType"),
                    "msg": "Value error, adType is required when isAd is true",
                    "ctx": {"error": ValueError("adType is required when isAd is true")},
                },
                {"type": "missing", "loc": ("body", "title"), "msg": "Field required"},
            ]
        )
        assert errors == {
            "adType": ["adType is required when isAd is true"],
            "title": ["Field required"],
        }

    def test_model_level_error_goes_to_root(self):
        errors = field_errors(
            [
                {
                    "type": "value_error",
                    "loc": ("body",),
                    "msg": "Value error, At least one field must be provided",
                    "ctx": {"error": "At least one field must be provided"},
                }
            ]
        )
        assert errors == {ROOT_ERROR_KEY: ["At least one field must be provided"]}

    def test_nested_locations_are_dotted(self):
        errors = field_errors(
            [{"type": "missing", "loc": ("body", "items", 0, "websiteId"), "msg": "Field required"}]
        )
        assert errors == {"items.0.websiteId": ["Field required"]}

    def test_snake_case_locations_use_wire_names(self):
        errors = field_errors(
            [
                {
                    "type": "value_error",
                    "loc": ("body", "ad_type"),
                    "msg": "Value error, adType is required when isAd is true",
                    "ctx": {"error": ValueError("adType is required when isAd is true")},
                },
                {"type": "missing", "loc": ("body", "items", 0, "website_id"), "msg": "Field required"},
            ]
        )
        assert errors == {
            "adType": ["adType is required when isAd is true"],
            "items.0.websiteId": ["Field required"],
        }

    def test_root_key_is_left_alone(self):
        errors = field_errors([{"type": "value_error", "loc": ("_root",), "msg": "bad"}])
        assert list(errors) == [ROOT_ERROR_KEY]
