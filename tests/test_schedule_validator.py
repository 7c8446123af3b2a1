"""Tests for structural schedule config validation."""

import pytest

from app.exceptions import InvalidScheduleConfig
from app.schedule.models import CloseKind, ScheduleConfig
from app.schedule.services.schedule_validator import ScheduleValidator, parse_time, resolve_open_kind


WEEKLY = {
    "frequency": "weekly",
    "openWindow": {"kind": "specific_day", "day": "monday", "time": "09:00"},
    "closeWindow": {"kind": "specific_day", "day": "tuesday", "time": "17:00"},
}


def _errors(data):
    return ScheduleValidator.validate(ScheduleValidator.parse(data))


# ─────────────────────────────────────────────────────────────────
# parse_time
# ─────────────────────────────────────────────────────────────────

class TestParseTime:

    def test_parses_hours_and_minutes(self):
        assert parse_time("09:30") == (9, 30)
        assert parse_time("23:59") == (23, 59)

    @pytest.mark.parametrize("value", ["9:30", "24:00", "12:60", "", None, "noon"])
    def test_rejects_malformed_times(self, value):
        with pytest.raises(ValueError):
            parse_time(value)


# ─────────────────────────────────────────────────────────────────
# Valid configs
# ─────────────────────────────────────────────────────────────────

class TestValidConfigs:

    def test_weekly_specific_days(self):
        assert _errors(WEEKLY) == {}

    def test_monthly_nth_day_hours_after_open(self):
        assert _errors({
            "frequency": "monthly",
            "openWindow": {"kind": "nth_day", "nthDay": 1, "time": "09:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 72},
        }) == {}

    def test_monthly_last_day(self):
        assert _errors({
            "frequency": "monthly",
            "openWindow": {"kind": "last_day", "time": "18:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 24},
        }) == {}

    def test_daily_needs_no_windows(self):
        assert _errors({"frequency": "daily"}) == {}

    def test_custom_without_close_window(self):
        assert _errors({
            "frequency": "custom",
            "openWindow": {"time": "08:00"},
            "customConfig": {"value": 3, "unit": "days"},
        }) == {}

    def test_after_hours_alias_and_type_key(self):
        config = ScheduleValidator.ensure_valid({
            "frequency": "weekly",
            "openWindow": {"type": "specific_day", "day": "Monday", "time": "09:00"},
            "closeWindow": {"type": "after_hours", "hoursAfterOpen": 24},
        })

        assert config.closeWindow.kind == CloseKind.HOURS_AFTER_OPEN.value
        assert config.openWindow.day == "monday"

    def test_nth_day_inferred_without_kind(self):
        config = ScheduleConfig.model_validate({
            "frequency": "monthly",
            "openWindow": {"nthDay": 15, "time": "09:00"},
        })

        assert resolve_open_kind(config.openWindow) == "nth_day"

    def test_ensure_valid_returns_parsed_config(self):
        config = ScheduleValidator.ensure_valid(WEEKLY)

        assert isinstance(config, ScheduleConfig)
        assert config.frequency == "weekly"


# ─────────────────────────────────────────────────────────────────
# Invalid configs
# ─────────────────────────────────────────────────────────────────

class TestInvalidConfigs:

    def test_missing_frequency(self):
        assert _errors({}) == {"frequency": "Please select a frequency"}

    def test_unknown_frequency(self):
        assert "frequency" in _errors({"frequency": "hourly"})

    def test_weekly_without_open_window(self):
        errors = _errors({"frequency": "weekly", "closeWindow": WEEKLY["closeWindow"]})

        assert errors == {"openWindow": "Please configure when the check-in opens"}

    def test_weekly_without_close_window(self):
        errors = _errors({"frequency": "weekly", "openWindow": WEEKLY["openWindow"]})

        assert errors == {"closeWindow": "Please configure when the check-in closes"}

    def test_weekly_open_needs_day(self):
        errors = _errors({**WEEKLY, "openWindow": {"kind": "specific_day", "time": "09:00"}})

        assert errors["openWindow"] == "Please select an opening day"

    def test_weekly_rejects_nth_day_open(self):
        errors = _errors({**WEEKLY, "openWindow": {"kind": "nth_day", "nthDay": 3, "time": "09:00"}})

        assert errors["openWindow"] == "Weekly check-ins must open on a specific day"

    def test_monthly_rejects_weekday_open(self):
        errors = _errors({
            "frequency": "monthly",
            "openWindow": {"kind": "specific_day", "day": "monday", "time": "09:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 24},
        })

        assert errors["openWindow"] == "Monthly check-ins must open on a day of the month"

    def test_nth_day_out_of_range(self):
        errors = _errors({
            "frequency": "monthly",
            "openWindow": {"kind": "nth_day", "nthDay": 32, "time": "09:00"},
            "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 24},
        })

        assert errors["openWindow"] == "Day of the month must be between 1 and 31"

    def test_hours_after_open_must_be_positive(self):
        errors = _errors({**WEEKLY, "closeWindow": {"kind": "hours_after_open", "hoursAfterOpen": 0}})

        assert errors["closeWindow"] == "Hours after open must be greater than 0"

    def test_close_specific_day_needs_time(self):
        errors = _errors({**WEEKLY, "closeWindow": {"kind": "specific_day", "day": "friday"}})

        assert errors["closeWindow"] == "Please select a closing time"

    def test_custom_needs_interval(self):
        errors = _errors({"frequency": "custom", "openWindow": {"time": "08:00"}})

        assert errors == {"customConfig": "Please configure the custom interval"}

    def test_custom_rejects_unknown_unit(self):
        errors = _errors({
            "frequency": "custom",
            "openWindow": {"time": "08:00"},
            "customConfig": {"value": 2, "unit": "years"},
        })

        assert errors["customConfig"].startswith("Custom interval unit must be one of")

    def test_unknown_timezone(self):
        errors = _errors({**WEEKLY, "timezone": "Mars/Olympus_Mons"})

        assert errors == {"timezone": "Unknown timezone: Mars/Olympus_Mons"}

    def test_reports_every_field_at_once(self):
        errors = _errors({"frequency": "weekly", "timezone": "Nowhere/Land"})

        assert set(errors) == {"openWindow", "closeWindow", "timezone"}


# ─────────────────────────────────────────────────────────────────
# Raised errors
# ─────────────────────────────────────────────────────────────────

class TestInvalidScheduleConfigError:

    def test_ensure_valid_raises_with_field_errors(self):
        with pytest.raises(InvalidScheduleConfig) as exc_info:
            ScheduleValidator.ensure_valid({"frequency": "weekly"})

        error = exc_info.value
        assert error.status_code == 422
        assert error.code == "INVALID_SCHEDULE_CONFIG"
        assert set(error.field_errors) == {"openWindow", "closeWindow"}
        assert error.detail["details"]["fields"] == error.field_errors

    def test_unparseable_config_is_reported_per_field(self):
        with pytest.raises(InvalidScheduleConfig) as exc_info:
            ScheduleValidator.parse({"frequency": "weekly", "openWindow": "monday"})

        assert "openWindow" in exc_info.value.field_errors
