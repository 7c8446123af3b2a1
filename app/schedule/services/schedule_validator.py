"""
Structural validation of schedule configs.

Runs before any date math so that incomplete recurrence specs are
reported to the authoring coach instead of producing bogus windows.
"""

import re
from typing import Any, Dict, Optional, Tuple, Union

import pytz
from pydantic import ValidationError

from app.exceptions import InvalidScheduleConfig
from app.schedule.models import (
    WEEKDAYS,
    CloseKind,
    CustomUnit,
    Frequency,
    OpenKind,
    OpenWindow,
    ScheduleConfig,
)

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time(value: str) -> Tuple[int, int]:
    """Parse an HH:MM string into (hour, minute)."""
    match = _TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    return int(match.group(1)), int(match.group(2))


def resolve_open_kind(window: OpenWindow) -> str:
    """Opening kind, inferred from nthDay when the author left it out."""
    if window.kind:
        return window.kind
    if window.nthDay is not None:
        return OpenKind.NTH_DAY.value
    return OpenKind.SPECIFIC_DAY.value


class ScheduleValidator:
    """
    Validates the shape of a ScheduleConfig.

    Field keys of the error map are "frequency", "openWindow",
    "closeWindow", "customConfig" and "timezone".
    """

    FREQUENCIES = [f.value for f in Frequency]
    OPEN_KINDS = [k.value for k in OpenKind]
    CLOSE_KINDS = [k.value for k in CloseKind]
    CUSTOM_UNITS = [u.value for u in CustomUnit]

    MAX_NTH_DAY = 31

    @classmethod
    def parse(cls, data: Union[ScheduleConfig, Dict[str, Any]]) -> ScheduleConfig:
        """
        Coerce raw data into a ScheduleConfig.

        Raises:
            InvalidScheduleConfig: Data cannot be parsed at all
        """
        if isinstance(data, ScheduleConfig):
            return data
        try:
            return ScheduleConfig.model_validate(data)
        except ValidationError as e:
            field_errors: Dict[str, str] = {}
            for error in e.errors():
                key = str(error["loc"][0]) if error["loc"] else "config"
                field_errors.setdefault(key, error["msg"])
            raise InvalidScheduleConfig(field_errors)

    @classmethod
    def validate(cls, config: ScheduleConfig) -> Dict[str, str]:
        """
        Collect structural errors.

        Args:
            config: Parsed schedule config

        Returns:
            dict of field -> message, empty when the config is usable
        """
        errors: Dict[str, str] = {}

        if not config.frequency:
            errors["frequency"] = "Please select a frequency"
            return errors
        if config.frequency not in cls.FREQUENCIES:
            errors["frequency"] = f"Unknown frequency: {config.frequency}"
            return errors

        if config.timezone and config.timezone not in pytz.all_timezones_set:
            errors["timezone"] = f"Unknown timezone: {config.timezone}"

        frequency = Frequency(config.frequency)

        open_error = cls._validate_open(config, frequency)
        if open_error:
            errors["openWindow"] = open_error

        close_error = cls._validate_close(config, frequency)
        if close_error:
            errors["closeWindow"] = close_error

        if frequency == Frequency.CUSTOM:
            custom_error = cls._validate_custom(config)
            if custom_error:
                errors["customConfig"] = custom_error

        return errors

    @classmethod
    def ensure_valid(cls, data: Union[ScheduleConfig, Dict[str, Any]]) -> ScheduleConfig:
        """
        Parse and validate a config, rejecting structurally broken ones.

        Raises:
            InvalidScheduleConfig: With every field error found
        """
        config = cls.parse(data)
        errors = cls.validate(config)
        if errors:
            raise InvalidScheduleConfig(errors)
        return config

    @classmethod
    def _validate_open(cls, config: ScheduleConfig, frequency: Frequency) -> Optional[str]:
        window = config.openWindow

        if frequency == Frequency.DAILY:
            if window and window.time and not _TIME_PATTERN.match(window.time):
                return "Opening time must use HH:MM"
            return None

        if window is None:
            return "Please configure when the check-in opens"
        if not window.time:
            return "Please select an opening time"
        if not _TIME_PATTERN.match(window.time):
            return "Opening time must use HH:MM"

        kind = resolve_open_kind(window)
        if kind not in cls.OPEN_KINDS:
            return f"Unknown opening type: {kind}"

        if kind == OpenKind.SPECIFIC_DAY.value:
            # Custom cadences may leave the day to customConfig.startDay
            if window.day:
                if window.day not in WEEKDAYS:
                    return f"Unknown opening day: {window.day}"
            elif frequency != Frequency.CUSTOM:
                return "Please select an opening day"
        if kind == OpenKind.NTH_DAY.value:
            if window.nthDay is None:
                return "Please select the day of the month"
            if not 1 <= window.nthDay <= cls.MAX_NTH_DAY:
                return f"Day of the month must be between 1 and {cls.MAX_NTH_DAY}"

        if frequency in (Frequency.WEEKLY, Frequency.FORTNIGHTLY) and kind != OpenKind.SPECIFIC_DAY.value:
            return f"{frequency.value.capitalize()} check-ins must open on a specific day"
        if frequency == Frequency.MONTHLY and kind == OpenKind.SPECIFIC_DAY.value:
            return "Monthly check-ins must open on a day of the month"

        return None

    @classmethod
    def _validate_close(cls, config: ScheduleConfig, frequency: Frequency) -> Optional[str]:
        window = config.closeWindow

        if window is None:
            if frequency in (Frequency.WEEKLY, Frequency.FORTNIGHTLY, Frequency.MONTHLY):
                return "Please configure when the check-in closes"
            return None

        kind = window.kind
        if kind is None:
            if frequency == Frequency.DAILY and window.time:
                if not _TIME_PATTERN.match(window.time):
                    return "Closing time must use HH:MM"
                return None
            return "Please select how the check-in closes"
        if kind not in cls.CLOSE_KINDS:
            return f"Unknown closing type: {kind}"

        if kind == CloseKind.SPECIFIC_DAY.value:
            if not window.day:
                return "Please select a closing day"
            if window.day not in WEEKDAYS:
                return f"Unknown closing day: {window.day}"
            if not window.time:
                return "Please select a closing time"
            if not _TIME_PATTERN.match(window.time):
                return "Closing time must use HH:MM"

        if kind == CloseKind.HOURS_AFTER_OPEN.value:
            if window.hoursAfterOpen is None:
                return "Please enter how many hours the check-in stays open"
            if window.hoursAfterOpen <= 0:
                return "Hours after open must be greater than 0"

        return None

    @classmethod
    def _validate_custom(cls, config: ScheduleConfig) -> Optional[str]:
        custom = config.customConfig
        if custom is None:
            return "Please configure the custom interval"
        if custom.value is None or custom.value < 1:
            return "Custom interval must be at least 1"
        if custom.unit not in cls.CUSTOM_UNITS:
            return f"Custom interval unit must be one of: {', '.join(cls.CUSTOM_UNITS)}"
        if custom.startDay and custom.startDay not in WEEKDAYS:
            return f"Unknown start day: {custom.startDay}"
        return None
