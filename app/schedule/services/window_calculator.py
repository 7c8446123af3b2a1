"""
Check-in window calculation.

Turns a ScheduleConfig and a reference time into concrete open/close
instants. Calendar stepping happens on naive wall-clock datetimes in the
schedule timezone and is localized with pytz afterwards, so "one day
later" keeps the wall time across DST changes. hoursAfterOpen is elapsed
time measured from the open instant.
"""

import calendar
import itertools
import logging
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

import pytz

from app.exceptions import ScheduleComputationError
from app.schedule.models import (
    WEEKDAYS,
    CloseKind,
    CustomUnit,
    Frequency,
    OpenKind,
    ScheduleConfig,
    ScheduleWindow,
)
from app.schedule.services.schedule_validator import (
    ScheduleValidator,
    parse_time,
    resolve_open_kind,
)

logger = logging.getLogger(__name__)

# Phase reference for fortnightly and custom cadences without an explicit
# anchor. 2024-01-01 is a Monday.
EPOCH_ANCHOR = datetime(2024, 1, 1)

MAX_CORRECTIONS = 3

ConfigInput = Union[ScheduleConfig, Dict[str, Any]]


def add_months(value: datetime, months: int, day: Optional[int] = None) -> datetime:
    """Shift a naive datetime by whole months, clamping the day to the month length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(day or value.day, last_day))


def first_weekday_at(start: datetime, weekday: int, hour: int, minute: int, inclusive: bool) -> datetime:
    """
    First naive datetime on `weekday` at hour:minute at or after `start`.

    With inclusive=False the result is strictly after `start`; the search
    spans eight days so the same weekday a week later is always reachable.
    """
    for offset in range(8):
        day = start.date() + timedelta(days=offset)
        if day.weekday() != weekday:
            continue
        candidate = datetime.combine(day, time(hour, minute))
        if candidate > start or (inclusive and candidate == start):
            return candidate
    raise ScheduleComputationError(f"No {WEEKDAYS[weekday]} found after {start.isoformat()}")


def ensure_positive_window(
    open_instant: datetime,
    close_instant: datetime,
    shift: Callable[[datetime], datetime],
) -> datetime:
    """
    Return a close instant strictly after `open_instant`.

    A non-positive window is shifted forward one period at a time; valid
    configs never take this path.

    Raises:
        ScheduleComputationError: Still invalid after MAX_CORRECTIONS shifts
    """
    corrected = close_instant
    for _ in range(MAX_CORRECTIONS):
        if corrected > open_instant:
            return corrected
        logger.warning(
            f"Corrected non-positive window: open={open_instant.isoformat()} "
            f"close={corrected.isoformat()}"
        )
        corrected = shift(corrected)
    if corrected > open_instant:
        return corrected
    raise ScheduleComputationError()


class _CycleSequence:
    """
    Cycle opens of one validated config, indexed by integer k.

    Index 0 is the first open at or after the anchor. Implicitly anchored
    sequences accept negative indexes so that any reference time is
    covered.
    """

    def __init__(self, config: ScheduleConfig, tz, anchor_local: datetime, explicit_anchor: bool):
        self.config = config
        self.tz = tz
        self.frequency = Frequency(config.frequency)
        self.min_index = 0 if explicit_anchor else None

        open_window = config.openWindow
        if open_window and open_window.time:
            self.hour, self.minute = parse_time(open_window.time)
        else:
            self.hour, self.minute = 0, 0

        self.period_days: Optional[int] = None
        self.period_months: Optional[int] = None
        if self.frequency == Frequency.DAILY:
            self.period_days = 1
        elif self.frequency == Frequency.WEEKLY:
            self.period_days = 7
        elif self.frequency == Frequency.FORTNIGHTLY:
            self.period_days = 14
        elif self.frequency == Frequency.MONTHLY:
            self.period_months = 1
        else:
            custom = config.customConfig
            if custom.unit == CustomUnit.DAYS.value:
                self.period_days = custom.value
            elif custom.unit == CustomUnit.WEEKS.value:
                self.period_days = 7 * custom.value
            else:
                self.period_months = custom.value

        self.first_open = self._first_open(anchor_local)

    # ─────────────────────────────────────────────────────────────
    # Opens
    # ─────────────────────────────────────────────────────────────

    def _first_open(self, anchor: datetime) -> datetime:
        if self.frequency in (Frequency.WEEKLY, Frequency.FORTNIGHTLY):
            weekday = WEEKDAYS.index(self.config.openWindow.day)
            return first_weekday_at(anchor, weekday, self.hour, self.minute, inclusive=True)

        if self.frequency == Frequency.MONTHLY:
            candidate = self._monthly_open(anchor.year, anchor.month)
            if candidate < anchor:
                following = add_months(anchor.replace(day=1), 1)
                candidate = self._monthly_open(following.year, following.month)
            return candidate

        base = anchor.date()
        if self.frequency == Frequency.CUSTOM and self.config.customConfig.unit == CustomUnit.WEEKS.value:
            start_day = self._custom_start_day()
            if start_day is not None:
                base = base + timedelta(days=(start_day - base.weekday()) % 7)

        candidate = datetime.combine(base, time(self.hour, self.minute))
        if candidate < anchor:
            candidate = self.shift(candidate, 1)
        return candidate

    def _custom_start_day(self) -> Optional[int]:
        custom = self.config.customConfig
        if custom.startDay:
            return WEEKDAYS.index(custom.startDay)
        open_window = self.config.openWindow
        if open_window and open_window.day and open_window.day in WEEKDAYS:
            return WEEKDAYS.index(open_window.day)
        return None

    def _monthly_open(self, year: int, month: int) -> datetime:
        last_day = calendar.monthrange(year, month)[1]
        open_window = self.config.openWindow
        if resolve_open_kind(open_window) == OpenKind.LAST_DAY.value:
            day = last_day
        else:
            day = min(open_window.nthDay, last_day)
        return datetime(year, month, day, self.hour, self.minute)

    def shift(self, value: datetime, periods: int) -> datetime:
        """Move a naive local datetime by whole periods."""
        if self.period_days is not None:
            return value + timedelta(days=self.period_days * periods)
        return add_months(value, self.period_months * periods)

    def open_local(self, index: int) -> datetime:
        if self.frequency == Frequency.MONTHLY:
            month_start = add_months(self.first_open.replace(day=1), index)
            return self._monthly_open(month_start.year, month_start.month)
        if self.period_months is not None:
            return add_months(self.first_open, self.period_months * index, day=self.first_open.day)
        return self.first_open + timedelta(days=self.period_days * index)

    def open_instant(self, index: int) -> datetime:
        return self.localize(self.open_local(index))

    def estimate_index(self, now_local: datetime) -> int:
        if self.period_days is not None:
            elapsed = (now_local.date() - self.first_open.date()).days
            index = elapsed // self.period_days
        else:
            elapsed = (now_local.year - self.first_open.year) * 12 + now_local.month - self.first_open.month
            index = elapsed // self.period_months
        if self.min_index is not None:
            index = max(index, self.min_index)
        return index

    # ─────────────────────────────────────────────────────────────
    # Closes
    # ─────────────────────────────────────────────────────────────

    def close_instant(self, open_local: datetime, open_instant: datetime) -> datetime:
        close_window = self.config.closeWindow

        if close_window and close_window.kind == CloseKind.HOURS_AFTER_OPEN.value:
            elapsed = timedelta(hours=close_window.hoursAfterOpen)
            return (open_instant.astimezone(pytz.utc) + elapsed).astimezone(self.tz)

        if close_window and close_window.kind == CloseKind.SPECIFIC_DAY.value:
            hour, minute = parse_time(close_window.time)
            weekday = WEEKDAYS.index(close_window.day)
            return self.localize(first_weekday_at(open_local, weekday, hour, minute, inclusive=False))

        if close_window and close_window.time:
            hour, minute = parse_time(close_window.time)
            candidate = datetime.combine(open_local.date(), time(hour, minute))
            if candidate <= open_local:
                candidate += timedelta(days=1)
            return self.localize(candidate)

        if self.frequency == Frequency.CUSTOM:
            unit = self.config.customConfig.unit
            if unit == CustomUnit.MONTHS.value:
                return self.localize(add_months(open_local, 1))
            days = 7 if unit == CustomUnit.WEEKS.value else 1
            return self.localize(open_local + timedelta(days=days))

        # Daily default: start of the following day
        return self.localize(datetime.combine(open_local.date() + timedelta(days=1), time(0, 0)))

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def localize(self, naive: datetime) -> datetime:
        # Wall times skipped by a DST jump are normalized forward
        return self.tz.normalize(self.tz.localize(naive))

    def window(self, index: int) -> ScheduleWindow:
        open_local = self.open_local(index)
        open_instant = self.localize(open_local)
        close_instant = self.close_instant(open_local, open_instant)
        close_instant = ensure_positive_window(
            open_instant,
            close_instant,
            shift=lambda value: self.localize(self.shift(value.astimezone(self.tz).replace(tzinfo=None), 1)),
        )
        return ScheduleWindow(
            openInstant=open_instant,
            closeInstant=close_instant,
            timezone=self.tz.zone,
        )


class WindowCalculator:
    """
    Computes check-in windows for recurring schedules.
    """

    def __init__(self, default_timezone: str = "UTC"):
        """
        Initialize WindowCalculator.

        Args:
            default_timezone: IANA zone used when a config has no timezone
        """
        self._default_timezone = default_timezone

    def resolve_timezone(self, config: ScheduleConfig):
        """Timezone the schedule's wall times are expressed in."""
        return pytz.timezone(config.timezone or self._default_timezone)

    def compute_window(
        self,
        config: ConfigInput,
        now: datetime,
        anchor: Optional[datetime] = None,
    ) -> ScheduleWindow:
        """
        Get the window of the cycle containing `now`, or the next one after it.

        Args:
            config: Schedule config (validated before any date math)
            now: Reference time; naive values are read as schedule-local time
            anchor: Start of the cycle series; falls back to config.startDate

        Returns:
            ScheduleWindow with timezone-aware open/close instants

        Raises:
            InvalidScheduleConfig: Config is structurally incomplete
        """
        return next(self.iter_windows(config, now, anchor))

    def upcoming_windows(
        self,
        config: ConfigInput,
        now: datetime,
        count: int = 4,
        anchor: Optional[datetime] = None,
    ) -> List[ScheduleWindow]:
        """
        Get the next `count` windows, starting with the current cycle.

        Args:
            config: Schedule config
            now: Reference time
            count: Number of windows to return
            anchor: Optional cycle anchor

        Returns:
            List of consecutive windows
        """
        if count < 1:
            return []
        return list(itertools.islice(self.iter_windows(config, now, anchor), count))

    def iter_windows(
        self,
        config: ConfigInput,
        now: datetime,
        anchor: Optional[datetime] = None,
    ) -> Iterator[ScheduleWindow]:
        """Yield windows forever, starting with the cycle containing or following `now`."""
        sequence, now_local, now_instant = self._prepare(config, now, anchor)

        index = sequence.estimate_index(now_local)
        # Earlier cycles may still be open when windows outlast the period
        while (sequence.min_index is None or index > sequence.min_index) and \
                sequence.window(index - 1).closeInstant > now_instant:
            index -= 1
        while sequence.window(index).closeInstant <= now_instant:
            index += 1

        logger.debug(f"Resolved {sequence.frequency.value} cycle index {index} for {now_instant.isoformat()}")

        while True:
            yield sequence.window(index)
            index += 1

    def latest_window(
        self,
        config: ConfigInput,
        now: datetime,
        anchor: Optional[datetime] = None,
    ) -> Optional[ScheduleWindow]:
        """
        Get the most recently opened window, whether still open or closed.

        Args:
            config: Schedule config
            now: Reference time
            anchor: Optional cycle anchor

        Returns:
            ScheduleWindow, or None if no cycle has opened yet
        """
        sequence, now_local, now_instant = self._prepare(config, now, anchor)

        index = sequence.estimate_index(now_local)
        while sequence.open_instant(index + 1) <= now_instant:
            index += 1
        while sequence.open_instant(index) > now_instant:
            if sequence.min_index is not None and index <= sequence.min_index:
                return None
            index -= 1

        return sequence.window(index)

    def _prepare(self, config: ConfigInput, now: datetime, anchor: Optional[datetime]):
        config = ScheduleValidator.ensure_valid(config)
        tz = self.resolve_timezone(config)

        anchor = anchor or config.startDate
        if anchor is not None:
            sequence = _CycleSequence(config, tz, self._to_local(anchor, tz), explicit_anchor=True)
        else:
            sequence = _CycleSequence(config, tz, EPOCH_ANCHOR, explicit_anchor=False)

        now_local = self._to_local(now, tz)
        now_instant = sequence.localize(now_local) if now.tzinfo is None else now
        return sequence, now_local, now_instant

    @staticmethod
    def _to_local(value: datetime, tz) -> datetime:
        """Naive wall-clock time of `value` in `tz`."""
        if value.tzinfo is None:
            return value
        return value.astimezone(tz).replace(tzinfo=None)
