"""
Reporting-period arithmetic.

Every reporting endpoint scopes its queries to "the current day / week /
month / year" of the clinic and compares it with the period before.  All
of that date arithmetic lives here so the views only ask for bounds.

Boundaries are computed in the clinic frame: the reference instant is
shifted forward by the clinic offset, calendar fields are read from the
shifted value, and the resulting wall-clock boundaries are returned as
UTC instants without shifting them back.  Appointment schedules are
stored in the same frame, so the bounds compare against them directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import Iterable, Optional

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.exceptions import ValidationError

GRANULARITIES = ('day', 'week', 'month', 'year')

WEEKDAY_LABELS = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
MONTH_LABELS = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]
YEAR_SLOTS = 5

_LAST_MS = timedelta(days=1) - timedelta(milliseconds=1)


@dataclass(frozen=True)
class ReportingPeriod:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class PeriodBounds:
    current_start: datetime
    current_end: datetime
    previous_start: datetime
    previous_end: datetime

    @property
    def current(self) -> ReportingPeriod:
        return ReportingPeriod(self.current_start, self.current_end)

    @property
    def previous(self) -> ReportingPeriod:
        return ReportingPeriod(self.previous_start, self.previous_end)


def default_offset() -> int:
    return int(getattr(settings, 'CLINIC_TZ_OFFSET_MINUTES', 0))


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=dt_timezone.utc)


def _ensure_aware(value: datetime) -> datetime:
    if timezone.is_naive(value):
        return value.replace(tzinfo=dt_timezone.utc)
    return value


def shift(reference: datetime, tz_offset_minutes: Optional[int] = None) -> datetime:
    """Return ``reference`` moved into the clinic frame."""
    offset = default_offset() if tz_offset_minutes is None else tz_offset_minutes
    return _ensure_aware(reference).astimezone(dt_timezone.utc) + timedelta(minutes=offset)


def _add_months(start: datetime, months: int) -> datetime:
    index = start.year * 12 + (start.month - 1) + months
    return _utc(index // 12, index % 12 + 1, 1)


def compute_bounds(
    reference: datetime,
    granularity: str,
    tz_offset_minutes: Optional[int] = None,
) -> PeriodBounds:
    """Current and previous period boundaries around ``reference``.

    Weeks run Sunday 00:00:00.000 to Saturday 23:59:59.999.  Months and
    years use calendar boundaries.  The previous period is the one
    immediately before the current one with the same granularity.
    """
    if granularity not in GRANULARITIES:
        raise ValidationError({'period': f'unsupported granularity: {granularity}'})

    local = shift(reference, tz_offset_minutes)
    day_start = _utc(local.year, local.month, local.day)

    if granularity == 'day':
        start = day_start
        end = start + _LAST_MS
        prev_start = start - timedelta(days=1)
        prev_end = start - timedelta(milliseconds=1)
    elif granularity == 'week':
        # datetime.weekday(): Monday == 0 ... Sunday == 6
        start = day_start - timedelta(days=(local.weekday() + 1) % 7)
        end = start + timedelta(days=6) + _LAST_MS
        prev_start = start - timedelta(days=7)
        prev_end = end - timedelta(days=7)
    elif granularity == 'month':
        start = _utc(local.year, local.month, 1)
        end = _add_months(start, 1) - timedelta(milliseconds=1)
        prev_start = _add_months(start, -1)
        prev_end = start - timedelta(milliseconds=1)
    else:
        start = _utc(local.year, 1, 1)
        end = _utc(local.year + 1, 1, 1) - timedelta(milliseconds=1)
        prev_start = _utc(local.year - 1, 1, 1)
        prev_end = start - timedelta(milliseconds=1)

    return PeriodBounds(start, end, prev_start, prev_end)


def day_bounds(reference: datetime, tz_offset_minutes: Optional[int] = None) -> ReportingPeriod:
    return compute_bounds(reference, 'day', tz_offset_minutes).current


def pct_change(current: int, previous: int) -> float:
    """Period-over-period change in percent, rounded to one decimal."""
    if previous == 0:
        return 100.0
    return round((current - previous) / previous * 100, 1)


def period_summary(current: int, previous: int, period: str) -> dict:
    return {
        'totalCurrent': current,
        'totalPrevious': previous,
        'percentage': pct_change(current, previous),
        'period': period,
    }


# ---------------------------------------------------------------------------
# Histograms
# ---------------------------------------------------------------------------

def weekday_histogram(values: Iterable[datetime], tz_offset_minutes: int = 0) -> dict:
    data = [0] * 7
    for value in values:
        local = shift(value, tz_offset_minutes)
        data[(local.weekday() + 1) % 7] += 1
    return {'labels': list(WEEKDAY_LABELS), 'data': data}


def month_histogram(values: Iterable[datetime], tz_offset_minutes: int = 0) -> dict:
    data = [0] * 12
    for value in values:
        data[shift(value, tz_offset_minutes).month - 1] += 1
    return {'labels': list(MONTH_LABELS), 'data': data}


def year_histogram(values: Iterable[datetime], current_year: int, tz_offset_minutes: int = 0) -> dict:
    first = current_year - YEAR_SLOTS + 1
    data = [0] * YEAR_SLOTS
    for value in values:
        index = shift(value, tz_offset_minutes).year - first
        if 0 <= index < YEAR_SLOTS:
            data[index] += 1
    return {'labels': [str(first + i) for i in range(YEAR_SLOTS)], 'data': data}


def year_span(current_year: int) -> ReportingPeriod:
    """First instant of the oldest histogram year to the end of ``current_year``."""
    first = current_year - YEAR_SLOTS + 1
    return ReportingPeriod(
        _utc(first, 1, 1),
        _utc(current_year + 1, 1, 1) - timedelta(milliseconds=1),
    )


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def parse_instant(value, field: str = 'date') -> datetime:
    """Parse an ISO date or datetime query value into an aware UTC datetime."""
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, date):
        return _utc(value.year, value.month, value.day)
    raw = (value or '').strip()
    try:
        parsed = parse_datetime(raw)
        if parsed is None:
            d = parse_date(raw)
            if d is not None:
                return _utc(d.year, d.month, d.day)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({field: f'invalid date: {value!r}'})
    return _ensure_aware(parsed).astimezone(dt_timezone.utc)


def parse_wall_clock(date_value: str, time_value: str) -> datetime:
    """Combine a clinic ``date`` and ``HH:MM`` time into a clinic-frame instant."""
    try:
        d = parse_date(date_value.strip())
        parts = time_value.strip().split(':')
        hour, minute = int(parts[0]), int(parts[1])
        if d is None:
            raise ValueError(date_value)
        return datetime(d.year, d.month, d.day, hour, minute, tzinfo=dt_timezone.utc)
    except (AttributeError, IndexError, ValueError):
        raise ValidationError({'schedule': 'Invalid date or time format'})


def to_true_instant(value: datetime, tz_offset_minutes: Optional[int] = None) -> datetime:
    """Convert a clinic-frame value back to the real UTC instant for output."""
    offset = default_offset() if tz_offset_minutes is None else tz_offset_minutes
    return _ensure_aware(value) - timedelta(minutes=offset)


def iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    value = _ensure_aware(value).astimezone(dt_timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"
