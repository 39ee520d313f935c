"""Calendar aggregation: daily/weekly/monthly buckets and time-of-day heatmaps.

All functions normalize their input first, so callers may pass entries (or
raw records) in any order.  Counting functions count entries; averaging
functions average the non-null values of a single field.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from datetime import date

import numpy as np

from habitstats.analytics.entries import (
    DEFAULT_FIELD,
    EntryInput,
    normalize,
    values_by_date,
)


# ---------------------------------------------------------------------------
# Labels and constants
# ---------------------------------------------------------------------------

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Heatmap slot width in minutes
SLOT_MINUTES = 30

# Coarse time-of-day buckets: (label, start hour inclusive, end hour exclusive).
# Anything outside these ranges is "late".
TIME_OF_DAY_BUCKETS = [
    ("morning", 6, 12),
    ("midday", 12, 15),
    ("afternoon", 15, 18),
    ("evening", 18, 21),
]
LATE_BUCKET = "late"
TIME_OF_DAY_LABELS = [label for label, _, _ in TIME_OF_DAY_BUCKETS] + [LATE_BUCKET]

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


@dataclass
class DailyValue:
    """A single per-date value (daily mean, moving average, fitted value)."""

    date: date
    avg: float

    def __repr__(self) -> str:
        return f"DailyValue({self.date.isoformat()}: {self.avg})"


@dataclass
class WeekCount:
    """Entry count for one ISO week."""

    week: str  # e.g. "2024-W05"
    start: date  # Monday of the ISO week
    count: int


@dataclass
class MonthCount:
    """Entry count for one calendar month."""

    month: str  # "YYYY-MM"
    count: int


@dataclass
class MonthSummary:
    """Mean/min/max/count of a field over one calendar month."""

    month: str
    avg: float
    min: float
    max: float
    count: int

    def __repr__(self) -> str:
        return (
            f"MonthSummary({self.month}: avg={self.avg}, "
            f"min={self.min}, max={self.max}, n={self.count})"
        )


@dataclass
class WeekdayCount:
    day: str  # Mon..Sun
    visits: int


@dataclass
class HeatmapCell:
    """Number of entries falling in one (weekday, 30-minute slot) cell."""

    day: str
    slot: str  # "HH:MM", start of the slot
    count: int


@dataclass
class TimeOfDayCount:
    bucket: str
    visits: int


@dataclass
class WeeklyRollingPoint:
    """Weekly count plus its trailing multi-week average."""

    week: str
    start: date
    count: int
    avg: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _check_month(month: str) -> None:
    if not _MONTH_RE.match(month):
        raise ValueError(f"month must be formatted YYYY-MM, got {month!r}")


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _week_key(day: date) -> tuple[int, int]:
    iso = day.isocalendar()
    return iso[0], iso[1]


def _week_label(year: int, week: int) -> str:
    return f"{year:04d}-W{week:02d}"


def slot_label(hour: int, minute: int) -> str:
    """Return the start of the 30-minute slot containing ``hour:minute``.

    Boundaries are inclusive-lower / exclusive-upper: 14:37 → "14:30",
    14:30 → "14:30", 14:29 → "14:00".
    """
    slot_start = (minute // SLOT_MINUTES) * SLOT_MINUTES
    return f"{hour:02d}:{slot_start:02d}"


def time_of_day_bucket(hour: int) -> str:
    """Map an hour (0-23) to its coarse time-of-day bucket label."""
    for label, start, end in TIME_OF_DAY_BUCKETS:
        if start <= hour < end:
            return label
    return LATE_BUCKET


# ---------------------------------------------------------------------------
# Daily / monthly averages
# ---------------------------------------------------------------------------


def daily_average(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
) -> list[DailyValue]:
    """Mean of the non-null values of *field* for each calendar date.

    Dates with no valid value are omitted rather than zero-filled.
    """
    groups = values_by_date(normalize(entries), field)
    return [
        DailyValue(date=day, avg=round(float(np.mean(vals)), 2))
        for day, vals in groups.items()
    ]


def monthly_average(
    entries: EntryInput,
    month: str,
    field: str = DEFAULT_FIELD,
) -> float | None:
    """Mean of all values of *field* in the ``YYYY-MM`` month, or None."""
    _check_month(month)
    vals = [
        v
        for e in normalize(entries)
        if _month_key(e.date) == month and (v := e.get(field)) is not None
    ]
    if not vals:
        return None
    return round(float(np.mean(vals)), 2)


def month_summary(
    entries: EntryInput,
    month: str,
    field: str = DEFAULT_FIELD,
) -> MonthSummary | None:
    """Average, extremes and count of *field* for one month, or None."""
    _check_month(month)
    vals = [
        v
        for e in normalize(entries)
        if _month_key(e.date) == month and (v := e.get(field)) is not None
    ]
    if not vals:
        return None
    arr = np.asarray(vals, dtype=np.float64)
    return MonthSummary(
        month=month,
        avg=round(float(np.mean(arr)), 2),
        min=float(np.min(arr)),
        max=float(np.max(arr)),
        count=len(vals),
    )


def months(entries: EntryInput) -> list[str]:
    """Sorted distinct ``YYYY-MM`` months that have at least one entry."""
    return sorted({_month_key(e.date) for e in normalize(entries)})


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------


def weekly_count(entries: EntryInput) -> list[WeekCount]:
    """Entries per ISO week (Monday start), in chronological order."""
    counts = Counter(_week_key(e.date) for e in normalize(entries))
    return [
        WeekCount(
            week=_week_label(year, week),
            start=date.fromisocalendar(year, week, 1),
            count=n,
        )
        for (year, week), n in sorted(counts.items())
    ]


def monthly_count(entries: EntryInput) -> list[MonthCount]:
    """Entries per calendar month, in chronological order."""
    counts = Counter(_month_key(e.date) for e in normalize(entries))
    return [MonthCount(month=m, count=n) for m, n in sorted(counts.items())]


def count_in_month(entries: EntryInput, month: str) -> int:
    """Number of entries dated within the ``YYYY-MM`` month."""
    _check_month(month)
    return sum(1 for e in normalize(entries) if _month_key(e.date) == month)


def average_per_week(entries: EntryInput) -> float:
    """Entries per week over the span from first to last entry date.

    Spans shorter than a week count as one week.  0.0 for empty input.
    """
    ordered = normalize(entries)
    if not ordered:
        return 0.0
    span_days = (ordered[-1].date - ordered[0].date).days
    weeks = max(1.0, span_days / 7.0)
    return round(len(ordered) / weeks, 1)


def rolling_weekly_average(
    entries: EntryInput,
    window_weeks: int = 4,
) -> list[WeeklyRollingPoint]:
    """Weekly counts with a trailing average over up to *window_weeks* rows.

    Only weeks that contain entries produce a row, and the average runs over
    those rows (a week without entries does not pull the average down).
    """
    if window_weeks < 1:
        raise ValueError("window_weeks must be >= 1")

    weeks = weekly_count(entries)
    points: list[WeeklyRollingPoint] = []
    for i, wk in enumerate(weeks):
        window = weeks[max(0, i - window_weeks + 1):i + 1]
        avg = sum(w.count for w in window) / len(window)
        points.append(WeeklyRollingPoint(
            week=wk.week,
            start=wk.start,
            count=wk.count,
            avg=round(avg, 2),
        ))
    return points


# ---------------------------------------------------------------------------
# Weekday / time-of-day distributions
# ---------------------------------------------------------------------------


def weekday_distribution(entries: EntryInput) -> list[WeekdayCount]:
    """Entries per weekday.  Always seven rows, Monday first."""
    counts = [0] * 7
    for e in normalize(entries):
        counts[e.date.weekday()] += 1
    return [WeekdayCount(day=label, visits=n) for label, n in zip(WEEKDAY_LABELS, counts)]


def time_bucket_heatmap(entries: EntryInput) -> list[HeatmapCell]:
    """Count entries per (weekday, 30-minute slot).

    Entries without a time are skipped.  Only non-empty cells are returned,
    ordered by weekday (Monday first) and then slot.
    """
    counts: Counter[tuple[int, str]] = Counter()
    for e in normalize(entries):
        if e.time is None:
            continue
        counts[(e.date.weekday(), slot_label(e.time.hour, e.time.minute))] += 1

    return [
        HeatmapCell(day=WEEKDAY_LABELS[dow], slot=slot, count=n)
        for (dow, slot), n in sorted(counts.items())
    ]


def time_of_day_distribution(entries: EntryInput) -> list[TimeOfDayCount]:
    """Entries per coarse time-of-day bucket.  Always five rows."""
    counts = Counter(
        time_of_day_bucket(e.time.hour)
        for e in normalize(entries)
        if e.time is not None
    )
    return [TimeOfDayCount(bucket=label, visits=counts.get(label, 0)) for label in TIME_OF_DAY_LABELS]


def most_common_time_of_day(entries: EntryInput) -> str | None:
    """Bucket with the most timed entries; ties go to the earlier bucket."""
    best: TimeOfDayCount | None = None
    for row in time_of_day_distribution(entries):
        if row.visits > 0 and (best is None or row.visits > best.visits):
            best = row
    return best.bucket if best is not None else None
