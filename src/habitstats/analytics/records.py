"""Personal records: value extremes, time-of-day extremes, busiest day, longest break."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, time

from habitstats.analytics.entries import (
    DEFAULT_FIELD,
    EntryInput,
    MetricEntry,
    distinct_dates,
    normalize,
)


@dataclass
class Extreme:
    value: float
    date: date


@dataclass
class Extremes:
    """All-time minimum and maximum of a field."""

    min: Extreme | None = None
    max: Extreme | None = None

    def __repr__(self) -> str:
        lo = f"{self.min.value}@{self.min.date.isoformat()}" if self.min else "none"
        hi = f"{self.max.value}@{self.max.date.isoformat()}" if self.max else "none"
        return f"Extremes(min={lo}, max={hi})"


@dataclass
class TimeRecord:
    """A time-of-day record (earliest or latest entry in the day)."""

    date: date
    time: time


@dataclass
class DayCount:
    date: date
    count: int


@dataclass
class Break:
    """Largest gap between two consecutive active dates."""

    start: date  # last active day before the break
    end: date  # first active day after it
    days: int  # calendar-day difference end - start


@dataclass
class PersonalRecords:
    """Everything the personal-records card shows, in one bundle."""

    earliest: TimeRecord | None = None
    latest: TimeRecord | None = None
    busiest_day: DayCount | None = None
    longest_break: Break | None = None


def all_time_extremes(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
) -> Extremes:
    """Global min and max of *field*.  Ties go to the earliest date."""
    result = Extremes()
    for entry in normalize(entries):
        value = entry.get(field)
        if value is None:
            continue
        if result.min is None or value < result.min.value:
            result.min = Extreme(value=value, date=entry.date)
        if result.max is None or value > result.max.value:
            result.max = Extreme(value=value, date=entry.date)
    return result


def _timed(entries: EntryInput) -> list[MetricEntry]:
    return [e for e in normalize(entries) if e.time is not None]


def earliest_checkin(entries: EntryInput) -> TimeRecord | None:
    """Entry with the smallest time of day, regardless of date."""
    best: MetricEntry | None = None
    for entry in _timed(entries):
        if best is None or entry.time < best.time:
            best = entry
    return TimeRecord(best.date, best.time) if best is not None else None


def latest_checkin(entries: EntryInput) -> TimeRecord | None:
    """Entry with the largest time of day, regardless of date."""
    best: MetricEntry | None = None
    for entry in _timed(entries):
        if best is None or entry.time > best.time:
            best = entry
    return TimeRecord(best.date, best.time) if best is not None else None


def busiest_day(entries: EntryInput) -> DayCount | None:
    """Date with the most entries.  Ties go to the earliest date."""
    counts = Counter(e.date for e in normalize(entries))
    best: DayCount | None = None
    for day in sorted(counts):
        if best is None or counts[day] > best.count:
            best = DayCount(date=day, count=counts[day])
    return best


def longest_break(entries: EntryInput) -> Break | None:
    """Largest gap between consecutive distinct entry dates.

    Returns None with fewer than two distinct dates.  Ties go to the
    earliest break.
    """
    days = distinct_dates(normalize(entries))
    best: Break | None = None
    for a, b in zip(days, days[1:]):
        gap = (b - a).days
        if best is None or gap > best.days:
            best = Break(start=a, end=b, days=gap)
    return best


def personal_records(entries: EntryInput) -> PersonalRecords:
    """Compute all time-of-day and attendance records in one call."""
    ordered = normalize(entries)
    return PersonalRecords(
        earliest=earliest_checkin(ordered),
        latest=latest_checkin(ordered),
        busiest_day=busiest_day(ordered),
        longest_break=longest_break(ordered),
    )
