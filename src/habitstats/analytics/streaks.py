"""Attendance streaks and rest-day gaps.

A streak is a maximal run of consecutive calendar days that each have at
least one entry.  Only the presence of entries matters here, not their
values.  The engine never reads the wall clock: "today" is the most recent
entry date unless the caller passes ``as_of``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date

from habitstats.analytics.entries import EntryInput, distinct_dates, normalize


@dataclass
class Streak:
    """A run of consecutive active days."""

    start: date
    end: date
    length: int

    def __repr__(self) -> str:
        return f"Streak({self.start.isoformat()} → {self.end.isoformat()}, {self.length}d)"


@dataclass
class GapCount:
    """How often a rest gap of ``days`` days occurred between active days."""

    days: int  # 0 = back-to-back days
    count: int


def _runs(days: list[date]) -> list[Streak]:
    """Split sorted distinct dates into runs of consecutive days."""
    if not days:
        return []
    runs: list[Streak] = []
    run_start = prev = days[0]
    for day in days[1:]:
        if (day - prev).days != 1:
            runs.append(Streak(run_start, prev, (prev - run_start).days + 1))
            run_start = day
        prev = day
    runs.append(Streak(run_start, prev, (prev - run_start).days + 1))
    return runs


def current_streak(entries: EntryInput, as_of: date | None = None) -> int:
    """Length of the streak ending at the most recent entry date.

    Args:
        entries: Entries or raw records, any order.
        as_of: Optional reference day.  If the last entry is more than one
            day before it, the streak is considered broken and 0 is returned.

    Returns:
        Number of consecutive active days, 0 for empty input.
    """
    runs = _runs(distinct_dates(normalize(entries)))
    if not runs:
        return 0
    last = runs[-1]
    if as_of is not None and (as_of - last.end).days > 1:
        return 0
    return last.length


def longest_streak_run(entries: EntryInput) -> Streak | None:
    """The longest streak over the full history (earliest wins ties)."""
    best: Streak | None = None
    for run in _runs(distinct_dates(normalize(entries))):
        if best is None or run.length > best.length:
            best = run
    return best


def longest_streak(entries: EntryInput) -> int:
    """Length of the longest streak, 0 for empty input."""
    best = longest_streak_run(entries)
    return best.length if best is not None else 0


def rest_day_distribution(entries: EntryInput) -> list[GapCount]:
    """Histogram of rest-day gaps between consecutive active dates.

    For each pair of consecutive distinct entry dates the gap is the number
    of days strictly between them (0 for back-to-back days).  Rows are
    sorted by gap length.
    """
    days = distinct_dates(normalize(entries))
    gaps = Counter((b - a).days - 1 for a, b in zip(days, days[1:]))
    return [GapCount(days=g, count=n) for g, n in sorted(gaps.items())]
