"""Trend analysis: moving averages, direction, volatility and week-over-week deltas.

Windows are measured in calendar days, not in entry counts: a 7-day window
ending on a date covers that date and the six before it, and sparse data
simply yields fewer samples.  Nothing is interpolated.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

import numpy as np

from habitstats.analytics.aggregate import DailyValue
from habitstats.analytics.entries import (
    DEFAULT_FIELD,
    EntryInput,
    normalize,
    values_by_date,
)


class TrendDirection(str, Enum):
    """Direction of the recent moving-average trend."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


# ---------------------------------------------------------------------------
# Tunables
# ---------------------------------------------------------------------------

DEFAULT_WINDOW_DAYS = 7
VOLATILITY_WINDOW_DAYS = 14

# How far back trend_direction looks for its reference moving-average point
TREND_LOOKBACK_DAYS = 7

# Absolute moving-average change below which a trend counts as stable,
# in the field's own unit
DEFAULT_TREND_EPSILON = 0.1
TREND_EPSILONS = {
    "value": 0.1,
    "weight_kg": 0.1,  # kg
    "fat_percent": 0.2,  # percentage points
    "muscle_mass_kg": 0.1,  # kg
}

# weekly_change/week_trend compare against the point this many days back
WEEK_DAYS = 7


def _check_window(window_days: int) -> None:
    if window_days < 1:
        raise ValueError("window_days must be >= 1")


def _daily_means(entries: EntryInput, field: str) -> list[tuple[date, float]]:
    groups = values_by_date(normalize(entries), field)
    return [(day, float(np.mean(vals))) for day, vals in groups.items()]


def _delta_vs_week_ago(points: list[tuple[date, float]]) -> float | None:
    """Latest value minus the value closest to (not after) a week earlier.

    When nothing is a full week old, the oldest earlier point is used.
    Returns None if no point predates the latest date.
    """
    if not points:
        return None
    latest_day, latest_value = points[-1]
    earlier = [p for p in points if p[0] < latest_day]
    if not earlier:
        return None

    cutoff = latest_day - timedelta(days=WEEK_DAYS)
    old_enough = [p for p in earlier if p[0] <= cutoff]
    ref = old_enough[-1] if old_enough else earlier[0]
    return round(latest_value - ref[1], 2)


# ---------------------------------------------------------------------------
# Moving average
# ---------------------------------------------------------------------------


def moving_average(
    entries: EntryInput,
    window_days: int = DEFAULT_WINDOW_DAYS,
    field: str = DEFAULT_FIELD,
) -> list[DailyValue]:
    """Trailing calendar-day moving average of *field*.

    Each date with a value gets one point: the mean of the daily means of
    all dates within the ``window_days``-day window ending on (and
    including) that date.  A day with several entries contributes its own
    daily mean once, so repeat weigh-ins are not double counted.

    Args:
        entries: Entries or raw records, any order.
        window_days: Window length in calendar days (>= 1).
        field: Numeric field to average.

    Returns:
        One DailyValue per date with data, oldest first.
    """
    _check_window(window_days)
    daily = _daily_means(entries, field)

    result: list[DailyValue] = []
    start = 0
    for i, (day, _) in enumerate(daily):
        window_start = day - timedelta(days=window_days - 1)
        while daily[start][0] < window_start:
            start += 1
        window = [v for _, v in daily[start:i + 1]]
        result.append(DailyValue(date=day, avg=round(float(np.mean(window)), 2)))
    return result


# ---------------------------------------------------------------------------
# Direction / volatility
# ---------------------------------------------------------------------------


def trend_direction(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
    epsilon: float | None = None,
) -> TrendDirection:
    """Classify the recent trend of *field* as up, down or stable.

    Compares the latest 7-day moving-average point with the latest point at
    least a week older (or the oldest point, if history is shorter).
    Changes smaller than *epsilon* (default: ``TREND_EPSILONS[field]``)
    count as stable, as does having fewer than two moving-average points.
    """
    ma = moving_average(entries, DEFAULT_WINDOW_DAYS, field)
    if len(ma) < 2:
        return TrendDirection.STABLE

    if epsilon is None:
        epsilon = TREND_EPSILONS.get(field, DEFAULT_TREND_EPSILON)

    latest = ma[-1]
    cutoff = latest.date - timedelta(days=TREND_LOOKBACK_DAYS)
    older = [p for p in ma[:-1] if p.date <= cutoff]
    ref = older[-1] if older else ma[0]

    diff = round(latest.avg - ref.avg, 2)
    if abs(diff) < epsilon:
        return TrendDirection.STABLE
    return TrendDirection.UP if diff > 0 else TrendDirection.DOWN


def volatility(
    entries: EntryInput,
    window_days: int = VOLATILITY_WINDOW_DAYS,
    field: str = DEFAULT_FIELD,
) -> float:
    """Population standard deviation of raw *field* values in the trailing window.

    The window ends at the latest entry that has a value.  Returns 0.0 if
    fewer than two values fall inside it.
    """
    _check_window(window_days)
    valued = [
        (e.date, v) for e in normalize(entries) if (v := e.get(field)) is not None
    ]
    if len(valued) < 2:
        return 0.0

    window_start = valued[-1][0] - timedelta(days=window_days - 1)
    vals = [v for day, v in valued if day >= window_start]
    if len(vals) < 2:
        return 0.0
    return round(float(np.std(np.asarray(vals, dtype=np.float64), ddof=0)), 2)


# ---------------------------------------------------------------------------
# Period-over-period deltas
# ---------------------------------------------------------------------------


def weekly_change(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
) -> float | None:
    """Latest value minus the value of the entry from about a week earlier.

    The comparison entry is the most recent one dated at least 7 days before
    the latest entry; with shorter history the oldest earlier entry is used.
    Returns None if no entry predates the latest date.
    """
    points = [
        (e.date, v) for e in normalize(entries) if (v := e.get(field)) is not None
    ]
    return _delta_vs_week_ago(points)


def week_trend(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
) -> float | None:
    """Like :func:`weekly_change`, but over daily means of *field*.

    Used for multi-reading sources such as a smart scale, where several
    readings a day are common.
    """
    return _delta_vs_week_ago(_daily_means(entries, field))


def latest_value(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
) -> float | None:
    """Most recent non-null value of *field*, or None."""
    for entry in reversed(normalize(entries)):
        value = entry.get(field)
        if value is not None:
            return value
    return None


def trend_diff(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
    vs_first: bool = False,
) -> float | None:
    """Latest entry's *field* minus the previous (or first) entry's.

    Meant for sparse, scan-style series where each entry is a full
    measurement session.  Returns None with fewer than two entries or when
    either side lacks the field.
    """
    ordered = normalize(entries)
    if len(ordered) < 2:
        return None
    compare = ordered[0] if vs_first else ordered[-2]
    a = ordered[-1].get(field)
    b = compare.get(field)
    if a is None or b is None:
        return None
    return round(a - b, 2)
