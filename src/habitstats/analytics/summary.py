"""KPI summary aggregator.

Pulls metrics from all analytics modules into a single MetricSummary that
is JSON-serializable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any

from habitstats.analytics.aggregate import average_per_week
from habitstats.analytics.entries import DEFAULT_FIELD, EntryInput, normalize
from habitstats.analytics.forecast import DEFAULT_HORIZON_DAYS, forecast
from habitstats.analytics.records import all_time_extremes
from habitstats.analytics.streaks import current_streak, longest_streak
from habitstats.analytics.trend import (
    DEFAULT_WINDOW_DAYS,
    VOLATILITY_WINDOW_DAYS,
    TrendDirection,
    latest_value,
    moving_average,
    trend_direction,
    volatility,
    weekly_change,
)


def _jsonable(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class MetricSummary:
    """The KPI card values for one metric series."""

    field: str
    entry_count: int = 0
    first_date: date | None = None
    last_date: date | None = None

    # Level / trend
    latest: float | None = None
    moving_average: float | None = None
    trend: str = TrendDirection.STABLE.value
    volatility: float = 0.0
    weekly_change: float | None = None

    # Extremes
    min_value: float | None = None
    min_date: date | None = None
    max_value: float | None = None
    max_date: date | None = None

    # Attendance
    current_streak: int = 0
    longest_streak: int = 0
    average_per_week: float = 0.0

    # Projection; swing stays None without enough data
    forecast_daily_swing: float | None = None
    forecast: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (JSON-friendly)."""
        return _jsonable(asdict(self))

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        return (
            f"MetricSummary({self.field}: "
            f"n={self.entry_count}, "
            f"latest={self.latest}, "
            f"trend={self.trend}, "
            f"streak={self.current_streak}/{self.longest_streak})"
        )


def build_summary(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
    window_days: int = DEFAULT_WINDOW_DAYS,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    as_of: date | None = None,
) -> MetricSummary:
    """Build the KPI summary for one metric.

    Args:
        entries: Entries or raw records, any order.
        field: Numeric field the value-based KPIs read.
        window_days: Moving-average window in calendar days.
        horizon_days: Forecast horizon; 0 disables the forecast.
        as_of: Optional reference day for the current streak.

    Returns:
        A populated MetricSummary (all defaults for empty input).
    """
    ordered = normalize(entries)
    summary = MetricSummary(field=field)
    if not ordered:
        return summary

    summary.entry_count = len(ordered)
    summary.first_date = ordered[0].date
    summary.last_date = ordered[-1].date

    summary.latest = latest_value(ordered, field)
    ma = moving_average(ordered, window_days, field)
    if ma:
        summary.moving_average = ma[-1].avg
    summary.trend = trend_direction(ordered, field).value
    summary.volatility = volatility(ordered, VOLATILITY_WINDOW_DAYS, field)
    summary.weekly_change = weekly_change(ordered, field)

    extremes = all_time_extremes(ordered, field)
    if extremes.min is not None:
        summary.min_value = extremes.min.value
        summary.min_date = extremes.min.date
    if extremes.max is not None:
        summary.max_value = extremes.max.value
        summary.max_date = extremes.max.date

    summary.current_streak = current_streak(ordered, as_of=as_of)
    summary.longest_streak = longest_streak(ordered)
    summary.average_per_week = average_per_week(ordered)

    if horizon_days > 0:
        projection = forecast(ordered, horizon_days, field)
        if projection is not None:
            summary.forecast_daily_swing = projection.daily_swing
            summary.forecast = [
                {"date": p.date, "value": p.value} for p in projection.points
            ]

    return summary
