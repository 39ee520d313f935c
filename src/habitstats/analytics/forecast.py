"""Short-horizon forecasting by linear trend extrapolation.

Fits an ordinary least-squares line of value against day index over the
whole supplied history and extends it one point per day past the last
observation.  The uncertainty band (``daily_swing``) is the standard
deviation of the in-sample residuals and is applied as a constant
``value ± daily_swing`` across the horizon; it does not widen with distance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

import numpy as np
from scipy import stats

from habitstats.analytics.aggregate import DailyValue
from habitstats.analytics.entries import DEFAULT_FIELD, EntryInput, normalize

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 30

# Minimum number of valued entries before a line is fitted
MIN_FORECAST_POINTS = 3


@dataclass
class ForecastPoint:
    """One projected day."""

    date: date
    value: float
    daily_swing: float = 0.0

    @property
    def lower(self) -> float:
        return round(self.value - self.daily_swing, 2)

    @property
    def upper(self) -> float:
        return round(self.value + self.daily_swing, 2)


@dataclass
class Forecast:
    """Fitted trend line and its projection."""

    slope: float  # units per day
    intercept: float  # fitted value at the first observed date
    daily_swing: float  # residual std dev, constant band half-width
    start: date  # first observed date (day index 0)
    points: list[ForecastPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Plain, JSON-friendly snapshot of the forecast."""
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "daily_swing": self.daily_swing,
            "start": self.start.isoformat(),
            "points": [
                {"date": p.date.isoformat(), "value": p.value}
                for p in self.points
            ],
        }

    def __repr__(self) -> str:
        return (
            f"Forecast(slope={self.slope:+.3f}/day, "
            f"swing=±{self.daily_swing}, "
            f"n={len(self.points)})"
        )


def _fit(entries: EntryInput, field: str):
    """Fit value ~ day index.  Returns (start, xs, ys, result) or None."""
    valued = [
        (e.date, v) for e in normalize(entries) if (v := e.get(field)) is not None
    ]
    if len(valued) < MIN_FORECAST_POINTS:
        logger.debug("Forecast skipped: %d point(s) < %d", len(valued), MIN_FORECAST_POINTS)
        return None

    start = valued[0][0]
    xs = np.asarray([(day - start).days for day, _ in valued], dtype=np.float64)
    ys = np.asarray([v for _, v in valued], dtype=np.float64)
    if np.ptp(xs) == 0:
        logger.debug("Forecast skipped: all points fall on %s", start)
        return None

    return start, xs, ys, stats.linregress(xs, ys)


def forecast(
    entries: EntryInput,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    field: str = DEFAULT_FIELD,
) -> Forecast | None:
    """Project *field* ``horizon_days`` days past the last observation.

    Args:
        entries: Entries or raw records, any order.
        horizon_days: Number of daily points to project (>= 0).
        field: Numeric field to fit.

    Returns:
        A Forecast, or None if there are fewer than three values or they
        all share one date.
    """
    if horizon_days < 0:
        raise ValueError("horizon_days must be >= 0")

    fitted = _fit(entries, field)
    if fitted is None:
        return None
    start, xs, ys, reg = fitted

    residuals = ys - (reg.intercept + reg.slope * xs)
    swing = round(float(np.std(residuals, ddof=0)), 3)

    last_x = int(xs[-1])
    points = []
    for k in range(1, horizon_days + 1):
        x = last_x + k
        points.append(ForecastPoint(
            date=start + timedelta(days=x),
            value=round(float(reg.intercept + reg.slope * x), 2),
            daily_swing=swing,
        ))

    return Forecast(
        slope=round(float(reg.slope), 4),
        intercept=round(float(reg.intercept), 4),
        daily_swing=swing,
        start=start,
        points=points,
    )


def regression_line(
    entries: EntryInput,
    field: str = DEFAULT_FIELD,
) -> list[DailyValue]:
    """Fitted trend value at every observed date (one point per date)."""
    fitted = _fit(entries, field)
    if fitted is None:
        return []
    start, xs, _, reg = fitted

    line: list[DailyValue] = []
    for x in sorted(set(int(x) for x in xs)):
        line.append(DailyValue(
            date=start + timedelta(days=x),
            avg=round(float(reg.intercept + reg.slope * x), 2),
        ))
    return line
