"""Fixed-threshold zone classification for single readings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, time
from enum import Enum

from habitstats.analytics.entries import DEFAULT_FIELD, EntryInput, normalize


class HeartRateZone(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    ELEVATED = "elevated"


class VisceralFatZone(str, Enum):
    HEALTHY = "healthy"
    ELEVATED = "elevated"
    HIGH = "high"


# Resting heart rate (bpm): below LOW is low, above HIGH is elevated
HR_LOW = 60.0
HR_HIGH = 100.0

# Visceral fat rating: up to HEALTHY_MAX is healthy, up to ELEVATED_MAX elevated
VISCERAL_HEALTHY_MAX = 9.0
VISCERAL_ELEVATED_MAX = 14.0

# Single readings before this time count as morning
NOON = time(12, 0)


def heart_rate_zone(bpm: float) -> HeartRateZone | None:
    """Classify a resting heart rate: <60 low, 60-100 normal, >100 elevated.

    Returns None for a NaN reading.
    """
    if math.isnan(bpm):
        return None
    if bpm < HR_LOW:
        return HeartRateZone.LOW
    if bpm <= HR_HIGH:
        return HeartRateZone.NORMAL
    return HeartRateZone.ELEVATED


def visceral_fat_zone(rating: float) -> VisceralFatZone | None:
    """Classify a visceral fat rating: <=9 healthy, 10-14 elevated, >=15 high.

    Returns None for a NaN reading.
    """
    if math.isnan(rating):
        return None
    if rating <= VISCERAL_HEALTHY_MAX:
        return VisceralFatZone.HEALTHY
    if rating <= VISCERAL_ELEVATED_MAX:
        return VisceralFatZone.ELEVATED
    return VisceralFatZone.HIGH


@dataclass
class MorningEvening:
    morning: float | None = None
    evening: float | None = None


def morning_vs_evening(
    entries: EntryInput,
    day: date,
    field: str = DEFAULT_FIELD,
) -> MorningEvening:
    """Compare the first and last reading of *field* on *day*.

    Only timed entries with a value count.  With two or more, the earliest
    is the morning value and the latest the evening value.  A lone reading
    fills whichever side of noon it falls on and leaves the other None.
    """
    readings = [
        (e.time, v)
        for e in normalize(entries)
        if e.date == day and e.time is not None and (v := e.get(field)) is not None
    ]
    if not readings:
        return MorningEvening()
    if len(readings) == 1:
        t, v = readings[0]
        return MorningEvening(morning=v) if t < NOON else MorningEvening(evening=v)

    ordered = sorted(readings, key=lambda r: r[0])
    return MorningEvening(morning=ordered[0][1], evening=ordered[-1][1])
