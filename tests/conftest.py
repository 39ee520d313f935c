"""Shared fixtures and helpers for the habitstats test suite."""

from __future__ import annotations

import json
from datetime import date, time, timedelta
from pathlib import Path
from types import MappingProxyType

import pytest

from habitstats.analytics.entries import MetricEntry

# A Monday; ISO week 2024-W10
D0 = date(2024, 3, 4)


# ---------------------------------------------------------------------------
# Entry-building helpers
# ---------------------------------------------------------------------------


def day(offset: int) -> date:
    """Calendar day *offset* days after D0."""
    return D0 + timedelta(days=offset)


def make_entry(
    offset: int,
    value: float | None = None,
    at: str | None = None,
    **fields: float | None,
) -> MetricEntry:
    """Build a MetricEntry *offset* days after D0.

    ``value`` lands in the default "value" field; extra keyword arguments
    become additional fields.  ``at`` is an optional "HH:MM" time.
    """
    if value is not None or not fields:
        fields = {"value": value, **fields}
    return MetricEntry(
        date=day(offset),
        time=time.fromisoformat(at) if at else None,
        fields=MappingProxyType(dict(fields)),
    )


def make_series(values: list[float | None], step: int = 1) -> list[MetricEntry]:
    """One entry per value, *step* days apart, starting at D0."""
    return [make_entry(i * step, v) for i, v in enumerate(values)]


def make_days(offsets: list[int]) -> list[MetricEntry]:
    """Presence-only entries (value 1.0) on the given day offsets."""
    return [make_entry(o, 1.0) for o in offsets]


# ---------------------------------------------------------------------------
# Record file helpers
# ---------------------------------------------------------------------------


def write_jsonl(path: Path, entries: list) -> Path:
    """Write a list of objects as JSONL to the given path."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


def weight_record(offset: int, weight: float, at: str = "07:30") -> dict:
    """A raw weight-log row as the data store returns it."""
    return {
        "id": f"w-{offset}",
        "user_id": "u-1",
        "date": day(offset).isoformat(),
        "time": at,
        "weight_kg": weight,
        "created_at": "2024-03-01T00:00:00Z",
    }


@pytest.fixture
def rising_weights() -> list[dict]:
    """Ten daily weigh-ins increasing by exactly 1 kg/day."""
    return [weight_record(i, 70.0 + i) for i in range(10)]
