"""Metric entries and normalization.

This is the shared foundation for all analytics modules.  It provides:
  - The immutable ``MetricEntry`` record the engine computes over
  - Parsing of raw data-store records (weight, smart-scale, body-scan and
    check-in shapes) into entries
  - ``normalize``: parse, drop undated rows, stable chronological sort
  - Per-date grouping helpers reused by the aggregate/trend/streak modules
  - ``merge_sources``: fold two entry streams into one timeline
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence, Union

logger = logging.getLogger(__name__)

DEFAULT_FIELD = "value"

# Candidate keys, in priority order, for each data-store table shape
DATE_KEYS = ("date", "scan_date", "checkin_date", "measured_at")
TIME_KEYS = ("time", "scan_time", "checkin_time")

# Bookkeeping columns that are neither metrics nor useful metadata
_IGNORED_KEYS = frozenset({"id", "user_id", "created_at", "updated_at"})


# ---------------------------------------------------------------------------
# Entry type
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MetricEntry:
    """One timestamped measurement with a bag of numeric fields."""

    date: date
    time: time | None = None
    fields: Mapping[str, float | None] = field(default_factory=dict)
    meta: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str = DEFAULT_FIELD) -> float | None:
        """Return the numeric value of *name*, or None if missing/null/NaN."""
        raw = self.fields.get(name)
        if raw is None:
            return None
        value = float(raw)
        if math.isnan(value):
            return None
        return value

    @property
    def sort_key(self) -> tuple[date, time]:
        return (self.date, self.time if self.time is not None else time.min)

    def __repr__(self) -> str:
        when = self.date.isoformat()
        if self.time is not None:
            when += f" {self.time.strftime('%H:%M')}"
        return f"MetricEntry({when}, fields={dict(self.fields)})"


# What every analytics function accepts: entries, raw records, or a mix
EntryInput = Iterable[Union[MetricEntry, Mapping[str, Any]]]


# ---------------------------------------------------------------------------
# Raw record parsing
# ---------------------------------------------------------------------------


def parse_date(raw: Any) -> tuple[date, time | None] | None:
    """Parse a date-ish value into ``(date, time_or_None)``.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and ISO
    datetime strings (a trailing ``Z`` is accepted).  The wall-clock time of
    a datetime is kept as-is; no timezone conversion is done.

    Returns None if the value cannot be parsed.
    """
    if isinstance(raw, datetime):
        return raw.date(), raw.time().replace(tzinfo=None)
    if isinstance(raw, date):
        return raw, None
    if not isinstance(raw, str):
        return None

    text = raw.strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text), None
        except ValueError:
            return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    return dt.date(), dt.time().replace(tzinfo=None)


def parse_time(raw: Any) -> time | None:
    """Parse ``HH:MM`` / ``HH:MM:SS`` (or a ``time`` object).  None on failure."""
    if isinstance(raw, time):
        return raw.replace(tzinfo=None)
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return time.fromisoformat(raw.strip())
    except ValueError:
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _flatten(
    prefix: str,
    value: Mapping[str, Any],
    fields: dict[str, float | None],
    meta: dict[str, Any],
) -> None:
    for key, sub in value.items():
        name = f"{prefix}.{key}"
        if isinstance(sub, Mapping):
            _flatten(name, sub, fields, meta)
        elif sub is None or _is_number(sub):
            fields[name] = None if sub is None else float(sub)
        else:
            meta[name] = sub


def parse_record(record: Mapping[str, Any]) -> MetricEntry | None:
    """Convert a raw data-store record into a MetricEntry.

    Numeric columns (and explicit nulls) become fields, nested mappings such
    as body-scan segments are flattened with dotted names, and everything
    else lands in ``meta``.

    The first date (and time) key whose value parses is used, so an empty
    ``date`` column does not hide a valid ``measured_at``.

    Returns None if the record has no parsable date.
    """
    parsed = next(
        (p for k in DATE_KEYS if (p := parse_date(record.get(k))) is not None),
        None,
    )
    if parsed is None:
        return None
    day, entry_time = parsed

    explicit = next(
        (t for k in TIME_KEYS if (t := parse_time(record.get(k))) is not None),
        None,
    )
    if explicit is not None:
        entry_time = explicit

    fields: dict[str, float | None] = {}
    meta: dict[str, Any] = {}
    for key, value in record.items():
        if key in DATE_KEYS or key in TIME_KEYS or key in _IGNORED_KEYS:
            continue
        if isinstance(value, Mapping):
            _flatten(key, value, fields, meta)
        elif value is None or _is_number(value):
            fields[key] = None if value is None else float(value)
        else:
            meta[key] = value

    return MetricEntry(
        date=day,
        time=entry_time,
        fields=MappingProxyType(fields),
        meta=MappingProxyType(meta),
    )


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize(
    entries: EntryInput,
) -> list[MetricEntry]:
    """Parse and sort entries ascending by date, then time.

    Raw dicts are parsed with :func:`parse_record`; rows whose date cannot be
    parsed are dropped.  The sort is stable, so entries sharing a
    ``(date, time)`` keep their input order, and an entry without a time
    sorts as if taken at midnight.

    Returns a new list; the input is never modified.
    """
    parsed: list[MetricEntry] = []
    dropped = 0
    for item in entries:
        if isinstance(item, MetricEntry):
            parsed.append(item)
            continue
        entry = parse_record(item) if isinstance(item, Mapping) else None
        if entry is None:
            dropped += 1
        else:
            parsed.append(entry)

    if dropped:
        logger.debug("Dropped %d record(s) without a parsable date", dropped)

    return sorted(parsed, key=lambda e: e.sort_key)


# ---------------------------------------------------------------------------
# Per-date grouping
# ---------------------------------------------------------------------------


def values_by_date(
    entries: Sequence[MetricEntry],
    field_name: str = DEFAULT_FIELD,
) -> dict[date, list[float]]:
    """Group the non-null values of *field_name* by calendar date.

    Dates whose entries all lack the field are omitted.  Keys are in
    chronological order when *entries* are normalized.
    """
    groups: dict[date, list[float]] = {}
    for entry in entries:
        value = entry.get(field_name)
        if value is not None:
            groups.setdefault(entry.date, []).append(value)
    return groups


def distinct_dates(entries: Sequence[MetricEntry]) -> list[date]:
    """Sorted distinct calendar dates that have at least one entry."""
    return sorted({e.date for e in entries})


# ---------------------------------------------------------------------------
# Source merging
# ---------------------------------------------------------------------------


def merge_sources(
    primary: EntryInput,
    secondary: EntryInput,
    field_name: str = DEFAULT_FIELD,
) -> list[MetricEntry]:
    """Merge two entry streams into one entry per date.

    The secondary stream (e.g. smart-scale readings) is reduced to a daily
    average of *field_name* and overrides the primary stream (e.g. manual
    weigh-ins) on any date both cover.  Each resulting entry carries
    ``meta["source"]`` set to ``"primary"`` or ``"secondary"``.
    """
    merged: dict[date, MetricEntry] = {}

    for entry in normalize(primary):
        meta = dict(entry.meta)
        meta["source"] = "primary"
        merged[entry.date] = MetricEntry(
            date=entry.date,
            time=entry.time,
            fields=entry.fields,
            meta=MappingProxyType(meta),
        )

    first_time: dict[date, time | None] = {}
    sums: dict[date, list[float]] = {}
    for entry in normalize(secondary):
        value = entry.get(field_name)
        if value is None:
            continue
        first_time.setdefault(entry.date, entry.time)
        sums.setdefault(entry.date, []).append(value)

    for day, values in sums.items():
        merged[day] = MetricEntry(
            date=day,
            time=first_time[day],
            fields=MappingProxyType({field_name: round(sum(values) / len(values), 2)}),
            meta=MappingProxyType({"source": "secondary"}),
        )

    return [merged[day] for day in sorted(merged)]
