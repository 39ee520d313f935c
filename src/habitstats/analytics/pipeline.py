"""Analytics pipeline: wire raw data-store records into the analytics engine.

This module consumes the list of plain record dicts produced by
:func:`habitstats.loader.load_records` (or fetched by the caller) and runs
the full analytics pipeline, producing a :class:`MetricSummary`.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any, Mapping, Sequence

from habitstats.analytics.entries import (
    DEFAULT_FIELD,
    MetricEntry,
    merge_sources,
    normalize,
)
from habitstats.analytics.forecast import DEFAULT_HORIZON_DAYS
from habitstats.analytics.summary import MetricSummary, build_summary
from habitstats.analytics.trend import DEFAULT_WINDOW_DAYS

logger = logging.getLogger(__name__)


def numeric_fields(entries: Sequence[MetricEntry]) -> list[str]:
    """Numeric field names present in *entries*, most frequently valued first.

    Ties are broken alphabetically so the order is deterministic.
    """
    counts: Counter[str] = Counter()
    for entry in entries:
        for name in entry.fields:
            if entry.get(name) is not None:
                counts[name] += 1
    return [name for name, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


def resolve_field(entries: Sequence[MetricEntry], field: str | None) -> str:
    """Pick the field to analyze.

    An explicit *field* is used as-is.  Otherwise ``"value"`` is used when
    present, falling back to the most frequently valued numeric field.
    """
    if field:
        return field
    available = numeric_fields(entries)
    if not available or DEFAULT_FIELD in available:
        return DEFAULT_FIELD
    logger.debug("No %r field; analyzing %r", DEFAULT_FIELD, available[0])
    return available[0]


def run_pipeline(
    records: Sequence[Mapping[str, Any] | MetricEntry],
    field: str | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    as_of: date | None = None,
    secondary: Sequence[Mapping[str, Any] | MetricEntry] | None = None,
) -> MetricSummary:
    """Run the full analytics pipeline on raw records.

    Args:
        records: Record dicts from the data store (or MetricEntry objects).
        field: Field to analyze; auto-detected when None.
        window_days: Moving-average window in calendar days.
        horizon_days: Forecast horizon in days (0 disables the forecast).
        as_of: Optional reference day for the current streak.
        secondary: Optional second source (e.g. smart-scale readings) merged
            over *records* one value per day before analysis.

    Returns:
        A populated MetricSummary.
    """
    entries = normalize(records)
    logger.debug("Pipeline: %d of %d record(s) usable", len(entries), len(records))

    if secondary is not None:
        chosen = resolve_field(entries or normalize(secondary), field)
        entries = merge_sources(entries, secondary, chosen)
        logger.debug("Pipeline: %d day(s) after merging secondary source", len(entries))
    else:
        chosen = resolve_field(entries, field)

    return build_summary(
        entries,
        field=chosen,
        window_days=window_days,
        horizon_days=horizon_days,
        as_of=as_of,
    )
