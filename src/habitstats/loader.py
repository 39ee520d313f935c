"""Load exported data-store records from JSON / JSONL files for offline analysis."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _load_jsonl(path: Path) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("%s:%d: invalid JSON, skipping", path.name, line_num)
                continue
            if not isinstance(record, dict):
                logger.warning("%s:%d: not a JSON object, skipping", path.name, line_num)
                continue
            records.append(record)
    return records


def _load_json(path: Path) -> list[dict[str, Any]]:
    with open(path) as f:
        data = json.load(f)

    # Accept a bare list or an export envelope such as {"records": [...]}
    if isinstance(data, dict) and isinstance(data.get("records"), list):
        data = data["records"]
    if not isinstance(data, list):
        raise ValueError(f"{path.name}: expected a list of records")

    records = [r for r in data if isinstance(r, dict)]
    skipped = len(data) - len(records)
    if skipped:
        logger.warning("%s: skipped %d non-object item(s)", path.name, skipped)
    return records


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """Read raw records from a ``.json`` or ``.jsonl`` export.

    Args:
        path: File to read.  ``.jsonl`` files hold one record per line;
            anything else is parsed as a single JSON document.

    Returns:
        List of record dicts, in file order.  Records are not validated
        here; undated rows are dropped later by normalization.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If a JSON document is not a list of records.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if path.suffix.lower() == ".jsonl":
        records = _load_jsonl(path)
    else:
        records = _load_json(path)

    logger.info("Loaded %d record(s) from %s", len(records), path.name)
    return records
