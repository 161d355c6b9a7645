"""Row normalization: CSV rows to (region key, value) data points."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping

import pandas as pd

from choromap.ingestion.datasets import DataPoint

logger = logging.getLogger(__name__)

# Candidate column names, in resolution order. Matching is case-sensitive.
REGION_KEY_COLUMNS = ("hc-key", "hc_key")
VALUE_COLUMNS = ("value", "Value")

_NON_NUMERIC = re.compile(r"[^0-9.\-eE+]")


def _cell(row: Mapping[str, Any], column: str) -> str:
    raw = row.get(column)
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        return ""
    return str(raw).strip()


def resolve_region_key(row: Mapping[str, Any]) -> str:
    """First present, non-empty region key column, trimmed. ``""`` if none."""
    for column in REGION_KEY_COLUMNS:
        key = _cell(row, column)
        if key:
            return key
    return ""


def resolve_raw_value(row: Mapping[str, Any]) -> str:
    for column in VALUE_COLUMNS:
        raw = _cell(row, column)
        if raw:
            return raw
    return ""


def clean_value(raw: str) -> str:
    """Drop everything but digits, ``.``, ``-``, ``+``, ``e`` and ``E``.

    Thousands separators go with the rest, so ``"1,234"`` becomes ``"1234"``.
    Applying it twice gives the same string as applying it once.
    """
    return _NON_NUMERIC.sub("", raw)


def parse_value(raw: str) -> float | None:
    """Parse a raw cell into a finite float, or None when that is impossible."""
    cleaned = clean_value(raw.strip())
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def row_to_point(row: Mapping[str, Any]) -> DataPoint:
    return DataPoint(
        region_key=resolve_region_key(row),
        value=parse_value(resolve_raw_value(row)),
    )


def normalize_rows(df: pd.DataFrame) -> tuple[DataPoint, ...]:
    """Turn a parsed CSV frame into data points, one per row, in file order."""
    points = tuple(row_to_point(row) for row in df.to_dict(orient="records"))
    missing = sum(1 for p in points if p.value is None)
    if missing:
        logger.info("%d of %d rows have no usable value", missing, len(points))
    return points
