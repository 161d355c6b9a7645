"""Join engine: matching data points to topology features by region key."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from choromap.ingestion.datasets import DatasetRecord
from choromap.ingestion.topology import Topology

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchStats:
    matched: int
    total: int


@dataclass(frozen=True)
class ColorRange:
    min: float = 0
    # None means the dataset has no finite values at all
    max: float | None = None

    @property
    def has_data(self) -> bool:
        return self.max is not None


def match(a: str, b: str) -> bool:
    """Region keys join only on exact, case-sensitive equality."""
    return a == b


def compute_match(dataset: DatasetRecord, topology: Topology) -> MatchStats:
    keys = topology.keys
    matched = sum(1 for p in dataset.data if p.region_key in keys)
    return MatchStats(matched=matched, total=len(dataset.data))


def log_match_stats(datasets: Iterable[DatasetRecord], topology: Topology) -> dict[str, MatchStats]:
    stats = {}
    for ds in datasets:
        stats[ds.key] = compute_match(ds, topology)
        logger.info(
            "Dataset %s: total=%d, matched=%d",
            ds.key, stats[ds.key].total, stats[ds.key].matched,
        )
    return stats


def color_range(dataset: DatasetRecord) -> ColorRange:
    values = [
        p.value for p in dataset.data
        if p.value is not None and math.isfinite(p.value)
    ]
    return ColorRange(min=0, max=max(values) if values else None)
