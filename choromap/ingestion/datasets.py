"""Registry of available datasets and the records they load into."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property


@dataclass(frozen=True)
class DatasetConfig:
    key: str
    name: str
    color: str
    source_path: str


@dataclass(frozen=True)
class DataPoint:
    region_key: str
    value: float | None


@dataclass(frozen=True)
class DatasetRecord:
    """One loaded dataset. Immutable for the rest of the session."""

    key: str
    name: str
    color: str
    data: tuple[DataPoint, ...]

    @cached_property
    def _by_region(self) -> dict[str, DataPoint]:
        index: dict[str, DataPoint] = {}
        for point in self.data:
            index.setdefault(point.region_key, point)
        return index

    def point_for(self, region_key: str) -> DataPoint | None:
        """First point keyed *region_key*, or None."""
        return self._by_region.get(region_key)


# Add more datasets here; order is the default primary dataset order.
DATASET_REGISTRY: dict[str, DatasetConfig] = {
    "population": DatasetConfig(
        key="population",
        name="Population",
        color="#1f77b4",
        source_path="/datasets/population.csv",
    ),
    "gdp": DatasetConfig(
        key="gdp",
        name="GDP",
        color="#ff7f0e",
        source_path="/datasets/gdp.csv",
    ),
}


def find_dataset(datasets: list[DatasetRecord], key: str) -> DatasetRecord | None:
    for ds in datasets:
        if ds.key == key:
            return ds
    return None
