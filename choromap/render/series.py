"""Pure computation of the map's series configuration from selection state.

Nothing here touches a rendering surface, so the whole module can be unit
tested with plain records and topologies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Sequence

from choromap.ingestion.datasets import DatasetRecord, find_dataset
from choromap.ingestion.topology import Topology
from choromap.processing.join import ColorRange, color_range

# Regions without a value show the base layer, so BASE_FILL is also the no-data color.
BASE_FILL = "#f2f2f2"
BASE_BORDER = "#c8c8c8"
HOVER_COLOR = "#a4edba"
COLOR_STOPS = ((0.0, "#f7fbff"), (0.5, "#6baed6"), (1.0, "#08306b"))


@dataclass(frozen=True)
class TooltipLine:
    dataset_key: str
    label: str
    color: str
    value: float

    @property
    def text(self) -> str:
        return f"{self.label}: {format_value(self.value)}"

    def to_html(self) -> str:
        return (
            f"{escape(self.label)}: "
            f"<span style='color:{escape(self.color)}'>{format_value(self.value)}</span>"
        )


@dataclass(frozen=True)
class LegendEntry:
    key: str
    name: str
    color: str


@dataclass(frozen=True)
class Layer:
    name: str
    interactive: bool
    show_in_legend: bool
    locations: tuple[str, ...]
    values: tuple[float | None, ...] = ()
    tooltips: tuple[str | None, ...] = ()


@dataclass(frozen=True)
class SeriesConfig:
    topology: Topology
    selected_keys: tuple[str, ...]
    primary: DatasetRecord | None
    base: Layer
    data: Layer
    color_range: ColorRange
    legend: tuple[LegendEntry, ...] = field(default=())

    @property
    def layers(self) -> tuple[Layer, Layer]:
        return (self.base, self.data)


def format_value(value: float) -> str:
    """Thousands-grouped number with at most three decimals."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def primary_dataset(
    selected_keys: Sequence[str], datasets: Sequence[DatasetRecord]
) -> DatasetRecord | None:
    """First selected dataset, else the first loaded one."""
    if selected_keys:
        found = find_dataset(list(datasets), selected_keys[0])
        if found is not None:
            return found
    return datasets[0] if datasets else None


def selected_datasets(
    selected_keys: Sequence[str], datasets: Sequence[DatasetRecord]
) -> list[DatasetRecord]:
    """Selected records in selection order; unknown keys are skipped."""
    by_key = {ds.key: ds for ds in datasets}
    return [by_key[k] for k in dict.fromkeys(selected_keys) if k in by_key]


def tooltip_lines(
    region_key: str, selected_keys: Sequence[str], datasets: Sequence[DatasetRecord]
) -> list[TooltipLine]:
    lines = []
    for ds in selected_datasets(selected_keys, datasets):
        point = ds.point_for(region_key)
        if point is not None and point.value is not None:
            lines.append(TooltipLine(ds.key, ds.name, ds.color, point.value))
    return lines


def tooltip_content(
    region_key: str,
    region_name: str,
    selected_keys: Sequence[str],
    datasets: Sequence[DatasetRecord],
) -> str | None:
    """Hover text for a region. None when no dataset is selected."""
    if not selected_keys:
        return None
    html = f"<b>{escape(region_name or region_key)}</b><br>"
    for line in tooltip_lines(region_key, selected_keys, datasets):
        html += line.to_html() + "<br>"
    return html


def legend_entries(
    selected_keys: Sequence[str], datasets: Sequence[DatasetRecord]
) -> tuple[LegendEntry, ...]:
    return tuple(
        LegendEntry(ds.key, ds.name, ds.color)
        for ds in datasets
        if ds.key in selected_keys
    )


def build_series_config(
    selected_keys: Sequence[str],
    datasets: Sequence[DatasetRecord],
    topology: Topology,
) -> SeriesConfig:
    """Base layer plus one value layer, whatever the number of selections."""
    selected = tuple(dict.fromkeys(selected_keys))
    primary = primary_dataset(selected, datasets)
    names = {f.region_key: f.name for f in topology.features}

    base = Layer(
        name="Base map",
        interactive=False,
        show_in_legend=False,
        locations=tuple(f.region_key for f in topology.features),
    )

    points = primary.data if primary is not None else ()
    data = Layer(
        name=primary.name if primary is not None else "",
        interactive=True,
        show_in_legend=True,
        locations=tuple(p.region_key for p in points),
        values=tuple(p.value for p in points),
        tooltips=tuple(
            tooltip_content(p.region_key, names.get(p.region_key, ""), selected, datasets)
            for p in points
        ),
    )

    return SeriesConfig(
        topology=topology,
        selected_keys=selected,
        primary=primary,
        base=base,
        data=data,
        color_range=color_range(primary) if primary is not None else ColorRange(),
        legend=legend_entries(selected, datasets),
    )
