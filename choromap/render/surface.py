"""Chart surfaces and the handles of the charts drawn on them."""

from __future__ import annotations

import logging
from typing import Protocol

import plotly.graph_objects as go

from choromap.render.figure import build_figure, focus_figure, topology_to_geojson
from choromap.render.series import SeriesConfig

logger = logging.getLogger(__name__)


class ChartHandle(Protocol):
    @property
    def alive(self) -> bool: ...

    def focus(self, region_key: str) -> bool: ...

    def destroy(self) -> None: ...


class ChartSurface(Protocol):
    def create(self, cfg: SeriesConfig) -> ChartHandle: ...


class FigureChart:
    """A live plotly figure. Released by ``destroy``."""

    def __init__(self, figure: go.Figure, geojson: dict, cfg: SeriesConfig):
        self.figure: go.Figure | None = figure
        self.config = cfg
        self._geojson = geojson

    @property
    def alive(self) -> bool:
        return self.figure is not None

    def focus(self, region_key: str) -> bool:
        if self.figure is None:
            return False
        return focus_figure(self.figure, self._geojson, region_key)

    def destroy(self) -> None:
        self.figure = None
        self._geojson = {}


class FigureSurface:
    """Builds plotly figures; the UI layer decides where to show them."""

    def create(self, cfg: SeriesConfig) -> FigureChart:
        geojson = topology_to_geojson(cfg.topology.document)
        fig = build_figure(cfg, geojson)
        logger.info(
            "Chart series count: %d (%s points in %r)",
            len(fig.data), len(cfg.data.locations), cfg.data.name,
        )
        return FigureChart(fig, geojson, cfg)
