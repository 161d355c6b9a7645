"""Render controller: selection in, one live chart out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from choromap.errors import ChoroMapError
from choromap.ingestion.datasets import DATASET_REGISTRY, DatasetConfig, DatasetRecord
from choromap.ingestion.loader import DatasetLoader
from choromap.ingestion.topology import Topology
from choromap.processing.join import MatchStats, log_match_stats
from choromap.render.series import SeriesConfig, build_series_config
from choromap.render.surface import ChartHandle, ChartSurface

if TYPE_CHECKING:
    from choromap.state import SelectionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    config: SeriesConfig
    chart: ChartHandle
    match_stats: dict[str, MatchStats]
    token: int | None = None


class RenderController:
    def __init__(
        self,
        surface: ChartSurface,
        dataset_loader: DatasetLoader | None = None,
        configs: Sequence[DatasetConfig] | None = None,
    ):
        self._surface = surface
        self._dataset_loader = dataset_loader
        self._configs = list(configs) if configs is not None else list(DATASET_REGISTRY.values())

    async def render(
        self,
        selected_keys: Sequence[str],
        datasets: Sequence[DatasetRecord] | None,
        topology: Topology,
        *,
        state: SelectionState,
        token: int | None = None,
    ) -> RenderResult | None:
        """Replace the active chart, or leave it untouched.

        Returns None when the render failed or was superseded by a newer
        request; in both cases ``state`` is not modified.
        """
        try:
            if datasets is None:
                if self._dataset_loader is None:
                    raise ChoroMapError("No datasets given and no loader configured")
                datasets = await self._dataset_loader.load(self._configs)

            stats = log_match_stats(datasets, topology)
            cfg = build_series_config(selected_keys, datasets, topology)
            if token is not None and not state.is_current(token):
                logger.info("Discarding stale render (token %d)", token)
                return None
            chart = self._surface.create(cfg)
        except ChoroMapError:
            logger.exception("Render failed; keeping the previous chart")
            return None

        state.replace_chart(chart)
        return RenderResult(config=cfg, chart=chart, match_stats=stats, token=token)
