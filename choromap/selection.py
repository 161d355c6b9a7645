"""Selection/sidebar controller: user choices in, render cycles out.

Topology selection follows a small state machine::

    IDLE --select_topology--> TOPOLOGY_SELECTED --select_country--> COUNTRY_DRILL_DOWN

Dataset checkbox changes re-render with the active topology and leave the
phase alone. Every render cycle takes a fresh request token so a slow,
superseded cycle can never overwrite the result of a newer one.
"""

from __future__ import annotations

import logging
from typing import Sequence

from choromap.errors import ChoroMapError, NotFoundError
from choromap.ingestion.datasets import DatasetConfig, DatasetRecord
from choromap.ingestion.loader import DatasetLoader
from choromap.ingestion.probe import CountryTopologyProber
from choromap.ingestion.topology import RegionOption, Topology, TopologyLoader, region_options
from choromap.render.controller import RenderController, RenderResult
from choromap.state import Phase, SelectionState

logger = logging.getLogger(__name__)


class SelectionController:
    def __init__(
        self,
        state: SelectionState,
        dataset_loader: DatasetLoader,
        configs: Sequence[DatasetConfig],
        topology_loader: TopologyLoader,
        renderer: RenderController,
        prober: CountryTopologyProber,
        datasets: Sequence[DatasetRecord] | None = None,
    ):
        self.state = state
        self._dataset_loader = dataset_loader
        self._configs = list(configs)
        self._topology_loader = topology_loader
        self._renderer = renderer
        self._prober = prober
        self._datasets = list(datasets) if datasets is not None else None
        self._topology: Topology | None = None

    @property
    def datasets(self) -> list[DatasetRecord]:
        return list(self._datasets or [])

    @property
    def topology(self) -> Topology | None:
        return self._topology

    async def load_datasets(self) -> list[DatasetRecord]:
        """Datasets for the session, fetched on first use only."""
        if self._datasets is None:
            self._datasets = await self._dataset_loader.load(self._configs)
        return self._datasets

    async def _load_topology(self, path: str) -> Topology:
        if self._topology is None or self._topology.path != path:
            self._topology = await self._topology_loader.load(path)
        return self._topology

    async def refresh(self, path: str | None = None, phase: Phase | None = None) -> RenderResult | None:
        """One render cycle with the current selection.

        *path* and *phase* are committed to the state only once the new chart
        is in place, so a failed switch leaves the previous map active.
        """
        token = self.state.begin_request()
        path = path or self.state.active_topology_path
        try:
            datasets = await self.load_datasets()
            topology = await self._load_topology(path)
        except ChoroMapError:
            logger.exception("Could not load map data for %s", path)
            return None
        if not self.state.is_current(token):
            logger.info("Dropping superseded render of %s", path)
            return None
        result = await self._renderer.render(
            self.state.selected_dataset_keys,
            datasets,
            topology,
            state=self.state,
            token=token,
        )
        if result is not None:
            self.state.active_topology_path = path
            if phase is not None:
                self.state.phase = phase
        return result

    async def start(self) -> RenderResult | None:
        return await self.refresh()

    async def set_selected_datasets(self, keys: Sequence[str]) -> RenderResult | None:
        known = {cfg.key for cfg in self._configs}
        self.state.select_datasets(k for k in keys if k in known)
        return await self.refresh()

    async def toggle_dataset(self, key: str, checked: bool) -> RenderResult | None:
        keys = [k for k in self.state.selected_dataset_keys if k != key]
        if checked:
            keys.append(key)
        return await self.set_selected_datasets(keys)

    async def list_topologies(self) -> list[str]:
        try:
            return await self._topology_loader.list_paths()
        except ChoroMapError:
            logger.warning("Error loading topology list", exc_info=True)
            return []

    async def preview_topology(self, path: str) -> list[RegionOption]:
        """Country list for *path* without changing the active topology."""
        if not path:
            return []
        try:
            document = await self._topology_loader.load_document(path)
        except ChoroMapError:
            logger.warning("Could not populate countries for %s", path, exc_info=True)
            return []
        return region_options(document)

    async def select_topology(self, path: str) -> RenderResult | None:
        if not path:
            return None
        return await self.refresh(path, Phase.TOPOLOGY_SELECTED)

    async def select_country(self, option: RegionOption) -> RenderResult | None:
        """Drill into *option*'s own topology, or focus it on the current map."""
        try:
            path = await self._prober.find(option)
        except NotFoundError as exc:
            logger.info("%s; focusing existing map instead", exc)
            self.focus(option.key)
            return None
        return await self.refresh(path, Phase.COUNTRY_DRILL_DOWN)

    def focus(self, region_key: str) -> bool:
        chart = self.state.active_chart
        if chart is None or not chart.alive:
            return False
        focused = chart.focus(region_key)
        if focused:
            self.state.focused_region = region_key
        return focused
