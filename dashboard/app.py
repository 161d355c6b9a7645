"""ChoroMap: Streamlit interactive dashboard."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import streamlit as st

from choromap import config
from choromap.errors import ChoroMapError
from choromap.ingestion.datasets import DATASET_REGISTRY, DatasetRecord
from choromap.ingestion.http import make_client
from choromap.ingestion.loader import DatasetLoader
from choromap.ingestion.probe import CountryTopologyProber
from choromap.ingestion.topology import RegionOption, TopologyLoader, topology_label
from choromap.render.controller import RenderController
from choromap.render.series import legend_entries
from choromap.render.surface import FigureSurface
from choromap.selection import SelectionController
from choromap.state import SelectionState

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="ChoroMap",
    page_icon="🗺️",
    layout="wide",
    initial_sidebar_state="expanded",
)

Action = Callable[[SelectionController], Awaitable[Any]]


def run_with_controller(action: Action, datasets: list[DatasetRecord] | None = None) -> Any:
    """Run *action* against a controller bound to this session's state."""
    async def _run():
        async with make_client(config.BASE_URL) as client:
            controller = SelectionController(
                st.session_state["selection"],
                DatasetLoader(client),
                list(DATASET_REGISTRY.values()),
                TopologyLoader(client),
                RenderController(FigureSurface()),
                CountryTopologyProber(client),
                datasets=datasets,
            )
            return await action(controller)
    return asyncio.run(_run())


@st.cache_data(ttl=600)
def load_datasets() -> list[DatasetRecord]:
    """Fetch and parse every configured dataset (cached 10 min)."""
    return run_with_controller(lambda c: c.load_datasets())


@st.cache_data(ttl=600)
def load_topology_list() -> list[str]:
    return run_with_controller(lambda c: c.list_topologies())


@st.cache_data(ttl=600)
def load_region_options(path: str) -> list[RegionOption]:
    return run_with_controller(lambda c: c.preview_topology(path))


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

if "selection" not in st.session_state:
    st.session_state["selection"] = SelectionState(
        active_topology_path=config.resolve_default_map(st.query_params.to_dict()),
    )
state: SelectionState = st.session_state["selection"]

try:
    datasets = load_datasets()
except ChoroMapError as exc:
    st.error(f"Could not load datasets: {exc}")
    st.stop()


def render(action: Action) -> None:
    run_with_controller(action, datasets=datasets)


# ---------------------------------------------------------------------------
# Sidebar: datasets and legend
# ---------------------------------------------------------------------------

st.sidebar.title("🗺️ ChoroMap")

with st.sidebar.expander("Datasets", expanded=True):
    checked = {ds.key for ds in datasets if st.checkbox(ds.name, key=f"dataset_{ds.key}")}

# Keep the order in which datasets were ticked; newly ticked ones go last.
selected = [k for k in state.selected_dataset_keys if k in checked]
selected += [ds.key for ds in datasets if ds.key in checked and ds.key not in selected]
if selected != state.selected_dataset_keys:
    render(lambda c: c.set_selected_datasets(selected))

with st.sidebar.expander("Legend", expanded=True):
    entries = legend_entries(state.selected_dataset_keys, datasets)
    if not entries:
        st.caption("No dataset selected.")
    for entry in entries:
        st.markdown(
            f"<span style='color:{entry.color}'>■</span> {entry.name}",
            unsafe_allow_html=True,
        )

# ---------------------------------------------------------------------------
# Sidebar: maps and country drill-down
# ---------------------------------------------------------------------------

with st.sidebar.expander("Maps", expanded=True):
    topo_paths = load_topology_list()
    if state.active_topology_path not in topo_paths:
        topo_paths = [state.active_topology_path] + topo_paths
    picked = st.selectbox(
        "Topology",
        topo_paths,
        index=topo_paths.index(state.active_topology_path),
        format_func=topology_label,
    )
    st.caption(picked)
    if st.button("Load selected") and picked:
        render(lambda c: c.select_topology(picked))
        st.session_state.pop("last_country", None)

    options = load_region_options(picked)
    country = st.selectbox(
        "Countries",
        options,
        index=None,
        format_func=lambda o: o.label,
        placeholder="Pick a region to drill down",
    )
    if country is not None and st.session_state.get("last_country") != country.key:
        st.session_state["last_country"] = country.key
        render(lambda c: c.select_country(country))

# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------

if state.active_chart is None:
    render(lambda c: c.start())

st.title("Choropleth map")
st.caption(f"{topology_label(state.active_topology_path)} · {state.phase.value.replace('_', ' ')}")

chart = state.active_chart
if chart is not None and chart.alive:
    st.plotly_chart(chart.figure, use_container_width=True)
else:
    st.warning("The map could not be rendered. Check the host logs and the topology path.")
