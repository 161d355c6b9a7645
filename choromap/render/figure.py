"""Apply a SeriesConfig to a plotly choropleth figure."""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Iterator

import plotly.graph_objects as go
import topojson as tp

from choromap.errors import ParseError
from choromap.render.series import (
    BASE_BORDER,
    BASE_FILL,
    COLOR_STOPS,
    HOVER_COLOR,
    SeriesConfig,
)

logger = logging.getLogger(__name__)

FEATURE_ID_KEY = "properties.hc-key"
TOPOLOGY_OBJECT = "default"


def topology_to_geojson(document: dict[str, Any]) -> dict[str, Any]:
    """GeoJSON FeatureCollection for a TopoJSON or GeoJSON document.

    Map collection topologies keep their geometries under ``objects.default``;
    a document without that object converts to an empty collection.
    """
    if document.get("type") == "FeatureCollection":
        return document
    if TOPOLOGY_OBJECT not in (document.get("objects") or {}):
        logger.warning("No %r object in topology; drawing an empty map", TOPOLOGY_OBJECT)
        return {"type": "FeatureCollection", "features": []}
    try:
        topology = tp.Topology(
            document, topology=True, prequantize=False, object_name=TOPOLOGY_OBJECT,
        )
        return json.loads(topology.to_geojson())
    except (Exception, SystemExit) as exc:  # topojson exits on unreadable input
        raise ParseError(f"Cannot convert topology to GeoJSON: {exc}") from exc


def _positions(coords: Any) -> Iterator[tuple[float, float]]:
    if isinstance(coords, (list, tuple)) and coords and isinstance(coords[0], (int, float)):
        yield float(coords[0]), float(coords[1])
    elif isinstance(coords, (list, tuple)):
        for part in coords:
            yield from _positions(part)


def _geometry_positions(geometry: dict[str, Any] | None) -> Iterator[tuple[float, float]]:
    if not geometry:
        return
    if geometry.get("type") == "GeometryCollection":
        for sub in geometry.get("geometries") or []:
            yield from _geometry_positions(sub)
    else:
        yield from _positions(geometry.get("coordinates"))


def feature_bounds(geojson: dict[str, Any], region_key: str) -> tuple[float, float, float, float] | None:
    """(min_lon, min_lat, max_lon, max_lat) of the feature keyed *region_key*."""
    for feature in geojson.get("features") or []:
        if (feature.get("properties") or {}).get("hc-key") != region_key:
            continue
        positions = list(_geometry_positions(feature.get("geometry")))
        if not positions:
            return None
        lons = [p[0] for p in positions]
        lats = [p[1] for p in positions]
        return min(lons), min(lats), max(lons), max(lats)
    return None


def build_figure(cfg: SeriesConfig, geojson: dict[str, Any] | None = None) -> go.Figure:
    if geojson is None:
        geojson = topology_to_geojson(cfg.topology.document)

    base, data = cfg.layers
    fig = go.Figure()
    fig.add_trace(go.Choropleth(
        geojson=geojson,
        featureidkey=FEATURE_ID_KEY,
        locations=list(base.locations),
        z=[0] * len(base.locations),
        colorscale=[[0, BASE_FILL], [1, BASE_FILL]],
        showscale=False,
        showlegend=base.show_in_legend,
        marker_line_color=BASE_BORDER,
        hoverinfo="skip",
        name=base.name,
    ))

    values = [math.nan if v is None else v for v in data.values]
    value_trace = go.Choropleth(
        geojson=geojson,
        featureidkey=FEATURE_ID_KEY,
        locations=list(data.locations),
        z=values,
        colorscale=[[stop, color] for stop, color in COLOR_STOPS],
        marker_line_color=BASE_BORDER,
        colorbar=dict(tickformat=",.0f", title=dict(text=data.name)),
        hoverlabel=dict(bgcolor="white", bordercolor=HOVER_COLOR),
        name=data.name,
    )
    rng = cfg.color_range
    if rng.max is not None and rng.max > rng.min:
        value_trace.update(zmin=rng.min, zmax=rng.max, zauto=False)
    else:
        value_trace.update(zauto=True)

    if cfg.selected_keys:
        value_trace.update(
            customdata=[[t or ""] for t in data.tooltips],
            hovertemplate="%{customdata[0]}<extra></extra>",
        )
    else:
        value_trace.update(hoverinfo="none")
    fig.add_trace(value_trace)

    fig.update_geos(
        fitbounds="locations",
        visible=False,
        projection_type="mercator",
    )
    fig.update_layout(
        margin=dict(l=0, r=0, t=0, b=0),
        height=600,
        template="plotly_white",
        paper_bgcolor="rgba(0,0,0,0)",
        dragmode="pan",
    )
    return fig


def focus_figure(fig: go.Figure, geojson: dict[str, Any], region_key: str) -> bool:
    """Zoom *fig* onto one feature and highlight it. False if it is not on the map."""
    bounds = feature_bounds(geojson, region_key)
    if bounds is None:
        logger.warning("focus: feature not found for %s", region_key)
        return False
    min_lon, min_lat, max_lon, max_lat = bounds
    fig.update_geos(
        fitbounds=False,
        lonaxis_range=[min_lon, max_lon],
        lataxis_range=[min_lat, max_lat],
    )
    value_trace = fig.data[-1]
    locations = list(value_trace.locations or [])
    if region_key in locations:
        value_trace.selectedpoints = [locations.index(region_key)]
    return True
