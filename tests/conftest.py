"""Shared fixtures: in-memory static host and small map documents."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from choromap.ingestion.datasets import DataPoint, DatasetRecord
from choromap.ingestion.topology import Topology, extract_features


def square(x: float, y: float, size: float = 1.0) -> dict[str, Any]:
    ring = [[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]
    return {"type": "Polygon", "coordinates": [ring]}


def geo_feature(key: str, name: str, x: float, y: float, **props: str) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": {"hc-key": key, "name": name, **props},
        "geometry": square(x, y),
    }


WORLD_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        geo_feature("us", "United States", -100, 40, **{"iso-a2": "US", "iso-a3": "USA"}),
        geo_feature("fr", "France", 2, 46, **{"iso-a2": "FR", "iso-a3": "FRA"}),
        geo_feature("br", "Brazil", -50, -10, **{"iso-a2": "BR", "iso-a3": "BRA"}),
    ],
}

US_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        geo_feature("us-ca", "California", -120, 36),
        geo_feature("us-ny", "New York", -75, 42),
    ],
}

WORLD_TOPOJSON = {
    "type": "Topology",
    "objects": {
        "default": {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "Polygon", "arcs": [[0]], "properties": {"hc-key": "us", "name": "United States", "iso-a2": "US", "iso-a3": "USA"}},
                {"type": "Polygon", "arcs": [[1]], "properties": {"hc-key": "fr", "name": "France", "iso_a2": "FR"}},
            ],
        }
    },
    "arcs": [
        [[-100, 40], [-99, 40], [-99, 41], [-100, 41], [-100, 40]],
        [[2, 46], [3, 46], [3, 47], [2, 47], [2, 46]],
    ],
}

POPULATION_CSV = 'hc-key,value\nus,"334,914,895"\nfr,"68,170,228"\nzz,12\n'
GDP_CSV = "hc_key,Value\nus,$27360.9\nfr,$3030.9\nbr,n/a\n"


class StaticHost:
    """Serves a dict of path -> body through httpx.MockTransport."""

    def __init__(self, files: dict[str, Any]):
        self.files = dict(files)
        self.requests: list[tuple[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        if path not in self.files:
            return httpx.Response(404, text="Not Found")
        body = self.files[path]
        if isinstance(body, Exception):
            raise body
        if not isinstance(body, str):
            body = json.dumps(body)
        if request.method == "HEAD":
            return httpx.Response(200)
        return httpx.Response(200, text=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="http://testserver",
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def host() -> StaticHost:
    return StaticHost({
        "/datasets/population.csv": POPULATION_CSV,
        "/datasets/gdp.csv": GDP_CSV,
        "/map-collection/custom/world.geo.json": WORLD_GEOJSON,
        "/map-collection/countries/us/us-all.geo.json": US_GEOJSON,
        "/topoList.json": ["/map-collection/custom/world.topo.json"],
    })


def make_record(key: str, name: str, color: str, values: dict[str, float | None]) -> DatasetRecord:
    return DatasetRecord(
        key=key,
        name=name,
        color=color,
        data=tuple(DataPoint(k, v) for k, v in values.items()),
    )


@pytest.fixture
def datasets() -> list[DatasetRecord]:
    return [
        make_record("population", "Population", "#1f77b4", {"us": 331.0, "fr": 68.0, "zz": 5.0}),
        make_record("gdp", "GDP", "#ff7f0e", {"us": 27360.9, "fr": None}),
    ]


@pytest.fixture
def world() -> Topology:
    return Topology(
        path="/map-collection/custom/world.geo.json",
        document=WORLD_GEOJSON,
        features=extract_features(WORLD_GEOJSON),
    )
