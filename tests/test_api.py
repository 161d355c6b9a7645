"""Integration tests for the static host.

Each test points the host at a temporary public directory and map
collection, so nothing outside tmp_path is served.
"""

from __future__ import annotations

import json
import time

import pytest
from fastapi.testclient import TestClient

from choromap import config
from choromap.api.cache import clear_all, ttl_cache
from choromap.api.routes import scan_topologies
from choromap.main import create_app


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def site(tmp_path, monkeypatch):
    public = tmp_path / "public"
    (public / "datasets").mkdir(parents=True)
    (public / "index.html").write_text("<h1>ChoroMap</h1>")
    (public / "datasets" / "population.csv").write_text("hc-key,value\nus,1\n")

    collection = tmp_path / "map-collection"
    (collection / "custom").mkdir(parents=True)
    (collection / "countries" / "us").mkdir(parents=True)
    (collection / "custom" / "world.topo.json").write_text(json.dumps({"type": "Topology"}))
    (collection / "custom" / "europe.topo.json").write_text(json.dumps({"type": "Topology"}))
    (collection / "countries" / "us" / "us-all.topo.json").write_text("{}")
    (collection / "countries" / "us" / "us-all.geo.json").write_text("{}")

    monkeypatch.setattr(config, "PUBLIC_DIR", public)
    monkeypatch.setattr(config, "MAP_COLLECTION_DIR", collection)
    scan_topologies.cache_clear()
    yield tmp_path
    scan_topologies.cache_clear()


@pytest.fixture
def client(site):
    with TestClient(create_app()) as c:
        yield c


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestMainPage:
    def test_index(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "ChoroMap" in resp.text

    def test_missing_index(self, client, site):
        (site / "public" / "index.html").unlink()
        assert client.get("/").status_code == 404


class TestStaticFiles:
    def test_dataset_csv(self, client):
        resp = client.get("/datasets/population.csv")
        assert resp.status_code == 200
        assert resp.text.startswith("hc-key,value")

    def test_map_collection(self, client):
        resp = client.get("/map-collection/custom/world.topo.json")
        assert resp.status_code == 200
        assert resp.json() == {"type": "Topology"}

    def test_head_probe(self, client):
        assert client.head("/map-collection/countries/us/us-all.topo.json").status_code == 200
        assert client.head("/map-collection/countries/fr/fr-all.topo.json").status_code == 404

    def test_unknown_path(self, client):
        assert client.get("/nothing/here.json").status_code == 404


class TestTopologyList:
    def test_lists_topo_files_only(self, client):
        resp = client.get("/topoList.json")
        assert resp.status_code == 200
        assert resp.json() == [
            "/map-collection/countries/us/us-all.topo.json",
            "/map-collection/custom/europe.topo.json",
            "/map-collection/custom/world.topo.json",
        ]

    def test_list_is_cached(self, client, site):
        first = client.get("/topoList.json").json()
        (site / "map-collection" / "custom" / "asia.topo.json").write_text("{}")
        assert client.get("/topoList.json").json() == first

        scan_topologies.cache_clear()
        assert "/map-collection/custom/asia.topo.json" in client.get("/topoList.json").json()

    def test_missing_collection(self, site, monkeypatch):
        monkeypatch.setattr(config, "MAP_COLLECTION_DIR", site / "absent")
        with TestClient(create_app()) as c:
            assert c.get("/topoList.json").json() == []
            assert c.get("/map-collection/custom/world.topo.json").status_code == 404


class TestTtlCache:
    def setup_method(self):
        clear_all()

    def test_returns_cached_value(self):
        calls = 0

        @ttl_cache(ttl=60)
        def expensive():
            nonlocal calls
            calls += 1
            return {"data": 42}

        assert expensive() == expensive()
        assert calls == 1

    def test_expires(self):
        calls = 0

        @ttl_cache(ttl=0.05)
        def short_lived():
            nonlocal calls
            calls += 1
            return calls

        assert short_lived() == 1
        time.sleep(0.1)
        assert short_lived() == 2

    def test_keys_on_arguments(self):
        @ttl_cache(ttl=60)
        def double(x):
            return x * 2

        assert double(5) == 10
        assert double(10) == 20

    def test_clear_all(self):
        @ttl_cache(ttl=lambda: 60)
        def stamp():
            return time.monotonic()

        first = stamp()
        assert clear_all() >= 1
        assert stamp() != first
