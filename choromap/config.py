"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parent.parent

PUBLIC_DIR = Path(os.getenv("CHOROMAP_PUBLIC_DIR", PROJECT_ROOT / "public"))

# Directory holding the @highcharts/map-collection files (custom/, countries/ ...)
MAP_COLLECTION_DIR = Path(
    os.getenv(
        "CHOROMAP_MAP_COLLECTION_DIR",
        PROJECT_ROOT / "node_modules" / "@highcharts" / "map-collection",
    )
)

# URL prefix the map collection is mounted under on the static host
MAP_COLLECTION_PREFIX = "/map-collection"

HOST = os.getenv("CHOROMAP_HOST", "0.0.0.0")
PORT = int(os.getenv("CHOROMAP_PORT", "3000"))

# Where the dashboard reaches the static host
BASE_URL = os.getenv("CHOROMAP_BASE_URL", f"http://localhost:{PORT}")

DEFAULT_MAP_PATH = os.getenv(
    "CHOROMAP_DEFAULT_MAP",
    f"{MAP_COLLECTION_PREFIX}/custom/world.topo.json",
)

TOPO_LIST_PATH = "/topoList.json"
TOPO_LIST_TTL = int(os.getenv("CHOROMAP_TOPO_LIST_TTL", "300"))

# Timeouts (connect, read) in seconds
TIMEOUT = httpx.Timeout(10.0, read=60.0)


def resolve_default_map(query_params: dict[str, str] | None = None) -> str:
    """Return the initial topology path, letting a ``map`` query parameter win."""
    if query_params:
        override = (query_params.get("map") or "").strip()
        if override:
            return override
    return DEFAULT_MAP_PATH
