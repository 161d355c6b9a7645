"""HTTP routes of the static host: landing page and topology list."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from choromap import config
from choromap.api.cache import ttl_cache

logger = logging.getLogger(__name__)

router = APIRouter()


@ttl_cache(ttl=lambda: config.TOPO_LIST_TTL)
def scan_topologies(collection_dir: Path, prefix: str) -> list[str]:
    """URL paths of every ``*.topo.json`` under the map collection, sorted."""
    if not collection_dir.is_dir():
        logger.warning("Map collection not found at %s", collection_dir)
        return []
    paths = sorted(
        f"{prefix}/{p.relative_to(collection_dir).as_posix()}"
        for p in collection_dir.rglob("*.topo.json")
        if p.is_file()
    )
    logger.info("Found %d topologies under %s", len(paths), collection_dir)
    return paths


@router.get("/", include_in_schema=False)
def index() -> FileResponse:
    page = config.PUBLIC_DIR / "index.html"
    if not page.is_file():
        raise HTTPException(status_code=404, detail="index.html not found")
    return FileResponse(page)


@router.get(config.TOPO_LIST_PATH, summary="Available topology documents")
def topology_list() -> list[str]:
    return scan_topologies(config.MAP_COLLECTION_DIR, config.MAP_COLLECTION_PREFIX)
