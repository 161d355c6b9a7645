"""Thin async HTTP helpers over httpx that raise FetchError."""

from __future__ import annotations

import logging

import httpx

from choromap import config
from choromap.errors import FetchError

logger = logging.getLogger(__name__)


def make_client(base_url: str | None = None) -> httpx.AsyncClient:
    """Async client pointed at the static host."""
    return httpx.AsyncClient(
        base_url=base_url or config.BASE_URL,
        timeout=config.TIMEOUT,
        follow_redirects=True,
    )


async def fetch(client: httpx.AsyncClient, path: str) -> httpx.Response:
    """GET *path* and return the response, raising FetchError on failure."""
    try:
        resp = await client.get(path)
    except httpx.HTTPError as exc:
        raise FetchError(path, str(exc) or type(exc).__name__) from exc
    if not resp.is_success:
        raise FetchError(path, f"HTTP {resp.status_code}", status_code=resp.status_code)
    return resp


async def exists(client: httpx.AsyncClient, path: str) -> bool:
    """HEAD probe. Any failure counts as absent."""
    try:
        resp = await client.head(path)
    except httpx.HTTPError as exc:
        logger.debug("HEAD %s failed: %s", path, exc)
        return False
    return resp.is_success
