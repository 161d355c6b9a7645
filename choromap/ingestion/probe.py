"""Country drill-down: locate a dedicated topology for a selected region."""

from __future__ import annotations

import logging

import httpx

from choromap import config
from choromap.errors import NotFoundError
from choromap.ingestion.http import exists
from choromap.ingestion.topology import RegionOption

logger = logging.getLogger(__name__)

# Conventional layout of the map collection's per-country files.
COUNTRY_TEMPLATES = (
    "{prefix}/countries/{code}/{code}-all.topo.json",
    "{prefix}/countries/{code}/{code}-all.geo.json",
)


def candidate_paths(option: RegionOption, prefix: str = config.MAP_COLLECTION_PREFIX) -> list[str]:
    """Paths to try for *option*, most specific first.

    ISO-2 then ISO-3 codes, each as topo then geo JSON. The region key (or
    the display name when there is no key) comes last as a topo file.
    Codes are lowercased to match the collection's directory names.
    """
    candidates: list[str] = []
    for code in (option.iso_a2, option.iso_a3):
        code = code.strip().lower()
        if code:
            candidates.extend(t.format(prefix=prefix, code=code) for t in COUNTRY_TEMPLATES)
    fallback = (option.key or option.name).strip().lower()
    if fallback:
        candidates.append(COUNTRY_TEMPLATES[0].format(prefix=prefix, code=fallback))
    return list(dict.fromkeys(candidates))


class CountryTopologyProber:
    def __init__(self, client: httpx.AsyncClient, prefix: str = config.MAP_COLLECTION_PREFIX):
        self._client = client
        self._prefix = prefix

    async def find(self, option: RegionOption) -> str:
        """First candidate path that exists on the host.

        Raises NotFoundError when none does.
        """
        candidates = candidate_paths(option, self._prefix)
        for path in candidates:
            if await exists(self._client, path):
                logger.info("Country topology for %s: %s", option.key, path)
                return path
        raise NotFoundError(f"No country topology for {option.label!r} ({len(candidates)} tried)")
