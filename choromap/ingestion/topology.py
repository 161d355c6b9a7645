"""Topology documents: loading, feature extraction and drill-down options."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

import httpx

from choromap import config
from choromap.errors import NotFoundError, ParseError
from choromap.ingestion.http import fetch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopologyFeature:
    region_key: str
    name: str = ""
    iso_a2: str = ""
    iso_a3: str = ""
    geometry: Any = None


@dataclass(frozen=True)
class RegionOption:
    """An entry of the country drill-down list."""

    key: str
    name: str
    iso_a2: str = ""
    iso_a3: str = ""

    @property
    def label(self) -> str:
        return self.name or self.key


@dataclass(frozen=True)
class Topology:
    path: str
    document: dict[str, Any]
    features: tuple[TopologyFeature, ...] = ()
    diagnostics: tuple[str, ...] = field(default=())

    @cached_property
    def keys(self) -> frozenset[str]:
        """Index of feature keys, built once per loaded document."""
        return frozenset(f.region_key for f in self.features)


def _prop(props: dict[str, Any], *names: str) -> str:
    for name in names:
        value = props.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _to_feature(entry: dict[str, Any]) -> TopologyFeature:
    props = entry.get("properties") or {}
    geometry = entry.get("geometry") if entry.get("type") == "Feature" else entry
    return TopologyFeature(
        region_key=str(props.get("hc-key") or ""),
        name=_prop(props, "name"),
        iso_a2=_prop(props, "iso-a2", "iso_a2"),
        iso_a3=_prop(props, "iso-a3", "iso_a3"),
        geometry=geometry,
    )


def extract_features(document: dict[str, Any]) -> tuple[TopologyFeature, ...]:
    """Features of the document's default geometry collection.

    GeoJSON FeatureCollections are accepted as well. Raises NotFoundError
    when neither container is present.
    """
    if document.get("type") == "FeatureCollection":
        entries = document.get("features")
    else:
        default = (document.get("objects") or {}).get("default") or {}
        entries = default.get("geometries")
    if not isinstance(entries, list):
        raise NotFoundError("Topology features not found")
    return tuple(_to_feature(e) for e in entries if isinstance(e, dict))


def region_options(document: dict[str, Any]) -> list[RegionOption]:
    """Options for the country list, looking in a few common containers."""
    if document.get("type") == "FeatureCollection":
        entries = document.get("features")
    else:
        objects = document.get("objects")
        if not isinstance(objects, dict):
            return []
        container = objects.get("default") or next(iter(objects.values()), None) or {}
        if not isinstance(container, dict):
            return []
        entries = container.get("geometries")
    if not isinstance(entries, list):
        return []

    options = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        props = entry.get("properties") or {}
        name = _prop(props, "name", "NAME", "name_en", "hc-key", "iso_a2")
        options.append(RegionOption(
            key=_prop(props, "hc-key", "hc_key") or name,
            name=name,
            iso_a2=_prop(props, "iso-a2", "iso_a2", "ISO_A2"),
            iso_a3=_prop(props, "iso-a3", "iso_a3", "ISO_A3"),
        ))
    return options


def topology_label(path: str) -> str:
    """Display name for a topology path: no collection prefix, no ``.topo.json``."""
    label = path
    for prefix in (f"{config.MAP_COLLECTION_PREFIX}/custom/", f"{config.MAP_COLLECTION_PREFIX}/"):
        if label.startswith(prefix):
            label = label[len(prefix):]
            break
    return re.sub(r"\.topo\.json$", "", label, flags=re.IGNORECASE)


class TopologyLoader:
    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def load_document(self, path: str) -> dict[str, Any]:
        resp = await fetch(self._client, path)
        try:
            document = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Malformed topology document {path}: {exc}") from exc
        if not isinstance(document, dict):
            raise ParseError(f"Topology document {path} is not a JSON object")
        return document

    async def load(self, path: str) -> Topology:
        document = await self.load_document(path)
        try:
            features = extract_features(document)
        except NotFoundError as exc:
            # Not fatal: the map renders with no matches.
            logger.warning("%s in %s", exc, path)
            return Topology(path=path, document=document, diagnostics=(str(exc),))
        logger.info("Loaded topology %s: %d features", path, len(features))
        return Topology(path=path, document=document, features=features)

    async def list_paths(self) -> list[str]:
        """Topology paths advertised by the host's list endpoint."""
        resp = await fetch(self._client, config.TOPO_LIST_PATH)
        try:
            paths = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Malformed topology list: {exc}") from exc
        if not isinstance(paths, list):
            raise ParseError("Topology list is not a JSON array")
        return [p for p in paths if isinstance(p, str)]
