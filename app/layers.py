from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from scene import BaseLayerConfig

logger = logging.getLogger(__name__)

GEOJSON_QUERY_PARAMS = {"where": "1=1", "outFields": "*", "f": "geojson"}


@dataclass
class BaseLayerData:
    config: BaseLayerConfig
    lons: List[Optional[float]] = field(default_factory=list)
    lats: List[Optional[float]] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.lons


def _is_plain_geojson(url: str) -> bool:
    return url.lower().endswith((".geojson", ".json"))


def fetch_geojson(url: str, timeout: float = 20) -> Dict[str, Any]:
    if _is_plain_geojson(url):
        resp = requests.get(url, timeout=timeout)
    else:
        resp = requests.get(
            f"{url.rstrip('/')}/query", params=GEOJSON_QUERY_PARAMS, timeout=timeout
        )
    resp.raise_for_status()
    data = resp.json()
    if "error" in data:
        raise RuntimeError(f"Feature service error: {data['error']}")
    return data


def _rings(geometry: Dict[str, Any]) -> List[List[List[float]]]:
    geo_type = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if geo_type == "LineString":
        return [coords]
    if geo_type in {"MultiLineString", "Polygon"}:
        return list(coords)
    if geo_type == "MultiPolygon":
        return [ring for polygon in coords for ring in polygon]
    if geo_type == "GeometryCollection":
        return [ring for part in geometry.get("geometries", []) for ring in _rings(part)]
    return []


def geojson_to_paths(geojson: Dict[str, Any]) -> tuple[list, list]:
    lons: List[Optional[float]] = []
    lats: List[Optional[float]] = []
    for feature in geojson.get("features", []):
        geometry = feature.get("geometry") or {}
        for ring in _rings(geometry):
            if len(ring) < 2:
                continue
            for point in ring:
                lons.append(float(point[0]))
                lats.append(float(point[1]))
            # None breaks the line between parts
            lons.append(None)
            lats.append(None)
    return lons, lats


def load_base_layer(
    config: BaseLayerConfig, url: Optional[str] = None, timeout: float = 20
) -> BaseLayerData:
    try:
        geojson = fetch_geojson(url or config.url, timeout=timeout)
        lons, lats = geojson_to_paths(geojson)
    except (requests.RequestException, ValueError, RuntimeError):
        logger.exception("Failed to load base layer %s", config.name)
        return BaseLayerData(config=config)
    logger.info("Loaded base layer %s (%d vertices)", config.name, len(lons))
    return BaseLayerData(config=config, lons=lons, lats=lats)
