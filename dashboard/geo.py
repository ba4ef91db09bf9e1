from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from dashboard.config import REGION_NAME_KEYS
from dashboard.errors import BoundaryLoadError
from dashboard.parsing import canonicalize_name, coerce_text

logger = logging.getLogger(__name__)

Feature = Dict[str, Any]


@dataclass(frozen=True)
class RegionPartition:
    target_features: List[Feature] = field(default_factory=list)
    all_features: List[Feature] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.target_features)


@dataclass(frozen=True)
class BoundaryResult:
    collection: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.collection is not None and self.error is None


def region_name(feature: Feature, keys: Sequence[str] = REGION_NAME_KEYS) -> str:
    props = (feature or {}).get("properties") or {}
    for key in keys:
        name = coerce_text(props.get(key))
        if name:
            return name
    return ""


def features_of(collection: Optional[Dict[str, Any]]) -> List[Feature]:
    if not collection:
        return []
    return [f for f in (collection.get("features") or []) if isinstance(f, dict)]


def partition_by_region(collection: Optional[Dict[str, Any]], target_region: str) -> RegionPartition:
    """Split boundary features into the highlighted region and the full (dimmed) set."""
    features = features_of(collection)
    target = canonicalize_name(target_region)
    matches = [f for f in features if canonicalize_name(region_name(f)) == target]
    return RegionPartition(target_features=matches, all_features=features)


def fetch_geojson(url: str, timeout: float = 30.0) -> Dict[str, Any]:
    try:
        res = requests.get(url, timeout=timeout)
        res.raise_for_status()
        data = res.json()
    except (requests.RequestException, ValueError) as exc:
        raise BoundaryLoadError(f"boundary fetch failed: {url} ({exc})") from exc
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise BoundaryLoadError(f"boundary document has no feature list: {url}")
    return data


def load_boundaries(url: str, *, fetch: Optional[Callable[[str], Dict[str, Any]]] = None, timeout: float = 30.0) -> BoundaryResult:
    fetch = fetch or (lambda u: fetch_geojson(u, timeout=timeout))
    try:
        return BoundaryResult(collection=fetch(url))
    except Exception as exc:
        logger.warning("Boundary load failed: %s", exc)
        return BoundaryResult(error=str(exc))
