"""
dashboard/config.py

Deployment settings: source URLs, dataset labels, the province this
dashboard is built for, and the column/property aliases the parsers probe.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

DATA_BASE_URL = "https://raw.githubusercontent.com/rahimiabdulrahmanab/Data/main"

BOUNDARY_URL = f"{DATA_BASE_URL}/geoBoundaries-AFG-ADM1.geojson"
PRIMARY_URL = f"{DATA_BASE_URL}/MH.xlsx"
SECONDARY_URLS: Tuple[str, ...] = (
    f"{DATA_BASE_URL}/data.xls",
    f"{DATA_BASE_URL}/data%20(2).xls",
    f"{DATA_BASE_URL}/data%20(3).xls",
    f"{DATA_BASE_URL}/data%20(4).xls",
    f"{DATA_BASE_URL}/data%20(5).xls",
    f"{DATA_BASE_URL}/data%20(6).xls",
    f"{DATA_BASE_URL}/data%20(7).xls",
    f"{DATA_BASE_URL}/BDK-HER2%20SAFE%20M%26E%20Framwork.xlsx",
)

PRIMARY_DATASET = "MH"
SECONDARY_DATASET = "HER"
REGION = "Badakhshan"

PERIOD_ALIASES: Tuple[str, ...] = ("periodname", "period", "period_name")
HEADER_SEARCH_ROWS = 80

# Probed in order, first non-empty value wins.
REGION_NAME_KEYS: Tuple[str, ...] = ("shapeName", "ADM1_NAME", "NAME_1", "province", "PROVINCE", "name")

RANKED_INDICATOR_LIMIT = 60
TOP_INDICATOR_LIMIT = 8
HTTP_TIMEOUT = 30.0
MAX_FETCH_WORKERS = 8


@dataclass(frozen=True)
class DashboardConfig:
    primary_url: str = PRIMARY_URL
    secondary_urls: Tuple[str, ...] = SECONDARY_URLS
    boundary_url: str = BOUNDARY_URL
    primary_dataset: str = PRIMARY_DATASET
    secondary_dataset: str = SECONDARY_DATASET
    region: str = REGION
    http_timeout: float = HTTP_TIMEOUT
    max_workers: int = MAX_FETCH_WORKERS


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_urls_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(u.strip() for u in raw.split(",") if u.strip())


@lru_cache(maxsize=1)
def get_config() -> DashboardConfig:
    """
    Return the cached deployment config, applying ``DASHBOARD_*`` environment overrides.
    """

    return DashboardConfig(
        primary_url=_get_str_env("DASHBOARD_PRIMARY_URL", PRIMARY_URL),
        secondary_urls=_get_urls_env("DASHBOARD_SECONDARY_URLS", SECONDARY_URLS),
        boundary_url=_get_str_env("DASHBOARD_BOUNDARY_URL", BOUNDARY_URL),
        region=_get_str_env("DASHBOARD_REGION", REGION),
        http_timeout=_get_float_env("DASHBOARD_HTTP_TIMEOUT", HTTP_TIMEOUT),
    )
