from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

import pandas as pd

from dashboard.config import DashboardConfig, get_config
from dashboard.filters import FilterState, normalize_filters
from dashboard.geo import BoundaryResult, RegionPartition, load_boundaries, partition_by_region
from dashboard.ingestion import IngestionResult, ingest_sources
from dashboard.metrics import (
    available_datasets,
    available_months,
    available_years,
    category_share,
    kpi_summary,
    overall_series,
    ranked_indicators,
    resolve_indicator,
    row_counts,
    selected_indicator_series,
    top_indicators,
)
from dashboard.normalize import records_frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardData:
    ingestion: IngestionResult
    boundaries: BoundaryResult
    frame: pd.DataFrame = field(default_factory=pd.DataFrame, compare=False)
    region: str = ""

    @property
    def ok(self) -> bool:
        return self.ingestion.ok

    @property
    def default_dataset(self) -> str:
        return self.ingestion.default_dataset

    @property
    def datasets(self) -> List[str]:
        return available_datasets(self.frame)

    def partition(self) -> RegionPartition:
        return partition_by_region(self.boundaries.collection, self.region)


def build_dashboard_data(
    config: Optional[DashboardConfig] = None,
    *,
    fetch_workbook: Optional[Callable[[str], bytes]] = None,
    fetch_boundaries: Optional[Callable[[str], Dict[str, Any]]] = None,
) -> DashboardData:
    """Run ingestion and the boundary load; the two report failures independently."""
    config = config or get_config()
    ingestion = ingest_sources(config=config, fetch=fetch_workbook)
    boundaries = load_boundaries(config.boundary_url, fetch=fetch_boundaries, timeout=config.http_timeout)
    return DashboardData(
        ingestion=ingestion,
        boundaries=boundaries,
        frame=records_frame(ingestion.records),
        region=config.region,
    )


class DashboardStore:
    """
    Holds the current ``DashboardData`` snapshot.

    A reload builds a complete new snapshot before swapping it in, so readers
    only ever see the previous snapshot, nothing, or the finished one.
    """

    def __init__(self, loader: Callable[[], DashboardData] = build_dashboard_data) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._load_lock = threading.Lock()
        self._data: Optional[DashboardData] = None
        self._loading = False

    @property
    def status(self) -> Literal["idle", "loading", "ready", "failed"]:
        with self._lock:
            if self._loading:
                return "loading"
            if self._data is None:
                return "idle"
            return "ready" if self._data.ok else "failed"

    def snapshot(self) -> Optional[DashboardData]:
        with self._lock:
            return self._data

    def _load(self) -> DashboardData:
        # Caller holds _load_lock.
        with self._lock:
            self._loading = True
        try:
            data = self._loader()
        finally:
            with self._lock:
                self._loading = False
        with self._lock:
            self._data = data
        logger.info(
            "Dashboard data loaded: ingestion=%s, records=%d, map=%s",
            data.ingestion.status,
            len(data.ingestion.records),
            "ok" if data.boundaries.ok else "failed",
        )
        return data

    def reload(self) -> DashboardData:
        with self._load_lock:
            return self._load()

    def get(self) -> DashboardData:
        """Current snapshot; concurrent first callers share a single load."""
        data = self.snapshot()
        if data is not None:
            return data
        with self._load_lock:
            data = self.snapshot()
            if data is None:
                data = self._load()
        return data


_STORE = DashboardStore()


def get_store() -> DashboardStore:
    return _STORE


def prepare_context(filters: dict | FilterState, data: DashboardData) -> Dict[str, Any]:
    """Resolve filters and compute every aggregate the pages need for one filter state."""
    frame = data.frame
    filt = (
        filters
        if isinstance(filters, FilterState)
        else normalize_filters(filters, available_datasets=data.datasets, default_dataset=data.default_dataset)
    )
    chosen = resolve_indicator(frame, filt)
    selected = selected_indicator_series(frame, filt)
    overall = overall_series(frame, filt)
    return {
        "filters": filt,
        "chosen_indicator": chosen,
        "datasets": data.datasets,
        "years": available_years(frame, filt),
        "months": available_months(frame, filt),
        "indicators": ranked_indicators(frame, filt),
        "selected_series": selected,
        "overall_series": overall,
        "top_indicators": top_indicators(frame, filt),
        "category_share": category_share(frame, filt),
        "kpi_selected": kpi_summary(selected),
        "kpi_overall": kpi_summary(overall),
        "row_counts": row_counts(frame, filt),
    }
