from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from dashboard.data import DashboardData
from dashboard.filters import FilterState


def compute_debug(filters: FilterState, data: DashboardData) -> Dict[str, Any]:
    ingestion = data.ingestion
    frame: pd.DataFrame = data.frame
    partition = data.partition()
    payload: Dict[str, Any] = {
        "filters": asdict(filters),
        "ingestion": {
            "status": ingestion.status,
            "error": ingestion.error,
            "default_dataset": ingestion.default_dataset,
            "primary_rows": len(ingestion.primary.records) if ingestion.primary else 0,
            "secondary_rows": ingestion.secondary_record_count,
            "sources": [
                {"url": s.url, "ok": s.ok, "rows": len(s.records), "error": s.error}
                for s in ([ingestion.primary] if ingestion.primary else []) + list(ingestion.secondaries)
            ],
            "failed_sources": ingestion.failed_sources,
        },
        "boundaries": {
            "ok": data.boundaries.ok,
            "error": data.boundaries.error,
            "feature_count": len(partition.all_features),
            "region": data.region,
            "region_found": partition.found,
        },
        "row_counts": {},
        "period_coverage": [],
    }

    if not frame.empty:
        payload["row_counts"] = {str(k): int(v) for k, v in frame.groupby("dataset", sort=False).size().items()}
        coverage = (
            frame.groupby(["dataset", "year"], sort=False)
            .agg(periods=("period", "nunique"), indicators=("indicator", "nunique"), rows=("value", "size"))
            .reset_index()
        )
        payload["period_coverage"] = coverage.to_dict(orient="records")
    return payload
