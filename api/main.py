from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import FilterStateModel, MetaListResponse, StatusResponse
from dashboard.charts import region_map_chart, to_vega_spec
from dashboard.data import DashboardData, DashboardStore, get_store, prepare_context
from dashboard.filters import FilterState, normalize_filters
from dashboard.metrics import available_months, available_years, period_rows, ranked_indicators
from dashboard.metrics_debug import compute_debug
from dashboard.metrics_overview import compute_overview


app = FastAPI(title="Province Results Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: FilterStateModel, data: DashboardData) -> FilterState:
    raw = model.model_dump()
    return normalize_filters(raw, available_datasets=data.datasets, default_dataset=data.default_dataset)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        ),
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _unavailable(data: DashboardData) -> Optional[JSONResponse]:
    if data.ok:
        return None
    return JSONResponse(status_code=503, content={"error": data.ingestion.error or "ingestion failed", "type": "IngestionFailed"})


def _meta_filters(data: DashboardData, dataset: Optional[str], year: str = "All") -> FilterState:
    return normalize_filters(
        {"dataset": dataset, "year": year},
        available_datasets=data.datasets,
        default_dataset=data.default_dataset,
    )


@app.get("/status", response_model=StatusResponse)
def status(store: DashboardStore = Depends(get_store)):
    data = store.snapshot()
    if data is None:
        return StatusResponse(status=store.status)
    return StatusResponse(
        status=store.status,
        error=data.ingestion.error,
        map_error=data.boundaries.error,
        default_dataset=data.default_dataset,
        records=len(data.ingestion.records),
        failed_sources=data.ingestion.failed_sources,
    )


@app.post("/reload", response_model=StatusResponse)
def reload(store: DashboardStore = Depends(get_store)):
    try:
        data = store.reload()
        return StatusResponse(
            status=store.status,
            error=data.ingestion.error,
            map_error=data.boundaries.error,
            default_dataset=data.default_dataset,
            records=len(data.ingestion.records),
            failed_sources=data.ingestion.failed_sources,
        )
    except Exception as exc:
        logger.exception("reload failed")
        return _error(exc)


@app.get("/meta/datasets")
def meta_datasets(store: DashboardStore = Depends(get_store)):
    try:
        data = store.get()
        return _unavailable(data) or _json({"datasets": data.datasets, "default": data.default_dataset})
    except Exception as exc:
        logger.exception("meta_datasets failed")
        return _error(exc)


@app.get("/meta/years", response_model=MetaListResponse)
def meta_years(dataset: Optional[str] = Query(default=None), store: DashboardStore = Depends(get_store)):
    try:
        data = store.get()
        return _unavailable(data) or MetaListResponse(values=available_years(data.frame, _meta_filters(data, dataset)))
    except Exception as exc:
        logger.exception("meta_years failed")
        return _error(exc)


@app.get("/meta/months", response_model=MetaListResponse)
def meta_months(
    dataset: Optional[str] = Query(default=None),
    year: str = Query(default="All"),
    store: DashboardStore = Depends(get_store),
):
    try:
        data = store.get()
        filters = _meta_filters(data, dataset, year)
        return _unavailable(data) or MetaListResponse(values=available_months(data.frame, filters))
    except Exception as exc:
        logger.exception("meta_months failed")
        return _error(exc)


@app.get("/meta/indicators")
def meta_indicators(dataset: Optional[str] = Query(default=None), store: DashboardStore = Depends(get_store)):
    try:
        data = store.get()
        return _unavailable(data) or _json({"indicators": ranked_indicators(data.frame, _meta_filters(data, dataset))})
    except Exception as exc:
        logger.exception("meta_indicators failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: FilterStateModel, store: DashboardStore = Depends(get_store)):
    try:
        data = store.get()
        unavailable = _unavailable(data)
        if unavailable is not None:
            return unavailable
        f = _filters_from_model(filters, data)
        ctx = prepare_context(f, data)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/debug")
def debug(filters: FilterStateModel, store: DashboardStore = Depends(get_store)):
    try:
        data = store.get()
        return _json(compute_debug(_filters_from_model(filters, data), data))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.get("/map")
def region_map(include_chart: bool = Query(default=False), store: DashboardStore = Depends(get_store)):
    try:
        data = store.get()
        if not data.boundaries.ok:
            return JSONResponse(status_code=503, content={"error": data.boundaries.error, "type": "BoundaryLoadFailed"})
        partition = data.partition()
        payload = {
            "region": data.region,
            "found": partition.found,
            "target": {"type": "FeatureCollection", "features": partition.target_features},
            "all": {"type": "FeatureCollection", "features": partition.all_features},
        }
        if include_chart:
            payload["chart"] = to_vega_spec(region_map_chart(partition, title=data.region))
        return _json(payload)
    except Exception as exc:
        logger.exception("region_map failed")
        return _error(exc)


@app.post("/export/records")
def export_records(filters: FilterStateModel, store: DashboardStore = Depends(get_store)):
    data = store.get()
    unavailable = _unavailable(data)
    if unavailable is not None:
        return unavailable
    f = _filters_from_model(filters, data)
    export_df = period_rows(data.frame, f)
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    filename = f"{f.dataset.lower() or 'records'}.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
