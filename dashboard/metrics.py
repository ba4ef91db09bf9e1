"""
Pure aggregations over the unified record frame.

Every function takes the frame built by ``records_frame`` plus a
``FilterState`` and recomputes from scratch; nothing is cached or mutated.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from dashboard.config import RANKED_INDICATOR_LIMIT, TOP_INDICATOR_LIMIT
from dashboard.filters import ALL, AUTO, FilterState
from dashboard.parsing import coerce_text, month_index, round_half_up, sort_periods, year_number


def _text(series: pd.Series) -> pd.Series:
    return series.astype(str).str.strip()


def dataset_rows(frame: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    if frame.empty:
        return frame
    return frame[_text(frame["dataset"]) == coerce_text(filters.dataset)]


def period_rows(frame: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    """Rows matching dataset, year and month (year/month 'All' match everything)."""
    rows = dataset_rows(frame, filters)
    if rows.empty:
        return rows
    if filters.year != ALL:
        rows = rows[_text(rows["year"]) == coerce_text(filters.year)]
    if filters.month != ALL:
        rows = rows[_text(rows["month"]) == coerce_text(filters.month)]
    return rows


def _grouped_sum(rows: pd.DataFrame, key: str) -> pd.Series:
    if rows.empty:
        return pd.Series(dtype=float)
    keys = _text(rows[key])
    rows = rows.assign(**{key: keys})[keys.ne("")]
    return rows.groupby(key, sort=False)["value"].sum()


def _ranked(totals: pd.Series, limit: int | None = None) -> pd.Series:
    ranked = totals.sort_values(ascending=False, kind="stable")
    return ranked.head(limit) if limit is not None else ranked


def available_datasets(frame: pd.DataFrame) -> List[str]:
    if frame.empty:
        return []
    names = [d for d in pd.unique(_text(frame["dataset"])) if d]
    return list(names)


def available_years(frame: pd.DataFrame, filters: FilterState) -> List[str]:
    rows = dataset_rows(frame, filters)
    if rows.empty:
        return []
    years = [y for y in pd.unique(_text(rows["year"])) if y]
    return sorted(years, key=year_number)


def available_months(frame: pd.DataFrame, filters: FilterState) -> List[str]:
    rows = dataset_rows(frame, filters)
    if rows.empty:
        return []
    if filters.year != ALL:
        rows = rows[_text(rows["year"]) == coerce_text(filters.year)]
    months = [m for m in pd.unique(_text(rows["month"])) if m]
    return sorted(months, key=month_index)


def ranked_indicators(frame: pd.DataFrame, filters: FilterState, limit: int = RANKED_INDICATOR_LIMIT) -> List[Dict[str, Any]]:
    """Indicator totals for the whole dataset; year and month do not apply here."""
    totals = _ranked(_grouped_sum(dataset_rows(frame, filters), "indicator"), limit)
    return [{"name": str(name), "total": float(total)} for name, total in totals.items()]


def resolve_indicator(frame: pd.DataFrame, filters: FilterState) -> str:
    if filters.indicator and filters.indicator != AUTO:
        return filters.indicator
    ranked = ranked_indicators(frame, filters, limit=1)
    return ranked[0]["name"] if ranked else ""


def _period_series(rows: pd.DataFrame) -> List[Dict[str, Any]]:
    totals = _grouped_sum(rows, "period")
    return [{"name": period, "value": round_half_up(totals[period])} for period in sort_periods(totals.index)]


def selected_indicator_series(frame: pd.DataFrame, filters: FilterState) -> List[Dict[str, Any]]:
    rows = period_rows(frame, filters)
    chosen = resolve_indicator(frame, filters)
    if chosen and not rows.empty:
        rows = rows[_text(rows["indicator"]) == coerce_text(chosen)]
    return _period_series(rows)


def overall_series(frame: pd.DataFrame, filters: FilterState) -> List[Dict[str, Any]]:
    return _period_series(period_rows(frame, filters))


def top_indicators(frame: pd.DataFrame, filters: FilterState, limit: int = TOP_INDICATOR_LIMIT) -> List[Dict[str, Any]]:
    totals = _grouped_sum(period_rows(frame, filters), "indicator")
    rounded = totals.map(round_half_up) if not totals.empty else totals
    return [{"name": str(name), "value": int(value)} for name, value in _ranked(rounded, limit).items()]


def category_share(frame: pd.DataFrame, filters: FilterState) -> List[Dict[str, Any]]:
    rows = period_rows(frame, filters)
    if rows.empty:
        return []
    family = _text(rows["family"])
    rows = rows.assign(family=family.where(family.ne(""), coerce_text(filters.dataset)))
    totals = _grouped_sum(rows, "family")
    rounded = totals.map(round_half_up) if not totals.empty else totals
    return [{"name": str(name), "value": int(value)} for name, value in _ranked(rounded).items()]


def kpi_summary(series: List[Dict[str, Any]]) -> Dict[str, Any]:
    values = [float(p.get("value") or 0) for p in series]
    latest = values[-1] if values else 0.0
    previous = values[-2] if len(values) >= 2 else 0.0
    change_pct = (latest - previous) / previous * 100 if previous > 0 else 0.0
    total = sum(values)
    return {
        "latest": latest,
        "previous": previous,
        "change_pct": change_pct,
        "total": total,
        "average": total / len(values) if values else 0.0,
        "period_count": len(values),
    }


def row_counts(frame: pd.DataFrame, filters: FilterState) -> Dict[str, int]:
    return {"total": int(len(frame)), "filtered": int(len(period_rows(frame, filters)))}
