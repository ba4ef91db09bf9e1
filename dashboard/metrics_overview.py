from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from dashboard.charts import ranking_chart, series_chart, share_chart, to_vega_spec
from dashboard.filters import FilterState
from dashboard.parsing import format_int, short_label


def _kpi_display(kpi: Dict[str, Any]) -> Dict[str, str]:
    return {
        "latest": format_int(kpi["latest"]),
        "previous": format_int(kpi["previous"]),
        "change_pct": f"{kpi['change_pct']:.1f}%",
        "total": format_int(kpi["total"]),
        "average": format_int(kpi["average"]),
        "period_count": format_int(kpi["period_count"]),
    }


def compute_overview(filters: FilterState, ctx: Dict[str, Any]) -> Dict[str, Any]:
    chosen = ctx.get("chosen_indicator", "")
    selected = ctx.get("selected_series", [])
    overall = ctx.get("overall_series", [])
    top = ctx.get("top_indicators", [])
    shares = ctx.get("category_share", [])

    charts: Dict[str, Any] = {}
    if selected:
        charts["selected_trend"] = to_vega_spec(series_chart(selected, title=short_label(chosen)))
    if overall:
        charts["overall_trend"] = to_vega_spec(series_chart(overall, title="All indicators"))
    if top:
        charts["top_indicators"] = to_vega_spec(ranking_chart(top, title="Top indicators"))
    if shares:
        charts["category_share"] = to_vega_spec(share_chart(shares, title="Share by family"))

    return {
        "filters": asdict(filters),
        "options": {
            "datasets": ctx.get("datasets", []),
            "years": ctx.get("years", []),
            "months": ctx.get("months", []),
            "indicators": [
                {"name": i["name"], "label": short_label(i["name"]), "total": i["total"]}
                for i in ctx.get("indicators", [])
            ],
        },
        "indicator": {"chosen": chosen, "auto": filters.is_auto},
        "series": {"selected": selected, "overall": overall},
        "kpis": {
            "selected": ctx.get("kpi_selected", {}),
            "overall": ctx.get("kpi_overall", {}),
        },
        "kpis_display": {
            "selected": _kpi_display(ctx["kpi_selected"]) if "kpi_selected" in ctx else {},
            "overall": _kpi_display(ctx["kpi_overall"]) if "kpi_overall" in ctx else {},
        },
        "top_indicators": top,
        "category_share": shares,
        "row_counts": ctx.get("row_counts", {}),
        "charts": charts,
    }
