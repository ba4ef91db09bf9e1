from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

from dashboard.geo import RegionPartition

alt.data_transformers.disable_max_rows()

CHART_COLORS = [
    "#0B5ED7",
    "#2F80ED",
    "#00A3FF",
    "#6C63FF",
    "#2DBE7F",
    "#F59E0B",
    "#EF4444",
    "#A855F7",
    "#14B8A6",
]


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _points(data: List[Dict[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame(data, columns=["name", "value"])


def series_chart(series: List[Dict[str, Any]], title: str = "") -> alt.Chart:
    # Points arrive already in period order; sort=None keeps it.
    return (
        alt.Chart(_points(series))
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("name:N", sort=None, title="Period", axis=alt.Axis(labelAngle=-40, grid=False)),
            y=alt.Y("value:Q", title=None, axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip("name:N", title="Period"), alt.Tooltip("value:Q", title="Value", format=",")],
        )
        .properties(height=260, title=title)
    )


def ranking_chart(ranking: List[Dict[str, Any]], title: str = "") -> alt.Chart:
    return (
        alt.Chart(_points(ranking))
        .mark_bar(cornerRadiusEnd=4)
        .encode(
            y=alt.Y("name:N", sort="-x", title=None),
            x=alt.X("value:Q", title=None, axis=alt.Axis(format="~s", gridDash=[4, 4])),
            color=alt.Color("name:N", legend=None, scale=alt.Scale(range=CHART_COLORS)),
            tooltip=[alt.Tooltip("name:N", title="Indicator"), alt.Tooltip("value:Q", title="Total", format=",")],
        )
        .properties(height=260, title=title)
    )


def share_chart(shares: List[Dict[str, Any]], title: str = "") -> alt.Chart:
    return (
        alt.Chart(_points(shares))
        .mark_arc(innerRadius=60)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title="Family", scale=alt.Scale(range=CHART_COLORS)),
            tooltip=[alt.Tooltip("name:N", title="Family"), alt.Tooltip("value:Q", title="Total", format=",")],
        )
        .properties(height=260, title=title)
    )


def region_map_chart(partition: RegionPartition, title: str = "") -> alt.LayerChart:
    def _layer(features: List[Dict[str, Any]], fill: str, opacity: float) -> alt.Chart:
        data = alt.InlineData(
            values={"type": "FeatureCollection", "features": features},
            format=alt.DataFormat(property="features", type="json"),
        )
        return (
            alt.Chart(data)
            .mark_geoshape(fill=fill, stroke="#B9D3FF", strokeWidth=0.6, fillOpacity=opacity)
            .project(type="mercator")
        )

    base = _layer(partition.all_features, "#EAF2FF", 0.6)
    highlight = _layer(partition.target_features, CHART_COLORS[0], 0.85)
    return alt.layer(base, highlight).properties(height=360, title=title)
