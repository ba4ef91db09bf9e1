import altair as alt
import streamlit as st
from contextlib import contextmanager
from typing import Dict, List

from dashboard.charts import ranking_chart, region_map_chart, series_chart, share_chart
from dashboard.data import get_store, prepare_context
from dashboard.filters import (
    ALL,
    AUTO,
    AUTO_LABEL,
    FilterState,
    reset_filters,
    select_dataset,
    select_indicator,
    select_month,
    select_year,
)
from dashboard.metrics import period_rows
from dashboard.metrics_overview import compute_overview
from dashboard.parsing import format_int, short_label

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #B9D3FF;border-radius: 14px;padding: 14px;background: #ffffff;
               box-shadow: 0 6px 18px rgba(11,94,215,0.12); margin-bottom: 12px;}
        .card-title {font-weight: 800;font-size: 1.0rem;color: #0B1B33;margin-bottom: 6px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #F7FBFF;border: 1px solid #B9D3FF;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #0B1B33;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(f: FilterState, chosen: str, counts: Dict[str, int]) -> str:
    chips = [
        f"Dataset: {f.dataset}",
        f"Year: {f.year}",
        f"Month: {f.month}",
        f"Indicator: {short_label(chosen) or 'n/a'}",
        f"Rows: {format_int(counts.get('filtered', 0))} / {format_int(counts.get('total', 0))}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_kpi_tiles(label: str, kpis: Dict[str, str]):
    cols = st.columns(5)
    cols[0].metric(f"{label}: latest", kpis.get("latest", "0"), kpis.get("change_pct"))
    cols[1].metric("Previous", kpis.get("previous", "0"))
    cols[2].metric("Total", kpis.get("total", "0"))
    cols[3].metric("Average", kpis.get("average", "0"))
    cols[4].metric("Periods", kpis.get("period_count", "0"))


def _options_with_all(values: List[str]) -> List[str]:
    return [ALL] + [v for v in values if v != ALL]


# ---------- UI setup ----------
st.set_page_config(page_title="Badakhshan Public Services Dashboard", layout="wide")
inject_base_styles()

store = get_store()
data = store.get()
st.title(f"{data.region} Public Services Dashboard")

if not data.ok:
    st.error(f"Data warning: {data.ingestion.error}")
    if st.button("Reload"):
        store.reload()
        st.rerun()
    st.stop()

if not data.datasets:
    st.warning("No records could be read from the configured workbooks.")
    st.stop()

if "filters" not in st.session_state:
    st.session_state["filters"] = reset_filters(data.default_dataset)
filters: FilterState = st.session_state["filters"]

# ----- Sidebar: filters -----
with st.sidebar:
    st.markdown("### Filters")
    datasets = data.datasets
    dataset = st.radio("Dataset", datasets, index=datasets.index(filters.dataset) if filters.dataset in datasets else 0, horizontal=True)
    if dataset != filters.dataset:
        filters = select_dataset(filters, dataset)

    ctx = prepare_context(filters, data)
    indicator_names = [i["name"] for i in ctx["indicators"]]
    indicator_options = [AUTO_LABEL] + indicator_names
    current = AUTO_LABEL if filters.indicator == AUTO else filters.indicator
    indicator = st.selectbox(
        "Indicator",
        indicator_options,
        index=indicator_options.index(current) if current in indicator_options else 0,
        format_func=short_label,
    )
    filters = select_indicator(filters, indicator)

    year_options = _options_with_all(ctx["years"])
    year = st.selectbox("Year", year_options, index=year_options.index(filters.year) if filters.year in year_options else 0)
    if year != filters.year:
        filters = select_year(filters, year)

    ctx = prepare_context(filters, data)
    month_options = _options_with_all(ctx["months"])
    month = st.selectbox("Month", month_options, index=month_options.index(filters.month) if filters.month in month_options else 0)
    filters = select_month(filters, month)

    st.markdown("---")
    if st.button("Reset filters"):
        filters = reset_filters(data.default_dataset)
    if st.button("Reload data"):
        store.reload()
        st.session_state.pop("filters", None)
        st.rerun()

st.session_state["filters"] = filters
ctx = prepare_context(filters, data)
payload = compute_overview(filters, ctx)

st.markdown(
    f"<div class='chip-row'>{format_filter_summary(filters, payload['indicator']['chosen'], payload['row_counts'])}</div>",
    unsafe_allow_html=True,
)

render_kpi_tiles("Selected indicator", payload["kpis_display"]["selected"])
render_kpi_tiles("All indicators", payload["kpis_display"]["overall"])

left, right = st.columns([3, 2])
with left:
    with card(f"Trend: {short_label(payload['indicator']['chosen'])}"):
        if payload["series"]["selected"]:
            st.altair_chart(series_chart(payload["series"]["selected"]), use_container_width=True)
        else:
            st.info("No data for the current filters.")
    with card("Trend: all indicators"):
        if payload["series"]["overall"]:
            st.altair_chart(series_chart(payload["series"]["overall"]), use_container_width=True)
with right:
    with card(f"{data.region} map"):
        if data.boundaries.error:
            st.warning(f"Map error: {data.boundaries.error}")
        else:
            partition = data.partition()
            if not partition.found:
                st.warning(f"{data.region} not found in the boundary file.")
            st.altair_chart(region_map_chart(partition), use_container_width=True)

c1, c2 = st.columns(2)
with c1:
    with card("Top indicators"):
        if payload["top_indicators"]:
            st.altair_chart(ranking_chart(payload["top_indicators"]), use_container_width=True)
with c2:
    with card("Share by family"):
        if payload["category_share"]:
            st.altair_chart(share_chart(payload["category_share"]), use_container_width=True)

failed = data.ingestion.failed_sources
if failed:
    st.caption(f"{len(failed)} of {len(data.ingestion.secondaries)} secondary sources could not be read.")

with st.expander("Filtered records", expanded=False):
    rows = period_rows(data.frame, filters)
    st.dataframe(rows, hide_index=True)
