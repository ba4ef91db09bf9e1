from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from dashboard.config import SECONDARY_DATASET

ALL = "All"
AUTO = "Auto"
AUTO_LABEL = "Auto (recommended)"


@dataclass(frozen=True)
class FilterState:
    dataset: str = SECONDARY_DATASET
    year: str = ALL
    month: str = ALL
    indicator: str = AUTO

    @property
    def is_auto(self) -> bool:
        return self.indicator == AUTO


def reset_filters(default_dataset: str = SECONDARY_DATASET) -> FilterState:
    return FilterState(dataset=default_dataset)


def select_dataset(state: FilterState, dataset: str) -> FilterState:
    """Switching dataset clears every other selection."""
    return FilterState(dataset=dataset)


def select_year(state: FilterState, year: str) -> FilterState:
    return replace(state, year=year or ALL, month=ALL)


def select_month(state: FilterState, month: str) -> FilterState:
    return replace(state, month=month or ALL)


def select_indicator(state: FilterState, indicator: str) -> FilterState:
    if not indicator or indicator == AUTO_LABEL:
        indicator = AUTO
    return replace(state, indicator=indicator)


def _as_text(value: object, default: str) -> str:
    if value is None:
        return default
    s = str(value).strip()
    return s or default


def normalize_filters(
    raw: dict,
    *,
    available_datasets: Optional[Iterable[str]] = None,
    default_dataset: str = SECONDARY_DATASET,
) -> FilterState:
    datasets = list(available_datasets or [])
    dataset = _as_text(raw.get("dataset"), default_dataset)
    if datasets and dataset not in datasets:
        dataset = default_dataset if default_dataset in datasets else datasets[0]
    indicator = _as_text(raw.get("indicator"), AUTO)
    if indicator == AUTO_LABEL:
        indicator = AUTO
    return FilterState(
        dataset=dataset,
        year=_as_text(raw.get("year"), ALL),
        month=_as_text(raw.get("month"), ALL),
        indicator=indicator,
    )
