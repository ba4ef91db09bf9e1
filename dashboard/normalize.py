from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from dashboard.config import REGION
from dashboard.parsing import coerce_number, coerce_text, split_period
from dashboard.sheets import is_period_alias

INDICATOR_SEPARATOR = " - "


@dataclass(frozen=True)
class NormalizedRecord:
    dataset: str
    period: str
    year: str
    month: str
    family: str
    indicator: str
    value: float
    region: str


RECORD_COLUMNS = [f.name for f in fields(NormalizedRecord)]


def find_period_column(columns: Sequence[str]) -> Optional[str]:
    for col in columns:
        if is_period_alias(col):
            return col
    return columns[0] if columns else None


def split_indicator(column: str, dataset_label: str) -> Tuple[str, str]:
    """'HER - Visits' -> ('HER', 'Visits'). Only the first separator splits."""
    indicator = coerce_text(column)
    if INDICATOR_SEPARATOR not in indicator:
        return dataset_label, indicator
    left, right = indicator.split(INDICATOR_SEPARATOR, 1)
    family = left.strip() or dataset_label
    return family, right.strip() or indicator


def normalize_wide_to_long(
    records: Sequence[Mapping[str, object]],
    dataset_label: str,
    *,
    region: str = REGION,
) -> List[NormalizedRecord]:
    """
    Melt wide rows (one column per indicator) into one record per numeric cell.

    The period column is picked once from the first record's keys and applied
    to every row. Cells that do not coerce to a number (notes, labels) are
    dropped, as are rows with an empty period.
    """
    if not records:
        return []
    cols = list(records[0].keys())
    period_col = find_period_column(cols)
    out: List[NormalizedRecord] = []
    for row in records:
        period = coerce_text(row.get(period_col))
        if not period:
            continue
        p = split_period(period)
        for col in cols:
            if col == period_col:
                continue
            num = coerce_number(row.get(col))
            if num is None:
                continue
            family, indicator = split_indicator(col, dataset_label)
            out.append(
                NormalizedRecord(
                    dataset=dataset_label,
                    period=period,
                    year=coerce_text(p.year),
                    month=coerce_text(p.month),
                    family=family,
                    indicator=indicator,
                    value=num,
                    region=region,
                )
            )
    return out


def records_frame(records: Iterable[NormalizedRecord]) -> pd.DataFrame:
    rows = [asdict(r) for r in records]
    if not rows:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["value"] = pd.to_numeric(df["value"], errors="coerce")
    return df
