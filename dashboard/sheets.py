from __future__ import annotations

import io
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from dashboard.config import HEADER_SEARCH_ROWS, PERIOD_ALIASES
from dashboard.errors import WorkbookParseError
from dashboard.parsing import coerce_text

Grid = List[List[object]]
KeyedRecord = Dict[str, object]


def _cell(row: Sequence[object], idx: int) -> object:
    if idx < len(row):
        value = row[idx]
        return "" if value is None else value
    return ""


def is_period_alias(value: object, aliases: Iterable[str] = PERIOD_ALIASES) -> bool:
    return coerce_text(value).lower() in set(aliases)


def find_header_row(grid: Sequence[Sequence[object]], search_rows: int = HEADER_SEARCH_ROWS) -> int:
    """Index of the first row whose first cell is a period alias; 0 when none is found."""
    for idx in range(min(search_rows, len(grid))):
        row = grid[idx] or []
        if is_period_alias(_cell(row, 0)):
            return idx
    return 0


def flatten_grid(grid: Sequence[Sequence[object]]) -> List[KeyedRecord]:
    """
    Turn a semi-structured sheet into keyed records.

    Rows above the detected header row are ignored. A row counts as blank when
    every cell under the header's column span is empty, so stray values past
    the last header column do not keep a row alive. Columns with an empty
    header are dropped.
    """
    if not grid:
        return []
    header_row = find_header_row(grid)
    headers = list(grid[header_row] or [])
    out: List[KeyedRecord] = []
    for row in grid[header_row + 1 :]:
        row = row or []
        if not any(coerce_text(_cell(row, c)) for c in range(len(headers))):
            continue
        rec: KeyedRecord = {}
        for c, header in enumerate(headers):
            key = coerce_text(header)
            if not key:
                continue
            rec[key] = _cell(row, c)
        out.append(rec)
    return out


EMPTY_HEADER = "__EMPTY"


def _standard_headers(header_cells: Sequence[object], width: int) -> List[str]:
    """Blank headers become ``__EMPTY``, ``__EMPTY_1``...; repeats get ``_1``, ``_2``."""
    counts: Dict[str, int] = {}
    names: List[str] = []
    for c in range(width):
        base = coerce_text(_cell(header_cells, c)) or EMPTY_HEADER
        counter = counts.get(base, 0)
        if not counter:
            counts[base] = 1
            names.append(base)
            continue
        name = f"{base}_{counter}"
        counter += 1
        while name in counts:
            name = f"{base}_{counter}"
            counter += 1
        counts[base] = counter
        counts[name] = 1
        names.append(name)
    return names


def parse_standard(grid: Sequence[Sequence[object]]) -> List[KeyedRecord]:
    """Direct keyed-record parse: row 0 is the header, fully blank rows are skipped."""
    if not grid:
        return []
    width = max(len(r or []) for r in grid)
    headers = _standard_headers(grid[0] or [], width)
    out: List[KeyedRecord] = []
    for row in grid[1:]:
        row = row or []
        if not any(coerce_text(_cell(row, c)) for c in range(width)):
            continue
        out.append({h: _cell(row, c) for c, h in enumerate(headers)})
    return out


def frame_to_grid(df: pd.DataFrame) -> Grid:
    if df.empty:
        return []
    return df.astype(object).where(df.notna(), "").values.tolist()


def read_workbook(content: bytes, *, source: str = "<bytes>") -> Dict[str, Grid]:
    """Read every sheet of an .xlsx/.xls document into raw cell grids keyed by sheet name."""
    try:
        sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, header=None, dtype=object)
    except Exception as exc:
        raise WorkbookParseError(source, f"unreadable workbook ({type(exc).__name__}: {exc})") from exc
    return {str(name): frame_to_grid(df) for name, df in sheets.items()}


def first_sheet(sheets: Dict[str, Grid]) -> Grid:
    for grid in sheets.values():
        return grid
    return []


def flatten_workbook(sheets: Dict[str, Grid]) -> List[KeyedRecord]:
    records: List[KeyedRecord] = []
    for grid in sheets.values():
        records.extend(flatten_grid(grid))
    return records
