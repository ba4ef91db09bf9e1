from __future__ import annotations

import io
from typing import Callable, Dict, List, Optional, Sequence

from openpyxl import Workbook

from dashboard.errors import SourceFetchError
from dashboard.normalize import NormalizedRecord

PRIMARY = "https://example.test/MH.xlsx"
SECONDARY_A = "https://example.test/data.xlsx"
SECONDARY_B = "https://example.test/data%20(2).xlsx"
BOUNDARY = "https://example.test/adm1.geojson"


def make_workbook(sheets: Dict[str, Sequence[Sequence[object]]]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def make_fetcher(payloads: Dict[str, bytes], calls: Optional[List[str]] = None) -> Callable[[str], bytes]:
    def _fetch(url: str) -> bytes:
        if calls is not None:
            calls.append(url)
        if url not in payloads:
            raise SourceFetchError(url, "fetch failed (404)")
        return payloads[url]

    return _fetch


def rec(dataset: str, period: str, indicator: str, value: float, family: str = "") -> NormalizedRecord:
    month, _, year = period.partition(" ")
    return NormalizedRecord(
        dataset=dataset,
        period=period,
        year=year,
        month=month,
        family=family or dataset,
        indicator=indicator,
        value=float(value),
        region="Badakhshan",
    )
