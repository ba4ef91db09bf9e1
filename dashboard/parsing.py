from __future__ import annotations

import math
import re
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from functools import cmp_to_key
from typing import Iterable, List, NamedTuple, Optional

import pandas as pd


MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}
UNKNOWN_MONTH = 99

_NAME_PUNCT = re.compile(r"[._-]")
_WHITESPACE = re.compile(r"\s+")
_PROVINCE_WORD = re.compile(r"\bprovince\b")


class PeriodParts(NamedTuple):
    month: str
    year: str


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def coerce_text(value: object) -> str:
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def canonicalize_name(value: object) -> str:
    """Lowercase, turn ``.``/``-``/``_`` into spaces and drop the word 'province'."""
    text = coerce_text(value).lower()
    text = _NAME_PUNCT.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    text = _PROVINCE_WORD.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def coerce_number(value: object) -> Optional[float]:
    """Parse a cell as a finite number, ignoring thousands separators and spaces."""
    if _is_missing(value) or isinstance(value, bool):
        return None
    s = str(value).strip()
    if not s:
        return None
    s = _WHITESPACE.sub("", s.replace(",", ""))
    # float() also accepts non-ASCII digits such as "۱۴۰۰"; those cells are text here.
    if not s or "_" in s or not s.isascii():
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    if not math.isfinite(n):
        return None
    return n


def month_index(name: object) -> int:
    return MONTHS.get(canonicalize_name(name), UNKNOWN_MONTH)


def round_half_up(value: object) -> int:
    """Round to the nearest integer, ties toward +infinity (-2.5 -> -2, 2.5 -> 3)."""
    n = coerce_number(value)
    if n is None:
        return 0
    try:
        return int((Decimal(str(n)) + Decimal("0.5")).quantize(Decimal(1), rounding=ROUND_FLOOR))
    except InvalidOperation:
        return 0


def format_int(value: object) -> str:
    return f"{round_half_up(value):,}"


def short_label(value: object, limit: int = 55) -> str:
    text = coerce_text(value)
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "…"


# ---------------- Periods ----------------
def split_period(label: object) -> PeriodParts:
    """Split 'July 2021' -> ('July', '2021'). Tokens past the second are ignored."""
    s = coerce_text(label)
    if not s:
        return PeriodParts("", "")
    parts = s.split()
    if len(parts) >= 2:
        return PeriodParts(parts[0], parts[1])
    return PeriodParts(s, "")


def year_number(year: object) -> float:
    try:
        n = float(coerce_text(year) or 0)
    except ValueError:
        return 0.0
    return n if math.isfinite(n) else 0.0


def compare_periods(a: object, b: object) -> int:
    pa = split_period(a)
    pb = split_period(b)
    ya = year_number(pa.year)
    yb = year_number(pb.year)
    if ya != yb:
        return -1 if ya < yb else 1
    return month_index(pa.month) - month_index(pb.month)


def sort_periods(periods: Iterable[str]) -> List[str]:
    return sorted(periods, key=cmp_to_key(compare_periods))
