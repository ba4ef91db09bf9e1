"""
dashboard/ingestion.py

Fetch the primary workbook and every secondary workbook, normalize each one
and merge the results into the unified record collection.

The primary source is fatal when it fails. Secondary sources are fetched in
parallel and any of them may fail; a failed source contributes no records.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional, Sequence, Tuple

import requests

from dashboard.config import DashboardConfig, get_config
from dashboard.errors import SourceError, SourceFetchError
from dashboard.normalize import NormalizedRecord, normalize_wide_to_long
from dashboard.sheets import first_sheet, flatten_workbook, parse_standard, read_workbook

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], bytes]


@dataclass(frozen=True)
class SourceOutcome:
    url: str
    ok: bool
    records: Tuple[NormalizedRecord, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class IngestionResult:
    status: Literal["complete", "failed"]
    records: Tuple[NormalizedRecord, ...] = ()
    primary: Optional[SourceOutcome] = None
    secondaries: Tuple[SourceOutcome, ...] = ()
    default_dataset: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "complete"

    @property
    def failed_sources(self) -> List[str]:
        return [s.url for s in self.secondaries if not s.ok]

    @property
    def secondary_record_count(self) -> int:
        return sum(len(s.records) for s in self.secondaries)

    @property
    def datasets(self) -> List[str]:
        return list(dict.fromkeys(r.dataset for r in self.records))


def fetch_bytes(url: str, timeout: float = 30.0) -> bytes:
    try:
        res = requests.get(url, timeout=timeout)
        res.raise_for_status()
    except requests.RequestException as exc:
        raise SourceFetchError(url, f"fetch failed ({exc})") from exc
    return res.content


def parse_primary(content: bytes, dataset_label: str, *, region: str, source: str = "<bytes>") -> List[NormalizedRecord]:
    sheets = read_workbook(content, source=source)
    rows = parse_standard(first_sheet(sheets))
    return normalize_wide_to_long(rows, dataset_label, region=region)


def parse_secondary(content: bytes, dataset_label: str, *, region: str, source: str = "<bytes>") -> List[NormalizedRecord]:
    sheets = read_workbook(content, source=source)
    rows = flatten_workbook(sheets)
    if not rows:
        rows = parse_standard(first_sheet(sheets))
    return normalize_wide_to_long(rows, dataset_label, region=region)


def _load_secondary(url: str, fetch: Fetcher, config: DashboardConfig) -> SourceOutcome:
    try:
        content = fetch(url)
        records = parse_secondary(content, config.secondary_dataset, region=config.region, source=url)
    except SourceError as exc:
        logger.warning("Secondary source skipped: %s", exc)
        return SourceOutcome(url=url, ok=False, error=str(exc))
    except Exception as exc:
        logger.warning("Secondary source skipped: %s (%s: %s)", url, type(exc).__name__, exc)
        return SourceOutcome(url=url, ok=False, error=f"{type(exc).__name__}: {exc}")
    return SourceOutcome(url=url, ok=True, records=tuple(records))


def ingest_sources(
    primary_url: Optional[str] = None,
    secondary_urls: Optional[Sequence[str]] = None,
    *,
    fetch: Optional[Fetcher] = None,
    config: Optional[DashboardConfig] = None,
) -> IngestionResult:
    """
    Build the unified record collection.

    Records are ordered primary first, then each secondary source in the
    order given. When no secondary source contributes a record the returned
    ``default_dataset`` falls back to the primary dataset label.
    """
    config = config or get_config()
    primary_url = primary_url or config.primary_url
    secondary_urls = list(config.secondary_urls if secondary_urls is None else secondary_urls)
    if fetch is None:
        fetch = lambda url: fetch_bytes(url, timeout=config.http_timeout)  # noqa: E731

    try:
        content = fetch(primary_url)
        primary_records = parse_primary(content, config.primary_dataset, region=config.region, source=primary_url)
    except Exception as exc:
        logger.exception("Primary source failed: %s", primary_url)
        return IngestionResult(
            status="failed",
            primary=SourceOutcome(url=primary_url, ok=False, error=str(exc)),
            default_dataset=config.secondary_dataset,
            error=str(exc),
        )
    primary = SourceOutcome(url=primary_url, ok=True, records=tuple(primary_records))

    outcomes: List[SourceOutcome] = []
    if secondary_urls:
        workers = max(1, min(config.max_workers, len(secondary_urls)))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_load_secondary, url, fetch, config) for url in secondary_urls]
            concurrent.futures.wait(futures)
            outcomes = [f.result() for f in futures]

    records: List[NormalizedRecord] = list(primary.records)
    for outcome in outcomes:
        records.extend(outcome.records)
    secondary_empty = len(records) == len(primary.records)

    result = IngestionResult(
        status="complete",
        records=tuple(records),
        primary=primary,
        secondaries=tuple(outcomes),
        default_dataset=config.primary_dataset if secondary_empty else config.secondary_dataset,
    )
    logger.info(
        "Ingestion complete: %d records (%d primary, %d secondary, %d/%d secondary sources failed)",
        len(records),
        len(primary.records),
        result.secondary_record_count,
        len(result.failed_sources),
        len(outcomes),
    )
    return result
