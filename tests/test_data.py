from __future__ import annotations

import threading
import time

import pytest

from dashboard.data import DashboardStore, build_dashboard_data, prepare_context
from dashboard.filters import FilterState
from tests.helpers import PRIMARY, SECONDARY_A, make_fetcher


@pytest.fixture()
def counting_loader(config, primary_workbook, secondary_workbook, boundary_collection):
    calls = []
    lock = threading.Lock()
    fetch = make_fetcher({PRIMARY: primary_workbook, SECONDARY_A: secondary_workbook})

    def _load():
        with lock:
            calls.append(1)
        time.sleep(0.05)
        return build_dashboard_data(config, fetch_workbook=fetch, fetch_boundaries=lambda url: boundary_collection)

    return _load, calls


def test_concurrent_first_reads_share_one_load(counting_loader) -> None:
    loader, calls = counting_loader
    store = DashboardStore(loader)
    barrier = threading.Barrier(4)
    results = []

    def _read():
        barrier.wait()
        results.append(store.get())

    threads = [threading.Thread(target=_read) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert len(results) == 4
    assert all(r is results[0] for r in results)
    assert store.status == "ready"


def test_reload_replaces_snapshot(counting_loader) -> None:
    loader, calls = counting_loader
    store = DashboardStore(loader)
    first = store.get()
    assert store.get() is first
    second = store.reload()
    assert second is not first
    assert store.snapshot() is second
    assert len(calls) == 2


def test_prepare_context_accepts_raw_filters(counting_loader) -> None:
    loader, _ = counting_loader
    data = loader()
    ctx = prepare_context({"dataset": "MH", "month": "January"}, data)
    assert ctx["filters"] == FilterState(dataset="MH", month="January")
    assert ctx["chosen_indicator"] == "Vaccinations"
    assert ctx["row_counts"] == {"total": 9, "filtered": 2}
    assert ctx["kpi_selected"]["latest"] == 1000
