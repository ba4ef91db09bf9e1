from __future__ import annotations

import pytest

from dashboard.config import DashboardConfig
from tests.helpers import BOUNDARY, PRIMARY, SECONDARY_A, SECONDARY_B, make_workbook


@pytest.fixture()
def config() -> DashboardConfig:
    return DashboardConfig(
        primary_url=PRIMARY,
        secondary_urls=(SECONDARY_A, SECONDARY_B),
        boundary_url=BOUNDARY,
        max_workers=2,
    )


@pytest.fixture()
def primary_workbook() -> bytes:
    return make_workbook(
        {
            "MH": [
                ["Period", "MH - Consultations", "MH - Vaccinations", "Remarks"],
                ["January 2021", 100, "1,000", "ok"],
                ["February 2021", 120, "1 100", ""],
                ["", 5, 5, "no period"],
            ]
        }
    )


@pytest.fixture()
def secondary_workbook() -> bytes:
    return make_workbook(
        {
            "Report": [
                ["HER program export"],
                ["Generated 2021"],
                ["periodname", "HER - Visits", "HER - Referrals", "Notes"],
                ["July 2021", 1200, "3,400", "n/a"],
                ["", "", "", ""],
                ["August 2021", 1300, 3500, ""],
            ],
            "Extra": [
                ["periodname", "HER - Visits"],
                ["September 2021", 40],
            ],
        }
    )


@pytest.fixture()
def boundary_collection() -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"shapeName": "Badakhshan Province"},
                "geometry": {"type": "Polygon", "coordinates": [[[70, 36], [71, 36], [71, 37], [70, 36]]]},
            },
            {
                "type": "Feature",
                "properties": {"shapeName": "", "NAME_1": "Kabul"},
                "geometry": {"type": "Polygon", "coordinates": [[[69, 34], [70, 34], [70, 35], [69, 34]]]},
            },
        ],
    }
