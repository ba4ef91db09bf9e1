from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class FilterStateModel(BaseModel):
    dataset: Optional[str] = None
    year: str = "All"
    month: str = "All"
    indicator: str = "Auto"


class MetaListResponse(BaseModel):
    values: List[str]


class StatusResponse(BaseModel):
    status: str
    error: Optional[str] = None
    map_error: Optional[str] = None
    default_dataset: Optional[str] = None
    records: int = 0
    failed_sources: List[str] = []
