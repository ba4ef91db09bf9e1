from __future__ import annotations


class DashboardError(Exception):
    """Base class for errors raised inside the dashboard core."""


class SourceError(DashboardError):
    """A workbook source could not be fetched or read."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message}: {url}")
        self.url = url


class SourceFetchError(SourceError):
    pass


class WorkbookParseError(SourceError):
    pass


class BoundaryLoadError(DashboardError):
    pass
