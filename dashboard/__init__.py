"""Core (UI-agnostic) province dashboard logic.

This package contains:
- workbook fetching and normalization (XLSX/XLS -> long-form records)
- filter state and its transitions
- pure aggregate functions (JSON-serializable payloads)
- boundary loading and region highlighting
- chart helpers (Altair -> Vega-Lite spec dict)
"""
