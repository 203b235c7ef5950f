"""Cookbook and node report aggregation.

This package provides:
- The report data model (records, offenses, node rows)
- The failure taxonomy and per-stage outcomes
- The cookbook and node aggregation engines
"""

from .cookbooks import CookbooksAggregator, ReportOptions, aggregate_cookbooks
from .errors import (
    AnalysisError,
    CatalogError,
    DownloadError,
    ErrorKind,
    ReportingError,
    UsageLookupError,
)
from .models import (
    CookbookRecord,
    CookbooksReport,
    CookbookVersionRef,
    FileOffenses,
    NodeReportItem,
    Offense,
)
from .nodes import aggregate_nodes

__all__ = [
    "AnalysisError",
    "CatalogError",
    "CookbookRecord",
    "CookbooksAggregator",
    "CookbooksReport",
    "CookbookVersionRef",
    "DownloadError",
    "ErrorKind",
    "FileOffenses",
    "NodeReportItem",
    "Offense",
    "ReportOptions",
    "ReportingError",
    "UsageLookupError",
    "aggregate_cookbooks",
    "aggregate_nodes",
]
