"""Failure taxonomy for report generation.

Per-cookbook failures (download, analysis, usage lookup) are captured on the
affected record. CatalogError is the only kind that aborts a cookbooks report.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Pipeline stage that produced a failure."""

    DOWNLOAD = "download"
    ANALYSIS = "analysis"
    USAGE_LOOKUP = "usage_lookup"
    CATALOG = "catalog"


class ReportingError(RuntimeError):
    """Base class for report generation failures."""

    kind: ErrorKind


class DownloadError(ReportingError):
    """A specific cookbook version could not be fetched from the server."""

    kind = ErrorKind.DOWNLOAD


class AnalysisError(ReportingError):
    """Cookstyle could not run or produced output that cannot be parsed."""

    kind = ErrorKind.ANALYSIS


class UsageLookupError(ReportingError):
    """The node search for a cookbook version failed."""

    kind = ErrorKind.USAGE_LOOKUP


class CatalogError(ReportingError):
    """The initial cookbook listing failed; no records can be produced."""

    kind = ErrorKind.CATALOG


DEADLINE_EXCEEDED_MESSAGE = "report deadline exceeded before this stage started"
