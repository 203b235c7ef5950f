"""Cookbook aggregation engine.

For every cookbook version listed by the catalog, downloads its source,
runs the static analyzer over it and looks up which nodes apply it, then
merges the three into one CookbookRecord. Per-cookbook failures are kept on
the record; only a failed catalog listing aborts the report.
"""

from __future__ import annotations

import concurrent.futures
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from src.reporting.errors import (
    DEADLINE_EXCEEDED_MESSAGE,
    AnalysisError,
    CatalogError,
    DownloadError,
    UsageLookupError,
)
from src.reporting.models import (
    CookbookRecord,
    CookbooksReport,
    CookbookVersionRef,
    FileOffenses,
)
from src.reporting.protocols import CookbookCatalog, StaticAnalyzer, UsageIndex
from src.reporting.results import StageOutcome, run_stage
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReportOptions:
    """Explicit run parameters for the cookbooks report.

    Attributes:
        skip_unused: Presentation hint; unused versions stay in the engine output.
        workers: Maximum number of stage calls in flight at once.
        timeout: Overall deadline in seconds. Once it passes no new stage call
            is started; stages already running are allowed to finish.
    """

    skip_unused: bool = False
    workers: int = 10
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.workers <= 0:
            raise ValueError("workers must be > 0")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be >= 0")


class Deadline:
    """Single overall deadline shared by every task of one run."""

    def __init__(
        self,
        timeout: float | None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._expires_at = None if timeout is None else clock() + timeout

    def expired(self) -> bool:
        if self._expires_at is None:
            return False
        return self._clock() >= self._expires_at


class CookbooksAggregator:
    """Reconciles catalog, analyzer and usage index into cookbook records."""

    def __init__(
        self,
        catalog: CookbookCatalog,
        usage_index: UsageIndex,
        analyzer: StaticAnalyzer,
        options: ReportOptions | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._catalog = catalog
        self._usage_index = usage_index
        self._analyzer = analyzer
        self._options = options or ReportOptions()
        self._clock = clock

    def run(self) -> CookbooksReport:
        """Build one record per cookbook version.

        Returns:
            CookbooksReport with records sorted by (name, version)

        Raises:
            CatalogError: If the cookbook listing itself fails
        """
        refs = self._list_refs()
        deadline = Deadline(self._options.timeout, clock=self._clock)

        logger.info(
            "Aggregating cookbooks",
            versions=len(refs),
            workers=self._options.workers,
            timeout=self._options.timeout,
        )

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._options.workers
        ) as executor:
            pending = [
                (
                    ref,
                    executor.submit(self._collect_violations, ref, deadline),
                    executor.submit(self._lookup_usage, ref, deadline),
                )
                for ref in refs
            ]
            records = [
                self._assemble(ref, violations.result(), usage.result())
                for ref, violations, usage in pending
            ]

        records.sort(key=lambda record: record.ref.sort_key)
        report = CookbooksReport(records=tuple(records))

        failed = sum(len(group) for group in report.errors_by_kind().values())
        logger.info("Cookbook aggregation finished", records=len(report), failed=failed)
        return report

    def _list_refs(self) -> list[CookbookVersionRef]:
        try:
            refs = list(self._catalog.list_cookbooks())
        except CatalogError:
            logger.error("Unable to list cookbooks")
            raise
        except Exception as e:
            logger.error(f"Unable to list cookbooks: {e}")
            raise CatalogError(f"unable to list cookbooks: {e}") from e
        return refs

    def _collect_violations(
        self, ref: CookbookVersionRef, deadline: Deadline
    ) -> StageOutcome[tuple[FileOffenses, ...]]:
        """Download stage followed by the analysis stage it gates."""
        log = logger.bind(cookbook=ref.name, version=ref.version)

        if deadline.expired():
            log.warning("Skipping download, deadline exceeded")
            return StageOutcome.fail(DownloadError(DEADLINE_EXCEEDED_MESSAGE))

        log.debug("Downloading cookbook")
        download = run_stage(lambda: self._catalog.download(ref), DownloadError)
        if download.failed:
            log.warning(f"Download failed: {download.error}")
            return StageOutcome.fail(download.error)

        path = download.value
        try:
            if deadline.expired():
                log.warning("Skipping cookstyle, deadline exceeded")
                return StageOutcome.fail(AnalysisError(DEADLINE_EXCEEDED_MESSAGE))

            log.debug(f"Analyzing {path}")
            analysis = run_stage(
                lambda: tuple(self._analyzer.analyze(path)), AnalysisError
            )
            if analysis.failed:
                log.warning(f"Analysis failed: {analysis.error}")
            return analysis
        finally:
            self._remove_download(path)

    def _lookup_usage(
        self, ref: CookbookVersionRef, deadline: Deadline
    ) -> StageOutcome[frozenset[str]]:
        log = logger.bind(cookbook=ref.name, version=ref.version)

        if deadline.expired():
            log.warning("Skipping usage lookup, deadline exceeded")
            return StageOutcome.fail(UsageLookupError(DEADLINE_EXCEEDED_MESSAGE))

        log.debug("Looking up nodes")
        usage = run_stage(
            lambda: frozenset(self._usage_index.nodes_using(ref)), UsageLookupError
        )
        if usage.failed:
            log.warning(f"Usage lookup failed: {usage.error}")
        return usage

    @staticmethod
    def _assemble(
        ref: CookbookVersionRef,
        violations: StageOutcome[tuple[FileOffenses, ...]],
        usage: StageOutcome[frozenset[str]],
    ) -> CookbookRecord:
        error = violations.error
        return CookbookRecord(
            name=ref.name,
            version=ref.version,
            nodes=usage.value or frozenset(),
            files=violations.value or (),
            download_error=error if isinstance(error, DownloadError) else None,
            analysis_error=error if isinstance(error, AnalysisError) else None,
            usage_lookup_error=usage.error,
        )

    @staticmethod
    def _remove_download(path: Path | None) -> None:
        if path is None:
            return
        path = Path(path)
        if not path.exists():
            return
        try:
            shutil.rmtree(path)
            logger.debug(f"Cleaned up {path}")
        except OSError as e:
            logger.warning(f"Could not remove downloaded cookbook {path}: {e}")


def aggregate_cookbooks(
    catalog: CookbookCatalog,
    usage_index: UsageIndex,
    analyzer: StaticAnalyzer,
    options: ReportOptions | None = None,
) -> CookbooksReport:
    """Public entry point for the cookbooks report.

    Args:
        catalog: Cookbook inventory and source download
        usage_index: Node search for cookbook usage
        analyzer: Static analyzer run against each downloaded cookbook
        options: Run parameters (skip_unused, workers, timeout)

    Returns:
        CookbooksReport with exactly one record per listed cookbook version

    Raises:
        CatalogError: If the initial cookbook listing fails
    """
    return CookbooksAggregator(catalog, usage_index, analyzer, options).run()
