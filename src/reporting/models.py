"""Report data model.

All entities are created once per report run by the aggregation engines and
are never mutated after construction.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Iterator

from src.reporting.errors import (
    AnalysisError,
    DownloadError,
    ErrorKind,
    ReportingError,
    UsageLookupError,
)

PLACEHOLDER = "-"


def version_key(version: str) -> tuple[tuple[int, int | str], ...]:
    """Sort key comparing dotted versions part by part, numerically where possible."""
    return tuple(
        (0, int(part)) if part.isdecimal() else (1, part) for part in version.split(".")
    )


@functools.total_ordering
@dataclass(frozen=True)
class CookbookVersionRef:
    """Identity of a single cookbook version as listed by the catalog.

    Ordered by name, then by version with numeric parts compared as numbers.
    """

    name: str
    version: str

    @property
    def sort_key(self) -> tuple:
        return (self.name, version_key(self.version))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CookbookVersionRef):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        return f"{self.name} ({self.version})"


@dataclass(frozen=True)
class Offense:
    """A single Cookstyle finding."""

    cop_name: str
    message: str
    correctable: bool
    line: int | None = None


@dataclass(frozen=True)
class FileOffenses:
    """Offenses reported for one file, in the analyzer's emission order."""

    path: str
    offenses: tuple[Offense, ...] = ()


@dataclass(frozen=True)
class CookbookRecord:
    """Merged result of download, analysis and usage lookup for one cookbook version.

    The engine stops advancing a record's pipeline at the first failing
    stage, so in practice at most one error slot is populated.
    """

    name: str
    version: str
    nodes: frozenset[str] = field(default_factory=frozenset)
    files: tuple[FileOffenses, ...] = ()
    download_error: DownloadError | None = None
    analysis_error: AnalysisError | None = None
    usage_lookup_error: UsageLookupError | None = None

    def __post_init__(self) -> None:
        if (self.download_error or self.analysis_error) and self.files:
            raise ValueError(
                f"{self.name} ({self.version}): a record without violation data "
                "cannot carry files"
            )

    @property
    def ref(self) -> CookbookVersionRef:
        return CookbookVersionRef(self.name, self.version)

    @property
    def error(self) -> ReportingError | None:
        """First populated error slot in pipeline order."""
        return self.download_error or self.analysis_error or self.usage_lookup_error

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def sorted_nodes(self) -> list[str]:
        return sorted(self.nodes)

    def iter_offenses(self) -> Iterator[tuple[FileOffenses, Offense]]:
        for file_offenses in self.files:
            for offense in file_offenses.offenses:
                yield file_offenses, offense

    def num_offenses(self) -> int:
        return sum(len(f.offenses) for f in self.files)

    def num_correctable(self) -> int:
        return sum(1 for _, offense in self.iter_offenses() if offense.correctable)


@dataclass(frozen=True)
class CookbooksReport:
    """Engine output: all records plus an aggregate view of failures."""

    records: tuple[CookbookRecord, ...]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[CookbookRecord]:
        return iter(self.records)

    def displayable(self, skip_unused: bool = False) -> list[CookbookRecord]:
        """Records the presentation layer should show.

        Unused cookbook versions (no nodes) are omitted when skip_unused is set;
        they remain in ``records`` so error summaries stay accurate.
        """
        if not skip_unused:
            return list(self.records)
        return [record for record in self.records if record.nodes]

    def errors_by_kind(self) -> dict[ErrorKind, list[CookbookRecord]]:
        """Group failed records by the stage that failed first."""
        grouped: dict[ErrorKind, list[CookbookRecord]] = {
            ErrorKind.DOWNLOAD: [],
            ErrorKind.ANALYSIS: [],
            ErrorKind.USAGE_LOOKUP: [],
        }
        for record in self.records:
            error = record.error
            if error is not None:
                grouped[error.kind].append(record)
        return {kind: records for kind, records in grouped.items() if records}


@dataclass(frozen=True)
class NodeReportItem:
    """One row of the nodes report."""

    name: str
    chef_version: str = PLACEHOLDER
    os: str = PLACEHOLDER
    os_version: str = PLACEHOLDER
    cookbooks: tuple[str, ...] = ()

    @property
    def platform(self) -> str:
        if self.os == PLACEHOLDER and self.os_version == PLACEHOLDER:
            return PLACEHOLDER
        return f"{self.os} {self.os_version}"

    def as_row(self) -> list[str]:
        cookbooks = " ".join(self.cookbooks) if self.cookbooks else PLACEHOLDER
        return [self.name, self.chef_version, self.platform, cookbooks]
