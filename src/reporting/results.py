"""Stage result types.

Each pipeline stage returns a StageOutcome instead of raising, so the
coordinator always knows which stage failed while independent stages of the
same cookbook keep their results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from src.reporting.errors import ReportingError

T = TypeVar("T")


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Immutable result of one pipeline stage: a value or a stage error."""

    value: T | None = None
    error: ReportingError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def ok(cls, value: T) -> StageOutcome[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, error: ReportingError) -> StageOutcome[T]:
        return cls(error=error)


def run_stage(
    func: Callable[[], T],
    error_type: type[ReportingError],
) -> StageOutcome[T]:
    """Run a stage callable and convert any failure into ``error_type``.

    Errors that already are ``error_type`` pass through unchanged; anything
    else is wrapped with the original exception kept as ``__cause__``.
    """
    try:
        return StageOutcome.ok(func())
    except error_type as e:
        return StageOutcome.fail(e)
    except Exception as e:
        wrapped = error_type(str(e) or e.__class__.__name__)
        wrapped.__cause__ = e
        return StageOutcome.fail(wrapped)
