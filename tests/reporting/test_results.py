"""Tests for stage outcomes."""

from src.reporting.errors import DownloadError, UsageLookupError
from src.reporting.results import StageOutcome, run_stage


class TestStageOutcome:
    def test_ok(self):
        outcome = StageOutcome.ok(["web1"])
        assert outcome.value == ["web1"]
        assert outcome.failed is False

    def test_fail(self):
        error = DownloadError("404")
        outcome = StageOutcome.fail(error)
        assert outcome.value is None
        assert outcome.error is error
        assert outcome.failed is True


class TestRunStage:
    def test_returns_value(self):
        assert run_stage(lambda: 42, DownloadError).value == 42

    def test_stage_error_passes_through(self):
        error = DownloadError("404")

        def stage():
            raise error

        assert run_stage(stage, DownloadError).error is error

    def test_other_exceptions_are_wrapped(self):
        def stage():
            raise KeyError("rows")

        outcome = run_stage(stage, UsageLookupError)

        assert isinstance(outcome.error, UsageLookupError)
        assert isinstance(outcome.error.__cause__, KeyError)

    def test_empty_message_uses_exception_name(self):
        def stage():
            raise TimeoutError()

        assert str(run_stage(stage, DownloadError).error) == "TimeoutError"

    def test_foreign_stage_error_is_rewrapped(self):
        def stage():
            raise UsageLookupError("wrong stage")

        outcome = run_stage(stage, DownloadError)

        assert isinstance(outcome.error, DownloadError)
        assert str(outcome.error) == "wrong stage"
