"""Cookstyle static analyzer adapter.

Runs ``cookstyle --format json`` against a cookbook tree and decodes the
report. Cookstyle exits 1 when it finds offenses and also when it fails, so
the exit code alone is not trusted: a run succeeds whenever stdout holds a
well-formed JSON report.
"""

import json
import subprocess
from pathlib import Path
from typing import Any

from src.config import CookstyleSettings, get_settings
from src.reporting.errors import AnalysisError
from src.reporting.models import FileOffenses, Offense
from src.utils.logging import get_logger

logger = get_logger(__name__)


def _relative_path(file_path: str, root: Path | None) -> str:
    if root is None:
        return file_path
    try:
        return str(Path(file_path).relative_to(root))
    except ValueError:
        return file_path


def _parse_offense(raw: Any, file_path: str) -> Offense:
    if not isinstance(raw, dict):
        raise AnalysisError(f"unexpected offense entry in {file_path}: {raw!r}")

    cop_name = raw.get("cop_name")
    if not isinstance(cop_name, str):
        raise AnalysisError(f"offense without cop_name in {file_path}")

    location = raw.get("location")
    line = None
    if isinstance(location, dict):
        line = location.get("start_line", location.get("line"))

    return Offense(
        cop_name=cop_name,
        message=str(raw.get("message", "")),
        correctable=bool(raw.get("correctable", False)),
        line=line if isinstance(line, int) else None,
    )


def parse_cookstyle_output(output: str, root: Path | None = None) -> list[FileOffenses]:
    """Decode a ``cookstyle --format json`` report.

    Args:
        output: Raw standard output of the cookstyle run
        root: Analyzed directory; absolute file paths under it become relative

    Returns:
        Files with their offenses, in the order cookstyle emitted them.
        ``{}`` and reports without files decode to an empty list.

    Raises:
        AnalysisError: If the output is empty, not JSON, or not shaped like a report
    """
    if not output or not output.strip():
        raise AnalysisError("cookstyle produced no output")

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"unable to parse cookstyle output: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError(
            f"unexpected cookstyle output: expected an object, got {type(data).__name__}"
        )

    raw_files = data.get("files", [])
    if not isinstance(raw_files, list):
        raise AnalysisError("unexpected cookstyle output: 'files' is not a list")

    files: list[FileOffenses] = []
    for raw_file in raw_files:
        if not isinstance(raw_file, dict) or not isinstance(raw_file.get("path"), str):
            raise AnalysisError(f"unexpected file entry in cookstyle output: {raw_file!r}")

        raw_offenses = raw_file.get("offenses", [])
        if raw_offenses is None:
            raw_offenses = []
        if not isinstance(raw_offenses, list):
            raise AnalysisError(f"offenses for {raw_file['path']} is not a list")

        path = _relative_path(raw_file["path"], root)
        files.append(
            FileOffenses(
                path=path,
                offenses=tuple(_parse_offense(raw, path) for raw in raw_offenses),
            )
        )
    return files


class CookstyleAnalyzer:
    """Runs cookstyle as a subprocess and returns its offenses."""

    def __init__(self, settings: CookstyleSettings | None = None) -> None:
        self._settings = settings or get_settings().cookstyle

    def analyze(self, path: Path) -> list[FileOffenses]:
        """Analyze a cookbook source tree.

        Args:
            path: Root directory of the downloaded cookbook

        Returns:
            List of FileOffenses, empty for a clean cookbook

        Raises:
            AnalysisError: If cookstyle cannot run or its output cannot be decoded
        """
        root = Path(path).resolve()
        cmd = [self._settings.binary, "--format", "json", str(root)]
        log = logger.bind(path=str(root))
        log.debug(f"Running {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._settings.timeout_s,
                check=False,
            )
        except FileNotFoundError as e:
            raise AnalysisError(
                f"{self._settings.binary} not found in PATH. Install Chef Workstation "
                "or set COOKSTYLE_BIN."
            ) from e
        except subprocess.TimeoutExpired as e:
            raise AnalysisError(
                f"cookstyle timed out after {self._settings.timeout_s:g} seconds"
            ) from e
        except OSError as e:
            raise AnalysisError(f"unable to run cookstyle: {e}") from e

        try:
            files = parse_cookstyle_output(result.stdout, root=root)
        except AnalysisError as e:
            stderr = (result.stderr or "").strip()
            if result.returncode != 0 and stderr:
                raise AnalysisError(
                    f"cookstyle exited with status {result.returncode}: {stderr}"
                ) from e
            raise

        if result.returncode != 0:
            log.debug(f"cookstyle exited with status {result.returncode} and a valid report")
        log.debug(f"cookstyle reported {len(files)} file(s)")
        return files
