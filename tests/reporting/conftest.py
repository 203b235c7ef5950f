from pathlib import Path

import pytest

from src.reporting.models import CookbookVersionRef


@pytest.fixture
def apache() -> CookbookVersionRef:
    return CookbookVersionRef("apache2", "1.0.0")


@pytest.fixture
def download_root(tmp_path) -> Path:
    root = tmp_path / "downloads"
    root.mkdir()
    return root
