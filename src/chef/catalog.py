"""Cookbook catalog backed by the Chef Infra Server ``/cookbooks`` endpoints."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import quote

import requests

from src.chef.base_client import ChefServerClient
from src.reporting.errors import CatalogError, DownloadError
from src.reporting.models import CookbookVersionRef
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Manifest segments used by servers that predate the ``all_files`` list
LEGACY_SEGMENTS = (
    "attributes",
    "definitions",
    "files",
    "libraries",
    "providers",
    "recipes",
    "resources",
    "root_files",
    "templates",
)


def manifest_files(manifest: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the file entries of a cookbook version manifest."""
    if "all_files" in manifest:
        entries = manifest.get("all_files") or []
    else:
        entries = []
        for segment in LEGACY_SEGMENTS:
            segment_files = manifest.get(segment) or []
            if not isinstance(segment_files, list):
                raise DownloadError(f"cookbook manifest segment {segment} is malformed")
            entries.extend(segment_files)

    if not isinstance(entries, list):
        raise DownloadError("cookbook manifest file list is malformed")
    for entry in entries:
        if not isinstance(entry, dict):
            raise DownloadError(f"unexpected cookbook manifest entry: {entry!r}")
    return entries


def _target_file(root: Path, entry: dict[str, Any]) -> Path:
    relative = entry.get("path") or entry.get("name")
    if not isinstance(relative, str) or not relative:
        raise DownloadError(f"cookbook manifest entry without a path: {entry!r}")

    target = (root / relative).resolve()
    if not target.is_relative_to(root.resolve()):
        raise DownloadError(f"cookbook manifest path escapes the cookbook: {relative}")
    return target


class ChefCookbookCatalog:
    """Lists cookbook versions and downloads their source trees.

    Args:
        client: Signed Chef Infra Server client
        download_dir: Parent directory for downloaded cookbooks (system temp
            directory when omitted)
    """

    def __init__(
        self, client: ChefServerClient, download_dir: str | Path | None = None
    ) -> None:
        self._client = client
        self._download_dir = Path(download_dir) if download_dir else None

    def list_cookbooks(self) -> list[CookbookVersionRef]:
        """List every version of every cookbook.

        Raises:
            CatalogError: If the listing cannot be retrieved or decoded
        """
        try:
            data = self._client.get("/cookbooks", params={"num_versions": "all"})
        except requests.RequestException as e:
            raise CatalogError(f"unable to list cookbooks: {e}") from e

        if not isinstance(data, dict):
            raise CatalogError("unexpected response listing cookbooks")

        refs: list[CookbookVersionRef] = []
        for name, entry in data.items():
            versions = entry.get("versions", []) if isinstance(entry, dict) else []
            for version in versions:
                if isinstance(version, dict) and version.get("version"):
                    refs.append(CookbookVersionRef(name, str(version["version"])))
                else:
                    logger.warning(f"Ignoring malformed version entry for {name}: {version!r}")

        logger.info(f"Found {len(refs)} cookbook versions across {len(data)} cookbooks")
        return refs

    def download(self, ref: CookbookVersionRef) -> Path:
        """Download one cookbook version into a fresh directory.

        Returns:
            Root directory of the downloaded cookbook; the caller removes it

        Raises:
            DownloadError: If the manifest or any file cannot be retrieved
        """
        log = logger.bind(cookbook=ref.name, version=ref.version)
        path = f"/cookbooks/{quote(ref.name, safe='')}/{quote(ref.version, safe='')}"
        try:
            manifest = self._client.get(path)
        except requests.RequestException as e:
            raise DownloadError(f"unable to get cookbook manifest: {e}") from e

        if not isinstance(manifest, dict):
            raise DownloadError("unexpected cookbook manifest")

        entries = manifest_files(manifest)
        if self._download_dir:
            self._download_dir.mkdir(parents=True, exist_ok=True)
        root = Path(
            tempfile.mkdtemp(prefix=f"{ref.name}-{ref.version}-", dir=self._download_dir)
        )

        try:
            for entry in entries:
                url = entry.get("url")
                if not url:
                    raise DownloadError(f"cookbook manifest entry without a url: {entry!r}")
                self._client.download_file(url, _target_file(root, entry))
        except requests.RequestException as e:
            shutil.rmtree(root, ignore_errors=True)
            raise DownloadError(f"unable to download cookbook file: {e}") from e
        except Exception:
            shutil.rmtree(root, ignore_errors=True)
            raise

        log.debug(f"Downloaded {len(entries)} files to {root}")
        return root
