"""Base HTTP client for the Chef Infra Server API.

Provides session management, request signing, and SSL handling shared by
the cookbook catalog and node search clients.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import requests
from requests.auth import AuthBase

from src.chef.auth import ChefRequestAuth
from src.config import ChefServerSettings, get_settings
from src.utils.logging import get_logger

logger = get_logger(__name__)

CHEF_VERSION_HEADER = "18.0.0"


class ChefServerClient:
    """Shared HTTP session with Chef request signing.

    Args:
        settings: Server connection settings; defaults to the global settings
        auth: Request signer; built from ``settings.client_key`` when omitted
    """

    def __init__(
        self,
        settings: ChefServerSettings | None = None,
        auth: AuthBase | None = None,
    ) -> None:
        self._settings = settings or get_settings().chef
        if not self._settings.server_url:
            raise ValueError("Chef Infra Server URL is not configured")

        self._session = requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "X-Chef-Version": CHEF_VERSION_HEADER,
            }
        )
        self._auth = auth or self._build_auth()

    def _build_auth(self) -> ChefRequestAuth:
        if not self._settings.client_name or not self._settings.client_key:
            raise ValueError("Chef client name and client key are required")
        return ChefRequestAuth.from_key_file(
            self._settings.client_name, self._settings.client_key
        )

    @property
    def server_url(self) -> str:
        return self._settings.server_url or ""

    @property
    def _verify(self) -> bool:
        return self._settings.ssl_verify

    @property
    def _timeout(self) -> float:
        return self._settings.timeout_s

    @property
    def search_rows(self) -> int:
        return self._settings.search_rows

    def _url(self, path: str) -> str:
        """Build full URL from server URL and path."""
        base = self.server_url.rstrip("/")
        p = path if path.startswith("/") else f"/{path}"
        return f"{base}{p}"

    def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute a signed API request.

        Args:
            method: HTTP method (GET, POST, ...)
            path: API path relative to the server URL
            json: Request body as JSON
            params: Query parameters

        Returns:
            Decoded JSON response

        Raises:
            requests.RequestException: On connection failures and non-2xx responses
        """
        url = self._url(path)
        logger.debug(f"{method} {url}", params=params)

        resp = self._session.request(
            method=method,
            url=url,
            auth=self._auth,
            json=json,
            params=params,
            verify=self._verify,
            timeout=self._timeout,
        )
        resp.raise_for_status()
        if resp.status_code == 204:
            return {}
        return resp.json()

    def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return self.request("POST", path, json=json, params=params)

    def download_file(self, url: str, destination: Path) -> None:
        """Stream a file into ``destination``.

        File URLs in cookbook manifests are pre-signed by the server's file
        store, so these requests carry no Chef signature.
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        with self._session.get(
            url, stream=True, verify=self._verify, timeout=self._timeout
        ) as resp:
            resp.raise_for_status()
            with destination.open("wb") as handle:
                for chunk in resp.iter_content(chunk_size=65536):
                    handle.write(chunk)
