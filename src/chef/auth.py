"""Chef Infra Server request signing (authentication protocol version 1.3).

Every API request carries the client name, a timestamp, a hash of the body
and an RSA SHA-256 signature over a canonical form of those values.
"""

from __future__ import annotations

import base64
import hashlib
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable
from urllib.parse import urlsplit

import requests
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from requests.auth import AuthBase

SIGN_VERSION = "1.3"
SERVER_API_VERSION = "1"
AUTHORIZATION_CHUNK = 60


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def canonical_path(url: str) -> str:
    """Request path with repeated slashes collapsed and no trailing slash."""
    path = re.sub(r"/+", "/", urlsplit(url).path or "/")
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def content_hash(body: bytes | str | None) -> str:
    if body is None:
        body = b""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")


def canonical_request(
    method: str,
    path: str,
    hashed_body: str,
    timestamp: str,
    user_id: str,
    server_api_version: str = SERVER_API_VERSION,
) -> str:
    return "\n".join(
        [
            f"Method:{method.upper()}",
            f"Path:{path}",
            f"X-Ops-Content-Hash:{hashed_body}",
            "X-Ops-Sign:version=1.3",
            f"X-Ops-Timestamp:{timestamp}",
            f"X-Ops-UserId:{user_id}",
            f"X-Ops-Server-API-Version:{server_api_version}",
        ]
    )


def load_private_key(key_path: str | Path) -> rsa.RSAPrivateKey:
    """Load an unencrypted PEM client key."""
    data = Path(key_path).expanduser().read_bytes()
    key = serialization.load_pem_private_key(data, password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError(f"client key {key_path} is not an RSA private key")
    return key


class ChefRequestAuth(AuthBase):
    """requests auth hook that signs requests for the Chef Infra Server."""

    def __init__(
        self,
        client_name: str,
        private_key: rsa.RSAPrivateKey,
        timestamp: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self.client_name = client_name
        self._private_key = private_key
        self._timestamp = timestamp

    @classmethod
    def from_key_file(cls, client_name: str, key_path: str | Path) -> ChefRequestAuth:
        return cls(client_name, load_private_key(key_path))

    def sign(self, canonical: str) -> str:
        signature = self._private_key.sign(
            canonical.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256()
        )
        return base64.b64encode(signature).decode("ascii")

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        timestamp = self._timestamp()
        hashed_body = content_hash(request.body)
        canonical = canonical_request(
            request.method or "GET",
            canonical_path(request.url or "/"),
            hashed_body,
            timestamp,
            self.client_name,
        )
        signature = self.sign(canonical)

        request.headers.update(
            {
                "X-Ops-Sign": f"algorithm=sha256;version={SIGN_VERSION}",
                "X-Ops-Userid": self.client_name,
                "X-Ops-Timestamp": timestamp,
                "X-Ops-Content-Hash": hashed_body,
                "X-Ops-Server-API-Version": SERVER_API_VERSION,
            }
        )
        chunks = [
            signature[i : i + AUTHORIZATION_CHUNK]
            for i in range(0, len(signature), AUTHORIZATION_CHUNK)
        ]
        for index, chunk in enumerate(chunks, start=1):
            request.headers[f"X-Ops-Authorization-{index}"] = chunk
        return request
