"""Client-side session state: stored tokens and the HTTP client that sends them."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from common.config import get_settings

logger = logging.getLogger(__name__)

ADMIN_TOKEN_KEY = "aToken"
USER_TOKEN_KEY = "token"


class SessionStore:
    """Key/value token storage, optionally persisted to a JSON file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._values: Dict[str, str] = {}
        if path is not None and path.exists():
            self._values = json.loads(path.read_text(encoding="utf-8"))

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        self._values.pop(key, None)
        self._flush()

    def _flush(self) -> None:
        if self._path is not None:
            self._path.write_text(json.dumps(self._values), encoding="utf-8")


def build_http_client(base_url: Optional[str] = None, timeout: float = 10.0) -> httpx.Client:
    return httpx.Client(base_url=base_url or get_settings().backend_url, timeout=timeout)


def response_message(response: httpx.Response) -> Optional[str]:
    """Pull the envelope ``message`` out of a response, if it carries one."""

    try:
        body: Any = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message else None
    return None


def request_envelope(client: httpx.Client, method: str, url: str, token: Optional[str], **kwargs: Any) -> Dict[str, Any]:
    """
    Issue one request with the ``token`` header and return the JSON envelope.

    Non-2xx answers raise ``httpx.HTTPStatusError``; callers read the server
    message from the attached response.
    """
    headers = dict(kwargs.pop("headers", None) or {})
    if token:
        headers["token"] = token
    response = client.request(method, url, headers=headers, **kwargs)
    response.raise_for_status()
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError(f"Unexpected response body from {url}")
    return body


def failure_message(exc: Exception, fallback: str) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return response_message(exc.response) or fallback
    return fallback
