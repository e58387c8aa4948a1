"""Fortify SSC API client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import SSCConfig
from .errors import DecodeError, TransportError

logger = logging.getLogger(__name__)


class SSCClient:
    """Thin wrapper around the SSC REST API.

    Issues authenticated read-only GETs and returns parsed JSON. No retries.
    """

    def __init__(self, config: SSCConfig, http_client: httpx.Client | None = None):
        self.base_url = config.api_root
        self.timeout = config.timeout
        if http_client is None:
            http_client = httpx.Client(
                timeout=config.timeout,
                verify=config.verify_tls,
                follow_redirects=True,
            )
        http_client.headers.update(
            {
                "Authorization": f"FortifyToken {config.token}",
                "Accept": "application/json",
            }
        )
        self._client = http_client

    def get(self, path: str, **params) -> Any:
        """Make a GET request, return parsed JSON data."""
        # Strip None params
        params = {k: v for k, v in params.items() if v is not None}
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s params=%s", url, params)

        try:
            resp = self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransportError("TIMEOUT", f"Request to {path} timed out", 0) from exc
        except httpx.RequestError as exc:
            raise TransportError("NETWORK", str(exc), 0) from exc

        if not resp.is_success:
            raise TransportError(
                "HTTP_ERROR",
                f"API request failed with status {resp.status_code}: {resp.text[:500]}",
                resp.status_code,
            )
        if not resp.content:
            raise DecodeError(f"Empty response (HTTP {resp.status_code})", resp.status_code, code="INVALID_RESPONSE")
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(resp.text[:200], resp.status_code, code="INVALID_RESPONSE") from exc

    def close(self):
        self._client.close()

    def __enter__(self) -> SSCClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
