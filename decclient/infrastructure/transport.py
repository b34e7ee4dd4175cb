"""HTTP transport to the decomposition-tool server."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from decclient.core.config import ServerConfig
from decclient.core.errors import MalformedResponseError, NetworkError, ServerError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransportResponse:
    """A successful (2xx) response with its body fully read."""

    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        try:
            return json.loads(self.content) if self.content else None
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedResponseError(f"response body is not valid JSON: {exc}") from exc


class DecToolTransport:
    """Issues single request/response exchanges against the configured server."""

    def __init__(
        self,
        config: ServerConfig,
        *,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._base_url = config.base_url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _decode_error_payload(response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def send_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        files: Mapping[str, Any] | None = None,
        content: bytes | None = None,
    ) -> TransportResponse:
        url = f"{self._base_url}{path}"
        request_headers = dict(headers or {})
        if files is None and content is None:
            request_headers.setdefault("Content-Length", "0")

        logger.debug("%s %s params=%s", method, url, dict(params or {}))
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                headers=request_headers,
                files=files,
                content=content,
            )
        except httpx.DecodingError as exc:
            logger.debug("%s %s returned an undecodable body: %r", method, url, exc)
            raise MalformedResponseError(f"{method} {path} returned an undecodable body: {exc}") from exc
        except httpx.RequestError as exc:
            logger.debug("%s %s failed without a response: %r", method, url, exc)
            raise NetworkError(f"{method} {path} failed: {exc}", cause=exc) from exc

        if not 200 <= response.status_code < 300:
            payload = self._decode_error_payload(response)
            logger.debug("%s %s returned %s", method, url, response.status_code)
            raise ServerError(response.status_code, payload)

        return TransportResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "DecToolTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["DecToolTransport", "TransportResponse"]
