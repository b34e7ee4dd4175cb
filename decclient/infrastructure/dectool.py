"""Client for the decomposition-tool HTTP API.

Staged files live under ``/file/{name}`` (``POST`` to upload, ``GET`` to
download, ``DELETE`` to remove). Operations are ``PATCH`` requests against
``/dec-tool/{operation}`` that reference staged files by name.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from decclient.core.errors import LocalIOError
from decclient.infrastructure.transport import DecToolTransport, TransportResponse

logger = logging.getLogger(__name__)

FILE_PATH = "/file/{name}"
OPERATION_PATH = "/dec-tool/{operation}"


class DecToolClient:
    """Stages files on the server and invokes its transformations."""

    def __init__(self, transport: DecToolTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> DecToolTransport:
        return self._transport

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _file_path(remote_name: str) -> str:
        return FILE_PATH.format(name=remote_name)

    @staticmethod
    def _as_output(response: TransportResponse) -> dict[str, Any]:
        data = response.json()
        if data is None:
            return {}
        if isinstance(data, dict):
            return data
        return {"result": data}

    async def _invoke(self, operation: str, **params: str) -> dict[str, Any]:
        response = await self._transport.send_request(
            "PATCH",
            OPERATION_PATH.format(operation=operation),
            params=params,
        )
        return self._as_output(response)

    # ------------------------------------------------------------------
    # staging
    # ------------------------------------------------------------------
    async def upload(self, local_path: Path, remote_name: str) -> TransportResponse:
        try:
            handle = local_path.open("rb")
        except OSError as exc:
            raise LocalIOError(f"cannot open {local_path.name}: {exc}", path=local_path) from exc

        with handle:
            try:
                return await self._transport.send_request(
                    "POST",
                    self._file_path(remote_name),
                    files={"file": (remote_name, handle, "application/octet-stream")},
                )
            except OSError as exc:
                raise LocalIOError(f"cannot read {local_path.name}: {exc}", path=local_path) from exc

    async def download(self, remote_name: str) -> TransportResponse:
        return await self._transport.send_request("GET", self._file_path(remote_name))

    async def delete(self, remote_name: str) -> TransportResponse:
        return await self._transport.send_request("DELETE", self._file_path(remote_name))

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    async def decompose(self, model_name: str) -> dict[str, Any]:
        return await self._invoke("decompose", model_filename=model_name)

    async def optimize(self, model_name: str) -> dict[str, Any]:
        return await self._invoke("optimize", model_filename=model_name)

    async def enhance(self, model_name: str, data_name: str) -> dict[str, Any]:
        return await self._invoke("enhance", model_filename=model_name, data_filename=data_name)

    async def aclose(self) -> None:
        await self._transport.aclose()


__all__ = ["DecToolClient"]
