"""In-process stand-in for the decomposition-tool server."""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

sys.path.append(str(Path(__file__).resolve().parents[1]))

import httpx

from decclient.application import build_procedure_service
from decclient.core.config import ServerConfig


class FakeDecToolServer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.params: list[dict[str, str]] = []
        self.files: dict[str, bytes] = {}
        self.uploaded: dict[str, bytes] = {}
        self.results: dict[str, Any] = {}
        self.failures: dict[tuple[str, str], tuple[int, Any]] = {}
        self.download_body = b"transformed model"
        self.gate: asyncio.Event | None = None
        self.unreachable = False
        self.garbled: set[tuple[str, str]] = set()
        self.faults: dict[tuple[str, str], Exception] = {}

    def fail(self, method: str, prefix: str, status: int = 500, payload: Any = None) -> None:
        self.failures[(method, prefix)] = (status, payload if payload is not None else {"detail": "boom"})

    def garble(self, method: str, prefix: str) -> None:
        """Answer with a body that does not match its declared gzip encoding."""
        self.garbled.add((method, prefix))

    def crash(self, method: str, prefix: str, exc: Exception) -> None:
        self.faults[(method, prefix)] = exc

    def count(self, method: str) -> int:
        return sum(1 for call_method, _ in self.calls if call_method == method)

    def paths(self, method: str) -> list[str]:
        return [path for call_method, path in self.calls if call_method == method]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        for (method, prefix), exc in self.faults.items():
            if request.method == method and path.startswith(prefix):
                raise exc

        for method, prefix in self.garbled:
            if request.method == method and path.startswith(prefix):
                return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"plain, not gzip")

        for (method, prefix), (status, payload) in self.failures.items():
            if request.method == method and path.startswith(prefix):
                return httpx.Response(status, json=payload)

        if path.startswith("/file/"):
            name = path[len("/file/"):]
            if request.method == "POST":
                self.files[name] = request.content
                self.uploaded[name] = request.content
                return httpx.Response(200, json={"filename": name})
            if request.method == "GET":
                if name not in self.files:
                    return httpx.Response(404, json={"detail": f"{name} not found"})
                return httpx.Response(200, content=self.download_body)
            if request.method == "DELETE":
                self.files.pop(name, None)
                return httpx.Response(200)

        if path.startswith("/dec-tool/") and request.method == "PATCH":
            self.params.append(dict(request.url.params))
            operation = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=self.results.get(operation, {"operation": operation}))

        return httpx.Response(404, json={"detail": "not found"})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def service(self, **settings: Any):
        config = ServerConfig(**settings)
        return build_procedure_service(config, http_client=self.http_client())
