"""Error types raised while talking to the decomposition-tool server.

``NetworkError`` means no response could be obtained at all, while
``ServerError`` carries the payload of a response with a non-2xx status.
The orchestrator catches :class:`DecToolError` at the run boundary and
reports it on the output channel.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any


class DecToolError(Exception):
    """Base exception for the client."""

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self)}


class NetworkError(DecToolError):
    """Raised when the server could not be reached or the connection broke."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data


class ServerError(DecToolError):
    """Raised when the server answers with a status outside ``[200, 300)``."""

    def __init__(self, status_code: int, payload: Any) -> None:
        super().__init__(f"server responded with status {status_code}")
        self.status_code = status_code
        self.payload = payload

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        data["payload"] = self.payload
        return data


class LocalIOError(DecToolError):
    """Raised when a local file cannot be read, written or copied."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.path is not None:
            data["path"] = str(self.path)
        return data


class PreconditionError(DecToolError):
    """Raised when a run cannot start."""


class DuplicateRunError(PreconditionError):
    """The artifact is already being processed by another run."""


class MissingDataFileError(PreconditionError):
    """No companion data file was found next to the artifact."""


class MalformedResponseError(DecToolError):
    """Raised when a successful response carries an unusable body."""


class ConfigError(DecToolError):
    """Configuration validation error."""


__all__ = [
    "ConfigError",
    "DecToolError",
    "DuplicateRunError",
    "LocalIOError",
    "MalformedResponseError",
    "MissingDataFileError",
    "NetworkError",
    "PreconditionError",
    "ServerError",
]
