"""Output channel that reports run progress to the user.

Lines are kept in memory so that the command surface can display them and
are mirrored to the ``decclient.output`` logger. Diagnostic lines carry
non-fatal problems such as failed server cleanups.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal

OutputLevel = Literal["info", "error", "diagnostic"]

logger = logging.getLogger("decclient.output")

_LOG_LEVELS = {
    "info": logging.INFO,
    "error": logging.ERROR,
    "diagnostic": logging.WARNING,
}


@dataclass(slots=True)
class OutputLine:
    level: OutputLevel
    message: str


class OutputChannel:
    def __init__(self, max_lines: int | None = 1000) -> None:
        self._lines: list[OutputLine] = []
        self._max_lines = max_lines

    def _append(self, level: OutputLevel, message: str) -> None:
        logger.log(_LOG_LEVELS[level], message)
        self._lines.append(OutputLine(level=level, message=message))
        if self._max_lines is not None and len(self._lines) > self._max_lines:
            del self._lines[: len(self._lines) - self._max_lines]

    def info(self, message: str) -> None:
        self._append("info", message)

    def error(self, message: str) -> None:
        self._append("error", message)

    def diagnostic(self, message: str) -> None:
        self._append("diagnostic", message)

    def dump(self, payload: Any, *, level: OutputLevel = "info") -> None:
        """Write a JSON rendering of ``payload``."""

        self._append(level, json.dumps(payload, indent=2, default=str))

    def lines(self, level: OutputLevel | None = None) -> list[OutputLine]:
        if level is None:
            return list(self._lines)
        return [line for line in self._lines if line.level == level]

    def messages(self, level: OutputLevel | None = None) -> list[str]:
        return [line.message for line in self.lines(level)]
