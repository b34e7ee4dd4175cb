from __future__ import annotations

from pathlib import Path


class ProcessingRegistry:
    """Tracks the artifacts that currently have a run in progress.

    All operations complete without awaiting, so under a single event loop
    no other run can observe an intermediate state.
    """

    def __init__(self) -> None:
        self._active: set[Path] = set()

    def try_acquire(self, path: Path) -> bool:
        if path in self._active:
            return False
        self._active.add(path)
        return True

    def release(self, path: Path) -> None:
        self._active.discard(path)

    def active(self) -> list[Path]:
        return sorted(self._active)

    def __contains__(self, path: object) -> bool:
        return path in self._active

    def __len__(self) -> int:
        return len(self._active)
