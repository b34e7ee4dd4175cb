"""Domain entities for remote procedure runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class WorkflowKind(str, Enum):
    """Server-side transformations that can be applied to a model."""

    DECOMPOSE = "decompose"
    OPTIMIZE = "optimize"
    ENHANCE = "enhance"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    WorkflowKind.DECOMPOSE: "decomposition",
    WorkflowKind.OPTIMIZE: "deployment optimization",
    WorkflowKind.ENHANCE: "accuracy enhancement",
}


class RunState(str, Enum):
    IDLE = "idle"
    STAGING = "staging"
    REMOTE_OP = "remote_op"
    RETRIEVING = "retrieving"
    FAILED = "failed"
    CLEANUP = "cleanup"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """A local model file that a run operates on."""

    path: Path
    file_name: str
    base_name: str
    extension: str

    @classmethod
    def from_path(cls, path: str | Path) -> "ArtifactRef":
        resolved = Path(path).expanduser().resolve()
        return cls(
            path=resolved,
            file_name=resolved.name,
            base_name=resolved.stem,
            extension=resolved.suffix,
        )


@dataclass(slots=True)
class RunRecord:
    """Progress and outcome of a single run."""

    run_id: str
    kind: WorkflowKind
    artifact: ArtifactRef
    state: RunState = RunState.IDLE
    history: list[RunState] = field(default_factory=lambda: [RunState.IDLE])
    staged: list[str] = field(default_factory=list)
    data_file: Path | None = None
    output: dict[str, Any] | None = None
    annual_cost: float | None = None
    backup_path: Path | None = None
    error: Exception | None = None
    cleanup_errors: list[Exception] = field(default_factory=list)

    def transition(self, state: RunState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.DONE and self.error is None
