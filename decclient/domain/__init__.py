"""Domain layer definitions."""

from .procedures import ArtifactRef, RunRecord, RunState, WorkflowKind

__all__ = [
    "ArtifactRef",
    "RunRecord",
    "RunState",
    "WorkflowKind",
]
