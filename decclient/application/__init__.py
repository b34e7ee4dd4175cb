"""Application services."""

from .procedures import (
    ProcedureService,
    build_procedure_service,
    configure_procedure_service,
    get_procedure_service,
    reset_procedure_state,
)

__all__ = [
    "ProcedureService",
    "build_procedure_service",
    "configure_procedure_service",
    "get_procedure_service",
    "reset_procedure_state",
]
