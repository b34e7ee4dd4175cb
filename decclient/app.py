import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from decclient.application import ProcedureService, configure_procedure_service, get_procedure_service
from decclient.domain import WorkflowKind
from decclient.routes import commands

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    service = get_procedure_service()
    logger.info("Decomposition tool client ready, server at %s", service.base_url)
    yield
    await service.aclose()


def create_app(service: ProcedureService | None = None) -> FastAPI:
    app = FastAPI(title="Decomposition Tool Client", version="0.1.0", lifespan=lifespan)

    if service is not None:
        configure_procedure_service(service)

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(commands.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Decomposition Tool Client",
                "docs": "/docs",
                "commands": [kind.value for kind in WorkflowKind],
            }
        )

    return app


app = create_app()
