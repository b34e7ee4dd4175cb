"""Application service that runs remote procedures on local models.

A run stages the model (and, for enhancement, its companion data file) on
the server under fresh temporary names, invokes the requested operation,
downloads the transformed model over the local file after backing it up,
and always deletes whatever it staged. Only one run per artifact path may
be active at a time.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Any, Iterable

import httpx

from decclient.core.backup import write_artifact
from decclient.core.config import DEFAULT_DATA_EXTENSIONS, ServerConfig, load_server_config
from decclient.core.errors import (
    DecToolError,
    DuplicateRunError,
    LocalIOError,
    MalformedResponseError,
    MissingDataFileError,
)
from decclient.core.naming import make_temp_name
from decclient.domain import ArtifactRef, RunRecord, RunState, WorkflowKind
from decclient.infrastructure import DecToolClient, DecToolTransport, OutputChannel, ProcessingRegistry

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
# Kept as the server contract states it, although a calendar year has 365 days.
DAYS_PER_YEAR = 356

_SUCCESS_VERBS = {
    WorkflowKind.DECOMPOSE: "decomposed the model",
    WorkflowKind.OPTIMIZE: "optimized the deployment of the model",
    WorkflowKind.ENHANCE: "enhanced the accuracy of the model",
}


def annual_cost(total_cost: float) -> float:
    """Project an hourly cost onto a year."""

    return total_cost * HOURS_PER_DAY * DAYS_PER_YEAR


def _extract_total_cost(output: dict[str, Any]) -> float:
    value = output.get("total_cost")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponseError(f"optimization result has no numeric total_cost: {value!r}")
    return value


class ProcedureService:
    """Coordinates upload, invocation, retrieval and cleanup for each run."""

    def __init__(
        self,
        client: DecToolClient,
        registry: ProcessingRegistry,
        output: OutputChannel,
        *,
        data_extensions: Iterable[str] = DEFAULT_DATA_EXTENSIONS,
    ) -> None:
        self._client = client
        self._registry = registry
        self._output = output
        self._data_extensions = tuple(ext.lower() for ext in data_extensions)
        self._tasks: set[asyncio.Task[RunRecord]] = set()

    @property
    def registry(self) -> ProcessingRegistry:
        return self._registry

    @property
    def output(self) -> OutputChannel:
        return self._output

    @property
    def base_url(self) -> str:
        return self._client.transport.base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------
    async def decompose(self, path: str | Path) -> RunRecord | None:
        return await self.run(WorkflowKind.DECOMPOSE, path)

    async def optimize(self, path: str | Path) -> RunRecord | None:
        return await self.run(WorkflowKind.OPTIMIZE, path)

    async def enhance(self, path: str | Path) -> RunRecord | None:
        return await self.run(WorkflowKind.ENHANCE, path)

    def start(self, kind: WorkflowKind | str, path: str | Path) -> asyncio.Task[RunRecord] | None:
        """Schedule a run on the running event loop without waiting for it.

        The artifact is claimed before this returns, so ``None`` means the
        run was rejected because another run already holds it.
        """

        record = self._claim(kind, path)
        if record is None:
            return None
        task = asyncio.get_running_loop().create_task(self._run_claimed(record))
        self._tasks.add(task)
        task.add_done_callback(self._finish_task)
        return task

    def _finish_task(self, task: asyncio.Task[RunRecord]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background run failed", exc_info=task.exception())

    def is_processing(self, path: str | Path) -> bool:
        return ArtifactRef.from_path(path).path in self._registry

    # ------------------------------------------------------------------
    # run lifecycle
    # ------------------------------------------------------------------
    async def run(self, kind: WorkflowKind | str, path: str | Path) -> RunRecord | None:
        """Run ``kind`` on the model at ``path``.

        Returns ``None`` when another run already holds the artifact.
        Failures are reported on the output channel and stored on the
        returned record rather than raised.
        """

        record = self._claim(kind, path)
        if record is None:
            return None
        return await self._run_claimed(record)

    def _claim(self, kind: WorkflowKind | str, path: str | Path) -> RunRecord | None:
        kind = WorkflowKind(kind)
        artifact = ArtifactRef.from_path(path)
        if not self._registry.try_acquire(artifact.path):
            rejection = DuplicateRunError(f"{artifact.file_name} is already being processed")
            logger.info("Skipping %s of %s: %s", kind.value, artifact.path, rejection)
            self._output.info(str(rejection))
            return None
        return RunRecord(run_id=uuid.uuid4().hex, kind=kind, artifact=artifact)

    async def _run_claimed(self, record: RunRecord) -> RunRecord:
        try:
            await self._execute(record)
        finally:
            self._registry.release(record.artifact.path)
        return record

    async def _execute(self, record: RunRecord) -> None:
        label = record.kind.label
        name = record.artifact.file_name
        self._output.info(f"Start {label} of {name}")
        try:
            await self._run_pipeline(record)
        except DecToolError as exc:
            self._report_failure(record, exc)
        except Exception as exc:
            record.error = exc
            record.transition(RunState.FAILED)
            self._output.error(f"{label[0].upper()}{label[1:]} of {name} failed unexpectedly: {exc!r}")
            raise
        finally:
            record.transition(RunState.CLEANUP)
            await self._cleanup(record)
            record.transition(RunState.DONE)

        if record.error is None:
            self._output.info(f"{label[0].upper()}{label[1:]} of {name} complete")

    async def _run_pipeline(self, record: RunRecord) -> None:
        artifact = record.artifact
        kind = record.kind

        if kind is WorkflowKind.ENHANCE:
            record.data_file = self.find_data_file(artifact)

        record.transition(RunState.STAGING)
        model_name = make_temp_name(artifact.file_name)
        await self._client.upload(artifact.path, model_name)
        record.staged.append(model_name)
        self._output.info("Successfully uploaded the original model to the server")

        data_name: str | None = None
        if record.data_file is not None:
            data_name = make_temp_name(record.data_file.name)
            await self._client.upload(record.data_file, data_name)
            record.staged.append(data_name)
            self._output.info("Successfully uploaded the monitoring data to the server")

        record.transition(RunState.REMOTE_OP)
        if kind is WorkflowKind.DECOMPOSE:
            output = await self._client.decompose(model_name)
        elif kind is WorkflowKind.OPTIMIZE:
            output = await self._client.optimize(model_name)
            record.annual_cost = annual_cost(_extract_total_cost(output))
        else:
            assert data_name is not None
            output = await self._client.enhance(model_name, data_name)
        record.output = output
        self._output.info(f"Successfully {_SUCCESS_VERBS[kind]}")

        record.transition(RunState.RETRIEVING)
        response = await self._client.download(model_name)
        record.backup_path = await asyncio.to_thread(write_artifact, artifact.path, response.content)
        self._output.info("Successfully downloaded the resultant model from the server")

        self._output.dump(output)
        if record.annual_cost is not None:
            self._output.info(f"Estimated annual cost: {record.annual_cost:,.2f}")

    def find_data_file(self, artifact: ArtifactRef) -> Path:
        """Return the companion data file stored next to ``artifact``."""

        directory = artifact.path.parent
        try:
            candidates = sorted(
                entry
                for entry in directory.iterdir()
                if entry.is_file()
                and entry.suffix.lower() in self._data_extensions
                and entry != artifact.path
            )
        except OSError as exc:
            raise LocalIOError(f"cannot list {directory}: {exc}", path=directory) from exc
        if not candidates:
            extensions = ", ".join(self._data_extensions)
            raise MissingDataFileError(f"no data file ({extensions}) found next to {artifact.file_name}")
        return candidates[0]

    def _report_failure(self, record: RunRecord, exc: DecToolError) -> None:
        failed_in = record.state
        record.error = exc
        record.transition(RunState.FAILED)

        if failed_in is RunState.STAGING and not record.staged:
            self._output.error("Failed to upload the original model to the server")
        elif failed_in is RunState.STAGING:
            self._output.error("Failed to upload the monitoring data to the server")
        elif failed_in is RunState.REMOTE_OP:
            self._output.error(f"Failed to {record.kind.value} the model")
        elif failed_in is RunState.RETRIEVING and isinstance(exc, LocalIOError):
            self._output.error(f"Failed to write the resultant model to {record.artifact.file_name}")
        elif failed_in is RunState.RETRIEVING:
            self._output.error("Failed to download the resultant model from the server")
        self._output.dump(exc.to_dict(), level="error")
        logger.info("%s of %s failed: %s", record.kind.value, record.artifact.path, exc)

    async def _cleanup(self, record: RunRecord) -> None:
        for remote_name in record.staged:
            try:
                await self._client.delete(remote_name)
            except Exception as exc:
                record.cleanup_errors.append(exc)
                logger.debug("Cleanup of %s failed", remote_name, exc_info=exc)
                self._output.diagnostic(f"Failed to delete {remote_name} from the server: {exc}")


# ----------------------------------------------------------------------
# default wiring
# ----------------------------------------------------------------------
def build_procedure_service(
    config: ServerConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
    output: OutputChannel | None = None,
) -> ProcedureService:
    transport = DecToolTransport(config, http_client=http_client)
    return ProcedureService(
        DecToolClient(transport),
        ProcessingRegistry(),
        output or OutputChannel(),
        data_extensions=config.data_extensions,
    )


_service: ProcedureService | None = None


def configure_procedure_service(service: ProcedureService) -> None:
    """Install the service used by the command surface."""

    global _service
    _service = service


def get_procedure_service() -> ProcedureService:
    """Return the configured service, building one from configuration on first use."""

    global _service
    if _service is None:
        _service = build_procedure_service(load_server_config())
    return _service


def reset_procedure_state() -> None:
    global _service
    _service = None
