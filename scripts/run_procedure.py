#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from decclient.application import build_procedure_service
from decclient.core.config import load_server_config
from decclient.core.errors import ConfigError
from decclient.domain import WorkflowKind


async def _run(kind: WorkflowKind, model: Path, settings: dict[str, object]) -> int:
    service = build_procedure_service(load_server_config(settings))
    try:
        record = await service.run(kind, model)
    finally:
        await service.aclose()
    if record is None:
        return 1
    return 0 if record.succeeded else 2


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a decomposition-tool procedure on a local model")
    parser.add_argument("kind", choices=[kind.value for kind in WorkflowKind], help="procedure to run")
    parser.add_argument("model", help="path to the model file")
    parser.add_argument("--host", help="server domain name (server.domainName)")
    parser.add_argument("--port", type=int, help="server port (server.publicPort)")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings: dict[str, object] = {}
    if args.host:
        settings["server.domainName"] = args.host
    if args.port:
        settings["server.publicPort"] = args.port

    try:
        code = asyncio.run(_run(WorkflowKind(args.kind), Path(args.model), settings))
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
