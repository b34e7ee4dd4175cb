from __future__ import annotations

from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest
from fastapi.testclient import TestClient

from decclient.application import reset_procedure_state

from fake_server import FakeDecToolServer


@pytest.fixture(autouse=True)
def reset_state():
    reset_procedure_state()
    yield
    reset_procedure_state()


@pytest.fixture()
def service():
    return FakeDecToolServer().service()


@pytest.fixture()
def client(service):
    from decclient.app import create_app

    app = create_app(service)
    with TestClient(app) as test_client:
        yield test_client


def test_root_lists_commands(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["commands"] == ["decompose", "optimize", "enhance"]


def test_unknown_command_is_not_found(client, tmp_path):
    response = client.post("/api/commands/translate", json={"path": str(tmp_path / "model.yaml")})

    assert response.status_code == 404


def test_command_requires_path(client):
    response = client.post("/api/commands/decompose", json={})

    assert response.status_code == 400


def test_command_is_accepted(client, tmp_path):
    response = client.post("/api/commands/optimize", json={"path": str(tmp_path / "missing.yaml")})

    assert response.status_code == 202
    assert response.json() == {
        "kind": "optimize",
        "path": str(tmp_path / "missing.yaml"),
        "accepted": True,
    }


def test_command_on_busy_artifact_is_not_accepted(client, service, tmp_path):
    model = tmp_path / "model.yaml"
    model.write_text("{}", encoding="utf-8")
    service.registry.try_acquire(model.resolve())

    response = client.post("/api/commands/decompose", json={"path": str(model)})

    assert response.status_code == 202
    assert response.json()["accepted"] is False

    response = client.get("/api/commands/active")
    assert response.json() == {"items": [str(model.resolve())]}


def test_output_lists_channel_lines(client, service):
    service.output.info("Start decomposition of model.yaml")
    service.output.diagnostic("Failed to delete model_1.yaml from the server")

    response = client.get("/api/output")

    assert response.status_code == 200
    assert response.json()["items"] == [
        {"level": "info", "message": "Start decomposition of model.yaml"},
        {"level": "diagnostic", "message": "Failed to delete model_1.yaml from the server"},
    ]
