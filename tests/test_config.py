from __future__ import annotations

import json
from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from decclient.core.config import load_server_config
from decclient.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("DECTOOL_SETTINGS_FILE", "DECTOOL_SERVER_DOMAIN_NAME", "DECTOOL_SERVER_PUBLIC_PORT"):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    config = load_server_config()

    assert config.domain_name == "localhost"
    assert config.public_port == 9000
    assert config.data_extensions == (".csv",)
    assert config.base_url == "http://localhost:9000"


def test_settings_file_uses_editor_keys(tmp_path, monkeypatch):
    settings = tmp_path / "settings.json"
    settings.write_text(
        json.dumps(
            {
                "server.domainName": "dec.example.org",
                "server.publicPort": 8080,
                "dataFile.extensions": ["CSV", ".log"],
                "editor.fontSize": 12,
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("DECTOOL_SETTINGS_FILE", str(settings))

    config = load_server_config()

    assert config.base_url == "http://dec.example.org:8080"
    assert config.data_extensions == (".csv", ".log")


def test_environment_overrides_settings_file(tmp_path, monkeypatch):
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"server.domainName": "file.example.org"}), encoding="utf-8")
    monkeypatch.setenv("DECTOOL_SETTINGS_FILE", str(settings))
    monkeypatch.setenv("DECTOOL_SERVER_DOMAIN_NAME", "env.example.org")
    monkeypatch.setenv("DECTOOL_SERVER_PUBLIC_PORT", "9100")

    config = load_server_config()

    assert config.domain_name == "env.example.org"
    assert config.public_port == 9100


def test_explicit_settings_take_precedence(monkeypatch):
    monkeypatch.setenv("DECTOOL_SERVER_DOMAIN_NAME", "env.example.org")

    config = load_server_config({"server.domainName": "cli.example.org", "server.publicPort": 9200})

    assert config.domain_name == "cli.example.org"
    assert config.public_port == 9200


@pytest.mark.parametrize(
    "settings",
    [
        {"server.publicPort": 0},
        {"server.publicPort": "not-a-port"},
        {"server.domainName": ""},
        {"dataFile.extensions": []},
    ],
)
def test_invalid_values_raise_config_error(settings):
    with pytest.raises(ConfigError):
        load_server_config(settings)


def test_unreadable_settings_file(tmp_path, monkeypatch):
    settings = tmp_path / "settings.json"
    settings.write_text("{not json", encoding="utf-8")
    monkeypatch.setenv("DECTOOL_SETTINGS_FILE", str(settings))

    with pytest.raises(ConfigError):
        load_server_config()
