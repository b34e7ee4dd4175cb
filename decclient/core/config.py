"""Configuration for the decomposition-tool server connection.

Options use the dotted keys editors store in their settings files
(``server.domainName``, ``server.publicPort``, ``dataFile.extensions``).
Values are merged from the defaults, an optional JSON settings file named by
``DECTOOL_SETTINGS_FILE``, environment variables and finally explicit
overrides.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from decclient.core.errors import ConfigError

DEFAULT_DOMAIN_NAME = "localhost"
DEFAULT_PUBLIC_PORT = 9000
DEFAULT_DATA_EXTENSIONS = (".csv",)

_ENV_KEYS = {
    "DECTOOL_SERVER_DOMAIN_NAME": "server.domainName",
    "DECTOOL_SERVER_PUBLIC_PORT": "server.publicPort",
}


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    domain_name: str = Field(default=DEFAULT_DOMAIN_NAME, alias="server.domainName", min_length=1)
    public_port: int = Field(default=DEFAULT_PUBLIC_PORT, alias="server.publicPort", ge=1, le=65535)
    data_extensions: tuple[str, ...] = Field(default=DEFAULT_DATA_EXTENSIONS, alias="dataFile.extensions")

    @field_validator("data_extensions")
    @classmethod
    def _normalise_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = []
        for item in value:
            item = item.strip().lower()
            if not item:
                continue
            cleaned.append(item if item.startswith(".") else f".{item}")
        if not cleaned:
            raise ValueError("at least one data file extension is required")
        return tuple(cleaned)

    @property
    def base_url(self) -> str:
        return f"http://{self.domain_name}:{self.public_port}"


def _read_settings_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"cannot read settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"settings file {path} must contain a JSON object")
    return data


def load_server_config(settings: Mapping[str, Any] | None = None) -> ServerConfig:
    """Build the server configuration from all configured sources."""

    values: dict[str, Any] = {}

    settings_file = os.getenv("DECTOOL_SETTINGS_FILE")
    if settings_file:
        values.update(_read_settings_file(Path(settings_file).expanduser()))

    for env_key, option in _ENV_KEYS.items():
        env_value = os.getenv(env_key)
        if env_value:
            values[option] = env_value

    if settings:
        values.update(settings)

    known = set(ServerConfig.model_fields)
    known.update(field.alias for field in ServerConfig.model_fields.values() if field.alias)
    try:
        return ServerConfig(**{key: value for key, value in values.items() if key in known})
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
