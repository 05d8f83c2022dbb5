"""Configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, get_args

import tomllib

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "connview" / "config.toml"

NATIVE_AUTH_MODEL_ID = "native"

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
LOG_LEVELS: tuple[str, ...] = get_args(LogLevel)

_FLAG = TypeAdapter(bool)


class NavigatorSettings(BaseModel):
    """Navigator display hints passed through to clients untouched."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    show_system_objects: bool = False
    show_utility_objects: bool = False
    show_only_entities: bool = False
    merge_entities: bool = False
    hide_folders: bool = False
    hide_schemas: bool = False
    hide_virtual_model: bool = False


class DriverConfig(BaseModel):
    """Driver entry stored in config.toml."""

    provider: str
    id: str
    name: str = ""
    anonymous_access: bool = False

    @property
    def full_id(self) -> str:
        return f"{self.provider}:{self.id}"


class ConnectionConfig(BaseModel):
    """Connection entry stored in config.toml."""

    id: str
    name: str
    driver: str
    description: str = ""
    auth_model: str | None = None
    user: str | None = None
    password: str | None = None
    save_password: bool = False
    read_only: bool = False
    template: bool = False
    provided: bool = False
    hidden: bool = False
    temporary: bool = False
    navigator: NavigatorSettings = Field(default_factory=NavigatorSettings)


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    log_level: LogLevel = "INFO"
    default_auth_model: str = NATIVE_AUTH_MODEL_ID
    auth_models: dict[str, bool] = Field(default_factory=dict)
    drivers: list[DriverConfig] = Field(default_factory=list)
    connections: list[ConnectionConfig] = Field(default_factory=list)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    def auth_model_filters(self) -> tuple[set[str] | None, set[str]]:
        """Return allow/block lists for auth model enablement."""

        allowed = {name for name, flag in self.auth_models.items() if flag}
        disabled = {name for name, flag in self.auth_models.items() if not flag}
        allowlist: set[str] | None = allowed or None
        return allowlist, disabled

    def is_auth_model_enabled(self, model_id: str) -> bool:
        allowlist, disabled = self.auth_model_filters()
        if allowlist is not None:
            return model_id in allowlist
        return model_id not in disabled

    def with_auth_model_enabled(self, model_id: str, enabled: bool) -> AppConfig:
        """Return a copy with the given auth model flag updated."""

        auth_models = dict(self.auth_models)
        if enabled:
            auth_models.pop(model_id, None)
        else:
            auth_models[model_id] = False
        return self.model_copy(update={"auth_models": auth_models})


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    config_path = path or CONFIG_FILE
    try:
        raw = _read_config_file(config_path)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config file", extra={"path": str(config_path), "error": str(exc)})
        return AppConfig()

    data: dict[str, object] = {}
    log_level = raw.get("log_level")
    if isinstance(log_level, str):
        if log_level.upper() in LOG_LEVELS:
            data["log_level"] = log_level.upper()
        else:
            LOG.warning("Ignoring unknown log level", extra={"path": str(config_path), "log_level": log_level})
    default_auth_model = raw.get("default_auth_model")
    if isinstance(default_auth_model, str) and default_auth_model:
        data["default_auth_model"] = default_auth_model
    auth_models = raw.get("auth_models")
    if isinstance(auth_models, dict):
        data["auth_models"] = _parse_flags(auth_models, config_path)
    data["drivers"] = _parse_entries(raw.get("drivers"), DriverConfig, config_path)
    data["connections"] = _parse_entries(raw.get("connections"), ConnectionConfig, config_path)
    return AppConfig(**data)


def _parse_flags(flags: dict, path: Path) -> dict[str, bool]:
    parsed: dict[str, bool] = {}
    for name, flag in flags.items():
        try:
            parsed[str(name)] = _FLAG.validate_python(flag)
        except ValidationError:
            # Unreadable flags disable the model rather than enabling it.
            LOG.warning("Treating invalid auth model flag as disabled", extra={"path": str(path), "auth_model": name})
            parsed[str(name)] = False
    return parsed


def _parse_entries(entries: object, model: type[BaseModel], path: Path) -> list:
    if not isinstance(entries, list):
        return []
    parsed = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError as exc:
            LOG.warning(
                "Skipping invalid config entry",
                extra={"path": str(path), "section": model.__name__, "errors": exc.error_count()},
            )
    return parsed


def _read_config_file(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        raw = tomllib.load(handle)
    return raw if isinstance(raw, dict) else {}


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "LOG_LEVELS",
    "LogLevel",
    "ConnectionConfig",
    "DriverConfig",
    "NATIVE_AUTH_MODEL_ID",
    "NavigatorSettings",
    "load_config",
]
