"""Tests for the command-line entry point."""

from __future__ import annotations

import importlib.metadata as metadata
import json

import pytest

from connview import app as app_module
from connview.config import AppConfig, ConnectionConfig, DriverConfig


@pytest.fixture(autouse=True)
def no_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints(()))


def _config(driver: str = "postgresql:postgres-jdbc") -> AppConfig:
    return AppConfig(
        drivers=[
            DriverConfig(provider="postgresql", id="postgres-jdbc"),
            DriverConfig(provider="sqlite", id="sqlite-jdbc", anonymous_access=True),
        ],
        connections=[
            ConnectionConfig(id="pg-main", name="Main", driver=driver, user="postgres"),
            ConnectionConfig(id="local", name="Local", driver="sqlite:sqlite-jdbc", hidden=True),
        ],
    )


def test_build_session_adds_configured_connections() -> None:
    session = app_module.build_session(_config())

    assert [info.id for info in session.connections] == ["pg-main", "local"]
    assert session.get_connection("local").features == {"virtual"}
    assert session.get_connection("local").auth_needed is False


def test_main_prints_selected_fields(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(app_module, "_load_app_config", lambda path: _config())

    exit_code = app_module.main(["--connection", "pg-main", "--field", "id", "--field", "authNeeded"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == [{"id": "pg-main", "authNeeded": True}]


def test_main_prints_all_connections(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(app_module, "_load_app_config", lambda path: _config())

    exit_code = app_module.main([])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [entry["id"] for entry in payload] == ["pg-main", "local"]
    assert [prop["id"] for prop in payload[0]["authProperties"]] == ["user", "password"]


def test_main_fails_for_unknown_connection(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "_load_app_config", lambda path: _config())

    assert app_module.main(["--connection", "nope"]) == 1


def test_main_fails_for_unknown_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "_load_app_config", lambda path: _config(driver="oracle:thin"))

    assert app_module.main([]) == 1


def test_main_survives_broken_auth_model_entry_point(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    broken = metadata.EntryPoint(name="broken", value="nowhere.at_all:Nope", group="connview.auth_models")
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints((broken,)))
    monkeypatch.setattr(app_module, "_load_app_config", lambda path: _config())

    exit_code = app_module.main(["--field", "id", "--field", "authProperties"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [entry["id"] for entry in payload] == ["pg-main", "local"]
    assert [prop["id"] for prop in payload[0]["authProperties"]] == ["user", "password"]


def test_log_level_option_is_case_insensitive() -> None:
    args = app_module.parse_args(["--log-level", "debug"])

    assert args.log_level == "DEBUG"


def test_unknown_log_level_option_is_rejected() -> None:
    with pytest.raises(SystemExit):
        app_module.parse_args(["--log-level", "verbose"])
