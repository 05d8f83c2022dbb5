"""Tests for session bookkeeping and lifecycle events."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from connview.auth import AuthModelCatalog, DatabaseNativeAuthModel
from connview.models import DataSource, DriverInfo
from connview.session import ConnectionEvent, ConnectionEventKind, ConnectionNotFoundError, WebSession


def _session() -> WebSession:
    return WebSession("session-1", auth_models=AuthModelCatalog([DatabaseNativeAuthModel()]))


def _container(connection_id: str = "pg-main") -> DataSource:
    return DataSource(
        id=connection_id,
        name=connection_id,
        driver=DriverInfo(provider_id="postgresql", id="postgres-jdbc"),
    )


def test_add_connection_binds_session_and_container() -> None:
    session = _session()
    container = _container()

    info = session.add_connection(container)

    assert info.session is session
    assert info.container is container
    assert session.get_connection("pg-main") is info
    assert session.connections == (info,)


def test_add_connection_reuses_existing_projection() -> None:
    session = _session()
    container = _container()

    first = session.add_connection(container)
    second = session.add_connection(container)

    assert first is second


def test_missing_connection_raises() -> None:
    session = _session()

    with pytest.raises(ConnectionNotFoundError, match="Connection 'nope' not found."):
        session.get_connection("nope")
    with pytest.raises(LookupError):
        session.remove_connection("nope")


def test_remove_and_close_discard_projections() -> None:
    session = _session()
    session.add_connection(_container("a"))
    session.add_connection(_container("b"))

    session.remove_connection("a")
    assert [info.id for info in session.connections] == ["b"]

    session.close()
    assert session.connections == ()


def test_connected_event_updates_mutable_slice() -> None:
    session = _session()
    info = session.add_connection(_container())
    info.set_connect_error(RuntimeError("old failure"))

    session.apply_event(
        ConnectionEvent(
            connection_id="pg-main",
            kind=ConnectionEventKind.CONNECTED,
            occurred_at=datetime(2024, 2, 1, 9, 15, tzinfo=timezone.utc),
            server_version="PostgreSQL 16.2",
            client_version="asyncpg 0.29.0",
        )
    )

    assert info.connect_error is None
    assert info.connect_time == "2024-02-01T09:15:00Z"
    assert info.server_version == "PostgreSQL 16.2"
    assert info.client_version == "asyncpg 0.29.0"


def test_connected_event_without_versions_keeps_previous_values() -> None:
    session = _session()
    info = session.add_connection(_container())
    info.set_server_version("PostgreSQL 15.4")

    session.apply_event(ConnectionEvent(connection_id="pg-main", kind=ConnectionEventKind.CONNECTED))

    assert info.server_version == "PostgreSQL 15.4"


def test_failed_event_records_error() -> None:
    session = _session()
    info = session.add_connection(_container())
    info.set_server_version("PostgreSQL 16.2")

    session.apply_event(
        ConnectionEvent(
            connection_id="pg-main",
            kind=ConnectionEventKind.FAILED,
            error=ConnectionRefusedError("connection refused"),
        )
    )

    assert info.connect_error is not None
    assert info.connect_error.message == "connection refused"
    assert info.server_version == "PostgreSQL 16.2"


def test_listeners_receive_applied_events() -> None:
    session = _session()
    session.add_connection(_container())
    seen: list[tuple[str, ConnectionEventKind]] = []

    unsubscribe = session.subscribe(lambda info, event: seen.append((info.id, event.kind)))
    session.apply_event(ConnectionEvent(connection_id="pg-main", kind=ConnectionEventKind.CONNECTED))
    session.apply_event(ConnectionEvent(connection_id="unknown", kind=ConnectionEventKind.CONNECTED))
    unsubscribe()
    session.apply_event(ConnectionEvent(connection_id="pg-main", kind=ConnectionEventKind.FAILED))

    assert seen == [("pg-main", ConnectionEventKind.CONNECTED)]
