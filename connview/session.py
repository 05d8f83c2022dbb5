"""Per-session bookkeeping of connection projections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from .auth import AuthModelRegistry
from .config import NATIVE_AUTH_MODEL_ID
from .models import DataSourceContainer
from .projection import ConnectionInfo, format_instant

LOG = logging.getLogger(__name__)


class ConnectionNotFoundError(LookupError):
    """Raised when a session does not hold the requested connection."""


class ConnectionEventKind(str, Enum):
    """Connection lifecycle events relevant to projections."""

    CONNECTED = "connected"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ConnectionEvent:
    """Lifecycle notification emitted by whatever owns the connection."""

    connection_id: str
    kind: ConnectionEventKind
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    server_version: str | None = None
    client_version: str | None = None
    error: BaseException | None = None


SessionListener = Callable[[ConnectionInfo, ConnectionEvent], None]


class WebSession:
    """Holds the connection projections visible to one client session."""

    def __init__(
        self,
        session_id: str,
        *,
        auth_models: AuthModelRegistry,
        default_auth_model: str = NATIVE_AUTH_MODEL_ID,
        locale: str = "en",
    ) -> None:
        self._id = session_id
        self._auth_models = auth_models
        self._default_auth_model = default_auth_model
        self._locale = locale
        self._connections: dict[str, ConnectionInfo] = {}
        self._listeners: set[SessionListener] = set()

    @property
    def id(self) -> str:
        return self._id

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def connections(self) -> tuple[ConnectionInfo, ...]:
        """Projections in the order they were added."""

        return tuple(self._connections.values())

    def add_connection(self, container: DataSourceContainer) -> ConnectionInfo:
        """Bind ``container`` to this session, reusing an existing projection."""

        info = self._connections.get(container.id)
        if info is not None:
            return info
        info = ConnectionInfo(
            self,
            container,
            auth_models=self._auth_models,
            default_auth_model=self._default_auth_model,
        )
        self._connections[container.id] = info
        LOG.debug("Connection added to session", extra={"session": self._id, "connection": container.id})
        return info

    def get_connection(self, connection_id: str) -> ConnectionInfo:
        try:
            return self._connections[connection_id]
        except KeyError:
            raise ConnectionNotFoundError(f"Connection '{connection_id}' not found.") from None

    def remove_connection(self, connection_id: str) -> None:
        if self._connections.pop(connection_id, None) is None:
            raise ConnectionNotFoundError(f"Connection '{connection_id}' not found.")

    def close(self) -> None:
        """Discard every projection and listener."""

        self._connections.clear()
        self._listeners.clear()

    def apply_event(self, event: ConnectionEvent) -> None:
        """Copy a lifecycle event into the matching projection."""

        info = self._connections.get(event.connection_id)
        if info is None:
            LOG.debug(
                "Ignoring event for unknown connection",
                extra={"session": self._id, "connection": event.connection_id},
            )
            return
        if event.kind is ConnectionEventKind.CONNECTED:
            info.set_connect_error(None)
            info.set_connect_time(format_instant(event.occurred_at))
            if event.server_version is not None:
                info.set_server_version(event.server_version)
            if event.client_version is not None:
                info.set_client_version(event.client_version)
        elif event.kind is ConnectionEventKind.FAILED:
            info.set_connect_error(event.error)
            LOG.info(
                "Connection attempt failed",
                extra={"session": self._id, "connection": event.connection_id},
            )
        self._notify(info, event)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to applied events; returns an unsubscribe handle."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _notify(self, info: ConnectionInfo, event: ConnectionEvent) -> None:
        for listener in tuple(self._listeners):
            listener(info, event)


__all__ = [
    "ConnectionEvent",
    "ConnectionEventKind",
    "ConnectionNotFoundError",
    "SessionListener",
    "WebSession",
]
