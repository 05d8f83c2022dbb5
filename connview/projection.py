"""Read-only projection of a data-source container for remote clients."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .auth import AuthModelRegistry, AuthPropertyInfo, resolve_auth_properties
from .config import NATIVE_AUTH_MODEL_ID
from .errors import ErrorSnapshot
from .features import derive_features
from .models import DataSourceContainer, make_driver_full_id

if TYPE_CHECKING:
    from .session import WebSession

ISO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_instant(instant: datetime | None) -> str | None:
    """Format ``instant`` as UTC ISO-8601; naive values are taken as UTC."""

    if instant is None:
        return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).strftime(ISO_DATE_FORMAT)


class ConnectionInfo:
    """Live view over one connection as seen from a session.

    Every read goes to the container except the small slice fed by
    connection lifecycle events (versions, last error, reported connect
    time), which is stored here until overwritten.
    """

    def __init__(
        self,
        session: WebSession | None,
        container: DataSourceContainer,
        *,
        auth_models: AuthModelRegistry,
        default_auth_model: str = NATIVE_AUTH_MODEL_ID,
    ) -> None:
        self._session = session
        self._container = container
        self._auth_models = auth_models
        self._default_auth_model = default_auth_model
        self._connect_error: ErrorSnapshot | None = None
        self._connect_time: str | None = None
        self._server_version: str | None = None
        self._client_version: str | None = None

    @property
    def session(self) -> WebSession | None:
        return self._session

    @property
    def container(self) -> DataSourceContainer:
        return self._container

    @property
    def id(self) -> str:
        return self._container.id

    @property
    def driver_id(self) -> str:
        return make_driver_full_id(self._container.driver)

    @property
    def name(self) -> str:
        return self._container.name or ""

    @property
    def description(self) -> str:
        return self._container.description or ""

    @property
    def properties(self) -> None:
        """Reserved; always empty."""

        return None

    @property
    def connected(self) -> bool:
        return bool(self._container.connected)

    @property
    def template(self) -> bool:
        return bool(self._container.template)

    @property
    def provided(self) -> bool:
        return bool(self._container.provided)

    @property
    def read_only(self) -> bool:
        return bool(self._container.read_only)

    @property
    def connect_time(self) -> str | None:
        """Last connect instant, falling back to the last reported value."""

        return format_instant(self._container.connect_time) or self._connect_time

    @property
    def connect_error(self) -> ErrorSnapshot | None:
        return self._connect_error

    @property
    def server_version(self) -> str | None:
        return self._server_version

    @property
    def client_version(self) -> str | None:
        return self._client_version

    @property
    def features(self) -> frozenset[str]:
        return derive_features(self._container)

    @property
    def navigator_settings(self) -> Any:
        return self._container.navigator_settings

    @property
    def auth_needed(self) -> bool:
        """True when the user must supply credentials before connecting."""

        container = self._container
        return (
            not container.connected
            and not container.save_password
            and not container.driver.anonymous_access
        )

    @property
    def auth_model(self) -> str:
        return self._container.connection_configuration.auth_model_id or ""

    @property
    def auth_properties(self) -> tuple[AuthPropertyInfo, ...]:
        return resolve_auth_properties(
            self._session,
            self._container,
            self._auth_models,
            default_model_id=self._default_auth_model,
        )

    def set_connect_error(self, failure: BaseException | None) -> None:
        """Store a snapshot of ``failure``; ``None`` clears the last error."""

        self._connect_error = None if failure is None else ErrorSnapshot.from_failure(failure)

    def set_connect_time(self, connect_time: str | None) -> None:
        self._connect_time = connect_time

    def set_server_version(self, server_version: str | None) -> None:
        self._server_version = server_version

    def set_client_version(self, client_version: str | None) -> None:
        self._client_version = client_version

    def __repr__(self) -> str:
        return f"ConnectionInfo(id={self.id!r}, driver_id={self.driver_id!r}, connected={self.connected})"


__all__ = ["ConnectionInfo", "ISO_DATE_FORMAT", "format_instant"]
