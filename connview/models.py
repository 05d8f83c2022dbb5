"""Data-source container contracts and their in-memory implementations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Protocol, runtime_checkable

from .config import AppConfig, ConnectionConfig, DriverConfig, NavigatorSettings


class UnknownDriverError(ValueError):
    """Raised when a connection references a driver that is not configured."""


@runtime_checkable
class DriverDescriptor(Protocol):
    """Driver catalog entry backing a connection."""

    provider_id: str
    id: str
    name: str
    anonymous_access: bool


@runtime_checkable
class ConnectionConfiguration(Protocol):
    """Connection settings relevant to authentication."""

    auth_model_id: str | None
    user_name: str | None
    user_password: str | None


@runtime_checkable
class DataSourceContainer(Protocol):
    """Configuration + runtime state of a single database connection."""

    id: str
    name: str
    description: str
    driver: DriverDescriptor
    connected: bool
    template: bool
    provided: bool
    hidden: bool
    temporary: bool
    read_only: bool
    save_password: bool
    connect_time: datetime | None
    connection_configuration: ConnectionConfiguration
    navigator_settings: Any


def make_driver_full_id(driver: DriverDescriptor) -> str:
    """Compose the canonical ``provider:driver`` identifier."""

    return f"{driver.provider_id}:{driver.id}"


@dataclass(frozen=True, slots=True)
class DriverInfo:
    """Immutable driver descriptor."""

    provider_id: str
    id: str
    name: str = ""
    anonymous_access: bool = False

    @classmethod
    def from_config(cls, config: DriverConfig) -> DriverInfo:
        return cls(
            provider_id=config.provider,
            id=config.id,
            name=config.name or config.id,
            anonymous_access=config.anonymous_access,
        )


@dataclass(slots=True)
class ConnectionSettings:
    """Mutable connection configuration."""

    auth_model_id: str | None = None
    user_name: str | None = None
    user_password: str | None = None


@dataclass(eq=False, slots=True)
class DataSource:
    """In-memory data-source container.

    Connectivity flags are plain attributes so the owner of the connection
    can flip them as it opens and closes the underlying session.
    """

    id: str
    name: str
    driver: DriverInfo
    description: str = ""
    connection_configuration: ConnectionSettings = field(default_factory=ConnectionSettings)
    navigator_settings: NavigatorSettings = field(default_factory=NavigatorSettings)
    connected: bool = False
    template: bool = False
    provided: bool = False
    hidden: bool = False
    temporary: bool = False
    read_only: bool = False
    save_password: bool = False
    connect_time: datetime | None = None

    def mark_connected(self, at: datetime | None = None) -> None:
        """Record a successful connect."""

        self.connected = True
        self.connect_time = at or datetime.now(tz=timezone.utc)

    def mark_disconnected(self) -> None:
        self.connected = False

    @classmethod
    def from_config(cls, config: ConnectionConfig, driver: DriverInfo) -> DataSource:
        return cls(
            id=config.id,
            name=config.name,
            driver=driver,
            description=config.description,
            connection_configuration=ConnectionSettings(
                auth_model_id=config.auth_model,
                user_name=config.user,
                user_password=config.password,
            ),
            navigator_settings=config.navigator,
            template=config.template,
            provided=config.provided,
            hidden=config.hidden,
            temporary=config.temporary,
            read_only=config.read_only,
            save_password=config.save_password,
        )


def build_data_sources(config: AppConfig) -> tuple[DataSource, ...]:
    """Build containers for every configured connection."""

    drivers = _index_drivers(config.drivers)
    sources: list[DataSource] = []
    for entry in config.connections:
        driver = drivers.get(entry.driver)
        if driver is None:
            raise UnknownDriverError(f"Connection '{entry.id}' references unknown driver '{entry.driver}'.")
        sources.append(DataSource.from_config(entry, driver))
    return tuple(sources)


def _index_drivers(drivers: Iterable[DriverConfig]) -> dict[str, DriverInfo]:
    return {driver.full_id: DriverInfo.from_config(driver) for driver in drivers}


__all__ = [
    "ConnectionConfiguration",
    "ConnectionSettings",
    "DataSource",
    "DataSourceContainer",
    "DriverDescriptor",
    "DriverInfo",
    "UnknownDriverError",
    "build_data_sources",
    "make_driver_full_id",
]
