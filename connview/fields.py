"""Static field table used to serialize connection projections."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from pydantic import BaseModel

from .auth import AuthPropertyInfo
from .errors import ErrorSnapshot
from .projection import ConnectionInfo

FieldAccessor = Callable[[ConnectionInfo], Any]

CONNECTION_INFO_FIELDS: tuple[tuple[str, FieldAccessor], ...] = (
    ("id", lambda info: info.id),
    ("driverId", lambda info: info.driver_id),
    ("name", lambda info: info.name),
    ("description", lambda info: info.description),
    ("properties", lambda info: info.properties),
    ("connected", lambda info: info.connected),
    ("template", lambda info: info.template),
    ("provided", lambda info: info.provided),
    ("readOnly", lambda info: info.read_only),
    ("connectTime", lambda info: info.connect_time),
    ("connectError", lambda info: info.connect_error),
    ("serverVersion", lambda info: info.server_version),
    ("clientVersion", lambda info: info.client_version),
    ("features", lambda info: info.features),
    ("navigatorSettings", lambda info: info.navigator_settings),
    ("authNeeded", lambda info: info.auth_needed),
    ("authModel", lambda info: info.auth_model),
    ("authProperties", lambda info: info.auth_properties),
)

FIELD_NAMES: tuple[str, ...] = tuple(name for name, _ in CONNECTION_INFO_FIELDS)


def serialize_connection_info(info: ConnectionInfo, fields: Iterable[str] | None = None) -> dict[str, Any]:
    """Evaluate the selected fields (all by default) into a JSON-ready dict.

    Keys follow table order regardless of the order ``fields`` lists them in.
    """

    selected = _select(fields)
    return {
        name: _to_plain(accessor(info))
        for name, accessor in CONNECTION_INFO_FIELDS
        if selected is None or name in selected
    }


def _select(fields: Iterable[str] | None) -> set[str] | None:
    if fields is None:
        return None
    selected = set(fields)
    unknown = sorted(selected.difference(FIELD_NAMES))
    if unknown:
        raise ValueError(f"Unknown connection field(s): {', '.join(unknown)}")
    return selected


def _to_plain(value: Any) -> Any:
    if isinstance(value, (ErrorSnapshot, AuthPropertyInfo)):
        return value.to_dict()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, frozenset):
        return sorted(value)
    if isinstance(value, tuple):
        return [_to_plain(item) for item in value]
    return value


__all__ = ["CONNECTION_INFO_FIELDS", "FIELD_NAMES", "FieldAccessor", "serialize_connection_info"]
