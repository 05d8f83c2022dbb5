"""Authentication models and credential field resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from .config import NATIVE_AUTH_MODEL_ID
from .models import DataSourceContainer

if TYPE_CHECKING:
    from .session import WebSession

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CredentialProperty:
    """Credential field declared by an auth model."""

    id: str
    display_name: str
    description: str = ""
    data_type: str = "string"
    required: bool = False
    secured: bool = False
    default_value: Any = None
    # Display names keyed by locale, e.g. {"de": "Benutzername"}.
    localized_names: Mapping[str, str] = field(default_factory=dict)

    def display_name_for(self, locale: str | None) -> str:
        if not locale:
            return self.display_name
        language = locale.split("_", 1)[0]
        return self.localized_names.get(locale) or self.localized_names.get(language) or self.display_name


@runtime_checkable
class CredentialsSource(Protocol):
    """Credential fields of an auth model bound to one container."""

    def properties(self) -> Sequence[CredentialProperty]:
        """Return the declared credential fields in display order."""

    def property_value(self, property_id: str) -> Any:
        """Return the current value of a field, or ``None``."""


@runtime_checkable
class AuthModelDescriptor(Protocol):
    """Pluggable authentication strategy."""

    id: str
    name: str
    description: str

    def create_credentials_source(self, container: DataSourceContainer) -> CredentialsSource: ...


@runtime_checkable
class AuthModelRegistry(Protocol):
    """Lookup of auth model descriptors by identifier."""

    def lookup_auth_model(self, model_id: str) -> AuthModelDescriptor | None: ...


@dataclass(frozen=True, slots=True)
class AuthPropertyInfo:
    """Client-facing view of a credential field."""

    id: str
    display_name: str
    description: str
    data_type: str
    value: Any
    default_value: Any
    required: bool
    features: tuple[str, ...]

    @classmethod
    def from_property(
        cls,
        session: WebSession | None,
        prop: CredentialProperty,
        source: CredentialsSource,
    ) -> AuthPropertyInfo:
        # Secured values never leave the server.
        value = None if prop.secured else source.property_value(prop.id)
        features: list[str] = []
        if prop.secured:
            features.append("password")
        if prop.required:
            features.append("required")
        return cls(
            id=prop.id,
            display_name=prop.display_name_for(session.locale if session is not None else None),
            description=prop.description,
            data_type=prop.data_type,
            value=value,
            default_value=prop.default_value,
            required=prop.required,
            features=tuple(features),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "dataType": self.data_type,
            "value": self.value,
            "defaultValue": self.default_value,
            "required": self.required,
            "features": list(self.features),
        }


class _NativeCredentialsSource:
    """User name/password pair stored on the connection configuration."""

    _PROPERTIES = (
        CredentialProperty(
            id="user",
            display_name="User name",
            description="Database user name",
            localized_names={"de": "Benutzername", "fr": "Nom d'utilisateur"},
            required=True,
        ),
        CredentialProperty(
            id="password",
            display_name="User password",
            description="Database user password",
            localized_names={"de": "Passwort", "fr": "Mot de passe"},
            secured=True,
        ),
    )

    def __init__(self, container: DataSourceContainer) -> None:
        self._configuration = container.connection_configuration

    def properties(self) -> Sequence[CredentialProperty]:
        return self._PROPERTIES

    def property_value(self, property_id: str) -> Any:
        if property_id == "user":
            return self._configuration.user_name
        if property_id == "password":
            return self._configuration.user_password
        return None


class DatabaseNativeAuthModel:
    """Authentication performed by the database itself."""

    id = NATIVE_AUTH_MODEL_ID
    name = "Database Native"
    description = "Database native authentication"
    version = "1.0.0"
    min_core = "0.1.0"

    def create_credentials_source(self, container: DataSourceContainer) -> CredentialsSource:
        return _NativeCredentialsSource(container)


class AuthModelCatalog:
    """Collects auth model descriptors keyed by identifier."""

    def __init__(self, models: Iterable[AuthModelDescriptor] | None = None) -> None:
        self._models: dict[str, AuthModelDescriptor] = {}
        self.register_many(models or ())

    def register(self, model: AuthModelDescriptor) -> None:
        """Register an auth model; later registrations replace earlier ones."""

        if not getattr(model, "id", None):
            raise ValueError(f"Auth model '{getattr(model, 'name', model)!s}' is missing an id")
        self._models[model.id] = model

    def register_many(self, models: Iterable[AuthModelDescriptor]) -> None:
        for model in models:
            self.register(model)

    def lookup_auth_model(self, model_id: str) -> AuthModelDescriptor | None:
        return self._models.get(model_id)

    def list_models(self) -> list[AuthModelDescriptor]:
        """Return the known auth models."""

        return list(self._models.values())


def effective_auth_model_id(container: DataSourceContainer, default_model_id: str = NATIVE_AUTH_MODEL_ID) -> str:
    """Return the container's auth model id, or ``default_model_id`` when unset."""

    model_id = container.connection_configuration.auth_model_id
    return model_id or default_model_id


def resolve_auth_properties(
    session: WebSession | None,
    container: DataSourceContainer,
    registry: AuthModelRegistry,
    *,
    default_model_id: str = NATIVE_AUTH_MODEL_ID,
) -> tuple[AuthPropertyInfo, ...]:
    """List the credential fields a user must fill in for ``container``.

    An unknown model, or any failure while looking it up or enumerating its
    fields, yields an empty tuple; the listing is advisory and must not break
    other reads of the connection.
    """

    model_id: str | None = None
    try:
        model_id = effective_auth_model_id(container, default_model_id)
        model = registry.lookup_auth_model(model_id)
        if model is None:
            LOG.debug("Auth model not registered", extra={"auth_model": model_id, "connection": container.id})
            return ()
        source = model.create_credentials_source(container)
        return tuple(AuthPropertyInfo.from_property(session, prop, source) for prop in source.properties())
    except Exception:
        LOG.warning(
            "Failed to resolve auth properties",
            exc_info=True,
            extra={"auth_model": model_id, "connection": container.id},
        )
        return ()


__all__ = [
    "AuthModelCatalog",
    "AuthModelDescriptor",
    "AuthModelRegistry",
    "AuthPropertyInfo",
    "CredentialProperty",
    "CredentialsSource",
    "DatabaseNativeAuthModel",
    "NATIVE_AUTH_MODEL_ID",
    "effective_auth_model_id",
    "resolve_auth_properties",
]
