"""Connection projections and auth requirements for remote clients."""

from __future__ import annotations

__version__ = "0.1.0"

from .auth import (
    AuthModelCatalog,
    AuthModelDescriptor,
    AuthModelRegistry,
    AuthPropertyInfo,
    CredentialProperty,
    CredentialsSource,
    DatabaseNativeAuthModel,
    resolve_auth_properties,
)
from .config import NATIVE_AUTH_MODEL_ID, AppConfig, load_config
from .errors import ErrorSnapshot
from .features import derive_features
from .fields import CONNECTION_INFO_FIELDS, serialize_connection_info
from .loader import AuthModelLoader, load_auth_models
from .models import DataSource, DataSourceContainer, DriverInfo, build_data_sources
from .projection import ConnectionInfo
from .session import ConnectionEvent, ConnectionEventKind, ConnectionNotFoundError, WebSession

__all__ = [
    "AppConfig",
    "AuthModelCatalog",
    "AuthModelDescriptor",
    "AuthModelLoader",
    "AuthModelRegistry",
    "AuthPropertyInfo",
    "CONNECTION_INFO_FIELDS",
    "ConnectionEvent",
    "ConnectionEventKind",
    "ConnectionInfo",
    "ConnectionNotFoundError",
    "CredentialProperty",
    "CredentialsSource",
    "DataSource",
    "DataSourceContainer",
    "DatabaseNativeAuthModel",
    "DriverInfo",
    "ErrorSnapshot",
    "NATIVE_AUTH_MODEL_ID",
    "WebSession",
    "__version__",
    "build_data_sources",
    "derive_features",
    "load_auth_models",
    "load_config",
    "resolve_auth_properties",
    "serialize_connection_info",
]
