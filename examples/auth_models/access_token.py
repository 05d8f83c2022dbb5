"""Sample auth model implementing the descriptor contract for manual and automated tests."""

from __future__ import annotations

from typing import Any, Sequence

from connview.auth import CredentialProperty, CredentialsSource
from connview.models import DataSourceContainer


class _TokenCredentials:
    def __init__(self, container: DataSourceContainer) -> None:
        self._container = container

    def properties(self) -> Sequence[CredentialProperty]:
        return (
            CredentialProperty(
                id="token",
                display_name="Access token",
                description="Bearer token issued by the identity provider",
                required=True,
                secured=True,
            ),
        )

    def property_value(self, property_id: str) -> Any:
        if property_id == "token":
            return self._container.connection_configuration.user_password
        return None


class AccessTokenAuthModel:
    """Minimal descriptor used to validate the loader pipeline."""

    id = "access_token"
    name = "Access Token"
    description = "Authenticate with a pre-issued access token"
    version = "0.0.1"
    min_core = "0.1.0"

    def __init__(self) -> None:
        self.sources_created = 0

    def create_credentials_source(self, container: DataSourceContainer) -> CredentialsSource:
        self.sources_created += 1
        return _TokenCredentials(container)
