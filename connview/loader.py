"""Discovery of auth models published through entry points."""

from __future__ import annotations

import importlib.metadata as metadata
import inspect
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from connview import __version__ as CORE_VERSION

from .auth import AuthModelCatalog, AuthModelDescriptor, DatabaseNativeAuthModel
from .config import AppConfig

LOG = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "connview.auth_models"

BUILTIN_AUTH_MODELS: tuple[type[AuthModelDescriptor], ...] = (DatabaseNativeAuthModel,)


class AuthModelError(RuntimeError):
    """Base error for auth model loading failures."""


class AuthModelCompatibilityError(AuthModelError):
    """Raised when an auth model does not satisfy the minimum core version."""


def _parse_version(value: str) -> tuple[int, int, int]:
    """Parse a dotted string into a comparable tuple."""

    parts = value.split(".")
    ints: list[int] = []
    for chunk in parts[:3]:
        try:
            ints.append(int(chunk))
        except ValueError:
            ints.append(0)
    while len(ints) < 3:
        ints.append(0)
    return ints[0], ints[1], ints[2]


@dataclass(slots=True, frozen=True)
class DiscoveredAuthModel:
    """Auth model found through an entry point or the built-in list."""

    id: str
    version: str
    min_core: str
    entry_point: metadata.EntryPoint
    descriptor: AuthModelDescriptor


class AuthModelLoader:
    """Discovers auth models and registers the enabled ones in a catalog."""

    def __init__(
        self,
        *,
        core_version: str = CORE_VERSION,
        entry_point_group: str = ENTRY_POINT_GROUP,
        enabled_models: Iterable[str] | None = None,
        disabled_models: Iterable[str] | None = None,
        builtin_models: Iterable[AuthModelDescriptor | type[AuthModelDescriptor]] | None = None,
    ) -> None:
        self._core_version = core_version
        self._entry_point_group = entry_point_group
        self._enabled: set[str] | None = set(enabled_models) if enabled_models is not None else None
        self._disabled: set[str] = set(disabled_models or ())
        self._builtin_models = list(BUILTIN_AUTH_MODELS if builtin_models is None else builtin_models)
        self._discovered: list[DiscoveredAuthModel] = []
        self._loaded: dict[str, DiscoveredAuthModel] = {}

    def discover(self) -> list[DiscoveredAuthModel]:
        """Enumerate auth model descriptors; entry points win over built-ins."""

        eps = metadata.entry_points()
        group = eps.select(group=self._entry_point_group)
        discovered: dict[str, DiscoveredAuthModel] = {}
        for entry_point in sorted(group, key=lambda ep: ep.name):
            try:
                descriptor = self._load_descriptor(entry_point)
            except AuthModelError:
                LOG.exception("Skipping auth model", extra={"entry_point": entry_point.name})
                continue
            discovered[descriptor.id] = self._describe(descriptor, entry_point)
        for builtin in self._iter_builtin_models():
            discovered.setdefault(builtin.id, builtin)
        self._discovered = list(discovered.values())
        return self._discovered

    def load(self, catalog: AuthModelCatalog | None = None) -> AuthModelCatalog:
        """Register enabled, compatible auth models into ``catalog``."""

        if not self._discovered:
            self.discover()
        catalog = catalog if catalog is not None else AuthModelCatalog()
        for model in self._discovered:
            if not self._is_enabled(model.id):
                LOG.debug("Skipping disabled auth model", extra={"auth_model": model.id})
                continue
            try:
                self._ensure_compatible(model)
            except AuthModelCompatibilityError as exc:
                LOG.warning(
                    "Skipping auth model due to min_core mismatch",
                    extra={"auth_model": model.id, "min_core": model.min_core},
                )
                LOG.debug(str(exc))
                continue
            catalog.register(model.descriptor)
            self._loaded[model.id] = model
        return catalog

    @property
    def loaded(self) -> Sequence[DiscoveredAuthModel]:
        """Return registered auth models."""

        return tuple(self._loaded.values())

    def _is_enabled(self, model_id: str) -> bool:
        if self._enabled is not None:
            return model_id in self._enabled
        return model_id not in self._disabled

    def _ensure_compatible(self, model: DiscoveredAuthModel) -> None:
        core = _parse_version(self._core_version)
        minimum = _parse_version(model.min_core)
        if core < minimum:
            raise AuthModelCompatibilityError(
                f"Auth model '{model.id}' requires core>={model.min_core}, found {self._core_version}"
            )

    def _load_descriptor(self, entry_point: metadata.EntryPoint) -> AuthModelDescriptor:
        try:
            obj = entry_point.load()
            descriptor = obj() if inspect.isclass(obj) else obj
        except Exception as exc:
            raise AuthModelError(f"Failed to load auth model '{entry_point.name}'") from exc
        if not getattr(descriptor, "id", None):
            raise AuthModelError(f"Auth model '{entry_point.name}' does not declare an id")
        return descriptor

    def _describe(self, descriptor: AuthModelDescriptor, entry_point: metadata.EntryPoint) -> DiscoveredAuthModel:
        return DiscoveredAuthModel(
            id=descriptor.id,
            version=getattr(descriptor, "version", "0.0.0"),
            min_core=getattr(descriptor, "min_core", "0.0.0"),
            entry_point=entry_point,
            descriptor=descriptor,
        )

    def _iter_builtin_models(self) -> list[DiscoveredAuthModel]:
        builtins: list[DiscoveredAuthModel] = []
        for model in self._builtin_models:
            descriptor = model() if inspect.isclass(model) else model
            entry_point = metadata.EntryPoint(
                name=descriptor.id,
                value=f"{descriptor.__class__.__module__}:{descriptor.__class__.__qualname__}",
                group=self._entry_point_group,
            )
            builtins.append(self._describe(descriptor, entry_point))
        return builtins


def load_auth_models(config: AppConfig) -> AuthModelCatalog:
    """Build a catalog honouring the config's auth model flags."""

    allowlist, disabled = config.auth_model_filters()
    loader = AuthModelLoader(enabled_models=allowlist, disabled_models=disabled)
    return loader.load()


__all__ = [
    "AuthModelCompatibilityError",
    "AuthModelError",
    "AuthModelLoader",
    "BUILTIN_AUTH_MODELS",
    "DiscoveredAuthModel",
    "ENTRY_POINT_GROUP",
    "load_auth_models",
]
