"""Feature tags summarizing a connection's current state."""

from __future__ import annotations

from typing import Protocol


class FeatureState(Protocol):
    """State flags a feature tag can be derived from."""

    @property
    def connected(self) -> bool: ...

    @property
    def hidden(self) -> bool: ...

    @property
    def temporary(self) -> bool: ...

    @property
    def read_only(self) -> bool: ...

    @property
    def provided(self) -> bool: ...


# (state attribute, tag) in evaluation order.
FEATURE_TAGS: tuple[tuple[str, str], ...] = (
    ("connected", "connected"),
    ("hidden", "virtual"),
    ("temporary", "temporary"),
    ("read_only", "readOnly"),
    ("provided", "provided"),
)


def derive_features(state: FeatureState) -> frozenset[str]:
    """Return the tags whose state flag is currently set."""

    return frozenset(tag for attribute, tag in FEATURE_TAGS if getattr(state, attribute))


__all__ = ["FEATURE_TAGS", "FeatureState", "derive_features"]
