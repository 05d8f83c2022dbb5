"""Tests for feature tag derivation."""

from __future__ import annotations

import itertools
from dataclasses import dataclass

import pytest

from connview.features import FEATURE_TAGS, derive_features


@dataclass(frozen=True)
class _State:
    connected: bool = False
    hidden: bool = False
    temporary: bool = False
    read_only: bool = False
    provided: bool = False


@pytest.mark.parametrize("flags", list(itertools.product((False, True), repeat=5)))
def test_features_match_set_flags(flags: tuple[bool, ...]) -> None:
    state = _State(*flags)
    expected = {tag for (_, tag), flag in zip(FEATURE_TAGS, flags) if flag}

    assert derive_features(state) == expected


def test_mixed_state_scenario() -> None:
    state = _State(connected=True, hidden=False, temporary=True, read_only=True, provided=False)

    assert derive_features(state) == {"connected", "temporary", "readOnly"}


def test_hidden_connection_is_tagged_virtual() -> None:
    assert derive_features(_State(hidden=True)) == {"virtual"}


def test_no_flags_yield_no_tags() -> None:
    assert derive_features(_State()) == frozenset()
