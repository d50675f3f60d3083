"""Pytest configuration and fixtures for strata tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from strata import recipes
from strata.context import reset_context
from strata.logger import reset_logger
from strata.recipes import RecipeRegistry
from strata.styles import StyleChain
from strata.world import FontMetrics, StaticWorld


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Reset the global state every test starts from."""
    recipes.clear_registrations()
    reset_logger()
    reset_context()
    yield
    recipes.clear_registrations()
    reset_logger()
    reset_context()


@pytest.fixture
def world() -> StaticWorld:
    """A world with a generic serif and one named family."""
    return StaticWorld([FontMetrics("serif"), FontMetrics("Libertinus Serif", cap_height=650)])


@pytest.fixture
def registry() -> RecipeRegistry:
    """A fresh, empty recipe registry."""
    return RecipeRegistry()


@pytest.fixture
def root() -> StyleChain:
    """An empty style chain."""
    return StyleChain()
