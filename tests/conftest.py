"""Shared test fixtures for worldgen tests."""

import numpy as np
import pytest

from worldgen.state import WorldGrid


class FixedElevation:
    """Elevation source returning a constant, with optional per-tile overrides."""

    def __init__(self, value: float = 0.0, overrides: dict | None = None):
        self.value = value
        self.overrides = overrides or {}

    def elevation(self, x: int, y: int) -> float:
        return self.overrides.get((x, y), self.value)


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def flat_noise() -> FixedElevation:
    """Elevation 0 everywhere: never water or mountain."""
    return FixedElevation(0.0)


@pytest.fixture
def grass_grid() -> WorldGrid:
    """10x10 grid of plain grass tiles."""
    return WorldGrid.create(10, 10)


@pytest.fixture
def pond_grid() -> WorldGrid:
    """10x10 grass grid with a single water tile at (5, 5)."""
    grid = WorldGrid.create(10, 10)
    grid.get_tile(5, 5).category = "water"
    return grid


@pytest.fixture
def water_grid() -> WorldGrid:
    """5x5 grid that is entirely water."""
    return WorldGrid.create(5, 5, category="water")


@pytest.fixture
def make_elevation():
    """Factory for FixedElevation sources."""
    return FixedElevation
