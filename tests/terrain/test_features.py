"""Tests for merchant scatter."""

import numpy as np
import pytest

from worldgen.state import WorldGrid
from worldgen.terrain.features import default_merchant_count, scatter_merchants


def _merchants(grid: WorldGrid) -> list[tuple[int, int]]:
    return [(x, y) for x, y, t in grid.iter_tiles() if t.has_merchant]


class TestScatterMerchants:
    """Tests for scatter_merchants."""

    def test_zero_target(self, grass_grid: WorldGrid, rng: np.random.Generator) -> None:
        """A target of zero leaves every tile without a merchant."""
        assert scatter_merchants(grass_grid, rng, target_count=0) == 0
        assert _merchants(grass_grid) == []

    def test_places_exact_count(self, grass_grid: WorldGrid, rng: np.random.Generator) -> None:
        """Target count of distinct tiles get a merchant."""
        assert scatter_merchants(grass_grid, rng, target_count=7) == 7
        assert len(_merchants(grass_grid)) == 7

    def test_default_target(self, rng: np.random.Generator) -> None:
        """Default target is 5% of tiles."""
        grid = WorldGrid.create(50, 50)
        assert default_merchant_count(grid) == 125
        assert scatter_merchants(grid, rng) == 125

    def test_never_on_water(self, rng: np.random.Generator) -> None:
        """Merchants avoid water tiles."""
        grid = WorldGrid.create(10, 10)
        for y in range(10):
            for x in range(5):
                grid.get_tile(x, y).category = "water"
        scatter_merchants(grid, rng, target_count=50)
        assert all(grid.get_tile(x, y).category != "water" for x, y in _merchants(grid))
        assert len(_merchants(grid)) == 50

    def test_all_water_terminates(self, water_grid: WorldGrid, rng: np.random.Generator) -> None:
        """An all-water grid places nothing and returns."""
        assert scatter_merchants(water_grid, rng, target_count=10) == 0

    def test_target_above_eligible(self, rng: np.random.Generator, caplog) -> None:
        """Asking for more merchants than dry tiles fills every dry tile."""
        grid = WorldGrid.create(4, 4, category="water")
        grid.get_tile(0, 0).category = "grass"
        grid.get_tile(3, 3).category = "forest"
        with caplog.at_level("WARNING"):
            placed = scatter_merchants(grid, rng, target_count=5)
        assert placed == 2
        assert sorted(_merchants(grid)) == [(0, 0), (3, 3)]
        assert "eligible" in caplog.text

    def test_existing_merchants_not_counted(self, rng: np.random.Generator) -> None:
        """Tiles that already have a merchant are not eligible."""
        grid = WorldGrid.create(3, 1)
        grid.get_tile(0, 0).add_merchant()
        assert scatter_merchants(grid, rng, target_count=5) == 2
        assert len(_merchants(grid)) == 3

    def test_deterministic(self) -> None:
        """Same seed picks the same tiles."""
        a = WorldGrid.create(20, 20)
        b = WorldGrid.create(20, 20)
        scatter_merchants(a, np.random.default_rng(3), target_count=12)
        scatter_merchants(b, np.random.default_rng(3), target_count=12)
        assert _merchants(a) == _merchants(b)

    def test_negative_target(self, grass_grid: WorldGrid, rng: np.random.Generator) -> None:
        with pytest.raises(ValueError):
            scatter_merchants(grass_grid, rng, target_count=-1)
