"""Terrain classification: elevation thresholds, then a coverage-weighted pool."""

import logging
import math
from collections import Counter
from typing import Mapping, Protocol

import numpy as np

from ..state import WorldGrid
from ..terrain_types import Category

logger = logging.getLogger(__name__)


class ElevationSource(Protocol):
    """Anything that can report elevation for a grid coordinate."""

    def elevation(self, x: int, y: int) -> float: ...


def compute_budgets(coverage: Mapping[str, float], total_tiles: int) -> dict[str, int]:
    """Tile budget per category: floor(coverage% * total_tiles).

    Returns an empty mapping when there are no tiles.
    """
    if total_tiles <= 0:
        return {}
    return {
        category: math.floor(percent / 100 * total_tiles)
        for category, percent in coverage.items()
    }


class TerrainClassifier:
    """Maps elevation to a terrain category.

    Elevation outside the thresholds forces water or mountain. Everything in
    between draws uniformly from categories that still have budget left and
    spends one unit of it. Once every budget is spent the tile becomes grass.

    Args:
        coverage: Category name -> coverage percent.
        total_tiles: Number of tiles in the grid being classified.
        rng: Random number generator for pool selection.
        water_threshold: Elevation below this is water.
        mountain_threshold: Elevation above this is mountain.
    """

    def __init__(
        self,
        coverage: Mapping[str, float],
        total_tiles: int,
        rng: np.random.Generator,
        water_threshold: float = -0.2,
        mountain_threshold: float = 0.5,
    ):
        self.rng = rng
        self.water_threshold = water_threshold
        self.mountain_threshold = mountain_threshold
        self.budgets = compute_budgets(coverage, total_tiles)
        self.remaining = dict(self.budgets)

        # Tiles assigned through the pool, per category
        self.pool_counts: Counter[str] = Counter()
        self.default_count = 0

    def classify(self, elevation: float) -> str:
        """Classify one tile by its elevation."""
        if elevation < self.water_threshold:
            return Category.WATER.value
        if elevation > self.mountain_threshold:
            return Category.MOUNTAIN.value
        return self._draw_from_pool()

    def _draw_from_pool(self) -> str:
        available = [c for c, left in self.remaining.items() if left > 0]
        if not available:
            self.default_count += 1
            return Category.GRASS.value

        category = available[int(self.rng.integers(len(available)))]
        self.remaining[category] -= 1
        self.pool_counts[category] += 1
        return category


def classify_grid(
    grid: WorldGrid,
    noise: ElevationSource,
    classifier: TerrainClassifier,
) -> None:
    """Assign a category to every tile of the grid in row-major order."""
    for x, y, tile in grid.iter_tiles():
        tile.category = classifier.classify(noise.elevation(x, y))

    if classifier.default_count:
        logger.debug(
            f"Coverage pool exhausted; {classifier.default_count} tiles defaulted to grass"
        )
