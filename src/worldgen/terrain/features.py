"""Secondary feature scatter: merchants."""

import logging
import math

import numpy as np

from ..state import WorldGrid
from ..terrain_types import Category

logger = logging.getLogger(__name__)


def default_merchant_count(grid: WorldGrid, density: float = 0.05) -> int:
    """Merchant target for a grid: floor(total_tiles * density)."""
    return math.floor(grid.total_tiles * density)


def scatter_merchants(
    grid: WorldGrid,
    rng: np.random.Generator,
    target_count: int | None = None,
    density: float = 0.05,
) -> int:
    """Place merchants on distinct dry tiles.

    Samples without replacement from the tiles that are not water and have
    no merchant yet, so it finishes even when the grid cannot satisfy the
    target (e.g. an all-water grid).

    Args:
        grid: Grid to mutate.
        rng: Random number generator.
        target_count: Merchants to place. Defaults to the density share.
        density: Fraction of tiles used when target_count is None.

    Returns:
        Number of merchants placed.

    Raises:
        ValueError: If target_count is negative.
    """
    if target_count is None:
        target_count = default_merchant_count(grid, density)
    if target_count < 0:
        raise ValueError(f"Merchant target must be non-negative, got {target_count}")
    if target_count == 0:
        return 0

    eligible = [
        (x, y)
        for x, y, tile in grid.iter_tiles()
        if tile.category != Category.WATER.value and not tile.has_merchant
    ]
    count = min(target_count, len(eligible))
    if count < target_count:
        logger.warning(
            f"Only {len(eligible)} tiles eligible for {target_count} merchants"
        )
    if count == 0:
        return 0

    for index in rng.choice(len(eligible), size=count, replace=False):
        x, y = eligible[int(index)]
        grid.get_tile(x, y).add_merchant()
    return count
