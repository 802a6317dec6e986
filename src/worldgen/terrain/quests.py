"""Quest assignment: per-tile rules evaluated in priority order."""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from ..config import QuestConfig
from ..state import Tile, WorldGrid
from ..terrain_types import Category, LandmarkKind
from ..types import NEIGHBOR_DELTAS, Position, Quest, QuestKind, Rewards

logger = logging.getLogger(__name__)

# Grid size the location wrap was observed with
WRAP_GRID_SIZE = 50
WRAP_OFFSET = 25

DELIVERY_REWARDS = Rewards(experience=100, gold=50)
EXPLORATION_REWARDS = Rewards(experience=150, items=("Rare Gem",))
GATHERING_REWARDS = Rewards(experience=75, items=("Healing Potion",))
SEARCH_REWARDS = Rewards(experience=50, items=("Fishing Rod",))

# 8-neighbour kernel with the centre excluded
_NEIGHBOR_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int32)


def is_near_water(grid: WorldGrid, x: int, y: int) -> bool:
    """Whether any of the 8 surrounding tiles is water.

    Neighbours outside the grid count as dry.
    """
    for dx, dy in NEIGHBOR_DELTAS:
        nx, ny = x + dx, y + dy
        if grid.in_bounds(nx, ny) and grid.get_tile(nx, ny).category == Category.WATER.value:
            return True
    return False


def near_water_mask(grid: WorldGrid) -> NDArray[np.bool_]:
    """is_near_water for every tile at once, shape (height, width)."""
    water = grid.category_mask(Category.WATER.value).astype(np.int32)
    if water.size == 0:
        return water.astype(bool)
    neighbors = ndimage.convolve(water, _NEIGHBOR_KERNEL, mode="constant", cval=0)
    return neighbors > 0


def wrap_quest_location(x: int, y: int) -> Position:
    """Shift coordinates on the edge of a 50x50 window by half its size.

    Only meaningful for 50x50 grids: values <= 0 move up by 25 and values
    >= 49 move down by 25; everything else is unchanged.
    """

    def wrap(c: int) -> int:
        if c <= 0:
            return c + WRAP_OFFSET
        if c >= WRAP_GRID_SIZE - 1:
            return c - WRAP_OFFSET
        return c

    return Position(x=wrap(x), y=wrap(y))


def _quest_location(grid: WorldGrid, x: int, y: int, config: QuestConfig) -> Position:
    if (
        config.wrap_quest_locations
        and grid.width == WRAP_GRID_SIZE
        and grid.height == WRAP_GRID_SIZE
    ):
        return wrap_quest_location(x, y)
    return Position(x=x, y=y)


def quest_for_tile(
    tile: Tile,
    location: Position,
    near_water: bool,
    rng: np.random.Generator,
    config: QuestConfig,
) -> Quest | None:
    """Evaluate the quest rules for one tile; the first match wins.

    A random draw is only made for forest tiles that reach the gathering
    rule.
    """
    if tile.has_merchant:
        return Quest(
            description=f"Deliver a parcel to the merchant at {location}",
            location=location,
            kind=QuestKind.DELIVERY,
            rewards=DELIVERY_REWARDS,
        )
    if tile.is_landmark and tile.landmark_kind == LandmarkKind.CAVE.value:
        return Quest(
            description=f"Explore the cave at {location}",
            location=location,
            kind=QuestKind.EXPLORATION,
            rewards=EXPLORATION_REWARDS,
        )
    if tile.category == Category.FOREST.value:
        if rng.random() < config.forest_quest_probability:
            return Quest(
                description=f"Gather medicinal herbs in the forest at {location}",
                location=location,
                kind=QuestKind.GATHERING,
                rewards=GATHERING_REWARDS,
            )
        return None
    if tile.category == Category.GRASS.value and near_water:
        return Quest(
            description=f"Search the shoreline near {location} for a lost fishing rod",
            location=location,
            kind=QuestKind.SEARCH,
            rewards=SEARCH_REWARDS,
        )
    return None


def assign_quests(
    grid: WorldGrid,
    rng: np.random.Generator,
    config: QuestConfig | None = None,
) -> list[Quest]:
    """Attach at most one quest to every tile, row-major.

    Tiles that already carry a quest are left alone.

    Returns:
        Newly attached quests in row-major order.
    """
    config = config or QuestConfig()
    near_water = near_water_mask(grid)
    quests: list[Quest] = []

    for x, y, tile in grid.iter_tiles():
        if tile.has_quest:
            continue
        location = _quest_location(grid, x, y, config)
        quest = quest_for_tile(tile, location, bool(near_water[x, y]), rng, config)
        if quest is not None:
            tile.attach_quest(quest)
            quests.append(quest)

    by_kind = {kind.value: 0 for kind in QuestKind}
    for quest in quests:
        by_kind[quest.kind.value] += 1
    logger.info(f"Assigned {len(quests)} quests: {by_kind}")
    return quests
