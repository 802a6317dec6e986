"""Landmark placement: configured landmarks, mandatory fallbacks, scatter."""

import logging
import math
import re
from typing import Mapping

import numpy as np

from ..biome import LandmarkEntry, iter_landmark_entries
from ..state import WorldGrid
from ..terrain_types import Category, LandmarkKind

logger = logging.getLogger(__name__)


# Label used when a configured landmark has no sub-type
DEFAULT_LANDMARK_LABELS: dict[str, str] = {
    "structures": "structure",
    "crashSites": "crash_site",
    "hiddenCore": "hidden_core",
}

BASIC_LANDMARK_KINDS: tuple[LandmarkKind, ...] = (
    LandmarkKind.VILLAGE,
    LandmarkKind.CAVE,
    LandmarkKind.TREASURE,
)


def default_label(kind: str) -> str:
    """Landmark kind label for entries without a sub-type.

    Unknown kinds fall back to their own name in snake_case.
    """
    if kind in DEFAULT_LANDMARK_LABELS:
        return DEFAULT_LANDMARK_LABELS[kind]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", kind).lower()


def place_landmarks(
    grid: WorldGrid,
    landmarks: Mapping[str, list[LandmarkEntry] | LandmarkEntry],
) -> int:
    """Embed configured landmarks into the grid.

    Entries outside the grid are skipped and logged.

    Args:
        grid: Grid to mutate.
        landmarks: Landmark kind -> entries (or a single entry).

    Returns:
        Number of landmarks placed.
    """
    placed = 0
    for kind, entry in iter_landmark_entries(landmarks):
        x, y = entry.position.x, entry.position.y
        if not grid.in_bounds(x, y):
            logger.warning(
                f"Skipping {kind} landmark at {entry.position}: "
                f"outside {grid.width}x{grid.height} grid"
            )
            continue
        grid.get_tile(x, y).mark_landmark(entry.type or default_label(kind))
        placed += 1
    return placed


def mandatory_positions(grid: WorldGrid) -> list[tuple[int, int, LandmarkKind]]:
    """Canonical (x, y, kind) landmark slots: corner, center, far corner."""
    return [
        (0, 0, LandmarkKind.VILLAGE),
        (grid.height // 2, grid.width // 2, LandmarkKind.CAVE),
        (grid.height - 1, grid.width - 1, LandmarkKind.TREASURE),
    ]


def place_mandatory_landmarks(grid: WorldGrid) -> None:
    """Force the canonical landmarks, overwriting whatever is there."""
    for x, y, kind in mandatory_positions(grid):
        if grid.in_bounds(x, y):
            grid.get_tile(x, y).mark_landmark(kind.value)


def scatter_landmarks(
    grid: WorldGrid,
    rng: np.random.Generator,
    percentage: float,
) -> int:
    """Scatter basic landmarks over dry, unmarked tiles.

    Picks floor(total_tiles * percentage) distinct tiles without replacement
    and gives each a random basic kind. Fewer are placed if not enough tiles
    are eligible.

    Returns:
        Number of landmarks placed.
    """
    if percentage < 0:
        raise ValueError(f"Landmark percentage must be non-negative, got {percentage}")

    target = math.floor(grid.total_tiles * percentage)
    if target == 0:
        return 0

    eligible = [
        (x, y)
        for x, y, tile in grid.iter_tiles()
        if tile.category != Category.WATER.value and not tile.is_landmark
    ]
    count = min(target, len(eligible))
    if count < target:
        logger.warning(
            f"Only {len(eligible)} tiles eligible for {target} scattered landmarks"
        )
    if count == 0:
        return 0

    chosen = rng.choice(len(eligible), size=count, replace=False)
    kinds = rng.integers(len(BASIC_LANDMARK_KINDS), size=count)
    for index, kind_index in zip(chosen, kinds):
        x, y = eligible[int(index)]
        grid.get_tile(x, y).mark_landmark(BASIC_LANDMARK_KINDS[int(kind_index)].value)
    return count
