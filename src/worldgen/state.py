"""World grid state: tiles and the grid that owns them."""

from typing import Iterator

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from .exceptions import QuestAlreadyAssignedError
from .terrain_types import Category
from .types import Position, Quest


class Tile(BaseModel):
    """Mutable tile state.

    Tiles are written in place by each pipeline stage. Use the mutator
    methods rather than setting fields directly so that the landmark and
    quest flags stay in sync with their payloads.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    category: str = Category.GRASS.value
    discovered: bool = False
    is_landmark: bool = False
    landmark_kind: str | None = None
    has_merchant: bool = False
    has_quest: bool = False
    quest: Quest | None = None

    @model_validator(mode="after")
    def _check_flags(self) -> "Tile":
        if self.is_landmark != (self.landmark_kind is not None):
            raise ValueError("is_landmark must match presence of landmark_kind")
        if self.has_quest != (self.quest is not None):
            raise ValueError("has_quest must match presence of quest")
        return self

    def mark_landmark(self, kind: str) -> None:
        """Mark tile as a landmark, replacing any previous kind."""
        self.landmark_kind = kind
        self.is_landmark = True

    def add_merchant(self) -> None:
        self.has_merchant = True

    def attach_quest(self, quest: Quest) -> None:
        """Attach a quest to this tile.

        Raises:
            QuestAlreadyAssignedError: If the tile already holds a quest.
        """
        if self.quest is not None:
            raise QuestAlreadyAssignedError(
                f"Tile at {quest.location} already has a {self.quest.kind.value} quest"
            )
        self.quest = quest
        self.has_quest = True


class WorldGrid(BaseModel):
    """
    Owned 2D array of tiles indexed ``tiles[x][y]``.

    ``x`` is the row in ``[0, height)`` and ``y`` the column in
    ``[0, width)``. Tiles hold no reference back to the grid.
    """

    width: int
    height: int
    tiles: list[list[Tile]]

    @model_validator(mode="after")
    def _check_shape(self) -> "WorldGrid":
        if len(self.tiles) != self.height or any(
            len(row) != self.width for row in self.tiles
        ):
            raise ValueError(
                f"Tile rows don't match grid dimensions {self.width}x{self.height}"
            )
        return self

    @classmethod
    def create(
        cls, width: int, height: int, category: str = Category.GRASS.value
    ) -> "WorldGrid":
        """Create a grid filled with fresh tiles of one category."""
        tiles = [[Tile(category=category) for _ in range(width)] for _ in range(height)]
        return cls(width=width, height=height, tiles=tiles)

    @property
    def total_tiles(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if (row, column) is within grid bounds."""
        return 0 <= x < self.height and 0 <= y < self.width

    def get_tile(self, x: int, y: int) -> Tile:
        """Get tile at (row, column).

        Raises:
            IndexError: If the coordinate is outside the grid.
        """
        if not self.in_bounds(x, y):
            raise IndexError(
                f"Position {Position(x=x, y=y)} outside {self.width}x{self.height} grid"
            )
        return self.tiles[x][y]

    def iter_tiles(self) -> Iterator[tuple[int, int, Tile]]:
        """Yield (x, y, tile) in row-major order."""
        for x, row in enumerate(self.tiles):
            for y, tile in enumerate(row):
                yield x, y, tile

    def category_mask(self, category: str) -> NDArray[np.bool_]:
        """Boolean mask of shape (height, width) where tiles have category."""
        mask = np.zeros((self.height, self.width), dtype=bool)
        for x, y, tile in self.iter_tiles():
            if tile.category == category:
                mask[x, y] = True
        return mask

    def count(self, category: str) -> int:
        """Number of tiles with the given category."""
        return sum(1 for _, _, tile in self.iter_tiles() if tile.category == category)

    def quests(self) -> list[Quest]:
        """All quests on the grid in row-major order."""
        return [tile.quest for _, _, tile in self.iter_tiles() if tile.quest is not None]
