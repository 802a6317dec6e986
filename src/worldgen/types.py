"""Core value types for world generation."""

from enum import Enum

from pydantic import BaseModel


class Position(BaseModel, frozen=True):
    """Immutable grid coordinate.

    ``x`` indexes rows and ``y`` indexes columns, so a position maps to
    ``grid.tiles[x][y]``.
    """

    x: int
    y: int

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    def __repr__(self) -> str:
        return f"Position(x={self.x}, y={self.y})"


# Chebyshev neighbourhood: 4 cardinal + 4 diagonal offsets as (dx, dy)
NEIGHBOR_DELTAS: tuple[tuple[int, int], ...] = (
    (-1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
)


class QuestKind(str, Enum):
    """Kinds of quest a tile can offer."""

    DELIVERY = "delivery"
    EXPLORATION = "exploration"
    GATHERING = "gathering"
    SEARCH = "search"


class Rewards(BaseModel, frozen=True):
    """Quest rewards. Gold and items are optional."""

    experience: int
    gold: int | None = None
    items: tuple[str, ...] | None = None


class Quest(BaseModel, frozen=True):
    """Immutable quest bound to exactly one tile."""

    description: str
    location: Position
    kind: QuestKind
    rewards: Rewards
