"""Tests for tile and grid state."""

import pytest
from pydantic import ValidationError

from worldgen.exceptions import QuestAlreadyAssignedError
from worldgen.state import Tile, WorldGrid
from worldgen.types import Position, Quest, QuestKind, Rewards


def _quest(x: int = 0, y: int = 0) -> Quest:
    return Quest(
        description="Deliver a parcel",
        location=Position(x=x, y=y),
        kind=QuestKind.DELIVERY,
        rewards=Rewards(experience=100, gold=50),
    )


class TestTile:
    """Tests for Tile."""

    def test_tile_defaults(self) -> None:
        """A fresh tile is undiscovered grass with nothing on it."""
        tile = Tile()
        assert tile.category == "grass"
        assert tile.discovered is False
        assert tile.is_landmark is False
        assert tile.landmark_kind is None
        assert tile.has_merchant is False
        assert tile.has_quest is False
        assert tile.quest is None

    def test_mark_landmark(self) -> None:
        tile = Tile()
        tile.mark_landmark("cave")
        assert tile.is_landmark is True
        assert tile.landmark_kind == "cave"

    def test_attach_quest(self) -> None:
        tile = Tile()
        quest = _quest()
        tile.attach_quest(quest)
        assert tile.has_quest is True
        assert tile.quest is quest

    def test_second_quest_rejected(self) -> None:
        """A tile holds at most one quest."""
        tile = Tile()
        tile.attach_quest(_quest())
        with pytest.raises(QuestAlreadyAssignedError):
            tile.attach_quest(_quest())

    def test_inconsistent_landmark_flags_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Tile(is_landmark=True)

    def test_inconsistent_quest_flags_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Tile(has_quest=False, quest=_quest())

    def test_camel_case_serialization(self) -> None:
        tile = Tile()
        tile.mark_landmark("village")
        data = tile.model_dump(by_alias=True)
        assert data["isLandmark"] is True
        assert data["landmarkKind"] == "village"
        assert data["hasMerchant"] is False
        assert data["hasQuest"] is False

    def test_parse_camel_case(self) -> None:
        tile = Tile.model_validate(
            {"category": "forest", "isLandmark": True, "landmarkKind": "cave"}
        )
        assert tile.landmark_kind == "cave"


class TestQuest:
    """Tests for the Quest value type."""

    def test_quest_immutable(self) -> None:
        quest = _quest()
        with pytest.raises(ValidationError):
            quest.description = "changed"  # type: ignore

    def test_optional_rewards(self) -> None:
        rewards = Rewards(experience=50, items=("Fishing Rod",))
        assert rewards.gold is None
        assert rewards.items == ("Fishing Rod",)


class TestWorldGrid:
    """Tests for WorldGrid."""

    def test_create_shape(self) -> None:
        """tiles is indexed [row][column]: height rows of width tiles."""
        grid = WorldGrid.create(7, 3)
        assert len(grid.tiles) == 3
        assert all(len(row) == 7 for row in grid.tiles)
        assert grid.total_tiles == 21

    def test_tiles_are_distinct(self) -> None:
        grid = WorldGrid.create(2, 2)
        grid.get_tile(0, 0).mark_landmark("cave")
        assert grid.get_tile(1, 1).is_landmark is False

    def test_in_bounds(self) -> None:
        grid = WorldGrid.create(7, 3)
        assert grid.in_bounds(2, 6)
        assert not grid.in_bounds(3, 0)
        assert not grid.in_bounds(0, 7)
        assert not grid.in_bounds(-1, 0)

    def test_get_tile_out_of_bounds(self) -> None:
        grid = WorldGrid.create(3, 3)
        with pytest.raises(IndexError):
            grid.get_tile(3, 0)

    def test_iter_row_major(self) -> None:
        grid = WorldGrid.create(2, 2)
        assert [(x, y) for x, y, _ in grid.iter_tiles()] == [
            (0, 0),
            (0, 1),
            (1, 0),
            (1, 1),
        ]

    def test_category_mask(self) -> None:
        grid = WorldGrid.create(4, 3)
        grid.get_tile(2, 1).category = "water"
        mask = grid.category_mask("water")
        assert mask.shape == (3, 4)
        assert mask.sum() == 1
        assert mask[2, 1]

    def test_shape_mismatch_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WorldGrid(width=2, height=2, tiles=[[Tile(), Tile()]])

    def test_empty_grid(self) -> None:
        grid = WorldGrid.create(0, 0)
        assert grid.total_tiles == 0
        assert list(grid.iter_tiles()) == []
