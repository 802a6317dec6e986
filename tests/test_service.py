"""Tests for the world generation service."""

import json

import pytest
from pydantic import ValidationError

from worldgen.biome import StaticConfigSource
from worldgen.config import GeneratorConfig
from worldgen.exceptions import (
    GenerationError,
    PersistenceError,
    SnapshotNotFoundError,
)
from worldgen.persistence import InMemoryWorldStore, WorldSnapshot
from worldgen.service import GenerateRequest, WorldService


class BrokenStore:
    """Store whose writes always fail."""

    def __init__(self, error: Exception):
        self.error = error

    def save(self, snapshot: WorldSnapshot) -> None:
        raise self.error

    def get_by_player(self, player_id: str) -> WorldSnapshot | None:
        return None

    def get_by_session(self, session_id: str) -> WorldSnapshot | None:
        return None


def _request(**overrides) -> GenerateRequest:
    data = {"player": "alice", "session_id": "s1", "width": 12, "height": 10, "seed": 7}
    data.update(overrides)
    return GenerateRequest(**data)


class TestGenerateRequest:
    """Tests for request parsing."""

    def test_camel_case_fields(self) -> None:
        request = GenerateRequest.model_validate(
            {
                "player": {"id": "p1", "level": 4},
                "sessionId": 42,
                "imaginaryWorld": True,
                "landmarkPercentage": 0.1,
            }
        )
        assert request.session_id == "42"
        assert request.imaginary_world is True
        assert request.landmark_percentage == 0.1
        assert request.player_id == "p1"
        assert request.player_data == {"id": "p1", "level": 4}

    def test_string_player(self) -> None:
        request = _request()
        assert request.player_id == "alice"
        assert request.player_data == {"id": "alice"}

    def test_player_id_fallback_keys(self) -> None:
        request = _request(player={"username": "bob"})
        assert request.player_id == "bob"

    def test_player_without_id(self) -> None:
        with pytest.raises(ValidationError):
            _request(player={"level": 3})

    def test_percentage_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            _request(landmark_percentage=1.5)


class TestGenerate:
    """Tests for WorldService.generate."""

    def test_basic_world(self) -> None:
        store = InMemoryWorldStore()
        response = WorldService(store).generate(_request())

        assert response.persisted is True
        assert response.message == "World generated and saved successfully"
        assert response.terrain.width == 12
        assert response.terrain.height == 10
        assert response.used_default_config is False
        assert response.quest_count == len(response.terrain.quests())
        assert store.get_by_session("s1").world_grid == response.terrain

    def test_default_dimensions_from_config(self) -> None:
        config = GeneratorConfig(default_width=8, default_height=6)
        service = WorldService(InMemoryWorldStore(), config=config)
        response = service.generate(_request(width=None, height=None))
        assert (response.terrain.width, response.terrain.height) == (8, 6)

    def test_same_seed_same_world(self) -> None:
        first = WorldService(InMemoryWorldStore()).generate(_request())
        second = WorldService(InMemoryWorldStore()).generate(_request())
        assert first.terrain == second.terrain

    def test_imaginary_world_uses_biome(self) -> None:
        biome = {
            "mapSize": {"width": 15, "height": 9},
            "terrain": {"grass": 60, "forest": 40},
            "landmarks": {"caves": [{"position": [2, 3], "type": "cave"}]},
        }
        source = StaticConfigSource(json.dumps(biome))
        service = WorldService(InMemoryWorldStore(), config_source=source)
        response = service.generate(_request(imaginary_world=True))

        assert response.used_default_config is False
        assert (response.terrain.width, response.terrain.height) == (15, 9)
        tile = response.terrain.get_tile(2, 3)
        assert tile.is_landmark
        assert tile.landmark_kind == "cave"

    def test_invalid_biome_falls_back(self) -> None:
        source = StaticConfigSource("I could not think of a world, sorry")
        service = WorldService(InMemoryWorldStore(), config_source=source)
        response = service.generate(_request(imaginary_world=True))

        assert response.used_default_config is True
        assert (response.terrain.width, response.terrain.height) == (50, 50)
        assert response.terrain.get_tile(25, 25).landmark_kind == "hidden_core"

    def test_imaginary_world_without_source(self) -> None:
        service = WorldService(InMemoryWorldStore())
        response = service.generate(_request(imaginary_world=True))
        assert response.used_default_config is True

    def test_generation_failure_persists_nothing(self) -> None:
        store = InMemoryWorldStore()
        with pytest.raises(GenerationError):
            WorldService(store).generate(_request(width=0))
        assert len(store) == 0

    def test_oversize_request_rejected(self) -> None:
        store = InMemoryWorldStore()
        with pytest.raises(GenerationError, match="tile limit"):
            WorldService(store).generate(_request(width=100000, height=100000))
        assert len(store) == 0

    def test_oversize_biome_falls_back(self) -> None:
        source = StaticConfigSource(
            json.dumps({"mapSize": {"width": 100000, "height": 100000}})
        )
        service = WorldService(InMemoryWorldStore(), config_source=source)
        response = service.generate(_request(imaginary_world=True))
        assert response.used_default_config is True
        assert (response.terrain.width, response.terrain.height) == (50, 50)

    def test_non_finite_coverage_falls_back(self) -> None:
        source = StaticConfigSource('{"mapSize": [12, 8], "terrain": {"grass": NaN}}')
        service = WorldService(InMemoryWorldStore(), config_source=source)
        response = service.generate(_request(imaginary_world=True))
        assert response.used_default_config is True
        assert response.persisted is True

    def test_persistence_failure_returns_world(self) -> None:
        service = WorldService(BrokenStore(OSError("disk full")))
        response = service.generate(_request())
        assert response.persisted is False
        assert response.message == "World generated but could not be saved"
        assert response.terrain.total_tiles == 120

    def test_persistence_failure_raises_when_configured(self) -> None:
        config = GeneratorConfig(return_on_persistence_failure=False)
        service = WorldService(BrokenStore(PersistenceError("down")), config=config)
        with pytest.raises(PersistenceError):
            service.generate(_request())

    def test_unexpected_store_error_is_wrapped(self) -> None:
        config = GeneratorConfig(return_on_persistence_failure=False)
        service = WorldService(BrokenStore(RuntimeError("boom")), config=config)
        with pytest.raises(PersistenceError, match="boom"):
            service.generate(_request())

    def test_response_serializes_camel_case(self) -> None:
        response = WorldService(InMemoryWorldStore()).generate(_request())
        data = json.loads(response.model_dump_json(by_alias=True))
        assert {"message", "terrain", "persisted", "usedDefaultConfig", "questCount"} <= set(data)


class TestLoad:
    """Tests for WorldService.load."""

    def test_load_by_session_and_player(self) -> None:
        service = WorldService(InMemoryWorldStore())
        response = service.generate(_request())
        assert service.load(session_id="s1").world_grid == response.terrain
        assert service.load(player_id="alice").session_id == "s1"

    def test_session_takes_priority(self) -> None:
        service = WorldService(InMemoryWorldStore())
        service.generate(_request(player="alice", session_id="s1"))
        service.generate(_request(player="bob", session_id="s2"))
        assert service.load(player_id="alice", session_id="s2").player_id == "bob"

    def test_not_found(self) -> None:
        service = WorldService(InMemoryWorldStore())
        with pytest.raises(SnapshotNotFoundError):
            service.load(player_id="ghost")

    def test_requires_a_key(self) -> None:
        with pytest.raises(ValueError):
            WorldService(InMemoryWorldStore()).load()
