"""Generation service: request handling, persistence hand-off, error split.

Callers get either a populated world or one of two errors:
GenerationError ("could not generate") or PersistenceError ("could not
persist"). Whether a persistence failure still returns the world is decided
by ``GeneratorConfig.return_on_persistence_failure``.
"""

from typing import Any

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .biome import ConfigSource, fetch_biome_config, resolve_biome_config
from .config import GeneratorConfig
from .exceptions import GenerationError, PersistenceError, SnapshotNotFoundError
from .persistence import WorldSnapshot, WorldStore
from .state import WorldGrid
from .terrain.generator import GenerationResult, generate_basic, generate_from_biome

logger = structlog.get_logger()

# Keys that identify a player in request player data, in priority order
_PLAYER_ID_KEYS = ("id", "playerId", "username", "name")


class GenerateRequest(BaseModel):
    """Parameters of one world generation request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    player: dict[str, Any] | str
    session_id: str
    width: int | None = None
    height: int | None = None
    landmark_percentage: float | None = Field(default=None, ge=0, le=1)
    imaginary_world: bool = False
    prompt: str | None = None
    seed: int | None = None

    @field_validator("session_id", mode="before")
    @classmethod
    def _session_id_as_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="after")
    def _player_has_id(self) -> "GenerateRequest":
        if isinstance(self.player, dict) and not any(
            key in self.player for key in _PLAYER_ID_KEYS
        ):
            raise ValueError(f"Player data needs one of {_PLAYER_ID_KEYS}")
        return self

    @property
    def player_id(self) -> str:
        """Player key: the string itself, or the ``id``/``username`` field."""
        if isinstance(self.player, str):
            return self.player
        key = next(k for k in _PLAYER_ID_KEYS if k in self.player)
        return str(self.player[key])

    @property
    def player_data(self) -> dict[str, Any]:
        if isinstance(self.player, str):
            return {"id": self.player}
        return dict(self.player)


class GenerateResponse(BaseModel):
    """Generated world returned to the caller."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    terrain: WorldGrid
    persisted: bool
    used_default_config: bool = False
    quest_count: int = 0


class WorldService:
    """Generates worlds for players and hands them to a store.

    Args:
        store: Snapshot store.
        config_source: Supplier of biome configurations for imaginary worlds.
            Without one, imaginary worlds use the built-in configuration.
        config: Generation configuration.
    """

    def __init__(
        self,
        store: WorldStore,
        config_source: ConfigSource | None = None,
        config: GeneratorConfig | None = None,
    ):
        self.store = store
        self.config_source = config_source
        self.config = config or GeneratorConfig()

    def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Generate, persist and describe a world.

        Raises:
            GenerationError: If the world could not be generated. Nothing is
                persisted in that case.
            PersistenceError: If storing failed and the configuration does
                not allow returning unsaved worlds.
        """
        log = logger.bind(player_id=request.player_id, session_id=request.session_id)
        rng = np.random.default_rng(request.seed)
        used_default = False
        width = request.width if request.width is not None else self.config.default_width
        height = (
            request.height if request.height is not None else self.config.default_height
        )

        try:
            if request.imaginary_world:
                if self.config_source is None:
                    resolution = resolve_biome_config(None, self.config.max_tiles)
                else:
                    resolution = fetch_biome_config(
                        self.config_source, request.prompt, self.config.max_tiles
                    )
                used_default = resolution.used_default
                result = generate_from_biome(rng, resolution.config, self.config)
            else:
                result = generate_basic(
                    rng,
                    width,
                    height,
                    self.config,
                    landmark_percentage=request.landmark_percentage,
                )
        except GenerationError as e:
            log.error("generation_failed", error=str(e))
            raise
        except Exception as e:
            log.error("generation_failed", error=str(e), error_type=type(e).__name__)
            raise GenerationError(f"World generation failed: {e}") from e

        log.info(
            "world_generated",
            mode=result.mode.value,
            width=result.grid.width,
            height=result.grid.height,
            quests=len(result.quests),
            used_default_config=used_default,
        )

        persisted = self._persist(request, result)
        message = (
            "World generated and saved successfully"
            if persisted
            else "World generated but could not be saved"
        )
        return GenerateResponse(
            message=message,
            terrain=result.grid,
            persisted=persisted,
            used_default_config=used_default,
            quest_count=len(result.quests),
        )

    def load(
        self, player_id: str | None = None, session_id: str | None = None
    ) -> WorldSnapshot:
        """Fetch a stored world by session id, or else by player id.

        Raises:
            ValueError: If neither key is given.
            SnapshotNotFoundError: If nothing is stored under the key.
            PersistenceError: If the store fails.
        """
        if session_id is not None:
            snapshot = self.store.get_by_session(session_id)
            key = f"session {session_id}"
        elif player_id is not None:
            snapshot = self.store.get_by_player(player_id)
            key = f"player {player_id}"
        else:
            raise ValueError("Either player_id or session_id is required")

        if snapshot is None:
            raise SnapshotNotFoundError(f"No world stored for {key}")
        return snapshot

    def _persist(
        self,
        request: GenerateRequest,
        result: GenerationResult,
    ) -> bool:
        snapshot = WorldSnapshot(
            player_id=request.player_id,
            player=request.player_data,
            session_id=request.session_id,
            world_grid=result.grid,
        )
        try:
            self._save(snapshot)
        except PersistenceError as e:
            logger.error(
                "persistence_failed",
                player_id=snapshot.player_id,
                session_id=snapshot.session_id,
                error=str(e),
            )
            if not self.config.return_on_persistence_failure:
                raise
            return False
        return True

    def _save(self, snapshot: WorldSnapshot) -> None:
        try:
            self.store.save(snapshot)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"World store failed: {e}") from e
