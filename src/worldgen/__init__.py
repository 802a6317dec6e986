"""Procedural biome world generation."""

from .biome import (
    BiomeConfig,
    BiomeResolution,
    ConfigSource,
    FileConfigSource,
    LandmarkEntry,
    StaticConfigSource,
    default_biome_config,
    fetch_biome_config,
    parse_biome_config,
    resolve_biome_config,
)
from .config import GeneratorConfig, load_config
from .exceptions import (
    ConfigurationInvalidError,
    GenerationError,
    PersistenceError,
    QuestAlreadyAssignedError,
    SnapshotNotFoundError,
    WorldGenError,
)
from .persistence import (
    InMemoryWorldStore,
    JsonFileWorldStore,
    WorldSnapshot,
    WorldStore,
)
from .service import GenerateRequest, GenerateResponse, WorldService
from .state import Tile, WorldGrid
from .types import Position, Quest, QuestKind, Rewards

__all__ = [
    # Types
    "Position",
    "Quest",
    "QuestKind",
    "Rewards",
    # State
    "Tile",
    "WorldGrid",
    # Biome configuration
    "BiomeConfig",
    "BiomeResolution",
    "ConfigSource",
    "FileConfigSource",
    "LandmarkEntry",
    "StaticConfigSource",
    "default_biome_config",
    "fetch_biome_config",
    "parse_biome_config",
    "resolve_biome_config",
    # Generator configuration
    "GeneratorConfig",
    "load_config",
    # Persistence
    "InMemoryWorldStore",
    "JsonFileWorldStore",
    "WorldSnapshot",
    "WorldStore",
    # Service
    "GenerateRequest",
    "GenerateResponse",
    "WorldService",
    # Exceptions
    "WorldGenError",
    "ConfigurationInvalidError",
    "GenerationError",
    "PersistenceError",
    "QuestAlreadyAssignedError",
    "SnapshotNotFoundError",
]
