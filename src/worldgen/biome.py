"""Biome configuration: model, JSON parsing and the built-in default.

A biome configuration normally comes from an external text-generation
service as JSON. Anything missing or malformed is replaced by the built-in
default so that generation always has something to work with.
"""

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, Iterable, Iterator, Mapping, Protocol

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .config import MAX_TILES
from .exceptions import ConfigurationInvalidError
from .types import Position

logger = structlog.get_logger()

# Coverage percent: finite and non-negative
Coverage = Annotated[float, Field(ge=0, allow_inf_nan=False)]


def _coerce_pair(value: Any, first: str, second: str) -> Any:
    """Accept ``[a, b]`` as shorthand for ``{first: a, second: b}``."""
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            raise ValueError(f"Expected a pair, got {len(value)} values")
        return {first: value[0], second: value[1]}
    return value


class MapSize(BaseModel, frozen=True):
    """Grid dimensions in tiles."""

    width: int = Field(ge=0)
    height: int = Field(ge=0)

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        return _coerce_pair(data, "width", "height")


class LandmarkEntry(BaseModel, frozen=True):
    """One landmark placement: a position and an optional sub-type."""

    position: Position
    type: str | None = Field(
        default=None, validation_alias=AliasChoices("type", "subType", "subtype")
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_position(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        if "position" in data:
            data["position"] = _coerce_pair(data["position"], "x", "y")
        elif "x" in data and "y" in data:
            data["position"] = {"x": data.pop("x"), "y": data.pop("y")}
        return data


class BiomeConfig(BaseModel):
    """Declarative coverage and landmark specification for one world."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    map_size: MapSize = Field(default_factory=lambda: MapSize(width=50, height=50))
    terrain: dict[str, Coverage] = Field(default_factory=dict)
    landmarks: dict[str, list[LandmarkEntry] | LandmarkEntry] = Field(
        default_factory=dict
    )

    def landmark_entries(self) -> Iterator[tuple[str, LandmarkEntry]]:
        """Yield (kind, entry) for every landmark, in declaration order."""
        return iter_landmark_entries(self.landmarks)


def iter_landmark_entries(
    landmarks: Mapping[str, Iterable[LandmarkEntry] | LandmarkEntry],
) -> Iterator[tuple[str, LandmarkEntry]]:
    """Flatten kind -> entry-or-entries into (kind, entry) pairs."""
    for kind, value in landmarks.items():
        if isinstance(value, LandmarkEntry):
            yield kind, value
        else:
            for entry in value:
                yield kind, entry


DEFAULT_BIOME_CONFIG: dict[str, Any] = {
    "mapSize": {"width": 50, "height": 50},
    "terrain": {
        "grass": 40,
        "forest": 30,
        "sand": 20,
        "swamp": 10,
    },
    "landmarks": {
        "structures": [
            {"position": [10, 12], "type": "ruins"},
            {"position": [38, 30], "type": "watchtower"},
        ],
        "crashSites": [
            {"position": [22, 41]},
            {"position": [44, 7]},
        ],
        "hiddenCore": {"position": [25, 25], "type": "hidden_core"},
    },
}


def default_biome_config() -> BiomeConfig:
    """Return a fresh copy of the built-in biome configuration."""
    return BiomeConfig.model_validate(copy.deepcopy(DEFAULT_BIOME_CONFIG))


def _decode_json(raw: str | bytes) -> Any:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConfigurationInvalidError(f"Biome config is not UTF-8: {e}") from e
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        # Generated text often wraps the JSON object in prose
        start, end = raw.find("{"), raw.rfind("}")
        if start == -1 or end <= start:
            raise ConfigurationInvalidError(f"Biome config is not JSON: {e}") from e
        try:
            return json.loads(raw[start : end + 1])
        except json.JSONDecodeError as inner:
            raise ConfigurationInvalidError(
                f"Biome config is not JSON: {inner}"
            ) from inner


def parse_biome_config(
    raw: str | bytes | Mapping[str, Any] | None,
    max_tiles: int = MAX_TILES,
) -> BiomeConfig:
    """Strictly parse a biome configuration.

    Args:
        raw: JSON text, or an already decoded mapping.
        max_tiles: Largest accepted map area.

    Returns:
        Validated BiomeConfig.

    Raises:
        ConfigurationInvalidError: If raw is missing, not JSON, fails
            validation or describes a map larger than max_tiles.
    """
    if raw is None:
        raise ConfigurationInvalidError("Biome config is missing")
    data = _decode_json(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(data, Mapping):
        raise ConfigurationInvalidError(
            f"Biome config must be a JSON object, got {type(data).__name__}"
        )
    try:
        config = BiomeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationInvalidError(f"Biome config failed validation: {e}") from e

    size = config.map_size
    if size.width * size.height > max_tiles:
        raise ConfigurationInvalidError(
            f"Biome map {size.width}x{size.height} exceeds {max_tiles:,} tiles"
        )
    return config


@dataclass(frozen=True)
class BiomeResolution:
    """Outcome of resolving a biome configuration."""

    config: BiomeConfig
    used_default: bool
    reason: str | None = None


def resolve_biome_config(
    raw: str | bytes | Mapping[str, Any] | None,
    max_tiles: int = MAX_TILES,
) -> BiomeResolution:
    """Parse a biome configuration, substituting the default when invalid.

    Never raises for bad input; the substitution is reported through
    ``used_default`` and ``reason``.
    """
    try:
        config = parse_biome_config(raw, max_tiles)
    except ConfigurationInvalidError as e:
        logger.warning("biome_config_fallback", reason=str(e))
        return BiomeResolution(
            config=default_biome_config(), used_default=True, reason=str(e)
        )
    return BiomeResolution(config=config, used_default=False)


class ConfigSource(Protocol):
    """Supplies raw biome configuration, e.g. from a text-generation service."""

    def fetch(self, prompt: str | None) -> str | Mapping[str, Any] | None: ...


class StaticConfigSource:
    """Config source returning a fixed payload regardless of prompt."""

    def __init__(self, payload: str | Mapping[str, Any] | None):
        self.payload = payload

    def fetch(self, prompt: str | None) -> str | Mapping[str, Any] | None:
        return self.payload


class FileConfigSource:
    """Config source reading JSON text from a file."""

    def __init__(self, path: Path):
        self.path = path

    def fetch(self, prompt: str | None) -> str | None:
        return self.path.read_text(encoding="utf-8")


def fetch_biome_config(
    source: ConfigSource,
    prompt: str | None,
    max_tiles: int = MAX_TILES,
) -> BiomeResolution:
    """Fetch and resolve configuration from a source.

    Failures of the source itself are treated like a malformed payload: the
    default configuration is used and the reason is reported.
    """
    try:
        raw = source.fetch(prompt)
    except Exception as e:
        logger.warning(
            "biome_config_source_failed",
            source=type(source).__name__,
            error=str(e),
        )
        return BiomeResolution(
            config=default_biome_config(),
            used_default=True,
            reason=f"Config source failed: {e}",
        )
    return resolve_biome_config(raw, max_tiles)
