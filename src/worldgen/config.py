"""Generator configuration loading from TOML files."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

# Largest grid area, in tiles, a single generation may build
MAX_TILES = 250_000


class NoiseConfig(BaseModel):
    """Elevation noise parameters."""

    scale: float = Field(default=50.0, gt=0, description="Coordinate divisor")
    octaves: int = Field(default=1, ge=1, description="Number of fractal octaves")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    gain: float = Field(default=0.5, description="Amplitude multiplier per octave")


class ClassificationConfig(BaseModel):
    """Elevation thresholds that preempt the coverage pool."""

    water_threshold: float = Field(
        default=-0.2, description="Elevation below this becomes water"
    )
    mountain_threshold: float = Field(
        default=0.5, description="Elevation above this becomes mountain"
    )


class FeatureConfig(BaseModel):
    """Secondary feature scatter parameters."""

    merchant_density: float = Field(
        default=0.05, ge=0, le=1, description="Fraction of tiles that get a merchant"
    )


class QuestConfig(BaseModel):
    """Quest assignment parameters."""

    forest_quest_probability: float = Field(
        default=0.1, ge=0, le=1, description="Chance a forest tile offers gathering"
    )
    wrap_quest_locations: bool = Field(
        default=False,
        description="Report wrapped quest locations (50x50 grids only)",
    )


class GeneratorConfig(BaseModel):
    """Complete generation configuration."""

    default_width: int = Field(default=50, description="Grid width when unspecified")
    default_height: int = Field(default=50, description="Grid height when unspecified")
    max_tiles: int = Field(
        default=MAX_TILES, ge=1, description="Largest grid area accepted, in tiles"
    )
    landmark_percentage: float = Field(
        default=0.05, ge=0, le=1, description="Fraction of tiles scattered as landmarks"
    )
    return_on_persistence_failure: bool = Field(
        default=True,
        description="Return the generated world even if it could not be stored",
    )

    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    features: FeatureConfig = Field(default_factory=FeatureConfig)
    quests: QuestConfig = Field(default_factory=QuestConfig)


def load_config(config_path: Path) -> GeneratorConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed GeneratorConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return GeneratorConfig.model_validate(data)
