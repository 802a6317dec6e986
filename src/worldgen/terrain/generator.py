"""Main world generation orchestration."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

import numpy as np

from ..biome import DEFAULT_BIOME_CONFIG, BiomeConfig, LandmarkEntry
from ..config import GeneratorConfig
from ..exceptions import GenerationError
from ..state import WorldGrid
from ..types import Quest
from .classification import ElevationSource, TerrainClassifier, classify_grid
from .features import scatter_merchants
from .landmarks import place_landmarks, place_mandatory_landmarks, scatter_landmarks
from .noise import NoiseField
from .quests import assign_quests

logger = logging.getLogger(__name__)


class GenerationMode(str, Enum):
    """How landmarks are chosen for a world."""

    CONFIGURED = "configured"  # landmarks from a biome configuration
    BASIC = "basic"  # scattered plus mandatory canonical landmarks


@dataclass
class GenerationResult:
    """Finished world grid with the quests attached to it."""

    grid: WorldGrid
    quests: list[Quest]
    mode: GenerationMode
    landmarks_placed: int = 0
    merchants_placed: int = 0
    pool_counts: dict[str, int] = field(default_factory=dict)


def generate_world(
    rng: np.random.Generator,
    terrain: Mapping[str, float],
    width: int,
    height: int,
    landmarks: Mapping[str, list[LandmarkEntry] | LandmarkEntry] | None = None,
    config: GeneratorConfig | None = None,
    noise: ElevationSource | None = None,
    landmark_percentage: float | None = None,
) -> GenerationResult:
    """Run the full pipeline: terrain, landmarks, merchants, quests.

    Passing ``landmarks`` (even an empty mapping) selects configured mode;
    leaving it None selects basic mode, which scatters landmarks and then
    forces the mandatory ones.

    Args:
        rng: Random number generator shared by every stage, in order.
        terrain: Category name -> coverage percent.
        width: Grid width in tiles.
        height: Grid height in tiles.
        landmarks: Configured landmarks, or None for basic mode.
        config: Generation configuration.
        noise: Elevation source. Defaults to a NoiseField drawn from rng.
        landmark_percentage: Basic mode scatter fraction. Defaults to config.

    Returns:
        GenerationResult with the populated grid.

    Raises:
        GenerationError: If the grid would have no tiles or more than
            ``config.max_tiles``.
    """
    config = config or GeneratorConfig()
    if width <= 0 or height <= 0:
        raise GenerationError(f"Cannot generate a {width}x{height} world")
    if width * height > config.max_tiles:
        raise GenerationError(
            f"A {width}x{height} world exceeds the {config.max_tiles:,} tile limit"
        )

    mode = GenerationMode.BASIC if landmarks is None else GenerationMode.CONFIGURED
    logger.info(f"Generating {width}x{height} world in {mode.value} mode")

    # Stage 1: elevation-constrained terrain
    if noise is None:
        noise = NoiseField(
            rng,
            scale=config.noise.scale,
            octaves=config.noise.octaves,
            lacunarity=config.noise.lacunarity,
            gain=config.noise.gain,
        )
    grid = WorldGrid.create(width, height)
    classifier = TerrainClassifier(
        terrain,
        grid.total_tiles,
        rng,
        water_threshold=config.classification.water_threshold,
        mountain_threshold=config.classification.mountain_threshold,
    )
    classify_grid(grid, noise, classifier)

    # Stage 2: landmarks
    if landmarks is None:
        percentage = (
            config.landmark_percentage
            if landmark_percentage is None
            else landmark_percentage
        )
        landmarks_placed = scatter_landmarks(grid, rng, percentage)
        place_mandatory_landmarks(grid)
    else:
        landmarks_placed = place_landmarks(grid, landmarks)
    logger.info(f"Placed {landmarks_placed} landmarks")

    # Stage 3: merchants
    merchants_placed = scatter_merchants(
        grid, rng, density=config.features.merchant_density
    )
    logger.info(f"Placed {merchants_placed} merchants")

    # Stage 4: quests
    quests = assign_quests(grid, rng, config.quests)

    _log_terrain_stats(grid)

    return GenerationResult(
        grid=grid,
        quests=quests,
        mode=mode,
        landmarks_placed=landmarks_placed,
        merchants_placed=merchants_placed,
        pool_counts=dict(classifier.pool_counts),
    )


def generate_from_biome(
    rng: np.random.Generator,
    biome: BiomeConfig,
    config: GeneratorConfig | None = None,
    noise: ElevationSource | None = None,
) -> GenerationResult:
    """Generate a world sized and populated from a biome configuration."""
    return generate_world(
        rng,
        biome.terrain,
        biome.map_size.width,
        biome.map_size.height,
        landmarks=biome.landmarks,
        config=config,
        noise=noise,
    )


def generate_basic(
    rng: np.random.Generator,
    width: int,
    height: int,
    config: GeneratorConfig | None = None,
    terrain: Mapping[str, float] | None = None,
    noise: ElevationSource | None = None,
    landmark_percentage: float | None = None,
) -> GenerationResult:
    """Generate a world without a biome configuration.

    Terrain coverage defaults to the built-in biome split.
    """
    if terrain is None:
        terrain = DEFAULT_BIOME_CONFIG["terrain"]
    return generate_world(
        rng,
        terrain,
        width,
        height,
        landmarks=None,
        config=config,
        noise=noise,
        landmark_percentage=landmark_percentage,
    )


def _log_terrain_stats(grid: WorldGrid) -> None:
    """Log terrain generation statistics."""
    total = grid.total_tiles
    counts = Counter(tile.category for _, _, tile in grid.iter_tiles())

    logger.info(f"Terrain stats ({total:,} tiles):")
    for name, count in counts.most_common():
        pct = count / total * 100
        logger.info(f"  {name}: {count:,} ({pct:.1f}%)")
