"""Procedural world generation pipeline.

This package turns a terrain coverage split into a populated world grid:
elevation noise, terrain classification, landmark embedding, merchant
scatter and quest assignment.
"""

from .classification import TerrainClassifier, classify_grid, compute_budgets
from .features import scatter_merchants
from .generator import (
    GenerationMode,
    GenerationResult,
    generate_basic,
    generate_from_biome,
    generate_world,
)
from .landmarks import place_landmarks, place_mandatory_landmarks, scatter_landmarks
from .noise import NoiseField
from .quests import assign_quests, is_near_water

__all__ = [
    "GenerationMode",
    "GenerationResult",
    "NoiseField",
    "TerrainClassifier",
    "assign_quests",
    "classify_grid",
    "compute_budgets",
    "generate_basic",
    "generate_from_biome",
    "generate_world",
    "is_near_water",
    "place_landmarks",
    "place_mandatory_landmarks",
    "scatter_landmarks",
    "scatter_merchants",
]
