"""Terrain categories and landmark kinds with fixed meaning."""

from enum import Enum


class Category(str, Enum):
    """Terrain categories the generator itself knows about.

    Biome configurations may introduce any other category name; tiles store
    the category as a plain string.
    """

    WATER = "water"
    MOUNTAIN = "mountain"
    GRASS = "grass"
    FOREST = "forest"


class LandmarkKind(str, Enum):
    """Landmark kinds used by basic (configuration-less) generation."""

    VILLAGE = "village"
    CAVE = "cave"
    TREASURE = "treasure"
