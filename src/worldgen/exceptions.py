"""Custom exceptions for world generation."""


class WorldGenError(Exception):
    """Base exception for world generation errors."""

    pass


class ConfigurationInvalidError(WorldGenError):
    """Raised when a biome configuration is missing or malformed."""

    pass


class GenerationError(WorldGenError):
    """Raised when a world grid cannot be generated."""

    pass


class PersistenceError(WorldGenError):
    """Raised when a world snapshot cannot be stored or retrieved."""

    pass


class SnapshotNotFoundError(WorldGenError):
    """Raised when no stored snapshot matches a lookup."""

    pass


class QuestAlreadyAssignedError(WorldGenError):
    """Raised when attaching a quest to a tile that already has one."""

    pass
