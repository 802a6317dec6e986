"""World snapshot persistence: keyed storage by player and session."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Protocol
from urllib.parse import quote

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .exceptions import PersistenceError
from .state import WorldGrid

logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WorldSnapshot(BaseModel):
    """Everything stored for one generated world."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    player_id: str
    player: dict[str, Any] = Field(default_factory=dict)
    session_id: str
    world_grid: WorldGrid
    timestamp: datetime = Field(default_factory=_utc_now)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class WorldStore(Protocol):
    """Keyed snapshot storage. Implementations raise PersistenceError."""

    def save(self, snapshot: WorldSnapshot) -> None: ...

    def get_by_player(self, player_id: str) -> WorldSnapshot | None: ...

    def get_by_session(self, session_id: str) -> WorldSnapshot | None: ...


class InMemoryWorldStore:
    """Process-local store, mainly for tests and one-shot CLI runs."""

    def __init__(self) -> None:
        self._snapshots: dict[tuple[str, str], WorldSnapshot] = {}

    def save(self, snapshot: WorldSnapshot) -> None:
        self._snapshots[(snapshot.player_id, snapshot.session_id)] = snapshot
        logger.debug(
            "snapshot_saved",
            player_id=snapshot.player_id,
            session_id=snapshot.session_id,
        )

    def get_by_player(self, player_id: str) -> WorldSnapshot | None:
        return _latest(s for (p, _), s in self._snapshots.items() if p == player_id)

    def get_by_session(self, session_id: str) -> WorldSnapshot | None:
        return _latest(
            s for (_, sid), s in self._snapshots.items() if sid == session_id
        )

    def __len__(self) -> int:
        return len(self._snapshots)


class JsonFileWorldStore:
    """Stores one JSON file per player and session under a directory.

    Files are named ``{player_id}+{session_id}.json`` with both keys
    percent-encoded, so ``+`` only ever appears as the separator. Saving the
    same player and session again replaces the file atomically. Lookups only
    read files whose name matches the key; unreadable files are skipped with
    a warning.
    """

    def __init__(self, directory: Path):
        self.directory = directory

    def save(self, snapshot: WorldSnapshot) -> None:
        path = self._path(snapshot.player_id, snapshot.session_id)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(snapshot.to_json(), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise PersistenceError(f"Failed to write snapshot {path}: {e}") from e

        size_kb = path.stat().st_size / 1024
        logger.info(
            "snapshot_saved",
            path=str(path),
            size_kb=round(size_kb, 1),
            player_id=snapshot.player_id,
            session_id=snapshot.session_id,
        )

    def get_by_player(self, player_id: str) -> WorldSnapshot | None:
        snapshots = self._load_matching(f"{_encode(player_id)}+*.json")
        return _latest(s for s in snapshots if s.player_id == player_id)

    def get_by_session(self, session_id: str) -> WorldSnapshot | None:
        snapshots = self._load_matching(f"*+{_encode(session_id)}.json")
        return _latest(s for s in snapshots if s.session_id == session_id)

    def _path(self, player_id: str, session_id: str) -> Path:
        name = f"{_encode(player_id)}+{_encode(session_id)}.json"
        return self.directory / name

    def _load_matching(self, pattern: str) -> list[WorldSnapshot]:
        if not self.directory.exists():
            return []
        snapshots = []
        for path in sorted(self.directory.glob(pattern)):
            try:
                snapshots.append(self._load(path))
            except PersistenceError as e:
                logger.warning("snapshot_unreadable", path=str(path), error=str(e))
        return snapshots

    def _load(self, path: Path) -> WorldSnapshot:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return WorldSnapshot.model_validate(data)
        except (
            OSError,
            UnicodeDecodeError,
            json.JSONDecodeError,
            ValidationError,
        ) as e:
            raise PersistenceError(f"Failed to read snapshot {path}: {e}") from e


def _encode(key: str) -> str:
    # Percent-encoding leaves no glob metacharacters and no "+"
    return quote(key, safe="")


def _latest(snapshots: Iterable[WorldSnapshot]) -> WorldSnapshot | None:
    return max(snapshots, key=lambda s: s.timestamp, default=None)
