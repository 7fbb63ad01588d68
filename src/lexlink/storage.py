"""Snapshot persistence for the connection graph."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog

from lexlink.exceptions import StorageError

logger = structlog.get_logger()

SNAPSHOT_KEYS = ("connections", "entities", "connections_by_entity")


def empty_snapshot() -> dict[str, dict[str, Any]]:
    """Return a snapshot with the three collections empty."""
    return {key: {} for key in SNAPSHOT_KEYS}


class SnapshotStore(ABC):
    """Abstract base class for graph snapshot storage."""

    @abstractmethod
    def load(self) -> dict[str, Any] | None:
        """Load the last saved snapshot, or None if nothing has been saved."""
        pass

    @abstractmethod
    def save(self, snapshot: dict[str, Any]) -> None:
        """Persist a full snapshot, replacing the previous one."""
        pass


class MemorySnapshotStore(SnapshotStore):
    """Keeps the snapshot in memory. Used by tests and throwaway sessions."""

    def __init__(self, snapshot: dict[str, Any] | None = None) -> None:
        self.snapshot = snapshot
        self.save_count = 0

    def load(self) -> dict[str, Any] | None:
        return json.loads(json.dumps(self.snapshot)) if self.snapshot is not None else None

    def save(self, snapshot: dict[str, Any]) -> None:
        self.snapshot = json.loads(json.dumps(snapshot))
        self.save_count += 1


class JsonFileSnapshotStore(SnapshotStore):
    """Stores the snapshot as a single JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON snapshot file (created on first save)
        """
        self.path = Path(path)
        logger.debug("JSON snapshot store initialized", path=str(self.path))

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            logger.debug("Snapshot file does not exist", path=str(self.path))
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Failed to load snapshot", path=str(self.path), error=str(e))
            return None

        if not isinstance(data, dict):
            logger.error("Snapshot is not a JSON object", path=str(self.path))
            return None

        logger.debug("Snapshot loaded", path=str(self.path), keys=list(data.keys()))
        return data

    def save(self, snapshot: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error("Failed to save snapshot", path=str(self.path), error=str(e))
            raise StorageError(f"Failed to save snapshot to {self.path}: {e}") from e
        logger.debug("Snapshot saved", path=str(self.path))
