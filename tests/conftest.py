"""Shared fixtures."""

from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from lexlink.cli import configure_logging
from lexlink.graph import ConnectionGraph
from lexlink.ids import SequentialIdProvider
from lexlink.models import EntitySummary
from lexlink.storage import MemorySnapshotStore

FIXED_NOW = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    """Configure structlog like the CLI entry point does (default level: critical)."""
    configure_logging("critical")


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """A clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def snapshot_store() -> MemorySnapshotStore:
    """An empty in-memory snapshot store."""
    return MemorySnapshotStore()


@pytest.fixture
def graph(snapshot_store: MemorySnapshotStore, clock: Callable[[], datetime]) -> ConnectionGraph:
    """A graph with deterministic ids and a frozen clock."""
    return ConnectionGraph(store=snapshot_store, id_provider=SequentialIdProvider(), clock=clock)


@pytest.fixture
def make_entity() -> Callable[..., EntitySummary]:
    """Factory for entity summaries with fixed timestamps."""

    def _make(entity_id: str, type: str = "note", title: str = "", description: str | None = None) -> EntitySummary:
        return EntitySummary(
            id=entity_id,
            type=type,
            title=title or f"Entity {entity_id}",
            description=description,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )

    return _make
