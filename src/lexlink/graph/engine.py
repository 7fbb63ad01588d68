"""Connection graph: the entity registry, connections, discovery and clustering behind one object."""

import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any

import structlog

from lexlink.exceptions import NotFoundError
from lexlink.graph.clusters import ClusterAnalyzer
from lexlink.graph.connections import ConnectionStore
from lexlink.graph.discovery import RelationshipDiscovery
from lexlink.graph.registry import EntityRegistry
from lexlink.graph.scoring import connection_strength
from lexlink.ids import IdProvider, UuidIdProvider
from lexlink.models import (
    ConnectionMetadata,
    ConnectionNetwork,
    ConnectionSuggestion,
    EntityCluster,
    EntityConnection,
    EntitySummary,
    parse_timestamp,
    utcnow,
)
from lexlink.storage import MemorySnapshotStore, SnapshotStore

logger = structlog.get_logger()


class ConnectionGraph:
    """In-memory graph of entities and connections with snapshot persistence.

    Each mutation is saved to the snapshot store as it happens, unless it runs
    inside :meth:`batch`, in which case one save happens when the outermost
    batch exits. All state is guarded by a single re-entrant lock.
    """

    def __init__(
        self,
        store: SnapshotStore | None = None,
        id_provider: IdProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the graph and load the last snapshot.

        Args:
            store: Snapshot storage (defaults to an in-memory store)
            id_provider: Identifier source for connections and clusters
            clock: Returns the current aware datetime
        """
        self.snapshots = store or MemorySnapshotStore()
        self._ids = id_provider or UuidIdProvider()
        self._clock = clock
        self._lock = threading.RLock()
        self._batch_depth = 0
        self._dirty = False

        self.registry = EntityRegistry(clock=clock)
        self.connections = ConnectionStore(self.registry, id_provider=self._ids, clock=clock)
        self.discovery = RelationshipDiscovery(self.registry, self.connections, clock=clock)
        self.analyzer = ClusterAnalyzer(self.registry, self.connections, id_provider=self._ids)

        self._load()

    # Entity management

    def register_entity(self, entity: EntitySummary) -> EntitySummary:
        with self._mutation():
            return self.registry.register(entity)

    def update_entity(self, entity_id: str, **changes: Any) -> EntitySummary:
        with self._mutation():
            return self.registry.update(entity_id, **changes)

    # Connection management

    def create_connection(
        self,
        source_type: str,
        source_id: str,
        target_type: str,
        target_id: str,
        connection_type: str,
        strength: float,
        auto_detected: bool = False,
        metadata: ConnectionMetadata | None = None,
    ) -> str:
        """Create a connection and return its id."""
        with self._mutation():
            connection = self.connections.create(
                source_type=source_type,
                source_id=source_id,
                target_type=target_type,
                target_id=target_id,
                connection_type=connection_type,
                strength=strength,
                auto_detected=auto_detected,
                metadata=metadata,
            )
            return connection.id

    def update_connection(self, connection_id: str, **changes: Any) -> EntityConnection:
        with self._mutation():
            return self.connections.update(connection_id, **changes)

    def delete_connection(self, connection_id: str) -> None:
        with self._mutation():
            self.connections.delete(connection_id)

    def accept_suggestion(self, suggestion: ConnectionSuggestion, user_confirmed: bool = False) -> str:
        """Turn a suggestion into a stored connection.

        Raises:
            NotFoundError: If either endpoint is not a registered entity
        """
        with self._lock:
            source = self.registry.get(suggestion.source_id)
            target = self.registry.get(suggestion.target_id)
            if source is None:
                raise NotFoundError("Entity", suggestion.source_id)
            if target is None:
                raise NotFoundError("Entity", suggestion.target_id)

            return self.create_connection(
                source_type=source.type,
                source_id=source.id,
                target_type=target.type,
                target_id=target.id,
                connection_type=suggestion.connection_type,
                strength=suggestion.confidence,
                auto_detected=True,
                metadata=ConnectionMetadata(
                    reason=suggestion.reason,
                    ai_confidence=suggestion.confidence,
                    user_confirmed=user_confirmed,
                ),
            )

    def apply_auto_suggestions(self, entity_id: str) -> list[str]:
        """Accept every auto-apply suggestion for an entity that is not already connected.

        Returns:
            Ids of the connections created
        """
        created: list[str] = []
        with self._lock, self.batch():
            for suggestion in self.detect_potential_connections(entity_id):
                if not suggestion.auto_apply or self._is_connected(suggestion):
                    continue
                created.append(self.accept_suggestion(suggestion))
        logger.info("Auto-applied suggestions", entity_id=entity_id, count=len(created))
        return created

    # Queries

    def get_connections_for_entity(self, entity_id: str) -> list[EntityConnection]:
        with self._lock:
            return self.connections.connections_of(entity_id)

    def get_related_entities(self, entity_id: str, max_depth: int = 2) -> list[EntitySummary]:
        with self._lock:
            return self.discovery.related_entities(entity_id, max_depth)

    def detect_potential_connections(self, entity_id: str) -> list[ConnectionSuggestion]:
        with self._lock:
            return self.discovery.detect_potential_connections(entity_id)

    def get_connection_clusters(self) -> list[EntityCluster]:
        with self._lock:
            return self.analyzer.clusters()

    def calculate_connection_strength(self, connection: EntityConnection) -> float:
        return connection_strength(connection)

    def get_all_connections(self) -> list[EntityConnection]:
        with self._lock:
            return self.connections.all()

    def get_all_entities(self) -> list[EntitySummary]:
        with self._lock:
            return self.registry.all()

    def get_entity(self, entity_id: str) -> EntitySummary | None:
        with self._lock:
            return self.registry.get(entity_id)

    def get_connection_network(self) -> ConnectionNetwork:
        with self._lock:
            return ConnectionNetwork(
                entities={entity.id: entity for entity in self.registry.all()},
                connections=self.connections.all(),
                clusters=self.analyzer.clusters(),
            )

    # Persistence

    @contextmanager
    def batch(self) -> Iterator["ConnectionGraph"]:
        """Group mutations so the snapshot is written once, when the outermost batch exits."""
        with self._lock:
            self._batch_depth += 1
            try:
                yield self
            finally:
                self._batch_depth -= 1
                if self._batch_depth == 0 and self._dirty:
                    self.save()

    def save(self) -> None:
        """Write the full graph to the snapshot store."""
        with self._lock:
            snapshot = {
                "connections": {c.id: c.to_dict() for c in self.connections.all()},
                "entities": {e.id: e.to_dict() for e in self.registry.all()},
                "connections_by_entity": self.connections.index.to_dict(),
            }
            self.snapshots.save(snapshot)
            self._dirty = False
            logger.debug(
                "Graph saved",
                entities=len(snapshot["entities"]),
                connections=len(snapshot["connections"]),
            )

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._lock, self.batch():
            yield
            self._dirty = True

    def _load(self) -> None:
        """Restore state from the snapshot store. Bad data degrades to an empty graph."""
        snapshot = self.snapshots.load()
        if not snapshot:
            logger.debug("No snapshot to load, starting empty")
            return

        try:
            entities = _records(snapshot, "entities")
            connections = _records(snapshot, "connections")
        except (TypeError, ValueError) as e:
            logger.error("Malformed snapshot, starting empty", error=str(e))
            return

        for entity_id, record in entities.items():
            try:
                self.registry.register(EntitySummary.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed entity record", entity_id=entity_id, error=str(e))

        # The index is rebuilt from the connection records rather than trusted from disk.
        for connection_id, record in connections.items():
            try:
                self.connections.add(EntityConnection.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed connection record", connection_id=connection_id, error=str(e))

        logger.info(
            "Graph loaded",
            entities=len(self.registry),
            connections=len(self.connections),
        )

    def _is_connected(self, suggestion: ConnectionSuggestion) -> bool:
        endpoints = {suggestion.source_id, suggestion.target_id}
        return any(
            {c.source_id, c.target_id} == endpoints and c.connection_type == suggestion.connection_type
            for c in self.connections.connections_of(suggestion.source_id)
        )


def _records(snapshot: Mapping[str, Any], key: str) -> dict[str, Any]:
    records = snapshot.get(key) or {}
    if isinstance(records, list):
        # [[id, record], ...] pairs
        records = dict(records)
    if not isinstance(records, dict):
        raise ValueError(f"'{key}' is not a mapping")
    return records


def auto_link_task_to_case(graph: ConnectionGraph, task_id: str, case_id: str) -> str:
    """Connect a task to the case it belongs to."""
    return graph.create_connection(
        source_type="task",
        source_id=task_id,
        target_type="case",
        target_id=case_id,
        connection_type="part_of",
        strength=0.8,
        auto_detected=True,
        metadata=ConnectionMetadata(reason="Auto-linked task to case", ai_confidence=0.8, user_confirmed=False),
    )


def suggest_related_items(graph: ConnectionGraph, entity_id: str, limit: int = 5) -> list[EntitySummary]:
    """Return the entities behind the most confident suggestions for entity_id."""
    suggestions = graph.detect_potential_connections(entity_id)[:limit]
    entities = [graph.get_entity(s.target_id) for s in suggestions]
    return [entity for entity in entities if entity is not None]


def entity_from_record(record: Mapping[str, Any], entity_type: str) -> EntitySummary:
    """Build an entity summary from a task or case payload."""
    created_at = record.get("created_at")
    updated_at = record.get("updated_at")
    return EntitySummary(
        id=str(record["id"]),
        type=entity_type,
        title=record.get("title", ""),
        description=record.get("description"),
        status=record.get("status"),
        priority=record.get("priority"),
        tags=list(record.get("tags") or []),
        created_at=parse_timestamp(created_at) if created_at else utcnow(),
        updated_at=parse_timestamp(updated_at) if updated_at else utcnow(),
    )
