"""Connection store: owns connection records and keeps the index in step."""

import dataclasses
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from lexlink.exceptions import NotFoundError
from lexlink.graph.index import ConnectionIndex
from lexlink.graph.registry import EntityRegistry, check_fields
from lexlink.ids import IdProvider, UuidIdProvider
from lexlink.models import ConnectionMetadata, EntityConnection, utcnow

logger = structlog.get_logger()


class ConnectionStore:
    """Stores connections by id and maintains the bidirectional connection index."""

    def __init__(
        self,
        registry: EntityRegistry,
        index: ConnectionIndex | None = None,
        id_provider: IdProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.index = index or ConnectionIndex()
        self._connections: dict[str, EntityConnection] = {}
        self._ids = id_provider or UuidIdProvider()
        self._clock = clock

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def create(
        self,
        source_type: str,
        source_id: str,
        target_type: str,
        target_id: str,
        connection_type: str,
        strength: float,
        auto_detected: bool = False,
        metadata: ConnectionMetadata | None = None,
    ) -> EntityConnection:
        """Create and index a new connection.

        Endpoints do not have to be registered yet. When they are, a type that
        disagrees with the registered entity is logged.

        Raises:
            ValueError: If an entity type or the connection type is not supported
        """
        now = self._clock()
        connection = EntityConnection(
            id=self._ids.next_id("conn"),
            source_type=source_type,
            source_id=source_id,
            target_type=target_type,
            target_id=target_id,
            connection_type=connection_type,
            strength=strength,
            auto_detected=auto_detected,
            created_at=now,
            updated_at=now,
            metadata=metadata,
        )
        self._warn_on_type_mismatch(connection)

        self._connections[connection.id] = connection
        self.index.add(connection)
        logger.info(
            "Connection created",
            connection_id=connection.id,
            source_id=source_id,
            target_id=target_id,
            connection_type=connection_type,
        )
        return connection

    def add(self, connection: EntityConnection) -> None:
        """Store an already-built connection (used when restoring a snapshot)."""
        self._connections[connection.id] = connection
        self.index.add(connection)

    def update(self, connection_id: str, **changes: Any) -> EntityConnection:
        """Merge changes into a connection and refresh updated_at.

        Raises:
            NotFoundError: If connection_id is not stored
            ValueError: If a change names an unknown field or an unsupported value
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            raise NotFoundError("Connection", connection_id)

        check_fields(EntityConnection, changes)
        changes.pop("created_at", None)
        changes.pop("updated_at", None)
        updated = dataclasses.replace(connection, **changes, updated_at=self._clock())

        if (updated.source_id, updated.target_id) != (connection.source_id, connection.target_id):
            self.index.remove(connection)
        self._connections[connection_id] = updated
        self.index.add(updated)
        logger.info("Connection updated", connection_id=connection_id, fields=sorted(changes))
        return updated

    def delete(self, connection_id: str) -> bool:
        """Remove a connection and prune it from the index. Unknown ids are ignored.

        Returns:
            True if a connection was removed
        """
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            logger.debug("Connection to delete not found", connection_id=connection_id)
            return False

        self.index.remove(connection)
        logger.info("Connection deleted", connection_id=connection_id)
        return True

    def get(self, connection_id: str) -> EntityConnection | None:
        return self._connections.get(connection_id)

    def connections_of(self, entity_id: str) -> list[EntityConnection]:
        """Return every connection whose source or target is entity_id."""
        return [self._connections[cid] for cid in self.index.ids_for(entity_id) if cid in self._connections]

    def all(self) -> list[EntityConnection]:
        return list(self._connections.values())

    def clear(self) -> None:
        self._connections.clear()
        self.index.clear()

    def _warn_on_type_mismatch(self, connection: EntityConnection) -> None:
        for entity_id, declared in (
            (connection.source_id, connection.source_type),
            (connection.target_id, connection.target_type),
        ):
            entity = self.registry.get(entity_id)
            if entity is not None and entity.type != declared:
                logger.warning(
                    "Connection endpoint type differs from registered entity",
                    entity_id=entity_id,
                    declared_type=declared,
                    registered_type=entity.type,
                )
