"""Bidirectional adjacency index from entity id to connection ids."""

from lexlink.models import EntityConnection


class ConnectionIndex:
    """Maps each entity id to the ids of connections touching it.

    A connection is always listed under both its source and its target.
    """

    def __init__(self) -> None:
        self._by_entity: dict[str, list[str]] = {}

    def add(self, connection: EntityConnection) -> None:
        for entity_id in (connection.source_id, connection.target_id):
            ids = self._by_entity.setdefault(entity_id, [])
            if connection.id not in ids:
                ids.append(connection.id)

    def remove(self, connection: EntityConnection) -> None:
        for entity_id in (connection.source_id, connection.target_id):
            ids = self._by_entity.get(entity_id)
            if ids and connection.id in ids:
                ids.remove(connection.id)
                if not ids:
                    del self._by_entity[entity_id]

    def ids_for(self, entity_id: str) -> list[str]:
        return list(self._by_entity.get(entity_id, ()))

    def clear(self) -> None:
        self._by_entity.clear()

    def to_dict(self) -> dict[str, list[str]]:
        return {entity_id: list(ids) for entity_id, ids in self._by_entity.items()}
