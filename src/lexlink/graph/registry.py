"""Entity registry: canonical summaries of every trackable item."""

import dataclasses
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

import structlog

from lexlink.exceptions import NotFoundError
from lexlink.models import EntitySummary, utcnow

logger = structlog.get_logger()

_IMMUTABLE_FIELDS = frozenset({"id"})


class EntityRegistry:
    """Holds entity summaries keyed by id."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._entities: dict[str, EntitySummary] = {}
        self._clock = clock

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entities))

    def register(self, entity: EntitySummary) -> EntitySummary:
        """Insert an entity, replacing any existing entity with the same id."""
        replaced = entity.id in self._entities
        self._entities[entity.id] = entity
        logger.info("Entity registered", entity_id=entity.id, type=entity.type, replaced=replaced)
        return entity

    def update(self, entity_id: str, **changes: Any) -> EntitySummary:
        """Merge changes into a registered entity and refresh updated_at.

        Raises:
            NotFoundError: If entity_id is not registered
            ValueError: If a change names an unknown or immutable field
        """
        entity = self._entities.get(entity_id)
        if entity is None:
            raise NotFoundError("Entity", entity_id)

        check_fields(EntitySummary, changes)
        changes.pop("updated_at", None)
        updated = dataclasses.replace(entity, **changes, updated_at=self._clock())
        self._entities[entity_id] = updated
        logger.info("Entity updated", entity_id=entity_id, fields=sorted(changes))
        return updated

    def get(self, entity_id: str) -> EntitySummary | None:
        return self._entities.get(entity_id)

    def all(self) -> list[EntitySummary]:
        return list(self._entities.values())

    def of_type(self, entity_type: str) -> list[EntitySummary]:
        return [entity for entity in self._entities.values() if entity.type == entity_type]

    def clear(self) -> None:
        self._entities.clear()


def check_fields(model: type, changes: dict[str, Any]) -> None:
    known = {f.name for f in dataclasses.fields(model)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ValueError(f"Unknown {model.__name__} field(s): {', '.join(unknown)}")
    immutable = sorted(set(changes) & _IMMUTABLE_FIELDS)
    if immutable:
        raise ValueError(f"Field(s) cannot be changed: {', '.join(immutable)}")
