"""Relationship discovery: graph traversal and keyword-overlap suggestions."""

import re
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime

import structlog

from lexlink.graph.connections import ConnectionStore
from lexlink.graph.registry import EntityRegistry
from lexlink.models import ConnectionSuggestion, EntitySummary, utcnow

logger = structlog.get_logger()

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had", "her", "was", "one",
        "our", "out", "day", "get", "has", "him", "his", "how", "man", "new", "now", "old", "see",
        "two", "way", "who", "boy", "did", "its", "let", "put", "say", "she", "too", "use",
    }
)

MIN_KEYWORD_LENGTH = 4
_PUNCTUATION = re.compile(r"[^\w\s]")

# (threshold, auto-apply threshold) per suggestion kind
RELATED_THRESHOLDS = (0.3, 0.7)
TASK_CASE_THRESHOLDS = (0.2, 0.6)
DEADLINE_TASK_THRESHOLDS = (0.3, 0.7)


def extract_keywords(text: str) -> list[str]:
    """Split text into lowercase significant words.

    Punctuation becomes whitespace, words shorter than four characters and
    common stop words are dropped. Order and duplicates are preserved.
    """
    words = _PUNCTUATION.sub(" ", text.lower()).split()
    return [word for word in words if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS]


def jaccard_similarity(keywords1: Iterable[str], keywords2: Iterable[str]) -> float:
    """Size of the intersection over size of the union of two keyword sets."""
    set1, set2 = set(keywords1), set(keywords2)
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def common_keywords(keywords1: Iterable[str], keywords2: Iterable[str]) -> list[str]:
    """Keywords present in both lists, in the order of the second, without repeats."""
    set1 = set(keywords1)
    return list(dict.fromkeys(word for word in keywords2 if word in set1))


class RelationshipDiscovery:
    """Finds related entities and proposes new connections."""

    def __init__(
        self,
        registry: EntityRegistry,
        store: ConnectionStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.registry = registry
        self.store = store
        self._clock = clock

    def related_entities(self, entity_id: str, max_depth: int = 2) -> list[EntitySummary]:
        """Breadth-first walk of the graph from entity_id, up to max_depth hops.

        The start entity is never part of the result. Ids with no registered
        summary are skipped.
        """
        visited: set[str] = set()
        related: dict[str, None] = {}
        queue: deque[tuple[str, int]] = deque([(entity_id, 0)])

        while queue:
            current, depth = queue.popleft()
            if current in visited or depth >= max_depth:
                continue
            visited.add(current)

            for connection in self.store.connections_of(current):
                neighbour = connection.other_end(current)
                if neighbour not in visited and neighbour != entity_id:
                    related.setdefault(neighbour, None)
                    queue.append((neighbour, depth + 1))

        entities = [self.registry.get(rid) for rid in related]
        entities = [entity for entity in entities if entity is not None]
        logger.debug("Related entities resolved", entity_id=entity_id, max_depth=max_depth, count=len(entities))
        return entities

    def detect_potential_connections(self, entity_id: str) -> list[ConnectionSuggestion]:
        """Suggest connections for an entity, most confident first.

        Every other entity whose keywords overlap enough yields a ``related``
        suggestion. Tasks are additionally matched against cases
        (``part_of``) and deadlines against tasks (``depends_on``, from the
        task to the deadline).
        """
        entity = self.registry.get(entity_id)
        if entity is None:
            logger.debug("Cannot detect connections for unregistered entity", entity_id=entity_id)
            return []

        now = self._clock()
        keywords = extract_keywords(entity.text)
        suggestions: list[ConnectionSuggestion] = []

        threshold, auto_threshold = RELATED_THRESHOLDS
        for other in self.registry.all():
            if other.id == entity_id:
                continue
            other_keywords = extract_keywords(other.text)
            similarity = jaccard_similarity(keywords, other_keywords)
            if similarity > threshold:
                shared = ", ".join(common_keywords(keywords, other_keywords))
                suggestions.append(
                    ConnectionSuggestion(
                        source_id=entity_id,
                        target_id=other.id,
                        connection_type="related",
                        confidence=similarity,
                        reason=f"Similar keywords: {shared}",
                        auto_apply=similarity > auto_threshold,
                        created_at=now,
                    )
                )

        if entity.type == "task":
            suggestions.extend(self._suggest_task_case(entity, keywords, now))
        elif entity.type == "deadline":
            suggestions.extend(self._suggest_deadline_task(entity, keywords, now))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        logger.debug("Potential connections detected", entity_id=entity_id, count=len(suggestions))
        return suggestions

    def _suggest_task_case(
        self, task: EntitySummary, keywords: list[str], now: datetime
    ) -> list[ConnectionSuggestion]:
        threshold, auto_threshold = TASK_CASE_THRESHOLDS
        suggestions = []
        for case in self.registry.of_type("case"):
            similarity = jaccard_similarity(keywords, extract_keywords(case.text))
            if similarity > threshold:
                suggestions.append(
                    ConnectionSuggestion(
                        source_id=task.id,
                        target_id=case.id,
                        connection_type="part_of",
                        confidence=similarity,
                        reason=f"Task appears to be part of case: {case.title}",
                        auto_apply=similarity > auto_threshold,
                        created_at=now,
                    )
                )
        return suggestions

    def _suggest_deadline_task(
        self, deadline: EntitySummary, keywords: list[str], now: datetime
    ) -> list[ConnectionSuggestion]:
        threshold, auto_threshold = DEADLINE_TASK_THRESHOLDS
        suggestions = []
        for task in self.registry.of_type("task"):
            similarity = jaccard_similarity(keywords, extract_keywords(task.text))
            if similarity > threshold:
                suggestions.append(
                    ConnectionSuggestion(
                        source_id=task.id,
                        target_id=deadline.id,
                        connection_type="depends_on",
                        confidence=similarity,
                        reason=f"Task may be preparation for deadline: {deadline.title}",
                        auto_apply=similarity > auto_threshold,
                        created_at=now,
                    )
                )
        return suggestions
