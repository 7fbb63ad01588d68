"""Cluster analysis: connected components of the connection graph."""

from collections import Counter, deque
from collections.abc import Callable

import structlog

from lexlink.graph.connections import ConnectionStore
from lexlink.graph.discovery import extract_keywords
from lexlink.graph.registry import EntityRegistry
from lexlink.graph.scoring import connection_strength
from lexlink.ids import IdProvider, UuidIdProvider
from lexlink.models import ClusterType, EntityCluster, EntityConnection

logger = structlog.get_logger()

DEFAULT_CLUSTER_NAME = "Related items"


class ClusterAnalyzer:
    """Partitions registered entities into clusters of connected items."""

    def __init__(
        self,
        registry: EntityRegistry,
        store: ConnectionStore,
        id_provider: IdProvider | None = None,
        scorer: Callable[[EntityConnection], float] = connection_strength,
    ) -> None:
        self.registry = registry
        self.store = store
        self._ids = id_provider or UuidIdProvider()
        self._scorer = scorer

    def clusters(self) -> list[EntityCluster]:
        """Return every component with two or more registered members, strongest first.

        Ids without a registered entity link components together but are not
        members. A registered entity whose only neighbours are unregistered
        ids therefore forms no cluster.
        """
        visited: set[str] = set()
        clusters: list[EntityCluster] = []

        for entity_id in self.registry:
            if entity_id in visited:
                continue
            members, strength = self._expand(entity_id, visited)
            if len(members) > 1:
                clusters.append(
                    EntityCluster(
                        id=self._ids.next_id("cluster"),
                        name=self.cluster_name(members),
                        entities=members,
                        strength=strength,
                        type=self.cluster_type(members),
                    )
                )

        clusters.sort(key=lambda c: c.strength, reverse=True)
        logger.debug("Clusters computed", count=len(clusters))
        return clusters

    def _expand(self, start_id: str, visited: set[str]) -> tuple[list[str], float]:
        """Walk the component containing start_id.

        Unregistered ids are walked through, so they still join the component,
        but they are not reported as members.

        Returns:
            Registered member ids in discovery order and the mean strength of
            the component's connections (0 without connections)
        """
        members: list[str] = []
        seen_connections: set[str] = set()
        total_strength = 0.0
        queue = deque([start_id])

        while queue:
            entity_id = queue.popleft()
            if entity_id in visited:
                continue
            visited.add(entity_id)
            if entity_id in self.registry:
                members.append(entity_id)

            for connection in self.store.connections_of(entity_id):
                if connection.id not in seen_connections:
                    seen_connections.add(connection.id)
                    total_strength += self._scorer(connection)
                neighbour = connection.other_end(entity_id)
                if neighbour not in visited:
                    queue.append(neighbour)

        mean = total_strength / len(seen_connections) if seen_connections else 0.0
        return members, mean

    def cluster_name(self, members: list[str]) -> str:
        """Name a cluster after the most frequent keyword in its members' titles."""
        keywords: list[str] = []
        for entity_id in members:
            entity = self.registry.get(entity_id)
            if entity is not None:
                keywords.extend(extract_keywords(entity.title))

        if not keywords:
            return DEFAULT_CLUSTER_NAME
        keyword, _ = Counter(keywords).most_common(1)[0]
        return f"{keyword} cluster"

    def cluster_type(self, members: list[str]) -> ClusterType:
        types = [entity.type for entity in map(self.registry.get, members) if entity is not None]
        if all(t == "task" for t in types):
            return "workflow"
        if all(t == "case" for t in types):
            return "client"
        if any(t == "deadline" for t in types):
            return "deadline_group"
        return "project"
