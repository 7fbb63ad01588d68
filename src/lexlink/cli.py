"""CLI for lexlink."""

from pathlib import Path
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from lexlink.config import get_config
from lexlink.config_commands import config_app
from lexlink.connection_commands import connection_app
from lexlink.deadline_commands import deadline_app
from lexlink.deadlines import DeadlineEngine, RuleRepository
from lexlink.graph import ConnectionGraph
from lexlink.models import ENTITY_TYPES, EntitySummary, check_choice
from lexlink.storage import JsonFileSnapshotStore

logger = structlog.get_logger()

app = App(
    help="lexlink - connection graph and deadline engine for a small legal practice",
)

app.command(connection_app)
app.command(deadline_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_graph() -> ConnectionGraph:
    """Get the connection graph backed by the configured snapshot file."""
    config = get_config()
    path = Path(config.get("storage.path"))
    logger.debug("Opening connection graph", path=str(path))
    return ConnectionGraph(store=JsonFileSnapshotStore(path))


def get_deadline_engine() -> DeadlineEngine:
    """Get a deadline engine with the configured extra rules and recipients."""
    config = get_config()
    rules = RuleRepository()
    rules_file = config.get("deadlines.rules_file")
    if rules_file:
        rules.load_yaml(rules_file)

    return DeadlineEngine(
        rules=rules,
        recipients=config.section("escalation.recipients"),
        default_preparation_days=config.get_int("deadlines.preparation_days"),
    )


def parse_tags(tags: str) -> list[str]:
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def format_entity(entity: EntitySummary) -> str:
    status_marker = "○" if entity.status in ("done", "closed", "completed") else "●"
    tags_str = f" [{', '.join(entity.tags)}]" if entity.tags else ""
    return f"{status_marker} {entity.id} ({entity.type}): {entity.title}{tags_str}"


@app.command
def register(
    entity_id: str,
    type: str,
    title: str,
    description: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    tags: str = "",
) -> None:
    """Register (or replace) an entity."""
    check_choice(type, ENTITY_TYPES, "entity type")
    graph = get_graph()
    entity = graph.register_entity(
        EntitySummary(
            id=entity_id,
            type=type,
            title=title,
            description=description,
            status=status,
            priority=priority,
            tags=parse_tags(tags),
        )
    )
    print(f"Registered {entity.type} {entity.id}: {entity.title}")


@app.command
def update(
    entity_id: str,
    title: str | None = None,
    description: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    tags: str | None = None,
) -> None:
    """Update fields of a registered entity."""
    changes: dict[str, object] = {
        key: value
        for key, value in {
            "title": title,
            "description": description,
            "status": status,
            "priority": priority,
        }.items()
        if value is not None
    }
    if tags is not None:
        changes["tags"] = parse_tags(tags)

    graph = get_graph()
    entity = graph.update_entity(entity_id, **changes)
    print(f"Updated entity {entity.id}: {entity.title}")


@app.command
def show(entity_id: str) -> None:
    """Show an entity and its connections."""
    graph = get_graph()
    entity = graph.get_entity(entity_id)
    if entity is None:
        print(f"Entity {entity_id} not found")
        return

    print(f"Entity: {entity.id}")
    print(f"Type: {entity.type}")
    print(f"Title: {entity.title}")
    if entity.description:
        print(f"Description: {entity.description}")
    if entity.status:
        print(f"Status: {entity.status}")
    if entity.priority:
        print(f"Priority: {entity.priority}")
    if entity.tags:
        print(f"Tags: {', '.join(entity.tags)}")

    connections = graph.get_connections_for_entity(entity_id)
    if connections:
        print(f"\nConnections ({len(connections)}):")
        for conn in connections:
            print(f"  {conn.id}: {conn.source_id} --[{conn.connection_type}]--> {conn.target_id}")


@app.command(name="list")
def list_entities(type: str | None = None) -> None:
    """List registered entities, optionally of one type."""
    graph = get_graph()
    entities = graph.get_all_entities()
    if type:
        entities = [entity for entity in entities if entity.type == type]

    print(f"Found {len(entities)} entity(ies):\n")
    for entity in entities:
        print(format_entity(entity))


@app.command
def related(entity_id: str, depth: int = 2) -> None:
    """List entities reachable from an entity within a number of hops."""
    graph = get_graph()
    entities = graph.get_related_entities(entity_id, max_depth=depth)

    if not entities:
        print(f"No related entities found for {entity_id}")
        return

    print(f"Entities related to {entity_id} (depth {depth}):\n")
    for entity in entities:
        print(format_entity(entity))


@app.command
def suggest(entity_id: str, limit: int | None = None) -> None:
    """Suggest connections for an entity based on shared keywords."""
    graph = get_graph()
    suggestions = graph.detect_potential_connections(entity_id)
    if limit:
        suggestions = suggestions[:limit]

    if not suggestions:
        print(f"No suggestions for {entity_id}")
        return

    print(f"Suggestions for {entity_id}:\n")
    for s in suggestions:
        auto = " (auto)" if s.auto_apply else ""
        print(f"  {s.source_id} --[{s.connection_type}]--> {s.target_id}  {s.confidence:.2f}{auto}  {s.reason}")


@app.command
def clusters() -> None:
    """Display clusters of connected entities."""
    graph = get_graph()
    found = graph.get_connection_clusters()

    if not found:
        print("No clusters found")
        return

    print(f"Found {len(found)} cluster(s):\n")
    for i, cluster in enumerate(found, 1):
        print(f"{i}. {cluster.name} [{cluster.type}] strength {cluster.strength:.2f}")
        print(f"   {', '.join(cluster.entities)}")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
