"""Connection management commands for lexlink CLI."""

from cyclopts import App

from lexlink.models import ConnectionMetadata

connection_app = App(name="connection", help="Manage connections between entities")


@connection_app.command
def add(
    source_id: str,
    *target_ids: str,
    type: str = "related",
    strength: float = 0.5,
    reason: str | None = None,
) -> None:
    """Connect a source entity to one or more registered target entities."""
    from lexlink.cli import get_graph

    graph = get_graph()
    source = graph.get_entity(source_id)
    if source is None:
        print(f"Entity {source_id} not found")
        return

    metadata = ConnectionMetadata(reason=reason, user_confirmed=True)
    created = []
    with graph.batch():
        for target_id in target_ids:
            target = graph.get_entity(target_id)
            if target is None:
                print(f"Entity {target_id} not found, skipped")
                continue
            created.append(
                graph.create_connection(
                    source_type=source.type,
                    source_id=source.id,
                    target_type=target.type,
                    target_id=target.id,
                    connection_type=type,
                    strength=strength,
                    auto_detected=False,
                    metadata=metadata,
                )
            )
    print(f"Added {len(created)} connection(s) from {source_id}")


@connection_app.command
def update(
    connection_id: str,
    type: str | None = None,
    strength: float | None = None,
    confirm: bool = False,
) -> None:
    """Update a connection's type or strength, or mark it as confirmed."""
    from lexlink.cli import get_graph

    graph = get_graph()
    changes: dict[str, object] = {}
    if type is not None:
        changes["connection_type"] = type
    if strength is not None:
        changes["strength"] = strength
    if confirm:
        current = graph.connections.get(connection_id)
        metadata = current.metadata if current and current.metadata else ConnectionMetadata()
        changes["metadata"] = ConnectionMetadata(
            reason=metadata.reason,
            ai_confidence=metadata.ai_confidence,
            user_confirmed=True,
            context=metadata.context,
        )

    connection = graph.update_connection(connection_id, **changes)
    print(f"Updated connection {connection.id}")


@connection_app.command
def remove(*connection_ids: str) -> None:
    """Remove one or more connections."""
    from lexlink.cli import get_graph

    graph = get_graph()
    with graph.batch():
        for connection_id in connection_ids:
            graph.delete_connection(connection_id)
    print(f"Removed {len(connection_ids)} connection(s)")


@connection_app.command(name="list")
def list_connections(entity_id: str | None = None) -> None:
    """List connections of an entity, or every connection."""
    from lexlink.cli import get_graph

    graph = get_graph()
    connections = graph.get_connections_for_entity(entity_id) if entity_id else graph.get_all_connections()

    if not connections:
        print("No connections found" + (f" for entity {entity_id}" if entity_id else ""))
        return

    for conn in connections:
        flags = " auto" if conn.auto_detected else ""
        score = graph.calculate_connection_strength(conn)
        print(
            f"  {conn.id}: {conn.source_id} --[{conn.connection_type}]--> {conn.target_id}"
            f"  strength {conn.strength:.2f} score {score:.2f}{flags}"
        )


@connection_app.command
def accept(entity_id: str) -> None:
    """Create connections for every high-confidence suggestion of an entity."""
    from lexlink.cli import get_graph

    graph = get_graph()
    created = graph.apply_auto_suggestions(entity_id)
    print(f"Created {len(created)} connection(s) for {entity_id}")
