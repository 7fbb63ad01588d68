"""Entity connection graph."""

from lexlink.graph.engine import (
    ConnectionGraph,
    auto_link_task_to_case,
    entity_from_record,
    suggest_related_items,
)

__all__ = ["ConnectionGraph", "auto_link_task_to_case", "entity_from_record", "suggest_related_items"]
