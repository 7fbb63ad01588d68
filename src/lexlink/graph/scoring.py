"""Connection strength scoring."""

from lexlink.models import EntityConnection

BASE_STRENGTH = 0.5
TYPE_BONUS = {
    "depends_on": 0.3,
    "blocks": 0.3,
    "part_of": 0.2,
    "assigned_to": 0.2,
    "related": 0.1,
    "similar_to": 0.1,
}
AI_CONFIDENCE_WEIGHT = 0.2
USER_CONFIRMED_BONUS = 0.2


def connection_strength(connection: EntityConnection) -> float:
    """Score a connection in [0.5, 1.0] from its type and metadata.

    Hard dependencies weigh more than structural links, which weigh more than
    loose similarity. AI confidence and user confirmation add on top; the
    total is capped at 1.0.
    """
    strength = BASE_STRENGTH + TYPE_BONUS.get(connection.connection_type, 0.0)

    metadata = connection.metadata
    if metadata is not None:
        if metadata.ai_confidence:
            strength += metadata.ai_confidence * AI_CONFIDENCE_WEIGHT
        if metadata.user_confirmed:
            strength += USER_CONFIRMED_BONUS

    return min(strength, 1.0)
