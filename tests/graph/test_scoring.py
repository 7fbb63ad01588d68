"""Tests for connection strength scoring."""

import pytest

from lexlink.graph.scoring import connection_strength
from lexlink.models import CONNECTION_TYPES, ConnectionMetadata, EntityConnection


def make_connection(connection_type: str, metadata: ConnectionMetadata | None = None) -> EntityConnection:
    return EntityConnection(
        id="conn_1",
        source_type="task",
        source_id="t1",
        target_type="case",
        target_id="c1",
        connection_type=connection_type,
        strength=0.1,
        metadata=metadata,
    )


@pytest.mark.parametrize(
    ("connection_type", "expected"),
    [
        ("depends_on", 0.8),
        ("blocks", 0.8),
        ("part_of", 0.7),
        ("assigned_to", 0.7),
        ("related", 0.6),
        ("similar_to", 0.6),
        ("references", 0.5),
    ],
)
def test_type_bonus(connection_type: str, expected: float) -> None:
    """Test the base score of each connection type."""
    assert connection_strength(make_connection(connection_type)) == pytest.approx(expected)


def test_ai_confidence_bonus() -> None:
    """Test that AI confidence adds a fifth of its value."""
    conn = make_connection("related", ConnectionMetadata(ai_confidence=0.5))
    assert connection_strength(conn) == pytest.approx(0.7)


def test_user_confirmation_bonus() -> None:
    """Test that user confirmation adds a fixed bonus."""
    conn = make_connection("references", ConnectionMetadata(user_confirmed=True))
    assert connection_strength(conn) == pytest.approx(0.7)


def test_score_is_capped_at_one() -> None:
    """Test that the score never exceeds 1.0."""
    conn = make_connection("blocks", ConnectionMetadata(ai_confidence=1.0, user_confirmed=True))
    assert connection_strength(conn) == 1.0


def test_stored_strength_does_not_affect_score() -> None:
    """Test that the score is derived from type and metadata only."""
    conn = make_connection("part_of")
    conn.strength = 0.99
    assert connection_strength(conn) == pytest.approx(0.7)


@pytest.mark.parametrize("connection_type", CONNECTION_TYPES)
@pytest.mark.parametrize("confidence", [None, 0.0, 0.3, 1.0])
@pytest.mark.parametrize("confirmed", [False, True])
def test_score_bounds(connection_type: str, confidence: float | None, confirmed: bool) -> None:
    """Test that every combination scores within [0, 1]."""
    conn = make_connection(connection_type, ConnectionMetadata(ai_confidence=confidence, user_confirmed=confirmed))
    assert 0.0 <= connection_strength(conn) <= 1.0
