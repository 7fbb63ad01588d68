"""Tests for alert generation."""

from datetime import date, datetime, timezone

import pytest

from lexlink.deadlines.alerts import AlertGenerator, format_date, urgency_level
from lexlink.deadlines.calculator import DeadlineCalculator
from lexlink.ids import SequentialIdProvider
from lexlink.models import DeadlineAlert


def alerts_at(now: datetime, **kwargs: str) -> list[DeadlineAlert]:
    clock = lambda: now  # noqa: E731
    calculation = DeadlineCalculator(clock=clock).calculate(date(2025, 7, 1), "federal", "response", **kwargs)
    return AlertGenerator(id_provider=SequentialIdProvider(), clock=clock).generate([calculation])


def test_no_alerts_before_cascade() -> None:
    """Test that nothing fires before the 90-day notice."""
    assert alerts_at(datetime(2025, 4, 1, tzinfo=timezone.utc)) == []


def test_open_windows() -> None:
    """Test the alerts due eleven days before the deadline."""
    alerts = alerts_at(datetime(2025, 7, 20, 12, tzinfo=timezone.utc), case_id="c1")

    assert [a.type for a in alerts] == ["warning7", "warning30", "warning90"]
    assert [a.urgency_level for a in alerts] == [3, 2, 1]
    assert not any(a.escalated for a in alerts)
    assert {a.case_id for a in alerts} == {"c1"}
    assert all(a.acknowledged is False for a in alerts)
    assert alerts[0].description == "Final week: Start preparing for Federal Civil Response due Jul 31, 2025"


def test_critical_deadline_raises_urgency() -> None:
    """Test that every alert of a critical deadline is escalated one level."""
    alerts = alerts_at(datetime(2025, 7, 30, 12, tzinfo=timezone.utc))

    assert [a.type for a in alerts] == ["warning24h", "warning7", "warning30", "warning90"]
    assert [a.urgency_level for a in alerts] == [5, 4, 3, 2]
    assert all(a.escalated for a in alerts)
    assert alerts[0].description == "URGENT: Federal Civil Response due tomorrow (Jul 31, 2025)"


def test_overdue() -> None:
    """Test that a passed deadline yields one escalated overdue alert."""
    alerts = alerts_at(datetime(2025, 8, 5, tzinfo=timezone.utc), task_id="t1")

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert.type == "overdue"
    assert alert.urgency_level == 5
    assert alert.escalated is True
    assert alert.task_id == "t1"
    assert alert.id == "alert_1"
    assert alert.description == "OVERDUE: Federal Civil Response was due Jul 31, 2025"


def test_nothing_fires_at_the_deadline() -> None:
    """Test the instant of the deadline itself."""
    assert alerts_at(datetime(2025, 7, 31, tzinfo=timezone.utc)) == []


def test_alerts_sorted_across_calculations() -> None:
    """Test that alerts from several deadlines come out most urgent first."""
    now = datetime(2025, 7, 20, 12, tzinfo=timezone.utc)
    calculator = DeadlineCalculator(clock=lambda: now)
    calculations = [
        calculator.calculate(date(2025, 7, 1), "federal", "response"),
        calculator.calculate(date(2025, 6, 1), "nevada", "response"),
    ]

    alerts = AlertGenerator(clock=lambda: now).generate(calculations)
    levels = [a.urgency_level for a in alerts]

    assert levels == sorted(levels, reverse=True)
    assert alerts[0].type == "overdue"


@pytest.mark.parametrize(
    ("alert_type", "risk", "level"),
    [
        ("warning90", "low", 1),
        ("warning24h", "high", 4),
        ("warning24h", "critical", 5),
        ("overdue", "critical", 5),
    ],
)
def test_urgency_level(alert_type: str, risk: str, level: int) -> None:
    """Test urgency per alert type and risk."""
    assert urgency_level(alert_type, risk) == level


def test_format_date() -> None:
    """Test the human date format."""
    assert format_date(datetime(2025, 7, 4, tzinfo=timezone.utc)) == "Jul 4, 2025"
