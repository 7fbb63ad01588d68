"""Alert generation from deadline calculations."""

from collections.abc import Callable, Iterable
from datetime import datetime

import structlog

from lexlink.ids import IdProvider, UuidIdProvider
from lexlink.models import AlertType, DeadlineAlert, DeadlineCalculation, utcnow

logger = structlog.get_logger()

BASE_URGENCY = {
    "warning90": 1,
    "warning30": 2,
    "warning7": 3,
    "warning24h": 4,
    "overdue": 5,
}
MAX_URGENCY = 5


def format_date(moment: datetime) -> str:
    """Format like ``Jul 31, 2025``."""
    return f"{moment:%b} {moment.day}, {moment.year}"


def urgency_level(alert_type: AlertType, risk_level: str) -> int:
    """Base urgency of an alert type, one step higher for critical-risk deadlines."""
    base = BASE_URGENCY[alert_type]
    if risk_level == "critical":
        return min(MAX_URGENCY, base + 1)
    return base


def describe(calculation: DeadlineCalculation, alert_type: AlertType) -> str:
    deadline = format_date(calculation.deadline)
    name = calculation.rule_applied.name
    if alert_type == "warning90":
        return f"90-day notice: {name} due {deadline}"
    if alert_type == "warning30":
        return f"30-day notice: {name} due {deadline}"
    if alert_type == "warning7":
        return f"Final week: Start preparing for {name} due {deadline}"
    if alert_type == "warning24h":
        return f"URGENT: {name} due tomorrow ({deadline})"
    if alert_type == "overdue":
        return f"OVERDUE: {name} was due {deadline}"
    return f"{name} alert for {deadline}"


class AlertGenerator:
    """Turns deadline calculations into the alerts that are due right now."""

    def __init__(
        self,
        id_provider: IdProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ids = id_provider or UuidIdProvider()
        self._clock = clock

    def generate(self, calculations: Iterable[DeadlineCalculation]) -> list[DeadlineAlert]:
        """Return alerts for every calculation, most urgent first.

        A cascade alert fires once its date has passed and the deadline has
        not. A deadline already in the past yields an escalated overdue alert.
        """
        now = self._clock()
        alerts: list[DeadlineAlert] = []

        for calculation in calculations:
            deadline = calculation.deadline
            escalated = calculation.risk_level == "critical"
            for alert_type, alert_date in calculation.alert_dates.items():
                if alert_date <= now < deadline:
                    alerts.append(
                        self._alert(
                            calculation,
                            alert_type,
                            urgency_level(alert_type, calculation.risk_level),
                            escalated,
                            now,
                        )
                    )

            if now > deadline:
                alerts.append(self._alert(calculation, "overdue", MAX_URGENCY, True, now))

        alerts.sort(key=lambda a: a.urgency_level, reverse=True)
        logger.debug("Alerts generated", count=len(alerts))
        return alerts

    def _alert(
        self,
        calculation: DeadlineCalculation,
        alert_type: AlertType,
        urgency: int,
        escalated: bool,
        now: datetime,
    ) -> DeadlineAlert:
        return DeadlineAlert(
            id=self._ids.next_id("alert"),
            type=alert_type,
            deadline=calculation.deadline,
            description=describe(calculation, alert_type),
            urgency_level=urgency,
            escalated=escalated,
            acknowledged=False,
            created_at=now,
            case_id=calculation.case_id,
            task_id=calculation.task_id,
        )
