"""Escalation policy: which channel and recipients an alert goes to."""

from collections.abc import Mapping

import structlog

from lexlink.models import DeadlineAlert, Escalation

logger = structlog.get_logger()

CRITICAL_ROLES = ("primary", "backup", "assistant")
URGENT_LEVEL = 4
CRITICAL_LEVEL = 5


class EscalationPolicy:
    """Maps alerts to notification channels.

    Overdue or level-5 alerts go everywhere to everyone; level 4 goes out by
    SMS; anything lower is an email to the primary contact.
    """

    def __init__(self, recipients: Mapping[str, str] | None = None) -> None:
        """Initialize the policy.

        Args:
            recipients: Optional names for the primary, backup and assistant roles
        """
        self.recipients = dict(recipients or {})

    def escalate(self, alert: DeadlineAlert) -> Escalation:
        is_urgent = alert.urgency_level >= URGENT_LEVEL
        is_critical = alert.type == "overdue" or alert.urgency_level == CRITICAL_LEVEL

        if is_critical:
            channel = "all"
        elif is_urgent:
            channel = "sms"
        else:
            channel = "email"
        roles = CRITICAL_ROLES if is_critical else CRITICAL_ROLES[:1]

        escalation = Escalation(
            channel=channel,
            recipients=tuple(self.recipients.get(role, role) for role in roles),
            message=f"{'CRITICAL' if is_critical else 'URGENT'}: {alert.description}",
            priority="critical" if is_critical else "high",
        )
        logger.info("Alert escalated", alert_id=alert.id, channel=channel, priority=escalation.priority)
        return escalation
