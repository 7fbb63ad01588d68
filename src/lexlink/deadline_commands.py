"""Deadline commands for lexlink CLI."""

from datetime import datetime

from cyclopts import App

from lexlink.deadlines.alerts import format_date
from lexlink.models import DeadlineCalculation

deadline_app = App(name="deadline", help="Calculate deadlines and alerts")


def parse_date(value: str) -> datetime:
    """Parse an ISO date or datetime given on the command line."""
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def print_calculation(calc: DeadlineCalculation) -> None:
    print(f"Rule: {calc.rule_applied.name} ({calc.rule_applied.id})")
    print(f"Jurisdiction: {calc.jurisdiction}")
    print(f"Start: {format_date(calc.original_date)}")
    print(f"Deadline: {format_date(calc.deadline)}")
    print(f"Preparation: {calc.preparation_time} day(s)")
    print(f"Risk: {calc.risk_level}")
    print("Alerts:")
    for alert_type, alert_date in calc.alert_dates.items():
        print(f"  {alert_type}: {format_date(alert_date)}")


@deadline_app.command
def calc(
    start: str,
    jurisdiction: str = "federal",
    type: str = "response",
    preparation_days: int | None = None,
) -> None:
    """Calculate a deadline from a triggering date."""
    from lexlink.cli import get_deadline_engine

    engine = get_deadline_engine()
    calculation = engine.calculate_deadline(parse_date(start), jurisdiction, type, preparation_days)
    print_calculation(calculation)


@deadline_app.command
def alerts(
    start: str,
    jurisdiction: str = "federal",
    type: str = "response",
    preparation_days: int | None = None,
    escalate: bool = False,
) -> None:
    """Show the alerts currently due for a deadline."""
    from lexlink.cli import get_deadline_engine

    engine = get_deadline_engine()
    calculation = engine.calculate_deadline(parse_date(start), jurisdiction, type, preparation_days)
    due = engine.generate_alerts([calculation])

    if not due:
        print("No alerts due")
        return

    for alert in due:
        marker = "!" if alert.escalated else " "
        print(f"{marker} [{alert.urgency_level}] {alert.type}: {alert.description}")
        if escalate:
            escalation = engine.escalate_deadline(alert)
            print(f"    -> {escalation.channel} to {', '.join(escalation.recipients)} ({escalation.priority})")


@deadline_app.command
def jurisdictions() -> None:
    """List jurisdictions with deadline rules."""
    from lexlink.cli import get_deadline_engine

    for name in get_deadline_engine().get_available_jurisdictions():
        print(name)


@deadline_app.command
def rules(jurisdiction: str) -> None:
    """List the deadline rules of a jurisdiction."""
    from lexlink.cli import get_deadline_engine

    found = get_deadline_engine().get_jurisdiction_rules(jurisdiction)
    if not found:
        print(f"No rules for jurisdiction {jurisdiction}")
        return

    for rule in found:
        print(f"{rule.id}: {rule.name} [{rule.type}] {rule.base_days} day(s)")
        for citation in rule.citations:
            print(f"  {citation}")


@deadline_app.command(name="prep-time")
def prep_time(type: str, complexity: str = "moderate") -> None:
    """Estimate preparation days for a filing type."""
    from lexlink.cli import get_deadline_engine

    days = get_deadline_engine().calculate_preparation_time(type, complexity)
    print(f"{days} day(s)")
