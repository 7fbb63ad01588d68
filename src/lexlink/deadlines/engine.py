"""Deadline engine: rule lookup, calculation, alerting and escalation behind one object."""

from collections.abc import Callable, Collection, Iterable, Mapping
from datetime import date, datetime

from lexlink.deadlines.alerts import AlertGenerator
from lexlink.deadlines.calculator import (
    DEFAULT_PREPARATION_DAYS,
    DeadlineCalculator,
    calculate_preparation_time,
)
from lexlink.deadlines.escalation import EscalationPolicy
from lexlink.deadlines.rules import FEDERAL_HOLIDAYS_2025, RuleRepository
from lexlink.ids import IdProvider
from lexlink.models import DeadlineAlert, DeadlineCalculation, DeadlineRule, Escalation, utcnow


class DeadlineEngine:
    """Jurisdiction-aware deadline computation and alert cascade."""

    def __init__(
        self,
        rules: RuleRepository | None = None,
        holidays: Collection[date] = FEDERAL_HOLIDAYS_2025,
        id_provider: IdProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
        recipients: Mapping[str, str] | None = None,
        default_preparation_days: int = DEFAULT_PREPARATION_DAYS,
    ) -> None:
        self.rules = rules or RuleRepository()
        self.calculator = DeadlineCalculator(self.rules, holidays=holidays, clock=clock)
        self.alerts = AlertGenerator(id_provider=id_provider, clock=clock)
        self.escalation = EscalationPolicy(recipients)
        self.default_preparation_days = default_preparation_days

    def calculate_deadline(
        self,
        start_date: date | datetime,
        jurisdiction: str,
        rule_type: str,
        preparation_days: int | None = None,
        case_id: str | None = None,
        task_id: str | None = None,
    ) -> DeadlineCalculation:
        if preparation_days is None:
            preparation_days = self.default_preparation_days
        return self.calculator.calculate(
            start_date,
            jurisdiction,
            rule_type,
            preparation_days=preparation_days,
            case_id=case_id,
            task_id=task_id,
        )

    def generate_alerts(self, calculations: Iterable[DeadlineCalculation]) -> list[DeadlineAlert]:
        return self.alerts.generate(calculations)

    def escalate_deadline(self, alert: DeadlineAlert) -> Escalation:
        return self.escalation.escalate(alert)

    def calculate_preparation_time(self, rule_type: str, complexity: str = "moderate") -> int:
        return calculate_preparation_time(rule_type, complexity)

    def get_available_jurisdictions(self) -> list[str]:
        return self.rules.jurisdictions()

    def get_jurisdiction_rules(self, jurisdiction: str) -> list[DeadlineRule]:
        return self.rules.rules_for(jurisdiction)

    def add_custom_rule(self, jurisdiction: str, rule: DeadlineRule) -> None:
        self.rules.add(jurisdiction, rule)
