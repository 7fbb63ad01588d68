"""Deadline calculator: business-day date arithmetic and the alert cascade."""

import math
from collections.abc import Callable, Collection
from datetime import date, datetime, timedelta

import structlog

from lexlink.deadlines.rules import FEDERAL_HOLIDAYS_2025, RuleRepository
from lexlink.models import (
    RULE_TYPES,
    AlertDates,
    DeadlineCalculation,
    DeadlineRule,
    RiskLevel,
    check_choice,
    parse_timestamp,
    utcnow,
)

logger = structlog.get_logger()

DEFAULT_PREPARATION_DAYS = 7

BASE_PREPARATION_DAYS = {
    "filing": 3,
    "response": 7,
    "discovery": 5,
    "trial": 30,
    "appeal": 14,
}
COMPLEXITY_MULTIPLIERS = {
    "simple": 0.7,
    "moderate": 1.0,
    "complex": 1.5,
}


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def next_monday(moment: datetime) -> datetime:
    return moment + timedelta(days=7 - moment.weekday())


def calculate_preparation_time(rule_type: str, complexity: str = "moderate") -> int:
    """Days of preparation a filing of this type usually needs."""
    check_choice(rule_type, RULE_TYPES, "rule type")
    check_choice(complexity, tuple(COMPLEXITY_MULTIPLIERS), "complexity")
    return math.ceil(BASE_PREPARATION_DAYS[rule_type] * COMPLEXITY_MULTIPLIERS[complexity])


class DeadlineCalculator:
    """Applies deadline rules to triggering dates.

    The deadline and alert dates depend only on the inputs; the clock only
    affects the risk level.
    """

    def __init__(
        self,
        rules: RuleRepository | None = None,
        holidays: Collection[date] = FEDERAL_HOLIDAYS_2025,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.rules = rules or RuleRepository()
        self.holidays = frozenset(holidays)
        self._clock = clock

    def calculate(
        self,
        start_date: date | datetime,
        jurisdiction: str,
        rule_type: str,
        preparation_days: int = DEFAULT_PREPARATION_DAYS,
        case_id: str | None = None,
        task_id: str | None = None,
    ) -> DeadlineCalculation:
        """Compute the deadline, alert cascade and risk level for a triggering event.

        Args:
            start_date: Date of the triggering event (service, filing, ...)
            jurisdiction: Jurisdiction name, case-insensitive
            rule_type: One of filing, response, discovery, trial, appeal
            preparation_days: Days of preparation needed before the deadline
            case_id: Optional case the deadline belongs to
            task_id: Optional task the deadline belongs to

        Returns:
            DeadlineCalculation including the rule that was actually applied
        """
        check_choice(rule_type, RULE_TYPES, "rule type")
        if preparation_days < 0:
            raise ValueError(f"preparation_days must not be negative: {preparation_days}")

        original = parse_timestamp(start_date)
        rule = self.rules.lookup(jurisdiction, rule_type)
        deadline = self.add_qualifying_days(original, rule)

        calculation = DeadlineCalculation(
            original_date=original,
            deadline=deadline,
            preparation_time=preparation_days,
            alert_dates=self.alert_dates(deadline, preparation_days),
            jurisdiction=jurisdiction,
            rule_applied=rule,
            risk_level=self.risk_level(deadline, preparation_days),
            case_id=case_id,
            task_id=task_id,
        )
        logger.info(
            "Deadline calculated",
            jurisdiction=jurisdiction,
            rule_id=rule.id,
            start=original.date().isoformat(),
            deadline=deadline.date().isoformat(),
            risk_level=calculation.risk_level,
        )
        return calculation

    def add_qualifying_days(self, start: datetime, rule: DeadlineRule) -> datetime:
        """Advance from start by the rule's base days, skipping excluded days."""
        deadline = start
        counted = 0
        while counted < rule.base_days:
            deadline += timedelta(days=1)
            if rule.exclude_weekends and is_weekend(deadline):
                continue
            if rule.exclude_holidays and self.is_holiday(deadline):
                continue
            counted += 1

        if rule.business_days_only and is_weekend(deadline):
            deadline = next_monday(deadline)
        return deadline

    def is_holiday(self, moment: date) -> bool:
        day = moment.date() if isinstance(moment, datetime) else moment
        return day in self.holidays

    @staticmethod
    def alert_dates(deadline: datetime, preparation_days: int) -> AlertDates:
        preparation_start = deadline - timedelta(days=preparation_days)
        return AlertDates(
            warning90=deadline - timedelta(days=90),
            warning30=deadline - timedelta(days=30),
            # a week before preparation is meant to start
            warning7=preparation_start - timedelta(days=7),
            warning24h=deadline - timedelta(days=1),
        )

    def risk_level(self, deadline: datetime, preparation_days: int) -> RiskLevel:
        days_remaining = math.ceil((deadline - self._clock()).total_seconds() / 86400)
        if days_remaining <= 1:
            return "critical"
        if days_remaining <= 7:
            return "high"
        if days_remaining <= preparation_days + 7:
            return "medium"
        return "low"
