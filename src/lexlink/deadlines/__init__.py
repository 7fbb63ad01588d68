"""Jurisdiction-aware deadline computation and alerting."""

from lexlink.deadlines.engine import DeadlineEngine
from lexlink.deadlines.rules import DEFAULT_RULES, FEDERAL_HOLIDAYS_2025, RuleRepository

__all__ = ["DEFAULT_RULES", "FEDERAL_HOLIDAYS_2025", "DeadlineEngine", "RuleRepository"]
