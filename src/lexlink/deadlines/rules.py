"""Deadline rule repository: jurisdiction x filing-type procedural rules."""

import threading
from datetime import date
from pathlib import Path

import structlog
import yaml

from lexlink.models import DeadlineRule

logger = structlog.get_logger()

DEFAULT_JURISDICTION = "federal"

# Placeholder calendar: US federal holidays for 2025 only.
FEDERAL_HOLIDAYS_2025 = frozenset(
    {
        date(2025, 1, 1),  # New Year's Day
        date(2025, 1, 20),  # Martin Luther King Jr. Day
        date(2025, 2, 17),  # Presidents Day
        date(2025, 5, 26),  # Memorial Day
        date(2025, 7, 4),  # Independence Day
        date(2025, 9, 1),  # Labor Day
        date(2025, 10, 13),  # Columbus Day
        date(2025, 11, 11),  # Veterans Day
        date(2025, 11, 27),  # Thanksgiving
        date(2025, 12, 25),  # Christmas
    }
)

DEFAULT_RULES: dict[str, list[DeadlineRule]] = {
    "federal": [
        DeadlineRule(
            id="fed-civil-response",
            name="Federal Civil Response",
            jurisdiction="federal",
            type="response",
            base_days=21,
            citations=("Rule 12(a)(1)(A) - 21 days after service",),
        ),
        DeadlineRule(
            id="fed-summary-judgment",
            name="Federal Summary Judgment Response",
            jurisdiction="federal",
            type="response",
            base_days=21,
            citations=("Rule 56(c) - 21 days after motion served",),
        ),
    ],
    "california": [
        DeadlineRule(
            id="ca-demurrer",
            name="California Demurrer Response",
            jurisdiction="california",
            type="response",
            base_days=30,
            citations=("CCP § 430.40 - 30 days after service",),
        ),
        DeadlineRule(
            id="ca-discovery-response",
            name="California Discovery Response",
            jurisdiction="california",
            type="discovery",
            base_days=30,
            citations=("CCP § 2030.260 - 30 days after service",),
        ),
    ],
    "nevada": [
        DeadlineRule(
            id="nv-answer",
            name="Nevada Answer to Complaint",
            jurisdiction="nevada",
            type="response",
            base_days=21,
            citations=("NRCP 12(a) - 21 days after service",),
        ),
    ],
}


class RuleRepository:
    """Ordered deadline rules per jurisdiction. Rules can be appended, never removed.

    Jurisdiction names are case-insensitive.
    """

    def __init__(self, rules: dict[str, list[DeadlineRule]] | None = None) -> None:
        source = DEFAULT_RULES if rules is None else rules
        self._rules: dict[str, list[DeadlineRule]] = {
            jurisdiction.lower(): list(jurisdiction_rules) for jurisdiction, jurisdiction_rules in source.items()
        }
        self._lock = threading.Lock()

    def jurisdictions(self) -> list[str]:
        return list(self._rules)

    def rules_for(self, jurisdiction: str) -> list[DeadlineRule]:
        """Rules defined for a jurisdiction, or an empty list if it is unknown."""
        return list(self._rules.get(jurisdiction.lower(), ()))

    def lookup(self, jurisdiction: str, rule_type: str) -> DeadlineRule:
        """Find the rule for a jurisdiction and filing type.

        Unknown jurisdictions use the federal rules. If no rule of the
        requested type exists, the jurisdiction's first rule applies.

        Raises:
            LookupError: If the resolved jurisdiction has no rules at all
        """
        key = jurisdiction.lower()
        rules = self._rules.get(key)
        if rules is None:
            logger.warning("Unknown jurisdiction, using default rules", jurisdiction=jurisdiction)
            key = DEFAULT_JURISDICTION
            rules = self._rules.get(key)
        if not rules:
            raise LookupError(f"No deadline rules defined for jurisdiction '{key}'")

        for rule in rules:
            if rule.type == rule_type:
                return rule

        logger.warning(
            "No rule for filing type, using first rule of jurisdiction",
            jurisdiction=key,
            requested_type=rule_type,
            rule_id=rules[0].id,
        )
        return rules[0]

    def add(self, jurisdiction: str, rule: DeadlineRule) -> None:
        """Append a rule under a jurisdiction, creating the jurisdiction if needed."""
        key = jurisdiction.lower()
        with self._lock:
            self._rules.setdefault(key, []).append(rule)
        logger.info("Deadline rule added", jurisdiction=key, rule_id=rule.id, type=rule.type)

    def load_yaml(self, path: str | Path) -> int:
        """Append rules from a YAML file shaped ``{jurisdiction: [rule, ...]}``.

        Returns:
            Number of rules added
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load deadline rules", path=str(path), error=str(e))
            raise ValueError(f"Failed to load deadline rules from {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Deadline rules file {path} must map jurisdictions to rule lists")

        count = 0
        for jurisdiction, entries in data.items():
            if entries is None:
                continue
            if not isinstance(entries, list):
                raise ValueError(f"Deadline rules under '{jurisdiction}' in {path} must be a list")
            for entry in entries:
                try:
                    rule = DeadlineRule.from_dict(entry, jurisdiction=str(jurisdiction))
                except (KeyError, TypeError, ValueError) as e:
                    raise ValueError(f"Invalid deadline rule in {path} under '{jurisdiction}': {e}") from e
                self.add(str(jurisdiction), rule)
                count += 1
        logger.info("Deadline rules loaded", path=str(path), count=count)
        return count
