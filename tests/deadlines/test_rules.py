"""Tests for the deadline rule repository."""

from pathlib import Path

import pytest

from lexlink.deadlines.rules import DEFAULT_RULES, FEDERAL_HOLIDAYS_2025, RuleRepository
from lexlink.models import DeadlineRule


def make_rule(rule_id: str = "tx-answer", jurisdiction: str = "texas", type: str = "response") -> DeadlineRule:
    return DeadlineRule(id=rule_id, name="Texas Answer", jurisdiction=jurisdiction, type=type, base_days=20)


def test_default_jurisdictions() -> None:
    """Test the bundled jurisdictions."""
    assert RuleRepository().jurisdictions() == ["federal", "california", "nevada"]


def test_holiday_calendar() -> None:
    """Test a couple of entries of the bundled holiday calendar."""
    assert len(FEDERAL_HOLIDAYS_2025) == 10
    assert any(day.month == 7 and day.day == 4 for day in FEDERAL_HOLIDAYS_2025)


def test_lookup_by_type() -> None:
    """Test finding the first rule of a type."""
    repo = RuleRepository()
    assert repo.lookup("federal", "response").id == "fed-civil-response"
    assert repo.lookup("california", "discovery").id == "ca-discovery-response"


def test_lookup_is_case_insensitive() -> None:
    """Test that jurisdiction names ignore case."""
    assert RuleRepository().lookup("California", "response").id == "ca-demurrer"


def test_lookup_unknown_jurisdiction_uses_federal() -> None:
    """Test the fallback for jurisdictions without rules."""
    assert RuleRepository().lookup("texas", "response").jurisdiction == "federal"


def test_lookup_unknown_type_uses_first_rule() -> None:
    """Test the fallback when no rule of the requested type exists."""
    assert RuleRepository().lookup("california", "appeal").id == "ca-demurrer"


def test_lookup_without_rules_raises() -> None:
    """Test that an empty repository cannot resolve anything."""
    with pytest.raises(LookupError):
        RuleRepository({}).lookup("federal", "response")


def test_rules_for_unknown_jurisdiction() -> None:
    """Test listing rules for a jurisdiction that has none."""
    assert RuleRepository().rules_for("texas") == []


def test_add_rule() -> None:
    """Test appending a rule under a new jurisdiction."""
    repo = RuleRepository()
    repo.add("Texas", make_rule())

    assert "texas" in repo.jurisdictions()
    assert repo.lookup("texas", "response").id == "tx-answer"


def test_add_rule_leaves_defaults_untouched() -> None:
    """Test that repositories do not share rule lists."""
    repo = RuleRepository()
    repo.add("federal", make_rule(jurisdiction="federal", type="appeal"))

    assert len(repo.rules_for("federal")) == 3
    assert len(DEFAULT_RULES["federal"]) == 2
    assert len(RuleRepository().rules_for("federal")) == 2


def test_load_yaml(tmp_path: Path) -> None:
    """Test loading extra rules from a YAML file."""
    path = tmp_path / "rules.yaml"
    path.write_text(
        "Texas:\n"
        "  - id: tx-answer\n"
        "    name: Texas Answer\n"
        "    type: response\n"
        "    base_days: 20\n"
        "    exclude_holidays: false\n"
        "    citations:\n"
        "      - TRCP 99(b)\n"
    )
    repo = RuleRepository()

    assert repo.load_yaml(path) == 1

    rule = repo.lookup("texas", "response")
    assert rule.jurisdiction == "texas"
    assert rule.base_days == 20
    assert rule.exclude_holidays is False
    assert rule.exclude_weekends is True
    assert rule.citations == ("TRCP 99(b)",)


def test_load_yaml_missing_file(tmp_path: Path) -> None:
    """Test that a missing rules file is reported."""
    with pytest.raises(ValueError, match="Failed to load deadline rules"):
        RuleRepository().load_yaml(tmp_path / "missing.yaml")


def test_load_yaml_not_a_mapping(tmp_path: Path) -> None:
    """Test that the document must map jurisdictions to rules."""
    path = tmp_path / "rules.yaml"
    path.write_text("- id: x\n")
    with pytest.raises(ValueError, match="must map jurisdictions"):
        RuleRepository().load_yaml(path)


def test_load_yaml_invalid_rule(tmp_path: Path) -> None:
    """Test that incomplete rules are reported."""
    path = tmp_path / "rules.yaml"
    path.write_text("texas:\n  - id: tx-answer\n    type: response\n")
    with pytest.raises(ValueError, match="Invalid deadline rule"):
        RuleRepository().load_yaml(path)


@pytest.mark.parametrize(
    "content",
    [
        "federal: 5\n",
        "texas:\n  - id: tx-answer\n    name: Texas Answer\n    type: response\n    base_days: soon\n",
        "texas:\n  - just a string\n",
    ],
)
def test_load_yaml_malformed_entries_name_the_file(tmp_path: Path, content: str) -> None:
    """Test that malformed rule entries are reported with the file path."""
    path = tmp_path / "rules.yaml"
    path.write_text(content)
    with pytest.raises(ValueError, match="rules.yaml"):
        RuleRepository().load_yaml(path)
