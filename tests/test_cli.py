"""Tests for the CLI commands."""

from pathlib import Path

import pytest

from lexlink import cli, config_commands, connection_commands, deadline_commands
from lexlink.config import Config
from lexlink.exceptions import NotFoundError


@pytest.fixture
def config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Config:
    """A throwaway config with the graph stored under tmp_path."""
    cfg = Config(config_dir=tmp_path / "local", home=tmp_path / "home")
    cfg.set("storage.path", str(tmp_path / "graph.json"))
    monkeypatch.setattr(cli, "get_config", lambda use_global=False: cfg)
    return cfg


def register_sample(config: Config) -> None:
    cli.register("t1", "task", "Johnson motion research", tags="urgent, motion")
    cli.register("c1", "case", "Johnson v. Smith")


def test_parse_tags() -> None:
    """Test splitting comma separated tags."""
    assert cli.parse_tags(" a, b ,,c ") == ["a", "b", "c"]


def test_register_and_show(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that registered entities are persisted between commands."""
    register_sample(config)
    capsys.readouterr()

    cli.show("t1")

    out = capsys.readouterr().out
    assert "Type: task" in out
    assert "Title: Johnson motion research" in out
    assert "Tags: urgent, motion" in out


def test_register_rejects_unknown_type(config: Config) -> None:
    """Test entity type validation."""
    with pytest.raises(ValueError, match="Unsupported entity type"):
        cli.register("x1", "spaceship", "Nope")


def test_show_missing(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test showing an unknown entity."""
    cli.show("nope")
    assert "Entity nope not found" in capsys.readouterr().out


def test_update(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test updating entity fields."""
    register_sample(config)
    cli.update("t1", status="done")
    capsys.readouterr()

    cli.list_entities(type="task")

    out = capsys.readouterr().out
    assert "Found 1 entity(ies)" in out
    assert "○ t1 (task): Johnson motion research [urgent, motion]" in out


def test_update_missing(config: Config) -> None:
    """Test that updating an unknown entity fails."""
    with pytest.raises(NotFoundError):
        cli.update("nope", title="x")


def test_connection_lifecycle(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test adding, listing, updating and removing a connection."""
    register_sample(config)
    connection_commands.add("t1", "c1", "ghost", type="part_of", strength=0.9)
    out = capsys.readouterr().out
    assert "Entity ghost not found, skipped" in out
    assert "Added 1 connection(s) from t1" in out

    connection_id = cli.get_graph().get_all_connections()[0].id

    connection_commands.list_connections("c1")
    assert f"{connection_id}: t1 --[part_of]--> c1  strength 0.90" in capsys.readouterr().out

    connection_commands.update(connection_id, strength=0.4)
    assert cli.get_graph().get_all_connections()[0].strength == 0.4

    cli.related("c1", depth=1)
    assert "● t1 (task)" in capsys.readouterr().out

    connection_commands.remove(connection_id)
    capsys.readouterr()
    connection_commands.list_connections()
    assert "No connections found" in capsys.readouterr().out


def test_suggest_and_accept(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test keyword suggestions and auto-accept."""
    cli.register("n1", "note", "Johnson deposition transcript summary")
    cli.register("n2", "document", "Johnson deposition transcript summary")
    capsys.readouterr()

    cli.suggest("n1")
    assert "n1 --[related]--> n2  1.00 (auto)" in capsys.readouterr().out

    connection_commands.accept("n1")
    assert "Created 1 connection(s) for n1" in capsys.readouterr().out

    cli.clusters()
    out = capsys.readouterr().out
    assert "Found 1 cluster(s)" in out
    assert "n1, n2" in out


def test_deadline_calc(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the deadline calculation command."""
    deadline_commands.calc("2025-07-01")

    out = capsys.readouterr().out
    assert "Rule: Federal Civil Response (fed-civil-response)" in out
    assert "Deadline: Jul 31, 2025" in out
    assert "Preparation: 7 day(s)" in out
    assert "warning24h: Jul 30, 2025" in out


def test_deadline_calc_uses_configured_preparation(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that the configured preparation time applies."""
    config.set("deadlines.preparation_days", "12")
    deadline_commands.calc("2025-07-01")
    assert "Preparation: 12 day(s)" in capsys.readouterr().out


def test_deadline_alerts_overdue(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test alerts and escalation for a long-passed deadline."""
    config.set("escalation.recipients.primary", "Ana")
    deadline_commands.alerts("2020-01-02", escalate=True)

    out = capsys.readouterr().out
    assert "! [5] overdue: OVERDUE: Federal Civil Response" in out
    assert "-> all to Ana, backup, assistant (critical)" in out


def test_deadline_rules_file(config: Config, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Test that rules from the configured file are available."""
    rules_file = tmp_path / "rules.yaml"
    rules_file.write_text("texas:\n  - id: tx-answer\n    name: Texas Answer\n    type: response\n    base_days: 20\n")
    config.set("deadlines.rules_file", str(rules_file))

    deadline_commands.jurisdictions()
    assert "texas" in capsys.readouterr().out.split()

    deadline_commands.rules("texas")
    assert "tx-answer: Texas Answer [response] 20 day(s)" in capsys.readouterr().out


def test_prep_time(config: Config, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the preparation estimate command."""
    deadline_commands.prep_time("trial", complexity="complex")
    assert "45 day(s)" in capsys.readouterr().out


def test_parse_date_invalid() -> None:
    """Test rejecting malformed dates."""
    with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
        deadline_commands.parse_date("07/01/2025")


def test_config_commands(config: Config, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    """Test the config sub-commands."""
    monkeypatch.setattr(config_commands, "get_config", lambda use_global=False: config)

    config_commands.set("deadlines.preparation_days", "9")
    config_commands.get("deadlines.preparation_days")
    config_commands.unset("deadlines.preparation_days")
    config_commands.get("deadlines.preparation_days")
    config_commands.get("deadlines.rules_file")

    out = capsys.readouterr().out
    assert "Set deadlines.preparation_days = 9 (local)" in out
    assert "deadlines.preparation_days = 9 (local)" in out
    assert "Unset deadlines.preparation_days (local)" in out
    assert "deadlines.preparation_days = 7 (default)" in out
    assert "deadlines.rules_file is not set" in out
    assert config.get("deadlines.preparation_days") == 7


def test_config_set_rejects_bad_integer(config: Config, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that integer settings are validated before saving."""
    monkeypatch.setattr(config_commands, "get_config", lambda use_global=False: config)

    with pytest.raises(ValueError, match="must be an integer"):
        config_commands.set("deadlines.preparation_days", "soon")
    assert config.source("deadlines.preparation_days") == "default"


def test_config_list_with_defaults(
    config: Config, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test listing overrides together with built-in defaults."""
    monkeypatch.setattr(config_commands, "get_config", lambda use_global=False: config)

    config_commands.list_config(defaults=True)

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "deadlines.preparation_days = 7 (default)"
    assert lines[1].startswith("storage.path = ")
    assert lines[1].endswith("(local)")
