"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from gotask import config as config_module
from gotask.cli import main
from gotask.config import Session


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config" / "gotask.conf")
    monkeypatch.setattr(config_module, "SESSION_FILE", tmp_path / "config" / ".session.json")
    monkeypatch.setattr(config_module, "DATA_DIR", tmp_path / "data")
    return tmp_path


@pytest.fixture
def runner(home):
    return CliRunner()


def added_id(result) -> str:
    # "Added <id8> on YYYY-MM-DD"
    return result.output.split()[1]


class TestWeek:
    def test_first_run_shows_week_and_tutorial(self, runner):
        result = runner.invoke(main, ["week"])
        assert result.exit_code == 0
        assert "### Segunda" in result.output
        assert "### Domingo" in result.output
        assert "Esta é uma tarefa de exemplo!" in result.output

    def test_json(self, runner):
        result = runner.invoke(main, ["week", "--json"])
        assert result.exit_code == 0
        blocks = json.loads(result.output)
        assert [b["type"] for b in blocks[:7]] == ["weekday"] * 7

    def test_future_section(self, runner):
        runner.invoke(main, ["add", "Far away", "--date", "2999-01-01"])
        result = runner.invoke(main, ["week"])
        assert "=== Tarefas Futuras ===" in result.output
        assert "### 01/01/2999" in result.output
        assert "Far away" in result.output


class TestTaskCommands:
    def test_add_then_list(self, runner, home):
        result = runner.invoke(main, ["add", "Buy milk", "--important"])
        assert result.exit_code == 0
        assert result.output.startswith("Added ")
        assert "Buy milk" in runner.invoke(main, ["week"]).output
        assert (home / "data" / "tasks").exists()

    def test_add_in_the_past_fails(self, runner):
        result = runner.invoke(main, ["add", "Too late", "--date", "2000-01-01"])
        assert result.exit_code == 1
        assert "Cannot add tasks to dates before the current week." in result.output

    def test_done_and_pin(self, runner):
        task_id = added_id(runner.invoke(main, ["add", "Chores"]))
        assert "[x]" in runner.invoke(main, ["done", task_id]).output
        assert "^" in runner.invoke(main, ["pin", task_id]).output

    def test_edit(self, runner):
        task_id = added_id(runner.invoke(main, ["add", "Draft"]))
        result = runner.invoke(main, ["edit", task_id, "--text", "Final"])
        assert result.exit_code == 0
        assert "Final" in result.output

    def test_edit_without_changes(self, runner):
        result = runner.invoke(main, ["edit", "abc"])
        assert "Nothing to change." in result.output

    def test_rm(self, runner):
        task_id = added_id(runner.invoke(main, ["add", "Temporary"]))
        result = runner.invoke(main, ["rm", task_id])
        assert "Deleted 1 task(s)." in result.output
        assert "Temporary" not in runner.invoke(main, ["week"]).output

    def test_unknown_id(self, runner):
        result = runner.invoke(main, ["done", "nope"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_move(self, runner):
        task_id = added_id(runner.invoke(main, ["add", "Movable"]))
        result = runner.invoke(main, ["move", task_id, "31/12/2999"])
        assert result.exit_code == 0
        assert "### 31/12/2999" in runner.invoke(main, ["week"]).output


class TestTutorialAndSettings:
    def test_tutorial_dismissed_for_good(self, runner, home):
        assert runner.invoke(main, ["tutorial"]).output.strip() == "Tutorial dismissed."
        assert "Esta é uma tarefa de exemplo!" not in runner.invoke(main, ["week"]).output
        assert (home / "data" / "tutorialSeen").read_bytes() == b"true"

    def test_language_switch(self, runner):
        result = runner.invoke(main, ["settings", "--language", "en"])
        assert json.loads(result.output)["language"] == "en"
        assert "### Monday" in runner.invoke(main, ["week"]).output


class TestSession:
    def test_sync_requires_login(self, runner):
        result = runner.invoke(main, ["sync"])
        assert result.exit_code == 1
        assert "Not signed in" in result.output

    def test_logout_clears_tasks(self, runner):
        runner.invoke(main, ["add", "Private"])
        Session(user_id="u1", id_token="t").save()

        result = runner.invoke(main, ["logout"])

        assert result.exit_code == 0
        assert Session.load().current_user_id is None
        assert "Private" not in runner.invoke(main, ["week"]).output
