from datetime import date

import pytest
from rich.console import Console
from typer.testing import CliRunner

import cli
from weekly_reminders import crud
from weekly_reminders.crud.settings import SCRAPING_PASSWORD_KEY
from weekly_reminders.generator import generate_mock_artifact
from weekly_reminders.recorder import IngestionRecorder

runner = CliRunner()


@pytest.fixture
def cli_db(db, monkeypatch):
    monkeypatch.setattr(cli, "SessionLocal", lambda: db)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    monkeypatch.setattr(cli, "console", Console(width=200))
    return db


def test_week_info(cli_db) -> None:
    result = runner.invoke(cli.app, ["week-info"])
    assert result.exit_code == 0
    assert "Mailing week" in result.output


def test_password_is_masked(cli_db) -> None:
    assert runner.invoke(cli.app, ["set-setting", SCRAPING_PASSWORD_KEY, "hunter2"]).exit_code == 0
    assert crud.get_setting(cli_db, SCRAPING_PASSWORD_KEY) == "hunter2"

    result = runner.invoke(cli.app, ["settings"])
    assert "hunter2" not in result.output
    assert "********" in result.output


def test_reminders_for_week(cli_db, year_group) -> None:
    week = date(2026, 3, 2)
    IngestionRecorder(cli_db).replace_artifacts(year_group.id, week, generate_mock_artifact(week, "Year 1"))

    result = runner.invoke(cli.app, ["reminders", "--group", "year 1", "--week", "2026-03-04"])

    assert result.exit_code == 0
    assert "Monday reminder for Year 1" in result.output


def test_unknown_group_exits_with_error(cli_db) -> None:
    result = runner.invoke(cli.app, ["overview", "--group", "Year 9"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_generate_requires_target(cli_db) -> None:
    assert runner.invoke(cli.app, ["generate"]).exit_code == 1
