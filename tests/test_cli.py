"""Tests for the command line interface."""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from formpilot.cli import cli
from formpilot.models.recording import ElementSnapshot, RecordedAction, save_action_log
from formpilot.models.results import AutomationResult, FillResult


class FakeFiller:
    """Stands in for SmartFormFiller inside ``async with``."""

    result = AutomationResult(success=True, url="https://a.com", fill=FillResult(filled=2, total=2))
    calls: list = []

    def __init__(self, config=None):
        self.config = config

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None

    async def automate(self, url, **kwargs):
        FakeFiller.calls.append((url, kwargs))
        return FakeFiller.result


class TestInit:
    def test_creates_config(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init"])
            assert result.exit_code == 0
            data = json.loads(Path("formpilot.json").read_text())
            assert data["navigator"]["max_steps"] == 10

    def test_keeps_existing_config_when_declined(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("formpilot.json").write_text("{}")
            result = runner.invoke(cli, ["init"], input="n\n")
            assert result.exit_code == 0
            assert Path("formpilot.json").read_text() == "{}"


class TestRegenerate:
    def test_regenerates_both_formats(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            save_action_log([
                RecordedAction(
                    type="input", url="https://a.com/signup", value="a@b.com",
                    element=ElementSnapshot(tag="input", type="email", name="email"),
                ),
            ], "recorded-actions.json")
            result = runner.invoke(cli, ["regenerate"])
            assert result.exit_code == 0, result.output
            assert "page.fill" in Path("generated-playwright-script.py").read_text()
            assert "SmartFormFiller" in Path("generated-formpilot-script.py").read_text()

    def test_single_format_to_output(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            save_action_log([RecordedAction(type="click", url="https://a.com", element=ElementSnapshot(tag="a", id="x"))],
                            "log.json")
            result = runner.invoke(cli, ["regenerate", "--actions-file", "log.json", "--format", "playwright",
                                         "-o", "replay.py"])
            assert result.exit_code == 0, result.output
            assert "await page.click('#x')" in Path("replay.py").read_text()
            assert not Path("generated-formpilot-script.py").exists()

    def test_missing_log(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["regenerate", "--actions-file", "missing.json"])
            assert result.exit_code == 1


class TestFill:
    def test_fill_passes_options(self):
        runner = CliRunner()
        FakeFiller.calls = []
        with runner.isolated_filesystem(), patch("formpilot.cli.SmartFormFiller", FakeFiller):
            result = runner.invoke(cli, ["fill", "https://a.com", "--data", '{"email": "me@a.com"}', "--submit"])
        assert result.exit_code == 0, result.output
        url, kwargs = FakeFiller.calls[0]
        assert url == "https://a.com"
        assert kwargs["custom_data"] == {"email": "me@a.com"}
        assert kwargs["submit"] is True

    def test_invalid_data(self):
        runner = CliRunner()
        with runner.isolated_filesystem(), patch("formpilot.cli.SmartFormFiller", FakeFiller):
            result = runner.invoke(cli, ["fill", "https://a.com", "--data", "{not json"])
        assert result.exit_code == 2

    def test_missing_config(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--config", "nope.json", "fill", "https://a.com"])
        assert result.exit_code == 1
