"""Tests for the click command line."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from taskdeck import __version__
from taskdeck.__main__ import cli
from taskdeck.config import DEFAULT_API_URL, TaskdeckConfig
from taskdeck.paths import get_config_path

pytestmark = pytest.mark.integration


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestRoot:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == f"taskdeck {__version__}"

    def test_no_command_prints_help(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "board" in result.output
        assert "config" in result.output


class TestConfigCommands:
    def test_config_path(self, runner):
        result = runner.invoke(cli, ["config", "path"])
        assert result.exit_code == 0
        assert result.output.strip() == str(get_config_path())

    def test_config_show_redacts_token(self, runner, config_file):
        config_file.write_text('[api]\nbase_url = "http://api.test"\ntoken = "hunter2"\n')
        result = runner.invoke(cli, ["config", "show", "--config", str(config_file)])
        assert result.exit_code == 0
        assert 'base_url = "http://api.test"' in result.output
        assert "hunter2" not in result.output
        assert "********" in result.output

    def test_invalid_config_is_reported(self, runner, config_file):
        config_file.write_text("[board]\nfast_poll_seconds = 0\n")
        result = runner.invoke(cli, ["config", "show", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_config_init_writes_starter_file(self, runner, config_file):
        result = runner.invoke(
            cli,
            ["config", "init", "--config", str(config_file), "--api-url", "http://api.test/"],
        )
        assert result.exit_code == 0, result.output
        assert result.output.strip() == f"Wrote {config_file}"

        written = TaskdeckConfig.load(config_file)
        assert written.api.base_url == "http://api.test"
        assert written.board.serialize_moves is True
        assert written.ui.last_view == "board"

    def test_config_init_keeps_existing_file(self, runner, config_file):
        config_file.write_text('[api]\nbase_url = "http://mine:1"\n')
        result = runner.invoke(cli, ["config", "init", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert TaskdeckConfig.load(config_file).api.base_url == "http://mine:1"

        forced = runner.invoke(cli, ["config", "init", "--config", str(config_file), "--force"])
        assert forced.exit_code == 0, forced.output
        assert TaskdeckConfig.load(config_file).api.base_url == DEFAULT_API_URL


class TestBoardCommand:
    def test_launches_app_with_overrides(self, runner, config_file, mocker):
        app_cls = mocker.patch("taskdeck.tui.app.TaskdeckApp")
        result = runner.invoke(
            cli,
            [
                "board",
                "p1",
                "--api-url",
                "http://other.test/",
                "--tenant",
                "acme",
                "--config",
                str(config_file),
            ],
        )

        assert result.exit_code == 0, result.output
        config, project_id = app_cls.call_args.args
        assert project_id == "p1"
        assert config.api.base_url == "http://other.test"
        assert config.api.tenant_id == "acme"
        assert app_cls.call_args.kwargs["config_path"] == config_file
        app_cls.return_value.run.assert_called_once_with()


class TestShowCommand:
    def test_prints_sections_in_order(self, runner, httpx_mock):
        httpx_mock.add_response(
            url="http://api.test/api/projects/p1/sections",
            json=[
                {
                    "id": "s1",
                    "name": "To do",
                    "tasks": [
                        {"id": "t1", "title": "Draft", "priority": "high"},
                        {"id": "t2", "title": "Review", "status": "done"},
                    ],
                },
                {"id": "s2", "name": "Done", "tasks": []},
            ],
        )
        result = runner.invoke(cli, ["show", "p1", "--api-url", "http://api.test"])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0] == "To do (2)"
        assert "Draft" in lines[1]
        assert "Review" in lines[2] and "[Done]" in lines[2]
        assert lines[3] == "Done (0)"

    def test_unreachable_api(self, runner, httpx_mock):
        httpx_mock.add_response(
            url="http://api.test/api/projects/p1/sections",
            status_code=503,
        )
        result = runner.invoke(cli, ["show", "p1", "--api-url", "http://api.test"])
        assert result.exit_code == 1
        assert "Could not load board" in result.output
