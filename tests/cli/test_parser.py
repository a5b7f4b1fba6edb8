"""
Tests for CLI argument parser.
"""

import logging
from unittest.mock import patch

import pytest

from openblock_cli.cli.parser import CLI


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_creation(self):
        cli = CLI()
        assert cli.parser is not None

    def test_no_command_shows_help(self, capsys):
        result = CLI().run([])

        assert result == 1
        captured = capsys.readouterr()
        assert "usage:" in captured.out.lower()

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--version"])

        assert exc_info.value.code == 0
        assert "openblock-cli" in capsys.readouterr().out

    def test_project_root_option(self, tmp_path):
        args = CLI().parse_args(["--project-root", str(tmp_path), "deps"])
        assert args.project_root == tmp_path


class TestCommandParsing:
    def test_deps_defaults(self):
        args = CLI().parse_args(["deps"])

        assert args.command == "deps"
        assert args.registry is None
        assert args.no_merge is False

    def test_deps_options(self):
        args = CLI().parse_args(["deps", "--registry", "https://r", "--no-merge"])

        assert args.registry == "https://r"
        assert args.no_merge is True

    def test_fetch_names(self):
        args = CLI().parse_args(["fetch", "avr-gcc", "esptool"])
        assert args.names == ["avr-gcc", "esptool"]

    def test_fetch_requires_name(self):
        with pytest.raises(SystemExit):
            CLI().parse_args(["fetch"])

    def test_index_refresh(self):
        args = CLI().parse_args(["index", "--refresh"])
        assert args.refresh is True

    def test_config_set(self):
        args = CLI().parse_args(["config", "set", "registry", "https://r"])

        assert (args.action, args.key, args.value) == ("set", "registry", "https://r")

    def test_config_invalid_action(self):
        with pytest.raises(SystemExit):
            CLI().parse_args(["config", "reset"])


class TestDispatch:
    def test_dispatches_to_command_module(self):
        with patch("openblock_cli.cli.commands.fetch.run", return_value=0) as run:
            result = CLI().run(["fetch", "avr-gcc"])

        assert result == 0
        assert run.call_args.args[0].names == ["avr-gcc"]

    def test_dispatches_libraries(self):
        with patch("openblock_cli.cli.commands.libraries.run", return_value=0) as run:
            assert CLI().run(["libraries"]) == 0

        run.assert_called_once()

    def test_command_exception_returns_error(self):
        with patch(
            "openblock_cli.cli.commands.index.run", side_effect=RuntimeError("boom")
        ):
            assert CLI().run(["index"]) == 1

    def test_keyboard_interrupt(self):
        with patch(
            "openblock_cli.cli.commands.index.run", side_effect=KeyboardInterrupt
        ):
            assert CLI().run(["index"]) == 130


class TestLogging:
    @pytest.fixture(autouse=True)
    def _no_dispatch(self):
        with patch("openblock_cli.cli.commands.config.run", return_value=0):
            yield

    def test_verbose(self):
        CLI().run(["--verbose", "config", "list"])
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet(self):
        CLI().run(["--quiet", "config", "list"])
        assert logging.getLogger().level == logging.ERROR

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENBLOCK_LOG_LEVEL", "warning")
        CLI().run(["config", "list"])
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_environment_level(self, monkeypatch):
        monkeypatch.setenv("OPENBLOCK_LOG_LEVEL", "chatty")
        CLI().run(["config", "list"])
        assert logging.getLogger().level == logging.INFO


def test_main_exits_with_run_code(monkeypatch):
    from openblock_cli.cli import parser

    monkeypatch.setattr("sys.argv", ["openblock-cli"])
    with pytest.raises(SystemExit) as exc_info:
        parser.main()

    assert exc_info.value.code == 1
