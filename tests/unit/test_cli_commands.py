"""Unit tests for the CLI — Typer command registration and basic behavior."""

from __future__ import annotations

import logging

import pytest
from typer.testing import CliRunner

from plusbridge import __version__
from plusbridge.bridge.host import install_bridge
from plusbridge.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "Usage" in result.output or "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "capabilities" in result.output
        assert "errors" in result.output
        assert "version" in result.output


class TestCommands:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_errors_table(self):
        result = runner.invoke(app, ["errors"])
        assert result.exit_code == 0
        assert "environment_unavailable" in result.output
        assert "BridgeTimeoutError" in result.output
        assert "99" in result.output

    def test_capabilities_without_bridge(self):
        result = runner.invoke(
            app, ["capabilities", "--host-module", "plusbridge_no_such_host_module"]
        )
        assert result.exit_code == 0
        assert "native_obj" in result.output
        assert "No native bridge found" in result.output

    def test_capabilities_with_installed_bridge(self, bridge):
        bridge.events = None
        install_bridge(bridge)
        result = runner.invoke(app, ["capabilities"])
        assert result.exit_code == 0
        assert "Yes" in result.output
        assert "No" in result.output
        assert "No native bridge found" not in result.output

    def test_log_level_option(self):
        result = runner.invoke(app, ["--log-level", "DEBUG", "version"])
        assert result.exit_code == 0
        assert logging.getLogger().level == logging.DEBUG
