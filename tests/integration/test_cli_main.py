#!/usr/bin/env python3
"""
Integration tests for CLI Main Entry Point

Tests end-to-end CLI command execution with real command invocation.
"""

import pytest
from click.testing import CliRunner

from reconciler import __version__
from reconciler.cli.main import main


@pytest.mark.integration
class TestCLIMainIntegration:
    """Test main CLI entry point with real command execution."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_command_lists_all_subcommands(self):
        result = self.runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Order Reconciler" in result.output
        for command in ["match", "data", "config", "version"]:
            assert command in result.output

    def test_version_command_shows_version_info(self):
        result = self.runner.invoke(main, ["version"])

        assert result.exit_code == 0
        assert f"Order Reconciler v{__version__}" in result.output
        assert "Author:" in result.output

    def test_config_command_shows_configuration(self, tmp_path):
        result = self.runner.invoke(main, ["config"])

        assert result.exit_code == 0
        assert "Current Configuration:" in result.output
        assert "Environment: test" in result.output
        assert f"Data Directory: {tmp_path / 'data'}" in result.output
        assert "Records File:" in result.output
        assert "Match Profile: strict" in result.output
        assert "Match Threshold: 0.5" in result.output
        assert "Date Window (days): 60" in result.output
        assert "Log Level: INFO" in result.output

    def test_config_reflects_environment_overrides(self):
        result = self.runner.invoke(main, ["config"], env={"MATCH_PROFILE": "name-only", "MATCH_THRESHOLD": "0.7"})

        assert result.exit_code == 0
        assert "Match Profile: name-only" in result.output
        assert "Match Threshold: 0.7" in result.output

    def test_invalid_configuration_is_reported(self):
        result = self.runner.invoke(main, ["config"], env={"MATCH_THRESHOLD": "high"})

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_command_shows_error(self):
        result = self.runner.invoke(main, ["invalid-command"])

        assert result.exit_code != 0
        assert "No such command" in result.output

    def test_verbose_flag_enables_verbose_output(self):
        result = self.runner.invoke(main, ["--verbose", "config"])

        assert result.exit_code == 0
        assert "Data directory:" in result.output
        assert "Current Configuration:" in result.output

    def test_debug_flag_sets_log_level(self):
        # env= makes the runner restore LOG_LEVEL after the invocation
        result = self.runner.invoke(main, ["--debug", "config"], env={"LOG_LEVEL": "INFO"})

        assert result.exit_code == 0
        assert "Debug logging enabled" in result.output
        assert "Log Level: DEBUG" in result.output

    def test_config_env_override_changes_environment(self):
        result = self.runner.invoke(main, ["--config-env", "test", "config"], env={"RECONCILER_ENV": "test"})

        assert result.exit_code == 0
        assert "Environment: test" in result.output

    def test_config_env_rejects_unknown_environment(self):
        result = self.runner.invoke(main, ["--config-env", "staging", "config"])

        assert result.exit_code == 2
        assert "staging" in result.output

    @pytest.mark.parametrize("subcommand", ["match", "data"])
    def test_subcommand_help_accessible(self, subcommand):
        result = self.runner.invoke(main, [subcommand, "--help"])

        assert result.exit_code == 0
        assert "Commands:" in result.output
