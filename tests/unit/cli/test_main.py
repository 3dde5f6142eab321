"""
Unit tests for the depoverride command.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from depoverride.cli.main import main


class TestMainCommand:

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def mock_dotnet(self, fake_tool):
        """Patch DotnetCli so the command talks to the in-memory fake."""
        fake_tool.is_installed = lambda: True
        with patch("depoverride.cli.main.DotnetCli", return_value=fake_tool) as mock:
            yield mock

    def test_tool_missing(self, runner, mock_dotnet, fake_tool, write_config, newtonsoft_rule):
        fake_tool.is_installed = lambda: False
        config = write_config([newtonsoft_rule])

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 1
        assert "dotnet CLI is not installed or not in PATH" in result.output
        assert fake_tool.calls == []

    def test_tool_check_runs_before_config_load(self, runner, mock_dotnet, fake_tool, tmp_path):
        fake_tool.is_installed = lambda: False

        result = runner.invoke(main, ["--config", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "not installed" in result.output
        assert "was not found" not in result.output

    def test_config_not_found(self, runner, mock_dotnet, tmp_path):
        result = runner.invoke(main, ["--config", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "missing.json: config file was not found" in result.output

    def test_config_malformed(self, runner, mock_dotnet, tmp_path):
        config = tmp_path / "depoverride.json"
        config.write_text("{ this is not json")

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 1
        assert "not a valid JSON document" in result.output

    def test_config_from_env(self, runner, mock_dotnet, fake_tool, write_config):
        config = write_config([])

        result = runner.invoke(main, [], env={"DEPOVERRIDE_CONFIG": str(config)})

        assert result.exit_code == 0
        assert "Nothing to do" in result.output

    def test_nothing_to_do(self, runner, mock_dotnet, fake_tool, write_config):
        config = write_config([{"packageId": "Newtonsoft.Json", "newVersion": "13.0.3"}])

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 0
        assert "Config contains no valid overrides. Nothing to do." in result.output
        assert fake_tool.calls == []

    def test_applies_override(self, runner, mock_dotnet, fake_tool, write_config, report_json, newtonsoft_rule):
        fake_tool.reports["App.csproj"] = report_json("App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.1")]})
        config = write_config([newtonsoft_rule])

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "added direct dependency to App.csproj for Newtonsoft.Json:13.0.3 overriding 12.0.1" in result.output
        assert "1 direct dependency added across 1 project(s)" in result.output
        assert fake_tool.calls_named("refresh") == [("refresh", "App.csproj")]
        assert fake_tool.calls_named("set_direct") == [("set_direct", "App.csproj", "Newtonsoft.Json", "13.0.3")]

    def test_no_restore(self, runner, mock_dotnet, fake_tool, write_config, report_json, newtonsoft_rule):
        fake_tool.reports["App.csproj"] = report_json("App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.1")]})
        config = write_config([newtonsoft_rule])

        result = runner.invoke(main, ["--config", str(config), "--no-restore"])

        assert result.exit_code == 0
        assert fake_tool.calls_named("refresh") == []
        assert len(fake_tool.calls_named("set_direct")) == 1

    def test_dry_run(self, runner, mock_dotnet, fake_tool, write_config, report_json, newtonsoft_rule):
        fake_tool.reports["App.csproj"] = report_json("App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.1")]})
        config = write_config([newtonsoft_rule])

        result = runner.invoke(main, ["--config", str(config), "--dry-run"])

        assert result.exit_code == 0
        assert "would add direct dependency" in result.output
        assert "1 direct dependency planned" in result.output
        assert fake_tool.calls_named("set_direct") == []

    def test_skipped_targets_still_succeed(self, runner, mock_dotnet, fake_tool, write_config, report_json, newtonsoft_rule):
        fake_tool.reports["Broken.csproj"] = "not json"
        fake_tool.reports["App.csproj"] = report_json("App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.2")]})
        config = write_config([newtonsoft_rule], project_paths=["Broken.csproj", "App.csproj"])

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 0
        assert "Could not parse package report" in result.output
        assert "1 skipped" in result.output
        assert len(fake_tool.calls_named("set_direct")) == 1

    def test_bracketed_problem_text_still_succeeds(self, runner, mock_dotnet, fake_tool, write_config, report_json, newtonsoft_rule):
        problem = {"project": "/src/Bad/Bad.csproj", "level": "error", "text": "NU1101 [/src/Bad/Bad.csproj]"}
        fake_tool.reports["Bad.csproj"] = report_json("Bad.csproj", problems=[problem])
        fake_tool.reports["App.csproj"] = report_json("[legacy]/App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.1")]})
        config = write_config([newtonsoft_rule], project_paths=["Bad.csproj", "[legacy]/App.csproj"])

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "NU1101 [/src/Bad/Bad.csproj]" in result.output
        assert "[legacy]/App.csproj" in result.output
        assert "1 direct dependency added across 2 project(s), 1 skipped" in result.output

    def test_failed_mutation_reported(self, runner, mock_dotnet, fake_tool, write_config, report_json, newtonsoft_rule):
        fake_tool.reports["App.csproj"] = report_json("App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.1")]})
        fake_tool.failing_packages.add("Newtonsoft.Json")
        config = write_config([newtonsoft_rule])

        result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 0
        assert "Failed to add direct dependency" in result.output
        assert "1 failed" in result.output

    def test_options_reach_dotnet_cli(self, runner, mock_dotnet, write_config):
        config = write_config([])

        runner.invoke(main, ["--config", str(config), "--dotnet", "/usr/share/dotnet/dotnet", "--timeout", "30"])

        mock_dotnet.assert_called_once_with(executable="/usr/share/dotnet/dotnet", timeout=30.0)

    def test_interrupt(self, runner, mock_dotnet, write_config, newtonsoft_rule):
        config = write_config([newtonsoft_rule])

        with patch("depoverride.cli.main.OverrideResolver") as mock_resolver:
            mock_resolver.return_value.run.side_effect = KeyboardInterrupt
            result = runner.invoke(main, ["--config", str(config)])

        assert result.exit_code == 130
        assert "Aborted" in result.output
