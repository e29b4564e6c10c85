"""Tests for VaultWard CLI.

Commands run in-process through click's CliRunner with an isolated
environment, so no VAULTWARD_* variables leak in from the host.
"""

import json

import pytest
from click.testing import CliRunner

from vaultward import __version__
from vaultward.cli import cli


@pytest.fixture
def runner(monkeypatch):
    for var in (
        "VAULTWARD_DESTRUCTIVE_TOOLS",
        "VAULTWARD_BENIGN_TOOLS",
        "VAULTWARD_REGISTRY_FILE",
        "VAULTWARD_REFLECTION_PROVIDER",
        "VAULTWARD_REFLECTION_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    return CliRunner()


class TestCLIBasic:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("serve", "status", "classify", "registry"):
            assert command in result.output

    def test_status_command(self, runner):
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "VaultWard Status" in result.output
        assert __version__ in result.output
        assert "Dependencies" in result.output

    def test_status_masks_keys(self, runner):
        result = runner.invoke(cli, ["status"], env={"VAULTWARD_REFLECTION_API_KEY": "sk-abcdef123456"})
        assert "sk-a...3456" in result.output
        assert "sk-abcdef123456" not in result.output

    def test_invalid_configuration(self, runner):
        result = runner.invoke(cli, ["status"], env={"VAULTWARD_REFLECTION_PROVIDER": "mystery"})
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output


class TestClassify:
    def test_destructive(self, runner):
        result = runner.invoke(cli, ["classify", "obsidian_delete_file"])
        assert result.exit_code == 0
        assert result.output.strip() == "obsidian_delete_file: destructive"

    def test_unregistered_defaults_to_benign(self, runner):
        result = runner.invoke(cli, ["classify", "obsidian_search"])
        assert "obsidian_search: benign (not registered, defaults to benign)" in result.output

    def test_json_output(self, runner):
        result = runner.invoke(
            cli,
            ["classify", "purge_vault", "--json-output"],
            env={"VAULTWARD_DESTRUCTIVE_TOOLS": "purge_vault"},
        )
        assert json.loads(result.output) == {"tool": "purge_vault", "category": "destructive", "registered": True}


class TestRegistryCommand:
    def test_json_output(self, runner):
        result = runner.invoke(
            cli,
            ["registry", "--json-output"],
            env={"VAULTWARD_DESTRUCTIVE_TOOLS": "obsidian_delete_file", "VAULTWARD_BENIGN_TOOLS": "obsidian_search"},
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"obsidian_delete_file": "destructive", "obsidian_search": "benign"}

    def test_human_output(self, runner):
        result = runner.invoke(cli, ["registry"])
        assert "VaultWard Risk Registry" in result.output
        assert "obsidian_move_file" in result.output
        assert "(none registered)" in result.output

    def test_bad_registry_file(self, runner, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text("[1, 2]")
        result = runner.invoke(cli, ["registry"], env={"VAULTWARD_REGISTRY_FILE": str(path)})
        assert result.exit_code != 0
        assert "must contain a JSON object" in result.output
