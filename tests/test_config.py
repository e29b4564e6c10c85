"""Tests for environment-driven settings."""

import json

import pytest
from pydantic import ValidationError

from vaultward.config import VaultWardSettings
from vaultward.core.models import RiskCategory
from vaultward.exceptions import RegistryError
from vaultward.tools.registry import DEFAULT_DESTRUCTIVE_TOOLS


class TestDefaults:
    def test_empty_environment(self):
        settings = VaultWardSettings.from_env({})
        assert settings.reflection_provider == "claude"
        assert settings.reflection_timeout == 10.0
        assert settings.confirm_timeout == 60.0
        assert settings.destructive_tools == list(DEFAULT_DESTRUCTIVE_TOOLS)
        assert settings.benign_tools == []
        assert settings.log_level == "INFO"
        assert settings.log_json is False


class TestFromEnv:
    def test_reads_prefixed_variables(self):
        settings = VaultWardSettings.from_env({
            "VAULTWARD_REFLECTION_PROVIDER": "OpenRouter",
            "VAULTWARD_REFLECTION_MODEL": "google/gemini-2.5-flash",
            "VAULTWARD_REFLECTION_TIMEOUT": "2.5",
            "VAULTWARD_LOG_LEVEL": "debug",
            "VAULTWARD_LOG_JSON": "true",
        })
        assert settings.reflection_provider == "openrouter"
        assert settings.reflection_model == "google/gemini-2.5-flash"
        assert settings.reflection_timeout == 2.5
        assert settings.log_level == "DEBUG"
        assert settings.log_json is True

    def test_tool_lists_split_on_commas(self):
        settings = VaultWardSettings.from_env({
            "VAULTWARD_DESTRUCTIVE_TOOLS": "obsidian_delete_file, custom_purge ,,",
            "VAULTWARD_BENIGN_TOOLS": "obsidian_search",
        })
        assert settings.destructive_tools == ["obsidian_delete_file", "custom_purge"]
        assert settings.benign_tools == ["obsidian_search"]

    def test_empty_values_keep_defaults(self):
        settings = VaultWardSettings.from_env({"VAULTWARD_LOG_JSON": "", "VAULTWARD_REFLECTION_TIMEOUT": " "})
        assert settings.log_json is False
        assert settings.reflection_timeout == 10.0

    def test_empty_list_disables_defaults(self):
        settings = VaultWardSettings.from_env({"VAULTWARD_DESTRUCTIVE_TOOLS": ""})
        assert settings.destructive_tools == []

    def test_unrelated_variables_ignored(self):
        settings = VaultWardSettings.from_env({"REFLECTION_TIMEOUT": "99", "PATH": "/usr/bin"})
        assert settings.reflection_timeout == 10.0


class TestValidation:
    def test_unknown_provider(self):
        with pytest.raises(ValidationError):
            VaultWardSettings.from_env({"VAULTWARD_REFLECTION_PROVIDER": "mystery"})

    def test_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            VaultWardSettings.from_env({"VAULTWARD_CONFIRM_TIMEOUT": "0"})

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            VaultWardSettings(log_level="LOUD")


class TestBuildRegistry:
    def test_from_lists(self):
        settings = VaultWardSettings(destructive_tools=["purge"], benign_tools=["search"])
        registry = settings.build_registry()
        assert registry.classify("purge") == RiskCategory.DESTRUCTIVE
        assert registry.classify("search") == RiskCategory.BENIGN
        assert "obsidian_delete_file" not in registry

    def test_registry_file_overrides_lists(self, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({"obsidian_move_file": "benign", "archive_note": "destructive"}))
        settings = VaultWardSettings(registry_file=str(path))

        registry = settings.build_registry()

        assert registry.classify("obsidian_move_file") == RiskCategory.BENIGN
        assert registry.classify("archive_note") == RiskCategory.DESTRUCTIVE
        assert registry.classify("obsidian_delete_file") == RiskCategory.DESTRUCTIVE

    def test_missing_registry_file(self, tmp_path):
        settings = VaultWardSettings(registry_file=str(tmp_path / "nope.json"))
        with pytest.raises(RegistryError):
            settings.build_registry()
