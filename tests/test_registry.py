"""Tests for the risk registry."""

import json

import pytest

from vaultward.core.models import RiskCategory
from vaultward.exceptions import RegistryError
from vaultward.tools.registry import DEFAULT_DESTRUCTIVE_TOOLS, RiskRegistry


class TestDefaultRegistry:
    def test_default_destructive_tools(self):
        registry = RiskRegistry.default()
        assert registry.destructive_tools == sorted(DEFAULT_DESTRUCTIVE_TOOLS)

    @pytest.mark.parametrize("name", DEFAULT_DESTRUCTIVE_TOOLS)
    def test_vault_mutations_are_destructive(self, name):
        assert RiskRegistry.default().classify(name) == RiskCategory.DESTRUCTIVE

    def test_unknown_tool_is_benign(self):
        registry = RiskRegistry.default()
        assert registry.classify("obsidian_search") == RiskCategory.BENIGN
        assert registry.get("obsidian_search") is None
        assert registry.is_destructive("obsidian_search") is False


class TestRegistration:
    def test_register_and_classify(self):
        registry = RiskRegistry()
        registry.register("obsidian_list_directory", RiskCategory.BENIGN)
        assert registry.get("obsidian_list_directory") == RiskCategory.BENIGN
        assert "obsidian_list_directory" in registry
        assert len(registry) == 1

    def test_string_category_case_insensitive(self):
        registry = RiskRegistry({"obsidian_append_content": "Destructive"})
        assert registry.is_destructive("obsidian_append_content")

    def test_duplicate_requires_replace(self):
        registry = RiskRegistry({"tool": "benign"})
        with pytest.raises(ValueError):
            registry.register("tool", RiskCategory.DESTRUCTIVE)
        registry.register("tool", RiskCategory.DESTRUCTIVE, replace=True)
        assert registry.is_destructive("tool")

    def test_invalid_category(self):
        with pytest.raises(RegistryError):
            RiskRegistry({"tool": "dangerous"})

    def test_empty_name(self):
        with pytest.raises(RegistryError):
            RiskRegistry().register("", RiskCategory.BENIGN)

    def test_update_overrides(self):
        registry = RiskRegistry.default()
        registry.update({"obsidian_move_file": "benign"})
        assert not registry.is_destructive("obsidian_move_file")

    def test_from_lists_destructive_wins(self):
        registry = RiskRegistry.from_lists(destructive=["a"], benign=["a", "b"])
        assert registry.is_destructive("a")
        assert registry.benign_tools == ["b"]

    def test_to_dict(self):
        registry = RiskRegistry.from_lists(destructive=["x"], benign=["y"])
        assert registry.to_dict() == {"x": "destructive", "y": "benign"}


class TestLoad:
    def test_load_json_file(self, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({"obsidian_delete_file": "destructive", "obsidian_search": "benign"}))
        registry = RiskRegistry.load(path)
        assert registry.is_destructive("obsidian_delete_file")
        assert registry.benign_tools == ["obsidian_search"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(RegistryError, match="not found"):
            RiskRegistry.load(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(RegistryError, match="not valid JSON"):
            RiskRegistry.load(path)

    def test_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(RegistryError, match="JSON object"):
            RiskRegistry.load(path)
