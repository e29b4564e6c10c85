"""
VaultWard Risk Registry

Declarative map from tool name to risk category. The reflection
middleware consults it for every proposed call: destructive tools go
through the reflection evaluator, everything else runs immediately.

Tools without an entry are treated as BENIGN. A destructive tool that
nobody registered is therefore executed without confirmation. Keeping
the registry complete is an operational responsibility, not something
the pipeline can detect.

The registry is extended by configuration (a mapping or a JSON file)
rather than by editing matching code:

    {"obsidian_delete_file": "destructive", "obsidian_search": "benign"}
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path

from vaultward.core.models import RiskCategory
from vaultward.exceptions import RegistryError

DEFAULT_DESTRUCTIVE_TOOLS: tuple[str, ...] = (
    "obsidian_delete_file",
    "obsidian_patch_content",
    "obsidian_move_file",
)


class RiskRegistry:
    """Tool name → risk category lookup.

    Registered once at startup and queried per invocation; lookups never
    mutate state, so no coordination is needed between chat turns.
    """

    def __init__(self, entries: Mapping[str, RiskCategory | str] | None = None) -> None:
        self._entries: dict[str, RiskCategory] = {}
        for name, category in (entries or {}).items():
            self.register(name, category)

    def register(
        self,
        name: str,
        category: RiskCategory | str,
        *,
        replace: bool = False,
    ) -> None:
        """Register a tool's risk category.

        Raises ValueError if the tool is already registered and ``replace`` is False.
        """
        if not name:
            raise RegistryError("Tool name must be non-empty")
        if name in self._entries and not replace:
            raise ValueError(f"Tool '{name}' is already registered")
        self._entries[name] = _parse_category(name, category)

    def update(self, entries: Mapping[str, RiskCategory | str]) -> None:
        """Register or override several tools at once."""
        for name, category in entries.items():
            self.register(name, category, replace=True)

    def get(self, name: str) -> RiskCategory | None:
        """Registered category, or None when the tool is unknown."""
        return self._entries.get(name)

    def classify(self, name: str) -> RiskCategory:
        """Category used for routing. Unknown tools are BENIGN."""
        return self._entries.get(name, RiskCategory.BENIGN)

    def is_destructive(self, name: str) -> bool:
        return self.classify(name) == RiskCategory.DESTRUCTIVE

    @property
    def destructive_tools(self) -> list[str]:
        return sorted(n for n, c in self._entries.items() if c == RiskCategory.DESTRUCTIVE)

    @property
    def benign_tools(self) -> list[str]:
        return sorted(n for n, c in self._entries.items() if c == RiskCategory.BENIGN)

    def to_dict(self) -> dict[str, str]:
        return {name: category.value for name, category in sorted(self._entries.items())}

    @classmethod
    def default(cls) -> RiskRegistry:
        """Registry with the built-in vault mutation tools marked destructive."""
        return cls.from_lists(destructive=DEFAULT_DESTRUCTIVE_TOOLS)

    @classmethod
    def from_lists(
        cls,
        destructive: Iterable[str] = (),
        benign: Iterable[str] = (),
    ) -> RiskRegistry:
        registry = cls()
        for name in benign:
            registry.register(name, RiskCategory.BENIGN, replace=True)
        for name in destructive:
            registry.register(name, RiskCategory.DESTRUCTIVE, replace=True)
        return registry

    @classmethod
    def load(cls, path: str | Path) -> RiskRegistry:
        """Load a registry from a JSON object of ``name -> category``."""
        file_path = Path(path)
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise RegistryError(f"Registry file not found: {file_path}") from e
        except json.JSONDecodeError as e:
            raise RegistryError(f"Registry file is not valid JSON: {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise RegistryError(f"Registry file must contain a JSON object: {file_path}")
        return cls(data)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries


def _parse_category(name: str, category: RiskCategory | str) -> RiskCategory:
    if isinstance(category, RiskCategory):
        return category
    try:
        return RiskCategory(str(category).strip().lower())
    except ValueError as e:
        raise RegistryError(
            f"Unknown risk category '{category}' for tool '{name}'. "
            f"Expected one of: {', '.join(c.value for c in RiskCategory)}"
        ) from e
