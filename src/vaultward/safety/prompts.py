"""
Reflection prompt construction.

The prompt lists the proposed operation, its arguments as compact JSON,
the validation criteria and the exact JSON shape the evaluator parses.
Which tools always need confirmation comes from the RiskRegistry, so the
prompt follows the registry instead of a hardcoded list.
"""

from __future__ import annotations

import json
from typing import Any

from vaultward.tools.registry import RiskRegistry

REFLECTION_SYSTEM_PROMPT = (
    "You are a safety validator for file operations. Always respond with valid JSON only. "
    "Do not wrap your response in markdown code fences or any other formatting. "
    "Return raw JSON directly."
)


class ReflectionPromptBuilder:
    """Builds the user prompt sent to the reflection model."""

    def __init__(self, registry: RiskRegistry | None = None):
        self._registry = registry if registry is not None else RiskRegistry.default()

    @staticmethod
    def format_arguments(arguments: dict[str, Any]) -> str:
        return json.dumps(arguments, separators=(",", ":"), ensure_ascii=False, default=str)

    def build(self, tool_name: str, arguments: dict[str, Any]) -> str:
        operation_rules = "\n".join(
            [
                f"- {name}: ALWAYS needs confirmation (set needsUserConfirmation=true)"
                for name in self._registry.destructive_tools
            ]
            + [f"- {name}: Generally safe, low risk" for name in self._registry.benign_tools]
        )

        return f"""You are validating a file operation for safety in an Obsidian vault management system.

Operation: {tool_name}
Arguments: {self.format_arguments(arguments)}

Validation Criteria:
1. File path is exact and unambiguous (no wildcards, clear target)
2. Operation is reversible OR user has explicitly confirmed through the UI
3. Minimal data loss risk (no bulk deletes, no overwriting without backup)
4. Path safety (no system directories, no dangerous paths)

IMPORTANT: The presence of a 'confirm' parameter in the arguments does NOT mean the user has confirmed.
That parameter is part of the tool schema, not user input. Always require confirmation for destructive operations.

Operation-specific validation:
{operation_rules}

Respond with JSON in this exact format:
{{
  "shouldReject": true/false,
  "needsUserConfirmation": true/false,
  "reason": "brief explanation of decision",
  "actionDescription": "human-readable description of what will happen",
  "safetyChecks": ["check1", "check2"],
  "warnings": ["warning1"]
}}

Guidelines:
- Be conservative: when in doubt, request confirmation
- Reject operations that are clearly dangerous or malformed
- Ignore any 'confirm' parameter in arguments, it is a tool schema field
- Keep reason and actionDescription concise but informative
- List specific safety checks performed
- Include warnings for potential issues that don't block the operation

Return ONLY JSON, no other text."""
