"""
Action card construction.

Turns a reflection verdict plus the proposed call into the confirmation
prompt the UI renders. Operation and action type are derived from the
tool name so new vault tools get sensible cards without extra mapping.
"""

from __future__ import annotations

from typing import Any

from vaultward.core.models import (
    ActionCardPayload,
    ActionCardReflection,
    ActionCardStatus,
    PlannedAction,
    ReflectionVerdict,
)

# tool name token → (operation, planned action type)
_OPERATIONS = {
    "delete": ("delete", "Delete"),
    "remove": ("delete", "Delete"),
    "patch": ("patch", "Modify"),
    "move": ("move", "Move"),
    "rename": ("move", "Move"),
}

_PATH_KEYS = ("filepath", "path", "source")


def _argument(arguments: dict[str, Any], key: str) -> str | None:
    value = arguments.get(key)
    return None if value is None else str(value)


class ActionCardBuilder:
    """Builds ActionCardPayload objects for pending operations."""

    @staticmethod
    def operation_for(tool_name: str) -> tuple[str, str]:
        for token in tool_name.lower().replace("-", "_").split("_"):
            if token in _OPERATIONS:
                return _OPERATIONS[token]
        return "modify", "Other"

    @staticmethod
    def source_path(arguments: dict[str, Any]) -> str | None:
        for key in _PATH_KEYS:
            value = _argument(arguments, key)
            if value is not None:
                return value
        return None

    @classmethod
    def build(
        cls,
        verdict: ReflectionVerdict,
        tool_name: str,
        arguments: dict[str, Any],
        correlation_id: str,
    ) -> ActionCardPayload:
        operation, action_type = cls.operation_for(tool_name)
        source = cls.source_path(arguments)
        destination = _argument(arguments, "destination") if operation == "move" else None

        planned = PlannedAction(
            description=verdict.action_description or f"{operation.capitalize()} {source or ''}".strip(),
            source=source or "",
            destination=destination or source,
            type=action_type,
            operation=operation,
            content=_argument(arguments, "content"),
            sort_order=0,
        )

        return ActionCardPayload(
            correlation_id=correlation_id,
            title=f"{operation.capitalize()} Operation",
            planned_actions=[planned],
            status=ActionCardStatus.PENDING,
            operation=operation,
            reflection=ActionCardReflection(
                reasoning=verdict.reason,
                warnings=list(verdict.warnings),
                safety_checks=list(verdict.safety_checks),
                needs_confirmation=verdict.needs_user_confirmation,
            ),
        )
