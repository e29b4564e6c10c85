"""
VaultWard Tool Executors

The tool executor performs the real side effects (file mutations) of a
confirmed operation. The confirmation handshake calls it directly,
outside of any chat turn.

Implementations:
- HandlerToolExecutor: dispatches to registered callables (sync or async)
- NullToolExecutor: placeholder used when no executor is configured
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from vaultward.core.models import ExecutionOutcome
from vaultward.logging import get_logger

logger = get_logger("vaultward.tools")

ToolHandler = Callable[..., Any] | Callable[..., Awaitable[Any]]


class ToolExecutor(ABC):
    """Executes a tool by name with keyword arguments."""

    @abstractmethod
    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> ExecutionOutcome:
        ...


class HandlerToolExecutor(ToolExecutor):
    """Manages tool handler registration and execution."""

    def __init__(self, handlers: dict[str, ToolHandler] | None = None):
        self._handlers: dict[str, ToolHandler] = dict(handlers or {})

    def register(self, name: str, handler: ToolHandler) -> None:
        """Register a handler for a tool name, replacing any previous one."""
        self._handlers[name] = handler

    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> ExecutionOutcome:
        handler = self._handlers.get(tool_name)
        if handler is None:
            return ExecutionOutcome(success=False, message=f"Unknown tool: {tool_name}")

        result = handler(**arguments)
        if asyncio.iscoroutine(result):
            result = await result

        if isinstance(result, ExecutionOutcome):
            return result
        return ExecutionOutcome(
            success=True,
            message=str(result) if result is not None else "Operation completed successfully",
        )

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


class NullToolExecutor(ToolExecutor):
    """Executor used when the deployment has no vault backend wired in."""

    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> ExecutionOutcome:
        logger.warning(
            "No tool executor configured; refusing to execute",
            extra={"tool_name": tool_name},
        )
        return ExecutionOutcome(
            success=False,
            message=f"No tool executor configured; '{tool_name}' was not executed",
        )
