"""
Function invocation middleware chain.

Every tool the agent can call is wrapped so that a proposed call passes
through an ordered list of middlewares before the real handler runs:

    invoke(arguments) → mw[0] → mw[1] → ... → handler(**arguments)

A middleware either calls ``call_next()`` to continue, or sets
``context.terminate`` with a ``context.result`` to answer on the
handler's behalf (rejection, pending confirmation). The innermost
continuation retries a failing handler once before giving up.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from vaultward.core.models import ToolInvocationRequest, ToolOutcome
from vaultward.exceptions import ToolExecutionError
from vaultward.logging import get_logger

logger = get_logger("vaultward.middleware")

ToolHandler = Callable[..., Any]
CallNext = Callable[[], Awaitable[ToolOutcome]]

DEFAULT_MAX_ATTEMPTS = 2


@dataclass
class FunctionInvocationContext:
    """Mutable state shared by the middlewares of one invocation."""
    request: ToolInvocationRequest
    terminate: bool = False
    result: ToolOutcome | None = None

    def finish(self, outcome: ToolOutcome) -> ToolOutcome:
        """Short-circuit the chain with ``outcome``."""
        self.result = outcome
        self.terminate = True
        return outcome


class FunctionMiddleware(ABC):
    """One link in the chain."""

    @abstractmethod
    async def invoke(self, context: FunctionInvocationContext, call_next: CallNext) -> ToolOutcome:
        ...


class MiddlewareWrappedTool:
    """A tool handler wrapped by an ordered middleware chain.

    Args:
        name: Tool name as seen by the agent.
        handler: Real implementation, sync or async, called with keyword arguments.
        middlewares: Outermost first.
        max_attempts: Handler attempts before ToolExecutionError.
    """

    def __init__(
        self,
        name: str,
        handler: ToolHandler,
        middlewares: list[FunctionMiddleware] | tuple[FunctionMiddleware, ...] = (),
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if not name:
            raise ValueError("Tool name must not be empty")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.name = name
        self._handler = handler
        self._middlewares = list(middlewares)
        self._max_attempts = max_attempts

    @property
    def handler(self) -> ToolHandler:
        return self._handler

    @property
    def middlewares(self) -> list[FunctionMiddleware]:
        return list(self._middlewares)

    async def invoke(
        self,
        arguments: Mapping[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> ToolOutcome:
        request_fields: dict[str, Any] = {"tool_name": self.name, "arguments": dict(arguments or {})}
        if correlation_id:
            request_fields["correlation_id"] = correlation_id
        context = FunctionInvocationContext(request=ToolInvocationRequest(**request_fields))
        return await self._run(context, 0)

    async def _run(self, context: FunctionInvocationContext, index: int) -> ToolOutcome:
        if context.terminate and context.result is not None:
            return context.result

        if index >= len(self._middlewares):
            outcome = await self._call_handler(context.request)
            context.result = outcome
            return outcome

        middleware = self._middlewares[index]
        outcome = await middleware.invoke(context, lambda: self._run(context, index + 1))
        if context.terminate and context.result is not None:
            return context.result
        return outcome

    async def _call_handler(self, request: ToolInvocationRequest) -> ToolOutcome:
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                result = self._handler(**request.arguments)
                if asyncio.iscoroutine(result):
                    result = await result
                return ToolOutcome.completed(self.name, result)
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Tool '{self.name}' failed (attempt {attempt}/{self._max_attempts}): "
                    f"{type(e).__name__}: {e}",
                    extra={"tool_name": self.name, "correlation_id": request.correlation_id},
                )

        raise ToolExecutionError(
            self.name,
            f"{type(last_error).__name__}: {last_error}",
            attempts=self._max_attempts,
        ) from last_error

    def __repr__(self) -> str:
        names = ", ".join(type(m).__name__ for m in self._middlewares)
        return f"MiddlewareWrappedTool({self.name!r}, middlewares=[{names}])"


def wrap_tool(
    name: str,
    handler: ToolHandler,
    *middlewares: FunctionMiddleware,
) -> MiddlewareWrappedTool | ToolHandler:
    """Wrap one handler. Without middlewares the handler is returned untouched."""
    if not middlewares:
        return handler
    return MiddlewareWrappedTool(name, handler, middlewares)


def wrap_tools(
    tools: Mapping[str, ToolHandler],
    *middlewares: FunctionMiddleware,
) -> dict[str, MiddlewareWrappedTool | ToolHandler]:
    """Wrap every handler in ``tools`` with the same middleware chain."""
    return {name: wrap_tool(name, handler, *middlewares) for name, handler in tools.items()}
