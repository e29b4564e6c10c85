"""
VaultWard Function Invocation Middleware

Wraps agent tools so that every call passes the safety gate:

    tools = wrap_tools({"obsidian_delete_file": delete_file}, ReflectionMiddleware(...))
    outcome = await tools["obsidian_delete_file"].invoke({"filepath": "notes/todo.md"})
"""

from vaultward.middleware.action_card import ActionCardBuilder
from vaultward.middleware.chain import (
    FunctionInvocationContext,
    FunctionMiddleware,
    MiddlewareWrappedTool,
    wrap_tool,
    wrap_tools,
)
from vaultward.middleware.reflection import ReflectionMiddleware

__all__ = [
    "ActionCardBuilder",
    "FunctionInvocationContext",
    "FunctionMiddleware",
    "MiddlewareWrappedTool",
    "ReflectionMiddleware",
    "wrap_tool",
    "wrap_tools",
]
