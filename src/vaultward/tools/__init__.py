"""
VaultWard Tool Classification and Execution

Every tool call proposed by the agent is classified by the RiskRegistry
before the middleware chain decides whether it runs, is rejected, or
waits for human confirmation:

    Agent → tool call → ReflectionMiddleware → RiskRegistry → (Evaluator) → Execute

Components:
- RiskRegistry: declarative tool name → risk category map
- ToolExecutor: interface used by the confirmation handshake
- HandlerToolExecutor / NullToolExecutor: executor implementations
"""

from vaultward.tools.executor import HandlerToolExecutor, NullToolExecutor, ToolExecutor
from vaultward.tools.registry import DEFAULT_DESTRUCTIVE_TOOLS, RiskRegistry

__all__ = [
    "DEFAULT_DESTRUCTIVE_TOOLS",
    "HandlerToolExecutor",
    "NullToolExecutor",
    "RiskRegistry",
    "ToolExecutor",
]
