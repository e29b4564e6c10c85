"""
VaultWard: Safety Gate for Vault-Editing AI Agents

Intercepts tool calls proposed by a conversational agent, asks a second
model to reflect on destructive ones, and parks operations that need a
human decision behind a confirm/cancel handshake.

Usage:
    from vaultward import SafetyPipeline, VaultWardSettings

    pipeline = SafetyPipeline.from_settings(VaultWardSettings.from_env())
    tools = pipeline.wrap_tools({"obsidian_delete_file": delete_file})

    outcome = await tools["obsidian_delete_file"].invoke({"filepath": "notes/todo.md"})
    if outcome.awaiting_confirmation:
        await pipeline.confirm(outcome.action_card.correlation_id)
"""

__version__ = "0.3.0"

from vaultward.config import VaultWardSettings
from vaultward.core.models import (
    ActionCardPayload,
    ActionCardStatus,
    HandshakeResult,
    PendingOperation,
    ReflectionVerdict,
    RiskCategory,
    StreamEvent,
    ToolInvocationRequest,
    ToolOutcome,
)
from vaultward.exceptions import ToolExecutionError, VaultWardError
from vaultward.handshake import ConfirmationHandshake
from vaultward.middleware import MiddlewareWrappedTool, ReflectionMiddleware, wrap_tool, wrap_tools
from vaultward.pipeline import SafetyPipeline
from vaultward.runtime import AgentRuntime
from vaultward.safety.evaluator import ReflectionEvaluator
from vaultward.store.pending import InMemoryPendingOperationStore, PendingOperationStore
from vaultward.streaming import StreamMultiplexer
from vaultward.tools import HandlerToolExecutor, RiskRegistry, ToolExecutor

__all__ = [
    "__version__",
    # Facade
    "SafetyPipeline",
    "VaultWardSettings",
    # Components
    "AgentRuntime",
    "ConfirmationHandshake",
    "HandlerToolExecutor",
    "InMemoryPendingOperationStore",
    "MiddlewareWrappedTool",
    "PendingOperationStore",
    "ReflectionEvaluator",
    "ReflectionMiddleware",
    "RiskRegistry",
    "StreamMultiplexer",
    "ToolExecutor",
    "wrap_tool",
    "wrap_tools",
    # Models
    "ActionCardPayload",
    "ActionCardStatus",
    "HandshakeResult",
    "PendingOperation",
    "ReflectionVerdict",
    "RiskCategory",
    "StreamEvent",
    "ToolInvocationRequest",
    "ToolOutcome",
    # Errors
    "ToolExecutionError",
    "VaultWardError",
]
