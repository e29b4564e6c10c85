"""
Agent runtime boundary.

The conversational agent (model, prompts, conversation history, MCP tool
transport) lives outside VaultWard. It only has to expose one turn as an
async stream of raw items, calling tools wrapped by the safety pipeline
and passing their ToolOutcome through as the function result.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from vaultward.core.models import RawStreamItem


@runtime_checkable
class AgentRuntime(Protocol):
    """Produces the raw item stream of one chat turn."""

    def stream(self, message: str, *, thread_id: str | None = None) -> AsyncIterator[RawStreamItem]:
        ...
