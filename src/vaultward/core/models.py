"""
VaultWard Core Data Models

All shared types used across the pipeline. This module is the foundation
that every other component imports from. It must have zero internal
dependencies beyond pydantic.

Wire-facing models serialize with camelCase aliases (``by_alias=True``)
and accept either snake_case or camelCase on input.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_correlation_id() -> str:
    """Generate a fresh correlation id for a pending operation."""
    return f"op-{uuid.uuid4().hex}"


class WireModel(BaseModel):
    """Base for models that cross the transport boundary."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


# ─── Enums ───────────────────────────────────────────────────

class RiskCategory(str, Enum):
    """Risk classification of a tool name in the registry."""
    BENIGN = "benign"
    DESTRUCTIVE = "destructive"


class ActionCardStatus(str, Enum):
    """Lifecycle status shown on an action card.

    Only PENDING is produced by the pipeline itself; the other values are
    transient views derived from handshake results.
    """
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"


class OutcomeKind(str, Enum):
    """Tag of a ToolOutcome."""
    COMPLETED = "completed"
    REJECTED = "rejected"
    PENDING_CONFIRMATION = "pending_confirmation"


PENDING_CONFIRMATION_STATUS = "PENDING_CONFIRMATION"


# ─── Invocation & Reflection ─────────────────────────────────

class ToolInvocationRequest(WireModel):
    """A tool call proposed by the agent. Read-only once created."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    correlation_id: str = Field(default_factory=lambda: f"call-{uuid.uuid4().hex}")


class ReflectionVerdict(WireModel):
    """Decision of the reflection evaluator for one proposed tool call."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    should_reject: bool = False
    needs_user_confirmation: bool = False
    reason: str = Field(min_length=1)
    action_description: str | None = None
    safety_checks: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def approved(self) -> bool:
        """True when the call may proceed without a human decision."""
        return not self.should_reject and not self.needs_user_confirmation


class PendingOperation(WireModel):
    """A stored, not-yet-executed tool invocation awaiting a human decision."""

    correlation_id: str
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)
    reflection: ReflectionVerdict | None = None


# ─── Action Cards ────────────────────────────────────────────

class PlannedAction(WireModel):
    """One step shown on an action card."""

    description: str
    source: str = ""
    destination: str | None = None
    type: str = "Other"
    operation: str = "modify"
    content: str | None = None
    sort_order: int = 0


class ActionCardReflection(WireModel):
    """Reflection metadata embedded in an action card."""

    reasoning: str = ""
    warnings: list[str] = Field(default_factory=list)
    safety_checks: list[str] = Field(default_factory=list)
    needs_confirmation: bool = True


class ActionCardPayload(WireModel):
    """Human-readable confirmation prompt derived from a pending operation."""

    correlation_id: str
    title: str
    planned_actions: list[PlannedAction] = Field(default_factory=list)
    status: ActionCardStatus = ActionCardStatus.PENDING
    operation: str = "modify"
    status_message: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    completed_at: datetime | None = None
    reflection: ActionCardReflection = Field(default_factory=ActionCardReflection)

    def with_status(self, status: ActionCardStatus, message: str = "") -> ActionCardPayload:
        """Return a view copy with a new status. The original is unchanged."""
        terminal = status in (
            ActionCardStatus.COMPLETED,
            ActionCardStatus.FAILED,
            ActionCardStatus.CANCELLED,
        )
        return self.model_copy(update={
            "status": status,
            "status_message": message,
            "completed_at": _utcnow() if terminal else None,
        })


# ─── Tool Outcomes ───────────────────────────────────────────

class ToolOutcome(BaseModel):
    """Explicit tagged result of a tool call routed through the middleware chain.

    COMPLETED carries the real handler's return value, REJECTED carries the
    reason, PENDING_CONFIRMATION carries the action card the UI must show.
    """

    kind: OutcomeKind
    tool_name: str = ""
    value: Any = None
    reason: str = ""
    description: str = ""
    warnings: list[str] = Field(default_factory=list)
    action_card: ActionCardPayload | None = None

    @classmethod
    def completed(cls, tool_name: str, value: Any) -> ToolOutcome:
        return cls(kind=OutcomeKind.COMPLETED, tool_name=tool_name, value=value)

    @classmethod
    def rejected(cls, tool_name: str, reason: str) -> ToolOutcome:
        return cls(kind=OutcomeKind.REJECTED, tool_name=tool_name, reason=reason)

    @classmethod
    def pending(
        cls,
        tool_name: str,
        card: ActionCardPayload,
        verdict: ReflectionVerdict,
    ) -> ToolOutcome:
        return cls(
            kind=OutcomeKind.PENDING_CONFIRMATION,
            tool_name=tool_name,
            reason=verdict.reason,
            description=verdict.action_description or "Operation requires confirmation",
            warnings=list(verdict.warnings),
            action_card=card,
        )

    @property
    def awaiting_confirmation(self) -> bool:
        return self.kind == OutcomeKind.PENDING_CONFIRMATION and self.action_card is not None

    def to_payload(self) -> Any:
        """Value forwarded to the agent and to ``tool_call`` result events."""
        if self.kind == OutcomeKind.REJECTED:
            return f"REJECTED: {self.reason}"
        if self.kind == OutcomeKind.PENDING_CONFIRMATION:
            card = self.action_card
            return {
                "status": PENDING_CONFIRMATION_STATUS,
                "correlationId": card.correlation_id if card else None,
                "description": self.description,
                "warnings": list(self.warnings),
                "actionCard": card.to_payload() if card else None,
            }
        return self.value


# ─── Executor & Handshake Results ────────────────────────────

class ExecutionOutcome(BaseModel):
    """Result reported by a tool executor."""
    success: bool
    message: str = ""


class HandshakeResult(BaseModel):
    """Result of a confirm/cancel request against a pending operation."""
    success: bool
    message: str
    tool_name: str | None = None
    found: bool = True

    def to_response(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message, "toolName": self.tool_name}


# ─── Raw Agent Stream Items ──────────────────────────────────

class TextDelta(BaseModel):
    """A token-level text fragment produced by the model."""
    kind: Literal["text_delta"] = "text_delta"
    text: str


class FunctionCallItem(BaseModel):
    """The agent proposed a tool call."""
    kind: Literal["function_call"] = "function_call"
    call_id: str = ""
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class FunctionResultItem(BaseModel):
    """A tool call finished (for real or synthetically)."""
    kind: Literal["function_result"] = "function_result"
    call_id: str = ""
    name: str | None = None
    result: Any = None


class UsageItem(BaseModel):
    """Token usage reported by the model. ``usage`` may be a dict or an SDK object."""
    kind: Literal["usage"] = "usage"
    usage: Any = None


RawStreamItem = Union[TextDelta, FunctionCallItem, FunctionResultItem, UsageItem]


# ─── Stream Events ───────────────────────────────────────────

class _Event(BaseModel):
    def to_record(self) -> dict[str, Any]:
        """Logical wire record for the transport layer."""
        return self.model_dump(mode="json")


class TextChunk(_Event):
    type: Literal["text"] = "text"
    text: str


class ToolCallEvent(_Event):
    type: Literal["tool_call"] = "tool_call"
    phase: Literal["call", "result"]
    name: str
    payload: Any = None


class MetadataEvent(_Event):
    type: Literal["metadata"] = "metadata"
    usage: dict[str, Any] = Field(default_factory=dict)


class ActionCardEvent(_Event):
    type: Literal["action_card"] = "action_card"
    payload: dict[str, Any] = Field(default_factory=dict)


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[
    Union[TextChunk, ToolCallEvent, MetadataEvent, ActionCardEvent, ErrorEvent],
    Field(discriminator="type"),
]
