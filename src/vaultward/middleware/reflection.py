"""
Reflection middleware.

Routes each proposed tool call by its registry risk category:

- BENIGN (or unknown): runs immediately, the evaluator is never called
- DESTRUCTIVE: the reflection evaluator decides
    - should_reject → REJECTED outcome, handler never runs
    - needs_user_confirmation → operation stored under a fresh key,
      PENDING_CONFIRMATION outcome carrying an action card
    - otherwise → runs (approved after reflection)
"""

from __future__ import annotations

from vaultward.core.models import (
    PendingOperation,
    RiskCategory,
    ToolOutcome,
    new_correlation_id,
)
from vaultward.logging import get_logger
from vaultward.middleware.action_card import ActionCardBuilder
from vaultward.middleware.chain import CallNext, FunctionInvocationContext, FunctionMiddleware
from vaultward.observability import record_tool_invocation
from vaultward.safety.evaluator import ReflectionEvaluator
from vaultward.store.pending import PendingOperationStore
from vaultward.tools.registry import RiskRegistry

logger = get_logger("vaultward.middleware.reflection")


class ReflectionMiddleware(FunctionMiddleware):
    """Safety gate in front of destructive tools."""

    def __init__(
        self,
        evaluator: ReflectionEvaluator,
        store: PendingOperationStore,
        registry: RiskRegistry | None = None,
    ):
        self._evaluator = evaluator
        self._store = store
        self._registry = registry if registry is not None else RiskRegistry.default()

    @property
    def registry(self) -> RiskRegistry:
        return self._registry

    async def invoke(self, context: FunctionInvocationContext, call_next: CallNext) -> ToolOutcome:
        request = context.request
        tool_name = request.tool_name
        risk = self._registry.classify(tool_name)
        log_extra = {"tool_name": tool_name, "correlation_id": request.correlation_id, "risk": risk.value}

        if risk == RiskCategory.BENIGN:
            logger.debug(f"{tool_name} is benign, executing", extra=log_extra)
            outcome = await call_next()
            record_tool_invocation(tool_name=tool_name, risk=risk.value, outcome="executed")
            return outcome

        verdict = await self._evaluator.evaluate(request)

        if verdict.should_reject:
            logger.warning(f"Rejected {tool_name}: {verdict.reason}", extra={**log_extra, "action": "reject"})
            record_tool_invocation(tool_name=tool_name, risk=risk.value, outcome="rejected")
            return context.finish(ToolOutcome.rejected(tool_name, verdict.reason))

        if verdict.needs_user_confirmation:
            key = new_correlation_id()
            self._store.set(key, PendingOperation(
                correlation_id=key,
                tool_name=tool_name,
                arguments=dict(request.arguments),
                reflection=verdict,
            ))
            card = ActionCardBuilder.build(verdict, tool_name, dict(request.arguments), key)
            logger.info(
                f"{tool_name} awaiting confirmation as {key}",
                extra={**log_extra, "correlation_id": key, "action": "confirm"},
            )
            record_tool_invocation(tool_name=tool_name, risk=risk.value, outcome="pending_confirmation")
            return context.finish(ToolOutcome.pending(tool_name, card, verdict))

        logger.info(f"{tool_name} approved after reflection", extra={**log_extra, "action": "approve"})
        outcome = await call_next()
        record_tool_invocation(tool_name=tool_name, risk=risk.value, outcome="executed")
        return outcome
