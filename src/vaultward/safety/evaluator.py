"""
VaultWard Reflection Evaluator

Asks a second LLM whether a proposed destructive tool call should be
rejected, confirmed by a human, or allowed to run.

The evaluator never fails the caller. Timeouts, empty or malformed
responses and provider errors all produce an approved verdict with a
warning (fail-open), so an unavailable reflection model degrades safety
checks instead of blocking the agent. Cancellation of the calling turn
is the one exception: it propagates.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any

from pydantic import ValidationError

from vaultward.core.models import ReflectionVerdict, ToolInvocationRequest
from vaultward.exceptions import ProviderTimeoutError, ReflectionError
from vaultward.logging import get_logger
from vaultward.observability import get_tracer, measure_reflection, record_reflection
from vaultward.providers.base import LLMProvider, ProviderCapability
from vaultward.safety.prompts import REFLECTION_SYSTEM_PROMPT, ReflectionPromptBuilder
from vaultward.tools.registry import RiskRegistry

logger = get_logger("vaultward.safety.evaluator")

DEFAULT_REFLECTION_TIMEOUT = 10.0
MISSING_REASON = "Reflection completed but reason not provided"
FAIL_OPEN_DESCRIPTION = "Operation approved due to reflection service limitation"

# Lowercased, underscore-free key → verdict field
_FIELD_KEYS = {
    "shouldreject": "should_reject",
    "needsuserconfirmation": "needs_user_confirmation",
    "reason": "reason",
    "actiondescription": "action_description",
    "safetychecks": "safety_checks",
    "warnings": "warnings",
}


def fail_open_verdict(reason: str) -> ReflectionVerdict:
    """Approved verdict used whenever reflection itself could not complete."""
    return ReflectionVerdict(
        should_reject=False,
        needs_user_confirmation=False,
        reason=reason,
        action_description=FAIL_OPEN_DESCRIPTION,
        safety_checks=["Reflection service operational check"],
        warnings=["Reflection service encountered an issue"],
    )


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` or ``` ... ``` fence."""
    trimmed = text.strip()
    if not trimmed.startswith("```"):
        return trimmed

    first_newline = trimmed.find("\n")
    end = trimmed.rfind("```")
    if first_newline == -1 or end <= first_newline:
        return trimmed
    return trimmed[first_newline + 1:end].strip()


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        field = _FIELD_KEYS.get(str(key).replace("_", "").lower())
        if field is None or value is None:
            continue
        normalized[field] = value
    return normalized


class _UnparseableResponse(Exception):
    """JSON decoded but is not an object."""


class ReflectionEvaluator:
    """Single-shot LLM safety reflection for one proposed tool call.

    Args:
        provider: Completion provider for the reflection model.
        registry: Risk registry used to render the prompt.
        timeout_seconds: Hard deadline for the model call.
        model: Optional model override passed to the provider.
        max_tokens: Response budget for the verdict JSON.
    """

    def __init__(
        self,
        provider: LLMProvider,
        registry: RiskRegistry | None = None,
        timeout_seconds: float = DEFAULT_REFLECTION_TIMEOUT,
        model: str | None = None,
        max_tokens: int = 512,
    ):
        if timeout_seconds <= 0:
            raise ReflectionError("Reflection timeout must be positive", details={"timeout_seconds": timeout_seconds})
        if max_tokens < 1:
            raise ReflectionError("Reflection max_tokens must be at least 1", details={"max_tokens": max_tokens})
        self._provider = provider
        self._prompts = ReflectionPromptBuilder(registry)
        self._timeout = timeout_seconds
        self._model = model
        self._max_tokens = max_tokens

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def evaluate(self, request: ToolInvocationRequest) -> ReflectionVerdict:
        tool_name = request.tool_name
        log_extra = {"tool_name": tool_name, "correlation_id": request.correlation_id}

        with get_tracer().start_as_current_span("vaultward.reflection") as span:
            span.set_attribute("vaultward.tool_name", tool_name)
            start = time.monotonic()
            with measure_reflection(tool_name):
                verdict, fail_open = await self._evaluate(request, log_extra)

            outcome = (
                "reject" if verdict.should_reject
                else "confirm" if verdict.needs_user_confirmation
                else "approve"
            )
            span.set_attribute("vaultward.outcome", outcome)
            span.set_attribute("vaultward.fail_open", fail_open)
            record_reflection(tool_name=tool_name, outcome=outcome, fail_open=fail_open)

            if not fail_open:
                logger.info(
                    f"Reflection for {tool_name}: reject={verdict.should_reject}, "
                    f"confirm={verdict.needs_user_confirmation}, reason={verdict.reason}",
                    extra={**log_extra, "duration_ms": round((time.monotonic() - start) * 1000, 1)},
                )
            return verdict

    async def _evaluate(
        self,
        request: ToolInvocationRequest,
        log_extra: dict[str, Any],
    ) -> tuple[ReflectionVerdict, bool]:
        tool_name = request.tool_name

        try:
            messages, system = self._messages(request)
            response = await asyncio.wait_for(
                self._provider.create_message(
                    messages,
                    system=system,
                    max_tokens=self._max_tokens,
                    model=self._model,
                    max_retries=1,
                ),
                timeout=self._timeout,
            )
        except (TimeoutError, ProviderTimeoutError):
            logger.warning(f"Reflection call timed out for {tool_name} after {self._timeout}s", extra=log_extra)
            return fail_open_verdict("Reflection timeout, operation approved with caution"), True
        except Exception as e:
            logger.warning(f"Reflection service error for {tool_name}: {e}", exc_info=True, extra=log_extra)
            return fail_open_verdict("Reflection service error, operation approved with caution"), True

        text = strip_code_fences(response.text or "")
        if not text:
            logger.warning(f"Reflection model returned empty response for {tool_name}", extra=log_extra)
            return fail_open_verdict("LLM returned empty response, operation approved with caution"), True

        try:
            return self.parse_verdict(text), False
        except _UnparseableResponse:
            logger.warning(f"Failed to parse reflection response for {tool_name}: {text[:200]}", extra=log_extra)
            return fail_open_verdict("Failed to parse LLM response, operation approved with caution"), True
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Malformed reflection JSON for {tool_name}: {e}", extra=log_extra)
            return fail_open_verdict("JSON parsing error, operation approved with caution"), True
        except Exception as e:
            logger.warning(
                f"Reflection service error for {tool_name}: {type(e).__name__}: {e}",
                exc_info=True,
                extra=log_extra,
            )
            return fail_open_verdict("Reflection service error, operation approved with caution"), True

    def _messages(self, request: ToolInvocationRequest) -> tuple[list[dict[str, Any]], str | None]:
        """User message plus system prompt; folded together when the provider has no system slot."""
        prompt = self._prompts.build(request.tool_name, request.arguments)
        if self._provider.supports(ProviderCapability.SYSTEM_PROMPT):
            return [{"role": "user", "content": prompt}], REFLECTION_SYSTEM_PROMPT
        return [{"role": "user", "content": f"{REFLECTION_SYSTEM_PROMPT}\n\n{prompt}"}], None

    @staticmethod
    def parse_verdict(text: str) -> ReflectionVerdict:
        """Parse a fence-free JSON verdict.

        Raises:
            json.JSONDecodeError: text is not JSON.
            ValidationError: a field has the wrong type.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            raise _UnparseableResponse(type(data).__name__)

        fields = _normalize_keys(data)
        reason = fields.get("reason")
        if not isinstance(reason, str) or not reason.strip():
            fields["reason"] = MISSING_REASON
        return ReflectionVerdict.model_validate(fields)
