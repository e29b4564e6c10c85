"""
VaultWard Confirmation Handshake

Resolves a pending operation after the human answered its action card.

    confirm(id) → take from store → validate → executor.execute(tool, args)
    cancel(id)  → take from store

The stored operation is taken atomically, so of two concurrent confirms
exactly one executes the tool and the other sees "not found". The key is
gone afterwards whatever the executor did.
"""

from __future__ import annotations

import asyncio
import time

from pydantic import ValidationError

from vaultward.core.models import HandshakeResult, PendingOperation
from vaultward.exceptions import OperationContextError, PendingOperationNotFoundError
from vaultward.logging import get_logger
from vaultward.observability import get_tracer, record_handshake
from vaultward.store.pending import PendingOperationStore
from vaultward.tools.executor import ToolExecutor

logger = get_logger("vaultward.handshake")

DEFAULT_CONFIRM_TIMEOUT = 60.0


def _not_found(message: str) -> HandshakeResult:
    return HandshakeResult(success=False, message=message, found=False)


class ConfirmationHandshake:
    """Confirm or cancel pending operations by correlation id."""

    def __init__(
        self,
        store: PendingOperationStore,
        executor: ToolExecutor,
        timeout_seconds: float = DEFAULT_CONFIRM_TIMEOUT,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._store = store
        self._executor = executor
        self._timeout = timeout_seconds

    @property
    def store(self) -> PendingOperationStore:
        return self._store

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def confirm(self, correlation_id: str) -> HandshakeResult:
        with get_tracer().start_as_current_span("vaultward.handshake.confirm") as span:
            span.set_attribute("vaultward.correlation_id", correlation_id)
            result = await self._confirm(correlation_id)
            span.set_attribute("vaultward.success", result.success)
            record_handshake(action="confirm", found=result.found, success=result.success)
            return result

    def _take(self, correlation_id: str) -> object:
        """Remove and return the stored context for ``correlation_id``."""
        value, found = self._store.take(correlation_id)
        if not found:
            raise PendingOperationNotFoundError(correlation_id)
        return value

    @staticmethod
    def _load(correlation_id: str, value: object) -> PendingOperation:
        try:
            return PendingOperation.model_validate(value)
        except ValidationError as e:
            raise OperationContextError(
                correlation_id,
                f"{e.error_count()} validation error(s)",
            ) from e

    async def _confirm(self, correlation_id: str) -> HandshakeResult:
        log_extra = {"correlation_id": correlation_id, "action": "confirm"}
        try:
            operation = self._load(correlation_id, self._take(correlation_id))
        except PendingOperationNotFoundError:
            logger.info(f"Confirm for unknown operation {correlation_id}", extra=log_extra)
            return _not_found("Action card not found or already executed")
        except OperationContextError as e:
            logger.error(str(e), extra=log_extra)
            return HandshakeResult(
                success=False,
                message="Stored operation context is invalid and was discarded",
            )

        tool_name = operation.tool_name
        log_extra["tool_name"] = tool_name
        start = time.monotonic()
        try:
            outcome = await asyncio.wait_for(
                self._executor.execute(tool_name, dict(operation.arguments)),
                timeout=self._timeout,
            )
        except TimeoutError:
            logger.error(f"Executing confirmed {tool_name} timed out after {self._timeout}s", extra=log_extra)
            return HandshakeResult(
                success=False,
                message=f"Operation '{tool_name}' timed out after {self._timeout:g}s",
                tool_name=tool_name,
            )
        except Exception as e:
            logger.error(f"Executing confirmed {tool_name} failed: {e}", exc_info=True, extra=log_extra)
            return HandshakeResult(
                success=False,
                message=f"Operation '{tool_name}' failed: {e}",
                tool_name=tool_name,
            )

        duration_ms = round((time.monotonic() - start) * 1000, 1)
        if outcome.success:
            logger.info(f"Confirmed {tool_name} executed", extra={**log_extra, "duration_ms": duration_ms})
            message = outcome.message or "Operation completed successfully"
        else:
            logger.warning(
                f"Confirmed {tool_name} reported failure: {outcome.message}",
                extra={**log_extra, "duration_ms": duration_ms},
            )
            message = outcome.message or f"Operation '{tool_name}' failed"

        return HandshakeResult(success=outcome.success, message=message, tool_name=tool_name)

    async def cancel(self, correlation_id: str) -> HandshakeResult:
        log_extra = {"correlation_id": correlation_id, "action": "cancel"}
        try:
            value = self._take(correlation_id)
        except PendingOperationNotFoundError:
            logger.info(f"Cancel for unknown operation {correlation_id}", extra=log_extra)
            record_handshake(action="cancel", found=False, success=False)
            return _not_found("Action card not found or already processed")

        tool_name = self._tool_name_of(value)
        logger.info(f"Cancelled {tool_name}", extra={**log_extra, "tool_name": tool_name})
        record_handshake(action="cancel", found=True, success=True)
        return HandshakeResult(
            success=True,
            message=f"Operation '{tool_name}' cancelled",
            tool_name=tool_name,
        )

    @staticmethod
    def _tool_name_of(value: object) -> str:
        if isinstance(value, PendingOperation):
            return value.tool_name
        if isinstance(value, dict):
            name = value.get("tool_name") or value.get("toolName")
            if isinstance(name, str) and name:
                return name
        return "unknown"
