"""
Streaming event multiplexer.

Merges the agent runtime's raw stream (text deltas, function calls,
function results, usage) into one ordered stream of typed events for the
transport layer. An action card produced by the safety gate is emitted
right after the tool result that carries it, so the client can render the
confirmation prompt in place.
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterator
from typing import Any

from vaultward.core.models import (
    ActionCardEvent,
    ErrorEvent,
    FunctionCallItem,
    FunctionResultItem,
    MetadataEvent,
    RawStreamItem,
    StreamEvent,
    TextChunk,
    TextDelta,
    ToolCallEvent,
    ToolOutcome,
    UsageItem,
)
from vaultward.logging import get_logger
from vaultward.streaming.formatting import normalize_payload
from vaultward.streaming.usage import extract_usage

logger = get_logger("vaultward.streaming")

UNKNOWN_TOOL = "unknown"


class StreamMultiplexer:
    """Translates raw agent items into stream events, preserving order.

    One instance can serve many turns; per-turn state (call id → tool
    name) lives inside each ``stream()`` call.
    """

    async def stream(self, source: AsyncIterable[RawStreamItem]) -> AsyncIterator[StreamEvent]:
        call_names: dict[str, str] = {}
        count = 0
        try:
            async for item in source:
                for event in self._translate(item, call_names):
                    count += 1
                    yield event
        except Exception as e:
            logger.error(f"Agent stream failed after {count} events: {e}", exc_info=True)
            yield ErrorEvent(message=str(e) or type(e).__name__)
        else:
            logger.debug(f"Stream complete after {count} events")
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()

    def _translate(self, item: Any, call_names: dict[str, str]) -> Iterator[StreamEvent]:
        if isinstance(item, TextDelta):
            if item.text:
                yield TextChunk(text=item.text)

        elif isinstance(item, FunctionCallItem):
            if item.call_id:
                call_names[item.call_id] = item.name
            logger.info(f"Tool call: {item.name}", extra={"tool_name": item.name, "phase": "call"})
            yield ToolCallEvent(
                phase="call",
                name=item.name,
                payload={"name": item.name, "phase": "call", "arguments": normalize_payload(item.arguments)},
            )

        elif isinstance(item, FunctionResultItem):
            outcome = item.result if isinstance(item.result, ToolOutcome) else None
            name = (
                item.name
                or call_names.get(item.call_id)
                or (outcome.tool_name if outcome else None)
                or UNKNOWN_TOOL
            )
            yield ToolCallEvent(
                phase="result",
                name=name,
                payload={"name": name, "phase": "result", "result": normalize_payload(item.result)},
            )
            if outcome is not None and outcome.awaiting_confirmation:
                card = outcome.action_card
                logger.info(
                    f"Action card for {name}",
                    extra={"tool_name": name, "correlation_id": card.correlation_id, "event_type": "action_card"},
                )
                yield ActionCardEvent(payload=card.to_payload())

        elif isinstance(item, UsageItem):
            usage = extract_usage(item.usage)
            if usage:
                yield MetadataEvent(usage=usage)

        else:
            logger.debug(f"Ignoring unrecognized stream item: {type(item).__name__}")
