"""
Transport formatting for stream events.

The multiplexer yields typed events; the HTTP layer turns each into a
wire record and frames it as Server-Sent Events or NDJSON.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from vaultward.core.models import ToolOutcome

SSE_DONE = "data: [DONE]\n\n"


def normalize_payload(value: Any) -> Any:
    """Make a tool result JSON-serializable.

    JSON strings are parsed when they hold an object or array, tool
    outcomes and pydantic models are dumped, anything else unknown is
    rendered with ``str``.
    """
    if isinstance(value, ToolOutcome):
        return normalize_payload(value.to_payload())
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped[:1] in ("{", "["):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                return value
        return value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return {str(k): normalize_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_payload(v) for v in value]
    return str(value)


def _record(event: Any) -> dict[str, Any]:
    if isinstance(event, Mapping):
        return dict(event)
    return event.to_record()


def format_sse(event: Any) -> str:
    """Frame one event as an SSE ``data:`` line."""
    return f"data: {json.dumps(_record(event), ensure_ascii=False, default=str)}\n\n"


def format_ndjson(event: Any) -> str:
    """Frame one event as a newline-delimited JSON line."""
    return json.dumps(_record(event), ensure_ascii=False, default=str) + "\n"
