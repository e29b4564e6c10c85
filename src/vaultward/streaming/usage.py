"""
Token usage extraction.

Best-effort conversion of whatever usage object the agent runtime reports
(plain dict, Anthropic ``Usage``, OpenAI ``CompletionUsage``) into a flat
camelCase dict of numbers. Fields that cannot be read as numbers are left
out; a usage with nothing readable yields None.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# output key → candidate source paths (dotted for nested SDK details)
USAGE_FIELDS: dict[str, tuple[str, ...]] = {
    "inputTokens": ("inputTokens", "input_tokens", "InputTokens", "prompt_tokens", "promptTokens"),
    "outputTokens": ("outputTokens", "output_tokens", "OutputTokens", "completion_tokens", "completionTokens"),
    "totalTokens": ("totalTokens", "total_tokens", "TotalTokens"),
    "reasoningTokens": (
        "reasoningTokens",
        "reasoning_tokens",
        "ReasoningTokens",
        "completion_tokens_details.reasoning_tokens",
        "output_tokens_details.reasoning_tokens",
    ),
    "cacheReadTokens": (
        "cacheReadTokens",
        "cache_read_tokens",
        "CacheReadTokens",
        "cache_read_input_tokens",
        "prompt_tokens_details.cached_tokens",
        "input_tokens_details.cached_tokens",
    ),
    "cacheWriteTokens": (
        "cacheWriteTokens",
        "cache_write_tokens",
        "CacheWriteTokens",
        "cache_creation_input_tokens",
    ),
    "invocationCount": ("invocationCount", "invocation_count", "InvocationCount"),
}


def _lookup(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _resolve(source: Any, path: str) -> Any:
    current = source
    for part in path.split("."):
        if current is None:
            return None
        current = _lookup(current, part)
    return current


def to_number(value: Any) -> int | float | None:
    """Coerce ints, floats and numeric strings. Booleans are not numbers."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else number
    return None


def extract_usage(usage: Any) -> dict[str, int | float] | None:
    if usage is None:
        return None

    extracted: dict[str, int | float] = {}
    for field, paths in USAGE_FIELDS.items():
        for path in paths:
            number = to_number(_resolve(usage, path))
            if number is not None:
                extracted[field] = number
                break

    return extracted or None
