"""
VaultWard Streaming

    raw agent items → StreamMultiplexer → StreamEvent → format_sse / format_ndjson
"""

from vaultward.streaming.formatting import SSE_DONE, format_ndjson, format_sse, normalize_payload
from vaultward.streaming.multiplexer import StreamMultiplexer
from vaultward.streaming.usage import extract_usage

__all__ = [
    "SSE_DONE",
    "StreamMultiplexer",
    "extract_usage",
    "format_ndjson",
    "format_sse",
    "normalize_payload",
]
