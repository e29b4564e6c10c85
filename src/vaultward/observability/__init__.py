"""VaultWard Observability: OpenTelemetry tracing and metrics.

Opt-in via OTEL_EXPORTER_OTLP_ENDPOINT env var.
Without it, all tracing/metrics calls are no-ops.
"""

from vaultward.observability.metrics import (
    measure_reflection,
    record_handshake,
    record_reflection,
    record_tool_invocation,
)
from vaultward.observability.tracing import get_tracer, init_tracing, shutdown

__all__ = [
    "init_tracing",
    "get_tracer",
    "shutdown",
    "measure_reflection",
    "record_handshake",
    "record_reflection",
    "record_tool_invocation",
]
