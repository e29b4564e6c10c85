"""OpenTelemetry tracing setup for VaultWard.

Initializes an OTLP exporter when OTEL_EXPORTER_OTLP_ENDPOINT is set and
the ``otel`` extra (SDK + exporter) is installed. Otherwise spans come
from the API's no-op tracer.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from opentelemetry import trace

from vaultward.logging import get_logger

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

logger = get_logger("vaultward.observability")

_TRACER_NAME = "vaultward"

_tracer: Tracer | None = None
_initialized = False


def init_tracing(
    endpoint: str | None = None,
    service_name: str | None = None,
) -> bool:
    """Initialize OpenTelemetry tracing.

    Args:
        endpoint: OTLP endpoint URL. Falls back to OTEL_EXPORTER_OTLP_ENDPOINT env var.
        service_name: Service name for traces. Falls back to OTEL_SERVICE_NAME env var.

    Returns:
        True if tracing was initialized, False if skipped (no endpoint or SDK not installed).
    """
    global _tracer, _initialized

    if _initialized:
        return _tracer is not None

    _initialized = True

    endpoint = endpoint or os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return False

    service_name = service_name or os.environ.get("OTEL_SERVICE_NAME", "vaultward-api")

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError:
        logger.warning("OTLP endpoint set but the otel extra is not installed: pip install vaultward[otel]")
        return False

    from vaultward import __version__

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(_TRACER_NAME, __version__)
    logger.info(f"Tracing enabled, exporting to {endpoint}")
    return True


def get_tracer() -> Tracer:
    """Get the VaultWard tracer (no-op until a TracerProvider is installed)."""
    if _tracer is not None:
        return _tracer
    return trace.get_tracer(_TRACER_NAME)


def shutdown() -> None:
    """Flush and shut down the tracer provider."""
    global _tracer, _initialized

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()
    _tracer = None
    _initialized = False
