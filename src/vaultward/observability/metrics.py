"""OpenTelemetry metrics for VaultWard.

Counters for tool invocations, reflections and confirmation handshakes.
Without a configured MeterProvider the OTel API hands out no-op instruments.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from opentelemetry import metrics

if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.metrics import Counter, Histogram

_METER_NAME = "vaultward"

_tool_invocations_total: Counter | None = None
_reflections_total: Counter | None = None
_handshakes_total: Counter | None = None
_reflection_duration: Histogram | None = None


def _ensure_instruments() -> None:
    """Lazily create the instruments on first use."""
    global _tool_invocations_total, _reflections_total, _handshakes_total, _reflection_duration

    if _tool_invocations_total is not None:
        return

    from vaultward import __version__

    meter = metrics.get_meter(_METER_NAME, __version__)
    _reflections_total = meter.create_counter(
        "vaultward.reflections.total",
        description="Reflection evaluations by outcome",
        unit="1",
    )
    _handshakes_total = meter.create_counter(
        "vaultward.handshakes.total",
        description="Confirm/cancel requests by action and result",
        unit="1",
    )
    _reflection_duration = meter.create_histogram(
        "vaultward.reflection.duration_seconds",
        description="Reflection evaluation latency in seconds",
        unit="s",
    )
    _tool_invocations_total = meter.create_counter(
        "vaultward.tool_invocations.total",
        description="Tool invocations routed through the middleware chain",
        unit="1",
    )


def record_tool_invocation(*, tool_name: str, risk: str, outcome: str) -> None:
    """Record one tool invocation and how the chain resolved it."""
    _ensure_instruments()
    _tool_invocations_total.add(
        1,
        {"vaultward.tool_name": tool_name, "vaultward.risk": risk, "vaultward.outcome": outcome},
    )


def record_reflection(*, tool_name: str, outcome: str, fail_open: bool = False) -> None:
    """Record a reflection verdict (reject / confirm / approve)."""
    _ensure_instruments()
    _reflections_total.add(
        1,
        {
            "vaultward.tool_name": tool_name,
            "vaultward.outcome": outcome,
            "vaultward.fail_open": str(fail_open),
        },
    )


def record_handshake(*, action: str, found: bool, success: bool) -> None:
    """Record a confirm or cancel request."""
    _ensure_instruments()
    _handshakes_total.add(
        1,
        {"vaultward.action": action, "vaultward.found": str(found), "vaultward.success": str(success)},
    )


@contextmanager
def measure_reflection(tool_name: str) -> Generator[None, None, None]:
    """Context manager to measure and record reflection latency."""
    _ensure_instruments()
    start = time.monotonic()
    try:
        yield
    finally:
        _reflection_duration.record(time.monotonic() - start, {"vaultward.tool_name": tool_name})
