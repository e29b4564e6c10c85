"""
VaultWard Safety Pipeline

Facade that wires the pieces together for a host application:

    RiskRegistry ─┐
    Evaluator ────┼─▶ ReflectionMiddleware ─▶ wrapped tools (agent side)
    Store ────────┤
    Executor ─────┴─▶ ConfirmationHandshake (HTTP side)
                      StreamMultiplexer (transport side)

Usage:
    pipeline = SafetyPipeline.from_settings(VaultWardSettings.from_env())
    tools = pipeline.wrap_tools({"obsidian_delete_file": delete_file})
    async for event in pipeline.stream(runtime.stream("delete notes/todo.md")):
        ...
    await pipeline.confirm(correlation_id)
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Mapping

from vaultward.config import VaultWardSettings
from vaultward.core.models import HandshakeResult, RawStreamItem, StreamEvent
from vaultward.handshake import DEFAULT_CONFIRM_TIMEOUT, ConfirmationHandshake
from vaultward.logging import get_logger
from vaultward.middleware.chain import DEFAULT_MAX_ATTEMPTS, MiddlewareWrappedTool, ToolHandler
from vaultward.middleware.reflection import ReflectionMiddleware
from vaultward.providers import LLMProvider, create_provider
from vaultward.safety.evaluator import ReflectionEvaluator
from vaultward.store.pending import InMemoryPendingOperationStore, PendingOperationStore
from vaultward.streaming.multiplexer import StreamMultiplexer
from vaultward.tools.executor import HandlerToolExecutor, ToolExecutor
from vaultward.tools.registry import RiskRegistry

logger = get_logger("vaultward.pipeline")


class SafetyPipeline:
    """Safety gate, pending store, handshake and stream translation for one host.

    When no executor is given, the raw handlers of every wrapped tool are
    registered with a HandlerToolExecutor so confirmed operations run the
    same implementation the agent would have called.
    """

    def __init__(
        self,
        evaluator: ReflectionEvaluator,
        registry: RiskRegistry | None = None,
        store: PendingOperationStore | None = None,
        executor: ToolExecutor | None = None,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self._registry = registry if registry is not None else RiskRegistry.default()
        self._store = store if store is not None else InMemoryPendingOperationStore()
        self._executor = executor if executor is not None else HandlerToolExecutor()
        self._evaluator = evaluator
        self._middleware = ReflectionMiddleware(evaluator, self._store, self._registry)
        self._handshake = ConfirmationHandshake(self._store, self._executor, confirm_timeout)
        self._multiplexer = StreamMultiplexer()
        self._max_attempts = max_attempts

    @classmethod
    def from_settings(
        cls,
        settings: VaultWardSettings,
        provider: LLMProvider | None = None,
        store: PendingOperationStore | None = None,
        executor: ToolExecutor | None = None,
    ) -> SafetyPipeline:
        registry = settings.build_registry()
        provider = provider or create_provider(
            settings.reflection_provider,
            api_key=settings.reflection_api_key,
            model=settings.reflection_model,
            base_url=settings.reflection_base_url,
        )
        evaluator = ReflectionEvaluator(
            provider,
            registry=registry,
            timeout_seconds=settings.reflection_timeout,
            model=settings.reflection_model,
        )
        logger.info(
            f"Safety pipeline: provider={provider.name}, "
            f"{len(registry.destructive_tools)} destructive tool(s) gated",
            extra={"provider": provider.name},
        )
        return cls(
            evaluator,
            registry=registry,
            store=store,
            executor=executor,
            confirm_timeout=settings.confirm_timeout,
        )

    # ─── Components ──────────────────────────────────────────

    @property
    def registry(self) -> RiskRegistry:
        return self._registry

    @property
    def store(self) -> PendingOperationStore:
        return self._store

    @property
    def executor(self) -> ToolExecutor:
        return self._executor

    @property
    def evaluator(self) -> ReflectionEvaluator:
        return self._evaluator

    @property
    def middleware(self) -> ReflectionMiddleware:
        return self._middleware

    @property
    def handshake(self) -> ConfirmationHandshake:
        return self._handshake

    # ─── Agent side ──────────────────────────────────────────

    def wrap_tool(self, name: str, handler: ToolHandler) -> MiddlewareWrappedTool:
        if isinstance(self._executor, HandlerToolExecutor):
            self._executor.register(name, handler)
        return MiddlewareWrappedTool(name, handler, [self._middleware], max_attempts=self._max_attempts)

    def wrap_tools(self, tools: Mapping[str, ToolHandler]) -> dict[str, MiddlewareWrappedTool]:
        return {name: self.wrap_tool(name, handler) for name, handler in tools.items()}

    # ─── Transport side ──────────────────────────────────────

    def stream(self, source: AsyncIterable[RawStreamItem]) -> AsyncIterator[StreamEvent]:
        return self._multiplexer.stream(source)

    # ─── Handshake side ──────────────────────────────────────

    async def confirm(self, correlation_id: str) -> HandshakeResult:
        return await self._handshake.confirm(correlation_id)

    async def cancel(self, correlation_id: str) -> HandshakeResult:
        return await self._handshake.cancel(correlation_id)

    def pending_ids(self) -> list[str]:
        return self._store.keys()
