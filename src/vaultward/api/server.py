"""
VaultWard API Server

FastAPI surface for the confirmation handshake and the chat stream.
The UI confirms or cancels action cards by correlation id; chat turns
are streamed as Server-Sent Events produced by the host's agent runtime.

Usage:
    uvicorn vaultward.api.server:app --reload
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Literal

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vaultward import __version__
from vaultward.config import VaultWardSettings
from vaultward.core.models import HandshakeResult
from vaultward.exceptions import VaultWardAPIError
from vaultward.logging import configure_logging, get_logger
from vaultward.observability import init_tracing
from vaultward.pipeline import SafetyPipeline
from vaultward.runtime import AgentRuntime
from vaultward.streaming.formatting import SSE_DONE, format_ndjson, format_sse
from vaultward.tools.executor import NullToolExecutor

logger = get_logger("vaultward.api")


# ─── Request/Response Models ────────────────────────────────

class ChatRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str = Field(min_length=1)
    thread_id: str | None = None


class HandshakeResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    tool_name: str | None = None


class PendingListResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    correlation_ids: list[str]
    total: int


class StatusResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str = __version__
    pending_operations: int = 0
    registered_tools: int = 0
    destructive_tools: list[str] = Field(default_factory=list)
    runtime_configured: bool = False


def _handshake_response(result: HandshakeResult) -> JSONResponse:
    status_code = 200 if result.found else 404
    return JSONResponse(status_code=status_code, content=result.to_response())


# ─── App ─────────────────────────────────────────────────────

def create_app(pipeline: SafetyPipeline, runtime: AgentRuntime | None = None) -> FastAPI:
    """Build the HTTP app around an already wired pipeline."""
    app = FastAPI(
        title="VaultWard API",
        description="Safety gate and confirmation handshake for vault-editing agents",
        version=__version__,
    )
    app.state.pipeline = pipeline
    app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(VaultWardAPIError)
    async def api_error_handler(request: Request, exc: VaultWardAPIError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc), "toolName": None},
        )

    # ─── Action Cards ────────────────────────────────────────

    @app.post("/actioncards/{correlation_id}/confirm", response_model=HandshakeResponse)
    async def confirm_action_card(correlation_id: str) -> JSONResponse:
        logger.info(f"Confirmation requested for {correlation_id}", extra={"correlation_id": correlation_id})
        try:
            result = await pipeline.confirm(correlation_id)
        except Exception as e:
            logger.error(f"Confirmation of {correlation_id} failed: {e}", exc_info=True)
            raise VaultWardAPIError(f"Failed to execute operation: {e}", status_code=500) from e
        return _handshake_response(result)

    @app.post("/actioncards/{correlation_id}/cancel", response_model=HandshakeResponse)
    async def cancel_action_card(correlation_id: str) -> JSONResponse:
        logger.info(f"Cancellation requested for {correlation_id}", extra={"correlation_id": correlation_id})
        result = await pipeline.cancel(correlation_id)
        return _handshake_response(result)

    @app.get("/actioncards")
    async def list_action_cards() -> dict:
        """Correlation ids of operations still awaiting a decision."""
        ids = pipeline.pending_ids()
        return PendingListResponse(correlation_ids=ids, total=len(ids)).model_dump(by_alias=True)

    # ─── Chat ────────────────────────────────────────────────

    @app.post("/chat/stream")
    async def chat_stream(
        body: ChatRequest,
        stream_format: Literal["sse", "ndjson"] = Query(default="sse", alias="format"),
    ) -> StreamingResponse:
        active_runtime = app.state.runtime
        if active_runtime is None:
            raise VaultWardAPIError("No agent runtime configured", status_code=503)

        source = active_runtime.stream(body.message, thread_id=body.thread_id)
        frame = format_sse if stream_format == "sse" else format_ndjson

        async def event_source() -> AsyncIterator[str]:
            async for event in pipeline.stream(source):
                yield frame(event)
            if stream_format == "sse":
                yield SSE_DONE

        if stream_format == "ndjson":
            return StreamingResponse(event_source(), media_type="application/x-ndjson")
        return StreamingResponse(
            event_source(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    # ─── Status ──────────────────────────────────────────────

    @app.get("/api/status")
    async def get_status() -> dict:
        return StatusResponse(
            pending_operations=len(pipeline.store),
            registered_tools=len(pipeline.registry),
            destructive_tools=pipeline.registry.destructive_tools,
            runtime_configured=app.state.runtime is not None,
        ).model_dump(by_alias=True)

    return app


def _default_app() -> FastAPI:
    settings = VaultWardSettings.from_env()
    configure_logging(settings.log_level, json_output=settings.log_json)
    init_tracing()
    pipeline = SafetyPipeline.from_settings(settings, executor=NullToolExecutor())
    return create_app(pipeline)


app = _default_app()
