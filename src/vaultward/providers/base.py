"""
VaultWard LLM Provider Base

Abstract interface for the single-shot chat-completion capability used by
the reflection evaluator. Providers wrap different LLM APIs behind one
interface so the evaluator never depends on a vendor SDK.

Key design decisions:
- Async-first (all providers are async)
- Retry with exponential backoff built into the base class, overridable
  per call (the evaluator asks for exactly one attempt)
- Provider-agnostic response model (LLMResponse)
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from vaultward.exceptions import ProviderError
from vaultward.logging import get_logger

logger = get_logger("vaultward.providers")


class ContentBlock(BaseModel):
    """A single text block in an LLM response."""
    type: str = "text"
    text: str = ""


class LLMResponse(BaseModel):
    """Unified response from any LLM provider."""
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str = "end_turn"
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def text(self) -> str:
        """Concatenated text from all text blocks."""
        return "".join(b.text for b in self.content if b.type == "text")


class ProviderConfig(BaseModel):
    """Configuration for an LLM provider."""
    api_key: str | None = None
    model: str = ""
    base_url: str | None = None
    max_retries: int = Field(default=3, ge=1)
    timeout_seconds: float = 30.0
    retry_base_delay: float = 1.0  # exponential backoff base (1s, 2s, 4s)


class ProviderCapability(str, Enum):
    """Capabilities that providers may support."""
    SYSTEM_PROMPT = "SYSTEM_PROMPT"
    JSON_MODE = "JSON_MODE"
    STREAMING = "STREAMING"


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Subclasses implement _create_message_impl(); the base class wraps it
    with retry logic.
    """

    def __init__(self, config: ProviderConfig | None = None):
        self._config = config or ProviderConfig()

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def model(self) -> str:
        return self._config.model

    @abstractmethod
    def supports(self, capability: ProviderCapability) -> bool:
        ...

    @abstractmethod
    async def _create_message_impl(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        max_tokens: int,
        system: str | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        ...

    async def create_message(
        self,
        messages: list[dict[str, Any]],
        *,
        max_tokens: int = 1024,
        system: str | None = None,
        temperature: float | None = None,
        model: str | None = None,
        max_retries: int | None = None,
    ) -> LLMResponse:
        """Create a message with automatic retry and exponential backoff.

        Args:
            messages: List of message dicts (role + content).
            max_tokens: Maximum tokens in response.
            system: Optional system prompt.
            temperature: Optional temperature override.
            model: Optional model override for this call only.
            max_retries: Optional attempt count override for this call only.

        Raises:
            ProviderTimeoutError: the last attempt timed out in the SDK.
            ProviderUnavailableError: the last attempt could not reach the API.
            ProviderError: every attempt failed for another reason.
        """
        attempts = max_retries if max_retries is not None else self._config.max_retries
        attempts = max(1, attempts)
        target_model = model or self._config.model

        last_error: Exception | None = None
        for attempt in range(attempts):
            try:
                return await self._create_message_impl(
                    messages,
                    model=target_model,
                    max_tokens=max_tokens,
                    system=system,
                    temperature=temperature,
                )
            except Exception as e:
                last_error = e
                logger.debug(
                    f"Attempt {attempt + 1}/{attempts} failed: {type(e).__name__}: {e}",
                    extra={"provider": self.name},
                )
                if attempt < attempts - 1:
                    delay = self._config.retry_base_delay * (2 ** attempt)
                    await asyncio.sleep(delay)

        if isinstance(last_error, ProviderError):
            raise last_error
        raise ProviderError(
            self.name,
            f"failed after {attempts} attempt(s): {last_error}",
        ) from last_error
