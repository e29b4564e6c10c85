"""
VaultWard Claude Provider

Wraps the Anthropic SDK (anthropic.AsyncAnthropic) behind the
unified LLMProvider interface.
"""

from __future__ import annotations

from typing import Any

import anthropic

from vaultward.exceptions import ProviderTimeoutError, ProviderUnavailableError
from vaultward.providers.base import (
    ContentBlock,
    LLMProvider,
    LLMResponse,
    ProviderCapability,
    ProviderConfig,
)


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider via the official SDK.

    Falls back to the ANTHROPIC_API_KEY env var if no key is provided.
    The SDK client is built lazily so a missing key surfaces on the first
    call rather than at construction.
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    def __init__(
        self,
        config: ProviderConfig | None = None,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        super().__init__(config or ProviderConfig(model=self.DEFAULT_MODEL))
        if not self._config.model:
            self._config.model = self.DEFAULT_MODEL
        self._client = client

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        """The SDK client, created on first use."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._config.api_key or None,
                base_url=self._config.base_url or None,
                timeout=self._config.timeout_seconds,
            )
        return self._client

    def supports(self, capability: ProviderCapability) -> bool:
        return capability in {
            ProviderCapability.SYSTEM_PROMPT,
            ProviderCapability.STREAMING,
        }

    async def _create_message_impl(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        max_tokens: int,
        system: str | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise ProviderTimeoutError(self.name, self._config.timeout_seconds) from e
        except anthropic.APIConnectionError as e:
            raise ProviderUnavailableError(self.name, f"cannot reach the Anthropic API: {e}") from e
        return self._to_response(response)

    @staticmethod
    def _to_response(response: Any) -> LLMResponse:
        """Convert an Anthropic API response to LLMResponse."""
        blocks = [
            ContentBlock(type="text", text=block.text)
            for block in response.content
            if block.type == "text"
        ]
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=blocks,
            stop_reason=response.stop_reason or "end_turn",
            model=response.model,
            input_tokens=usage.input_tokens if usage else 0,
            output_tokens=usage.output_tokens if usage else 0,
        )

    @classmethod
    def from_client(cls, client: anthropic.AsyncAnthropic, model: str | None = None) -> ClaudeProvider:
        """Create a ClaudeProvider around an existing Anthropic client."""
        config = ProviderConfig(model=model or cls.DEFAULT_MODEL)
        return cls(config=config, client=client)
