"""
VaultWard OpenAI Provider

Wraps the OpenAI chat completions API behind the unified LLMProvider
interface. Compatible with OpenAI-compatible gateways (OpenRouter, Azure,
LM Studio, Groq) via ``base_url``.

Requires: `pip install vaultward[openai]`
"""

from __future__ import annotations

from typing import Any

from vaultward.exceptions import ProviderTimeoutError, ProviderUnavailableError
from vaultward.providers.base import (
    ContentBlock,
    LLMProvider,
    LLMResponse,
    ProviderCapability,
    ProviderConfig,
)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenAIProvider(LLMProvider):
    """OpenAI and OpenAI-compatible provider.

    Falls back to the OPENAI_API_KEY env var when no key is configured.
    """

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(self, config: ProviderConfig | None = None, client: Any | None = None):
        super().__init__(config or ProviderConfig(model=self.DEFAULT_MODEL))
        if not self._config.model:
            self._config.model = self.DEFAULT_MODEL
        self._client = client

    @property
    def client(self) -> Any:
        """The SDK client, created on first use."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def _create_client(self) -> Any:
        """Create the OpenAI async client. Imports openai lazily."""
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ProviderUnavailableError(
                self.name,
                "the 'openai' package is not installed. Install with: pip install vaultward[openai]",
            ) from e

        kwargs: dict[str, Any] = {"timeout": self._config.timeout_seconds}
        if self._config.api_key:
            kwargs["api_key"] = self._config.api_key
        if self._config.base_url:
            kwargs["base_url"] = self._config.base_url

        return AsyncOpenAI(**kwargs)

    def supports(self, capability: ProviderCapability) -> bool:
        return capability in {
            ProviderCapability.SYSTEM_PROMPT,
            ProviderCapability.JSON_MODE,
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
        # OpenAI carries the system prompt as the first message
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for msg in messages:
            oai_messages.append({"role": msg["role"], "content": str(msg.get("content", ""))})

        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": oai_messages,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        client = self.client
        try:
            response = await client.chat.completions.create(**kwargs)
        except Exception as e:
            import openai

            if isinstance(e, openai.APITimeoutError):
                raise ProviderTimeoutError(self.name, self._config.timeout_seconds) from e
            if isinstance(e, openai.APIConnectionError):
                target = self._config.base_url or "the OpenAI API"
                raise ProviderUnavailableError(self.name, f"cannot reach {target}: {e}") from e
            raise
        return self._to_response(response)

    @staticmethod
    def _to_response(response: Any) -> LLMResponse:
        """Convert an OpenAI chat completion to LLMResponse."""
        choice = response.choices[0] if response.choices else None
        if not choice:
            return LLMResponse()

        blocks: list[ContentBlock] = []
        if choice.message.content:
            blocks.append(ContentBlock(type="text", text=choice.message.content))

        stop_reason_map = {
            "stop": "end_turn",
            "length": "max_tokens",
            "content_filter": "end_turn",
        }
        stop_reason = stop_reason_map.get(choice.finish_reason or "stop", "end_turn")

        usage = response.usage
        return LLMResponse(
            content=blocks,
            stop_reason=stop_reason,
            model=response.model or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        )
