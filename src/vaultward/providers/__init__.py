"""
VaultWard LLM Provider Abstraction

Providers wrap different LLM APIs (Anthropic, OpenAI-compatible) behind
the single-shot completion interface the reflection evaluator uses.

Usage:
    from vaultward.providers import create_provider

    provider = create_provider("claude")
    response = await provider.create_message(messages=[...])

    # OpenRouter (OpenAI-compatible)
    provider = create_provider("openrouter", api_key="...", model="google/gemini-2.5-flash")
"""

from vaultward.providers.base import (
    ContentBlock,
    LLMProvider,
    LLMResponse,
    ProviderCapability,
    ProviderConfig,
)
from vaultward.providers.claude import ClaudeProvider

__all__ = [
    "ClaudeProvider",
    "ContentBlock",
    "LLMProvider",
    "LLMResponse",
    "ProviderCapability",
    "ProviderConfig",
    "create_provider",
]


def create_provider(
    name: str = "claude",
    *,
    api_key: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
    timeout_seconds: float = 30.0,
) -> LLMProvider:
    """Factory function to create an LLM provider by name.

    Args:
        name: Provider name ("claude", "anthropic", "openai", "openrouter").
        api_key: Optional API key override.
        model: Optional model name override.
        base_url: Optional endpoint override.
        timeout_seconds: Client-level request timeout.
    """
    name_lower = name.lower()

    if name_lower in ("claude", "anthropic"):
        config = ProviderConfig(
            api_key=api_key,
            model=model or ClaudeProvider.DEFAULT_MODEL,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        return ClaudeProvider(config)
    elif name_lower in ("openai", "openrouter"):
        from vaultward.providers.openai import OPENROUTER_BASE_URL, OpenAIProvider

        if name_lower == "openrouter" and not base_url:
            base_url = OPENROUTER_BASE_URL
        config = ProviderConfig(
            api_key=api_key,
            model=model or OpenAIProvider.DEFAULT_MODEL,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )
        return OpenAIProvider(config)
    else:
        raise ValueError(
            f"Unknown provider: {name}. Supported: claude, openai, openrouter"
        )
