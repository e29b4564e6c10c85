"""
VaultWard Configuration

Settings are plain pydantic models read from ``VAULTWARD_*`` environment
variables. Invalid values fail fast with ``pydantic.ValidationError``.

    VAULTWARD_REFLECTION_PROVIDER   claude | anthropic | openai | openrouter
    VAULTWARD_REFLECTION_MODEL      model override for the reflection call
    VAULTWARD_REFLECTION_BASE_URL   endpoint override (OpenAI-compatible gateways)
    VAULTWARD_REFLECTION_API_KEY    API key (falls back to the SDK's own env var)
    VAULTWARD_REFLECTION_TIMEOUT    seconds, default 10
    VAULTWARD_CONFIRM_TIMEOUT       seconds, default 60
    VAULTWARD_DESTRUCTIVE_TOOLS     comma separated tool names
    VAULTWARD_BENIGN_TOOLS          comma separated tool names
    VAULTWARD_REGISTRY_FILE         JSON file of tool name → category
    VAULTWARD_LOG_LEVEL             DEBUG | INFO | WARNING | ERROR
    VAULTWARD_LOG_JSON              true/false
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

from vaultward.tools.registry import DEFAULT_DESTRUCTIVE_TOOLS, RiskRegistry

ENV_PREFIX = "VAULTWARD_"

SUPPORTED_PROVIDERS = ("claude", "anthropic", "openai", "openrouter")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class VaultWardSettings(BaseModel):
    """Runtime settings for the safety pipeline and its HTTP surface."""

    reflection_provider: str = "claude"
    reflection_model: str | None = None
    reflection_base_url: str | None = None
    reflection_api_key: str | None = None
    reflection_timeout: float = Field(default=10.0, gt=0)
    confirm_timeout: float = Field(default=60.0, gt=0)
    destructive_tools: list[str] = Field(default_factory=lambda: list(DEFAULT_DESTRUCTIVE_TOOLS))
    benign_tools: list[str] = Field(default_factory=list)
    registry_file: str | None = None
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("reflection_provider")
    @classmethod
    def _check_provider(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in SUPPORTED_PROVIDERS:
            raise ValueError(f"unsupported provider '{value}', expected one of {', '.join(SUPPORTED_PROVIDERS)}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"invalid log level '{value}'")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> VaultWardSettings:
        """Build settings from ``VAULTWARD_*`` variables. Unset variables keep defaults."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for field in cls.model_fields:
            raw = env.get(ENV_PREFIX + field.upper())
            if raw is None:
                continue
            if field in ("destructive_tools", "benign_tools"):
                values[field] = _split_list(raw)
            elif not raw.strip():
                continue
            else:
                values[field] = raw.strip()

        return cls(**values)

    def build_registry(self) -> RiskRegistry:
        """Registry from the configured lists, overlaid by the registry file if set."""
        registry = RiskRegistry.from_lists(self.destructive_tools, self.benign_tools)
        if self.registry_file:
            registry.update(RiskRegistry.load(self.registry_file).to_dict())
        return registry
