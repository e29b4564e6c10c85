"""Shared test fixtures for the VaultWard test suite."""

import asyncio
import json

import pytest

from vaultward.core.models import FunctionCallItem, FunctionResultItem, TextDelta, UsageItem
from vaultward.providers.base import (
    ContentBlock,
    LLMProvider,
    LLMResponse,
    ProviderCapability,
    ProviderConfig,
)
from vaultward.safety.evaluator import ReflectionEvaluator
from vaultward.store.pending import InMemoryPendingOperationStore
from vaultward.tools.registry import RiskRegistry


class ScriptedProvider(LLMProvider):
    """Provider returning a fixed reply (or raising) and recording each call."""

    def __init__(self, reply: str | None = "", error: Exception | None = None, delay: float = 0.0):
        super().__init__(ProviderConfig(model="scripted-model", retry_base_delay=0.0))
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    def supports(self, capability: ProviderCapability) -> bool:
        return capability == ProviderCapability.SYSTEM_PROMPT

    async def _create_message_impl(self, messages, *, model, max_tokens, system=None, temperature=None):
        self.calls.append({"messages": messages, "model": model, "system": system, "max_tokens": max_tokens})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=[ContentBlock(type="text", text=self.reply or "")], model=model)


def verdict_json(**overrides) -> str:
    data = {
        "shouldReject": False,
        "needsUserConfirmation": True,
        "reason": "Deleting a note cannot be undone",
        "actionDescription": "Delete notes/todo.md",
        "safetyChecks": ["Path is exact"],
        "warnings": ["File will be permanently removed"],
    }
    data.update(overrides)
    return json.dumps(data)


class ScriptedRuntime:
    """Agent runtime that replays a fixed list of raw items for every turn."""

    def __init__(self, items=None, error: Exception | None = None):
        self.items = list(items or [])
        self.error = error
        self.messages: list[tuple[str, str | None]] = []

    async def stream(self, message, *, thread_id=None):
        self.messages.append((message, thread_id))
        for item in self.items:
            yield item
        if self.error is not None:
            raise self.error


async def async_items(*items):
    for item in items:
        yield item


@pytest.fixture
def registry():
    return RiskRegistry.default()


@pytest.fixture
def store():
    return InMemoryPendingOperationStore()


@pytest.fixture
def confirm_provider():
    return ScriptedProvider(reply=verdict_json())


@pytest.fixture
def confirm_evaluator(confirm_provider, registry):
    return ReflectionEvaluator(confirm_provider, registry=registry, timeout_seconds=1.0)


@pytest.fixture
def sample_raw_items():
    return [
        TextDelta(text="Deleting "),
        FunctionCallItem(call_id="c1", name="obsidian_delete_file", arguments={"filepath": "notes/todo.md"}),
        FunctionResultItem(call_id="c1", result="done"),
        UsageItem(usage={"input_tokens": 10, "output_tokens": 4}),
    ]
