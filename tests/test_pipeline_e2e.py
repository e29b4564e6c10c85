"""End-to-end tests for the VaultWard safety pipeline.

Drives the full flow with a scripted reflection provider:
wrapped tool → reflection → pending store → stream events → confirm/cancel.
"""

from conftest import ScriptedProvider, verdict_json
from vaultward.config import VaultWardSettings
from vaultward.core.models import (
    ActionCardEvent,
    FunctionCallItem,
    FunctionResultItem,
    MetadataEvent,
    OutcomeKind,
    TextChunk,
    TextDelta,
    ToolCallEvent,
    UsageItem,
)
from vaultward.pipeline import SafetyPipeline
from vaultward.safety.evaluator import ReflectionEvaluator


class FakeVault:
    """In-memory stand-in for the note vault behind the tools."""

    def __init__(self):
        self.files = {"notes/todo.md": "- [ ] buy milk", "notes/ideas.md": "vault safety"}
        self.deletions: list[str] = []

    def delete(self, filepath: str) -> str:
        self.deletions.append(filepath)
        del self.files[filepath]
        return f"Deleted {filepath}"

    async def search(self, query: str) -> list[str]:
        return [name for name, body in self.files.items() if query in body]


def _pipeline(reply: str) -> tuple[SafetyPipeline, ScriptedProvider]:
    provider = ScriptedProvider(reply=reply)
    return SafetyPipeline(ReflectionEvaluator(provider, timeout_seconds=1.0)), provider


async def _collect(pipeline, items):
    async def source():
        for item in items:
            yield item

    return [event async for event in pipeline.stream(source())]


class TestDeleteNeedsConfirmation:
    async def test_full_flow(self):
        vault = FakeVault()
        pipeline, provider = _pipeline(verdict_json())
        tools = pipeline.wrap_tools({"obsidian_delete_file": vault.delete, "obsidian_search": vault.search})

        outcome = await tools["obsidian_delete_file"].invoke({"filepath": "notes/todo.md"}, correlation_id="call-1")

        # nothing happened yet
        assert outcome.kind == OutcomeKind.PENDING_CONFIRMATION
        assert vault.deletions == []
        assert len(provider.calls) == 1
        key = outcome.action_card.correlation_id
        assert pipeline.pending_ids() == [key]

        events = await _collect(pipeline, [
            TextDelta(text="I'll delete that note."),
            FunctionCallItem(call_id="call-1", name="obsidian_delete_file", arguments={"filepath": "notes/todo.md"}),
            FunctionResultItem(call_id="call-1", result=outcome),
            UsageItem(usage={"input_tokens": 50, "output_tokens": 12}),
        ])

        assert [type(e) for e in events] == [TextChunk, ToolCallEvent, ToolCallEvent, ActionCardEvent, MetadataEvent]
        result_event = events[2]
        assert result_event.name == "obsidian_delete_file"
        assert result_event.payload["result"]["status"] == "PENDING_CONFIRMATION"
        card = events[3].payload
        assert card["correlationId"] == key
        assert card["title"] == "Delete Operation"
        assert card["plannedActions"][0]["source"] == "notes/todo.md"
        assert card["reflection"]["warnings"] == ["File will be permanently removed"]

        confirmed = await pipeline.confirm(key)
        assert confirmed.success is True
        assert confirmed.message == "Deleted notes/todo.md"
        assert vault.deletions == ["notes/todo.md"]

        again = await pipeline.confirm(key)
        assert again.found is False
        assert vault.deletions == ["notes/todo.md"]

    async def test_cancel_discards_operation(self):
        vault = FakeVault()
        pipeline, _ = _pipeline(verdict_json())
        delete = pipeline.wrap_tool("obsidian_delete_file", vault.delete)

        outcome = await delete.invoke({"filepath": "notes/todo.md"})
        result = await pipeline.cancel(outcome.action_card.correlation_id)

        assert result.success is True
        assert result.message == "Operation 'obsidian_delete_file' cancelled"
        assert pipeline.pending_ids() == []
        assert "notes/todo.md" in vault.files


class TestOtherVerdicts:
    async def test_rejected_delete_never_runs(self):
        vault = FakeVault()
        pipeline, _ = _pipeline(verdict_json(shouldReject=True, needsUserConfirmation=False, reason="Path escapes vault"))
        delete = pipeline.wrap_tool("obsidian_delete_file", vault.delete)

        outcome = await delete.invoke({"filepath": "../etc/passwd"})

        assert outcome.to_payload() == "REJECTED: Path escapes vault"
        assert pipeline.pending_ids() == []
        assert vault.deletions == []

    async def test_approved_delete_runs_immediately(self):
        vault = FakeVault()
        pipeline, _ = _pipeline(verdict_json(needsUserConfirmation=False, reason="Scratch file"))
        delete = pipeline.wrap_tool("obsidian_delete_file", vault.delete)

        outcome = await delete.invoke({"filepath": "notes/ideas.md"})

        assert outcome.kind == OutcomeKind.COMPLETED
        assert outcome.value == "Deleted notes/ideas.md"

    async def test_benign_search_skips_reflection(self):
        vault = FakeVault()
        pipeline, provider = _pipeline(verdict_json())
        search = pipeline.wrap_tool("obsidian_search", vault.search)

        outcome = await search.invoke({"query": "milk"})

        assert outcome.value == ["notes/todo.md"]
        assert provider.calls == []

    async def test_unreachable_reflection_fails_open(self):
        vault = FakeVault()
        provider = ScriptedProvider(error=ConnectionError("offline"))
        pipeline = SafetyPipeline(ReflectionEvaluator(provider, timeout_seconds=1.0))
        delete = pipeline.wrap_tool("obsidian_delete_file", vault.delete)

        outcome = await delete.invoke({"filepath": "notes/todo.md"})

        assert outcome.kind == OutcomeKind.COMPLETED
        assert vault.deletions == ["notes/todo.md"]


class TestFromSettings:
    def test_custom_registry_from_env(self):
        settings = VaultWardSettings.from_env({
            "VAULTWARD_DESTRUCTIVE_TOOLS": "archive_note",
            "VAULTWARD_CONFIRM_TIMEOUT": "5",
        })
        pipeline = SafetyPipeline.from_settings(settings, provider=ScriptedProvider(reply=verdict_json()))

        assert pipeline.registry.destructive_tools == ["archive_note"]
        assert pipeline.evaluator.timeout_seconds == 10.0
        assert pipeline.handshake.timeout_seconds == 5.0

    async def test_pipeline_from_settings_gates_configured_tool(self):
        settings = VaultWardSettings(destructive_tools=["archive_note"])
        pipeline = SafetyPipeline.from_settings(settings, provider=ScriptedProvider(reply=verdict_json()))
        archive = pipeline.wrap_tool("archive_note", lambda path: f"Archived {path}")

        outcome = await archive.invoke({"path": "old.md"})

        assert outcome.awaiting_confirmation is True
        result = await pipeline.confirm(outcome.action_card.correlation_id)
        assert result.message == "Archived old.md"
