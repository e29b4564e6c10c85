"""Tests for tool executors used by the confirmation handshake."""

import pytest

from vaultward.core.models import ExecutionOutcome
from vaultward.tools.executor import HandlerToolExecutor, NullToolExecutor


class TestHandlerToolExecutor:
    async def test_sync_handler(self):
        executor = HandlerToolExecutor({"obsidian_delete_file": lambda filepath: f"Deleted {filepath}"})
        outcome = await executor.execute("obsidian_delete_file", {"filepath": "a.md"})
        assert outcome == ExecutionOutcome(success=True, message="Deleted a.md")

    async def test_async_handler(self):
        async def move(source, destination):
            return f"Moved {source} to {destination}"

        executor = HandlerToolExecutor()
        executor.register("obsidian_move_file", move)
        outcome = await executor.execute("obsidian_move_file", {"source": "a.md", "destination": "b.md"})
        assert outcome.success is True
        assert outcome.message == "Moved a.md to b.md"

    async def test_none_result_uses_default_message(self):
        executor = HandlerToolExecutor({"noop": lambda: None})
        outcome = await executor.execute("noop", {})
        assert outcome.message == "Operation completed successfully"

    async def test_execution_outcome_passthrough(self):
        executor = HandlerToolExecutor({"patch": lambda: ExecutionOutcome(success=False, message="conflict")})
        outcome = await executor.execute("patch", {})
        assert outcome == ExecutionOutcome(success=False, message="conflict")

    async def test_unknown_tool(self):
        outcome = await HandlerToolExecutor().execute("missing", {})
        assert outcome.success is False
        assert outcome.message == "Unknown tool: missing"

    async def test_handler_errors_propagate(self):
        def fail():
            raise PermissionError("read-only")

        executor = HandlerToolExecutor({"fail": fail})
        with pytest.raises(PermissionError):
            await executor.execute("fail", {})

    def test_register_replaces(self):
        executor = HandlerToolExecutor({"t": lambda: 1})
        executor.register("t", lambda: 2)
        assert executor.tool_names == ["t"]
        assert len(executor) == 1

    def test_len_of_empty_executor(self):
        assert len(HandlerToolExecutor()) == 0


class TestNullToolExecutor:
    async def test_refuses(self):
        outcome = await NullToolExecutor().execute("obsidian_delete_file", {"filepath": "a.md"})
        assert outcome.success is False
        assert "obsidian_delete_file" in outcome.message
