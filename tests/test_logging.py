"""Tests for VaultWard structured logging."""

import io
import json
import logging
import sys

from vaultward.logging import VaultWardFormatter, configure_logging, get_logger


def _record(name="vaultward", level=logging.INFO, msg="message", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestVaultWardFormatter:
    def test_human_readable_format(self):
        formatter = VaultWardFormatter(json_output=False)
        output = formatter.format(_record(name="vaultward.middleware", msg="Tool intercepted"))
        assert "vaultward.middleware" in output
        assert "Tool intercepted" in output
        assert "INFO" in output

    def test_json_format(self):
        formatter = VaultWardFormatter(json_output=True)
        output = formatter.format(_record(name="vaultward.safety", level=logging.WARNING, msg="Fail-open"))
        data = json.loads(output)
        assert data["logger"] == "vaultward.safety"
        assert data["message"] == "Fail-open"
        assert data["level"] == "WARNING"
        assert "timestamp" in data

    def test_extra_fields_in_human_format(self):
        formatter = VaultWardFormatter(json_output=False)
        record = _record(msg="Tool rejected")
        record.tool_name = "obsidian_delete_file"  # type: ignore[attr-defined]
        record.correlation_id = "op-1"  # type: ignore[attr-defined]
        output = formatter.format(record)
        assert "tool_name=obsidian_delete_file" in output
        assert "correlation_id=op-1" in output

    def test_extra_fields_in_json_format(self):
        formatter = VaultWardFormatter(json_output=True)
        record = _record(msg="Reflection verdict")
        record.risk = "destructive"  # type: ignore[attr-defined]
        record.unrelated = "ignored"  # type: ignore[attr-defined]
        data = json.loads(formatter.format(record))
        assert data["risk"] == "destructive"
        assert "unrelated" not in data

    def test_exception_included(self):
        formatter = VaultWardFormatter(json_output=True)
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(level=logging.ERROR, msg="Stream failed", exc_info=sys.exc_info())
        data = json.loads(formatter.format(record))
        assert "RuntimeError: boom" in data["exception"]


class TestConfigureLogging:
    def test_sets_level_and_single_handler(self):
        configure_logging(level="DEBUG")
        root = logging.getLogger("vaultward")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.propagate is False
        configure_logging()

    def test_json_handler(self):
        configure_logging(json_output=True)
        formatter = logging.getLogger("vaultward").handlers[0].formatter
        assert isinstance(formatter, VaultWardFormatter)
        assert formatter._json_output is True
        configure_logging()

    def test_writes_structured_lines_to_stream(self):
        buffer = io.StringIO()
        configure_logging(json_output=True, stream=buffer)
        get_logger("vaultward.handshake").info("Cancelled", extra={"correlation_id": "op-1", "action": "cancel"})
        configure_logging()
        data = json.loads(buffer.getvalue())
        assert data["logger"] == "vaultward.handshake"
        assert data["correlation_id"] == "op-1"
        assert data["action"] == "cancel"

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(level="NOISY")
        assert logging.getLogger("vaultward").level == logging.INFO


class TestGetLogger:
    def test_child_logger(self):
        assert get_logger("vaultward.api").name == "vaultward.api"

    def test_default(self):
        assert get_logger().name == "vaultward"
