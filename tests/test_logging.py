import io
import json
import logging

import pytest

from solang_sdk import logging as slog


@pytest.fixture(autouse=True)
def fresh_context():
    slog.clear_context()
    yield
    slog.clear_context()
    logging.getLogger("solang_sdk.test").handlers.clear()


def test_bind_unbind_and_trace_scope():
    slog.bind(contract="flipper", data=b"\x01\x02")
    assert slog.context() == {"contract": "flipper", "data": "0102"}
    with slog.trace_scope("abc", signature="sig"):
        ctx = slog.context()
        assert ctx["trace_id"] == "abc" and ctx["signature"] == "sig"
    assert "trace_id" not in slog.context()
    slog.unbind("contract")
    assert "contract" not in slog.context()


def test_trace_scope_generates_id():
    with slog.trace_scope():
        assert len(slog.context()["trace_id"]) == 12


def test_json_output_carries_context_and_extras():
    buf = io.StringIO()
    log = slog.configure(json=True, level="DEBUG", stream=buf, logger_name="solang_sdk.test")
    with slog.trace_scope("t1"):
        log.info("sent %s", "tx", extra={"units": 5})
    rec = json.loads(buf.getvalue().strip())
    assert rec["msg"] == "sent tx"
    assert rec["level"] == "INFO"
    assert rec["trace_id"] == "t1"
    assert rec["units"] == 5


def test_text_output_and_reconfigure(monkeypatch):
    monkeypatch.setenv("SOLANG_LOG_FORMAT", "text")
    buf = io.StringIO()
    slog.configure(stream=buf, logger_name="solang_sdk.test")
    log = slog.configure(stream=buf, logger_name="solang_sdk.test", level="WARNING")
    assert len(log.handlers) == 1
    slog.bind(program_id="prog")
    log.info("hidden")
    log.warning("shown")
    out = buf.getvalue()
    assert "hidden" not in out
    assert "| WARNING | solang_sdk.test | program_id=prog | shown" in out


def test_get_logger_default_name():
    assert slog.get_logger().name == "solang_sdk"
