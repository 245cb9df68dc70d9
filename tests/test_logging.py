import json
import logging

import pytest

from qrsvg.logging import AUDIT, JsonFormatter, audit, get_logger, setup_logging, trace


@trace
def double(x):
    return x * 2


@trace
async def halve(x):
    return x / 2


@trace
def explode():
    raise RuntimeError("boom")


def _events(caplog):
    return [getattr(r, "event", None) for r in caplog.records]


def test_trace_sync(caplog):
    caplog.set_level(logging.DEBUG, logger="qrsvg")
    assert double(3) == 6
    assert _events(caplog) == ["double.enter", "double.done"]
    done = caplog.records[-1]
    assert done.ctx == {"result": "6"}
    assert done.duration_ms >= 0


async def test_trace_async_times_awaited_body(caplog):
    caplog.set_level(logging.INFO, logger="qrsvg")
    assert await halve(3) == 1.5
    assert _events(caplog) == ["halve.done"]


def test_trace_logs_and_reraises(caplog):
    caplog.set_level(logging.INFO, logger="qrsvg")
    with pytest.raises(RuntimeError):
        explode()
    record = caplog.records[-1]
    assert record.event == "explode.error"
    assert record.levelno == logging.ERROR


def test_markup_args_are_summarized(caplog):
    caplog.set_level(logging.DEBUG, logger="qrsvg")
    double("<svg>" + "x" * 500)
    enter = caplog.records[0]
    assert enter.ctx["args"] == ["<markup 505 chars>"]


def test_audit_level(caplog):
    caplog.set_level(AUDIT, logger="qrsvg")
    audit("svg.rendered", logger=get_logger("svg"), cells=9)
    record = caplog.records[0]
    assert record.levelname == "AUDIT"
    assert record.ctx == {"cells": 9}


def test_audit_suppressed_above_level(caplog):
    caplog.set_level(logging.ERROR, logger="qrsvg")
    audit("svg.rendered", cells=9)
    assert caplog.records == []


def test_json_file_log(tmp_path):
    log_file = tmp_path / "qrsvg.jsonl"
    setup_logging(level="AUDIT", log_file=str(log_file))
    audit("frame.laid_out", logger=get_logger("frame"), style="simple")
    for handler in logging.getLogger("qrsvg").handlers:
        handler.flush()
    entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert entry["event"] == "frame.laid_out"
    assert entry["level"] == "AUDIT"
    assert entry["src"] == "qrsvg.frame"
    assert entry["ctx"] == {"style": "simple"}


def test_json_formatter_plain_message():
    record = logging.LogRecord("qrsvg.x", logging.WARNING, "", 0, "logo omitted: %s", ("timeout",), None)
    entry = json.loads(JsonFormatter().format(record))
    assert entry["msg"] == "logo omitted: timeout"
