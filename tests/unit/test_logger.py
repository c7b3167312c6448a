"""Unit tests for logger setup and the JSONL run log."""

import json
import logging

from scout.utils.logger import get_logger, log_search_run


def test_get_logger_adds_handler_once():
    first = get_logger("scout.test.once")
    second = get_logger("scout.test.once")
    assert first is second
    assert len(first.handlers) >= 1
    assert len(second.handlers) == len(first.handlers)


def test_explicit_level():
    log = get_logger("scout.test.level", level="debug")
    assert log.level == logging.DEBUG


def test_run_log_appends_jsonl(tmp_path):
    path = tmp_path / "logs" / "runs.jsonl"
    for n in range(2):
        log_search_run(
            query="rust async runtimes",
            languages=["en", "ja"],
            variant_count=2,
            degraded_variants=[],
            result_count=3 + n,
            status_counts={"ok": 3},
            elapsed_ms=12.345,
            path=str(path),
        )
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    record = json.loads(lines[0])
    assert record["query"] == "rust async runtimes"
    assert record["languages"] == ["en", "ja"]
    assert record["extraction_status"] == {"ok": 3}
    assert record["elapsed_ms"] == 12.3
    assert json.loads(lines[1])["result_count"] == 4


def test_run_log_disabled_without_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    log_search_run("q", [], 0, [], 0, {}, 1.0, path="")
    assert list(tmp_path.iterdir()) == []
