"""Sink adapter tests: stream selection, file handling, failure policy."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from lib_context_log.adapters.sinks.console import ConsoleSink
from lib_context_log.adapters.sinks.file import FileSink
from lib_context_log.application.ports import Sink


def test_sinks_satisfy_port_contract(tmp_path: Path) -> None:
    """Both default sinks must remain usable wherever a ``Sink`` is expected."""

    file_sink = FileSink(tmp_path / "app.log")
    try:
        assert isinstance(ConsoleSink(), Sink)
        assert isinstance(file_sink, Sink)
    finally:
        file_sink.close()


def test_console_routes_warn_and_error_to_stderr() -> None:
    stdout, stderr = io.StringIO(), io.StringIO()
    sink = ConsoleSink(stdout=stdout, stderr=stderr)
    for level in ("debug", "info", "warn", "error"):
        sink.write(level, f'{{"level":"{level}"}}')
    assert stdout.getvalue().splitlines() == ['{"level":"debug"}', '{"level":"info"}']
    assert stderr.getvalue().splitlines() == ['{"level":"warn"}', '{"level":"error"}']


def test_console_resolves_process_streams_at_write_time(capsys: pytest.CaptureFixture[str]) -> None:
    """Redirections installed after the sink is built must still be honoured."""

    sink = ConsoleSink()
    sink.write("info", "out-line")
    sink.write("error", "err-line")
    captured = capsys.readouterr()
    assert captured.out == "out-line\n"
    assert captured.err == "err-line\n"


def test_console_swallows_closed_stream() -> None:
    stream = io.StringIO()
    stream.close()
    ConsoleSink(stdout=stream).write("info", "lost")


def test_file_sink_creates_missing_directories(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "logs" / "app.log"
    sink = FileSink(target)
    sink.write("info", '{"msg":"one"}')
    sink.close()
    assert target.read_text(encoding="utf-8") == '{"msg":"one"}\n'


def test_file_sink_appends_across_instances(tmp_path: Path) -> None:
    target = tmp_path / "app.log"
    for message in ("first", "second"):
        sink = FileSink(target)
        sink.write("info", message)
        sink.close()
    assert target.read_text(encoding="utf-8").splitlines() == ["first", "second"]


def test_file_sink_drops_writes_after_close(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_context_log")
    target = tmp_path / "app.log"
    sink = FileSink(target)
    sink.close()
    sink.close()
    sink.write("info", "late")
    assert sink.closed
    assert target.read_text(encoding="utf-8") == ""
    assert any(record.getMessage() == "file_sink_closed_write_dropped" for record in caplog.records)


def test_file_sink_write_failure_is_reported_not_raised(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    class FullDisk(io.StringIO):
        def write(self, text: str) -> int:
            raise OSError(28, "No space left on device")

    caplog.set_level(logging.ERROR, logger="lib_context_log")
    sink = FileSink(tmp_path / "app.log")
    sink.close()
    sink._handle = FullDisk()
    sink.write("error", "lost")
    (record,) = [record for record in caplog.records if record.getMessage() == "file_sink_write_failed"]
    assert "No space left" in record.context["error"]


def test_file_sink_fails_loudly_at_construction(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(OSError):
        FileSink(blocker / "app.log")
