# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import io
import os

import pytest

import vardump
from vardump.common import log, timestamp
from vardump.dumper import Dumper


@pytest.fixture
def stderr(monkeypatch):
    stream = io.StringIO()
    monkeypatch.setattr(log, "stderr", stream)
    monkeypatch.setattr(log, "stderr_levels", {"info", "error"})
    return stream


@pytest.fixture
def log_file(monkeypatch):
    """Restores log.file after the test, closing whatever file it opened."""
    monkeypatch.setattr(log, "file", None)
    yield
    if log.file is not None:
        log.file.close()


def test_levels_to_stderr(stderr):
    log.debug("not shown")
    log.info("shown {0}", 1)
    output = stderr.getvalue()
    assert "not shown" not in output
    assert output.startswith("I+")
    assert "shown 1" in output


def test_multiline_is_indented(stderr):
    log.info("a\nb")
    first, second = stderr.getvalue().splitlines()[:2]
    assert first.endswith(": a")
    assert second.strip() == "b"
    assert len(second) == len(first)


def test_unused_levels_are_not_formatted(stderr):
    # Would raise IndexError if it were formatted.
    assert log.debug("{0} {1}", 1) == "{0} {1}"


def test_exception_returns_exception(stderr):
    try:
        raise ValueError("boom")
    except ValueError:
        exc = log.exception("handling {0}", "it")
    assert isinstance(exc, ValueError)
    output = stderr.getvalue()
    assert output.startswith("E+")
    assert "handling it" in output
    assert "ValueError: boom" in output


def test_swallow_exception_is_debug(stderr):
    try:
        raise ValueError("boom")
    except ValueError:
        log.swallow_exception("ignored")
    assert stderr.getvalue() == ""


def test_to_file(tmp_path, monkeypatch, log_file):
    monkeypatch.setattr(log, "log_dir", str(tmp_path))
    log.to_file()
    log.debug("to file {0}", 42)

    filename = tmp_path / f"vardump-{os.getpid()}.log"
    text = filename.read_text(encoding="utf-8")
    assert f"vardump {vardump.__version__}" in text
    assert "to file 42" in text


def test_to_file_without_log_dir(monkeypatch, log_file):
    monkeypatch.setattr(log, "log_dir", None)
    log.to_file()
    assert log.file is None


def test_dumper_starts_file_logging(tmp_path, monkeypatch, log_file):
    monkeypatch.setattr(log, "log_dir", str(tmp_path))
    Dumper(skip_stack_frames="bad")

    filename = tmp_path / f"vardump-{os.getpid()}.log"
    text = filename.read_text(encoding="utf-8")
    assert f"vardump {vardump.__version__}" in text
    assert "Ignoring invalid skip_stack_frames='bad'" in text


def test_timestamp_reset():
    timestamp.reset()
    assert 0 <= timestamp.current() < 5
