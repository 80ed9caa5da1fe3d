"""Tests for SabreLogger and the engine's log events."""

import io
import json

import pytest

from sabre_core import Sabre
from sabre_core.errors import SabreError
from sabre_core.logging import RESET, LogConfig, SabreLogger
from sabre_core.types import LogFormat, LogLevel


def read_events(output: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in output.getvalue().splitlines()]


class TestSabreLogger:
    def test_json_entry(self, json_logger: SabreLogger, log_output: io.StringIO):
        json_logger._log(LogLevel.INFO, "compile", "hello", {"key": "k"})

        (entry,) = read_events(log_output)
        assert entry["level"] == "INFO"
        assert entry["component"] == "compile"
        assert entry["message"] == "hello"
        assert entry["key"] == "k"
        assert entry["timestamp"].endswith("Z")

    def test_level_filtering(self, log_output: io.StringIO):
        logger = SabreLogger(
            LogConfig(level=LogLevel.WARN, format=LogFormat.JSON, output=log_output)
        )
        logger._log(LogLevel.INFO, "compile", "dropped")
        logger._log(LogLevel.ERROR, "compile", "kept")

        assert [e["message"] for e in read_events(log_output)] == ["kept"]

    def test_disabled_component(self, log_output: io.StringIO):
        logger = SabreLogger(
            LogConfig(
                format=LogFormat.JSON,
                output=log_output,
                components={"compile": True, "render": False, "cache": True},
            )
        )
        logger._log(LogLevel.INFO, "render", "dropped")
        logger._log(LogLevel.INFO, "compile", "kept")

        assert [e["component"] for e in read_events(log_output)] == ["compile"]

    def test_default_components(self):
        assert LogConfig().components == {"compile": True, "render": True, "cache": True}

    def test_colored_output(self, log_output: io.StringIO):
        logger = SabreLogger(LogConfig(output=log_output))
        logger._log(LogLevel.INFO, "render", "done", {"length": 3})

        line = log_output.getvalue()
        assert "[RENDER]" in line
        assert "done" in line
        assert "{'length': 3}" in line
        assert RESET in line

    def test_colored_context_truncated(self, log_output: io.StringIO):
        logger = SabreLogger(LogConfig(output=log_output, truncate_at=10))
        logger._log(LogLevel.INFO, "render", "done", {"value": "x" * 50})
        assert "x" * 50 not in log_output.getvalue()
        assert "..." in log_output.getvalue()

    def test_configure(self, json_logger: SabreLogger, log_output: io.StringIO):
        json_logger.configure(LogConfig(level=LogLevel.ERROR, output=log_output))
        json_logger._log(LogLevel.INFO, "compile", "dropped")
        assert log_output.getvalue() == ""


class TestEngineEvents:
    @pytest.fixture
    def logged_sabre(self, json_logger: SabreLogger) -> Sabre:
        return Sabre(logger=json_logger)

    def test_compile_then_cache_hit(self, logged_sabre: Sabre, log_output: io.StringIO):
        logged_sabre.compile('write("a")', name="page")
        logged_sabre.compile('write("a")', name="page")

        events = [e["event"] for e in read_events(log_output)]
        assert events == ["compile_started", "compile_completed", "cache_hit"]

        completed = read_events(log_output)[1]
        assert completed["key"] == "page"
        assert completed["template_name"] == "page"
        assert completed["class_name"] == "GeneratedTemplate"

    def test_compile_failure(self, logged_sabre: Sabre, log_output: io.StringIO):
        with pytest.raises(SabreError):
            logged_sabre.compile("write(", name="broken")

        failed = read_events(log_output)[-1]
        assert failed["event"] == "compile_failed"
        assert failed["level"] == "ERROR"
        assert failed["error_type"] == "CompilationError"

    def test_render_events(self, logged_sabre: Sabre, log_output: io.StringIO):
        logged_sabre.parse('write("abc")')

        render_events = [e for e in read_events(log_output) if e["component"] == "render"]
        assert [e["event"] for e in render_events] == ["render_started", "render_completed"]
        assert render_events[-1]["length"] == 3
        assert render_events[-1]["template_name"] == "<anonymous>"

    def test_render_failure(self, logged_sabre: Sabre, log_output: io.StringIO):
        with pytest.raises(ZeroDivisionError):
            logged_sabre.parse("write(1 / 0)")

        failed = read_events(log_output)[-1]
        assert failed["event"] == "render_failed"
        assert failed["error_type"] == "ZeroDivisionError"

    def test_no_logger_is_silent(self, sabre: Sabre, capsys):
        sabre.parse('write("quiet")')
        assert capsys.readouterr().out == ""
