"""Tests for the shared log line format."""

import logging
import re

import pytest

from shelf.logging_config import HEALTH_PATHS, TRACE, HealthCheckFilter, ISO8601Formatter, configure_logging

LINE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[api\] INFO hello world$")


def _record(message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("test", level, __file__, 1, message, None, None)


class TestISO8601Formatter:
    def test_line_format(self):
        formatted = ISO8601Formatter(source="api").format(_record("hello world"))
        assert LINE_PATTERN.match(formatted)

    def test_trace_level_name(self):
        formatted = ISO8601Formatter(source="api").format(_record("raw", level=TRACE))
        assert " TRACE raw" in formatted


class TestHealthCheckFilter:
    def test_drops_health_access_lines(self):
        assert not HealthCheckFilter().filter(_record('127.0.0.1 - "GET /health HTTP/1.1" 200'))

    def test_keeps_other_lines(self):
        assert HealthCheckFilter().filter(_record('127.0.0.1 - "GET /api/feed HTTP/1.1" 200'))

    def test_keeps_health_lines_at_debug(self):
        assert HealthCheckFilter().filter(_record('"GET /health HTTP/1.1" 200', level=logging.DEBUG))


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    @pytest.mark.parametrize("env,expected", [("TRACE", TRACE), ("debug", logging.DEBUG), ("", logging.INFO)])
    def test_level_from_env(self, monkeypatch, env, expected):
        monkeypatch.setenv("LOG_LEVEL", env)
        assert configure_logging(source="api").level == expected

    def test_uvicorn_routed_through_shared_handler(self):
        root = configure_logging(source="api", level=logging.INFO)
        uvicorn_logger = logging.getLogger("uvicorn.access")
        assert uvicorn_logger.handlers == root.handlers
        assert uvicorn_logger.propagate is False


def test_health_filter_matches_served_route_only():
    assert HEALTH_PATHS == frozenset({"/health"})
