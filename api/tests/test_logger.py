"""Unit tests for core.logger module.

Tests the structlog configuration:
- configure_logging() installs a single stdout handler on the root logger
- LOG_LEVEL is honoured, invalid values fall back to INFO
- stdlib `extra=` fields survive into the rendered line
- LOG_FORMAT=json renders JSON lines with contextvars merged in
"""

import json
import logging

import pytest

from core.logger import (
    _get_log_level,
    _is_json_format,
    bind_contextvars,
    clear_contextvars,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def _clean_root_logger():
    """Save and restore root logger state around each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    clear_contextvars()


@pytest.mark.unit
class TestEnvironmentParsing:
    def test_default_level_is_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert _get_log_level() == logging.INFO

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert _get_log_level() == logging.DEBUG

    def test_invalid_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        assert _get_log_level() == logging.INFO

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("json", True), ("JSON", True), ("console", False), ("", False)],
    )
    def test_json_format(self, monkeypatch, value, expected):
        monkeypatch.setenv("LOG_FORMAT", value)
        assert _is_json_format() is expected


@pytest.mark.unit
class TestConfigureLogging:
    def test_single_root_handler(self):
        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_noisy_loggers_quieted(self):
        configure_logging()
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_json_output_includes_context(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        configure_logging()

        bind_contextvars(request_id="req-1")
        get_logger("tests.logger").info("property.created", property_id=7)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        parsed = json.loads(line)

        assert parsed["event"] == "property.created"
        assert parsed["property_id"] == 7
        assert parsed["request_id"] == "req-1"
        assert parsed["level"] == "info"
        assert parsed["logger"] == "tests.logger"

    def test_stdlib_extra_fields_rendered(self, capsys):
        configure_logging(level=logging.INFO, json_output=True)

        logging.getLogger("main").warning(
            "request.validation_error", extra={"path": "/api/clients"}
        )

        parsed = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert parsed["event"] == "request.validation_error"
        assert parsed["path"] == "/api/clients"
        assert parsed["level"] == "warning"
