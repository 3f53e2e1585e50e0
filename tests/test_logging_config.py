"""Tests for logging setup and secret scrubbing."""

import logging
from unittest.mock import MagicMock

import pytest
import structlog

from commandwire.logging_config import LOGGER_PREFIX, SUBSYSTEMS, sanitize_secrets, setup_logging

FAKE_TOKEN = "MTA4NzY1NDMyMTA5ODc2NTQzMg.GaBcDe.abcdefghijklmnopqrstuvwxyz0123456789"


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    for name in (LOGGER_PREFIX, *(f"{LOGGER_PREFIX}.{s}" for s in SUBSYSTEMS)):
        logging.getLogger(name).handlers.clear()


class TestSanitizeSecrets:
    """Tests for the sanitize_secrets processor."""

    def test_scrubs_token_in_string(self):
        event = sanitize_secrets(None, "info", {"event": "x", "error": f"bad token {FAKE_TOKEN}"})
        assert FAKE_TOKEN not in event["error"]
        assert "***REDACTED***" in event["error"]

    def test_scrubs_authorization_header(self):
        event = sanitize_secrets(None, "info", {"header": "Bot abcdefghijklmnopqrstuvwxyz"})
        assert event["header"] == "***REDACTED***"

    def test_scrubs_nested_values(self):
        event = sanitize_secrets(None, "info", {
            "args": ["ok", FAKE_TOKEN],
            "extra": {"token": FAKE_TOKEN, "n": 1},
        })
        assert event["args"][0] == "ok"
        assert event["args"][1] == "***REDACTED***"
        assert event["extra"] == {"token": "***REDACTED***", "n": 1}

    def test_leaves_plain_text(self):
        event = sanitize_secrets(None, "info", {"event": "command_executing", "invoke": "echo"})
        assert event == {"event": "command_executing", "invoke": "echo"}


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only_by_default(self):
        setup_logging()
        assert len(logging.getLogger().handlers) == 1
        assert logging.getLogger(LOGGER_PREFIX).handlers == []

    def test_file_handlers_with_log_dir(self, tmp_path):
        settings = MagicMock()
        settings.log_dir = tmp_path / "logs"
        settings.logging_level = "debug"
        settings.logging_subsystem_levels = {"dispatch": "WARNING"}
        settings.logging_max_file_size_mb = 1
        settings.logging_backup_count = 2

        setup_logging(settings)

        assert (tmp_path / "logs").is_dir()
        assert len(logging.getLogger(LOGGER_PREFIX).handlers) == 1
        for subsystem in SUBSYSTEMS:
            assert len(logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}").handlers) == 1
        assert logging.getLogger(f"{LOGGER_PREFIX}.dispatch").level == logging.WARNING
        assert logging.getLogger(f"{LOGGER_PREFIX}.registry").level == logging.DEBUG
