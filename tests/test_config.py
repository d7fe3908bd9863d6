# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Tests for settings and logging configuration."""

import logging

import pytest
import structlog
from pydantic import ValidationError

from responders.config import Settings, clear_settings_cache, get_settings
from responders.logging_config import (
    add_app_context,
    build_processors,
    configure_logging,
    drop_ledger_messages,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSettings:
    """Test Settings defaults and overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("LOG_LEVEL", "DEFAULT_PAGE_SIZE", "PUBLIC_DOMAIN", "CODEC_MIME_TYPE"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.default_page_size == 20
        assert settings.public_domain == ""
        assert settings.codec_mime_type == "application/vnd.responders.encapsulated"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PUBLIC_DOMAIN", "https://api.example.com/")

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.public_domain == "https://api.example.com"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_positive_sizes(self):
        with pytest.raises(ValidationError):
            Settings(default_page_size=0)
        with pytest.raises(ValidationError):
            Settings(log_queue_size=0)

    def test_cached(self):
        assert get_settings() is get_settings()

        first = get_settings()
        clear_settings_cache()

        assert get_settings() is not first


class TestLogging:
    """Test structlog configuration."""

    def test_app_context(self):
        event = add_app_context(None, "info", {"event": "x"})

        assert event["service"] == "responders"
        assert event["version"] == "0.1.0"

    def test_configure_installs_single_handler(self, restore_logging):
        configure_logging(Settings(log_format="text", log_level="WARNING"))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_ledger_messages_dropped(self):
        with pytest.raises(structlog.DropEvent):
            drop_ledger_messages(None, "error", {"event": "ledger_message", "text": "x"})

        event = {"event": "log_worker_started"}
        assert drop_ledger_messages(None, "info", event) is event

    def test_ledger_filter_only_when_disabled(self):
        assert drop_ledger_messages not in build_processors(Settings())
        assert drop_ledger_messages in build_processors(Settings(log_ledger_messages=False))
