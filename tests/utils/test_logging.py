"""Tests for structured logging setup."""

import json

import pytest
from structlog.testing import capture_logs

from objectlog.core.log.reader import HaltReason
from objectlog.utils.config import Config
from objectlog.utils.logging import (
    bind_log,
    configure_from_config,
    configure_logging,
    get_logger,
    render_enums,
)


class TestLogging:
    """Test objectlog logging helpers."""

    def test_bind_log(self):
        """Test that bound events name the log file and encoding."""
        with capture_logs() as events:
            log = bind_log(get_logger("objectlog.tests.bind"), "/tmp/events.log", "binary")
            log.warning("Stopped reading at untrusted frame", position=12)

        assert events == [
            {
                "event": "Stopped reading at untrusted frame",
                "log_level": "warning",
                "log_path": "/tmp/events.log",
                "encoding": "binary",
                "position": 12,
            }
        ]

    def test_render_enums(self):
        """Test that enum values are rendered as their plain values."""
        event = {"event": "halt", "reason": HaltReason.TORN_PAYLOAD, "frames": 3}

        assert render_enums(None, "warning", event) == {
            "event": "halt",
            "reason": "torn_payload",
            "frames": 3,
        }

    def test_configure_from_config(self, capsys):
        """Test JSON output configured from the logging section."""
        config = Config()
        config.set("logging.level", "INFO")
        config.set("logging.format", "json")
        config.set("logging.output", "stdout")

        configure_from_config(config)
        log = bind_log(get_logger("objectlog.tests.json"), "data/x.log", "text")
        log.info("Opened log", reason=HaltReason.END_OF_LOG)

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["event"] == "Opened log"
        assert entry["app"] == "objectlog"
        assert entry["log_path"] == "data/x.log"
        assert entry["encoding"] == "text"
        assert entry["reason"] == "end_of_log"
        assert entry["level"] == "info"

    def test_level_filters_events(self, capsys):
        """Test that events below the configured level are dropped."""
        configure_logging(log_level="WARNING", log_format="console", log_output="stdout")
        log = get_logger("objectlog.tests.level")

        log.info("hidden")
        log.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_unknown_level(self):
        """Test that an unknown level is rejected."""
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(log_level="LOUD")
