"""
Tests for channel-aware logging configuration.
"""

import pytest

from conflint.core.logging import (
    LogChannel,
    LogLevel,
    configure_logging,
    get_current_config,
    get_logger,
)


@pytest.fixture(autouse=True)
def restore_silent():
    yield
    configure_logging(level="silent", force=True)


class TestLogLevel:

    @pytest.mark.parametrize("value, expected", [
        ("silent", LogLevel.SILENT),
        ("VERBOSE", LogLevel.VERBOSE),
        ("warning", LogLevel.INFO),
        ("nonsense", LogLevel.INFO),
    ])
    def test_from_string(self, value, expected):
        assert LogLevel.from_string(value) == expected


class TestConfigure:
    """Tests for configure_logging."""

    def test_explicit_channels(self):
        """Verify channel names are parsed and unknown ones dropped."""
        configure_logging(level="debug", channels=["rules", "bogus", "evaluate"], force=True)

        config = get_current_config()
        assert config["level"] == "DEBUG"
        assert config["channels"] == ["EVALUATE", "RULES"]

    def test_environment(self, monkeypatch):
        """Verify environment variables are read when no arguments are given."""
        monkeypatch.setenv("CONFLINT_LOG_LEVEL", "verbose")
        monkeypatch.setenv("CONFLINT_LOG_FORMAT", "json")
        monkeypatch.setenv("CONFLINT_LOG_CHANNELS", "extract,report")

        configure_logging(force=True)

        assert get_current_config() == {
            "level": "VERBOSE",
            "format": "json",
            "channels": ["EXTRACT", "REPORT"],
        }

    def test_filtered_channel_is_quiet(self, capsys):
        """Verify loggers on disabled channels emit nothing."""
        configure_logging(level="debug", format="json", channels=["rules"], force=True)

        get_logger(LogChannel.EVALUATE).info("should_not_appear")

        assert "should_not_appear" not in capsys.readouterr().err

    def test_silent_suppresses_errors(self, capsys):
        """Verify error and warning events are dropped at silent level."""
        configure_logging(level="silent", format="json", force=True)
        log = get_logger(LogChannel.SYSTEM)

        log.error("silent_error")
        log.warning("silent_warning")

        assert "silent_" not in capsys.readouterr().err


def test_get_logger_accepts_strings():
    assert get_logger("report").channel == LogChannel.REPORT
    assert get_logger("unknown").channel == LogChannel.SYSTEM
