"""Tests for settings loading."""

import logging

import pytest
from pydantic import ValidationError

from sockchan.config import Settings, configure_logging


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without environment overrides the defaults apply."""
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.delenv("ACK_TIMEOUT", raising=False)

        settings = Settings(_env_file=None)

        assert settings.DEBUG is False
        assert settings.ACK_TIMEOUT == 30.0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values are taken from environment variables."""
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("ACK_TIMEOUT", "2.5")

        settings = Settings(_env_file=None)

        assert settings.DEBUG is True
        assert settings.ACK_TIMEOUT == 2.5

    def test_rejects_non_positive_ack_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A zero or negative timeout is a configuration error."""
        monkeypatch.setenv("ACK_TIMEOUT", "0")

        with pytest.raises(ValidationError, match="ACK_TIMEOUT must be positive"):
            Settings(_env_file=None)


def test_configure_logging_debug_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """Debug mode lowers the root log level."""
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", logging.WARNING)

    configure_logging(debug=True)

    assert root.level == logging.DEBUG
