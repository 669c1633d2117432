"""Tests for log level selection."""

import pytest
from warehouse.utils.logging import get_log_level


class TestGetLogLevel:
    @pytest.mark.parametrize(
        "env, level",
        [("production", "INFO"), ("development", "DEBUG"), ("test", "WARNING"), ("staging", "INFO")],
    )
    def test_level_follows_environment(self, monkeypatch, env, level):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", env)
        assert get_log_level() == level

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"
