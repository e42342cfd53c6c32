"""Tests for structlog configuration."""

import logging

import pytest
import structlog

from sor.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    @pytest.mark.parametrize("level", ["DEBUG", "info", logging.WARNING])
    def test_accepts_names_and_constants(self, level):
        configure_logging(level)
        structlog.get_logger().info("configured")

    def test_json_renderer(self, capsys):
        configure_logging("INFO", json=True)
        structlog.get_logger().info("route_found", legs=2)

        out = capsys.readouterr().out
        assert '"event": "route_found"' in out
        assert '"legs": 2' in out

    def test_level_filters_lower_events(self, capsys):
        configure_logging("WARNING", json=True)
        structlog.get_logger().info("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_unknown_level_name(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")
