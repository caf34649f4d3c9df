"""Unit tests for structlog configuration."""

from unittest.mock import patch

import structlog

from infrastructure.logging import configure_logging


class TestConfigureLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    def test_json_output_without_tty(self, monkeypatch):
        """Non-interactive output should be rendered as JSON."""
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        with patch("sys.stdout.isatty", return_value=False):
            configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_force_color_uses_console_renderer(self, monkeypatch):
        """FORCE_COLOR should enable the console renderer."""
        monkeypatch.setenv("FORCE_COLOR", "1")

        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_min_level_filters_lower_levels(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        with patch("sys.stdout.isatty", return_value=False):
            configure_logging(min_level=30)

        wrapper_class = structlog.get_config()["wrapper_class"]
        assert wrapper_class is structlog.make_filtering_bound_logger(30)

    def test_json_logs_overrides_force_color(self, monkeypatch):
        monkeypatch.setenv("FORCE_COLOR", "1")

        configure_logging(json_logs=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_logs_without_tty(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        with patch("sys.stdout.isatty", return_value=False):
            configure_logging(json_logs=False)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
