"""Tests for logging configuration."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import structlog

from curvebridge.logging_setup import CONFIGS, ENV_VAR, configure_for, configure_logging


class TestConfigureLogging:
    """Test cases for structlog setup."""

    @patch("curvebridge.logging_setup.structlog.configure")
    def test_json_renderer(self, mock_configure):
        configure_logging(level="info", enable_json=True)

        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    @patch("curvebridge.logging_setup.structlog.configure")
    def test_extra_processors_run_before_renderer(self, mock_configure):
        def marker(logger, method_name, event_dict):
            return event_dict

        configure_logging(enable_colors=False, extra_processors=[marker])

        processors = mock_configure.call_args.kwargs["processors"]
        assert processors[-2] is marker

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(level="LOUD")

    @patch("curvebridge.logging_setup.configure_logging")
    def test_configure_for_environment_variable(self, mock_configure, monkeypatch):
        """Test the preset name comes from the environment first."""
        monkeypatch.setenv(ENV_VAR, "testing")

        assert configure_for(default="production") == "testing"
        mock_configure.assert_called_once_with(**CONFIGS["testing"])

    @patch("curvebridge.logging_setup.configure_logging")
    def test_configure_for_default(self, mock_configure, monkeypatch):
        monkeypatch.delenv(ENV_VAR, raising=False)

        assert configure_for(default="production") == "production"

    def test_configure_for_unknown(self):
        with pytest.raises(ValueError, match="Unknown logging environment"):
            configure_for("staging")
