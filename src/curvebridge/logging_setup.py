"""Logging configuration for the CurveBridge CLI and MCP server.

Log output goes to stderr so that commands printing path data or SVG on
stdout stay pipeable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, List

import structlog

ENV_VAR = "CURVEBRIDGE_LOG_ENV"


def configure_logging(
    level: str = "INFO",
    enable_colors: bool = True,
    enable_json: bool = False,
    extra_processors: List[Any] | None = None,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        enable_colors: Colored console output (only when stderr is a TTY)
        enable_json: Render one JSON object per event instead
        extra_processors: Additional structlog processors, run before rendering
    """
    numeric_level = LOG_LEVELS.get(level.upper())
    if numeric_level is None:
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)

    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]
    if extra_processors:
        processors.extend(extra_processors)

    if enable_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=enable_colors and sys.stderr.isatty())
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_for(environment: str | None = None, default: str = "development") -> str:
    """Apply one of the :data:`CONFIGS` presets.

    The environment defaults to ``$CURVEBRIDGE_LOG_ENV`` and then
    ``default``. Returns the name that was applied.
    """
    name = environment or os.environ.get(ENV_VAR, default)
    if name not in CONFIGS:
        raise ValueError(f"Unknown logging environment '{name}'. Available: {', '.join(CONFIGS)}")
    configure_logging(**CONFIGS[name])
    return name


LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

CONFIGS = {
    "development": {
        "level": "DEBUG",
        "enable_colors": True,
        "enable_json": False,
    },
    "production": {
        "level": "INFO",
        "enable_colors": False,
        "enable_json": True,
    },
    "testing": {
        "level": "WARNING",
        "enable_colors": False,
        "enable_json": False,
    },
}
