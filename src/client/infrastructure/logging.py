"""Structlog setup for the session engine.

Probe events go to stdout through a filtering bound logger. The renderer
follows ``SessionSettings.json_logs``: JSON lines for log shippers,
a colored console view for people, and auto-detection when unset.
"""

import os
import sys

import structlog

_TRUTHY = ("1", "true", "yes")


def _wants_json(json_logs: bool | None) -> bool:
    if json_logs is not None:
        return json_logs
    # FORCE_COLOR=1 keeps console output when stdout is piped
    if os.environ.get("FORCE_COLOR", "").lower() in _TRUTHY:
        return False
    return not sys.stdout.isatty()


def _renderer_chain(json_logs: bool) -> list[structlog.types.Processor]:
    if json_logs:
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(min_level: int = 0, json_logs: bool | None = None) -> None:
    """Configure structlog for probe events.

    Args:
        min_level: Minimum stdlib log level to emit (0 emits everything)
        json_logs: Force JSON (True) or console (False) rendering; None
            picks console for a TTY or FORCE_COLOR and JSON otherwise
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderer_chain(_wants_json(json_logs)),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
