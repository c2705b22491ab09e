"""
Structured Logging

DESIGN DECISION: Every ledger mutation, commit and report run is logged
as a structured event. Local logs are the only observability channel;
there is no persisted audit trail.

Log events use snake_case names (e.g. "expense_added") with the
relevant identifiers as key/value pairs.
"""

import logging
from typing import Optional

import structlog

from factory_ledger.config import get_settings


_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; only the first call has an effect
    unless a different level is passed explicitly.
    """
    global _configured

    if _configured and level is None:
        return

    level_name = level or get_settings().app.log_level
    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name.upper()))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring logging on first use."""
    configure_logging()
    return structlog.get_logger(name)
