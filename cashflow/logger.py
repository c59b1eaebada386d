"""
Structured Logging

Every ledger mutation and every storage failure is logged as a
structured event. Logging is local only; the ledger keeps no audit
trail in storage.
"""

import logging
from typing import Optional

import structlog

from cashflow.config import get_settings


_configured = False


def configure_logging(
    level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    force: bool = False,
) -> None:
    """
    Configure structlog on top of stdlib logging.

    Defaults come from AppSettings. Safe to call more than once;
    only the first call (or a call with force=True) takes effect.
    """
    global _configured
    if _configured and not force:
        return

    app = get_settings().app
    level = (level or app.log_level).upper()
    json_logs = app.log_json if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = "cashflow"):
    """Return a structlog logger bound to `name`."""
    return structlog.get_logger(name)
