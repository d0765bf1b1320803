"""
logging_config.py — Loguru sinks for the outreach API

The services log through stdlib loggers named "outreach.<area>"
(outreach.cadence, outreach.activity, outreach.timing, …); routers and
main.py use loguru directly. Both end up in the same Loguru sink.

Business Rules:
- A public https APP_URL means production: one JSON object per line
- Anywhere else: colored console lines carrying the 8-char request id
- Stdlib records keep their logger name as extra["area"]
- LOG_LEVEL sets the floor for every sink (default INFO)

Called by: outreach/main.py (lifespan)
Depends on: LOG_LEVEL, APP_URL environment variables
"""

import logging
import os
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[area]}</cyan> | "
    "{extra[request_id]} | "
    "{message}"
)

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


def is_production_url(app_url: str | None) -> bool:
    """Deployed behind TLS on a real host, not a dev box."""
    url = (app_url or "").strip().lower()
    return url.startswith("https://") and "localhost" not in url and "127.0.0.1" not in url


def setup_logging(level: str | None = None, app_url: str | None = None) -> None:
    """Replace every Loguru sink with the one for this environment.

    Arguments override LOG_LEVEL / APP_URL. Safe to call again; the last
    call wins.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    production = is_production_url(app_url if app_url is not None else os.getenv("APP_URL"))

    logger.remove()
    logger.configure(extra={"request_id": "-", "area": "outreach"})
    if production:
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT, colorize=True)

    logging.basicConfig(handlers=[_LoguruBridge()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured", level=level, production=production)


class _LoguruBridge(logging.Handler):
    """Hands stdlib records to Loguru, tagged with the emitting logger's name."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Report the service function, not logging/__init__.py
        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.bind(area=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )
