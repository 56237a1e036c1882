"""
Logging setup.
"""

import logging
import sys

from tutormatch.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging to stdout. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())

    if not any(getattr(h, "_tutormatch", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._tutormatch = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # SQLAlchemy logs every statement at INFO when echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
