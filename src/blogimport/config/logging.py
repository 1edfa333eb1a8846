"""Terminal logging setup for the CLI and migration runs."""

from __future__ import annotations

import logging
from typing import Final

SQL_LOGGER: Final[str] = "sqlalchemy.engine"
QUIET_LOGGERS: Final[tuple[str, ...]] = ("alembic.runtime.migration", SQL_LOGGER)


def configure_logging(
    *,
    level: int = logging.INFO,
    force: bool = False,
    log_sql: bool = False,
) -> None:
    """Configure the root logger for terminal output.

    Alembic's migration chatter and SQLAlchemy's statement log stay at WARNING
    unless ``level`` is DEBUG. ``log_sql`` turns the statement log on at any
    level. Pass ``force=True`` to replace handlers installed earlier.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    quiet_level = logging.NOTSET if level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
    if log_sql:
        logging.getLogger(SQL_LOGGER).setLevel(logging.INFO)
