"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Libraries that log every request or statement at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "hishel", "sqlalchemy.engine", "alembic")


def configure_logging(*, verbose: bool = False) -> None:
    """Configure the root logger once.

    Third-party request and migration chatter stays at WARNING unless
    ``verbose`` is set, in which case everything logs at DEBUG.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
