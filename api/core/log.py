"""
Logging setup.

Modules log through `logging.getLogger(__name__)` with `key=value` messages;
this only configures the root handler once per process.
"""

from __future__ import annotations

import logging

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    resolved = (level or config.log_level()).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
    # httpx logs every request at INFO; a /fetch call makes a hundred of them.
    logging.getLogger("httpx").setLevel(logging.WARNING)
