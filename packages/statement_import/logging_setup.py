"""Logging for the importer.

Modules log through ``get_logger("statement_import.<module>")`` and never add
handlers themselves. Output stays silent until the CLI calls
``configure_logging()``, which sends ``event key=value`` lines to stderr.
"""

from __future__ import annotations

import logging
import os
import sys

ROOT_LOGGER = "statement_import"
LEVEL_ENV_VAR = "STATEMENT_IMPORT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def resolve_level(value: str | None = None) -> int:
    """Map a level name or number (``"debug"``, ``"10"``) to a logging level.

    Without ``value`` the ``STATEMENT_IMPORT_LOG_LEVEL`` variable is read.
    Anything unrecognized falls back to ``INFO``.
    """

    raw = (value if value is not None else os.getenv(LEVEL_ENV_VAR, "")).strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelNamesMapping().get(raw.upper())
    return level if level is not None else logging.INFO


def configure_logging() -> None:
    root = logging.getLogger(ROOT_LOGGER)
    if any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.__stderr__)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.handlers = [handler]
    root.setLevel(resolve_level())
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
