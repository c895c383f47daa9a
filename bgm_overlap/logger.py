"""Logging helpers for bgm_overlap.

The package itself only creates module loggers. The application embedding
it (the UI or bot that calls ``CollectionComparer.compare``) calls
``setup_logging()`` once at startup, before ``build_comparer()``.
"""

from __future__ import annotations

import logging

from . import config


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger.

    Args:
        level: Level name such as ``"DEBUG"``. Defaults to ``LOG_LEVEL``
            from the settings; unknown names fall back to INFO.
    """
    level_name = (level or config.settings.LOG_LEVEL).upper()
    resolved = getattr(logging, level_name, None)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)
    root.setLevel(resolved)

    # One line per page request is too chatty below WARNING
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging"]
