"""Logging configuration for the ``ff`` logger tree.

Modules only call ``logging.getLogger("ff.<area>")``; the app entry point
calls ``configure_logging`` once to attach a single stream handler.
"""

import logging
import sys

_ROOT_LOGGER = "ff"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach one StreamHandler to the ``ff`` root logger. Idempotent."""
    logger = logging.getLogger(_ROOT_LOGGER)
    numeric = logging.getLevelName(level.upper())
    logger.setLevel(numeric if isinstance(numeric, int) else logging.INFO)
    if any(getattr(h, "_ff_handler", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._ff_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
