"""Logging presets for sopsreader.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached by ``init_logging``, typically from the CLI.

Presets:
    prod: WARNING and above, tracebacks without local variables.
    dev: DEBUG and above.
    debug: TRACE and above, tracebacks with local variables.

Local variables may hold data keys or plaintext, so only the ``debug``
preset shows them.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

#: Custom level below DEBUG for very chatty output.
TRACE_LEVEL = 5

#: Name of the package logger.
LOGGER_NAME = "sopsreader"

PRESETS: dict[str, dict[str, Any]] = {
    "prod": {"level": logging.WARNING, "tracebacks_show_locals": False},
    "dev": {"level": logging.DEBUG, "tracebacks_show_locals": False},
    "debug": {"level": TRACE_LEVEL, "tracebacks_show_locals": True},
}

logging.addLevelName(TRACE_LEVEL, "TRACE")


def init_logging(preset: str = "prod", *, console: Console | None = None) -> logging.Logger:
    """Attach a rich handler to the ``sopsreader`` logger.

    Calling it again replaces the handler installed by a previous call.

    Args:
        preset: One of ``prod``, ``dev``, ``debug``.
        console: Console to write to, stderr by default.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If ``preset`` is unknown.
    """
    try:
        settings = PRESETS[preset]
    except KeyError:
        raise ValueError(f"Unknown logging preset {preset!r} (expected one of {', '.join(PRESETS)})") from None

    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=settings["tracebacks_show_locals"],
        show_path=False,
    )
    handler.setLevel(settings["level"])
    logger.addHandler(handler)
    logger.setLevel(settings["level"])
    return logger


__all__ = ["LOGGER_NAME", "PRESETS", "TRACE_LEVEL", "init_logging"]
