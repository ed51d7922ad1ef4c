"""Logging setup for transcript-chat.

All modules log through ``logging.getLogger(__name__)``; this module only
decides where records go and how they look.  Records are written to
*stderr* (or a caller-supplied stream) as pipe-separated fields with an
ISO 8601 timestamp, so CLI output on *stdout* stays clean.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Marks the handler we own so repeated setup calls reuse it.
_HANDLER_ATTR = "_transcript_chat_handler"


def resolve_level(level: str | int) -> int:
    """Translate a level name (or number) into a numeric logging level.

    Args:
        level: A level name such as ``"debug"`` or ``"WARNING"``, or an
            already-numeric level.

    Returns:
        The numeric level.

    Raises:
        ValueError: If *level* is not a recognised logging level.
    """
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Invalid log level: {level!r}")
    return numeric


def setup_logging(level: str | int = "INFO", stream: TextIO | None = None) -> None:
    """Attach the transcript-chat handler to the root logger.

    Safe to call more than once: the second call only adjusts the level
    of the handler installed by the first.  Handlers added by other code
    are left alone.

    Args:
        level: Level name or number (default ``"INFO"``).
        stream: Destination stream.  Defaults to ``sys.stderr``.

    Raises:
        ValueError: If *level* is not a recognised logging level.
    """
    numeric_level = resolve_level(level)

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
