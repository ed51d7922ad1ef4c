"""Context selection for the answer engine.

Two ways of choosing which excerpts a question is answered against:

- :func:`select_recent_excerpts` -- final excerpts inside a trailing time
  window, newest first (what the chat panel offers by default).
- :func:`select_excerpts_by_id` -- an explicit id list chosen by the user,
  intersected with the session's excerpts.

Both are plain filters; neither touches the store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from transcript_chat.exceptions import InvalidInputError
from transcript_chat.models.transcript import TranscriptExcerpt, as_utc

logger = logging.getLogger(__name__)

# Default trailing window in minutes.
_DEFAULT_WINDOW_MINUTES = 5


def select_recent_excerpts(
    excerpts: Iterable[TranscriptExcerpt],
    now: datetime,
    window_minutes: int = _DEFAULT_WINDOW_MINUTES,
    limit: int | None = None,
) -> list[TranscriptExcerpt]:
    """Return final excerpts produced within the last *window_minutes*.

    The window is inclusive of its start: an excerpt stamped exactly
    ``now - window_minutes`` is kept.  Interim excerpts are dropped.

    Args:
        excerpts: Candidate excerpts, in any order.
        now: End of the window.  A naive value is taken to be UTC, like
            excerpt timestamps.
        window_minutes: Window length in minutes.  Defaults to 5.
        limit: Keep at most this many of the newest excerpts, or
            ``None`` to keep all of them.

    Returns:
        Matching excerpts, newest first.

    Raises:
        InvalidInputError: If *window_minutes* or *limit* is not positive.
    """
    if window_minutes <= 0:
        raise InvalidInputError(f"window_minutes must be positive, got {window_minutes}")
    if limit is not None and limit <= 0:
        raise InvalidInputError(f"limit must be positive, got {limit}")

    cutoff = as_utc(now) - timedelta(minutes=window_minutes)
    recent = [e for e in excerpts if e.is_final and e.timestamp >= cutoff]
    recent.sort(key=lambda e: e.timestamp, reverse=True)

    if limit is not None:
        recent = recent[:limit]

    logger.debug(
        "Selected %d recent excerpt(s) since %s",
        len(recent),
        cutoff.isoformat(),
    )
    return recent


def select_excerpts_by_id(
    excerpts: Sequence[TranscriptExcerpt],
    ids: Iterable[str],
) -> list[TranscriptExcerpt]:
    """Return the excerpts whose id appears in *ids*.

    Order follows *excerpts* (the session's listing order), not *ids*.
    Ids that match nothing are ignored.

    Args:
        excerpts: The session's excerpts.
        ids: Requested excerpt ids.

    Returns:
        The matching excerpts.
    """
    wanted = set(ids)
    selected = [e for e in excerpts if e.id in wanted]

    unknown = wanted - {e.id for e in selected}
    if unknown:
        logger.debug("Ignoring %d unknown context id(s): %s", len(unknown), sorted(unknown))

    return selected
