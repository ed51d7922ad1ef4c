"""Console output for chat exchanges.

:func:`format_exchange` renders one question/answer pair together with
the excerpts that were offered as context; :func:`print_exchange` writes
it to stdout.  :func:`format_devices` renders the audio-device listing.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from transcript_chat.models.chat import ChatExchange
from transcript_chat.models.session import AudioDevice
from transcript_chat.models.transcript import TranscriptExcerpt

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH
_SNIPPET_LENGTH = 50


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_exchange(
    exchange: ChatExchange,
    excerpts: Sequence[TranscriptExcerpt] = (),
) -> str:
    """Render a chat exchange as console text.

    Sections:

    - **Question** -- the user's turn.
    - **Context** -- one line per context id: timestamp, speaker and a
      snippet when the excerpt is found in *excerpts*, the bare id
      otherwise.
    - **Answer** -- the assistant's turn.

    Args:
        exchange: The stored user/assistant pair.
        excerpts: Excerpts to look context ids up in.

    Returns:
        A multi-line string ready for console display.
    """
    by_id = {e.id: e for e in excerpts}
    context_ids = exchange.assistant_turn.context_ids or ()

    lines: list[str] = [_SEPARATOR, "  TRANSCRIPT CHAT", _SEPARATOR, ""]

    lines.append("Question:")
    lines.append(f"  {exchange.user_turn.content}")
    lines.append("")

    lines.append(f"Context ({len(context_ids)} excerpt(s)):")
    if not context_ids:
        lines.append("  (none)")
    for excerpt_id in context_ids:
        excerpt = by_id.get(excerpt_id)
        lines.append(f"  {_format_context_line(excerpt_id, excerpt)}")
    lines.append("")

    lines.append("Answer:")
    lines.append(f"  {exchange.assistant_turn.content}")
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def print_exchange(
    exchange: ChatExchange,
    excerpts: Sequence[TranscriptExcerpt] = (),
) -> None:
    """Format and print a chat exchange to stdout."""
    sys.stdout.write(format_exchange(exchange, excerpts) + "\n")


def format_devices(devices: Sequence[AudioDevice]) -> str:
    """Render audio devices as ``device_id  label  (kind)`` lines."""
    if not devices:
        return "No audio devices found."
    return "\n".join(f"{d.device_id}  {d.label}  ({d.kind})" for d in devices)


# ---------------------------------------------------------------------------
# Internal formatters
# ---------------------------------------------------------------------------


def _format_context_line(excerpt_id: str, excerpt: TranscriptExcerpt | None) -> str:
    if excerpt is None:
        return f"[{excerpt_id}]"

    speaker = excerpt.speaker_id or "unknown speaker"
    snippet = excerpt.content.replace("\n", " ")
    if len(snippet) > _SNIPPET_LENGTH:
        snippet = snippet[: _SNIPPET_LENGTH - 3] + "..."
    marker = "" if excerpt.is_final else " (interim)"
    return (
        f"[{excerpt_id}] {excerpt.timestamp.strftime('%H:%M:%S')} "
        f"{speaker}: {snippet}{marker}"
    )
