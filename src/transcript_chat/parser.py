"""Transcript loader: speaker-labelled text or JSON into excerpts.

Text transcripts use one ``[Speaker]: dialogue text`` line per excerpt,
optionally prefixed with an offset from the start of the recording::

    [00:00:05] [Alice]: Let's go over the budget.
    [00:01:10] [Bob]: Marketing needs more.
    [02:30]: A line with an offset but no identified speaker.

JSON transcripts are a list of excerpt records (``id``, ``content``,
``timestamp`` and optionally ``confidence``, ``is_final``,
``speaker_id``), validated with Pydantic.

Either way the result is a
:class:`~transcript_chat.models.transcript.TranscriptParseResult`.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from transcript_chat.exceptions import TranscriptFormatError
from transcript_chat.models.transcript import (
    ParseWarning,
    TranscriptExcerpt,
    TranscriptParseResult,
)

_OFFSET = r"\d{1,2}:\d{2}(?::\d{2})?"

# Optional "[HH:MM:SS] " prefix, then "[Speaker]: text".  The speaker
# capture is non-greedy so it stops at the first ']'.
_LINE_RE = re.compile(rf"^(?:\[({_OFFSET})\]\s*)?\[(.*?)\]:\s*(.*)$")
_OFFSET_RE = re.compile(rf"^{_OFFSET}$")

_EXCERPTS_ADAPTER = TypeAdapter(list[TranscriptExcerpt])


def _parse_offset(raw: str) -> timedelta:
    """Convert ``MM:SS`` or ``HH:MM:SS`` into a :class:`timedelta`."""
    parts = [int(p) for p in raw.split(":")]
    if len(parts) == 2:
        minutes, seconds = parts
        return timedelta(minutes=minutes, seconds=seconds)
    hours, minutes, seconds = parts
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def parse_transcript(
    text: str,
    source: str = "<string>",
    started_at: datetime | None = None,
) -> TranscriptParseResult:
    """Parse a speaker-labelled transcript string into excerpts.

    Args:
        text: Raw transcript text.  Any non-matching, non-blank line after
            a speaker line continues the current excerpt.
        source: Label for the transcript origin (e.g. a file path).
        started_at: Recording start; excerpt timestamps are this plus
            the line offset.  Lines without an offset reuse the previous
            one.  Defaults to the current UTC time.

    Returns:
        A :class:`TranscriptParseResult`.  Every excerpt is final with
        confidence 1.0 and id ``line-<n>`` (its first line number).
        Orphan lines before the first speaker line, empty speaker labels
        and empty dialogue produce warnings instead of excerpts.
    """
    if not text or not text.strip():
        return TranscriptParseResult(source=source)

    base = started_at or datetime.now(timezone.utc).replace(microsecond=0)

    excerpts: list[TranscriptExcerpt] = []
    warnings: list[ParseWarning] = []

    # Accumulator for the excerpt currently being built.
    cur_open = False
    cur_speaker: str | None = None
    cur_parts: list[str] = []
    cur_line_number = 0
    cur_raw_line = ""
    offset = timedelta(0)

    def _flush() -> None:
        if not cur_open:
            return
        content = "\n".join(cur_parts).strip()
        if not content:
            warnings.append(
                ParseWarning(
                    line_number=cur_line_number,
                    message="Empty dialogue text",
                    raw_line=cur_raw_line,
                )
            )
            return
        excerpts.append(
            TranscriptExcerpt(
                id=f"line-{cur_line_number}",
                content=content,
                confidence=1.0,
                timestamp=base + offset,
                is_final=True,
                speaker_id=cur_speaker,
            )
        )

    for line_idx, raw_line in enumerate(text.split("\n")):
        line_number = line_idx + 1

        if not raw_line.strip():
            continue

        match = _LINE_RE.match(raw_line)

        if match:
            _flush()
            cur_open = False

            raw_offset, label, body = match.group(1), match.group(2).strip(), match.group(3)

            # "[02:30]: text" -- the only bracket is an offset, no speaker.
            if raw_offset is None and _OFFSET_RE.match(label):
                raw_offset, speaker = label, None
            elif not label:
                warnings.append(
                    ParseWarning(
                        line_number=line_number,
                        message="Empty speaker name",
                        raw_line=raw_line,
                    )
                )
                continue
            else:
                speaker = label

            if raw_offset is not None:
                offset = _parse_offset(raw_offset)

            cur_open = True
            cur_speaker = speaker
            cur_parts = [body.rstrip()]
            cur_line_number = line_number
            cur_raw_line = raw_line
        elif cur_open:
            cur_parts.append(raw_line.strip())
        else:
            warnings.append(
                ParseWarning(
                    line_number=line_number,
                    message="Line does not match expected format and no prior speaker context",
                    raw_line=raw_line,
                )
            )

    _flush()

    speakers = list(dict.fromkeys(e.speaker_id for e in excerpts if e.speaker_id))

    return TranscriptParseResult(
        excerpts=excerpts,
        speakers=speakers,
        warnings=warnings,
        source=source,
    )


def parse_transcript_json(text: str, source: str = "<string>") -> TranscriptParseResult:
    """Parse a JSON list of excerpt records.

    Args:
        text: JSON document containing a list of excerpt objects.
        source: Label for the transcript origin.

    Returns:
        A :class:`TranscriptParseResult` with the excerpts in file order.

    Raises:
        TranscriptFormatError: If the document is not valid JSON or a
            record fails validation.
    """
    try:
        excerpts = _EXCERPTS_ADAPTER.validate_json(text)
    except ValidationError as exc:
        raise TranscriptFormatError(
            f"Invalid excerpt data in {source}: {exc.error_count()} error(s)\n{exc}",
            source=source,
        ) from exc

    speakers = list(dict.fromkeys(e.speaker_id for e in excerpts if e.speaker_id))
    return TranscriptParseResult(excerpts=excerpts, speakers=speakers, source=source)


def parse_transcript_file(
    file_path: str | Path,
    started_at: datetime | None = None,
) -> TranscriptParseResult:
    """Load a transcript file.

    ``.json`` files go through :func:`parse_transcript_json`; anything
    else is read as speaker-labelled text.

    Args:
        file_path: Path to the transcript file.
        started_at: Recording start for text transcripts (see
            :func:`parse_transcript`).  Ignored for JSON.

    Returns:
        A :class:`TranscriptParseResult` with ``source`` set to the path.

    Raises:
        FileNotFoundError: If *file_path* does not exist.
        TranscriptFormatError: If the file is not valid UTF-8 or a JSON
            transcript is malformed.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Transcript file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise TranscriptFormatError(
            f"Transcript is not valid UTF-8: {path}", source=str(path)
        ) from exc

    if path.suffix.lower() == ".json":
        return parse_transcript_json(text, source=str(path))
    return parse_transcript(text, source=str(path), started_at=started_at)
