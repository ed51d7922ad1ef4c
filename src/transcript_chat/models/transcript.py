"""Transcript data models.

:class:`TranscriptExcerpt` is a Pydantic model because excerpts cross the
store and file-loading boundaries and must be validated there.  The parser
result types are plain frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime; aware values pass through unchanged."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TranscriptExcerpt(BaseModel):
    """One unit of transcribed text with its metadata.

    Excerpts are created as transcription proceeds and never mutated
    afterwards, hence ``frozen=True``.

    Attributes:
        id: Opaque identifier, unique within a session.
        content: Transcribed text (non-empty).
        confidence: Recogniser confidence in ``[0, 1]``; informational.
        timestamp: When the text was produced.
        is_final: ``True`` for a stable result, ``False`` for an interim
            one that may still be revised.
        speaker_id: Speaker label, or ``None`` when no speaker was
            identified.
        session_id: Owning session, or ``None`` for excerpts that were
            loaded outside a session.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    content: str = Field(min_length=1)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    timestamp: datetime
    is_final: bool = True
    speaker_id: str | None = None
    session_id: str | None = None

    @field_validator("timestamp")
    @classmethod
    def timestamp_as_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are taken to be UTC."""
        return as_utc(value)


@dataclass(frozen=True)
class ParseWarning:
    """A structured warning produced while loading a transcript.

    Attributes:
        line_number: 1-based line number of the problematic line.
        message: Human-readable description of the issue.
        raw_line: The original line text that triggered the warning.
    """

    line_number: int
    message: str
    raw_line: str


@dataclass(frozen=True)
class TranscriptParseResult:
    """Top-level return type of the transcript loader.

    Attributes:
        excerpts: Parsed excerpts, in order of appearance.
        speakers: Unique speaker labels, ordered by first appearance.
        warnings: Any parse warnings encountered.
        source: File path of the transcript, or ``"<string>"`` when
            parsing from a string.
    """

    excerpts: list[TranscriptExcerpt] = field(default_factory=list)
    speakers: list[str] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)
    source: str = "<string>"
