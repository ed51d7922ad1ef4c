"""Pydantic models for transcription sessions, excerpt queries and devices."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transcript_chat.models.transcript import as_utc


class SessionStatus(str, Enum):
    """Recording state of a transcription session."""

    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


class TranscriptionSession(BaseModel):
    """A recording that owns excerpts and chat turns.

    Attributes:
        id: Session id (UUID string).
        title: Display title, 1-255 characters.
        status: Current recording state.
        audio_source: Id of the selected audio input device.
        created_at: Creation time (UTC).
        updated_at: Time of the last update (UTC).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = Field(min_length=1, max_length=255)
    status: SessionStatus = SessionStatus.ACTIVE
    audio_source: str = Field(min_length=1)
    created_at: datetime
    updated_at: datetime


class CreateSessionInput(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    audio_source: str = Field(min_length=1)


class UpdateSessionInput(BaseModel):
    """Partial update: fields left as ``None`` are not changed."""

    id: str
    title: str | None = Field(default=None, min_length=1, max_length=255)
    status: SessionStatus | None = None
    audio_source: str | None = None


class CreateExcerptInput(BaseModel):
    """Input for recording a new excerpt against a session.

    ``timestamp`` defaults to the time of insertion when omitted.
    Naive timestamps are taken to be UTC.
    """

    session_id: str
    content: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    is_final: bool
    speaker_id: str | None = None
    timestamp: datetime | None = None

    @field_validator("timestamp")
    @classmethod
    def timestamp_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class ExcerptQuery(BaseModel):
    """Filter and pagination parameters for listing a session's excerpts."""

    session_id: str
    limit: int = Field(default=100, gt=0, le=1000)
    offset: int = Field(default=0, ge=0)
    is_final: bool | None = None


class AudioDevice(BaseModel):
    """An audio device that can feed a session."""

    model_config = ConfigDict(frozen=True)

    device_id: str
    label: str
    kind: Literal["audioinput", "audiooutput"]
    group_id: str | None = None
