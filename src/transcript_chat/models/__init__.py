"""Data models for transcript-chat."""

from __future__ import annotations

from transcript_chat.models.chat import (
    Answer,
    ChatExchange,
    ChatQuery,
    ChatRole,
    ChatTurn,
    CreateChatTurnInput,
)
from transcript_chat.models.session import (
    AudioDevice,
    CreateExcerptInput,
    CreateSessionInput,
    ExcerptQuery,
    SessionStatus,
    TranscriptionSession,
    UpdateSessionInput,
)
from transcript_chat.models.transcript import (
    ParseWarning,
    TranscriptExcerpt,
    TranscriptParseResult,
)

__all__ = [
    "Answer",
    "AudioDevice",
    "ChatExchange",
    "ChatQuery",
    "ChatRole",
    "ChatTurn",
    "CreateChatTurnInput",
    "CreateExcerptInput",
    "CreateSessionInput",
    "ExcerptQuery",
    "ParseWarning",
    "SessionStatus",
    "TranscriptExcerpt",
    "TranscriptParseResult",
    "TranscriptionSession",
    "UpdateSessionInput",
]
