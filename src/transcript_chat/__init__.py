"""transcript-chat: question answering over live transcriptions.

Sessions collect transcribed excerpts; users ask questions about them and
a rule-based answer engine replies from a selected set of excerpts.
"""

from __future__ import annotations

from transcript_chat.chat import ChatService, respond_to_turn
from transcript_chat.context import select_excerpts_by_id, select_recent_excerpts
from transcript_chat.engine import Intent, answer_question, classify_intent
from transcript_chat.exceptions import (
    InvalidInputError,
    SessionNotFoundError,
    TranscriptFormatError,
)
from transcript_chat.models.chat import Answer, ChatExchange, ChatRole, ChatTurn
from transcript_chat.models.transcript import (
    ParseWarning,
    TranscriptExcerpt,
    TranscriptParseResult,
)
from transcript_chat.parser import parse_transcript, parse_transcript_file
from transcript_chat.store import SessionStore

__version__ = "0.1.0"

__all__ = [
    "Answer",
    "ChatExchange",
    "ChatRole",
    "ChatService",
    "ChatTurn",
    "Intent",
    "InvalidInputError",
    "ParseWarning",
    "SessionNotFoundError",
    "SessionStore",
    "TranscriptExcerpt",
    "TranscriptFormatError",
    "TranscriptParseResult",
    "answer_question",
    "classify_intent",
    "parse_transcript",
    "parse_transcript_file",
    "respond_to_turn",
    "select_excerpts_by_id",
    "select_recent_excerpts",
]
