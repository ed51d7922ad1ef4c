"""Pydantic models for chat turns and answers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ChatRole(str, Enum):
    """Who authored a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Answer(BaseModel):
    """Result of one answer-engine invocation.

    Attributes:
        content: Natural-language answer text (never empty).
        context_ids: Ids of **every** excerpt the engine was given, in
            input order -- a record of what was available, not of what
            the answer text drew on.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    context_ids: tuple[str, ...] = ()


class CreateChatTurnInput(BaseModel):
    """Input for storing a chat turn.

    Content may be blank here; question validation happens in the chat
    layer before anything is stored.
    """

    session_id: str
    role: ChatRole
    content: str
    context_ids: tuple[str, ...] | None = None


class ChatTurn(BaseModel):
    """One stored message in the question/answer dialogue.

    Turns are immutable once created.

    Attributes:
        id: Unique turn id.
        session_id: Owning session.
        role: ``user`` or ``assistant``.
        content: Message text.
        context_ids: Ordered excerpt ids consulted for this turn.
            ``None`` on user turns that named no explicit context.
        timestamp: Creation time (UTC).
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    session_id: str
    role: ChatRole
    content: str
    context_ids: tuple[str, ...] | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ChatQuery(BaseModel):
    """Pagination parameters for listing a session's chat turns."""

    session_id: str
    limit: int = Field(default=50, gt=0, le=100)
    offset: int = Field(default=0, ge=0)


class ChatExchange(BaseModel):
    """The user turn and the assistant turn produced by one request."""

    model_config = ConfigDict(frozen=True)

    user_turn: ChatTurn
    assistant_turn: ChatTurn
