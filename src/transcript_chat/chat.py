"""Chat orchestration: one user question in, one stored exchange out.

:func:`respond_to_turn` turns a validated user turn plus its context into
an assistant turn.  :class:`ChatService` wraps it with the session store:
it resolves context, stores the user turn, answers, and stores the
assistant turn, so every accepted question yields exactly one reply.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from transcript_chat.config import Settings
from transcript_chat.context import select_excerpts_by_id
from transcript_chat.engine import answer_question
from transcript_chat.exceptions import InvalidInputError
from transcript_chat.models.chat import (
    ChatExchange,
    ChatQuery,
    ChatRole,
    ChatTurn,
    CreateChatTurnInput,
)
from transcript_chat.models.session import ExcerptQuery
from transcript_chat.models.transcript import TranscriptExcerpt
from transcript_chat.store import SessionStore

logger = logging.getLogger(__name__)

# Upper bound on excerpts scanned when resolving explicit context ids.
_EXPLICIT_CONTEXT_SCAN_LIMIT = 1000


def respond_to_turn(
    user_turn: ChatTurn,
    context: Sequence[TranscriptExcerpt],
) -> ChatTurn:
    """Build the assistant turn answering *user_turn*.

    The returned turn is not stored; it belongs to the same session as
    *user_turn* and records the ids of every context excerpt.

    Args:
        user_turn: The triggering turn.  Must have role ``user`` and
            non-blank content.
        context: Excerpts to answer from, in the order to present them
            to the engine.

    Returns:
        A new assistant :class:`ChatTurn`.

    Raises:
        InvalidInputError: If the content is blank or the role is not
            ``user``.
    """
    if not user_turn.content.strip():
        raise InvalidInputError("question cannot be empty")
    if user_turn.role is not ChatRole.USER:
        raise InvalidInputError("input must represent a user turn")

    answer = answer_question(user_turn.content, context)
    return ChatTurn(
        session_id=user_turn.session_id,
        role=ChatRole.ASSISTANT,
        content=answer.content,
        context_ids=answer.context_ids,
    )


class ChatService:
    """Answers questions against a session stored in a :class:`SessionStore`.

    Args:
        store: Where sessions, excerpts and chat turns live.
        settings: Context-window and history settings.  Defaults to
            :class:`~transcript_chat.config.Settings` defaults.
    """

    def __init__(self, store: SessionStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or Settings()

    def process_chat_request(
        self,
        session_id: str,
        question: str,
        context_ids: Sequence[str] | None = None,
        now: datetime | None = None,
    ) -> ChatExchange:
        """Answer *question* and store both sides of the exchange.

        Steps:

        1. **Validate** -- reject blank questions and unknown sessions
           before anything is stored.
        2. **Resolve context** -- the named excerpts when *context_ids*
           is given, otherwise final excerpts from the configured
           trailing window.
        3. **Answer** -- store the user turn, run the engine, store the
           assistant turn.

        Args:
            session_id: Session the question is about.
            question: The user's question.
            context_ids: Explicit excerpt ids to answer from.  ``None``
                or empty selects recent excerpts instead.
            now: End of the recent-context window.  Defaults to the
                store's clock.

        Returns:
            The stored user and assistant turns.

        Raises:
            InvalidInputError: If *question* is blank.
            SessionNotFoundError: If *session_id* does not exist.
        """
        if not question or not question.strip():
            raise InvalidInputError("question cannot be empty")
        self._store.get_session(session_id)

        explicit_ids = tuple(context_ids) if context_ids else None
        context = self._resolve_context(session_id, explicit_ids, now)
        logger.info(
            "Answering question in session %s with %d context excerpt(s)",
            session_id,
            len(context),
        )

        user_turn = self._store.add_chat_turn(
            CreateChatTurnInput(
                session_id=session_id,
                role=ChatRole.USER,
                content=question,
                context_ids=explicit_ids,
            )
        )
        reply = respond_to_turn(user_turn, context)
        assistant_turn = self._store.add_chat_turn(
            CreateChatTurnInput(
                session_id=session_id,
                role=ChatRole.ASSISTANT,
                content=reply.content,
                context_ids=reply.context_ids,
            )
        )
        return ChatExchange(user_turn=user_turn, assistant_turn=assistant_turn)

    def history(self, session_id: str, offset: int = 0) -> list[ChatTurn]:
        """Return one page of the session's chat turns, newest first."""
        return self._store.list_chat_turns(
            ChatQuery(
                session_id=session_id,
                limit=self._settings.chat_history_limit,
                offset=offset,
            )
        )

    def _resolve_context(
        self,
        session_id: str,
        explicit_ids: tuple[str, ...] | None,
        now: datetime | None,
    ) -> list[TranscriptExcerpt]:
        if explicit_ids is not None:
            excerpts = self._store.list_excerpts(
                ExcerptQuery(session_id=session_id, limit=_EXPLICIT_CONTEXT_SCAN_LIMIT)
            )
            return select_excerpts_by_id(excerpts, explicit_ids)

        return self._store.recent_excerpts(
            session_id,
            minutes=self._settings.context_window_minutes,
            now=now,
            limit=self._settings.context_limit,
        )
