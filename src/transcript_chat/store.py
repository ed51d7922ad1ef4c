"""In-memory session store.

Stands in for the external data store the chat layer talks to: sessions,
the excerpts and chat turns they own, and the audio-device listing.
Deleting a session deletes everything it owns.  Listings are newest
first and paginated with ``limit``/``offset`` like the query models
describe.

All mutations run under one lock, so a single store can be shared by
concurrent request handlers.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from transcript_chat.context import select_recent_excerpts
from transcript_chat.exceptions import InvalidInputError, SessionNotFoundError
from transcript_chat.models.chat import ChatQuery, ChatTurn, CreateChatTurnInput
from transcript_chat.models.session import (
    AudioDevice,
    CreateExcerptInput,
    CreateSessionInput,
    ExcerptQuery,
    SessionStatus,
    TranscriptionSession,
    UpdateSessionInput,
)
from transcript_chat.models.transcript import TranscriptExcerpt

logger = logging.getLogger(__name__)

_DEFAULT_DEVICES = (
    AudioDevice(
        device_id="default",
        label="Default Audio Input",
        kind="audioinput",
        group_id=None,
    ),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(items: list, key: Callable) -> list:
    """Sort by *key* descending; among equal keys the later insert wins."""
    return sorted(reversed(items), key=key, reverse=True)


class SessionStore:
    """Thread-safe in-memory store for sessions, excerpts and chat turns.

    Args:
        clock: Returns the current time.  Defaults to UTC ``now``;
            tests pass a fixed clock.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, TranscriptionSession] = {}
        self._excerpts: dict[str, list[TranscriptExcerpt]] = {}
        self._chat_turns: dict[str, list[ChatTurn]] = {}

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, data: CreateSessionInput) -> TranscriptionSession:
        """Create an ``active`` session and return it."""
        now = self._clock()
        session = TranscriptionSession(
            id=str(uuid.uuid4()),
            title=data.title,
            status=SessionStatus.ACTIVE,
            audio_source=data.audio_source,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._sessions[session.id] = session
            self._excerpts[session.id] = []
            self._chat_turns[session.id] = []
        logger.info("Created session %s (%r)", session.id, session.title)
        return session

    def list_sessions(self) -> list[TranscriptionSession]:
        """Return all sessions, most recently created first."""
        with self._lock:
            sessions = list(self._sessions.values())
        return _newest_first(sessions, key=lambda s: s.created_at)

    def get_session(self, session_id: str) -> TranscriptionSession:
        """Return the session with *session_id*.

        Raises:
            SessionNotFoundError: If no such session exists.
        """
        with self._lock:
            return self._require_session(session_id)

    def update_session(self, data: UpdateSessionInput) -> TranscriptionSession:
        """Apply a partial update and refresh ``updated_at``.

        Only fields set on *data* change.

        Raises:
            SessionNotFoundError: If no such session exists.
        """
        changes: dict[str, object] = {"updated_at": self._clock()}
        if data.title is not None:
            changes["title"] = data.title
        if data.status is not None:
            changes["status"] = data.status
        if data.audio_source is not None:
            changes["audio_source"] = data.audio_source

        with self._lock:
            current = self._require_session(data.id)
            updated = current.model_copy(update=changes)
            self._sessions[data.id] = updated
        logger.info("Updated session %s: %s", data.id, sorted(changes))
        return updated

    def delete_session(self, session_id: str) -> None:
        """Delete a session with its excerpts and chat turns.

        Deleting an unknown session is a no-op.
        """
        with self._lock:
            removed = self._sessions.pop(session_id, None)
            excerpts = self._excerpts.pop(session_id, [])
            turns = self._chat_turns.pop(session_id, [])
        if removed is not None:
            logger.info(
                "Deleted session %s with %d excerpt(s) and %d chat turn(s)",
                session_id,
                len(excerpts),
                len(turns),
            )

    # ------------------------------------------------------------------
    # Excerpts
    # ------------------------------------------------------------------

    def add_excerpt(self, data: CreateExcerptInput) -> TranscriptExcerpt:
        """Record a new excerpt against an existing session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        excerpt = TranscriptExcerpt(
            id=str(uuid.uuid4()),
            session_id=data.session_id,
            content=data.content,
            confidence=data.confidence,
            timestamp=data.timestamp or self._clock(),
            is_final=data.is_final,
            speaker_id=data.speaker_id,
        )
        with self._lock:
            self._require_session(data.session_id)
            self._excerpts[data.session_id].append(excerpt)
        return excerpt

    def import_excerpts(
        self,
        session_id: str,
        excerpts: Iterable[TranscriptExcerpt],
    ) -> list[TranscriptExcerpt]:
        """Attach already-built excerpts (e.g. from a file) to a session.

        Excerpt ids are kept; ``session_id`` is overwritten.

        Raises:
            SessionNotFoundError: If the session does not exist.
            InvalidInputError: If an excerpt id is already used in the
                session.
        """
        owned = [e.model_copy(update={"session_id": session_id}) for e in excerpts]
        with self._lock:
            self._require_session(session_id)
            existing = {e.id for e in self._excerpts[session_id]}
            for excerpt in owned:
                if excerpt.id in existing:
                    raise InvalidInputError(f"Duplicate excerpt id: {excerpt.id}")
                existing.add(excerpt.id)
            self._excerpts[session_id].extend(owned)
        logger.info("Imported %d excerpt(s) into session %s", len(owned), session_id)
        return owned

    def list_excerpts(self, query: ExcerptQuery) -> list[TranscriptExcerpt]:
        """List a session's excerpts, newest first, filtered and paginated.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        with self._lock:
            self._require_session(query.session_id)
            excerpts = list(self._excerpts[query.session_id])

        if query.is_final is not None:
            excerpts = [e for e in excerpts if e.is_final == query.is_final]

        ordered = _newest_first(excerpts, key=lambda e: e.timestamp)
        return ordered[query.offset : query.offset + query.limit]

    def recent_excerpts(
        self,
        session_id: str,
        minutes: int = 5,
        now: datetime | None = None,
        limit: int | None = None,
    ) -> list[TranscriptExcerpt]:
        """Final excerpts from the last *minutes*, newest first.

        Raises:
            SessionNotFoundError: If the session does not exist.
            InvalidInputError: If *minutes* is not positive.
        """
        with self._lock:
            self._require_session(session_id)
            excerpts = list(self._excerpts[session_id])
        return select_recent_excerpts(
            excerpts,
            now=now or self._clock(),
            window_minutes=minutes,
            limit=limit,
        )

    # ------------------------------------------------------------------
    # Chat turns
    # ------------------------------------------------------------------

    def add_chat_turn(self, data: CreateChatTurnInput) -> ChatTurn:
        """Store a chat turn against an existing session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        turn = ChatTurn(
            session_id=data.session_id,
            role=data.role,
            content=data.content,
            context_ids=data.context_ids,
            timestamp=self._clock(),
        )
        with self._lock:
            self._require_session(data.session_id)
            self._chat_turns[data.session_id].append(turn)
        logger.info("Stored %s turn %s in session %s", turn.role.value, turn.id, turn.session_id)
        return turn

    def list_chat_turns(self, query: ChatQuery) -> list[ChatTurn]:
        """List a session's chat turns, newest first, paginated.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        with self._lock:
            self._require_session(query.session_id)
            turns = list(self._chat_turns[query.session_id])
        ordered = _newest_first(turns, key=lambda t: t.timestamp)
        return ordered[query.offset : query.offset + query.limit]

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def list_audio_devices(self) -> list[AudioDevice]:
        """Return the available audio input devices."""
        return list(_DEFAULT_DEVICES)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_session(self, session_id: str) -> TranscriptionSession:
        # Caller holds the lock.
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

