"""Unit tests for the chat service and ``respond_to_turn``.

Tests cover: turn validation (blank content, wrong role), assistant turn
construction, recent-window and explicit context resolution, storage of
both sides of an exchange, rejection before storage, settings
forwarding, and history paging.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from transcript_chat.chat import ChatService, respond_to_turn
from transcript_chat.config import Settings
from transcript_chat.exceptions import InvalidInputError, SessionNotFoundError
from transcript_chat.models.chat import ChatQuery, ChatRole, ChatTurn
from transcript_chat.models.session import CreateExcerptInput, CreateSessionInput
from transcript_chat.store import SessionStore

_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_store() -> tuple[SessionStore, str]:
    store = SessionStore(clock=lambda: _NOW)
    session = store.create_session(CreateSessionInput(title="Review", audio_source="default"))
    return store, session.id


def _add(
    store: SessionStore,
    session_id: str,
    content: str,
    minutes_ago: float,
    is_final: bool = True,
    speaker_id: str | None = None,
) -> str:
    return store.add_excerpt(
        CreateExcerptInput(
            session_id=session_id,
            content=content,
            confidence=0.9,
            is_final=is_final,
            speaker_id=speaker_id,
            timestamp=_NOW - timedelta(minutes=minutes_ago),
        )
    ).id


def _turn_count(store: SessionStore, session_id: str) -> int:
    return len(store.list_chat_turns(ChatQuery(session_id=session_id, limit=100)))


# ---------------------------------------------------------------------------
# respond_to_turn
# ---------------------------------------------------------------------------


class TestRespondToTurn:
    def test_builds_assistant_turn(self, make_excerpt) -> None:
        user_turn = ChatTurn(session_id="s1", role=ChatRole.USER, content="Who is speaking?")
        context = [make_excerpt(speaker_id="a"), make_excerpt(speaker_id="b")]

        reply = respond_to_turn(user_turn, context)

        assert reply.role is ChatRole.ASSISTANT
        assert reply.session_id == "s1"
        assert reply.content == "I can identify 2 different speaker(s) in the transcription."
        assert reply.context_ids == tuple(e.id for e in context)
        assert reply.id != user_turn.id

    def test_rejects_non_user_turn(self) -> None:
        turn = ChatTurn(session_id="s1", role=ChatRole.ASSISTANT, content="Summarize")

        with pytest.raises(InvalidInputError, match="input must represent a user turn"):
            respond_to_turn(turn, [])

    def test_rejects_blank_content(self) -> None:
        turn = ChatTurn(session_id="s1", role=ChatRole.USER, content="   ")

        with pytest.raises(InvalidInputError, match="question cannot be empty"):
            respond_to_turn(turn, [])

    def test_blank_check_runs_before_role_check(self) -> None:
        turn = ChatTurn(session_id="s1", role=ChatRole.ASSISTANT, content="")

        with pytest.raises(InvalidInputError, match="question cannot be empty"):
            respond_to_turn(turn, [])

    def test_role_accepts_plain_string(self) -> None:
        turn = ChatTurn(session_id="s1", role="user", content="How long?")

        reply = respond_to_turn(turn, [])

        assert reply.content == "No transcription messages available to analyze timing."


# ---------------------------------------------------------------------------
# ChatService
# ---------------------------------------------------------------------------


class TestProcessChatRequest:
    def test_stores_user_and_assistant_turns(self) -> None:
        store, sid = _make_store()
        _add(store, sid, "The budget was approved today.", minutes_ago=1)

        exchange = ChatService(store).process_chat_request(sid, "Summarize please")

        assert exchange.user_turn.role is ChatRole.USER
        assert exchange.user_turn.content == "Summarize please"
        assert exchange.assistant_turn.role is ChatRole.ASSISTANT
        assert "budget was approved today" in exchange.assistant_turn.content

        history = ChatService(store).history(sid)
        assert [t.id for t in history] == [
            exchange.assistant_turn.id,
            exchange.user_turn.id,
        ]

    def test_recent_context_is_final_and_newest_first(self) -> None:
        store, sid = _make_store()
        older = _add(store, sid, "First point made.", minutes_ago=4, speaker_id="a")
        newer = _add(store, sid, "Second point made.", minutes_ago=2, speaker_id="b")
        _add(store, sid, "draft", minutes_ago=1, is_final=False, speaker_id="c")
        _add(store, sid, "Too old to count.", minutes_ago=30, speaker_id="d")

        exchange = ChatService(store).process_chat_request(sid, "Who is speaking?")

        assert exchange.assistant_turn.context_ids == (newer, older)
        assert "2 different speaker(s)" in exchange.assistant_turn.content
        assert exchange.user_turn.context_ids is None

    def test_recent_context_makes_timing_negative(self) -> None:
        """Newest-first context reverses the first/last timing span."""
        store, sid = _make_store()
        _add(store, sid, "start", minutes_ago=5)
        _add(store, sid, "end", minutes_ago=2)

        exchange = ChatService(store).process_chat_request(sid, "How long was this?")

        assert exchange.assistant_turn.content == (
            "The transcription spans approximately -3 minutes."
        )

    def test_explicit_context_ids(self) -> None:
        store, sid = _make_store()
        first = _add(store, sid, "Hiring is paused.", minutes_ago=50)
        _add(store, sid, "Unrelated chatter here.", minutes_ago=40)
        draft = _add(store, sid, "interim", minutes_ago=30, is_final=False)

        exchange = ChatService(store).process_chat_request(
            sid, "What about hiring?", context_ids=[first, draft, "unknown"]
        )

        # Listing order is newest first.
        assert exchange.assistant_turn.context_ids == (draft, first)
        assert exchange.user_turn.context_ids == (first, draft, "unknown")
        assert "Hiring is paused" in exchange.assistant_turn.content

    def test_empty_context_ids_fall_back_to_recent(self) -> None:
        store, sid = _make_store()
        recent = _add(store, sid, "Recent remark.", minutes_ago=1)

        exchange = ChatService(store).process_chat_request(sid, "anything", context_ids=[])

        assert exchange.assistant_turn.context_ids == (recent,)
        assert exchange.user_turn.context_ids is None

    def test_window_from_settings(self) -> None:
        store, sid = _make_store()
        _add(store, sid, "Three minutes ago.", minutes_ago=3)
        inside = _add(store, sid, "Just now.", minutes_ago=0.5)

        service = ChatService(store, Settings(context_window_minutes=1))
        exchange = service.process_chat_request(sid, "Who?")

        assert exchange.assistant_turn.context_ids == (inside,)

    def test_context_limit_from_settings(self) -> None:
        store, sid = _make_store()
        _add(store, sid, "one", minutes_ago=3)
        _add(store, sid, "two", minutes_ago=2)
        newest = _add(store, sid, "three", minutes_ago=1)

        service = ChatService(store, Settings(context_limit=1))
        exchange = service.process_chat_request(sid, "Who?")

        assert exchange.assistant_turn.context_ids == (newest,)

    def test_explicit_now_moves_window(self) -> None:
        store, sid = _make_store()
        old = _add(store, sid, "An hour ago.", minutes_ago=60)

        exchange = ChatService(store).process_chat_request(
            sid, "Who?", now=_NOW - timedelta(minutes=58)
        )

        assert exchange.assistant_turn.context_ids == (old,)

    def test_naive_excerpt_timestamp_is_read_as_utc(self) -> None:
        store, sid = _make_store()
        naive = store.add_excerpt(
            CreateExcerptInput(
                session_id=sid,
                content="The launch moved to Thursday.",
                confidence=0.9,
                is_final=True,
                timestamp=datetime(2024, 1, 1, 11, 58, 0),
            )
        ).id

        exchange = ChatService(store).process_chat_request(sid, "Please summarize")

        assert exchange.assistant_turn.context_ids == (naive,)
        assert "launch moved to Thursday" in exchange.assistant_turn.content

    def test_naive_now_is_read_as_utc(self) -> None:
        store, sid = _make_store()
        recent = _add(store, sid, "Just said.", minutes_ago=1)

        exchange = ChatService(store).process_chat_request(
            sid, "Who?", now=_NOW.replace(tzinfo=None)
        )

        assert exchange.assistant_turn.context_ids == (recent,)

    @pytest.mark.parametrize("question", ["", "   "])
    def test_blank_question_stores_nothing(self, question: str) -> None:
        store, sid = _make_store()

        with pytest.raises(InvalidInputError):
            ChatService(store).process_chat_request(sid, question)

        assert _turn_count(store, sid) == 0

    def test_unknown_session_raises(self) -> None:
        store, _ = _make_store()

        with pytest.raises(SessionNotFoundError):
            ChatService(store).process_chat_request("missing", "Summarize")

    def test_one_reply_per_question(self) -> None:
        store, sid = _make_store()
        service = ChatService(store)

        service.process_chat_request(sid, "Summarize")
        service.process_chat_request(sid, "Who is speaking?")

        roles = [t.role for t in store.list_chat_turns(ChatQuery(session_id=sid))]
        assert roles.count(ChatRole.USER) == 2
        assert roles.count(ChatRole.ASSISTANT) == 2

    def test_empty_session_answers_without_content(self) -> None:
        store, sid = _make_store()

        exchange = ChatService(store).process_chat_request(sid, "Summarize please")

        assert "don't have any transcription content" in exchange.assistant_turn.content
        assert exchange.assistant_turn.context_ids == ()


class TestHistory:
    def test_history_uses_configured_page_size(self) -> None:
        store, sid = _make_store()
        service = ChatService(store, Settings(chat_history_limit=3))
        for _ in range(3):
            service.process_chat_request(sid, "Summarize")

        assert len(service.history(sid)) == 3
        assert len(service.history(sid, offset=3)) == 3
        assert service.history(sid, offset=6) == []
