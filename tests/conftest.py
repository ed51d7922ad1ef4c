"""Shared fixtures for transcript-chat tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone

import pytest

from transcript_chat.models.transcript import TranscriptExcerpt

BASE_TIME = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)

_CONFIG_VARS = (
    "LOG_LEVEL",
    "CONTEXT_WINDOW_MINUTES",
    "CONTEXT_LIMIT",
    "CHAT_HISTORY_LIMIT",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all transcript-chat environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("transcript_chat.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _CONFIG_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def make_excerpt() -> Callable[..., TranscriptExcerpt]:
    """Factory for excerpts with sensible defaults.

    ``minutes`` is an offset from :data:`BASE_TIME`; pass ``timestamp``
    to set it directly.
    """
    counter = {"n": 0}

    def _make(
        content: str = "Some transcribed text.",
        *,
        is_final: bool = True,
        speaker_id: str | None = None,
        minutes: float = 0,
        timestamp: datetime | None = None,
        excerpt_id: str | None = None,
    ) -> TranscriptExcerpt:
        counter["n"] += 1
        return TranscriptExcerpt(
            id=excerpt_id or f"e{counter['n']}",
            content=content,
            confidence=0.9,
            timestamp=timestamp or BASE_TIME + timedelta(minutes=minutes),
            is_final=is_final,
            speaker_id=speaker_id,
        )

    return _make


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
