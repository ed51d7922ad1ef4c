"""Rule-based answer engine for questions about a transcription.

Given a question and a bounded list of transcript excerpts, the engine
picks an answering strategy with a first-match keyword cascade and
returns an :class:`~transcript_chat.models.chat.Answer`:

- **summary** -- first few substantial sentences of the final text.
- **key topics** -- most frequent long words in the final text.
- **speakers** -- number of distinct speaker labels.
- **timing** -- minutes between the first and last excerpt.
- **search** -- first final-text sentence sharing a word with the question.

Every strategy is a pure function of its inputs.  Only final excerpts feed
the text-derived strategies; speaker and timing analysis look at the whole
list.  The engine never re-orders its input: timing uses the first and
last excerpt *by position*, so newest-first context yields a negative
span.  That behaviour is kept on purpose.

Only :class:`~transcript_chat.exceptions.InvalidInputError` escapes
:func:`answer_question`; anything else raised while answering is logged
and turned into an apology so the user always gets a reply.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Sequence
from datetime import timedelta
from enum import Enum

from transcript_chat.exceptions import InvalidInputError
from transcript_chat.models.chat import Answer
from transcript_chat.models.transcript import TranscriptExcerpt

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_NON_WORD_RE = re.compile(r"\W+")

_SUMMARY_SENTENCES = 3
_SUMMARY_MIN_SENTENCE_LENGTH = 10
_TOPIC_MIN_WORD_LENGTH = 4
_TOPIC_COUNT = 5
_SEARCH_MIN_WORD_LENGTH = 3

_OFF_TOPIC_TERMS = ("weather", "temperature", "news", "sports", "politics")

_NO_CONTENT = "I don't have any transcription content to work with yet"

NO_CONTENT_MESSAGE = f"{_NO_CONTENT}. Please start a transcription session first."
NO_SUMMARY_MESSAGE = f"{_NO_CONTENT}, so there is no content available to summarize yet."
NO_KEY_TOPICS_MESSAGE = (
    f"{_NO_CONTENT}, so there is no content available to extract key points from yet."
)
NO_SPEAKERS_MESSAGE = "No speaker identification available in the transcription."
NO_TIMING_MESSAGE = "No transcription messages available to analyze timing."
REDIRECT_MESSAGE = (
    "I can see transcription content is available. Could you be more specific "
    "about what you'd like to know? I can help with summaries, key points, "
    "speaker analysis, or search for specific topics."
)
APOLOGY_MESSAGE = (
    "I'm sorry, I encountered an error while processing your question. "
    "Please try again."
)


class Intent(str, Enum):
    """Answering strategy selected for a question."""

    SUMMARY = "summary"
    KEY_TOPICS = "key_topics"
    SPEAKERS = "speakers"
    TIMING = "timing"
    SEARCH = "search"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_intent(question: str) -> Intent:
    """Pick an answering strategy for *question*.

    Case-insensitive substring checks, evaluated in order; the first
    match wins:

    1. ``summary`` / ``summarize`` -> :attr:`Intent.SUMMARY`
    2. ``key`` and (``point`` or ``topic``) -> :attr:`Intent.KEY_TOPICS`
    3. ``who`` / ``speaker`` -> :attr:`Intent.SPEAKERS`
    4. ``when`` / ``time`` / ``long`` / ``duration`` -> :attr:`Intent.TIMING`
    5. anything else -> :attr:`Intent.SEARCH`

    Args:
        question: The user's question.

    Returns:
        The selected :class:`Intent`.
    """
    lowered = question.lower()

    if "summary" in lowered or "summarize" in lowered:
        return Intent.SUMMARY
    if "key" in lowered and ("point" in lowered or "topic" in lowered):
        return Intent.KEY_TOPICS
    if "who" in lowered or "speaker" in lowered:
        return Intent.SPEAKERS
    if any(term in lowered for term in ("when", "time", "long", "duration")):
        return Intent.TIMING
    return Intent.SEARCH


def answer_question(
    question: str,
    context: Sequence[TranscriptExcerpt],
) -> Answer:
    """Answer *question* using *context* as the only source of facts.

    Args:
        question: The user's question.  Must contain a non-whitespace
            character.
        context: Excerpts selected by the caller, in the caller's order.
            May be empty.

    Returns:
        An :class:`Answer` whose ``context_ids`` lists the id of every
        excerpt in *context*, in input order, regardless of which ones
        the answer text used.

    Raises:
        InvalidInputError: If *question* is empty or whitespace-only.
    """
    if not question or not question.strip():
        raise InvalidInputError("question cannot be empty")

    try:
        context_ids = tuple(excerpt.id for excerpt in context)
        intent = classify_intent(question)
        logger.debug(
            "Answering %s question with %d context excerpt(s)",
            intent.value,
            len(context_ids),
        )
        content = _STRATEGIES[intent](question, context)
    except Exception:
        logger.exception("Answer generation failed")
        return Answer(content=APOLOGY_MESSAGE, context_ids=_known_ids(context))

    return Answer(content=content, context_ids=context_ids)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _summarize(question: str, context: Sequence[TranscriptExcerpt]) -> str:  # noqa: ARG001
    final_text = _final_text(context)
    if not final_text:
        return NO_SUMMARY_MESSAGE

    sentences = [
        fragment.strip()
        for fragment in _SENTENCE_SPLIT_RE.split(final_text)
        if len(fragment.strip()) > _SUMMARY_MIN_SENTENCE_LENGTH
    ]
    joined = ". ".join(sentences[:_SUMMARY_SENTENCES])
    return f"Here's a summary of the transcription so far: {joined}."


def _key_topics(question: str, context: Sequence[TranscriptExcerpt]) -> str:  # noqa: ARG001
    final_text = _final_text(context)
    if not final_text:
        return NO_KEY_TOPICS_MESSAGE

    words = [
        word
        for word in _NON_WORD_RE.split(final_text.lower())
        if len(word) > _TOPIC_MIN_WORD_LENGTH
    ]
    # most_common keeps first-encountered order for equal counts.
    top_words = [word for word, _ in Counter(words).most_common(_TOPIC_COUNT)]
    return f"Key topics mentioned include: {', '.join(top_words)}."


def _speakers(question: str, context: Sequence[TranscriptExcerpt]) -> str:  # noqa: ARG001
    speaker_ids = {excerpt.speaker_id for excerpt in context if excerpt.speaker_id}
    if not speaker_ids:
        return NO_SPEAKERS_MESSAGE
    return f"I can identify {len(speaker_ids)} different speaker(s) in the transcription."


def _timing(question: str, context: Sequence[TranscriptExcerpt]) -> str:  # noqa: ARG001
    if not context:
        return NO_TIMING_MESSAGE

    span = context[-1].timestamp - context[0].timestamp
    minutes = span // timedelta(minutes=1)
    return f"The transcription spans approximately {minutes} minutes."


def _search(question: str, context: Sequence[TranscriptExcerpt]) -> str:
    final_text = _final_text(context)
    if not final_text:
        return NO_CONTENT_MESSAGE

    lowered = question.lower()
    if any(term in lowered for term in _OFF_TOPIC_TERMS):
        return REDIRECT_MESSAGE

    words = [
        word
        for word in _NON_WORD_RE.split(lowered)
        if len(word) > _SEARCH_MIN_WORD_LENGTH
    ]
    for sentence in _SENTENCE_SPLIT_RE.split(final_text):
        sentence_lower = sentence.lower()
        if any(word in sentence_lower for word in words):
            return f"Based on the transcription, here's what I found: {sentence.strip()}."

    return REDIRECT_MESSAGE


_STRATEGIES = {
    Intent.SUMMARY: _summarize,
    Intent.KEY_TOPICS: _key_topics,
    Intent.SPEAKERS: _speakers,
    Intent.TIMING: _timing,
    Intent.SEARCH: _search,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _final_text(context: Sequence[TranscriptExcerpt]) -> str:
    """Space-join the content of final excerpts, stripped."""
    return " ".join(excerpt.content for excerpt in context if excerpt.is_final).strip()


def _known_ids(context: Sequence[TranscriptExcerpt]) -> tuple[str, ...]:
    """Collect excerpt ids without failing on malformed entries."""
    ids: list[str] = []
    for excerpt in context or ():
        excerpt_id = getattr(excerpt, "id", None)
        if isinstance(excerpt_id, str):
            ids.append(excerpt_id)
    return tuple(ids)
