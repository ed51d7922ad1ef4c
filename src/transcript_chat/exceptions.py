"""Custom exceptions for transcript-chat.

These exceptions separate caller mistakes (rejected requests) from lookup
and file-format failures in the surrounding session layer.
"""

from __future__ import annotations


class InvalidInputError(Exception):
    """Raised when a chat request is rejected before the engine runs.

    This covers an empty or whitespace-only question and a triggering
    chat turn that does not have the ``user`` role.  The caller is
    expected to reject the request rather than retry it; no chat turn
    is stored.
    """


class SessionNotFoundError(Exception):
    """Raised when a session id does not exist in the store.

    Attributes:
        session_id: The id that was looked up.
    """

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Transcription session with ID {session_id} not found")
        self.session_id = session_id


class TranscriptFormatError(Exception):
    """Raised when a transcript file cannot be turned into excerpts.

    Attributes:
        source: Path or label of the offending transcript.
    """

    def __init__(self, message: str, source: str = "<string>") -> None:
        super().__init__(message)
        self.source = source
