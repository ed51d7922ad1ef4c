"""Configuration loading for transcript-chat.

Settings come from environment variables, with ``.env`` support via
python-dotenv.  Every setting has a default, so an empty environment is
valid; only malformed values are rejected.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


class ConfigError(Exception):
    """Raised when a configuration value is present but invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        log_level: Logging level name (default ``"INFO"``).
        context_window_minutes: Trailing window, in minutes, used to pick
            recent final excerpts as chat context when the caller does
            not name excerpts explicitly (default ``10``).
        context_limit: Maximum number of recent excerpts passed to the
            answer engine, or ``None`` for no limit.
        chat_history_limit: Page size used when listing chat turns
            (default ``50``, at most ``100``).
    """

    log_level: str = "INFO"
    context_window_minutes: int = 10
    context_limit: int | None = None
    chat_history_limit: int = 50


_INT_SETTINGS = {
    "CONTEXT_WINDOW_MINUTES": "context_window_minutes",
    "CONTEXT_LIMIT": "context_limit",
    "CHAT_HISTORY_LIMIT": "chat_history_limit",
}

_MAX_CHAT_HISTORY_LIMIT = 100


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the working
    directory is picked up automatically.  Unset or blank variables fall
    back to the :class:`Settings` defaults.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any integer setting is not a positive integer, or
            ``CHAT_HISTORY_LIMIT`` exceeds 100.  The message names **all**
            invalid variables.
    """
    load_dotenv()

    values: dict[str, object] = {}
    invalid: list[str] = []

    log_level = os.environ.get("LOG_LEVEL", "").strip()
    if log_level:
        values["log_level"] = log_level.upper()

    for env_var, field_name in _INT_SETTINGS.items():
        raw = os.environ.get(env_var, "").strip()
        if not raw:
            continue
        try:
            number = int(raw)
        except ValueError:
            invalid.append(env_var)
            continue
        if number <= 0:
            invalid.append(env_var)
            continue
        values[field_name] = number

    history_limit = values.get("chat_history_limit")
    if isinstance(history_limit, int) and history_limit > _MAX_CHAT_HISTORY_LIMIT:
        invalid.append("CHAT_HISTORY_LIMIT")

    if invalid:
        names = ", ".join(invalid)
        raise ConfigError(f"Invalid values for environment variables: {names}")

    return Settings(**values)
