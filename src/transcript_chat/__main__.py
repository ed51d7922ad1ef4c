"""Entry point for ``python -m transcript_chat``.

Loads a transcript file into a fresh in-memory session and asks one
question about it.  Uses stdlib :mod:`argparse` for argument parsing.

Subcommands:
    ask     -- Default. Answer a question about a transcript file.
    devices -- List the available audio input devices.

Exit codes:
    0 -- Success.
    1 -- An error occurred (file not found, bad transcript, invalid
         question or context, config error).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from transcript_chat.chat import ChatService
from transcript_chat.config import ConfigError, load_settings
from transcript_chat.display import format_devices, print_exchange
from transcript_chat.exceptions import InvalidInputError, TranscriptFormatError
from transcript_chat.log import setup_logging
from transcript_chat.models.session import CreateSessionInput
from transcript_chat.parser import parse_transcript_file
from transcript_chat.store import SessionStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="transcript-chat",
        description="Ask questions about a conversation transcript.",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- "ask" subcommand (default) -----------------------------------
    ask_parser = subparsers.add_parser(
        "ask",
        help="Answer a question about a transcript file.",
    )
    ask_parser.add_argument(
        "transcript_file",
        type=str,
        help="Path to a .txt (speaker-labelled) or .json transcript.",
    )
    ask_parser.add_argument(
        "question",
        type=str,
        help="The question to ask.",
    )
    ask_parser.add_argument(
        "--context-id",
        dest="context_ids",
        action="append",
        default=None,
        metavar="ID",
        help=(
            "Answer from this excerpt only (repeatable).  Without it, "
            "final excerpts from the trailing window are used."
        ),
    )
    ask_parser.add_argument(
        "--window",
        type=int,
        default=None,
        metavar="MINUTES",
        help=(
            "Trailing context window, ending at the last excerpt "
            "(defaults to CONTEXT_WINDOW_MINUTES from config)."
        ),
    )
    ask_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    # --- "devices" subcommand -----------------------------------------
    subparsers.add_parser(
        "devices",
        help="List the available audio input devices.",
    )

    return parser


def _resolve_command(
    parser: argparse.ArgumentParser,
    argv: list[str],
) -> argparse.Namespace:
    """Parse *argv*, prepending ``ask`` when no subcommand is given.

    ``python -m transcript_chat file.txt "question"`` is therefore the
    same as ``python -m transcript_chat ask file.txt "question"``.
    """
    known_subcommands = {"ask", "devices"}
    if not argv:
        # Let the "ask" subparser report the missing arguments.
        argv = ["ask"]
    elif argv[0] in {"-h", "--help"}:
        pass
    elif argv[0] not in known_subcommands:
        argv = ["ask", *argv]

    return parser.parse_args(argv)


def _handle_ask(args: argparse.Namespace) -> int:
    """Execute the ``ask`` subcommand.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    transcript_path = Path(args.transcript_file)

    if not transcript_path.exists():
        print(f"Error: File not found: {transcript_path}", file=sys.stderr)
        return 1

    if not transcript_path.is_file():
        print(f"Error: Not a file: {transcript_path}", file=sys.stderr)
        return 1

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not args.verbose:
        try:
            setup_logging(settings.log_level)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    if args.window is not None:
        if args.window <= 0:
            print("Error: --window must be a positive number of minutes", file=sys.stderr)
            return 1
        settings = dataclasses.replace(settings, context_window_minutes=args.window)

    try:
        parse_result = parse_transcript_file(transcript_path)
    except (FileNotFoundError, PermissionError, TranscriptFormatError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for warning in parse_result.warnings:
        logger.warning("Parse warning at line %d: %s", warning.line_number, warning.message)

    store = SessionStore()
    session = store.create_session(
        CreateSessionInput(title=transcript_path.name, audio_source="file")
    )

    # Anchor the recent window at the end of the recording, not wall time.
    timestamps = [e.timestamp for e in parse_result.excerpts]
    now = max(timestamps) if timestamps else None

    try:
        excerpts = store.import_excerpts(session.id, parse_result.excerpts)
        exchange = ChatService(store, settings).process_chat_request(
            session.id,
            args.question,
            context_ids=args.context_ids,
            now=now,
        )
    except InvalidInputError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_exchange(exchange, excerpts)
    return 0


def _handle_devices(args: argparse.Namespace) -> int:  # noqa: ARG001
    """Execute the ``devices`` subcommand."""
    print(format_devices(SessionStore().list_audio_devices()))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the transcript-chat CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = _resolve_command(parser, argv if argv is not None else sys.argv[1:])

    log_level = "DEBUG" if getattr(args, "verbose", False) else "INFO"
    setup_logging(log_level)

    if args.command == "devices":
        return _handle_devices(args)

    return _handle_ask(args)


if __name__ == "__main__":
    raise SystemExit(main())
