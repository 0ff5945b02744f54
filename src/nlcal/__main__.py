"""Entry point for ``python -m nlcal``.

A thin CLI over the compiler.  Uses stdlib :mod:`argparse` for argument
parsing.

Subcommands:
    compile -- Default.  Compile a front-end JSON reply into an event.
    prompt  -- Print the NL front-end prompt for a request.

Exit codes:
    0 -- Success.
    1 -- Compile failure, unreadable input, malformed JSON or bad config.
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

from nlcal.config import ConfigError, Settings, duration_from_hours, load_settings
from nlcal.exceptions import MalformedResponseError
from nlcal.frontend import parse_candidate_response
from nlcal.log import setup_logging
from nlcal.models.request import SchedulingRequest
from nlcal.pipeline import run_compile
from nlcal.prompts import build_parse_prompt
from nlcal.report import compile_result_to_dict, print_compile_result
from nlcal.zones import is_known_zone, load_zone

_SUBCOMMANDS = {"compile", "prompt"}


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="nlcal",
        description="Compile natural-language scheduling output into calendar events.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- "compile" subcommand (default) -------------------------------
    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile a front-end JSON reply into a validated event.",
    )
    compile_parser.add_argument(
        "candidate_file",
        type=str,
        help="Path to the JSON reply, or '-' to read stdin.",
    )
    compile_parser.add_argument(
        "--max-duration-hours",
        type=float,
        default=None,
        help="Warn for one-off events longer than this (defaults to config).",
    )
    compile_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the result as JSON instead of a report.",
    )
    _add_common_arguments(compile_parser)

    # --- "prompt" subcommand ------------------------------------------
    prompt_parser = subparsers.add_parser(
        "prompt",
        help="Print the NL front-end prompt for a request.",
    )
    prompt_parser.add_argument("text", type=str, help="The scheduling request.")
    _add_common_arguments(prompt_parser)

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--reference",
        type=str,
        default=None,
        help="Reference instant as ISO 8601 (defaults to now).",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="Default IANA time zone (defaults to DEFAULT_TIMEZONE from config).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )


def _resolve_command(
    parser: argparse.ArgumentParser,
    argv: list[str],
) -> argparse.Namespace:
    """Parse *argv*, routing to ``compile`` when no subcommand is named."""
    if not argv:
        argv = ["compile"]
    elif argv[0] in {"-h", "--help"}:
        pass
    elif argv[0] not in _SUBCOMMANDS:
        argv = ["compile", *argv]
    return parser.parse_args(argv)


def _build_request(
    args: argparse.Namespace,
    settings: Settings,
    raw_text: str = "",
) -> SchedulingRequest:
    """Build the :class:`SchedulingRequest` from CLI options.

    Raises:
        ValueError: If the time zone or reference instant is invalid.
    """
    zone_name = args.timezone or settings.default_timezone
    if not is_known_zone(zone_name):
        raise ValueError(f"Unknown time zone: {zone_name!r}")

    if args.reference is None:
        reference = datetime.now(timezone.utc)
    else:
        try:
            reference = datetime.fromisoformat(args.reference)
        except ValueError as exc:
            raise ValueError(f"Invalid --reference {args.reference!r}: {exc}") from exc
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=load_zone(zone_name))

    return SchedulingRequest(
        raw_text=raw_text,
        reference_instant=reference,
        default_time_zone=zone_name,
    )


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise IsADirectoryError(f"Not a file: {path}")
    return path.read_text(encoding="utf-8")


def _handle_compile(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the ``compile`` subcommand."""
    try:
        raw = _read_input(args.candidate_file)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        request = _build_request(args, settings)
        candidate = parse_candidate_response(raw)
    except (ValueError, MalformedResponseError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    max_duration = settings.max_event_duration
    if args.max_duration_hours is not None:
        try:
            max_duration = duration_from_hours(args.max_duration_hours)
        except ValueError as exc:
            print(f"Error: --max-duration-hours {exc}", file=sys.stderr)
            return 1

    result = run_compile(request, candidate, max_duration=max_duration)

    if args.json:
        sys.stdout.write(json.dumps(compile_result_to_dict(result), indent=2) + "\n")
    else:
        print_compile_result(result)

    return 0 if result.succeeded else 1


def _handle_prompt(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the ``prompt`` subcommand."""
    try:
        request = _build_request(args, settings, raw_text=args.text)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(
        build_parse_prompt(
            request.raw_text,
            request.reference_instant,
            request.default_time_zone,
        )
        + "\n"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the nlcal CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = _resolve_command(parser, argv if argv is not None else sys.argv[1:])

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    if args.command == "prompt":
        return _handle_prompt(args, settings)
    return _handle_compile(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
