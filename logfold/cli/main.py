"""Command-line entrypoint: merge multi-line events read from stdin.

Typical use, sending panics of a program to syslog as one line each:

    myprogram 2>&1 | logfold --json --ctx program=myprogram | logger -t myprogram
"""

from __future__ import annotations

import argparse
import sys
import threading

from logfold.app import RunSettings, run_pipeline
from logfold.logging_utils import configure_logging


def _parse_context(value: str) -> tuple[str, str]:
    key, sep, ctx_value = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"missing context value in {value!r}")
    return key, ctx_value


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``logfold``."""

    parser = argparse.ArgumentParser(
        prog="logfold",
        description=(
            "Read program output on stdin and merge the lines of each panic, "
            "multi-line log message or JSON object into a single line."
        ),
    )
    parser.add_argument(
        "--max-len",
        type=int,
        default=0,
        help="Truncate records to not exceed this length (default: no limit).",
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="Logger prefix set in the application, if any.",
    )
    parser.add_argument(
        "--strip",
        action="store_true",
        help="Strip log line prefix and timestamp on output.",
    )
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Wrap records in JSON, one object per line.",
    )
    parser.add_argument(
        "--json-key",
        default="message",
        help="Key holding the message in JSON mode (default: message).",
    )
    parser.add_argument(
        "--allow-json",
        action="store_true",
        help="Pass input lines that are already JSON objects through unescaped.",
    )
    parser.add_argument(
        "--ctx",
        action="append",
        type=_parse_context,
        default=[],
        metavar="KEY=VALUE",
        help="Field to add to JSON output (can be repeated).",
    )
    parser.add_argument(
        "--add-timestamp",
        action="store_true",
        help="Add a timestamp field to JSON output (requires --json).",
    )
    parser.add_argument(
        "--time-key",
        default="time",
        help="Key holding the timestamp (default: time).",
    )
    parser.add_argument(
        "--output",
        default="-",
        help=(
            "Destination: '-' for stdout, unix:<path> or unixgram:<path> for "
            "a UNIX socket, anything else is a file path (default: stdout)."
        ),
    )
    parser.add_argument(
        "--flush-delay",
        type=float,
        default=5.0,
        help="Milliseconds without input before the current record is flushed (default: 5).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostics level on stderr (default: WARNING).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run logfold over standard input."""

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = RunSettings(
            prefix=args.prefix,
            strip=args.strip,
            allow_json=args.allow_json,
            max_len=args.max_len,
            json_output=args.json_output,
            message_key=args.json_key,
            context=dict(args.ctx),
            add_timestamp=args.add_timestamp,
            time_key=args.time_key,
            destination=args.output,
            flush_delay_ms=args.flush_delay,
        )
        run_pipeline(
            settings,
            sys.stdin.buffer,
            install_signals=threading.current_thread() is threading.main_thread(),
        )
    except Exception as exc:  # noqa: BLE001 - CLI boundary
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
