"""Line classification: panic headers, logger timestamps and JSON objects.

All predicates are cheap byte-level checks on a single line. They never
raise; anything unrecognised is simply "not a header".
"""

from __future__ import annotations

PANIC_PREFIX = b"panic: "

# Shapes written by the Go standard logger. Digits match any digit, every
# other byte must match exactly. Most specific first so the returned offset
# covers the whole timestamp.
LOG_HEADER_TEMPLATES: tuple[bytes, ...] = (
    b"2000/01/02 12:00:00.000000 ",
    b"2000/01/02 12:00:00 ",
    b"12:00:00.000000 ",
    b"2000/01/02 ",
    b"12:00:00 ",
)


def _is_digit(value: int) -> bool:
    return 0x30 <= value <= 0x39


def match_template(line: bytes, template: bytes, start: int = 0) -> bool:
    """Return True if ``line[start:]`` begins with the shape of ``template``."""

    if len(line) - start < len(template):
        return False
    for offset, expected in enumerate(template):
        actual = line[start + offset]
        if _is_digit(expected):
            if not _is_digit(actual):
                return False
        elif actual != expected:
            return False
    return True


def is_panic_header(line: bytes) -> bool:
    """Return True if ``line`` is the first line of a Go panic."""

    return line.startswith(PANIC_PREFIX)


def is_log_header(line: bytes, prefix: bytes | str = b"") -> int | None:
    """Return the offset of the message text if ``line`` starts a log record.

    ``prefix`` is the logger prefix configured in the producing program. Its
    length is skipped before a timestamp template is tried; the skipped bytes
    themselves are not compared. Returns None when no template matches.
    """

    if isinstance(prefix, str):
        prefix = prefix.encode("utf-8")
    if len(line) < len(prefix):
        return None
    for template in LOG_HEADER_TEMPLATES:
        if match_template(line, template, len(prefix)):
            return len(prefix) + len(template)
    return None


def is_json_object(line: bytes) -> bool:
    """Return True if ``line`` *seems* to hold one JSON object.

    Heuristic only: checks the first two and the last two bytes.
    """

    return len(line) >= 4 and line[:2] == b'{"' and line[-2:] == b'"}'


def looks_like_json_start(data: bytes) -> bool:
    """Return True if ``data`` starts like a JSON object with a first key."""

    return data[:2] == b'{"'
