"""Byte escaping and truncation-marker arithmetic for event buffers."""

from __future__ import annotations

import re

BACKSLASH = 0x5C

_ESCAPES: dict[int, bytes] = {
    0x22: b'\\"',
    0x5C: b"\\\\",
    0x08: b"\\b",
    0x0C: b"\\f",
    0x0A: b"\\n",
    0x0D: b"\\r",
    0x09: b"\\t",
}
_ESCAPE_RE = re.compile(rb'["\\\x08\x0c\n\r\t]')

MARKER_OPEN = b"["
MARKER_CLOSE = "]…".encode("utf-8")
# "[" + "]…" without the count.
MARKER_OVERHEAD = len(MARKER_OPEN) + len(MARKER_CLOSE)


def escape_byte(value: int) -> bytes:
    """Return the escaped form of a single byte."""

    return _ESCAPES.get(value) or bytes((value,))


def escape(data: bytes) -> bytes:
    """Escape a whole chunk for embedding inside a JSON string."""

    return _ESCAPE_RE.sub(lambda match: _ESCAPES[match.group()[0]], data)


def source_length(escaped: bytes) -> int:
    """Count the source bytes an escaped fragment stands for.

    Every two-byte escape pair counts as a single source byte.
    """

    count = 0
    i = 0
    while i < len(escaped):
        if escaped[i] == BACKSLASH:
            i += 1
        count += 1
        i += 1
    return count


def _escape_boundary(buffer: bytes, cut: int) -> int:
    """Move ``cut`` left when it would split an escape pair."""

    run = 0
    while cut - run > 0 and buffer[cut - run - 1] == BACKSLASH:
        run += 1
    # Every escape pair starts with a backslash, so an odd run right before
    # the cut means the cut sits on the second byte of a pair.
    if run % 2 == 1:
        cut -= 1
    return cut


def mark_truncated(buffer: bytes, exceeded: int) -> bytes:
    """Replace the tail of ``buffer`` with a ``[n]…`` truncation marker.

    ``exceeded`` is the number of source bytes already dropped before they
    reached the buffer. The marker reports the total number of omitted source
    bytes and never makes the result longer than ``buffer``. Buffers too short
    to hold a marker are returned unchanged.
    """

    if len(buffer) <= MARKER_OVERHEAD + 1:
        return buffer
    digits = len(str(exceeded + MARKER_OVERHEAD))
    while True:
        cut = len(buffer) - (MARKER_OVERHEAD + digits)
        if cut <= 0:
            return buffer
        cut = _escape_boundary(buffer, cut)
        omitted = exceeded + source_length(buffer[cut:])
        label = str(omitted).encode("ascii")
        if len(label) <= digits:
            return buffer[:cut] + MARKER_OPEN + label + MARKER_CLOSE
        digits = len(label)
