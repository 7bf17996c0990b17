"""Bounded line reads over a binary stream."""

from __future__ import annotations

from typing import BinaryIO, Iterator

DEFAULT_BUFFER_SIZE = 4096


class LineReader:
    """Read lines of at most ``size`` bytes, reporting partial reads.

    Each item is ``(line, is_prefix)``. The line has its trailing ``\\n`` (and
    a ``\\r`` before it) removed. ``is_prefix`` is True when the line was cut
    because it did not fit in ``size`` bytes; the rest arrives in the
    following items. A ``\\r`` ending a cut line is held back for the next
    read so a ``\\r\\n`` pair is never split.
    """

    def __init__(self, stream: BinaryIO, size: int = DEFAULT_BUFFER_SIZE) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self._stream = stream
        self._carry = b""
        self.size = size

    def read_line(self) -> tuple[bytes, bool] | None:
        """Return the next ``(line, is_prefix)`` pair, or None at end of stream."""

        chunk = self._carry + self._stream.readline(self.size - len(self._carry))
        self._carry = b""
        if not chunk:
            return None
        if chunk.endswith(b"\n"):
            chunk = chunk[:-1]
            if chunk.endswith(b"\r"):
                chunk = chunk[:-1]
            return chunk, False
        if len(chunk) < self.size:
            return chunk, False
        if self.size > 1 and chunk.endswith(b"\r"):
            self._carry = b"\r"
            chunk = chunk[:-1]
        return chunk, True

    def __iter__(self) -> Iterator[tuple[bytes, bool]]:
        while True:
            item = self.read_line()
            if item is None:
                return
            yield item
