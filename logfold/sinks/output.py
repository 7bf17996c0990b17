"""Byte sinks for merged records."""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path
from typing import BinaryIO, Protocol

UNIX_PREFIX = "unix:"
UNIXGRAM_PREFIX = "unixgram:"


class Sink(Protocol):
    """Anything records can be written to."""

    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes written.

        Implementations raise OSError on failure.
        """

        raise NotImplementedError


class StdoutSink:
    """Write records to standard output, flushing after each one."""

    def __init__(self, stream: BinaryIO | None = None) -> None:
        self._stream = stream

    def write(self, data: bytes) -> int:
        stream = self._stream or sys.stdout.buffer
        written = stream.write(data)
        stream.flush()
        return written if written is not None else len(data)


class FileSink:
    """Append records to a file, reopening it on every write.

    Reopening lets an external tool rename or truncate the file (log
    rotation) without losing subsequent records.
    """

    def __init__(self, path: str | Path, mode: int = 0o600) -> None:
        self.path = Path(path)
        self.mode = mode

    def write(self, data: bytes) -> int:
        fd = os.open(self.path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, self.mode)
        with os.fdopen(fd, "ab") as fh:
            return fh.write(data)


class UnixSocketSink:
    """Send records to a UNIX domain socket.

    Datagram sockets get one record per datagram. The socket is connected on
    first use and dropped after an error so the next write reconnects.
    """

    def __init__(self, path: str, *, datagram: bool = True) -> None:
        self.path = path
        self.datagram = datagram
        self._sock: socket.socket | None = None

    def _connect(self) -> socket.socket:
        kind = socket.SOCK_DGRAM if self.datagram else socket.SOCK_STREAM
        sock = socket.socket(socket.AF_UNIX, kind)
        try:
            sock.connect(self.path)
        except OSError:
            sock.close()
            raise
        return sock

    def write(self, data: bytes) -> int:
        if self._sock is None:
            self._sock = self._connect()
        try:
            if self.datagram:
                return self._sock.send(data)
            self._sock.sendall(data)
            return len(data)
        except OSError:
            self.close()
            raise

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None


def open_sink(destination: str) -> Sink:
    """Build a sink from a destination string.

    ``""`` or ``"-"`` is stdout, ``unix:<path>`` a stream socket,
    ``unixgram:<path>`` a datagram socket, anything else a file path.
    """

    if destination in ("", "-"):
        return StdoutSink()
    if destination.startswith(UNIXGRAM_PREFIX):
        path = destination[len(UNIXGRAM_PREFIX):]
        if not path:
            raise ValueError(f"Missing socket path in destination: {destination!r}")
        return UnixSocketSink(path, datagram=True)
    if destination.startswith(UNIX_PREFIX):
        path = destination[len(UNIX_PREFIX):]
        if not path:
            raise ValueError(f"Missing socket path in destination: {destination!r}")
        return UnixSocketSink(path, datagram=False)
    return FileSink(destination)
