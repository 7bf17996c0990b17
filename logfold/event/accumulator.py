"""Incremental building of merged log events.

An ``Event`` holds the escaped content of the record being assembled and
writes it to a sink on flush. Every operation is handed to a single worker
thread that owns the buffer, so a timer-driven auto-flush can never
interleave with a write coming from the reader. Public calls block until the
worker has processed them.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from logfold.core.config import EventConfig
from logfold.event.escape import escape, escape_byte, mark_truncated
from logfold.parse.patterns import looks_like_json_start
from logfold.sinks.output import Sink

logger = logging.getLogger(__name__)

# Pass-through output is handed to the sink in chunks of this size.
OUT_BUFFER_SIZE = 4096

_WRITE = "write"
_FLUSH = "flush"
_EMPTY = "empty"
_START = "start"
_STOP = "stop"
_CLOSE = "close"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Command:
    kind: str
    arg: Any = None
    result: Any = None
    done: threading.Event = field(default_factory=threading.Event)


class Event:
    """Buffer of one logical event, reused across many events."""

    def __init__(
        self,
        out: Sink,
        config: EventConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        on_auto_flush: Callable[[], None] | None = None,
    ) -> None:
        self.config = config or EventConfig()
        self._out = out
        self._clock = clock or _utc_now
        self._on_auto_flush = on_auto_flush

        self._prefix = self.config.message_prefix()
        self._suffix = self.config.message_suffix()
        self._time_prefix = self.config.time_prefix()
        self._passthrough_prefix = self.config.passthrough_prefix()
        self._terminator = self.config.terminator.encode("utf-8")
        self._overhead = self.config.envelope_overhead()

        self._buf = bytearray()
        self._pending = bytearray()
        self._exceeded = 0
        self._raw_json = False

        self._closed = False
        self._commands: "queue.Queue[_Command]" = queue.Queue()
        self._worker = threading.Thread(
            target=self._run, name="logfold-event", daemon=True
        )
        self._worker.start()

    # Public API, safe to call from any thread.

    def write(self, data: bytes) -> int:
        """Append ``data`` to the event. Always returns ``len(data)``."""

        self._call(_WRITE, bytes(data))
        return len(data)

    def flush(self) -> None:
        """Write the pending event to the sink and reset the buffer.

        Does nothing when the event is empty. Cancels any pending auto-flush.
        """

        self._call(_FLUSH)

    def empty(self) -> bool:
        """Return True if nothing was written since the last flush."""

        return self._call(_EMPTY)

    def auto_flush(self, delay: float) -> None:
        """Schedule a flush in ``delay`` seconds, replacing any previous one."""

        self._call(_START, max(0.0, float(delay)))

    def stop(self) -> None:
        """Cancel a pending auto-flush without flushing."""

        self._call(_STOP)

    def close(self) -> None:
        """Stop the worker thread. Pending content is not flushed."""

        if self._closed:
            return
        self._call(_CLOSE)
        self._closed = True
        self._worker.join()

    @property
    def closed(self) -> bool:
        return self._closed

    def _call(self, kind: str, arg: Any = None) -> Any:
        if self._closed:
            raise RuntimeError("event is closed")
        command = _Command(kind, arg)
        self._commands.put(command)
        command.done.wait()
        return command.result

    # Worker side. Everything below runs on the worker thread only.

    def _run(self) -> None:
        deadline: float | None = None
        while True:
            timeout = None
            if deadline is not None:
                timeout = max(0.0, deadline - time.monotonic())
            try:
                command = self._commands.get(timeout=timeout)
            except queue.Empty:
                deadline = None
                try:
                    self._do_flush()
                    if self._on_auto_flush is not None:
                        self._on_auto_flush()
                except Exception:  # noqa: BLE001 - worker boundary
                    logger.exception("auto-flush failed")
                continue
            if command.kind == _CLOSE:
                command.done.set()
                return
            try:
                deadline = self._dispatch(command, deadline)
            except Exception:  # noqa: BLE001 - worker boundary
                logger.exception("event %s failed", command.kind)
            finally:
                command.done.set()

    def _dispatch(self, command: _Command, deadline: float | None) -> float | None:
        """Run one command and return the new auto-flush deadline."""

        if command.kind == _WRITE:
            self._do_write(command.arg)
        elif command.kind == _FLUSH:
            self._do_flush()
            return None
        elif command.kind == _EMPTY:
            command.result = not self._buf and not self._raw_json
        elif command.kind == _START:
            return time.monotonic() + command.arg
        elif command.kind == _STOP:
            return None
        return deadline

    def _do_write(self, data: bytes) -> None:
        if self.config.allow_json and not self._raw_json and not self._buf:
            if looks_like_json_start(data):
                # Already JSON: open our own object with the context and let
                # the input provide the rest, unescaped and uncapped.
                self._raw_json = True
                self._emit(self._passthrough_prefix)
                self._emit(data[1:])
                return
        if self._raw_json:
            self._emit(data)
            return
        if self._exceeded > 0:
            self._exceeded += len(data)
            return

        max_len = self.config.max_len
        escaped = escape(data)
        if max_len == 0 or len(self._buf) + self._overhead + len(escaped) <= max_len:
            self._buf += escaped
            return
        for index, value in enumerate(data):
            piece = escape_byte(value)
            if len(self._buf) + self._overhead + len(piece) > max_len:
                self._exceeded = len(data) - index
                return
            self._buf += piece

    def _do_flush(self) -> None:
        if self._raw_json:
            self._raw_json = False
            self._emit(self._terminator)
            self._drain()
            return
        if not self._buf:
            self._exceeded = 0
            return

        message = bytes(self._buf)
        exceeded = self._exceeded
        self._buf.clear()
        self._exceeded = 0
        if exceeded > 0:
            message = mark_truncated(message, exceeded)
        parts = [self._prefix, message]
        if self.config.add_timestamp:
            parts.append(self._time_prefix)
            parts.append(self.config.format_timestamp(self._clock()))
        parts.append(self._suffix)

        self._pending += b"".join(parts)
        self._drain()

    def _emit(self, data: bytes) -> None:
        self._pending += data
        if len(self._pending) >= OUT_BUFFER_SIZE:
            self._drain()

    def _drain(self) -> None:
        if not self._pending:
            return
        data = bytes(self._pending)
        self._pending.clear()
        try:
            self._out.write(data)
        except Exception as exc:  # noqa: BLE001 - worker boundary
            logger.warning("write error: %s", exc)
