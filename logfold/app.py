"""Wire settings, reader, merger, accumulator and sink into one run."""

from __future__ import annotations

import logging
import signal
import threading
from datetime import datetime
from typing import BinaryIO, Callable

from pydantic import BaseModel, ConfigDict, Field

from logfold.core.config import EventConfig
from logfold.event.accumulator import Event
from logfold.merge.controller import AUTO_FLUSH_DELAY, Merger
from logfold.merge.reader import DEFAULT_BUFFER_SIZE, LineReader
from logfold.sinks.output import Sink, open_sink

logger = logging.getLogger(__name__)

SIGNAL_FLUSH_TIMEOUT = 1.0


class RunSettings(BaseModel):
    """Everything the command line can configure."""

    model_config = ConfigDict(extra="forbid")

    prefix: str = ""
    strip: bool = False
    allow_json: bool = False
    max_len: int = Field(default=0, ge=0)
    json_output: bool = False
    message_key: str = Field(default="message", min_length=1)
    context: dict[str, str] = Field(default_factory=dict)
    add_timestamp: bool = False
    time_key: str = Field(default="time", min_length=1)
    destination: str = "-"
    flush_delay_ms: float = Field(default=AUTO_FLUSH_DELAY * 1000, gt=0)
    buffer_size: int = Field(default=DEFAULT_BUFFER_SIZE, gt=0)

    def event_config(self) -> EventConfig:
        """Build the accumulator config; raises ValidationError when inconsistent."""

        return EventConfig(
            max_len=self.max_len,
            json_output=self.json_output,
            message_key=self.message_key,
            context=self.context,
            allow_json=self.allow_json,
            add_timestamp=self.add_timestamp,
            time_key=self.time_key,
        )


def _install_signal_flush(event: Event) -> dict[int, object]:
    """Flush and exit with status 1 on SIGINT/SIGTERM."""

    def _handle(signum: int, frame: object) -> None:
        logger.debug("received signal %s, flushing", signum)
        if not event.closed:
            # The interrupted frame may hold the command queue lock.
            flusher = threading.Thread(target=event.flush, daemon=True)
            flusher.start()
            flusher.join(SIGNAL_FLUSH_TIMEOUT)
        raise SystemExit(1)

    previous: dict[int, object] = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, _handle)
    return previous


def _restore_signals(previous: dict[int, object]) -> None:
    for signum, handler in previous.items():
        signal.signal(signum, handler)


def run_pipeline(
    settings: RunSettings,
    stream: BinaryIO,
    sink: Sink | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
    install_signals: bool = False,
) -> None:
    """Merge ``stream`` into records until end of stream.

    ``sink`` defaults to the one named by ``settings.destination``. Signal
    handlers can only be installed from the main thread.
    """

    config = settings.event_config()
    out = sink if sink is not None else open_sink(settings.destination)
    event = Event(out, config, clock=clock)
    merger = Merger(
        event,
        prefix=settings.prefix,
        strip=settings.strip,
        allow_json=settings.allow_json,
        auto_flush_delay=settings.flush_delay_ms / 1000.0,
    )
    previous = _install_signal_flush(event) if install_signals else {}
    logger.debug("writing records to %r", settings.destination)
    try:
        merger.run(LineReader(stream, settings.buffer_size))
    finally:
        _restore_signals(previous)
        event.close()
