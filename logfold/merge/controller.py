"""Line state machine deciding where one logical event ends.

Each physical line either starts a new event (panic header, logger
timestamp, standalone JSON object) or continues the current one. Lines cut by
the reader are always continued.
"""

from __future__ import annotations

import logging
from typing import Iterable

from logfold.event.accumulator import Event
from logfold.parse.patterns import is_json_object, is_log_header, is_panic_header

logger = logging.getLogger(__name__)

# Closes events with no following header (last log line before exit,
# interactive input).
AUTO_FLUSH_DELAY = 0.005


class Merger:
    """Feed physical lines into an ``Event``, flushing on event boundaries."""

    def __init__(
        self,
        event: Event,
        *,
        prefix: str = "",
        strip: bool = False,
        allow_json: bool = False,
        auto_flush_delay: float = AUTO_FLUSH_DELAY,
    ) -> None:
        self.event = event
        self.prefix = prefix.encode("utf-8")
        self.strip = strip
        self.allow_json = allow_json
        self.auto_flush_delay = auto_flush_delay
        self.continuation = False

    def feed(self, line: bytes, is_prefix: bool = False) -> None:
        """Process one physical line."""

        event = self.event
        # A stale auto-flush must not fire while this line is classified.
        event.stop()
        if not self.continuation:
            index = is_log_header(line, self.prefix)
            if is_panic_header(line):
                event.flush()
            elif index is not None:
                event.flush()
                if self.strip:
                    line = line[index:]
            elif self.allow_json and is_json_object(line):
                # JSON objects are never merged with their neighbours.
                event.flush()
                event.write(line)
                event.flush()
                return
            elif not event.empty():
                event.write(b"\n")
        event.write(line)
        event.auto_flush(self.auto_flush_delay)
        self.continuation = is_prefix

    def run(self, lines: Iterable[tuple[bytes, bool]]) -> None:
        """Consume ``lines`` until end of stream, then flush.

        A read error flushes what was buffered and propagates.
        """

        logger.debug("merge loop started")
        try:
            for line, is_prefix in lines:
                self.feed(line, is_prefix)
        except OSError:
            self.event.flush()
            raise
        self.event.flush()
        logger.debug("merge loop reached end of stream")
