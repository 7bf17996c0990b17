"""Event accumulation: buffering, escaping, truncation and auto-flush."""

from logfold.event.accumulator import Event

__all__ = ["Event"]
