"""Merge multi-line program output (panics, log records, JSON) into single records."""

from logfold.app import RunSettings, run_pipeline
from logfold.core.config import EventConfig
from logfold.event.accumulator import Event
from logfold.merge.controller import Merger
from logfold.merge.reader import LineReader

__all__ = [
    "Event",
    "EventConfig",
    "LineReader",
    "Merger",
    "RunSettings",
    "run_pipeline",
]

__version__ = "0.1.0"
