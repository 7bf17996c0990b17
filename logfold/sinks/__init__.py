"""Destinations for merged records."""

from logfold.sinks.output import FileSink, Sink, StdoutSink, UnixSocketSink, open_sink

__all__ = ["FileSink", "Sink", "StdoutSink", "UnixSocketSink", "open_sink"]
