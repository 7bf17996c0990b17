"""Shared fixtures for logfold tests."""

from __future__ import annotations

import io
from datetime import datetime, timezone

import pytest

from logfold.core.config import EventConfig
from logfold.event.accumulator import Event

FIXED_TIME = datetime(2017, 1, 6, 16, 25, 18, tzinfo=timezone.utc)


@pytest.fixture
def out() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def make_event(out):
    """Build events writing to ``out`` and close them after the test."""

    created: list[Event] = []

    def _make(config: EventConfig | None = None, **kwargs) -> Event:
        kwargs.setdefault("clock", lambda: FIXED_TIME)
        event = Event(kwargs.pop("sink", out), config, **kwargs)
        created.append(event)
        return event

    yield _make
    for event in created:
        event.close()


@pytest.fixture
def fixed_time() -> datetime:
    return FIXED_TIME
