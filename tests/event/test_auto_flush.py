"""Tests for timer-driven flushing of the event accumulator."""

from __future__ import annotations

import logging
import threading
import time


def test_auto_flush(make_event, out) -> None:
    fired = threading.Event()
    event = make_event(on_auto_flush=fired.set)
    event.write(b"x")
    event.auto_flush(0.01)
    assert fired.wait(5.0)
    assert out.getvalue() == b"x\n"
    assert event.empty()


def test_auto_flush_waits_for_delay(make_event, out) -> None:
    fired = threading.Event()
    event = make_event(on_auto_flush=fired.set)
    event.write(b"x")
    event.auto_flush(30.0)
    assert not fired.wait(0.05)
    assert out.getvalue() == b""


def test_stop_cancels_auto_flush(make_event, out) -> None:
    fired = threading.Event()
    event = make_event(on_auto_flush=fired.set)
    event.write(b"x")
    event.auto_flush(0.05)
    event.stop()
    time.sleep(0.2)
    assert not fired.is_set()
    assert out.getvalue() == b""
    assert not event.empty()


def test_auto_flush_replaces_previous_timer(make_event, out) -> None:
    fired = threading.Event()
    event = make_event(on_auto_flush=fired.set)
    event.write(b"x")
    event.auto_flush(30.0)
    event.auto_flush(0.01)
    assert fired.wait(5.0)
    assert out.getvalue() == b"x\n"


def test_flush_cancels_auto_flush(make_event, out) -> None:
    fired = threading.Event()
    event = make_event(on_auto_flush=fired.set)
    event.write(b"x")
    event.auto_flush(0.05)
    event.flush()
    time.sleep(0.2)
    assert not fired.is_set()
    assert out.getvalue() == b"x\n"


def test_auto_flush_on_empty_event_writes_nothing(make_event, out) -> None:
    fired = threading.Event()
    event = make_event(on_auto_flush=fired.set)
    event.auto_flush(0.01)
    assert fired.wait(5.0)
    assert out.getvalue() == b""


def test_concurrent_writers_never_interleave_partial_records(make_event, out) -> None:
    event = make_event()
    event.auto_flush(0.001)

    def _writer(tag: bytes) -> None:
        for _ in range(200):
            event.write(tag)
            event.auto_flush(0.001)

    threads = [threading.Thread(target=_writer, args=(tag,)) for tag in (b"a", b"b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    event.flush()
    records = out.getvalue().split(b"\n")
    assert records[-1] == b""
    assert sum(len(record) for record in records) == 400
    assert set(b"".join(records)) <= {ord("a"), ord("b")}


def test_failing_auto_flush_hook_is_logged(make_event, out, caplog) -> None:
    fired = threading.Event()

    def hook() -> None:
        fired.set()
        raise RuntimeError("hook failed")

    event = make_event(on_auto_flush=hook)
    with caplog.at_level(logging.ERROR, logger="logfold"):
        event.write(b"a")
        event.auto_flush(0.01)
        assert fired.wait(5.0)
        event.write(b"b")
        event.flush()
    assert out.getvalue() == b"a\nb\n"
    assert "auto-flush failed" in caplog.text
