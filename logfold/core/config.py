"""Pydantic configuration for the event accumulator."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

RFC3339_UTC = "%Y-%m-%dT%H:%M:%SZ"

# Used to measure the width of a rendered timestamp.
_REFERENCE_TIME = datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc)


def compact_json(obj: object) -> bytes:
    """Serialize ``obj`` the way records are written: sorted keys, no spaces."""

    return json.dumps(
        obj, ensure_ascii=False, sort_keys=True, separators=(",", ":")
    ).encode("utf-8")


class EventConfig(BaseModel):
    """Output envelope and length cap for merged events.

    The model is frozen: an accumulator keeps one config for its whole life.
    Envelope pieces are derived here so the cap can be checked against them
    before any accumulator exists.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_len: int = Field(default=0, ge=0)
    json_output: bool = False
    message_key: str = Field(default="message", min_length=1)
    context: dict[str, str] = Field(default_factory=dict)
    allow_json: bool = False
    add_timestamp: bool = False
    time_key: str = Field(default="time", min_length=1)
    time_format: str = Field(default=RFC3339_UTC, min_length=1)
    terminator: str = "\n"

    @model_validator(mode="after")
    def _validate_envelope(self) -> "EventConfig":
        if self.add_timestamp and not self.json_output:
            raise ValueError("add_timestamp requires json_output")
        if self.max_len > 0:
            overhead = self.envelope_overhead()
            if self.max_len < overhead:
                raise ValueError(
                    f"max_len {self.max_len} is lower than the {overhead}-byte envelope"
                )
        return self

    def message_prefix(self) -> bytes:
        """Bytes written before the escaped message."""

        if not self.json_output:
            return b""
        head = b"{"
        if self.context:
            # {"a":"b"} -> {"a":"b",
            head = compact_json(self.context)[:-1] + b","
        return head + compact_json(self.message_key) + b':"'

    def message_suffix(self) -> bytes:
        """Bytes written after the message (and timestamp, if any)."""

        terminator = self.terminator.encode("utf-8")
        if not self.json_output:
            return terminator
        if self.add_timestamp:
            # The timestamp field already closed the message string.
            return b"}" + terminator
        return b'"}' + terminator

    def time_prefix(self) -> bytes:
        """Bytes closing the message string and opening the timestamp field."""

        if not self.add_timestamp:
            return b""
        return b'",' + compact_json(self.time_key) + b":"

    def passthrough_prefix(self) -> bytes:
        """Object opening used when the input line is already JSON."""

        if not self.context:
            return b"{"
        return compact_json(self.context)[:-1] + b","

    def format_timestamp(self, moment: datetime) -> bytes:
        """Render ``moment`` in UTC as a quoted JSON string."""

        text = moment.astimezone(timezone.utc).strftime(self.time_format)
        return compact_json(text)

    def envelope_overhead(self) -> int:
        """Fixed number of bytes every record spends outside the message."""

        overhead = len(self.message_prefix()) + len(self.message_suffix())
        if self.add_timestamp:
            overhead += len(self.time_prefix())
            overhead += len(self.format_timestamp(_REFERENCE_TIME))
        return overhead
