"""Line classification helpers."""

from logfold.parse.patterns import (
    is_json_object,
    is_log_header,
    is_panic_header,
    looks_like_json_start,
)

__all__ = [
    "is_json_object",
    "is_log_header",
    "is_panic_header",
    "looks_like_json_start",
]
