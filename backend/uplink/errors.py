"""Errors raised while parsing uplink records."""

from __future__ import annotations


class RecordError(ValueError):
    """Base class for record decoding failures."""


class MalformedRecord(RecordError):
    """The buffer does not even hold the bitmap byte."""

    def __init__(self, message: str = "record is empty; missing bitmap byte"):
        super().__init__(message)


class TruncatedRecord(RecordError):
    """The bitmap announces a field whose bytes are not in the buffer."""

    def __init__(self, field: str, needed: int, available: int):
        super().__init__(
            f"record truncated in field '{field}': need {needed} bytes, {available} available"
        )
        self.field = field
        self.needed = needed
        self.available = available


class TrailingData(RecordError):
    """Bytes remain after every field announced by the bitmap was read."""

    def __init__(self, extra: int):
        super().__init__(f"{extra} unexpected trailing byte(s) after last field")
        self.extra = extra
