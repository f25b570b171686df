"""Decoding and classification of ``go test -json`` event streams."""

from gotest_events.parse import (
    Action,
    Classification,
    DecodeError,
    Event,
    Events,
    classify,
    decode_event,
    normalize_nested_test,
)
from gotest_events.stream import EventReader, ReaderConfig, group_events

__all__ = [
    "Action",
    "Classification",
    "DecodeError",
    "Event",
    "EventReader",
    "Events",
    "ReaderConfig",
    "classify",
    "decode_event",
    "group_events",
    "normalize_nested_test",
]
