"""Decoded ``go test -json`` events.

One line of ``go test -json`` output (see ``go doc cmd/test2json``) decodes
into one :class:`Event`.  Events are immutable: the nested-test normalizer
returns an updated copy instead of rewriting the record in place, so callers
may hand the same event to several consumers.
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from gotest_events.parse import rules
from gotest_events.parse.action import Action

# RFC 3339 as written by Go's time.Time JSON encoding, e.g.
# 2019-02-13T12:02:10.183798579Z or 2018-10-14T11:45:03.489687-04:00
_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)

_STRING_FIELDS = ("Output", "Package", "Test")


class DecodeError(ValueError):
    """A line could not be decoded into an Event."""

    def __init__(self, reason: str, line: int | None = None) -> None:
        self.reason = reason
        self.line = line
        if line is None:
            super().__init__(reason)
        else:
            super().__init__(f"line {line}: {reason}")


@dataclass(frozen=True)
class Event:
    """A single line of ``go test -json`` output.

    ``time`` is ``None`` when the field is absent, which is conventional for
    cached results.  ``datetime`` stops at microseconds, so the timestamp
    exactly as it was written, nanoseconds included, is kept in
    ``time_text``.  ``elapsed`` is only meaningful on pass/fail events.
    """

    action: Action
    output: str = ""
    time: datetime | None = None
    package: str = ""
    test: str = ""
    elapsed: float = 0.0
    time_text: str = ""

    @property
    def nanosecond(self) -> int:
        """Sub-second part of the timestamp in nanoseconds, 0 when absent."""
        m = _RFC3339.match(self.time_text)
        if m is None or not m.group(3):
            return 0
        return int(m.group(3)[:9].ljust(9, "0"))

    def discard(self) -> bool:
        return rules.discard(self)

    def last_line(self) -> bool:
        return rules.last_line(self)

    def no_test_files(self) -> bool:
        return rules.no_test_files(self)

    def no_tests_to_run(self) -> bool:
        return rules.no_tests_to_run(self)

    def no_tests_warn(self) -> bool:
        return rules.no_tests_warn(self)

    def is_cached(self) -> bool:
        return rules.is_cached(self)

    def nested_test(self) -> bool:
        return rules.nested_test(self)

    def cover(self) -> tuple[float, bool]:
        return rules.cover(self)

    def is_race(self) -> bool:
        return rules.is_race(self)

    def is_panic(self) -> bool:
        return rules.is_panic(self)

    def classify(self) -> rules.Classification:
        return rules.classify(self)


def _parse_time(value: str) -> datetime:
    """Parse an RFC 3339 timestamp to microsecond precision."""
    m = _RFC3339.match(value)
    if m is None:
        raise DecodeError(f"Time is not an RFC 3339 timestamp: {value!r}")
    date, clock, fraction, offset = m.groups()
    if fraction:
        clock += "." + fraction[:6].ljust(6, "0")
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return datetime.fromisoformat(f"{date}T{clock}{offset}")
    except ValueError as e:
        raise DecodeError(f"Time is out of range: {value!r}") from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_seconds(value: int | float) -> float:
    try:
        seconds = float(value)
    except OverflowError as e:
        raise DecodeError("Elapsed is out of range") from e
    if not math.isfinite(seconds):
        raise DecodeError("Elapsed is out of range")
    return seconds


def decode_event(data: bytes | str) -> Event:
    """Decode one line of ``go test -json`` output.

    Field names are case-sensitive and unknown fields are ignored.  Absent
    or ``null`` optional fields take their zero value.

    Args:
        data: One JSON object, as bytes (UTF-8) or text.

    Returns:
        The decoded :class:`Event`.

    Raises:
        DecodeError: If the input is not a JSON object, the ``Action`` is
            missing or unknown, or a field has the wrong type.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("input is not valid UTF-8") from e

    try:
        entry = json.loads(data, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise DecodeError(f"malformed JSON: {e.msg}") from e
    except ValueError as e:
        # non-JSON constants and integers past the digit limit
        raise DecodeError(f"malformed JSON: {e}") from e

    if not isinstance(entry, dict):
        raise DecodeError(f"expected a JSON object, got {type(entry).__name__}")

    raw_action = entry.get("Action")
    if raw_action is None:
        raise DecodeError("missing Action")
    if not isinstance(raw_action, str):
        raise DecodeError(f"Action must be a string, got {type(raw_action).__name__}")
    try:
        action = Action.parse(raw_action)
    except ValueError as e:
        raise DecodeError(str(e)) from e

    fields: dict[str, Any] = {}
    for key in _STRING_FIELDS:
        value = entry.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise DecodeError(f"{key} must be a string, got {type(value).__name__}")
        fields[key.lower()] = value

    elapsed = entry.get("Elapsed")
    if elapsed is not None:
        # bool is an int subclass but not a JSON number
        if isinstance(elapsed, bool) or not isinstance(elapsed, (int, float)):
            raise DecodeError(f"Elapsed must be a number, got {type(elapsed).__name__}")
        fields["elapsed"] = _finite_seconds(elapsed)

    raw_time = entry.get("Time")
    if raw_time is not None:
        if not isinstance(raw_time, str):
            raise DecodeError(f"Time must be a string, got {type(raw_time).__name__}")
        fields["time"] = _parse_time(raw_time)
        fields["time_text"] = raw_time

    return Event(action=action, **fields)


def normalize_nested_test(event: Event) -> Event:
    """Rewrite a nested sub-test result into a proper pass/fail event.

    When a test's output starts with ``PASS`` or ``FAIL`` the action becomes
    ``pass`` or ``fail``.  The output is then split on single spaces (tabs
    count as spaces) and, when there are more than two tokens, the third one
    becomes the test name::

        PASS: sub_test.go:10: Suite.TestBar\\t0.001s  ->  test="Suite.TestBar"

    The output itself is never rewritten, so applying this twice gives the
    same result as applying it once.

    Returns:
        An updated copy, or *event* itself when it is not a nested test.
    """
    if not event.nested_test():
        return event

    action = Action.PASS if event.output.startswith("PASS") else Action.FAIL
    test = event.test
    parts = event.output.replace("\t", " ").split(" ")
    if len(parts) > 2:
        test = parts[2]
    return dataclasses.replace(event, action=action, test=test)


class Events(list):
    """Events belonging to a single test, in emission order.

    Every element shares one ``package`` and ``test``.  The caller grouping
    the stream is responsible for that; it is not checked here.
    """

    @property
    def package(self) -> str:
        return self[0].package if self else ""

    @property
    def test(self) -> str:
        return self[0].test if self else ""
