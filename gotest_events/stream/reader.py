"""Line-by-line reading of a ``go test -json`` stream.

Decodes each line, normalizes nested sub-test results, and either stops on
the first malformed line or records a warning and moves on, depending on
the reader configuration.  Lines are processed independently; nothing is
buffered or reordered.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from gotest_events.parse.event import DecodeError, Event, Events, decode_event, normalize_nested_test
from gotest_events.stream.config import ReaderConfig


class EventReader:
    """Decodes a stream of JSON lines into events.

    Warnings for lines skipped in ``warn`` mode accumulate in
    :attr:`warnings` across calls to :meth:`read`.
    """

    def __init__(self, config: ReaderConfig | None = None) -> None:
        self.config = config if config is not None else ReaderConfig()
        self.warnings: list[str] = []

    def read(self, lines: Iterable[bytes | str] | str) -> Iterator[Event]:
        """Yield one event per decodable line.

        Args:
            lines: Lines as bytes or text, or a single string which is split
                on ``\\n`` only; ``Output`` may hold other line breaks.

        Raises:
            DecodeError: In ``raise`` mode, for the first malformed line,
                with its 1-based line number.
        """
        if isinstance(lines, str):
            lines = lines.split("\n")

        normalize = self.config.normalize_nested
        skip_blank = self.config.skip_blank_lines
        warn = self.config.on_decode_error == "warn"

        for lineno, line in enumerate(lines, start=1):
            if skip_blank and not line.strip():
                continue
            try:
                event = decode_event(line)
            except DecodeError as e:
                if not warn:
                    raise DecodeError(e.reason, lineno) from e
                self.warnings.append(f"line {lineno}: {e.reason}")
                continue
            if normalize:
                event = normalize_nested_test(event)
            yield event

    def read_file(self, path: Path) -> list[Event]:
        """Read every event from a UTF-8 JSON lines file."""
        with open(path, "rb") as f:
            return list(self.read(f))


def group_events(events: Iterable[Event]) -> dict[tuple[str, str], Events]:
    """Group events by ``(package, test)``.

    Keys keep the order in which they were first seen and each group keeps
    emission order.  Package-level events group under an empty test name.
    """
    groups: dict[tuple[str, str], Events] = {}
    for event in events:
        key = (event.package, event.test)
        if key not in groups:
            groups[key] = Events()
        groups[key].append(event)
    return groups
