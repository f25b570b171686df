"""Rendering of classified events as YAML.

Events keep their wire field names so the output reads like the
``go test -json`` stream it came from, with the classification attached.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml

from gotest_events.parse.event import Event
from gotest_events.parse.rules import classify


def event_to_dict(event: Event) -> dict[str, Any]:
    """Render an event with its wire field names.

    ``Time`` is written back exactly as it was decoded and omitted when
    absent, as ``go test`` does for cached results.
    """
    data: dict[str, Any] = {}
    if event.time is not None:
        data["Time"] = event.time_text or event.time.isoformat()
    data["Action"] = event.action.value
    data["Package"] = event.package
    data["Test"] = event.test
    data["Output"] = event.output
    data["Elapsed"] = event.elapsed
    return data


def classified_to_dict(event: Event) -> dict[str, Any]:
    data = event_to_dict(event)
    data["classification"] = classify(event).to_dict()
    return data


def dump_yaml(events: Iterable[Event]) -> str:
    """Render classified events as a YAML document."""
    report = {"events": [classified_to_dict(e) for e in events]}
    return yaml.dump(
        report,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def write_yaml(events: Iterable[Event], path: Path) -> None:
    """Write classified events as a YAML file.

    Args:
        events: Events to render, in order.
        path: File path to write; parent directories are created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(dump_yaml(events))
