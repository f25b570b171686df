"""Stream reading, reader configuration, and YAML rendering of events."""

from gotest_events.stream.config import ConfigError, ReaderConfig
from gotest_events.stream.reader import EventReader, group_events
from gotest_events.stream.serialize import classified_to_dict, dump_yaml, event_to_dict, write_yaml

__all__ = [
    "ConfigError",
    "EventReader",
    "ReaderConfig",
    "classified_to_dict",
    "dump_yaml",
    "event_to_dict",
    "group_events",
    "write_yaml",
]
