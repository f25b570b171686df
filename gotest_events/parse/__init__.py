"""Event decoding, nested-test normalization, and classification rules."""

from gotest_events.parse.action import TERMINAL_ACTIONS, Action
from gotest_events.parse.event import DecodeError, Event, Events, decode_event, normalize_nested_test
from gotest_events.parse.rules import RULES, Classification, Rule, classify, find_rule, rule_names

__all__ = [
    "Action",
    "Classification",
    "DecodeError",
    "Event",
    "Events",
    "RULES",
    "Rule",
    "TERMINAL_ACTIONS",
    "classify",
    "decode_event",
    "find_rule",
    "normalize_nested_test",
    "rule_names",
]
