"""Classification rules for decoded test events.

Most of the signal in a ``go test -json`` stream is free text inside the
``Output`` field.  Each rule below is an independent, pure check against the
exact literals ``go test`` prints, so a new upstream format variant only
touches its own rule.  None of the checks can fail: input that does not match
a special-case shape simply classifies as ordinary output.

The rules are collected in :data:`RULES`, evaluated in table order by
:func:`classify`.  ``discard`` comes first because callers conventionally
filter noise before any other routing decision.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from gotest_events.parse.action import TERMINAL_ACTIONS, Action

if TYPE_CHECKING:
    from gotest_events.parse.event import Event

# Progress markers printed by the testing package; each is 10 characters.
UPDATE_MARKERS = (
    "=== RUN   ",
    "=== PAUSE ",
    "=== CONT  ",
)

NO_TEST_FILES_PREFIX = "?   \t"
NO_TEST_FILES_SUFFIX = "[no test files]\n"

OK_PREFIX = "ok  \t"
NO_TESTS_TO_RUN_SUFFIX = "[no tests to run]\n"
NO_TESTS_WARNING = "testing: warning: no tests to run\n"
CACHED_MARKER = "\t(cached)"

NESTED_PREFIXES = ("PASS", "FAIL")

COVERAGE_MARKER = "coverage:"
COVERAGE_SUFFIX = "of statements\n"
COVERAGE_PATTERN = re.compile(r"[0-9]{1,3}\.[0-9]{1}%")

RACE_PREFIX = "WARNING: DATA RACE"
PANIC_PREFIX = "panic: "
RUNTIME_ERROR_MARKER = "runtime error:"
# Go's own tests echo runtime errors they trigger on purpose, e.g.
# time_test.go:1359: panic in goroutine 7, as expected, with "runtime error: racy use of timers"
EXPECTED_PANIC_MARKER = "as expected"


def discard(event: Event) -> bool:
    """Report whether the event is progress chatter or test-less output.

    True for ``=== RUN``/``=== PAUSE``/``=== CONT`` update lines regardless
    of action and test, and for any ``output`` event without a test name.
    """
    if event.output.startswith(UPDATE_MARKERS):
        return True
    return event.action == Action.OUTPUT and event.test == ""


def last_line(event: Event) -> bool:
    """Report whether the event is the final line summarizing a package run.

    ``go test`` prints ``ok  \\tpkg\\t0.583s`` and then emits a textless
    package-level ``pass`` (or ``fail``) event carrying only the elapsed time.
    """
    return event.test == "" and event.output == "" and event.action in TERMINAL_ACTIONS


def no_test_files(event: Event) -> bool:
    """``?   \\tpkg\\t[no test files]\\n``"""
    return event.output.startswith(NO_TEST_FILES_PREFIX) and event.output.endswith(
        NO_TEST_FILES_SUFFIX
    )


def no_tests_to_run(event: Event) -> bool:
    """``ok  \\tpkg\\t4.543s [no tests to run]\\n``"""
    return event.output.startswith(OK_PREFIX) and event.output.endswith(
        NO_TESTS_TO_RUN_SUFFIX
    )


def no_tests_warn(event: Event) -> bool:
    """Report the test-level ``testing: warning: no tests to run`` line.

    The same text can appear on a package event, so the test name must be set.
    """
    return event.test != "" and event.output == NO_TESTS_WARNING


def is_cached(event: Event) -> bool:
    """Report a package result served from the test cache.

    ``ok  \\tpkg\\t(cached)\\n`` or
    ``ok  \\tpkg\\t(cached)\\tcoverage: 28.8% of statements\\n``
    """
    return event.output.startswith(OK_PREFIX) and CACHED_MARKER in event.output


def nested_test(event: Event) -> bool:
    """Report whether a test's output line is really a nested test result.

    Frameworks such as gocheck print sub-test results as plain output::

        PASS: upgradeseries_test.go:104: UpgradeSeriesSuite.TestUpgradeCommand\\t0.000s
    """
    return event.test != "" and event.output.startswith(NESTED_PREFIXES)


def cover(event: Event) -> tuple[float, bool]:
    """Extract the package coverage percentage.

    Returns:
        ``(percentage, True)`` for a line such as
        ``ok  \\tpkg\\t0.027s\\tcoverage: 28.8% of statements\\n``, otherwise
        ``(0.0, False)``.  A coverage line without a recognizable
        ``NN.N%`` numeral also yields ``(0.0, False)``.
    """
    if COVERAGE_MARKER not in event.output or not event.output.endswith(COVERAGE_SUFFIX):
        return 0.0, False
    match = COVERAGE_PATTERN.search(event.output)
    if match is None:
        return 0.0, False
    return float(match.group(0).rstrip("%")), True


def is_race(event: Event) -> bool:
    return event.output.startswith(RACE_PREFIX)


def is_panic(event: Event) -> bool:
    return event.output.startswith(PANIC_PREFIX) or (
        RUNTIME_ERROR_MARKER in event.output
        and EXPECTED_PANIC_MARKER not in event.output
    )


@dataclass(frozen=True)
class Rule:
    """A named boolean check against a single event."""

    name: str
    check: Callable[[Event], bool]
    description: str

    def __call__(self, event: Event) -> bool:
        return self.check(event)


RULES: tuple[Rule, ...] = (
    Rule("discard", discard, "progress marker or output without a test"),
    Rule("last_line", last_line, "final package summary event"),
    Rule("no_test_files", no_test_files, "package has no test files"),
    Rule("no_tests_to_run", no_tests_to_run, "package matched no tests"),
    Rule("no_tests_warn", no_tests_warn, "test-level no tests to run warning"),
    Rule("cached", is_cached, "result served from the test cache"),
    Rule("nested_test", nested_test, "sub-test result printed as output"),
    Rule("race", is_race, "data race detected"),
    Rule("panic", is_panic, "panic detected"),
)

_RULES_BY_NAME = {rule.name: rule for rule in RULES}


def rule_names() -> list[str]:
    """Tag names in table order."""
    return [rule.name for rule in RULES]


def find_rule(name: str) -> Rule:
    """Look up a rule by tag name.

    Raises:
        KeyError: If no rule has that name.
    """
    try:
        return _RULES_BY_NAME[name]
    except KeyError:
        raise KeyError(f"no classification rule named {name!r}") from None


@dataclass(frozen=True)
class Classification:
    """Every tag that matched one event, plus its coverage if reported."""

    tags: frozenset[str]
    coverage: float | None = None

    def has(self, tag: str) -> bool:
        return tag in self.tags

    @property
    def ordinary(self) -> bool:
        """True when no special-case rule matched."""
        return not self.tags and self.coverage is None

    def to_dict(self) -> dict[str, Any]:
        # Table order keeps serialized output stable.
        data: dict[str, Any] = {
            "tags": [name for name in rule_names() if name in self.tags],
        }
        if self.coverage is not None:
            data["coverage"] = self.coverage
        return data


def classify(event: Event) -> Classification:
    """Run every rule and the coverage extractor against *event*.

    Args:
        event: A decoded, normally already normalized, event.

    Returns:
        A :class:`Classification` holding the names of all matching rules.
        Several tags may match at once (a ``no test files`` line is also
        discardable); precedence is left to the caller.
    """
    tags = frozenset(rule.name for rule in RULES if rule(event))
    percentage, found = cover(event)
    return Classification(tags=tags, coverage=percentage if found else None)
