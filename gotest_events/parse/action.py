"""Event actions emitted by ``go test -json``.

The set is closed: ``test2json`` documents exactly eight actions and any
other value is treated as protocol drift rather than silently accepted.
"""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    """Lifecycle tag attached to every event."""

    RUN = "run"  # test has started running
    PAUSE = "pause"  # test has been paused
    CONT = "cont"  # test has continued running
    PASS = "pass"  # test passed
    BENCH = "bench"  # benchmark printed log output but did not fail
    FAIL = "fail"  # test or benchmark failed
    OUTPUT = "output"  # test printed output
    SKIP = "skip"  # test was skipped or the package contained no tests

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> Action:
        """Look up an action by its wire literal.

        Args:
            value: The ``Action`` field exactly as it appears on the wire.

        Returns:
            The matching ``Action`` member.

        Raises:
            ValueError: If *value* is not one of the known literals.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"unknown action {value!r}") from None


# Actions that carry a pass/fail outcome and a meaningful Elapsed.
TERMINAL_ACTIONS = frozenset({Action.PASS, Action.FAIL})
