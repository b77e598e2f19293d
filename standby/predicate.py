"""Classification of observed lifecycle states.

A predicate decides, for each observed state, whether the wait is done
(SUCCESS), can never succeed (TERMINAL_FAILURE), or should keep polling
(CONTINUE). Terminal-failure sets are supplied per resource type by the
caller:

    predicate = until("Available", failing_on=("Failed", "Terminated"))

    match predicate.evaluate(state):
        case Verdict.SUCCESS: ...
        case Verdict.TERMINAL_FAILURE: ...
        case Verdict.CONTINUE: ...
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from standby.core.exceptions import ConfigurationError
from standby.types import LifecycleState


class Verdict(StrEnum):
    CONTINUE = "continue"
    SUCCESS = "success"
    TERMINAL_FAILURE = "terminal_failure"


class TerminationPredicate(Protocol):
    def evaluate(self, state: LifecycleState) -> Verdict: ...


@dataclass(frozen=True, slots=True)
class StatePredicate:
    """Set-membership predicate.

    Target membership wins over terminal-failure membership, so waiting for
    ``Terminated`` works even when ``Terminated`` is listed as a failure.
    """

    targets: frozenset[LifecycleState]
    terminal_failures: frozenset[LifecycleState] = frozenset()

    def __post_init__(self) -> None:
        if not self.targets:
            raise ConfigurationError("Wait target must contain at least one state")

    def evaluate(self, state: LifecycleState) -> Verdict:
        if state in self.targets:
            return Verdict.SUCCESS
        if state in self.terminal_failures:
            return Verdict.TERMINAL_FAILURE
        return Verdict.CONTINUE


def until(
    *targets: LifecycleState,
    failing_on: Iterable[LifecycleState] = (),
) -> StatePredicate:
    return StatePredicate(frozenset(targets), frozenset(failing_on))
