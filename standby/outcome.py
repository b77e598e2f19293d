"""Algebraic Data Type (ADT) for the result of a wait.

Exactly one variant is produced per Waiter.execute() call:
- Succeeded: the resource reached a target state
- ObservedTerminalFailureState: the resource reached a state it cannot leave
- TimedOut: the attempt or time budget ran out in a transitional state
- Failed: probing the resource failed
- Cancelled: the caller aborted the wait or its deadline passed

Use pattern matching to handle outcomes:

    match await waiter.execute(token):
        case Succeeded(snapshot=drg):
            print(f"DRG {drg.id} available")
        case ObservedTerminalFailureState(state=state):
            raise RuntimeError(f"DRG ended up {state}")
        case TimedOut(last_state=state, attempts=n):
            print(f"still {state} after {n} polls")
        case Failed(error=e):
            raise e
        case Cancelled():
            return
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from standby.core.exceptions import (
    ProbeFailedError,
    TerminalStateError,
    WaitCancelledError,
    WaitTimeoutError,
)
from standby.types import LifecycleState


@dataclass(frozen=True, slots=True)
class Succeeded:
    """The resource reached one of the target states.

    state and snapshot are None when the resource was not found and the
    waiter was configured to treat that as success.
    """

    state: LifecycleState | None
    snapshot: Any
    attempts: int

    def unwrap(self, description: str = "resource") -> Any:
        return self.snapshot


@dataclass(frozen=True, slots=True)
class ObservedTerminalFailureState:
    """The resource reached a terminal state outside the target set."""

    state: LifecycleState
    snapshot: Any
    attempts: int

    def unwrap(self, description: str = "resource") -> Any:
        raise TerminalStateError(description, self.state, self.attempts)


@dataclass(frozen=True, slots=True)
class TimedOut:
    last_state: LifecycleState | None
    attempts: int

    def unwrap(self, description: str = "resource") -> Any:
        raise WaitTimeoutError(description, self.last_state, self.attempts)


@dataclass(frozen=True, slots=True)
class Failed:
    error: BaseException
    attempts: int

    def unwrap(self, description: str = "resource") -> Any:
        raise ProbeFailedError(description, self.error, self.attempts) from self.error


@dataclass(frozen=True, slots=True)
class Cancelled:
    reason: str
    last_state: LifecycleState | None
    attempts: int

    def unwrap(self, description: str = "resource") -> Any:
        raise WaitCancelledError(description, self.reason, self.attempts)


type Outcome = Succeeded | ObservedTerminalFailureState | TimedOut | Failed | Cancelled
