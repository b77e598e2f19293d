"""Algebraic Data Type (ADT) for waiter events.

Events follow the lifecycle of a single wait:
- WaitStarted: execute() began polling
- StateObserved: a probe returned a lifecycle state
- ProbeErrored: a probe raised (possibly retried)
- BackingOff: the waiter is sleeping before the next probe
- WaitFinished: an outcome was produced

Use pattern matching to handle events in consumers:

    match event:
        case StateObserved(resource=name, state=state):
            print(f"{name}: {state}")
        case WaitFinished(outcome=Succeeded()):
            print("done")
"""

from __future__ import annotations

from dataclasses import dataclass

from standby.outcome import Outcome
from standby.types import LifecycleState


@dataclass(frozen=True, slots=True)
class WaitStarted:
    resource: str
    targets: frozenset[LifecycleState]


@dataclass(frozen=True, slots=True)
class StateObserved:
    """A probe completed and reported the resource's lifecycle state."""

    resource: str
    attempt: int
    state: LifecycleState
    elapsed: float
    request_id: str | None = None


@dataclass(frozen=True, slots=True)
class ProbeErrored:
    resource: str
    attempt: int
    error: BaseException
    will_retry: bool


@dataclass(frozen=True, slots=True)
class BackingOff:
    resource: str
    attempt: int
    delay: float


@dataclass(frozen=True, slots=True)
class WaitFinished:
    resource: str
    outcome: Outcome
    elapsed: float


type WaiterEvent = WaitStarted | StateObserved | ProbeErrored | BackingOff | WaitFinished
