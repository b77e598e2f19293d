"""Core value types shared by the waiter components."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

type LifecycleState = Hashable


@runtime_checkable
class HasRequestId(Protocol):
    """A response that carries the service-assigned request id."""

    @property
    def request_id(self) -> str | None: ...


@runtime_checkable
class ResourceSnapshot(Protocol):
    """The minimum a probe result must expose: its lifecycle state."""

    @property
    def lifecycle_state(self) -> LifecycleState: ...


@dataclass(frozen=True, slots=True)
class Attempt:
    """One probe issued by a waiter.

    Attributes:
        number: Zero-based ordinal of the probe within the wait.
        issued_at: Monotonic timestamp at which the probe was issued.
        elapsed: Seconds between the start of the wait and issued_at.
    """

    number: int
    issued_at: float
    elapsed: float = 0.0


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Plain ResourceSnapshot for probes that only know the state."""

    lifecycle_state: LifecycleState
    request_id: str | None = None


def request_id_of(snapshot: object) -> str | None:
    """Return the request id carried by a snapshot, if any."""
    if isinstance(snapshot, HasRequestId):
        return snapshot.request_id
    return None
