"""State probes: one "get current state" round-trip against a service.

Probes are supplied by the client layer. Anything with an async fetch()
method satisfies StateProbe; plain functions can be adapted with probe():

    # async client
    waiter_probe = probe(lambda: client.get_drg(drg_id))

    # blocking client, run in a worker thread
    waiter_probe = probe(functools.partial(client.get_drg, drg_id))

A probe signals a transient failure by raising ProbeTransportError (or one
of the configured transient exception types) and a missing resource by
raising ResourceNotFoundError.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from standby.types import LifecycleState

type StateAccessor = Callable[[Any], LifecycleState]


class StateProbe[R](Protocol):
    async def fetch(self) -> R: ...


@dataclass(frozen=True, slots=True)
class CallableProbe[R]:
    """Adapts a zero-argument function (sync or async) into a StateProbe."""

    fn: Callable[[], Awaitable[R] | R]

    async def fetch(self) -> R:
        if inspect.iscoroutinefunction(self.fn):
            return await self.fn()  # type: ignore[misc]

        result = await asyncio.to_thread(self.fn)
        if inspect.isawaitable(result):
            return await result
        return result  # type: ignore[return-value]


def probe[R](fn: Callable[[], Awaitable[R] | R]) -> CallableProbe[R]:
    return CallableProbe(fn)


def lifecycle_state(snapshot: Any) -> LifecycleState:
    """Default accessor: the snapshot's ``lifecycle_state`` attribute."""
    return snapshot.lifecycle_state
