"""Listener registry for waiter events.

Listeners are scoped with use_callback() and stack: a block nested inside
another sees its own listener and every enclosing one, outermost first.
The registry lives in a ContextVar, so tasks started inside a block keep
reporting to its listeners after the block exits.

Example:
    from standby.callback import use_callback
    from standby.events import StateObserved

    def progress(event):
        match event:
            case StateObserved(resource=name, state=state):
                print(f"{name} is {state}")

    with use_callback(progress):
        await waiter.execute()
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from standby.events import WaiterEvent

type Callback = Callable[[WaiterEvent], None]

_listeners: ContextVar[tuple[Callback, ...]] = ContextVar("standby_listeners", default=())


def emit(event: WaiterEvent) -> None:
    """Deliver event to every listener active in the current context.

    A listener that raises stops delivery; the error reaches the waiter.
    """
    for listener in _listeners.get():
        listener(event)


def compose(*callbacks: Callback) -> Callback:
    """Combine callbacks into one that calls each, in order."""
    if len(callbacks) == 1:
        return callbacks[0]

    def fan_out(event: WaiterEvent) -> None:
        for cb in callbacks:
            cb(event)

    return fan_out


@contextmanager
def use_callback(cb: Callback) -> Iterator[None]:
    """Register cb for the duration of the block, on top of outer listeners."""
    token = _listeners.set((*_listeners.get(), cb))
    try:
        yield
    finally:
        _listeners.reset(token)


def only(*event_types: type) -> Callable[[Callback], Callback]:
    """Restrict a callback to the given event types.

    Example:
        @only(WaitFinished)
        def on_done(event):
            print(event.outcome)
    """

    def decorator(cb: Callback) -> Callback:
        def filtered(event: WaiterEvent) -> None:
            if isinstance(event, event_types):
                cb(event)

        return filtered

    return decorator


__all__ = [
    "Callback",
    "emit",
    "compose",
    "use_callback",
    "only",
]
