"""Log callback: renders waiter events as loguru records."""

from __future__ import annotations

from loguru import logger

from standby.callback import Callback
from standby.events import (
    BackingOff,
    ProbeErrored,
    StateObserved,
    WaiterEvent,
    WaitFinished,
    WaitStarted,
)
from standby.outcome import Succeeded


def log_callback(level: str = "INFO") -> Callback:
    """Build a callback that logs every waiter event at ``level``.

    Probe errors are logged at WARNING and unsuccessful outcomes at ERROR
    regardless of ``level``.
    """
    log = logger.bind(component="events")

    def callback(event: WaiterEvent) -> None:
        match event:
            case WaitStarted(resource=name, targets=targets):
                log.log(level, "{}: waiting for {}", name, ", ".join(sorted(map(str, targets))))
            case StateObserved(resource=name, attempt=n, state=state, elapsed=elapsed):
                log.log(level, "{}: #{} {} ({:.1f}s)", name, n, state, elapsed)
            case ProbeErrored(resource=name, error=error, will_retry=will_retry):
                suffix = "retrying" if will_retry else "giving up"
                log.warning("{}: probe failed ({}), {}", name, error, suffix)
            case BackingOff(resource=name, delay=delay):
                log.log(level, "{}: next probe in {:.1f}s", name, delay)
            case WaitFinished(resource=name, outcome=Succeeded() as outcome, elapsed=elapsed):
                log.log(level, "{}: {} after {:.1f}s", name, outcome.state, elapsed)
            case WaitFinished(resource=name, outcome=outcome, elapsed=elapsed):
                log.error("{}: {} after {:.1f}s", name, type(outcome).__name__, elapsed)
        return None

    return callback
