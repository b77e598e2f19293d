"""standby - wait for cloud resources to reach a lifecycle state.

Example:

    from standby import CancellationToken, WaiterConfig, new_waiter, probe

    waiter = new_waiter(
        probe(lambda: network.get_drg(drg_id)),
        {"Available"},
        WaiterConfig(max_elapsed=600),
        terminal_failures={"Terminated", "Terminating"},
        description=f"drg {drg_id}",
    )

    outcome = await waiter.execute(CancellationToken.after(900))
    drg = outcome.unwrap()
"""

from loguru import logger

from standby.backoff import BackoffPolicy, ExponentialBackoff, FixedBackoff
from standby.callback import Callback, compose, emit, only, use_callback
from standby.cancellation import CancellationToken
from standby.config import BackoffSpec, WaiterConfig, load_config, resolve_config
from standby.core.exceptions import (
    ConfigurationError,
    ProbeFailedError,
    ProbeTransportError,
    ResourceNotFoundError,
    StandbyError,
    TerminalStateError,
    WaitCancelledError,
    WaitError,
    WaiterReusedError,
    WaitTimeoutError,
)
from standby.events import (
    BackingOff,
    ProbeErrored,
    StateObserved,
    WaiterEvent,
    WaitFinished,
    WaitStarted,
)
from standby.outcome import (
    Cancelled,
    Failed,
    ObservedTerminalFailureState,
    Outcome,
    Succeeded,
    TimedOut,
)
from standby.predicate import StatePredicate, TerminationPredicate, Verdict, until
from standby.probe import CallableProbe, StateProbe, probe
from standby.types import Attempt, HasRequestId, LifecycleState, ResourceSnapshot, Snapshot
from standby.waiter import Waiter, WaiterState, new_waiter, wait_all, wait_for

logger.disable("standby")

__all__ = [
    # Waiter
    "Waiter",
    "WaiterState",
    "new_waiter",
    "wait_for",
    "wait_all",
    # Building blocks
    "Attempt",
    "BackoffPolicy",
    "BackoffSpec",
    "CallableProbe",
    "CancellationToken",
    "ExponentialBackoff",
    "FixedBackoff",
    "HasRequestId",
    "LifecycleState",
    "ResourceSnapshot",
    "Snapshot",
    "StatePredicate",
    "StateProbe",
    "TerminationPredicate",
    "Verdict",
    "WaiterConfig",
    "load_config",
    "probe",
    "resolve_config",
    "until",
    # Outcomes
    "Cancelled",
    "Failed",
    "ObservedTerminalFailureState",
    "Outcome",
    "Succeeded",
    "TimedOut",
    # Events
    "BackingOff",
    "Callback",
    "ProbeErrored",
    "StateObserved",
    "WaitFinished",
    "WaitStarted",
    "WaiterEvent",
    "compose",
    "emit",
    "only",
    "use_callback",
    # Exceptions
    "ConfigurationError",
    "ProbeFailedError",
    "ProbeTransportError",
    "ResourceNotFoundError",
    "StandbyError",
    "TerminalStateError",
    "WaitCancelledError",
    "WaitError",
    "WaitTimeoutError",
    "WaiterReusedError",
]
