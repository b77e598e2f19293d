"""Resource-state waiter: polls a probe until a lifecycle condition holds.

A Waiter is a single-use state machine:

    IDLE -> POLLING -> SUCCEEDED | TIMED_OUT | TERMINAL_FAILURE_OBSERVED
                       | FAILED | ABORTED

Each iteration probes the resource, classifies the observed state and
either returns an outcome or sleeps per the backoff policy. Both the probe
and every sleep are raced against the cancellation token, so a cancel
takes effect immediately instead of at the next iteration.

Example:
    waiter = new_waiter(
        probe(lambda: client.get_virtual_circuit(vc_id)),
        {"PendingProvider"},
        terminal_failures={"Failed", "Terminated"},
        description=f"virtual circuit {vc_id}",
    )
    match await waiter.execute(CancellationToken.after(600)):
        case Succeeded(snapshot=vc):
            ...
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Iterable, Sequence
from enum import StrEnum
from typing import Any

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from standby.backoff import BackoffPolicy, ExponentialBackoff
from standby.callback import emit
from standby.cancellation import CancellationToken
from standby.config import WaiterConfig
from standby.core.exceptions import ResourceNotFoundError, WaiterReusedError
from standby.events import BackingOff, ProbeErrored, StateObserved, WaitFinished, WaitStarted
from standby.outcome import (
    Cancelled,
    Failed,
    ObservedTerminalFailureState,
    Outcome,
    Succeeded,
    TimedOut,
)
from standby.predicate import StatePredicate, TerminationPredicate, Verdict
from standby.probe import StateAccessor, StateProbe, lifecycle_state
from standby.probe import probe as as_probe
from standby.types import Attempt, LifecycleState, request_id_of


class WaiterState(StrEnum):
    IDLE = "idle"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    TERMINAL_FAILURE_OBSERVED = "terminal_failure_observed"
    FAILED = "failed"
    ABORTED = "aborted"


_FINAL_STATES: dict[type, WaiterState] = {
    Succeeded: WaiterState.SUCCEEDED,
    TimedOut: WaiterState.TIMED_OUT,
    ObservedTerminalFailureState: WaiterState.TERMINAL_FAILURE_OBSERVED,
    Failed: WaiterState.FAILED,
    Cancelled: WaiterState.ABORTED,
}


class _Aborted(Exception):
    """Cancellation observed while a probe or retry sleep was pending."""


class Waiter[R]:
    def __init__(
        self,
        probe: StateProbe[R],
        predicate: TerminationPredicate,
        config: WaiterConfig | None = None,
        *,
        backoff: BackoffPolicy | None = None,
        state_of: StateAccessor = lifecycle_state,
        description: str = "resource",
    ) -> None:
        self._probe = probe
        self._predicate = predicate
        self._config = config or WaiterConfig()
        self._backoff = backoff or ExponentialBackoff(self._config.backoff)
        self._state_of = state_of
        self._description = description
        self._state = WaiterState.IDLE
        self._outcome: Outcome | None = None
        self._log = logger.bind(component="waiter", resource=description)

    @property
    def state(self) -> WaiterState:
        return self._state

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, signal: CancellationToken | None = None) -> Outcome:
        """Poll until a terminal outcome is reached.

        Exceptions raised by event callbacks or by a custom predicate
        propagate, leaving the waiter FAILED.

        Raises:
            WaiterReusedError: If this waiter already ran or is running.
        """
        if self._state is not WaiterState.IDLE:
            raise WaiterReusedError(self._state)
        self._state = WaiterState.POLLING

        token = signal or CancellationToken()
        loop = asyncio.get_running_loop()
        start = loop.time()
        targets = getattr(self._predicate, "targets", frozenset())

        try:
            emit(WaitStarted(resource=self._description, targets=targets))
            self._log.debug("Waiting for {} to reach {}", self._description, sorted(map(str, targets)))
            outcome = await self._poll(token, loop, start)
            self._finish(outcome, loop.time() - start)
        except asyncio.CancelledError:
            self._state = WaiterState.ABORTED
            self._log.info("Wait for {} cancelled by task cancellation", self._description)
            raise
        except Exception as e:
            self._state = WaiterState.FAILED
            self._log.error("Wait for {} raised {}: {}", self._description, type(e).__name__, e)
            raise

        return outcome

    def run(self, signal: CancellationToken | None = None) -> Outcome:
        """Blocking variant of execute() for synchronous callers."""
        return asyncio.run(self.execute(signal))

    def start(self, signal: CancellationToken | None = None) -> asyncio.Task[Outcome]:
        """Schedule execute() on the running loop and return its task."""
        return asyncio.create_task(self.execute(signal), name=f"wait:{self._description}")

    async def until_done(self, signal: CancellationToken | None = None) -> R | None:
        """Execute and return the final snapshot, raising on any other outcome."""
        outcome = await self.execute(signal)
        return outcome.unwrap(self._description)

    async def _poll(
        self,
        token: CancellationToken,
        loop: asyncio.AbstractEventLoop,
        start: float,
    ) -> Outcome:
        config = self._config
        last_state: LifecycleState | None = None
        number = 0

        while True:
            if token.cancelled:
                return Cancelled(token.reason, last_state, number)

            issued_at = loop.time()
            attempt = Attempt(number=number, issued_at=issued_at, elapsed=issued_at - start)
            probes = number + 1

            try:
                snapshot = await self._fetch(token, attempt)
            except _Aborted:
                return Cancelled(token.reason, last_state, number)
            except ResourceNotFoundError as e:
                if config.succeed_on_not_found:
                    self._log.debug("{} not found, treating as gone", self._description)
                    return Succeeded(None, None, probes)
                return Failed(e, probes)
            except Exception as e:
                return Failed(e, probes)

            if token.cancelled:
                return Cancelled(token.reason, last_state, probes)

            try:
                state = self._state_of(snapshot)
            except Exception as e:
                return Failed(e, probes)
            last_state = state
            elapsed = loop.time() - start
            request_id = request_id_of(snapshot)
            emit(StateObserved(self._description, number, state, elapsed, request_id))
            self._log.bind(attempt=number, request_id=request_id).debug(
                "Probe {} observed state {} after {:.1f}s", probes, state, elapsed
            )

            match self._predicate.evaluate(state):
                case Verdict.SUCCESS:
                    return Succeeded(state, snapshot, probes)
                case Verdict.TERMINAL_FAILURE:
                    return ObservedTerminalFailureState(state, snapshot, probes)

            if config.max_attempts is not None and probes >= config.max_attempts:
                return TimedOut(state, probes)
            if config.max_elapsed is not None and elapsed >= config.max_elapsed:
                return TimedOut(state, probes)

            delay = self._backoff.next_delay(attempt)
            if config.max_elapsed is not None:
                delay = min(delay, config.max_elapsed - elapsed)
            emit(BackingOff(self._description, number, delay))

            if await token.sleep(delay):
                return Cancelled(token.reason, last_state, probes)
            number += 1

    async def _fetch(self, token: CancellationToken, attempt: Attempt) -> R:
        config = self._config

        async def sleep(seconds: float) -> None:
            if await token.sleep(seconds):
                raise _Aborted()

        def before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            self._log.warning(
                "Probe retry {}/{} for {} after {}: {}",
                retry_state.attempt_number,
                config.probe_retries,
                self._description,
                type(error).__name__,
                error,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.probe_retries + 1),
            wait=wait_exponential(
                multiplier=config.probe_retry_delay,
                max=config.probe_retry_max_delay,
            ),
            retry=retry_if_exception_type(config.transient_errors),
            sleep=sleep,
            before_sleep=before_sleep,
            reraise=True,
        )

        async for retry_attempt in retrying:
            with retry_attempt:
                try:
                    return await self._guarded(self._probe.fetch(), token)
                except _Aborted:
                    raise
                except Exception as e:
                    will_retry = (
                        isinstance(e, config.transient_errors)
                        and retry_attempt.retry_state.attempt_number <= config.probe_retries
                    )
                    emit(ProbeErrored(self._description, attempt.number, e, will_retry))
                    raise
        raise AssertionError("retry loop exited without a result")

    async def _guarded(self, fetch: Awaitable[R], token: CancellationToken) -> R:
        """Await fetch unless the token fires first; never leaves it pending."""
        probe_task = asyncio.ensure_future(fetch)
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({probe_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (probe_task, cancel_task):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

        if cancel_task.done() and not cancel_task.cancelled() and (error := cancel_task.exception()):
            raise error
        if probe_task.cancelled() and token.cancelled:
            raise _Aborted()
        return probe_task.result()

    def _finish(self, outcome: Outcome, elapsed: float) -> None:
        self._outcome = outcome
        self._state = _FINAL_STATES[type(outcome)]
        emit(WaitFinished(self._description, outcome, elapsed))

        match outcome:
            case Succeeded(state=state, attempts=n):
                self._log.info("{} reached {} after {} probes ({:.1f}s)", self._description, state, n, elapsed)
            case ObservedTerminalFailureState(state=state):
                self._log.warning("{} reached terminal state {}", self._description, state)
            case TimedOut(last_state=state, attempts=n):
                self._log.warning("Timed out waiting for {} after {} probes (last state {})", self._description, n, state)
            case Failed(error=e):
                self._log.error("Probing {} failed: {}: {}", self._description, type(e).__name__, e)
            case Cancelled(reason=reason):
                self._log.info("Wait for {} aborted: {}", self._description, reason)


def new_waiter[R](
    probe: StateProbe[R],
    target: Iterable[LifecycleState],
    config: WaiterConfig | None = None,
    *,
    terminal_failures: Iterable[LifecycleState] = (),
    backoff: BackoffPolicy | None = None,
    state_of: StateAccessor = lifecycle_state,
    description: str = "resource",
) -> Waiter[R]:
    """Create a waiter for ``probe`` that succeeds on any state in ``target``.

    Raises:
        ConfigurationError: If target is empty or the config is invalid.
    """
    predicate = StatePredicate(frozenset(target), frozenset(terminal_failures))
    return Waiter(
        probe,
        predicate,
        config,
        backoff=backoff,
        state_of=state_of,
        description=description,
    )


async def wait_for[R](
    fetch: StateProbe[R] | Callable[[], Awaitable[R] | R],
    *targets: LifecycleState,
    failing_on: Iterable[LifecycleState] = (),
    config: WaiterConfig | None = None,
    signal: CancellationToken | None = None,
    state_of: StateAccessor = lifecycle_state,
    description: str = "resource",
) -> R | None:
    """Wait until the resource reaches one of ``targets`` and return its snapshot.

    Raises:
        TerminalStateError: If the resource reached a state in failing_on.
        WaitTimeoutError: If the attempt or time budget ran out.
        WaitCancelledError: If the signal was cancelled or expired.
        ProbeFailedError: If probing the resource failed.
    """
    resolved: Any = fetch if hasattr(fetch, "fetch") else as_probe(fetch)  # type: ignore[arg-type]
    waiter = new_waiter(
        resolved,
        targets,
        config,
        terminal_failures=failing_on,
        state_of=state_of,
        description=description,
    )
    return await waiter.until_done(signal)


async def wait_all(
    waiters: Sequence[Waiter[Any]],
    signal: CancellationToken | None = None,
) -> list[Outcome]:
    """Run independent waiters concurrently; outcomes are in input order.

    If any waiter raises, the others are cancelled and awaited before the
    errors propagate as an ExceptionGroup.
    """
    async with asyncio.TaskGroup() as tg:
        tasks = [tg.create_task(w.execute(signal), name=f"wait:{w.description}") for w in waiters]
    return [task.result() for task in tasks]
