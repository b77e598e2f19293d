"""Custom exception hierarchy for standby.

All standby-specific exceptions inherit from StandbyError, enabling
users to catch all standby exceptions with a single except clause.
"""

from __future__ import annotations

from collections.abc import Hashable


class StandbyError(Exception):
    """Base exception for all standby errors."""


class ConfigurationError(StandbyError):
    """Raised for invalid waiter configuration (empty targets, bad backoff)."""


class ProbeTransportError(StandbyError):
    """Raised by a probe on a transient network or service failure - retry."""


class ResourceNotFoundError(StandbyError):
    """Raised by a probe when the service reports the resource does not exist."""

    def __init__(self, resource: str = "resource") -> None:
        self.resource = resource
        super().__init__(f"{resource} not found")


class WaiterReusedError(StandbyError):
    """Raised when execute() is called on a waiter that is running or spent."""

    def __init__(self, state: str) -> None:
        self.state = state
        super().__init__(f"Waiter is single-use (current state: {state})")


class WaitError(StandbyError):
    """Base for errors raised when unwrapping a non-successful outcome."""

    def __init__(self, message: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)


class WaitTimeoutError(WaitError):
    """Raised when the attempt or time budget ran out in a transitional state."""

    def __init__(self, description: str, last_state: Hashable | None, attempts: int) -> None:
        self.last_state = last_state
        super().__init__(
            f"Timeout waiting for {description} after {attempts} attempts "
            f"(last state: {last_state})",
            attempts,
        )


class TerminalStateError(WaitError):
    """Raised when the resource reached a state it can never leave - do not retry."""

    def __init__(self, description: str, state: Hashable, attempts: int) -> None:
        self.state = state
        super().__init__(f"{description} reached terminal state: {state}", attempts)


class WaitCancelledError(WaitError):
    """Raised when the wait was aborted by the caller or a deadline."""

    def __init__(self, description: str, reason: str, attempts: int) -> None:
        self.reason = reason
        super().__init__(f"Wait for {description} aborted: {reason}", attempts)


class ProbeFailedError(WaitError):
    """Raised when probing the resource failed; the cause is chained."""

    def __init__(self, description: str, error: BaseException, attempts: int) -> None:
        self.error = error
        super().__init__(
            f"Probing {description} failed: {type(error).__name__}: {error}",
            attempts,
        )
