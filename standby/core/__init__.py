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

__all__ = [
    "ConfigurationError",
    "ProbeFailedError",
    "ProbeTransportError",
    "ResourceNotFoundError",
    "StandbyError",
    "TerminalStateError",
    "WaitCancelledError",
    "WaitError",
    "WaiterReusedError",
    "WaitTimeoutError",
]
