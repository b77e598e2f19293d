"""Delay strategies between lifecycle polls.

Delay formula for the exponential policy:
    min(base_delay * (multiplier ** attempt), max_delay)

Policies are frozen and hold no per-wait state, so one instance can be
shared across any number of concurrent waiters.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol

from standby.config import BackoffSpec
from standby.core.exceptions import ConfigurationError
from standby.types import Attempt


class BackoffPolicy(Protocol):
    def next_delay(self, attempt: Attempt) -> float:
        """Seconds to wait after ``attempt`` before issuing the next probe."""
        ...


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    spec: BackoffSpec = BackoffSpec()

    def next_delay(self, attempt: Attempt) -> float:
        spec = self.spec
        n = attempt.number
        if spec.immediate_first_retry:
            if n == 0:
                return 0.0
            n -= 1

        try:
            delay = min(spec.base_delay * (spec.multiplier**n), spec.max_delay)
        except OverflowError:
            delay = spec.max_delay

        if spec.jitter:
            delay *= random.uniform(1 - spec.jitter, 1 + spec.jitter)

        return max(0.0, min(delay, spec.max_delay))


@dataclass(frozen=True, slots=True)
class FixedBackoff:
    delay: float

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ConfigurationError(f"delay must be >= 0, got {self.delay}")

    def next_delay(self, attempt: Attempt) -> float:
        return self.delay
