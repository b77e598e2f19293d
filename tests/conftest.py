from __future__ import annotations

import asyncio
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from standby.callback import use_callback
from standby.config import BackoffSpec, WaiterConfig
from standby.events import WaiterEvent


@dataclass(frozen=True, slots=True)
class Resource:
    id: str
    lifecycle_state: str
    request_id: str | None = None


@dataclass
class ScriptedProbe:
    """Returns (or raises) the scripted steps in order, repeating the last one.

    Steps are lifecycle-state strings or exception instances.
    """

    steps: Sequence[str | BaseException]
    latency: float = 0.0
    calls: int = 0
    call_times: list[float] = field(default_factory=list)

    async def fetch(self) -> Resource:
        step = self.steps[min(self.calls, len(self.steps) - 1)]
        self.calls += 1
        self.call_times.append(asyncio.get_running_loop().time())
        if self.latency:
            await asyncio.sleep(self.latency)
        if isinstance(step, BaseException):
            raise step
        return Resource(id="ocid1.drg.oc1..example", lifecycle_state=step, request_id=f"req-{self.calls}")


def fast_config(**overrides: object) -> WaiterConfig:
    params: dict[str, object] = {
        "backoff": BackoffSpec(base_delay=0.001, multiplier=2.0, max_delay=0.01),
        "max_attempts": 10,
        "max_elapsed": None,
        "probe_retries": 2,
        "probe_retry_delay": 0.0,
        "probe_retry_max_delay": 0.0,
    }
    params.update(overrides)
    return WaiterConfig(**params)  # type: ignore[arg-type]


@contextmanager
def recording() -> Iterator[list[WaiterEvent]]:
    received: list[WaiterEvent] = []
    with use_callback(received.append):
        yield received

