"""Create a DRG, wait for it to become available, delete it and wait for it to go away.

Uses an in-memory stand-in for a generated network client so the example
runs without credentials.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass

import standby
from standby import CancellationToken, ResourceNotFoundError, WaiterConfig, use_callback
from standby.callbacks import log_callback
from standby.observability import LogConfig, setup_logging, teardown_logging


@dataclass(frozen=True, slots=True)
class Drg:
    id: str
    lifecycle_state: str
    request_id: str


class FakeNetworkClient:
    def __init__(self) -> None:
        self._states: dict[str, list[str]] = {}

    def create_drg(self) -> str:
        drg_id = f"ocid1.drg.oc1..{uuid.uuid4().hex[:12]}"
        self._states[drg_id] = ["PROVISIONING", "PROVISIONING", "AVAILABLE"]
        return drg_id

    def delete_drg(self, drg_id: str) -> None:
        self._states[drg_id] = ["TERMINATING", "TERMINATING"]

    async def get_drg(self, drg_id: str) -> Drg:
        await asyncio.sleep(0.05)
        states = self._states.get(drg_id)
        if not states:
            raise ResourceNotFoundError(f"drg {drg_id}")
        state = states.pop(0) if len(states) > 1 else states[0]
        if state == "TERMINATING" and len(states) == 1:
            del self._states[drg_id]
        return Drg(drg_id, state, request_id=uuid.uuid4().hex)


async def main() -> None:
    client = FakeNetworkClient()
    config = WaiterConfig(
        backoff=standby.BackoffSpec(base_delay=0.2, multiplier=2.0, max_delay=2.0),
        max_elapsed=60,
        succeed_on_not_found=True,
    )

    drg_id = client.create_drg()
    drg = await standby.wait_for(
        lambda: client.get_drg(drg_id),
        "AVAILABLE",
        failing_on=("TERMINATING", "TERMINATED"),
        config=config,
        signal=CancellationToken.after(120),
        description=f"drg {drg_id}",
    )
    print(f"DRG {drg.id} is {drg.lifecycle_state}")

    client.delete_drg(drg_id)
    waiter = standby.new_waiter(
        standby.probe(lambda: client.get_drg(drg_id)),
        {"TERMINATED"},
        config,
        description=f"drg {drg_id}",
    )
    match await waiter.execute():
        case standby.Succeeded(state=None):
            print(f"DRG {drg_id} deleted")
        case outcome:
            outcome.unwrap(waiter.description)


if __name__ == "__main__":
    handler_ids = setup_logging(LogConfig(level="INFO", console=True))
    try:
        with use_callback(log_callback()):
            asyncio.run(main())
    finally:
        teardown_logging(handler_ids)
