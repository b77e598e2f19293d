import asyncio
import threading

import pytest

from standby.cancellation import CancellationToken
from standby.core.exceptions import TerminalStateError, WaitTimeoutError
from standby.outcome import Succeeded
from standby.probe import CallableProbe, probe
from standby.types import Snapshot, request_id_of
from standby.waiter import new_waiter, wait_for
from tests.conftest import ScriptedProbe, fast_config

pytestmark = [pytest.mark.unit]


class TestCallableProbe:
    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        async def get_drg() -> Snapshot:
            return Snapshot("Available")

        assert await probe(get_drg).fetch() == Snapshot("Available")

    @pytest.mark.asyncio
    async def test_sync_function_runs_off_loop(self) -> None:
        main_thread = threading.get_ident()
        seen: list[int] = []

        def get_drg() -> Snapshot:
            seen.append(threading.get_ident())
            return Snapshot("Available", request_id="opc-123")

        result = await CallableProbe(get_drg).fetch()

        assert result == Snapshot("Available", request_id="opc-123")
        assert seen and seen[0] != main_thread

    @pytest.mark.asyncio
    async def test_lambda_returning_coroutine(self) -> None:
        async def get_drg(drg_id: str) -> Snapshot:
            await asyncio.sleep(0)
            return Snapshot("Provisioning")

        assert await probe(lambda: get_drg("ocid1.drg")).fetch() == Snapshot("Provisioning")


class TestRequestId:
    def test_snapshot_with_request_id(self) -> None:
        assert request_id_of(Snapshot("Available", request_id="abc")) == "abc"

    def test_object_without_request_id(self) -> None:
        assert request_id_of({"lifecycle_state": "Available"}) is None


class TestWaitFor:
    @pytest.mark.asyncio
    async def test_returns_snapshot(self) -> None:
        states = iter(["Provisioning", "Available"])

        async def get_vc() -> Snapshot:
            return Snapshot(next(states))

        result = await wait_for(get_vc, "Available", config=fast_config(), description="vc")
        assert result == Snapshot("Available")

    @pytest.mark.asyncio
    async def test_accepts_probe_objects(self) -> None:
        result = await wait_for(ScriptedProbe(["Available"]), "Available", config=fast_config())
        assert result is not None
        assert result.lifecycle_state == "Available"

    @pytest.mark.asyncio
    async def test_raises_on_terminal_state(self) -> None:
        with pytest.raises(TerminalStateError, match="vc reached terminal state: Failed"):
            await wait_for(
                ScriptedProbe(["Provisioning", "Failed"]),
                "Available",
                failing_on=("Failed",),
                config=fast_config(),
                description="vc",
            )

    @pytest.mark.asyncio
    async def test_raises_on_timeout(self) -> None:
        with pytest.raises(WaitTimeoutError):
            await wait_for(ScriptedProbe(["Provisioning"]), "Available", config=fast_config(max_attempts=2))

    @pytest.mark.asyncio
    async def test_waiter_with_plain_snapshots_and_token(self) -> None:
        waiter = new_waiter(probe(lambda: Snapshot("Available")), {"Available"}, fast_config())
        outcome = await waiter.execute(CancellationToken.after(30))
        assert isinstance(outcome, Succeeded)
        assert outcome.snapshot == Snapshot("Available")
