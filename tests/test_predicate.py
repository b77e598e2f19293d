from enum import StrEnum

import pytest

from standby.core.exceptions import ConfigurationError
from standby.predicate import StatePredicate, Verdict, until

pytestmark = [pytest.mark.unit]


class DrgState(StrEnum):
    PROVISIONING = "PROVISIONING"
    AVAILABLE = "AVAILABLE"
    TERMINATING = "TERMINATING"
    TERMINATED = "TERMINATED"


class TestStatePredicate:
    def test_target_state_is_success(self) -> None:
        predicate = until("Available", failing_on=("Failed",))
        assert predicate.evaluate("Available") is Verdict.SUCCESS

    def test_known_terminal_state_is_failure(self) -> None:
        predicate = until("Available", failing_on=("Failed", "Terminated"))
        assert predicate.evaluate("Terminated") is Verdict.TERMINAL_FAILURE

    def test_other_states_continue(self) -> None:
        predicate = until("Available", failing_on=("Failed",))
        assert predicate.evaluate("Provisioning") is Verdict.CONTINUE
        assert predicate.evaluate("SomethingNew") is Verdict.CONTINUE

    def test_multiple_targets(self) -> None:
        predicate = until("Provisioned", "PendingProvider")
        assert predicate.evaluate("PendingProvider") is Verdict.SUCCESS
        assert predicate.evaluate("Provisioned") is Verdict.SUCCESS

    def test_target_wins_over_terminal_failure(self) -> None:
        predicate = until("Terminated", failing_on=("Terminated", "Failed"))
        assert predicate.evaluate("Terminated") is Verdict.SUCCESS
        assert predicate.evaluate("Failed") is Verdict.TERMINAL_FAILURE

    def test_empty_target_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            StatePredicate(frozenset())

    def test_enum_states(self) -> None:
        predicate = until(DrgState.AVAILABLE, failing_on=(DrgState.TERMINATED,))
        assert predicate.evaluate(DrgState.AVAILABLE) is Verdict.SUCCESS
        assert predicate.evaluate("TERMINATED") is Verdict.TERMINAL_FAILURE
        assert predicate.evaluate(DrgState.TERMINATING) is Verdict.CONTINUE

    def test_predicate_is_hashable_and_shareable(self) -> None:
        a = until("Available", failing_on=("Failed",))
        b = until("Available", failing_on=("Failed",))
        assert a == b
        assert hash(a) == hash(b)
