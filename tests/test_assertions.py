"""Unit tests for the event and revert assertion helpers."""

import pytest

from minxledger.assertions import event_emitted, event_not_emitted, reverts
from minxledger.errors import InsufficientAllowanceError, InsufficientBalanceError
from minxledger.runtime import TokenRuntime
from minxledger.types import EventType

DEPLOYER = "0x" + "d" * 40
ALICE = "0x" + "a" * 40


@pytest.fixture
def runtime():
    runtime = TokenRuntime()
    runtime.deploy(DEPLOYER)
    return runtime


class TestEventEmitted:

    def test_returns_matching_event(self, runtime):
        receipt = runtime.transfer(ALICE, 5, sender=DEPLOYER)

        event = event_emitted(receipt, EventType.TRANSFER, lambda ev: ev["to"] == ALICE)

        assert event.value == 5

    def test_accepts_event_name_and_event_list(self, runtime):
        runtime.approve(ALICE, 3, sender=DEPLOYER)

        event = event_emitted(runtime.ledger.get_events(), "Approval")

        assert event["spender"] == ALICE

    def test_fails_when_filter_does_not_match(self, runtime):
        receipt = runtime.transfer(ALICE, 5, sender=DEPLOYER)

        with pytest.raises(AssertionError, match="not emitted"):
            event_emitted(receipt, "Transfer", lambda ev: ev.value == 6)

    def test_fails_with_custom_message(self, runtime):
        receipt = runtime.transfer(ALICE, 5, sender=DEPLOYER)

        with pytest.raises(AssertionError, match="^approval missing"):
            event_emitted(receipt, EventType.APPROVAL, message="approval missing")


class TestEventNotEmitted:

    def test_passes_when_absent(self, runtime):
        receipt = runtime.burn(1, sender=DEPLOYER)
        event_not_emitted(receipt, EventType.APPROVAL)

    def test_fails_when_present(self, runtime):
        receipt = runtime.burn(1, sender=DEPLOYER)

        with pytest.raises(AssertionError, match="was emitted"):
            event_not_emitted(receipt, EventType.TRANSFER)


class TestReverts:

    def test_returns_error(self, runtime):
        error = reverts(runtime.burn, 1, sender=ALICE, error=InsufficientBalanceError)

        assert error.amount == 1

    def test_matches_message(self, runtime):
        reverts(runtime.burn, 1, sender=ALICE, match="Insufficient balance")

    def test_fails_on_success(self, runtime):
        with pytest.raises(AssertionError, match="succeeded"):
            reverts(runtime.burn, 1, sender=DEPLOYER)

    def test_fails_on_wrong_error_type(self, runtime):
        with pytest.raises(AssertionError, match="Expected InsufficientAllowanceError"):
            reverts(runtime.burn, 1, sender=ALICE, error=InsufficientAllowanceError)

    def test_fails_on_message_mismatch(self, runtime):
        with pytest.raises(AssertionError, match="does not match"):
            reverts(runtime.burn, 1, sender=ALICE, match="allowance")
