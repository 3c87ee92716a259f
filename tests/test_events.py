"""Unit tests for the event system.

Tests cover:
- LedgerEvent creation and argument validation
- Event serialization (to_dict, to_jsonl) and deserialization (from_dict)
- EventEmitter subscriptions and dispatching
- Listener failure isolation
"""

import json
import logging
from datetime import datetime, timezone

import pytest

from minxledger.events import EventEmitter, LedgerEvent, event_id_for
from minxledger.ledger import Ledger
from minxledger.types import EventType, TokenMetadata, UINT256_MAX

OWNER = "0x" + "1" * 40
SPENDER = "0x" + "2" * 40


class TestLedgerEventCreation:
    """Test LedgerEvent creation and validation."""

    def test_transfer_constructor(self):
        event = LedgerEvent.transfer(OWNER, SPENDER, 10, tx_index=3)

        assert event.type == EventType.TRANSFER
        assert event["from"] == OWNER
        assert event["to"] == SPENDER
        assert event.value == 10
        assert event.tx_index == 3
        assert event.log_index == 0
        assert event.event_id.startswith("evt_")
        assert event.ts.tzinfo is not None

    def test_approval_constructor(self):
        event = LedgerEvent.approval(OWNER, SPENDER, 0, tx_index=1, log_index=2)

        assert event.type == EventType.APPROVAL
        assert event["owner"] == OWNER
        assert event["spender"] == SPENDER
        assert event.value == 0
        assert event.log_index == 2

    def test_event_ids_follow_log_position(self):
        a = LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0)
        b = LedgerEvent.approval(OWNER, SPENDER, 1, tx_index=4, log_index=1)

        assert a.event_id == "evt_0_0"
        assert b.event_id == "evt_4_1"
        assert event_id_for(4, 1) == b.event_id

    def test_replayed_calls_produce_identical_event_ids(self):
        def replay():
            meta = TokenMetadata(name="InnovaMinex", symbol="MINX", decimals=6)
            ledger = Ledger(meta, deployer=OWNER, initial_supply=100)
            ledger.approve(OWNER, SPENDER, 30)
            ledger.transfer_from(OWNER, SPENDER, 30, spender=SPENDER)
            ledger.burn(SPENDER, 5)
            return [(e.event_id, e.type, e.args) for e in ledger.get_events()]

        first, second = replay(), replay()

        assert first == second
        assert len({event_id for event_id, _, _ in first}) == len(first)

    def test_string_type_is_normalized(self):
        event = LedgerEvent(
            event_id="evt_1",
            type="Approval",
            tx_index=0,
            log_index=0,
            args={"owner": OWNER, "spender": SPENDER, "value": 1},
        )
        assert event.type == EventType.APPROVAL

    def test_mismatched_arguments_rejected(self):
        with pytest.raises(ValueError):
            LedgerEvent(
                event_id="evt_1",
                type=EventType.TRANSFER,
                tx_index=0,
                log_index=0,
                args={"owner": OWNER, "spender": SPENDER, "value": 1},
            )

    def test_event_is_immutable(self):
        event = LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0)
        with pytest.raises(Exception):  # FrozenInstanceError
            event.tx_index = 5


class TestEventSerialization:
    """Test event serialization to dict and JSONL."""

    def test_to_dict(self):
        ts = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)
        event = LedgerEvent(
            event_id="evt_005",
            type=EventType.TRANSFER,
            tx_index=4,
            log_index=1,
            args={"from": OWNER, "to": SPENDER, "value": 12_000_000},
            ts=ts,
        )

        result = event.to_dict()

        assert result == {
            "eventId": "evt_005",
            "type": "Transfer",
            "txIndex": 4,
            "logIndex": 1,
            "args": {"from": OWNER, "to": SPENDER, "value": "12000000"},
            "ts": "2024-01-15T10:30:00+00:00",
        }

    def test_to_dict_does_not_mutate_args(self):
        event = LedgerEvent.transfer(OWNER, SPENDER, 7, tx_index=0)
        event.to_dict()
        assert event.value == 7

    def test_to_jsonl_format(self):
        event = LedgerEvent.approval(OWNER, SPENDER, UINT256_MAX, tx_index=0)

        jsonl = event.to_jsonl()

        assert "\n" not in jsonl
        assert jsonl.count(" ") == 0
        parsed = json.loads(jsonl)
        assert parsed["type"] == "Approval"
        assert int(parsed["args"]["value"]) == UINT256_MAX

    def test_from_dict_handles_z_timezone(self):
        data = {
            "eventId": "evt_011",
            "type": "Transfer",
            "txIndex": 2,
            "logIndex": 0,
            "args": {"from": OWNER, "to": SPENDER, "value": "99"},
            "ts": "2024-01-15T10:30:00Z",
        }

        event = LedgerEvent.from_dict(data)

        assert event.ts.tzinfo is not None
        assert event.ts.year == 2024
        assert event.value == 99
        assert event.type == EventType.TRANSFER

    def test_roundtrip_serialization(self):
        original = LedgerEvent.approval(OWNER, SPENDER, 15_000_000, tx_index=8, log_index=0)

        restored = LedgerEvent.from_dict(original.to_dict())

        assert restored == original


class TestEventEmitter:
    """Test EventEmitter subscription and dispatch."""

    def test_subscribe_to_specific_event_type(self):
        emitter = EventEmitter()
        transfers, approvals = [], []
        emitter.on(EventType.TRANSFER, transfers.append)
        emitter.on(EventType.APPROVAL, approvals.append)

        event = LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0)
        emitter.emit(event)

        assert transfers == [event]
        assert approvals == []

    def test_wildcard_listener_receives_all_events(self):
        emitter = EventEmitter()
        seen = []
        emitter.on_any(seen.append)

        events = [
            LedgerEvent.approval(OWNER, SPENDER, 0, tx_index=0, log_index=0),
            LedgerEvent.transfer(OWNER, SPENDER, 5, tx_index=0, log_index=1),
        ]
        emitter.emit_all(events)

        assert seen == events

    def test_specific_listeners_run_before_wildcard(self):
        emitter = EventEmitter()
        order = []
        emitter.on_any(lambda e: order.append("any"))
        emitter.on(EventType.TRANSFER, lambda e: order.append("transfer"))

        emitter.emit(LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0))

        assert order == ["transfer", "any"]

    def test_off_removes_listener(self):
        emitter = EventEmitter()
        seen = []
        emitter.on(EventType.TRANSFER, seen.append)
        emitter.off(EventType.TRANSFER, seen.append)
        emitter.off(EventType.APPROVAL, seen.append)  # never registered

        emitter.emit(LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0))

        assert seen == []

    def test_off_any_removes_wildcard_listener(self):
        emitter = EventEmitter()
        seen = []
        emitter.on_any(seen.append)
        emitter.off_any(seen.append)
        emitter.off_any(seen.append)

        emitter.emit(LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0))

        assert seen == []

    def test_failing_listener_is_isolated_and_logged(self, caplog):
        emitter = EventEmitter()
        seen = []

        def broken(event):
            raise RuntimeError("listener failure")

        emitter.on(EventType.TRANSFER, broken)
        emitter.on_any(seen.append)

        with caplog.at_level(logging.ERROR, logger="minxledger.events"):
            emitter.emit(LedgerEvent.transfer(OWNER, SPENDER, 1, tx_index=0))

        assert len(seen) == 1
        assert "listener" in caplog.text.lower()
        assert "listener failure" in caplog.text

    def test_listener_count_and_clear(self):
        emitter = EventEmitter()
        emitter.on(EventType.TRANSFER, lambda e: None)
        emitter.on(EventType.APPROVAL, lambda e: None)
        emitter.on_any(lambda e: None)

        assert emitter.listener_count(EventType.TRANSFER) == 1
        assert emitter.listener_count() == 3

        emitter.clear()

        assert emitter.listener_count() == 0
