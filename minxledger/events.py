"""Event system for the MINX token ledger.

This module provides the event records produced by ledger mutations and an
event emitter for subscribers that want to observe them as they happen.

Events are returned to the caller of every mutation and appended to the
ledger's event log; they are never broadcast implicitly. The log is
append-only and immutable: a rejected call records nothing.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import json
import logging

from dateutil.parser import isoparse

from .types import Account, EventType

logger = logging.getLogger(__name__)

# Argument names per event, in ABI order
EVENT_ARGS: Dict[EventType, List[str]] = {
    EventType.TRANSFER: ["from", "to", "value"],
    EventType.APPROVAL: ["owner", "spender", "value"],
}


@dataclass(frozen=True)
class LedgerEvent:
    """A single event emitted by a ledger mutation.

    Attributes:
        event_id: Position-derived identifier, unique within a ledger (e.g., "evt_4_1")
        type: Event type (Transfer or Approval)
        tx_index: Sequence number of the mutation that emitted this event
        log_index: Position of the event within its mutation
        args: Event arguments keyed by ABI name ("from"/"to"/"value" or
            "owner"/"spender"/"value")
        ts: UTC timestamp when the event was recorded

    Arguments can be read by name directly on the event:

    Examples:
        >>> event = LedgerEvent.transfer("0xaa", "0xbb", 10, tx_index=0)
        >>> event["from"], event["to"], event["value"]
        ('0xaa', '0xbb', 10)
        >>> event.type
        <EventType.TRANSFER: 'Transfer'>
    """
    event_id: str
    type: EventType
    tx_index: int
    log_index: int
    args: Dict[str, Any]
    ts: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        """Validate and normalize fields."""
        if isinstance(self.type, str):
            object.__setattr__(self, "type", EventType(self.type))

        expected = EVENT_ARGS[self.type]
        if sorted(self.args) != sorted(expected):
            raise ValueError(
                f"{self.type.value} event requires arguments {expected}, got {sorted(self.args)}"
            )

    def __getitem__(self, name: str) -> Any:
        return self.args[name]

    @property
    def value(self) -> int:
        """Amount carried by the event."""
        return self.args["value"]

    @classmethod
    def transfer(
        cls,
        sender: Account,
        receiver: Account,
        value: int,
        tx_index: int,
        log_index: int = 0,
    ) -> "LedgerEvent":
        """Build a Transfer event."""
        return cls(
            event_id=event_id_for(tx_index, log_index),
            type=EventType.TRANSFER,
            tx_index=tx_index,
            log_index=log_index,
            args={"from": sender, "to": receiver, "value": value},
        )

    @classmethod
    def approval(
        cls,
        owner: Account,
        spender: Account,
        value: int,
        tx_index: int,
        log_index: int = 0,
    ) -> "LedgerEvent":
        """Build an Approval event."""
        return cls(
            event_id=event_id_for(tx_index, log_index),
            type=EventType.APPROVAL,
            tx_index=tx_index,
            log_index=log_index,
            args={"owner": owner, "spender": spender, "value": value},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Returns:
            Dictionary with camelCase keys. The value argument is rendered as a
            decimal string since uint256 amounts exceed JSON's safe integer range.
        """
        args = dict(self.args)
        args["value"] = str(args["value"])
        return {
            "eventId": self.event_id,
            "type": self.type.value,
            "txIndex": self.tx_index,
            "logIndex": self.log_index,
            "args": args,
            "ts": self.ts.isoformat(),
        }

    def to_jsonl(self) -> str:
        """Convert event to JSONL format (single-line JSON)."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerEvent":
        """Create LedgerEvent from dictionary.

        Args:
            data: Dictionary with event fields (camelCase keys)

        Returns:
            LedgerEvent instance
        """
        args = dict(data["args"])
        args["value"] = int(args["value"])
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            tx_index=data["txIndex"],
            log_index=data["logIndex"],
            args=args,
            ts=isoparse(data["ts"]),
        )


def event_id_for(tx_index: int, log_index: int) -> str:
    """Event id derived from the event's position in the log."""
    return f"evt_{tx_index}_{log_index}"


EventListener = Callable[[LedgerEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously after a mutation has been applied.
"""


class EventEmitter:
    """Event emitter for managing event listeners and dispatching events.

    Features:
    - Type-specific subscriptions (listen to Transfer or Approval only)
    - Wildcard subscriptions (listen to all events)
    - Synchronous dispatch (listeners called in registration order)
    - Error isolation (listener exceptions are logged, never propagated)

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.TRANSFER, seen.append)
        >>> emitter.emit(LedgerEvent.transfer("0xaa", "0xbb", 1, tx_index=0))
        >>> len(seen)
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        self._listeners.setdefault(event_type, []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types (wildcard subscription)."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type.

        Removing a listener that was never registered is a no-op.
        """
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from wildcard subscription."""
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: LedgerEvent) -> None:
        """Dispatch an event to all registered listeners.

        Type-specific listeners run first, then wildcard listeners. A failing
        listener is logged and skipped; the ledger state it observed has
        already been committed.
        """
        for listener in list(self._listeners.get(event.type, [])) + list(self._any_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Event listener %r failed on %s event %s",
                    listener, event.type.value, event.event_id,
                )

    def emit_all(self, events: List[LedgerEvent]) -> None:
        """Dispatch events in order."""
        for event in events:
            self.emit(event)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Get count of registered listeners.

        Args:
            event_type: If provided, count listeners for this type only.
                        If None, count all listeners (including wildcard).
        """
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(ls) for ls in self._listeners.values())


__all__ = [
    "LedgerEvent",
    "EventType",
    "EventListener",
    "EventEmitter",
    "EVENT_ARGS",
    "event_id_for",
]
