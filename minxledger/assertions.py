"""Assertion helpers for inspecting ledger calls in tests.

These helpers check the events a call emitted and the errors a call raised,
with failure messages that list what actually happened:

    >>> from minxledger.runtime import TokenRuntime
    >>> runtime = TokenRuntime()
    >>> _ = runtime.deploy("0xaa")
    >>> receipt = runtime.transfer("0xbb", 10, sender="0xaa")
    >>> event = event_emitted(receipt, "Transfer", lambda ev: ev["to"] == "0xbb")
    >>> event.value
    10
"""

from typing import Any, Callable, List, Optional, Type, Union
import re

from minxledger.errors import LedgerError
from minxledger.events import LedgerEvent
from minxledger.runtime import Receipt
from minxledger.types import EventType

EventSource = Union[Receipt, List[LedgerEvent]]
EventFilter = Callable[[LedgerEvent], bool]


def _events(source: EventSource) -> List[LedgerEvent]:
    if isinstance(source, Receipt):
        return list(source.events)
    return list(source)


def _describe(events: List[LedgerEvent]) -> str:
    if not events:
        return "no events"
    return "; ".join(f"{e.type.value}{e.args}" for e in events)


def _matching(
    source: EventSource,
    event_type: Union[EventType, str],
    predicate: Optional[EventFilter],
) -> List[LedgerEvent]:
    event_type = EventType(event_type)
    return [
        e for e in _events(source)
        if e.type == event_type and (predicate is None or predicate(e))
    ]


def event_emitted(
    source: EventSource,
    event_type: Union[EventType, str],
    predicate: Optional[EventFilter] = None,
    message: Optional[str] = None,
) -> LedgerEvent:
    """Assert that an event of event_type matching predicate was emitted.

    Returns:
        The first matching event

    Raises:
        AssertionError: If no emitted event matches
    """
    matches = _matching(source, event_type, predicate)
    if not matches:
        detail = (
            f"Event {EventType(event_type).value} matching the filter was not emitted "
            f"(emitted: {_describe(_events(source))})"
        )
        raise AssertionError(f"{message}: {detail}" if message else detail)
    return matches[0]


def event_not_emitted(
    source: EventSource,
    event_type: Union[EventType, str],
    predicate: Optional[EventFilter] = None,
    message: Optional[str] = None,
) -> None:
    """Assert that no event of event_type matching predicate was emitted.

    Raises:
        AssertionError: If an emitted event matches
    """
    matches = _matching(source, event_type, predicate)
    if matches:
        detail = f"Event {EventType(event_type).value} was emitted: {_describe(matches)}"
        raise AssertionError(f"{message}: {detail}" if message else detail)


def reverts(
    call: Callable[..., Any],
    *args: Any,
    error: Type[LedgerError] = LedgerError,
    match: Optional[str] = None,
    **kwargs: Any,
) -> LedgerError:
    """Assert that call(*args, **kwargs) is rejected with error.

    Args:
        call: Ledger or runtime method to invoke
        error: Expected LedgerError subclass
        match: Optional regular expression searched in the error message

    Returns:
        The raised error, for further inspection

    Raises:
        AssertionError: If the call succeeds, raises a different LedgerError,
            or the message does not match
    """
    try:
        call(*args, **kwargs)
    except LedgerError as e:
        if not isinstance(e, error):
            raise AssertionError(
                f"Expected {error.__name__}, got {type(e).__name__}: {e}"
            ) from e
        if match is not None and not re.search(match, str(e)):
            raise AssertionError(f"Error message {str(e)!r} does not match {match!r}") from e
        return e
    raise AssertionError(f"Expected {error.__name__}, but the call succeeded")


__all__ = [
    "event_emitted",
    "event_not_emitted",
    "reverts",
]
