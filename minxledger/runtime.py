"""TokenRuntime executor for the MINX token.

This module provides the TokenRuntime class: the single serializing executor
that owns a Ledger, applies calls to it one at a time, records a receipt for
every applied call and dispatches the resulting events to subscribers.

Calls are expressed the way a contract caller sees them: the sender is the
caller, and the remaining arguments follow the token ABI.

Usage:
    >>> from minxledger.runtime import TokenRuntime
    >>> runtime = TokenRuntime()
    >>> runtime.deploy("0xdeployer")["totalSupply"]
    '300000000000000'
    >>> receipt = runtime.transfer("0xalice", 10_000_000, sender="0xdeployer")
    >>> runtime.balance_of("0xalice")
    10000000
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
import logging

from minxledger.config import TokenConfig
from minxledger.errors import (
    AlreadyDeployedError,
    InvalidRequestError,
    LedgerError,
    NotDeployedError,
)
from minxledger.events import EventEmitter, LedgerEvent
from minxledger.ledger import Ledger, require_account
from minxledger.types import Account, EventType, Method
from minxledger.validation import ValidationEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Receipt:
    """Outcome of one applied call.

    Attributes:
        tx_index: Position of the call in the runtime's transaction log
        method: Entry point that was called
        sender: Caller of the entry point
        params: ABI arguments of the call
        events: Events emitted by the call, in order
    """
    tx_index: int
    method: Method
    sender: Account
    params: Dict[str, Any]
    events: List[LedgerEvent]

    @property
    def ok(self) -> bool:
        return True

    def events_of(self, event_type: EventType) -> List[LedgerEvent]:
        """Return the events of a single type, in emission order."""
        return [e for e in self.events if e.type == event_type]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "ok": True,
            "txIndex": self.tx_index,
            "method": self.method.value,
            "sender": self.sender,
            "params": dict(self.params),
            "events": [e.to_dict() for e in self.events],
        }


class TokenRuntime:
    """Serializing executor for a single deployed token.

    A runtime starts empty; deploy() creates the Ledger and credits the full
    initial supply to the deployer. Every mutation afterwards goes through
    _execute(), which applies it to the ledger, appends a Receipt to the
    transaction log and dispatches the events to the emitter.

    Typed methods (transfer, approve, ...) raise LedgerError subclasses on
    rejection. submit() accepts request dicts and returns an envelope instead.

    Attributes:
        config: Deployment settings
        emitter: EventEmitter notified of every event after it is committed

    Examples:
        >>> runtime = TokenRuntime()
        >>> _ = runtime.deploy("0xaa")
        >>> result = runtime.submit({"method": "burn", "sender": "0xaa", "params": {"amount": 5}})
        >>> result["ok"], result["events"][0]["type"]
        (True, 'Transfer')
    """

    def __init__(self, config: Optional[TokenConfig] = None):
        self.config = config or TokenConfig()
        self.emitter = EventEmitter()
        self.deployer: Optional[Account] = None
        self._ledger: Optional[Ledger] = None
        self._receipts: List[Receipt] = []
        self._validation_engine = ValidationEngine()

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------

    def deploy(self, deployer: Account) -> Dict[str, Any]:
        """Deploy the token, crediting the whole initial supply to deployer.

        Returns:
            Success response with deployer, metadata and total supply

        Raises:
            AlreadyDeployedError: If this runtime already holds a token
            InvalidAccountError: If deployer is the zero account
        """
        if self._ledger is not None:
            raise AlreadyDeployedError(self.deployer)

        self._ledger = Ledger(self.config.metadata, deployer, self.config.initial_supply)
        self.deployer = deployer
        logger.info(
            "Deployed %s (%s) for %s with supply %d",
            self.config.name, self.config.symbol, deployer, self.config.initial_supply,
        )
        return {
            "ok": True,
            "deployer": deployer,
            "metadata": self.config.metadata.to_dict(),
            "totalSupply": str(self.config.initial_supply),
        }

    @property
    def deployed(self) -> bool:
        return self._ledger is not None

    @property
    def ledger(self) -> Ledger:
        """The deployed ledger.

        Raises:
            NotDeployedError: If deploy() has not been called
        """
        if self._ledger is None:
            raise NotDeployedError()
        return self._ledger

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def name(self) -> str:
        return self.ledger.name()

    def symbol(self) -> str:
        return self.ledger.symbol()

    def decimals(self) -> int:
        return self.ledger.decimals()

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def balance_of(self, account: Account) -> int:
        return self.ledger.balance_of(account)

    def allowance(self, owner: Account, spender: Account) -> int:
        return self.ledger.allowance(owner, spender)

    def get_receipts(self) -> List[Receipt]:
        """Get the transaction log, in application order."""
        return list(self._receipts)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def transfer(self, to: Account, amount: int, sender: Account) -> Receipt:
        return self._execute(
            Method.TRANSFER, sender, {"to": to, "amount": amount},
            lambda ledger: ledger.transfer(sender, to, amount),
        )

    def approve(self, spender: Account, amount: int, sender: Account) -> Receipt:
        return self._execute(
            Method.APPROVE, sender, {"spender": spender, "amount": amount},
            lambda ledger: ledger.approve(sender, spender, amount),
        )

    def increase_allowance(self, spender: Account, amount: int, sender: Account) -> Receipt:
        return self._execute(
            Method.INCREASE_ALLOWANCE, sender, {"spender": spender, "amount": amount},
            lambda ledger: ledger.increase_allowance(sender, spender, amount),
        )

    def decrease_allowance(self, spender: Account, amount: int, sender: Account) -> Receipt:
        return self._execute(
            Method.DECREASE_ALLOWANCE, sender, {"spender": spender, "amount": amount},
            lambda ledger: ledger.decrease_allowance(sender, spender, amount),
        )

    def transfer_from(self, owner: Account, to: Account, amount: int, sender: Account) -> Receipt:
        """Move owner's tokens to `to`, spending sender's allowance."""
        return self._execute(
            Method.TRANSFER_FROM, sender, {"owner": owner, "to": to, "amount": amount},
            lambda ledger: ledger.transfer_from(owner, to, amount, spender=sender),
        )

    def burn(self, amount: int, sender: Account) -> Receipt:
        return self._execute(
            Method.BURN, sender, {"amount": amount},
            lambda ledger: ledger.burn(sender, amount),
        )

    def submit(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and apply a request dict.

        Args:
            request: {"method": <Method value>, "sender": <account>, "params": {...}}

        Returns:
            Receipt.to_dict() on success, or the LedgerError envelope
            ({"ok": False, "error": {...}}) when the request is malformed or rejected
        """
        try:
            result = self._validation_engine.validate(request)
            if not result.is_valid:
                raise InvalidRequestError(result.errors)

            method = Method(request["method"])
            sender = request["sender"]
            params = request["params"]
            return self._dispatch(method, sender, params).to_dict()
        except LedgerError as e:
            if isinstance(e, InvalidRequestError):
                logger.warning("Rejected malformed request: %s", e)
            return e.to_dict()

    def _dispatch(self, method: Method, sender: Account, params: Dict[str, Any]) -> Receipt:
        if method == Method.TRANSFER:
            return self.transfer(params["to"], params["amount"], sender=sender)
        if method == Method.APPROVE:
            return self.approve(params["spender"], params["amount"], sender=sender)
        if method == Method.INCREASE_ALLOWANCE:
            return self.increase_allowance(params["spender"], params["amount"], sender=sender)
        if method == Method.DECREASE_ALLOWANCE:
            return self.decrease_allowance(params["spender"], params["amount"], sender=sender)
        if method == Method.TRANSFER_FROM:
            return self.transfer_from(params["owner"], params["to"], params["amount"], sender=sender)
        return self.burn(params["amount"], sender=sender)

    def _execute(
        self,
        method: Method,
        sender: Account,
        params: Dict[str, Any],
        apply: Callable[[Ledger], List[LedgerEvent]],
    ) -> Receipt:
        ledger = self.ledger
        try:
            require_account("sender", sender)
            tx_index = ledger.tx_count
            events = apply(ledger)
        except LedgerError as e:
            logger.warning("Rejected %s from %s: %s", method.value, sender, e)
            raise

        receipt = Receipt(
            tx_index=tx_index,
            method=method,
            sender=sender,
            params=params,
            events=events,
        )
        self._receipts.append(receipt)
        self.emitter.emit_all(events)
        return receipt


__all__ = [
    "TokenRuntime",
    "Receipt",
]
