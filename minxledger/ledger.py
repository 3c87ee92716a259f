"""Balance and allowance ledger for the MINX token.

This module implements the state-transition rules of the token:
- Balances: account -> non-negative amount in smallest units
- Allowances: (owner, spender) -> amount the spender may still move
- Total supply: only ever decreased, by burn

Every mutating method checks all of its preconditions before touching any
state, so a call either applies completely (all updates and all events) or
raises and changes nothing. The sum of all balances equals the total supply
in every reachable state.

Usage:
    >>> from minxledger.ledger import Ledger
    >>> from minxledger.types import TokenMetadata
    >>> meta = TokenMetadata(name="InnovaMinex", symbol="MINX", decimals=6)
    >>> ledger = Ledger(meta, deployer="0xaa", initial_supply=1000)
    >>> events = ledger.transfer("0xaa", "0xbb", 10)
    >>> ledger.balance_of("0xbb")
    10
    >>> events[0].type
    <EventType.TRANSFER: 'Transfer'>
"""

from typing import Any, Dict, List, Tuple
import logging

from minxledger.errors import (
    ArithmeticOverflowError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAccountError,
    InvalidAmountError,
)
from minxledger.events import LedgerEvent
from minxledger.types import Account, TokenMetadata, UINT256_MAX, ZERO_ACCOUNT

logger = logging.getLogger(__name__)


def require_amount(amount: Any) -> int:
    """Check that amount is an unsigned 256-bit integer.

    Raises:
        InvalidAmountError: If amount is not an int (bools excluded), negative,
            or larger than UINT256_MAX
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(amount)
    if amount < 0 or amount > UINT256_MAX:
        raise InvalidAmountError(amount)
    return amount


def require_account(role: str, account: Any) -> Account:
    """Check that account is a usable, non-zero address.

    Raises:
        InvalidAccountError: If account is not a non-empty string or is ZERO_ACCOUNT
    """
    if not isinstance(account, str) or not account or account == ZERO_ACCOUNT:
        raise InvalidAccountError(role, account)
    return account


class Ledger:
    """Authoritative token state and the rules that mutate it.

    A Ledger is owned by exactly one executor (see TokenRuntime), which applies
    calls one at a time. Read methods are pure; absent accounts read as zero.

    Attributes:
        metadata: Immutable name, symbol and decimals

    Examples:
        >>> meta = TokenMetadata(name="InnovaMinex", symbol="MINX", decimals=6)
        >>> ledger = Ledger(meta, deployer="0xaa", initial_supply=100)
        >>> ledger.approve("0xaa", "0xbb", 40)[0]["value"]
        40
        >>> ledger.transfer_from("0xaa", "0xcc", 40, spender="0xbb")[0]["value"]
        0
        >>> ledger.allowance("0xaa", "0xbb")
        0
    """

    def __init__(self, metadata: TokenMetadata, deployer: Account, initial_supply: int):
        """Create a ledger crediting the entire initial supply to the deployer.

        Args:
            metadata: Token name, symbol and decimals
            deployer: Account that receives the initial supply
            initial_supply: Total supply in smallest units

        Raises:
            InvalidAccountError: If deployer is the zero account
            InvalidAmountError: If initial_supply is not a uint256
        """
        require_account("deployer", deployer)
        require_amount(initial_supply)

        self.metadata = metadata
        self._balances: Dict[Account, int] = {}
        self._allowances: Dict[Tuple[Account, Account], int] = {}
        self._total_supply = initial_supply
        self._events: List[LedgerEvent] = []
        self._tx_count = 0

        if initial_supply:
            self._balances[deployer] = initial_supply

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def name(self) -> str:
        return self.metadata.name

    def symbol(self) -> str:
        return self.metadata.symbol

    def decimals(self) -> int:
        return self.metadata.decimals

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: Account) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: Account, spender: Account) -> int:
        return self._allowances.get((owner, spender), 0)

    def holders(self) -> Dict[Account, int]:
        """Return a copy of all non-zero balances."""
        return dict(self._balances)

    def get_events(self) -> List[LedgerEvent]:
        """Get every event recorded so far, in emission order."""
        return list(self._events)

    @property
    def tx_count(self) -> int:
        """Number of mutations applied so far."""
        return self._tx_count

    def verify_invariants(self) -> bool:
        """Check that balances sum to total supply and nothing is negative."""
        if any(v < 0 for v in self._balances.values()):
            return False
        if any(v < 0 for v in self._allowances.values()):
            return False
        return sum(self._balances.values()) == self._total_supply

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def transfer(self, sender: Account, receiver: Account, amount: int) -> List[LedgerEvent]:
        """Move amount from sender to receiver.

        Returns:
            [Transfer(sender, receiver, amount)]

        Raises:
            InvalidAccountError: If sender or receiver is the zero account
            InvalidAmountError: If amount is not a uint256
            InsufficientBalanceError: If sender holds less than amount
        """
        require_account("sender", sender)
        require_account("receiver", receiver)
        require_amount(amount)
        self._require_balance(sender, amount)

        self._move(sender, receiver, amount)
        return self._commit(
            "transfer",
            lambda tx: [LedgerEvent.transfer(sender, receiver, amount, tx_index=tx)],
        )

    def approve(self, owner: Account, spender: Account, amount: int) -> List[LedgerEvent]:
        """Set the spender's allowance over owner's tokens to exactly amount.

        Returns:
            [Approval(owner, spender, amount)]
        """
        require_account("owner", owner)
        require_account("spender", spender)
        require_amount(amount)

        self._set_allowance(owner, spender, amount)
        return self._commit(
            "approve",
            lambda tx: [LedgerEvent.approval(owner, spender, amount, tx_index=tx)],
        )

    def increase_allowance(self, owner: Account, spender: Account, delta: int) -> List[LedgerEvent]:
        """Add delta to the spender's allowance.

        Returns:
            [Approval(owner, spender, new_allowance)]

        Raises:
            ArithmeticOverflowError: If the new allowance would exceed UINT256_MAX
        """
        require_account("owner", owner)
        require_account("spender", spender)
        require_amount(delta)
        current = self.allowance(owner, spender)
        if current + delta > UINT256_MAX:
            raise ArithmeticOverflowError(current, delta)

        new_allowance = current + delta
        self._set_allowance(owner, spender, new_allowance)
        return self._commit(
            "increaseAllowance",
            lambda tx: [LedgerEvent.approval(owner, spender, new_allowance, tx_index=tx)],
        )

    def decrease_allowance(self, owner: Account, spender: Account, delta: int) -> List[LedgerEvent]:
        """Subtract delta from the spender's allowance.

        Returns:
            [Approval(owner, spender, new_allowance)]

        Raises:
            InsufficientAllowanceError: If the current allowance is below delta
        """
        require_account("owner", owner)
        require_account("spender", spender)
        require_amount(delta)
        self._require_allowance(owner, spender, delta)

        new_allowance = self.allowance(owner, spender) - delta
        self._set_allowance(owner, spender, new_allowance)
        return self._commit(
            "decreaseAllowance",
            lambda tx: [LedgerEvent.approval(owner, spender, new_allowance, tx_index=tx)],
        )

    def transfer_from(
        self,
        owner: Account,
        receiver: Account,
        amount: int,
        spender: Account,
    ) -> List[LedgerEvent]:
        """Move amount from owner to receiver on behalf of spender.

        The allowance is consumed first; the Approval event carries the
        remaining allowance, even when it reaches zero.

        Returns:
            [Approval(owner, spender, remaining), Transfer(owner, receiver, amount)]

        Raises:
            InsufficientAllowanceError: If spender's allowance is below amount
            InsufficientBalanceError: If owner holds less than amount
        """
        require_account("owner", owner)
        require_account("receiver", receiver)
        require_account("spender", spender)
        require_amount(amount)
        self._require_allowance(owner, spender, amount)
        self._require_balance(owner, amount)

        remaining = self.allowance(owner, spender) - amount
        self._set_allowance(owner, spender, remaining)
        self._move(owner, receiver, amount)
        return self._commit(
            "transferFrom",
            lambda tx: [
                LedgerEvent.approval(owner, spender, remaining, tx_index=tx, log_index=0),
                LedgerEvent.transfer(owner, receiver, amount, tx_index=tx, log_index=1),
            ],
        )

    def burn(self, holder: Account, amount: int) -> List[LedgerEvent]:
        """Destroy amount of holder's tokens, reducing total supply.

        Returns:
            [Transfer(holder, ZERO_ACCOUNT, amount)]

        Raises:
            InsufficientBalanceError: If holder holds less than amount
        """
        require_account("holder", holder)
        require_amount(amount)
        self._require_balance(holder, amount)

        self._debit(holder, amount)
        self._total_supply -= amount
        return self._commit(
            "burn",
            lambda tx: [LedgerEvent.transfer(holder, ZERO_ACCOUNT, amount, tx_index=tx)],
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_balance(self, account: Account, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalanceError(account, balance, amount)

    def _require_allowance(self, owner: Account, spender: Account, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowanceError(owner, spender, current, amount)

    def _debit(self, account: Account, amount: int) -> None:
        remaining = self._balances.get(account, 0) - amount
        if remaining:
            self._balances[account] = remaining
        else:
            self._balances.pop(account, None)

    def _move(self, sender: Account, receiver: Account, amount: int) -> None:
        # Self-transfers and zero amounts leave balances untouched
        if sender == receiver or amount == 0:
            return
        self._debit(sender, amount)
        self._balances[receiver] = self._balances.get(receiver, 0) + amount

    def _set_allowance(self, owner: Account, spender: Account, amount: int) -> None:
        if amount:
            self._allowances[(owner, spender)] = amount
        else:
            self._allowances.pop((owner, spender), None)

    def _commit(self, method: str, build_events) -> List[LedgerEvent]:
        tx_index = self._tx_count
        events = build_events(tx_index)
        self._tx_count += 1
        self._events.extend(events)
        logger.debug(
            "Applied %s (tx %d): %s",
            method, tx_index, ", ".join(f"{e.type.value}{e.args}" for e in events),
        )
        return events

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the ledger state to a dictionary.

        Amounts are rendered as decimal strings. The event log is not included;
        see get_events().

        Examples:
            >>> meta = TokenMetadata(name="T", symbol="T", decimals=0)
            >>> Ledger(meta, deployer="0xaa", initial_supply=5).to_dict()["balances"]
            {'0xaa': '5'}
        """
        return {
            "metadata": self.metadata.to_dict(),
            "totalSupply": str(self._total_supply),
            "balances": {acct: str(v) for acct, v in self._balances.items()},
            "allowances": [
                {"owner": owner, "spender": spender, "value": str(v)}
                for (owner, spender), v in self._allowances.items()
            ],
            "txCount": self._tx_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ledger":
        """Restore a ledger from to_dict() output.

        Raises:
            InvalidAmountError: If an amount is outside the uint256 range
            InvalidAccountError: If a balance or allowance names the zero account
            ValueError: If the balances do not sum to the total supply
        """
        ledger = cls.__new__(cls)
        ledger.metadata = TokenMetadata.from_dict(data["metadata"])
        ledger._total_supply = require_amount(int(data["totalSupply"]))

        ledger._balances = {}
        for acct, value in data["balances"].items():
            amount = require_amount(int(value))
            if amount:
                ledger._balances[require_account("holder", acct)] = amount

        ledger._allowances = {}
        for entry in data.get("allowances", []):
            amount = require_amount(int(entry["value"]))
            if amount:
                owner = require_account("owner", entry["owner"])
                spender = require_account("spender", entry["spender"])
                ledger._allowances[(owner, spender)] = amount

        ledger._events = []
        ledger._tx_count = int(data.get("txCount", 0))
        if not ledger.verify_invariants():
            raise ValueError("Ledger snapshot is inconsistent: balances do not sum to total supply")
        return ledger


__all__ = [
    "Ledger",
    "require_amount",
    "require_account",
]
