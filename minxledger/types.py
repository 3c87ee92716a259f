"""Core type definitions for the MINX token ledger.

This module defines the fundamental types used throughout the ledger:
- EventType: Event names recorded by the ledger (Transfer, Approval)
- ErrorType: Structured error categories for rejected calls
- Method: Mutating entry points accepted by the runtime
- FieldErrorCode: Validation error codes for request fields
- TokenMetadata: Immutable name, symbol and decimals of a token

These types form the contract between callers and the TokenRuntime.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Final

Account = str
"""Opaque account identifier (an address string)."""

ZERO_ACCOUNT: Final[Account] = "0x" + "0" * 40
"""Sentinel account used as the receiver of burned tokens."""

UINT256_MAX: Final[int] = 2**256 - 1
"""Largest amount representable by the contract's uint256 fields."""


class EventType(str, Enum):
    """Events emitted by ledger mutations."""
    TRANSFER = "Transfer"
    APPROVAL = "Approval"


class ErrorType(str, Enum):
    """Error types for rejected ledger calls.

    All of them are precondition failures: the call is rejected before any
    balance, allowance or supply is touched.
    """
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INSUFFICIENT_ALLOWANCE = "insufficient_allowance"
    ARITHMETIC_OVERFLOW = "arithmetic_overflow"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_ACCOUNT = "invalid_account"
    INVALID_REQUEST = "invalid_request"
    NOT_DEPLOYED = "not_deployed"
    ALREADY_DEPLOYED = "already_deployed"


class Method(str, Enum):
    """Mutating entry points, named as in the contract ABI."""
    TRANSFER = "transfer"
    APPROVE = "approve"
    INCREASE_ALLOWANCE = "increaseAllowance"
    DECREASE_ALLOWANCE = "decreaseAllowance"
    TRANSFER_FROM = "transferFrom"
    BURN = "burn"


class FieldErrorCode(str, Enum):
    """Validation error codes for individual request fields."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_VALUE = "invalid_value"
    UNEXPECTED = "unexpected"
    CUSTOM = "custom"


@dataclass(frozen=True)
class TokenMetadata:
    """Immutable token metadata, fixed at deployment.

    Attributes:
        name: Human-readable token name (e.g., "InnovaMinex")
        symbol: Ticker symbol (e.g., "MINX")
        decimals: Display scaling factor; amounts are integers of 10**-decimals tokens

    Examples:
        >>> meta = TokenMetadata(name="InnovaMinex", symbol="MINX", decimals=6)
        >>> meta.to_display(10_000_000)
        '10.000000'
    """
    name: str
    symbol: str
    decimals: int

    def to_display(self, amount: int) -> str:
        """Render a smallest-unit amount in token units."""
        if self.decimals == 0:
            return str(amount)
        whole, frac = divmod(amount, 10 ** self.decimals)
        return f"{whole}.{frac:0{self.decimals}d}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenMetadata":
        """Create TokenMetadata from dict."""
        return cls(
            name=data["name"],
            symbol=data["symbol"],
            decimals=int(data["decimals"]),
        )


__all__ = [
    "Account",
    "ZERO_ACCOUNT",
    "UINT256_MAX",
    "EventType",
    "ErrorType",
    "Method",
    "FieldErrorCode",
    "TokenMetadata",
]
