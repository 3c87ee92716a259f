"""Structured error types for the MINX token ledger.

Every rejected call raises a subclass of LedgerError. Each exception carries an
ErrorDetail that serializes into a single envelope structure, so the request
API of TokenRuntime can return failures as data rather than raising.

All ledger errors are precondition failures detected before any state is
mutated. A rejected call leaves balances, allowances, total supply and the
event log exactly as they were.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from minxledger.types import Account, ErrorType, FieldErrorCode


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details for a request envelope.

    Attributes:
        path: Dot-notation field path (e.g., "params.amount")
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     path="params.amount",
        ...     code=FieldErrorCode.INVALID_TYPE,
        ...     message="Field 'params.amount' has invalid type",
        ...     expected="integer",
        ...     received="str",
        ... )
        >>> err.path
        'params.amount'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            path=data["path"],
            code=code,
            message=data["message"],
            expected=data.get("expected"),
            received=data.get("received"),
        )


@dataclass(frozen=True)
class ErrorDetail:
    """Detailed error information carried by a LedgerError.

    Attributes:
        type: Category of error
        message: Human-readable summary
        context: Optional - the values that violated the precondition
            (e.g., {"balance": "5", "amount": "10"}); amounts are decimal strings
        fields: Optional - per-field validation errors for malformed requests
    """
    type: ErrorType
    message: str
    context: Optional[Dict[str, Any]] = None
    fields: Optional[List[FieldError]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "type": self.type.value if isinstance(self.type, ErrorType) else self.type,
            "message": self.message,
        }
        if self.context is not None:
            result["context"] = self.context
        if self.fields is not None:
            result["fields"] = [f.to_dict() for f in self.fields]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorDetail":
        """Create ErrorDetail from dict."""
        error_type = data["type"]
        if isinstance(error_type, str):
            error_type = ErrorType(error_type)

        fields = None
        if data.get("fields") is not None:
            fields = [FieldError.from_dict(f) for f in data["fields"]]

        return cls(
            type=error_type,
            message=data["message"],
            context=data.get("context"),
            fields=fields,
        )


class LedgerError(Exception):
    """Base class for every rejected ledger or runtime call.

    Attributes:
        detail: Structured, serializable description of the failure
    """

    error_type: ErrorType = ErrorType.INVALID_REQUEST

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        fields: Optional[List[FieldError]] = None,
    ):
        self.detail = ErrorDetail(
            type=self.error_type,
            message=message,
            context=context,
            fields=fields,
        )
        super().__init__(message)

    @property
    def ok(self) -> bool:
        """Always returns False - this is an error response."""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the error envelope returned by TokenRuntime.submit()."""
        return {
            "ok": False,
            "error": self.detail.to_dict(),
        }


class InsufficientBalanceError(LedgerError):
    """Raised when an account does not hold enough tokens for a transfer or burn."""

    error_type = ErrorType.INSUFFICIENT_BALANCE

    def __init__(self, account: Account, balance: int, amount: int):
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient balance: account {account} holds {balance}, needs {amount}",
            context={"account": account, "balance": str(balance), "amount": str(amount)},
        )


class InsufficientAllowanceError(LedgerError):
    """Raised when a spender's allowance does not cover the requested amount."""

    error_type = ErrorType.INSUFFICIENT_ALLOWANCE

    def __init__(self, owner: Account, spender: Account, allowance: int, amount: int):
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.amount = amount
        super().__init__(
            f"Insufficient allowance: {spender} may spend {allowance} "
            f"of {owner}'s tokens, needs {amount}",
            context={
                "owner": owner,
                "spender": spender,
                "allowance": str(allowance),
                "amount": str(amount),
            },
        )


class ArithmeticOverflowError(LedgerError):
    """Raised when a result would exceed the uint256 range."""

    error_type = ErrorType.ARITHMETIC_OVERFLOW

    def __init__(self, current: int, delta: int):
        self.current = current
        self.delta = delta
        super().__init__(
            f"Arithmetic overflow: {current} + {delta} exceeds uint256",
            context={"current": str(current), "delta": str(delta)},
        )


class InvalidAmountError(LedgerError):
    """Raised when an amount is not an integer in [0, 2**256 - 1]."""

    error_type = ErrorType.INVALID_AMOUNT

    def __init__(self, amount: Any):
        self.amount = amount
        super().__init__(
            f"Invalid amount: {amount!r} is not an unsigned 256-bit integer",
            context={"amount": repr(amount)},
        )


class InvalidAccountError(LedgerError):
    """Raised when the zero account is used as a transfer or approval participant."""

    error_type = ErrorType.INVALID_ACCOUNT

    def __init__(self, role: str, account: Any):
        self.role = role
        self.account = account
        super().__init__(
            f"Invalid account for {role}: {account!r}",
            context={"role": role, "account": repr(account)},
        )


class InvalidRequestError(LedgerError):
    """Raised when a request envelope fails schema validation."""

    error_type = ErrorType.INVALID_REQUEST

    def __init__(self, fields: List[FieldError]):
        paths = ", ".join(f.path or "<root>" for f in fields)
        super().__init__(f"Invalid request: {paths}", fields=fields)


class NotDeployedError(LedgerError):
    """Raised when a runtime is used before the token has been deployed."""

    error_type = ErrorType.NOT_DEPLOYED

    def __init__(self) -> None:
        super().__init__("Token has not been deployed")


class AlreadyDeployedError(LedgerError):
    """Raised when deploy() is called on a runtime that already holds a token."""

    error_type = ErrorType.ALREADY_DEPLOYED

    def __init__(self, deployer: Account):
        super().__init__(
            f"Token has already been deployed by {deployer}",
            context={"deployer": deployer},
        )


__all__ = [
    "FieldError",
    "ErrorDetail",
    "LedgerError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "ArithmeticOverflowError",
    "InvalidAmountError",
    "InvalidAccountError",
    "InvalidRequestError",
    "NotDeployedError",
    "AlreadyDeployedError",
]
