"""MINX token ledger.

A deterministic model of the InnovaMinex (MINX) fungible token:
- Balances, allowances and a burn-only total supply
- Transfer and Approval events returned by every mutation
- Structured errors for every rejected call, raised before any state changes
- A single serializing runtime with deployment, receipts and a request API
- Assertion helpers for inspecting emitted events in tests

Basic usage:
    >>> from minxledger.runtime import TokenRuntime
    >>> runtime = TokenRuntime()
    >>> _ = runtime.deploy("0xdeployer")
    >>> runtime.symbol()
    'MINX'
"""

__version__ = "0.1.0"
__author__ = "InnovaMinex Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from minxledger.config import TokenConfig
from minxledger.ledger import Ledger
from minxledger.runtime import Receipt, TokenRuntime

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "Ledger",
    "Receipt",
    "TokenConfig",
    "TokenRuntime",
]
