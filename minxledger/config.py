"""Deployment configuration for the MINX token.

TokenConfig holds the values fixed when a token is deployed. Its defaults are
the InnovaMinex constants; TokenConfig.from_dict() validates untrusted input
against CONFIG_SCHEMA before building the config.
"""

from dataclasses import dataclass
from typing import Any, Dict

from minxledger.errors import InvalidRequestError
from minxledger.types import TokenMetadata, UINT256_MAX
from minxledger.validation import ValidationEngine

DEFAULT_NAME = "InnovaMinex"
DEFAULT_SYMBOL = "MINX"
DEFAULT_DECIMALS = 6
DEFAULT_INITIAL_SUPPLY = 300_000_000 * 10**DEFAULT_DECIMALS

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "symbol": {"type": "string", "minLength": 1},
        "decimals": {"type": "integer", "minimum": 0, "maximum": 255},
        "initialSupply": {"type": "integer", "minimum": 0, "maximum": UINT256_MAX},
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class TokenConfig:
    """Token deployment settings.

    Attributes:
        name: Token name
        symbol: Token symbol
        decimals: Display decimals (uint8)
        initial_supply: Supply credited to the deployer, in smallest units

    Examples:
        >>> config = TokenConfig()
        >>> config.initial_supply
        300000000000000
        >>> TokenConfig.from_dict({"symbol": "TST"}).name
        'InnovaMinex'
    """
    name: str = DEFAULT_NAME
    symbol: str = DEFAULT_SYMBOL
    decimals: int = DEFAULT_DECIMALS
    initial_supply: int = DEFAULT_INITIAL_SUPPLY

    @property
    def metadata(self) -> TokenMetadata:
        return TokenMetadata(name=self.name, symbol=self.symbol, decimals=self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "initialSupply": self.initial_supply,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenConfig":
        """Create TokenConfig from dict, falling back to defaults for absent keys.

        Raises:
            InvalidRequestError: If data does not match CONFIG_SCHEMA
        """
        result = ValidationEngine(CONFIG_SCHEMA).validate(data)
        if not result.is_valid:
            raise InvalidRequestError(result.errors)
        return cls(
            name=data.get("name", DEFAULT_NAME),
            symbol=data.get("symbol", DEFAULT_SYMBOL),
            decimals=data.get("decimals", DEFAULT_DECIMALS),
            initial_supply=data.get("initialSupply", DEFAULT_INITIAL_SUPPLY),
        )


__all__ = [
    "TokenConfig",
    "CONFIG_SCHEMA",
    "DEFAULT_NAME",
    "DEFAULT_SYMBOL",
    "DEFAULT_DECIMALS",
    "DEFAULT_INITIAL_SUPPLY",
]
