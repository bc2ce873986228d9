"""
Core data models for tokens, pools, coins and swaps on Sui.
All amounts are in base units (the token's smallest on-chain unit) internally.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

MIST_PER_SUI = 1_000_000_000

SUI_FRAMEWORK_ADDRESS = "0x" + "0" * 63 + "2"


def normalize_sui_address(address: str) -> str:
    """Return the full 0x-prefixed, 64-hex-digit form of a Sui address."""
    hex_part = address.lower().removeprefix("0x")
    return "0x" + hex_part.rjust(64, "0")


def normalize_coin_type(coin_type: str) -> str:
    """Normalize the address part of a `0x..::module::Name` coin type."""
    address, sep, rest = coin_type.partition("::")
    if not sep:
        return coin_type
    return f"{normalize_sui_address(address)}::{rest}"


def is_sui_coin_type(coin_type: str) -> bool:
    return normalize_coin_type(coin_type) == f"{SUI_FRAMEWORK_ADDRESS}::sui::SUI"


class Token(BaseModel):
    """A swappable token known to the configuration."""
    model_config = ConfigDict(frozen=True)

    symbol: str
    coin_type: str
    decimals: int = Field(ge=0)
    default_amount: Decimal = Decimal("1")

    @property
    def is_sui(self) -> bool:
        """SUI coins double as gas and need special handling when spent."""
        return is_sui_coin_type(self.coin_type)


class Pool(BaseModel):
    """
    An MMT concentrated-liquidity pool.

    Token order matters: prices are quoted as units of `token_y` per unit
    of `token_x`.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    pool_id: str
    token_x: Token
    token_y: Token
    tick_spacing: int = Field(gt=0)

    @property
    def decimals_x(self) -> int:
        return self.token_x.decimals

    @property
    def decimals_y(self) -> int:
        return self.token_y.decimals

    @property
    def symbols(self) -> tuple[str, str]:
        return self.token_x.symbol, self.token_y.symbol

    def has_token(self, symbol: str) -> bool:
        return symbol in self.symbols


class Coin(BaseModel):
    """An owned Coin<T> object."""
    coin_type: str
    coin_object_id: str
    version: int
    digest: str
    balance: int

    @property
    def object_ref(self) -> tuple[str, int, str]:
        return self.coin_object_id, self.version, self.digest


class TokenBalance(BaseModel):
    """Total balance of one token plus the coins that make it up."""
    token: Token
    balance: int = 0
    coins: list[Coin] = Field(default_factory=list)

    @property
    def balance_display(self) -> Decimal:
        """Human-readable amount adjusted for decimals."""
        return Decimal(self.balance).scaleb(-self.token.decimals)

    def to_summary(self) -> str:
        return f"{self.token.symbol}: {self.balance_display:.{self.token.decimals}f} ({self.balance})"


class WalletBalance(BaseModel):
    """Balances of every configured token for one address."""
    address: str
    tokens: dict[str, TokenBalance] = Field(default_factory=dict)

    def get(self, symbol: str) -> TokenBalance:
        return self.tokens[symbol]

    def to_summary(self) -> str:
        return "\n".join(tb.to_summary() for tb in self.tokens.values())


class SwapEstimate(BaseModel):
    """
    Derived swap figures: recomputed for every request, never stored.

    `price` is the effective output-per-input price; `limit_price` is the
    slippage-bounded price in the same orientation.
    """
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    is_x_to_y: bool
    amount_in: int
    estimated_out: int
    price: Decimal
    limit_price: Decimal


class SwapResult(BaseModel):
    """Outcome of one submitted (or dry-run) swap."""
    estimate: SwapEstimate
    digest: str | None = None
    status: str = "unknown"
    explorer_url: str | None = None
    dry_run: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == "success"
