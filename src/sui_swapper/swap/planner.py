"""
Swap planning: validated inputs, amount resolution and coin selection.

Everything here is pure. Planning happens after balances and the price are
known and before any transaction is built, so every insufficient-funds
condition surfaces before a signature is requested.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sui_swapper.core.builder import MAX_GAS_OBJECTS
from sui_swapper.core.models import Coin, Pool, SwapEstimate, Token, WalletBalance
from sui_swapper.defi.clmm_math import price_to_sqrt_price_x64
from sui_swapper.swap import calculator


class SwapInputError(Exception):
    """Raised for invalid user input (amount, token or loop settings)."""
    pass


class InsufficientFundsError(Exception):
    """Raised when the wallet cannot cover the requested swap or its gas."""
    pass


@dataclass(frozen=True)
class SwapInputs:
    """
    Operator choices for one run, validated on construction.

    Args:
        pool: pool to trade against
        source: symbol of the token being sold
        swap_all: sell the whole balance instead of `amount`
        amount: human-readable amount (None -> the token's default amount)
        loop: swap back and forth `loop_count` times
        loop_count: number of bidirectional cycles
        interval_seconds: wait between swaps in a loop
    """
    pool: Pool
    source: str
    swap_all: bool = False
    amount: Decimal | None = None
    loop: bool = False
    loop_count: int = 1
    interval_seconds: int = 60

    def __post_init__(self) -> None:
        symbol = self.source.strip().upper()
        object.__setattr__(self, "source", symbol)
        if not self.pool.has_token(symbol):
            x, y = self.pool.symbols
            raise SwapInputError(f"Invalid token selection. Please choose {x} or {y}.")
        if self.amount is not None and not self.swap_all and Decimal(self.amount) <= 0:
            raise SwapInputError("Amount must be greater than 0")
        if self.loop_count < 1:
            raise SwapInputError(f"Loop cycles must be at least 1, got {self.loop_count}.")
        if self.interval_seconds < 0:
            raise SwapInputError(f"Interval must not be negative, got {self.interval_seconds}.")

    @property
    def source_token(self) -> Token:
        return calculator.source_token(self.pool, self.source)

    @property
    def target_token(self) -> Token:
        return calculator.target_token(self.pool, self.source)

    @property
    def human_amount(self) -> Decimal:
        return self.source_token.default_amount if self.amount is None else Decimal(self.amount)


@dataclass
class SwapPlan:
    """Everything needed to build one swap transaction."""
    pool: Pool
    estimate: SwapEstimate
    limit_sqrt_price: int
    input_coins: list[Coin] = field(default_factory=list)
    gas_coins: list[Coin] = field(default_factory=list)
    split_from_gas: bool = False

    @property
    def amount(self) -> int:
        return self.estimate.amount_in


def resolve_amount(
    inputs: SwapInputs,
    balances: WalletBalance,
    gas_reserve: int = 0,
    symbol: str | None = None,
) -> int:
    """
    Base-unit amount to sell for `symbol` (defaults to the input's source).

    swap_all sells the whole balance, keeping `gas_reserve` back for SUI.

    Raises:
        SwapInputError: amount rounds to zero or below
        InsufficientFundsError: amount exceeds the known balance
    """
    symbol = symbol or inputs.source
    token_balance = balances.get(symbol)
    token = token_balance.token
    reserve = gas_reserve if token.is_sui else 0

    if inputs.swap_all:
        amount = token_balance.balance - reserve
        if amount <= 0:
            raise InsufficientFundsError(f"No {symbol} balance available to swap.")
        return amount

    amount = calculator.to_base_units(inputs.human_amount, token.decimals)
    if amount <= 0:
        raise SwapInputError("Amount must be greater than 0")
    if amount > token_balance.balance:
        raise InsufficientFundsError(
            f"Insufficient {symbol} balance: have "
            f"{calculator.format_amount(token_balance.balance, token.decimals)}, need "
            f"{calculator.format_amount(amount, token.decimals)}"
        )
    return amount


def select_coins(coins: list[Coin], amount: int, use_all: bool, symbol: str) -> list[Coin]:
    """
    Choose the coins funding the swap input.

    use_all takes every coin (largest first, to be merged). Otherwise a
    single coin holding at least `amount` is required.
    """
    if use_all:
        if not coins:
            raise InsufficientFundsError(f"No {symbol} coins found")
        return sorted(coins, key=lambda c: c.balance, reverse=True)

    for coin in coins:
        if coin.balance >= amount:
            return [coin]
    raise InsufficientFundsError(f"No single coin with enough {symbol} balance.")


def select_gas_coins(
    sui_coins: list[Coin],
    amount_needed: int,
    exclude: set[str] | None = None,
) -> list[Coin]:
    """Greedy selection: pick the largest SUI coins until `amount_needed` is covered."""
    exclude = exclude or set()
    candidates = [c for c in sui_coins if c.coin_object_id not in exclude]
    selected: list[Coin] = []
    total = 0
    for coin in sorted(candidates, key=lambda c: c.balance, reverse=True)[:MAX_GAS_OBJECTS]:
        selected.append(coin)
        total += coin.balance
        if total >= amount_needed:
            return selected
    raise InsufficientFundsError(
        f"Insufficient SUI for gas: only {calculator.format_amount(total, 9)} SUI available, "
        f"need {calculator.format_amount(amount_needed, 9)}."
    )


def plan_swap(
    pool: Pool,
    source: str,
    amount: int,
    current_price: Decimal,
    slippage_pct: Decimal,
    source_coins: list[Coin],
    sui_coins: list[Coin],
    gas_budget: int,
    use_all_coins: bool = False,
) -> SwapPlan:
    """
    Combine the estimate, limit price and coin selection into a SwapPlan.

    Selling SUI splits the input off the gas coin, so every SUI coin is
    available for gas and the single-coin rule does not apply.
    """
    if amount <= 0:
        raise SwapInputError("Amount must be greater than 0")
    estimate = calculator.estimate_swap(pool, source, amount, current_price, slippage_pct)
    bound = calculator.pool_limit_price(pool, source, current_price, slippage_pct)
    if bound <= 0:
        raise SwapInputError(f"Slippage {slippage_pct}% leaves no positive limit price.")
    limit_sqrt_price = price_to_sqrt_price_x64(bound, pool.decimals_x, pool.decimals_y)

    token = calculator.source_token(pool, source)
    if token.is_sui:
        gas_coins = select_gas_coins(sui_coins, amount + gas_budget)
        return SwapPlan(
            pool=pool,
            estimate=estimate,
            limit_sqrt_price=limit_sqrt_price,
            gas_coins=gas_coins,
            split_from_gas=True,
        )

    input_coins = select_coins(source_coins, amount, use_all_coins, token.symbol)
    if sum(c.balance for c in input_coins) < amount:
        raise InsufficientFundsError(f"Insufficient {token.symbol} balance")
    gas_coins = select_gas_coins(sui_coins, gas_budget)
    return SwapPlan(
        pool=pool,
        estimate=estimate,
        limit_sqrt_price=limit_sqrt_price,
        input_coins=input_coins,
        gas_coins=gas_coins,
    )
