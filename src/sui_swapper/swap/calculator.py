"""
Swap calculator: amount conversion, output estimate and limit price.

Pure functions, no I/O. Prices are Decimals quoted as units of the pool's
token Y per unit of token X; amounts crossing the human/base-unit boundary
always use the token's declared decimals.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, localcontext

from sui_swapper.core.models import Pool, SwapEstimate, Token

_PRECISION = 60
_HUNDRED = Decimal(100)


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return value if isinstance(value, Decimal) else Decimal(str(value))


# ------------------------------------------------------------------
# Amount conversion
# ------------------------------------------------------------------

def to_base_units(amount: Decimal | int | float | str, decimals: int) -> int:
    """Human-readable amount -> integer base units, truncated (floor)."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = _to_decimal(amount).scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def from_base_units(amount: int, decimals: int) -> Decimal:
    """Integer base units -> exact human-readable Decimal."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(amount).scaleb(-decimals)


def format_amount(amount: int, decimals: int) -> str:
    """Base units as a fixed-point string, e.g. 2_000_000 @ 6 -> '2.000000'."""
    return f"{from_base_units(amount, decimals):.{decimals}f}"


# ------------------------------------------------------------------
# Direction
# ------------------------------------------------------------------

def _token_in_pool(pool: Pool, source: Token | str) -> str:
    symbol = source.symbol if isinstance(source, Token) else source
    if not pool.has_token(symbol):
        raise ValueError(
            f"Token {symbol} is not part of pool {pool.name} "
            f"({pool.token_x.symbol}/{pool.token_y.symbol})."
        )
    return symbol


def is_x_to_y(pool: Pool, source: Token | str) -> bool:
    return _token_in_pool(pool, source) == pool.token_x.symbol


def source_token(pool: Pool, source: Token | str) -> Token:
    return pool.token_x if is_x_to_y(pool, source) else pool.token_y


def target_token(pool: Pool, source: Token | str) -> Token:
    return pool.token_y if is_x_to_y(pool, source) else pool.token_x


def effective_price(pool: Pool, source: Token | str, current_price: Decimal) -> Decimal:
    """Output per input: the pool price for X->Y, its inverse for Y->X."""
    price = _to_decimal(current_price)
    if is_x_to_y(pool, source):
        return price
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(1) / price


def _slippage_factor(x_to_y: bool, slippage_percent: Decimal | float | str) -> Decimal:
    fraction = _to_decimal(slippage_percent) / _HUNDRED
    return Decimal(1) - fraction if x_to_y else Decimal(1) + fraction


# ------------------------------------------------------------------
# Estimate & limit
# ------------------------------------------------------------------

def estimate_output(
    pool: Pool,
    source: Token | str,
    amount_base_units: int,
    current_price: Decimal,
) -> int:
    """
    Estimated output in base units of the target token.

    The input is converted to a human-readable amount, multiplied by the
    effective price, converted back with the target's decimals and floored,
    so the result is a lower bound on the exact product.
    """
    if amount_base_units < 0:
        raise ValueError(f"amount must be non-negative, got {amount_base_units}")
    src = source_token(pool, source)
    dst = target_token(pool, source)
    price = _to_decimal(current_price)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        amount_in = from_base_units(amount_base_units, src.decimals)
        # dividing keeps exact quotients exact (7 / 3.5, not 7 * 0.2857...)
        amount_out = amount_in * price if is_x_to_y(pool, source) else amount_in / price
        return max(0, to_base_units(amount_out, dst.decimals))


def compute_limit_price(
    pool: Pool,
    source: Token | str,
    current_price: Decimal,
    slippage_percent: Decimal | float | str,
) -> Decimal:
    """
    Worst acceptable price, in the effective (output per input) orientation.

    X->Y: effective * (1 - slippage/100)
    Y->X: effective * (1 + slippage/100)

    No clamping: slippage >= 100 on the X->Y path gives a non-positive
    result, and callers are expected to reject such slippage beforehand.
    """
    x_to_y = is_x_to_y(pool, source)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        price = effective_price(pool, source, current_price)
        return price * _slippage_factor(x_to_y, slippage_percent)


def pool_limit_price(
    pool: Pool,
    source: Token | str,
    current_price: Decimal,
    slippage_percent: Decimal | float | str,
) -> Decimal:
    """
    The same slippage bound in pool orientation (Y per X).

    Selling X pushes the pool price down and selling Y pushes it up, so the
    bound sits below the current price for X->Y and above it for Y->X. This
    is the value the sqrt-price encoder consumes.
    """
    x_to_y = is_x_to_y(pool, source)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return _to_decimal(current_price) * _slippage_factor(x_to_y, slippage_percent)


def estimate_swap(
    pool: Pool,
    source: Token | str,
    amount_base_units: int,
    current_price: Decimal,
    slippage_percent: Decimal | float | str,
) -> SwapEstimate:
    """Bundle the estimate and limit price for one request."""
    return SwapEstimate(
        source=source_token(pool, source).symbol,
        target=target_token(pool, source).symbol,
        is_x_to_y=is_x_to_y(pool, source),
        amount_in=amount_base_units,
        estimated_out=estimate_output(pool, source, amount_base_units, current_price),
        price=effective_price(pool, source, current_price),
        limit_price=compute_limit_price(pool, source, current_price, slippage_percent),
    )
