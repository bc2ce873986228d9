"""
Square-root price math for Sui concentrated-liquidity pools.

Pools store sqrt(price) as a Q64.64 fixed-point integer, where price is the
raw ratio of token Y base units per token X base unit. Human-readable prices
are adjusted by the decimals difference.
"""

from __future__ import annotations

from decimal import Decimal, localcontext

Q64 = 2 ** 64

# Bounds for tick indices -443636 .. 443636
MIN_SQRT_PRICE_X64 = 4295048016
MAX_SQRT_PRICE_X64 = 79226673515401279992447579055

_PRECISION = 80


def sqrt_price_x64_to_price(sqrt_price_x64: int, decimals_x: int, decimals_y: int) -> Decimal:
    """
    Convert a Q64.64 sqrt price to a human-readable price (Y per X).

    price = (sqrt_price / 2^64)^2 * 10^(decimals_x - decimals_y)
    """
    if sqrt_price_x64 <= 0:
        raise ValueError(f"sqrt price must be positive, got {sqrt_price_x64}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        ratio = Decimal(sqrt_price_x64) / Decimal(Q64)
        return ratio * ratio * Decimal(10) ** (decimals_x - decimals_y)


def price_to_sqrt_price_x64(price: Decimal, decimals_x: int, decimals_y: int) -> int:
    """
    Convert a human-readable price (Y per X) to a Q64.64 sqrt price.

    The result is floored and clamped to the valid tick range.
    """
    price = Decimal(price)
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        raw = price * Decimal(10) ** (decimals_y - decimals_x)
        sqrt_price = int(raw.sqrt() * Decimal(Q64))
    return max(MIN_SQRT_PRICE_X64, min(MAX_SQRT_PRICE_X64, sqrt_price))
