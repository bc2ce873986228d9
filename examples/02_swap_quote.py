#!/usr/bin/env python3
"""
Example 02: Quote a swap on an MMT pool.

Reads the live pool price and shows the estimated output and the slippage
limit for a swap. Nothing is signed or submitted.

Usage:
    python examples/02_swap_quote.py
    python examples/02_swap_quote.py SUI-USDC SUI 5      # sell 5 SUI
    python examples/02_swap_quote.py USDT-USDC USDC 10 0.5  # 0.5% slippage
"""

import sys
from decimal import Decimal

from sui_swapper import SuiNode
from sui_swapper.config import MMT_PACKAGE_ID, MMT_VERSION_ID, get_pool
from sui_swapper.defi import MmtDEX
from sui_swapper.swap import calculator

pool = get_pool(sys.argv[1] if len(sys.argv) > 1 else "USDT-USDC")
source = (sys.argv[2] if len(sys.argv) > 2 else pool.token_x.symbol).upper()
amount = Decimal(sys.argv[3]) if len(sys.argv) > 3 else Decimal("2")
slippage = Decimal(sys.argv[4]) if len(sys.argv) > 4 else Decimal("0.1")

with SuiNode() as node:
    dex = MmtDEX(node, MMT_PACKAGE_ID, MMT_VERSION_ID)
    price = dex.fetch_current_price(pool)

src = calculator.source_token(pool, source)
dst = calculator.target_token(pool, source)
estimate = calculator.estimate_swap(
    pool, source, calculator.to_base_units(amount, src.decimals), price, slippage
)

print(f"=== Swap Quote ({pool.name}) ===")
print(f"Pool price:   1 {pool.token_x.symbol} = {price:.6f} {pool.token_y.symbol}")
print(f"Input:        {calculator.format_amount(estimate.amount_in, src.decimals)} {src.symbol}")
print(f"Output:       ~{calculator.format_amount(estimate.estimated_out, dst.decimals)} {dst.symbol}")
print(f"Limit price:  {estimate.limit_price:.6f} {dst.symbol} per {src.symbol} ({slippage}% slippage)")
