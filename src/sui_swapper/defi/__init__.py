"""
DeFi adapters for sui-swapper.
"""
from .clmm_math import price_to_sqrt_price_x64, sqrt_price_x64_to_price
from .mmt import MmtDEX, MmtDEXError, PoolState

__all__ = [
    "MmtDEX",
    "MmtDEXError",
    "PoolState",
    "price_to_sqrt_price_x64",
    "sqrt_price_x64_to_price",
]
