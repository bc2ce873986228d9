"""
sui-swapper: automated token swaps on the MMT DEX (Sui).

Usage:
    from sui_swapper import SuiNode, Wallet
    from sui_swapper.swap import SwapExecutor, SwapInputs
"""

from sui_swapper.core.builder import TransactionBuilder
from sui_swapper.core.models import Coin, Pool, SwapEstimate, Token
from sui_swapper.core.node import SuiNode
from sui_swapper.core.wallet import Wallet

__version__ = "0.1.0"
__all__ = [
    "SuiNode",
    "Wallet",
    "TransactionBuilder",
    "Coin",
    "Pool",
    "SwapEstimate",
    "Token",
]
