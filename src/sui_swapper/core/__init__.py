"""core module init"""
from sui_swapper.core.bcs import BCSError
from sui_swapper.core.builder import GAS_COIN, Argument, TransactionBuilder, TransactionBuilderError
from sui_swapper.core.models import (
    Coin,
    Pool,
    SwapEstimate,
    SwapResult,
    Token,
    TokenBalance,
    WalletBalance,
)
from sui_swapper.core.node import SuiNode, SuiNodeError
from sui_swapper.core.wallet import (
    Mnemonic,
    PrivateKey,
    SigningMaterial,
    Wallet,
    WalletError,
    signing_material_from_env,
)

__all__ = [
    "Argument",
    "BCSError",
    "Coin",
    "GAS_COIN",
    "Mnemonic",
    "Pool",
    "PrivateKey",
    "SigningMaterial",
    "SuiNode",
    "SuiNodeError",
    "SwapEstimate",
    "SwapResult",
    "Token",
    "TokenBalance",
    "TransactionBuilder",
    "TransactionBuilderError",
    "Wallet",
    "WalletBalance",
    "WalletError",
    "signing_material_from_env",
]
