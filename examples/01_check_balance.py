#!/usr/bin/env python3
"""
Example 01: Check a wallet balance.

Connects to the public Sui mainnet fullnode and reads the USDT, USDC and SUI
balances of any address. No wallet keys required.

Usage:
    python examples/01_check_balance.py 0x<address>
"""

import sys

from sui_swapper import SuiNode
from sui_swapper.config import TOKENS

if len(sys.argv) < 2:
    sys.exit("Usage: python examples/01_check_balance.py 0x<address>")
address = sys.argv[1]

with SuiNode() as node:
    balance = node.get_wallet_balance(address, list(TOKENS.values()))

print(f"Address: {address[:18]}...")
for token_balance in balance.tokens.values():
    coins = len(token_balance.coins)
    print(f"  {token_balance.to_summary()}  [{coins} coin{'s' if coins != 1 else ''}]")
