"""
Integration tests for sui_swapper.core.node (SuiNode client) and pool reads.

These tests run against the public Sui mainnet fullnode. Nothing is signed
or submitted.

Run:  pytest tests/integration/ -v -m integration
"""

from decimal import Decimal

import pytest

from sui_swapper.config import MMT_PACKAGE_ID, MMT_VERSION_ID, POOLS, TOKENS
from sui_swapper.core.node import SuiNode, SuiNodeError
from sui_swapper.defi.mmt import MmtDEX

# The zero address owns nothing, which makes it a stable balance target
EMPTY_ADDRESS = "0x" + "0" * 64


@pytest.fixture(scope="module")
def node():
    n = SuiNode(timeout=30.0)
    yield n
    n.close()


@pytest.mark.integration
class TestSuiNode:
    """Test SuiNode methods against the live Sui network."""

    def test_reference_gas_price(self, node):
        price = node.get_reference_gas_price()
        assert isinstance(price, int)
        assert price > 0

    def test_clock_is_shared(self, node):
        assert node.get_shared_object_version("0x6") == 1

    def test_empty_wallet_balance(self, node):
        balance = node.get_wallet_balance(EMPTY_ADDRESS, list(TOKENS.values()))
        assert set(balance.tokens) == set(TOKENS)
        for token_balance in balance.tokens.values():
            assert token_balance.balance >= 0

    def test_missing_object_raises(self, node):
        with pytest.raises(SuiNodeError):
            node.get_object("0x" + "f" * 64)


@pytest.mark.integration
class TestMmtPools:
    """Read live MMT pool state."""

    @pytest.mark.parametrize("pool_name", list(POOLS))
    def test_pool_is_shared(self, node, pool_name):
        assert node.get_shared_object_version(POOLS[pool_name].pool_id) > 0

    @pytest.mark.parametrize("pool_name", list(POOLS))
    def test_current_price_is_positive(self, node, pool_name):
        dex = MmtDEX(node, MMT_PACKAGE_ID, MMT_VERSION_ID)
        assert dex.fetch_current_price(POOLS[pool_name]) > Decimal(0)
