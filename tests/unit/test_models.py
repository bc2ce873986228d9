"""
Unit tests for core data models.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from sui_swapper.config import POOLS, TOKENS
from sui_swapper.core.models import (
    Coin,
    SwapEstimate,
    SwapResult,
    Token,
    TokenBalance,
    WalletBalance,
    is_sui_coin_type,
    normalize_coin_type,
    normalize_sui_address,
)


def test_normalize_short_address():
    assert normalize_sui_address("0x2") == "0x" + "0" * 63 + "2"
    assert normalize_sui_address("0xABC").endswith("abc")


def test_normalize_coin_type():
    assert normalize_coin_type("0x2::sui::SUI") == "0x" + "0" * 63 + "2::sui::SUI"
    assert normalize_coin_type("not_a_type") == "not_a_type"


def test_sui_detected_in_short_and_long_form():
    assert is_sui_coin_type("0x2::sui::SUI")
    assert TOKENS["SUI"].is_sui
    assert not TOKENS["USDC"].is_sui


def test_token_rejects_negative_decimals():
    with pytest.raises(ValidationError):
        Token(symbol="BAD", coin_type="0x1::bad::BAD", decimals=-1)


def test_token_is_frozen():
    with pytest.raises(ValidationError):
        TOKENS["USDT"].decimals = 9


def test_pool_tokens():
    pool = POOLS["SUI-USDC"]
    assert pool.symbols == ("SUI", "USDC")
    assert pool.decimals_x == 9
    assert pool.decimals_y == 6
    assert pool.has_token("USDC")
    assert not pool.has_token("USDT")


def test_coin_object_ref():
    coin = Coin(coin_type="0x2::sui::SUI", coin_object_id="0x5", version=3, digest="abc", balance=10)
    assert coin.object_ref == ("0x5", 3, "abc")


def test_token_balance_display():
    tb = TokenBalance(token=TOKENS["USDC"], balance=2_500_000)
    assert tb.balance_display == Decimal("2.5")
    assert tb.to_summary() == "USDC: 2.500000 (2500000)"


def test_wallet_balance_summary():
    balance = WalletBalance(
        address="0x1",
        tokens={
            "USDT": TokenBalance(token=TOKENS["USDT"], balance=1_000_000),
            "SUI": TokenBalance(token=TOKENS["SUI"], balance=0),
        },
    )
    assert balance.get("USDT").balance == 1_000_000
    summary = balance.to_summary()
    assert "USDT: 1.000000 (1000000)" in summary
    assert "SUI: 0.000000000 (0)" in summary


def test_swap_result_succeeded():
    est = SwapEstimate(
        source="USDT",
        target="USDC",
        is_x_to_y=True,
        amount_in=1,
        estimated_out=1,
        price=Decimal(1),
        limit_price=Decimal(1),
    )
    assert SwapResult(estimate=est, status="success").succeeded
    assert not SwapResult(estimate=est, status="failure").succeeded
    assert not SwapResult(estimate=est, status="dry_run", dry_run=True).succeeded
