"""
Unit tests for swap planning: input validation, amount resolution and coin selection.
Everything here runs before a transaction is built, so no mocks are needed.
"""

from decimal import Decimal

import pytest

from sui_swapper.config import POOLS, TOKENS
from sui_swapper.core.models import Coin, TokenBalance, WalletBalance
from sui_swapper.defi.clmm_math import Q64
from sui_swapper.swap.planner import (
    InsufficientFundsError,
    SwapInputError,
    SwapInputs,
    plan_swap,
    resolve_amount,
    select_coins,
    select_gas_coins,
)

STABLE = POOLS["USDT-USDC"]
SUI_USDC = POOLS["SUI-USDC"]
GAS_BUDGET = 50_000_000


def _coin(symbol: str, object_id: str, balance: int) -> Coin:
    return Coin(
        coin_type=TOKENS[symbol].coin_type,
        coin_object_id=object_id,
        version=1,
        digest="11111111111111111111111111111111",
        balance=balance,
    )


def _balances(**amounts: int) -> WalletBalance:
    return WalletBalance(
        address="0x1",
        tokens={
            symbol: TokenBalance(token=TOKENS[symbol], balance=amounts.get(symbol, 0))
            for symbol in TOKENS
        },
    )


# ==============================================================================
# SwapInputs
# ==============================================================================


def test_inputs_normalize_source():
    inputs = SwapInputs(pool=STABLE, source=" usdc ")
    assert inputs.source == "USDC"
    assert inputs.source_token.symbol == "USDC"
    assert inputs.target_token.symbol == "USDT"


def test_inputs_default_amount():
    assert SwapInputs(pool=STABLE, source="USDT").human_amount == Decimal("2")


def test_inputs_reject_foreign_token():
    with pytest.raises(SwapInputError, match="Please choose USDT or USDC"):
        SwapInputs(pool=STABLE, source="SUI")


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
def test_inputs_reject_non_positive_amount(amount):
    with pytest.raises(SwapInputError, match="greater than 0"):
        SwapInputs(pool=STABLE, source="USDT", amount=amount)


def test_inputs_reject_bad_loop_settings():
    with pytest.raises(SwapInputError):
        SwapInputs(pool=STABLE, source="USDT", loop=True, loop_count=0)
    with pytest.raises(SwapInputError):
        SwapInputs(pool=STABLE, source="USDT", loop=True, interval_seconds=-1)


# ==============================================================================
# resolve_amount
# ==============================================================================


def test_fixed_amount_in_base_units():
    inputs = SwapInputs(pool=STABLE, source="USDT", amount=Decimal("2"))
    assert resolve_amount(inputs, _balances(USDT=5_000_000)) == 2_000_000


def test_fixed_amount_exceeding_balance():
    inputs = SwapInputs(pool=STABLE, source="USDT", amount=Decimal("2"))
    with pytest.raises(InsufficientFundsError, match="Insufficient USDT balance: have 1.000000, need 2.000000"):
        resolve_amount(inputs, _balances(USDT=1_000_000))


def test_amount_rounding_to_zero_rejected():
    inputs = SwapInputs(pool=STABLE, source="USDT", amount=Decimal("0.0000001"))
    with pytest.raises(SwapInputError):
        resolve_amount(inputs, _balances(USDT=5_000_000))


def test_swap_all_sells_whole_balance():
    inputs = SwapInputs(pool=STABLE, source="USDT", swap_all=True)
    assert resolve_amount(inputs, _balances(USDT=3_141_592), gas_reserve=100) == 3_141_592


def test_swap_all_sui_keeps_gas_reserve():
    inputs = SwapInputs(pool=SUI_USDC, source="SUI", swap_all=True)
    assert resolve_amount(inputs, _balances(SUI=1_000_000_000), gas_reserve=100_000_000) == 900_000_000


def test_swap_all_with_nothing_left():
    inputs = SwapInputs(pool=SUI_USDC, source="SUI", swap_all=True)
    with pytest.raises(InsufficientFundsError, match="No SUI balance"):
        resolve_amount(inputs, _balances(SUI=50_000_000), gas_reserve=100_000_000)
    with pytest.raises(InsufficientFundsError):
        resolve_amount(SwapInputs(pool=STABLE, source="USDT", swap_all=True), _balances())


def test_swap_back_uses_target_decimals():
    # 2 SUI forward, 2 USDC back
    inputs = SwapInputs(pool=SUI_USDC, source="SUI", amount=Decimal("2"))
    assert resolve_amount(inputs, _balances(SUI=5_000_000_000)) == 2_000_000_000
    assert resolve_amount(inputs, _balances(USDC=5_000_000), symbol="USDC") == 2_000_000


# ==============================================================================
# Coin selection
# ==============================================================================


def test_select_single_coin_large_enough():
    coins = [_coin("USDT", "0xa", 1_000), _coin("USDT", "0xb", 5_000)]
    assert select_coins(coins, 2_000, use_all=False, symbol="USDT") == [coins[1]]


def test_no_single_coin_large_enough():
    coins = [_coin("USDT", "0xa", 1_000), _coin("USDT", "0xb", 1_500)]
    with pytest.raises(InsufficientFundsError, match="No single coin with enough USDT balance"):
        select_coins(coins, 2_000, use_all=False, symbol="USDT")


def test_use_all_takes_every_coin_largest_first():
    coins = [_coin("USDT", "0xa", 1_000), _coin("USDT", "0xb", 1_500)]
    selected = select_coins(coins, 2_000, use_all=True, symbol="USDT")
    assert [c.coin_object_id for c in selected] == ["0xb", "0xa"]


def test_use_all_without_coins():
    with pytest.raises(InsufficientFundsError, match="No USDT coins found"):
        select_coins([], 1, use_all=True, symbol="USDT")


def test_gas_selection_is_greedy():
    coins = [_coin("SUI", "0xa", 10), _coin("SUI", "0xb", 30), _coin("SUI", "0xc", 20)]
    assert [c.coin_object_id for c in select_gas_coins(coins, 45)] == ["0xb", "0xc"]


def test_gas_selection_respects_exclusions():
    coins = [_coin("SUI", "0xa", 10), _coin("SUI", "0xb", 30)]
    assert [c.coin_object_id for c in select_gas_coins(coins, 5, exclude={"0xb"})] == ["0xa"]


def test_insufficient_gas():
    with pytest.raises(InsufficientFundsError, match="Insufficient SUI for gas"):
        select_gas_coins([_coin("SUI", "0xa", 10)], 11)


# ==============================================================================
# plan_swap
# ==============================================================================


def test_plan_for_token_source():
    plan = plan_swap(
        pool=STABLE,
        source="USDT",
        amount=2_000_000,
        current_price=Decimal("1"),
        slippage_pct=Decimal("0.1"),
        source_coins=[_coin("USDT", "0xa", 3_000_000)],
        sui_coins=[_coin("SUI", "0xg", 1_000_000_000)],
        gas_budget=GAS_BUDGET,
    )
    assert plan.amount == 2_000_000
    assert plan.split_from_gas is False
    assert [c.coin_object_id for c in plan.input_coins] == ["0xa"]
    assert [c.coin_object_id for c in plan.gas_coins] == ["0xg"]
    assert plan.estimate.estimated_out == 2_000_000
    # selling X: the bound sits below the current price
    assert plan.limit_sqrt_price < Q64


def test_plan_y_to_x_bound_above_current_price():
    plan = plan_swap(
        pool=STABLE,
        source="USDC",
        amount=1_000_000,
        current_price=Decimal("1"),
        slippage_pct=Decimal("0.1"),
        source_coins=[_coin("USDC", "0xa", 1_000_000)],
        sui_coins=[_coin("SUI", "0xg", 1_000_000_000)],
        gas_budget=GAS_BUDGET,
    )
    assert plan.limit_sqrt_price > Q64


def test_plan_sui_source_splits_from_gas():
    plan = plan_swap(
        pool=SUI_USDC,
        source="SUI",
        amount=1_000_000_000,
        current_price=Decimal("3.5"),
        slippage_pct=Decimal("0.5"),
        source_coins=[],
        sui_coins=[_coin("SUI", "0xa", 600_000_000), _coin("SUI", "0xb", 600_000_000)],
        gas_budget=GAS_BUDGET,
    )
    assert plan.split_from_gas is True
    assert plan.input_coins == []
    assert len(plan.gas_coins) == 2


def test_plan_sui_source_needs_amount_plus_gas():
    with pytest.raises(InsufficientFundsError):
        plan_swap(
            pool=SUI_USDC,
            source="SUI",
            amount=1_000_000_000,
            current_price=Decimal("3.5"),
            slippage_pct=Decimal("0.5"),
            source_coins=[],
            sui_coins=[_coin("SUI", "0xa", 1_000_000_000)],
            gas_budget=GAS_BUDGET,
        )


def test_plan_without_gas_coins():
    with pytest.raises(InsufficientFundsError, match="gas"):
        plan_swap(
            pool=STABLE,
            source="USDT",
            amount=1,
            current_price=Decimal("1"),
            slippage_pct=Decimal("0.1"),
            source_coins=[_coin("USDT", "0xa", 1)],
            sui_coins=[],
            gas_budget=GAS_BUDGET,
        )


def test_plan_rejects_slippage_with_no_positive_bound():
    with pytest.raises(SwapInputError, match="no positive limit price"):
        plan_swap(
            pool=STABLE,
            source="USDT",
            amount=1,
            current_price=Decimal("1"),
            slippage_pct=Decimal("100"),
            source_coins=[_coin("USDT", "0xa", 1)],
            sui_coins=[_coin("SUI", "0xg", 1_000_000_000)],
            gas_budget=GAS_BUDGET,
        )
