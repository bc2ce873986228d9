"""
Unit tests for the programmable transaction builder.
These verify BCS layout without network access.
"""

import pytest

from sui_swapper.core.bcs import base58_encode, encode_u64
from sui_swapper.core.builder import (
    GAS_COIN,
    Argument,
    TransactionBuilder,
    TransactionBuilderError,
)
from sui_swapper.core.models import Coin

SENDER = "0x" + "11" * 32
RECIPIENT = "0x" + "22" * 32
GAS_ID = "0x" + "33" * 32
GAS_DIGEST_RAW = bytes([7]) * 32


def _gas_coin(balance: int = 1_000_000_000) -> Coin:
    return Coin(
        coin_type="0x2::sui::SUI",
        coin_object_id=GAS_ID,
        version=5,
        digest=base58_encode(GAS_DIGEST_RAW),
        balance=balance,
    )


# ==============================================================================
# Arguments
# ==============================================================================


def test_argument_encodings():
    assert GAS_COIN.encode() == b"\x00"
    assert Argument("Input", 3).encode() == b"\x01\x03\x00"
    assert Argument("Result", 1).encode() == b"\x02\x01\x00"
    assert Argument("NestedResult", 2, 1).encode() == b"\x03\x02\x00\x01\x00"


def test_only_results_can_be_indexed():
    assert Argument("Result", 4).nested(2) == Argument("NestedResult", 4, 2)
    with pytest.raises(TransactionBuilderError):
        Argument("Input", 1).nested(0)


# ==============================================================================
# Inputs & commands
# ==============================================================================


def test_owned_object_inputs_are_deduplicated():
    tx = TransactionBuilder(SENDER)
    ref = _gas_coin().object_ref
    first = tx.object(ref)
    second = tx.object(ref)
    assert first == second
    assert tx.input_count == 1


def test_shared_object_ids_normalized_for_dedup():
    tx = TransactionBuilder(SENDER)
    a = tx.clock()
    b = tx.shared_object("0x0000000000000000000000000000000000000000000000000000000000000006", 1)
    assert a == b
    assert tx.input_count == 1


def test_split_coins_returns_nested_results():
    tx = TransactionBuilder(SENDER)
    parts = tx.split_coins(GAS_COIN, [10, 20, 30])
    assert parts == [Argument("NestedResult", 0, i) for i in range(3)]
    assert tx.command_count == 1
    assert tx.input_count == 3


def test_move_call_returns_result_argument():
    tx = TransactionBuilder(SENDER)
    tx.split_coins(GAS_COIN, [1])
    result = tx.move_call("0x2::coin::into_balance", [Argument("NestedResult", 0, 0)], ["0x2::sui::SUI"])
    assert result == Argument("Result", 1)


def test_invalid_move_call_target_rejected():
    tx = TransactionBuilder(SENDER)
    with pytest.raises(TransactionBuilderError, match="Invalid move call target"):
        tx.move_call("0x2::coin", [])


def test_empty_command_arguments_rejected():
    tx = TransactionBuilder(SENDER)
    with pytest.raises(TransactionBuilderError):
        tx.split_coins(GAS_COIN, [])
    with pytest.raises(TransactionBuilderError):
        tx.merge_coins(GAS_COIN, [])
    with pytest.raises(TransactionBuilderError):
        tx.transfer_objects([], RECIPIENT)


# ==============================================================================
# Gas & build
# ==============================================================================


def test_build_requires_commands():
    tx = TransactionBuilder(SENDER).with_gas([_gas_coin()], price=750, budget=1000)
    with pytest.raises(TransactionBuilderError, match="no commands"):
        tx.build()


def test_build_requires_gas():
    tx = TransactionBuilder(SENDER)
    tx.transfer_objects([GAS_COIN], RECIPIENT)
    with pytest.raises(TransactionBuilderError, match="Gas is not set"):
        tx.build()


def test_with_gas_requires_coins():
    with pytest.raises(TransactionBuilderError):
        TransactionBuilder(SENDER).with_gas([], price=750, budget=1000)


def test_build_exact_layout():
    tx = TransactionBuilder(SENDER)
    tx.transfer_objects([GAS_COIN], RECIPIENT)
    tx.with_gas([_gas_coin()], price=750, budget=50_000_000)

    sender = b"\x11" * 32
    recipient_input = b"\x00" + b"\x20" + b"\x22" * 32          # Pure(address)
    transfer = b"\x01" + b"\x01\x00" + b"\x01\x00\x00"         # TransferObjects([GasCoin], Input(0))
    gas_ref = b"\x33" * 32 + encode_u64(5) + b"\x20" + GAS_DIGEST_RAW
    expected = (
        b"\x00"                                   # TransactionData::V1
        + b"\x00"                                 # ProgrammableTransaction
        + b"\x01" + recipient_input
        + b"\x01" + transfer
        + sender
        + b"\x01" + gas_ref + sender + encode_u64(750) + encode_u64(50_000_000)
        + b"\x00"                                 # no expiration
    )
    assert tx.build() == expected
