"""
TransactionBuilder: programmable transaction block construction for Sui.

The builder collects inputs and commands, then serializes a TransactionData
(V1) with BCS. The resulting bytes are signed by the Wallet and submitted
via SuiNode.execute_transaction().
"""

from __future__ import annotations

from dataclasses import dataclass

from sui_swapper.core import bcs
from sui_swapper.core.models import Coin, normalize_sui_address

# Sui system clock, shared since genesis
CLOCK_OBJECT_ID = "0x6"
CLOCK_INITIAL_SHARED_VERSION = 1

# Maximum number of gas payment objects per transaction
MAX_GAS_OBJECTS = 256

# Enum variant indices
_TX_DATA_V1 = 0
_TX_KIND_PROGRAMMABLE = 0
_CALL_ARG_PURE = 0
_CALL_ARG_OBJECT = 1
_OBJECT_ARG_IMM_OR_OWNED = 0
_OBJECT_ARG_SHARED = 1
_COMMAND_MOVE_CALL = 0
_COMMAND_TRANSFER_OBJECTS = 1
_COMMAND_SPLIT_COINS = 2
_COMMAND_MERGE_COINS = 3
_EXPIRATION_NONE = 0


class TransactionBuilderError(Exception):
    pass


@dataclass(frozen=True)
class Argument:
    """A reference to the gas coin, an input, or a command result."""
    kind: str
    index: int = 0
    sub_index: int = 0

    def nested(self, sub_index: int) -> Argument:
        """Address one element of a multi-value command result."""
        if self.kind != "Result":
            raise TransactionBuilderError(f"Cannot index into a {self.kind} argument")
        return Argument("NestedResult", self.index, sub_index)

    def encode(self) -> bytes:
        if self.kind == "GasCoin":
            return bcs.encode_uleb128(0)
        if self.kind == "Input":
            return bcs.encode_uleb128(1) + bcs.encode_u16(self.index)
        if self.kind == "Result":
            return bcs.encode_uleb128(2) + bcs.encode_u16(self.index)
        if self.kind == "NestedResult":
            return bcs.encode_uleb128(3) + bcs.encode_u16(self.index) + bcs.encode_u16(self.sub_index)
        raise TransactionBuilderError(f"Unknown argument kind: {self.kind}")


GAS_COIN = Argument("GasCoin")


class TransactionBuilder:
    """
    Fluent-ish builder for Sui programmable transactions.

    Usage (split a coin and send it):
        tx = TransactionBuilder(sender)
        [part] = tx.split_coins(tx.object(coin.object_ref), [1_000_000])
        tx.transfer_objects([part], recipient)
        tx.with_gas(gas_coins, price=750, budget=50_000_000)
        tx_bytes = tx.build()

    The builder:
    - Deduplicates object inputs by object ID
    - Encodes pure arguments with BCS at the point they are added
    - Parses Move type strings for type arguments
    - Returns TransactionData bytes ready for signing
    """

    def __init__(self, sender: str) -> None:
        self.sender = normalize_sui_address(sender)
        self._inputs: list[bytes] = []
        self._object_inputs: dict[str, int] = {}
        self._commands: list[bytes] = []
        self._gas_payment: list[Coin] = []
        self._gas_price: int | None = None
        self._gas_budget: int | None = None

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def pure(self, encoded: bytes) -> Argument:
        """Add an already BCS-encoded pure value."""
        self._inputs.append(
            bcs.encode_uleb128(_CALL_ARG_PURE) + bcs.encode_bytes(encoded)
        )
        return Argument("Input", len(self._inputs) - 1)

    def pure_u64(self, value: int) -> Argument:
        return self.pure(bcs.encode_u64(value))

    def pure_u128(self, value: int) -> Argument:
        return self.pure(bcs.encode_u128(value))

    def pure_bool(self, value: bool) -> Argument:
        return self.pure(bcs.encode_bool(value))

    def pure_address(self, address: str) -> Argument:
        return self.pure(bcs.encode_address(address))

    def object(self, object_ref: tuple[str, int, str]) -> Argument:
        """Add an owned (or immutable) object by reference."""
        object_id, version, digest = object_ref
        return self._add_object(
            object_id,
            bcs.encode_uleb128(_OBJECT_ARG_IMM_OR_OWNED)
            + bcs.encode_object_ref(object_id, version, digest),
        )

    def shared_object(
        self,
        object_id: str,
        initial_shared_version: int,
        mutable: bool = True,
    ) -> Argument:
        """Add a shared object (pools, the clock, protocol config objects)."""
        return self._add_object(
            object_id,
            bcs.encode_uleb128(_OBJECT_ARG_SHARED)
            + bcs.encode_address(object_id)
            + bcs.encode_u64(initial_shared_version)
            + bcs.encode_bool(mutable),
        )

    def clock(self) -> Argument:
        return self.shared_object(CLOCK_OBJECT_ID, CLOCK_INITIAL_SHARED_VERSION, mutable=False)

    def _add_object(self, object_id: str, object_arg: bytes) -> Argument:
        key = normalize_sui_address(object_id)
        if key in self._object_inputs:
            return Argument("Input", self._object_inputs[key])
        self._inputs.append(bcs.encode_uleb128(_CALL_ARG_OBJECT) + object_arg)
        index = len(self._inputs) - 1
        self._object_inputs[key] = index
        return Argument("Input", index)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def move_call(
        self,
        target: str,
        arguments: list[Argument],
        type_arguments: list[str] | None = None,
    ) -> Argument:
        """
        Call a Move function.

        Args:
            target: "package::module::function"
            arguments: inputs or previous results
            type_arguments: Move type strings, e.g. ["0x2::sui::SUI"]

        Returns:
            Argument: the call's result (use .nested(i) for tuple results)
        """
        parts = target.split("::")
        if len(parts) != 3 or not all(parts):
            raise TransactionBuilderError(f"Invalid move call target: {target!r}")
        package, module, function = parts
        call = (
            bcs.encode_address(package)
            + bcs.encode_str(module)
            + bcs.encode_str(function)
            + bcs.encode_vector([bcs.encode_type_tag(t) for t in type_arguments or []])
            + bcs.encode_vector([a.encode() for a in arguments])
        )
        return self._add_command(_COMMAND_MOVE_CALL, call)

    def split_coins(self, coin: Argument, amounts: list[int]) -> list[Argument]:
        """Split `amounts` off `coin`; returns one argument per new coin."""
        if not amounts:
            raise TransactionBuilderError("split_coins needs at least one amount.")
        amount_args = [self.pure_u64(a) for a in amounts]
        result = self._add_command(
            _COMMAND_SPLIT_COINS,
            coin.encode() + bcs.encode_vector([a.encode() for a in amount_args]),
        )
        return [result.nested(i) for i in range(len(amounts))]

    def merge_coins(self, destination: Argument, sources: list[Argument]) -> None:
        if not sources:
            raise TransactionBuilderError("merge_coins needs at least one source coin.")
        self._add_command(
            _COMMAND_MERGE_COINS,
            destination.encode() + bcs.encode_vector([s.encode() for s in sources]),
        )

    def transfer_objects(self, objects: list[Argument], recipient: str) -> None:
        if not objects:
            raise TransactionBuilderError("transfer_objects needs at least one object.")
        recipient_arg = self.pure_address(recipient)
        self._add_command(
            _COMMAND_TRANSFER_OBJECTS,
            bcs.encode_vector([o.encode() for o in objects]) + recipient_arg.encode(),
        )

    def _add_command(self, variant: int, body: bytes) -> Argument:
        self._commands.append(bcs.encode_uleb128(variant) + body)
        return Argument("Result", len(self._commands) - 1)

    @property
    def command_count(self) -> int:
        return len(self._commands)

    @property
    def input_count(self) -> int:
        return len(self._inputs)

    # ------------------------------------------------------------------
    # Gas & serialization
    # ------------------------------------------------------------------

    def with_gas(self, payment: list[Coin], price: int, budget: int) -> TransactionBuilder:
        """Set gas payment coins (SUI), gas price and budget in MIST."""
        if not payment:
            raise TransactionBuilderError("At least one gas coin is required.")
        if len(payment) > MAX_GAS_OBJECTS:
            raise TransactionBuilderError(
                f"Too many gas coins: {len(payment)} (max {MAX_GAS_OBJECTS})."
            )
        self._gas_payment = list(payment)
        self._gas_price = price
        self._gas_budget = budget
        return self

    def build(self) -> bytes:
        """
        Serialize TransactionData::V1 with BCS.

        Returns:
            bytes: transaction bytes, ready for Wallet.sign_transaction()
        """
        if not self._commands:
            raise TransactionBuilderError("Transaction has no commands.")
        if self._gas_price is None or self._gas_budget is None:
            raise TransactionBuilderError("Gas is not set; call with_gas() first.")

        kind = (
            bcs.encode_uleb128(_TX_KIND_PROGRAMMABLE)
            + bcs.encode_vector(self._inputs)
            + bcs.encode_vector(self._commands)
        )
        gas_data = (
            bcs.encode_vector([bcs.encode_object_ref(*c.object_ref) for c in self._gas_payment])
            + bcs.encode_address(self.sender)
            + bcs.encode_u64(self._gas_price)
            + bcs.encode_u64(self._gas_budget)
        )
        return (
            bcs.encode_uleb128(_TX_DATA_V1)
            + kind
            + bcs.encode_address(self.sender)
            + gas_data
            + bcs.encode_uleb128(_EXPIRATION_NONE)
        )
