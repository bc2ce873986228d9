"""
MmtDEX: adapter for the MMT concentrated-liquidity DEX on Sui.

MMT pools are shared objects holding both token reserves and the current
sqrt price (Q64.64). A swap is a flash swap followed by a repayment inside
one programmable transaction:

1. trade::flash_swap borrows the output and returns a receipt
2. the input coin is turned into a Balance and repaid with trade::repay_flash_swap
3. the output Balance becomes a Coin and is sent to the recipient

This adapter:
1. Reads live pool state through the Sui RPC
2. Converts the pool's sqrt price to a human-readable price (with a fallback)
3. Appends the swap commands to a TransactionBuilder
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from sui_swapper.core.builder import Argument, TransactionBuilder
from sui_swapper.core.models import Pool
from sui_swapper.core.node import SuiNode, SuiNodeError
from sui_swapper.defi.clmm_math import sqrt_price_x64_to_price

logger = logging.getLogger("sui_swapper.mmt")

# Field names the pool object may carry its sqrt price under
_SQRT_PRICE_FIELDS = ("sqrt_price", "current_sqrt_price")


class MmtDEXError(Exception):
    pass


class PoolState(BaseModel):
    """Live state of a pool object."""
    pool_id: str
    sqrt_price: int
    initial_shared_version: int
    liquidity: int | None = None


class MmtDEX:
    """
    Adapter for MMT Finance CLMM pools.

    Usage:
        dex = MmtDEX(node, package_id, version_id)
        price = dex.fetch_current_price(pool)      # Decimal, Y per X
        dex.add_swap(builder, pool, amount, coin, is_x_to_y=True,
                     recipient=wallet.address, limit_sqrt_price=limit)
    """

    def __init__(
        self,
        node: SuiNode,
        package_id: str,
        version_id: str,
        default_price: Decimal = Decimal("1.0001"),
    ) -> None:
        self._node = node
        self.package_id = package_id
        self.version_id = version_id
        self.default_price = Decimal(default_price)
        self._shared_versions: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Pool state & price
    # ------------------------------------------------------------------

    def get_pool_state(self, pool: Pool) -> PoolState:
        """
        Read the pool object and extract its sqrt price.

        Raises:
            SuiNodeError: if the RPC call fails
            MmtDEXError: if the object has no usable sqrt price
        """
        data = self._node.get_object(pool.pool_id)
        fields = _move_fields(data)

        raw_sqrt = next((fields[k] for k in _SQRT_PRICE_FIELDS if fields.get(k) is not None), None)
        if raw_sqrt is None:
            raise MmtDEXError(f"Pool {pool.name} has no sqrt price field.")
        try:
            sqrt_price = int(raw_sqrt)
        except (TypeError, ValueError):
            raise MmtDEXError(f"Pool {pool.name} has malformed sqrt price: {raw_sqrt!r}") from None

        owner = data.get("owner")
        if not isinstance(owner, dict) or "Shared" not in owner:
            raise MmtDEXError(f"Pool {pool.name} is not a shared object.")
        liquidity = fields.get("liquidity")
        try:
            initial_shared_version = int(owner["Shared"]["initial_shared_version"])
            liquidity = int(liquidity) if liquidity is not None else None
        except (KeyError, TypeError, ValueError) as e:
            raise MmtDEXError(f"Pool {pool.name} has malformed object data: {e!r}") from None
        self._shared_versions[pool.pool_id] = initial_shared_version

        return PoolState(
            pool_id=pool.pool_id,
            sqrt_price=sqrt_price,
            initial_shared_version=initial_shared_version,
            liquidity=liquidity,
        )

    def fetch_current_price(self, pool: Pool) -> Decimal:
        """
        Return the pool price (units of Y per unit of X).

        Falls back to `default_price` instead of raising when the pool
        cannot be read or its price cannot be decoded.
        """
        try:
            state = self.get_pool_state(pool)
        except (SuiNodeError, MmtDEXError) as e:
            logger.warning(f"Error fetching price from pool, using default price {self.default_price}: {e}")
            return self.default_price

        try:
            price = sqrt_price_x64_to_price(state.sqrt_price, pool.decimals_x, pool.decimals_y)
        except (ValueError, ArithmeticError) as e:
            logger.warning(f"Error calculating price, using default price {self.default_price}: {e}")
            return self.default_price

        x, y = pool.symbols
        logger.info(f"Current price from pool: 1 {x} = {price:.6f} {y}")
        return price

    # ------------------------------------------------------------------
    # Swap construction
    # ------------------------------------------------------------------

    def add_swap(
        self,
        builder: TransactionBuilder,
        pool: Pool,
        amount: int,
        input_coin: Argument,
        is_x_to_y: bool,
        recipient: str,
        limit_sqrt_price: int,
    ) -> None:
        """
        Append an exact-input swap of `input_coin` to the transaction.

        Args:
            builder: transaction under construction
            pool: pool to trade against
            amount: exact input amount in base units (must equal the coin value)
            input_coin: coin argument holding `amount` of the source token
            is_x_to_y: True when selling token X for token Y
            recipient: address receiving the output coin
            limit_sqrt_price: Q64.64 price bound; the swap stops there
        """
        type_x = pool.token_x.coin_type
        type_y = pool.token_y.coin_type
        type_in, type_out = (type_x, type_y) if is_x_to_y else (type_y, type_x)

        pool_arg = builder.shared_object(pool.pool_id, self._shared_version(pool.pool_id))
        version_arg = builder.shared_object(
            self.version_id, self._shared_version(self.version_id), mutable=False
        )

        flash = builder.move_call(
            f"{self.package_id}::trade::flash_swap",
            [
                pool_arg,
                builder.pure_bool(is_x_to_y),
                builder.pure_bool(True),  # exact input
                builder.pure_u64(amount),
                builder.pure_u128(limit_sqrt_price),
                builder.clock(),
                version_arg,
            ],
            [type_x, type_y],
        )
        receive_x, receive_y, receipt = flash.nested(0), flash.nested(1), flash.nested(2)

        paid = builder.move_call("0x2::coin::into_balance", [input_coin], [type_in])
        empty = builder.move_call("0x2::balance::zero", [], [type_out])
        repay_x, repay_y = (paid, empty) if is_x_to_y else (empty, paid)
        builder.move_call(
            f"{self.package_id}::trade::repay_flash_swap",
            [pool_arg, receipt, repay_x, repay_y, version_arg],
            [type_x, type_y],
        )

        received, leftover = (receive_y, receive_x) if is_x_to_y else (receive_x, receive_y)
        builder.move_call("0x2::balance::destroy_zero", [leftover], [type_in])
        out_coin = builder.move_call("0x2::coin::from_balance", [received], [type_out])
        builder.transfer_objects([out_coin], recipient)

    def _shared_version(self, object_id: str) -> int:
        if object_id not in self._shared_versions:
            self._shared_versions[object_id] = self._node.get_shared_object_version(object_id)
        return self._shared_versions[object_id]


def _move_fields(data: dict[str, Any]) -> dict[str, Any]:
    content = data.get("content")
    if not isinstance(content, dict) or content.get("dataType") != "moveObject":
        raise MmtDEXError(f"Object {data.get('objectId')} is not a Move object.")
    fields = content.get("fields") or {}
    if not isinstance(fields, dict):
        raise MmtDEXError(f"Object {data.get('objectId')} has malformed fields.")
    return fields
