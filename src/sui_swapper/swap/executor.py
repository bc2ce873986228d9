"""
SwapExecutor: runs swaps end to end.

For each swap: fetch the pool price, plan (estimate, limit, coins), build the
programmable transaction, sign, submit, and wait for finality. Runs are
strictly sequential; a failure anywhere propagates to the caller and ends the
run, with no compensation for swaps already submitted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sui_swapper.config import TOKENS, Settings
from sui_swapper.core.builder import GAS_COIN, TransactionBuilder
from sui_swapper.core.models import Pool, SwapResult, Token, WalletBalance
from sui_swapper.core.node import SuiNode, SuiNodeError
from sui_swapper.core.wallet import Wallet
from sui_swapper.defi.mmt import MmtDEX
from sui_swapper.swap import calculator
from sui_swapper.swap.planner import SwapInputs, SwapPlan, plan_swap, resolve_amount
from sui_swapper.swap.safety import SafetyConfig

logger = logging.getLogger("sui_swapper.executor")


class SwapExecutionError(Exception):
    """Raised when a swap transaction is rejected or fails on-chain."""
    pass


class SwapExecutor:
    """
    Executes single swaps and bidirectional swap loops for one wallet.

    Usage:
        executor = SwapExecutor(node, dex, wallet, settings)
        balances = executor.check_wallet_balance()
        results = executor.run(inputs)
    """

    def __init__(
        self,
        node: SuiNode,
        dex: MmtDEX,
        wallet: Wallet,
        settings: Settings,
        safety: SafetyConfig | None = None,
        tokens: list[Token] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._node = node
        self._dex = dex
        self._wallet = wallet
        self._settings = settings
        self._safety = safety or SafetyConfig(dry_run=settings.dry_run)
        self._tokens = tokens or list(TOKENS.values())
        self._sleep = sleep

    @property
    def address(self) -> str:
        return self._wallet.address

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def check_wallet_balance(self) -> WalletBalance:
        """Fetch and log the balance of every configured token."""
        balances = self._node.get_wallet_balance(self.address, self._tokens)
        logger.info("\n=== WALLET BALANCE ===")
        for token_balance in balances.tokens.values():
            logger.info(token_balance.to_summary())
        return balances

    # ------------------------------------------------------------------
    # Single swap
    # ------------------------------------------------------------------

    def execute_swap(
        self,
        pool: Pool,
        source: str,
        amount: int,
        use_all_coins: bool = False,
    ) -> SwapResult:
        """
        Swap `amount` base units of `source` in `pool`.

        Raises:
            InsufficientFundsError: coins or gas cannot cover the swap
            SwapExecutionError: submission failed or the chain reported failure
        """
        source_token = calculator.source_token(pool, source)
        target = calculator.target_token(pool, source)
        current_price = self._dex.fetch_current_price(pool)

        source_coins = self._node.get_coins(self.address, source_token.coin_type)
        if source_token.is_sui:
            sui_coins = source_coins
        else:
            sui_coins = self._node.get_coins(self.address, TOKENS["SUI"].coin_type)

        plan = plan_swap(
            pool=pool,
            source=source_token.symbol,
            amount=amount,
            current_price=current_price,
            slippage_pct=self._settings.slippage_pct,
            source_coins=source_coins,
            sui_coins=sui_coins,
            gas_budget=self._settings.gas_budget,
            use_all_coins=use_all_coins,
        )
        estimate = plan.estimate
        logger.info(
            f"Estimated output: {calculator.format_amount(estimate.estimated_out, target.decimals)} "
            f"{target.symbol} (limit price {estimate.limit_price:.6f})"
        )

        if self._safety.dry_run:
            logger.info(
                f"[DRY RUN] Would swap {calculator.format_amount(amount, source_token.decimals)} "
                f"{source_token.symbol} for ~{calculator.format_amount(estimate.estimated_out, target.decimals)} "
                f"{target.symbol}"
            )
            return SwapResult(estimate=estimate, status="dry_run", dry_run=True)

        tx_bytes = self.build_transaction(plan)
        signature = self._wallet.sign_transaction(tx_bytes)

        logger.info("Executing transaction...")
        try:
            response = self._node.execute_transaction(tx_bytes, [signature])
            digest = response["digest"]
            logger.info(f"Transaction submitted: {digest}")
            logger.info(f"Explorer link: {self._settings.explorer_tx_url(digest)}")
            final = self._node.wait_for_transaction(digest)
        except (SuiNodeError, KeyError) as e:
            logger.error(f"Transaction failed: {e}")
            raise SwapExecutionError(f"Swap transaction failed: {e}") from e

        status_info = (final.get("effects") or {}).get("status") or {}
        status = status_info.get("status", "unknown")
        logger.info(f"Swap complete. Status: {status}")
        if status == "failure":
            raise SwapExecutionError(
                f"Swap transaction {digest} failed on-chain: {status_info.get('error', 'unknown error')}"
            )

        return SwapResult(
            estimate=estimate,
            digest=digest,
            status=status,
            explorer_url=self._settings.explorer_tx_url(digest),
        )

    def build_transaction(self, plan: SwapPlan) -> bytes:
        """Serialize the swap described by `plan` into signable TransactionData."""
        tx = TransactionBuilder(self.address)
        amount = plan.amount

        if plan.split_from_gas:
            [input_coin] = tx.split_coins(GAS_COIN, [amount])
        else:
            primary, *rest = plan.input_coins
            primary_arg = tx.object(primary.object_ref)
            if rest:
                logger.info(f"Merging {len(plan.input_coins)} {plan.estimate.source} coins...")
                tx.merge_coins(primary_arg, [tx.object(c.object_ref) for c in rest])
            else:
                logger.info(f"Using coin: {primary.coin_object_id}")
            if sum(c.balance for c in plan.input_coins) == amount:
                input_coin = primary_arg
            else:
                [input_coin] = tx.split_coins(primary_arg, [amount])

        self._dex.add_swap(
            tx,
            plan.pool,
            amount,
            input_coin,
            is_x_to_y=plan.estimate.is_x_to_y,
            recipient=self.address,
            limit_sqrt_price=plan.limit_sqrt_price,
        )
        tx.with_gas(
            plan.gas_coins,
            price=self._node.get_reference_gas_price(),
            budget=self._settings.gas_budget,
        )
        return tx.build()

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    def run(
        self,
        inputs: SwapInputs,
        balances: WalletBalance | None = None,
    ) -> list[SwapResult]:
        """
        Validate, resolve the amount and perform a single swap or a loop.

        `balances` may carry a check made just before; otherwise one is
        fetched. Ends with a fresh balance check.
        """
        self._safety.validate_slippage(self._settings.slippage_pct)
        if inputs.loop:
            self._safety.validate_loop(inputs.loop_count, inputs.interval_seconds)

        if balances is None:
            balances = self.check_wallet_balance()
        amount = resolve_amount(inputs, balances, self._settings.sui_gas_reserve)

        if inputs.loop:
            results = self.run_loop(inputs, amount)
        else:
            results = [self.execute_swap(inputs.pool, inputs.source, amount, inputs.swap_all)]

        self.check_wallet_balance()
        return results

    def run_loop(self, inputs: SwapInputs, amount: int) -> list[SwapResult]:
        """
        Swap source->target then target->source, `loop_count` times.

        The swap back sells the refreshed target balance when `swap_all` is
        set, otherwise the same human-readable amount in the target token.
        """
        pool = inputs.pool
        source = inputs.source_token
        target = inputs.target_token
        interval = inputs.interval_seconds
        results: list[SwapResult] = []

        logger.info(
            f"\nStarting {inputs.loop_count} bidirectional swap cycles "
            f"with {interval} second intervals..."
        )
        for i in range(inputs.loop_count):
            logger.info(f"\n--- Executing swap cycle {i + 1}/{inputs.loop_count} ---")

            logger.info(f"\nSwap 1: {source.symbol} -> {target.symbol}")
            results.append(self.execute_swap(pool, source.symbol, amount, inputs.swap_all))

            logger.info(f"Waiting {interval} seconds...")
            self._sleep(interval)

            updated = self.check_wallet_balance()
            swap_back_amount = resolve_amount(
                inputs, updated, self._settings.sui_gas_reserve, symbol=target.symbol
            )

            logger.info(f"\nSwap 2: {target.symbol} -> {source.symbol}")
            results.append(
                self.execute_swap(pool, target.symbol, swap_back_amount, inputs.swap_all)
            )

            if i < inputs.loop_count - 1:
                logger.info(f"Waiting {interval} seconds until next cycle...")
                self._sleep(interval)
                balances = self.check_wallet_balance()
                if inputs.swap_all:
                    amount = resolve_amount(inputs, balances, self._settings.sui_gas_reserve)

        logger.info(f"\nCompleted {inputs.loop_count} bidirectional swap cycles")
        return results
