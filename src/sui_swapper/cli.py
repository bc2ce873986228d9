"""
Command-line entry point: interactive swap runner.

Usage:
    sui-swapper                                # fully interactive
    sui-swapper --pool USDT-USDC --token USDT --amount 5
    sui-swapper --pool SUI-USDC --token SUI --all --loop --cycles 3 --interval 120
    sui-swapper --dry-run                      # estimate only, never submit

Credentials and network come from the environment (or a .env file):
PRIVATE_KEY or MNEMONIC, NETWORK, SLIPPAGE_PERCENTAGE.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import TextIO

from sui_swapper.config import NETWORKS, POOLS, ConfigError, Settings, get_env, get_pool
from sui_swapper.core.models import Pool
from sui_swapper.core.node import SuiNode
from sui_swapper.core.wallet import Wallet, signing_material_from_env
from sui_swapper.defi.mmt import MmtDEX
from sui_swapper.swap.executor import SwapExecutor
from sui_swapper.swap.planner import SwapInputError, SwapInputs
from sui_swapper.swap.safety import SafetyConfig

logger = logging.getLogger("sui_swapper.cli")

DEFAULT_LOOP_COUNT = 1
DEFAULT_INTERVAL_SECONDS = 60


class ConsolePrompter:
    """Line-oriented prompts over a pair of text streams."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout
        self.closed = False

    def ask(self, question: str) -> str:
        self._out.write(question)
        self._out.flush()
        line = self._in.readline()
        if not line:
            raise SwapInputError("Input closed before all questions were answered.")
        return line.strip()

    def say(self, message: str) -> None:
        self._out.write(message + "\n")

    def close(self) -> None:
        """Release the input stream (sys.stdin itself is left open)."""
        if not self.closed and self._in is not sys.stdin:
            self._in.close()
        self.closed = True


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sui-swapper",
        description="Swap tokens on the MMT DEX (Sui), optionally back and forth in a loop.",
    )
    parser.add_argument("--pool", help=f"pool name ({', '.join(POOLS)})")
    parser.add_argument("--token", help="source token symbol")
    amount = parser.add_mutually_exclusive_group()
    amount.add_argument("--amount", help="amount of the source token to swap")
    amount.add_argument("--all", dest="swap_all", action="store_true", default=None,
                        help="swap the whole available balance")
    parser.add_argument("--loop", action="store_true", default=None,
                        help="swap back and forth")
    parser.add_argument("--cycles", type=int, help="number of loop cycles")
    parser.add_argument("--interval", type=int, help="seconds between swaps in a loop")
    parser.add_argument("--network", help="mainnet, testnet or devnet (overrides NETWORK)")
    parser.add_argument("--slippage", help="slippage percent (overrides SLIPPAGE_PERCENTAGE)")
    parser.add_argument("--dry-run", action="store_true", default=None,
                        help="estimate and build only, never sign or submit")
    parser.add_argument("--log-level", help="logging level (default: INFO)")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command-line overrides applied."""
    changes: dict[str, object] = {}
    if args.network:
        network = args.network.lower()
        if network not in NETWORKS:
            raise ConfigError(f"Unknown network '{network}'. Available: {', '.join(NETWORKS)}")
        changes["network"] = network
        changes["rpc_url"] = NETWORKS[network]
    if args.slippage:
        changes["slippage_pct"] = get_env(
            {"SLIPPAGE_PERCENTAGE": args.slippage}, "SLIPPAGE_PERCENTAGE", cast=Decimal
        )
    if args.dry_run:
        changes["dry_run"] = True
    if args.log_level:
        changes["log_level"] = args.log_level.upper()
    return dataclasses.replace(settings, **changes)


# ------------------------------------------------------------------
# Prompts
# ------------------------------------------------------------------

def _yes(answer: str) -> bool:
    return answer.strip().lower() in {"y", "yes"}


def _parse_int(raw: str, default: int, what: str) -> int:
    if raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise SwapInputError(f"Invalid {what}: {raw!r}") from None


def _parse_amount(raw: str) -> Decimal | None:
    if raw.strip() == "":
        return None
    try:
        amount = Decimal(raw.strip())
    except InvalidOperation:
        raise SwapInputError(f"Invalid amount: {raw!r}") from None
    if not amount.is_finite():
        raise SwapInputError(f"Invalid amount: {raw!r}")
    return amount


def choose_pool(prompter: ConsolePrompter, pools: Mapping[str, Pool] = POOLS) -> Pool:
    names = list(pools)
    prompter.say("\nAvailable pools:")
    for index, name in enumerate(names, start=1):
        prompter.say(f"{index}. {name}")
    choice = _parse_int(prompter.ask("\nSelect pool (number, default: 1): "), 1, "pool number")
    if not 1 <= choice <= len(names):
        raise SwapInputError(f"Invalid pool selection: {choice}")
    pool = pools[names[choice - 1]]
    prompter.say(f"Selected pool: {pool.name}")
    return pool


def collect_inputs(
    args: argparse.Namespace,
    prompter: ConsolePrompter,
    pools: Mapping[str, Pool] = POOLS,
) -> SwapInputs:
    """
    Gather every swap choice, prompting for whatever the flags left open.

    Blank answers take the defaults: pool 1, token X, fixed amount equal to
    the token's default, no loop, 1 cycle, 60 seconds.
    """
    pool = get_pool(args.pool) if args.pool else choose_pool(prompter, pools)
    x, y = pool.symbols

    source = args.token or prompter.ask(f"\nSelect source token ({x}/{y}, default: {x}): ") or x
    source = source.upper()
    if not pool.has_token(source):
        raise SwapInputError(f"Invalid token selection. Please choose {x} or {y}.")

    if args.amount is not None:
        swap_all, amount = False, _parse_amount(args.amount)
    else:
        swap_all = args.swap_all if args.swap_all is not None else _yes(
            prompter.ask("\nSwap all available balance? (y/n, default: n): ")
        )
        amount = None
        if not swap_all:
            default = pool.token_x.default_amount if source == x else pool.token_y.default_amount
            amount = _parse_amount(
                prompter.ask(f"\nEnter amount of {source} to swap (default: {default}): ")
            )

    loop = args.loop if args.loop is not None else _yes(
        prompter.ask("\nLoop swap (back and forth)? (y/n, default: n): ")
    )
    loop_count, interval = DEFAULT_LOOP_COUNT, DEFAULT_INTERVAL_SECONDS
    if loop:
        loop_count = args.cycles if args.cycles is not None else _parse_int(
            prompter.ask(f"Enter number of loop cycles (default: {DEFAULT_LOOP_COUNT}): "),
            DEFAULT_LOOP_COUNT, "cycle count",
        )
        interval = args.interval if args.interval is not None else _parse_int(
            prompter.ask(
                f"Enter interval between swaps in seconds (default: {DEFAULT_INTERVAL_SECONDS}): "
            ),
            DEFAULT_INTERVAL_SECONDS, "interval",
        )

    return SwapInputs(
        pool=pool,
        source=source,
        swap_all=swap_all,
        amount=amount,
        loop=loop,
        loop_count=loop_count,
        interval_seconds=interval,
    )


# ------------------------------------------------------------------
# Main
# ------------------------------------------------------------------

def run(settings: Settings, args: argparse.Namespace, prompter: ConsolePrompter) -> None:
    material = signing_material_from_env(settings.private_key, settings.mnemonic)
    wallet = Wallet.from_signing_material(material)
    if wallet.source == "mnemonic":
        logger.info("Using Mnemonic for signing.")
    else:
        logger.info("Using Private Key for signing.")
    logger.info(f"Wallet Address: {wallet.address}")
    logger.info(f"Network: {settings.network}")

    safety = SafetyConfig(dry_run=settings.dry_run)
    safety.validate_slippage(settings.slippage_pct)

    with SuiNode(settings.rpc_url) as node:
        dex = MmtDEX(node, settings.package_id, settings.version_id, settings.default_price)
        executor = SwapExecutor(node, dex, wallet, settings, safety=safety)
        balances = executor.check_wallet_balance()
        inputs = collect_inputs(args, prompter)
        executor.run(inputs, balances=balances)


def main(argv: list[str] | None = None, prompter: ConsolePrompter | None = None) -> int:
    """
    Run one interactive session.

    Errors are logged as a single line; the exit status is 0 either way.
    """
    args = build_parser().parse_args(argv)
    prompter = prompter or ConsolePrompter()
    logging.basicConfig(format="%(message)s", level=logging.INFO)
    try:
        settings = apply_overrides(Settings.from_env(), args)
        logging.getLogger().setLevel(settings.log_level)
        run(settings, args, prompter)
    except Exception as e:
        logger.error(f"Error: {e}")
    finally:
        prompter.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
