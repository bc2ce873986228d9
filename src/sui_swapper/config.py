"""
Configuration: networks, tokens, pools and runtime settings.

The tables below are immutable. Runtime settings are read from the process
environment (a local `.env` file is loaded first) into a frozen `Settings`
object that is passed explicitly to whatever needs it.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any

from dotenv import load_dotenv

from sui_swapper.core.models import Pool, Token


class ConfigError(Exception):
    """Raised for missing or malformed configuration."""
    pass


NETWORKS: Mapping[str, str] = MappingProxyType({
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
})

EXPLORER_URL = "https://suiscan.xyz"

TOKENS: Mapping[str, Token] = MappingProxyType({
    "USDT": Token(
        symbol="USDT",
        coin_type="0xc060006111016b8a020ad5b33834984a437aaa7d3c74c18e09a95d48aceab08c::coin::COIN",
        decimals=6,
        default_amount=Decimal("2"),
    ),
    "USDC": Token(
        symbol="USDC",
        coin_type="0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC",
        decimals=6,
        default_amount=Decimal("2"),
    ),
    "SUI": Token(
        symbol="SUI",
        coin_type="0x0000000000000000000000000000000000000000000000000000000000000002::sui::SUI",
        decimals=9,
        default_amount=Decimal("2"),
    ),
})

POOLS: Mapping[str, Pool] = MappingProxyType({
    "USDT-USDC": Pool(
        name="USDT-USDC",
        pool_id="0x8a86062a0193c48b9d7c42e5d522ed1b30ba1010c72e0cd0dad1525036775c8b",
        token_x=TOKENS["USDT"],
        token_y=TOKENS["USDC"],
        tick_spacing=1,
    ),
    "SUI-USDC": Pool(
        name="SUI-USDC",
        pool_id="0x455cf8d2ac91e7cb883f515874af750ed3cd18195c970b7a2d46235ac2b0c388",
        token_x=TOKENS["SUI"],
        token_y=TOKENS["USDC"],
        tick_spacing=64,
    ),
})

# MMT CLMM deployment (mainnet). Override with MMT_PACKAGE_ID / MMT_VERSION_ID
# when the protocol publishes an upgrade.
MMT_PACKAGE_ID = "0xc84b1ef2ac2ba5c3018e2b8c956ba5d0391e0e46d1daa1926d5a99a6a42526b4"
MMT_VERSION_ID = "0x2375a0b1ec12010aaea3b2545acfa2ad34cfbba03ce4b59f4c39e1e25eed1b2a"

# Price used when the pool price cannot be read or decoded. Keeps a swap going
# with a near 1:1 ratio instead of aborting; override with DEFAULT_PRICE.
DEFAULT_PRICE = Decimal("1.0001")

DEFAULT_SLIPPAGE_PCT = Decimal("0.1")
DEFAULT_GAS_BUDGET_MIST = 50_000_000
DEFAULT_GAS_RESERVE_MIST = 100_000_000


def str_to_bool(val: str | bool) -> bool:
    """Interpret '1', 'true', 'yes', 'y' (any case) as True."""
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in {"1", "true", "t", "yes", "y"}


def get_env(
    environ: Mapping[str, str],
    key: str,
    default: Any = None,
    cast: Any = str,
) -> Any:
    """Read `key`, treat blank as missing, and convert it with `cast`."""
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except (ValueError, InvalidOperation) as e:
        raise ConfigError(f"Invalid value for {key}={raw!r}: {e}") from None


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings resolved once at startup.

    Args:
        network:          one of NETWORKS
        rpc_url:          JSON-RPC endpoint (defaults to the network's fullnode)
        slippage_pct:     slippage tolerance in percent (0.1 means 0.1%)
        default_price:    fallback Y-per-X price when the pool read fails
        gas_budget:       gas budget per transaction, in MIST
        sui_gas_reserve:  MIST kept back when swapping an entire SUI balance
        package_id:       MMT CLMM package
        version_id:       MMT shared version object
        private_key:      hex private key (raw env text)
        mnemonic:         BIP39 phrase (raw env text)
        dry_run:          build and estimate, never sign or submit
        log_level:        logging level name
    """
    network: str = "mainnet"
    rpc_url: str = NETWORKS["mainnet"]
    slippage_pct: Decimal = DEFAULT_SLIPPAGE_PCT
    default_price: Decimal = DEFAULT_PRICE
    gas_budget: int = DEFAULT_GAS_BUDGET_MIST
    sui_gas_reserve: int = DEFAULT_GAS_RESERVE_MIST
    package_id: str = MMT_PACKAGE_ID
    version_id: str = MMT_VERSION_ID
    private_key: str | None = None
    mnemonic: str | None = None
    dry_run: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        load_dotenv_file: bool = True,
    ) -> Settings:
        """
        Build settings from environment variables.

        Args:
            environ: mapping to read from (defaults to os.environ)
            load_dotenv_file: load a `.env` file into os.environ first

        Raises:
            ConfigError: unknown network or unparseable numbers
        """
        if environ is None:
            if load_dotenv_file:
                load_dotenv()
            environ = os.environ

        network = get_env(environ, "NETWORK", "mainnet").lower()
        if network not in NETWORKS:
            raise ConfigError(
                f"Unknown network '{network}'. Available: {', '.join(NETWORKS)}"
            )

        default_price = get_env(environ, "DEFAULT_PRICE", DEFAULT_PRICE, Decimal)
        if default_price <= 0:
            raise ConfigError("DEFAULT_PRICE must be positive.")

        return cls(
            network=network,
            rpc_url=get_env(environ, "RPC_URL", NETWORKS[network]),
            slippage_pct=get_env(environ, "SLIPPAGE_PERCENTAGE", DEFAULT_SLIPPAGE_PCT, Decimal),
            default_price=default_price,
            gas_budget=get_env(environ, "GAS_BUDGET", DEFAULT_GAS_BUDGET_MIST, int),
            sui_gas_reserve=get_env(environ, "SUI_GAS_RESERVE", DEFAULT_GAS_RESERVE_MIST, int),
            package_id=get_env(environ, "MMT_PACKAGE_ID", MMT_PACKAGE_ID),
            version_id=get_env(environ, "MMT_VERSION_ID", MMT_VERSION_ID),
            private_key=get_env(environ, "PRIVATE_KEY"),
            mnemonic=get_env(environ, "MNEMONIC"),
            dry_run=get_env(environ, "DRY_RUN", False, str_to_bool),
            log_level=get_env(environ, "LOG_LEVEL", "INFO").upper(),
        )

    def explorer_tx_url(self, digest: str) -> str:
        return f"{EXPLORER_URL}/{self.network}/tx/{digest}"


def get_pool(name: str) -> Pool:
    """Look up a configured pool by name (case-insensitive)."""
    for pool_name, pool in POOLS.items():
        if pool_name.upper() == name.strip().upper():
            return pool
    raise ConfigError(f"Unknown pool '{name}'. Available: {', '.join(POOLS)}")


def get_token(symbol: str) -> Token:
    token = TOKENS.get(symbol.strip().upper())
    if token is None:
        raise ConfigError(f"Unknown token '{symbol}'. Available: {', '.join(TOKENS)}")
    return token
