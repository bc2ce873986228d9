"""
Unit tests for configuration tables and Settings.from_env().
"""

from decimal import Decimal

import pytest

from sui_swapper.config import (
    DEFAULT_PRICE,
    NETWORKS,
    POOLS,
    ConfigError,
    Settings,
    get_env,
    get_pool,
    get_token,
    str_to_bool,
)


def test_defaults_from_empty_environment():
    settings = Settings.from_env({})
    assert settings.network == "mainnet"
    assert settings.rpc_url == NETWORKS["mainnet"]
    assert settings.slippage_pct == Decimal("0.1")
    assert settings.default_price == DEFAULT_PRICE == Decimal("1.0001")
    assert settings.dry_run is False
    assert settings.private_key is None
    assert settings.mnemonic is None
    assert settings.log_level == "INFO"


def test_values_read_from_environment():
    settings = Settings.from_env({
        "NETWORK": "Testnet",
        "SLIPPAGE_PERCENTAGE": "0.5",
        "GAS_BUDGET": "20000000",
        "DRY_RUN": "yes",
        "PRIVATE_KEY": "ab" * 32,
        "LOG_LEVEL": "debug",
    })
    assert settings.network == "testnet"
    assert settings.rpc_url == NETWORKS["testnet"]
    assert settings.slippage_pct == Decimal("0.5")
    assert settings.gas_budget == 20_000_000
    assert settings.dry_run is True
    assert settings.private_key == "ab" * 32
    assert settings.log_level == "DEBUG"


def test_rpc_url_override():
    settings = Settings.from_env({"RPC_URL": "http://localhost:9000"})
    assert settings.rpc_url == "http://localhost:9000"


def test_blank_values_are_missing():
    settings = Settings.from_env({"SLIPPAGE_PERCENTAGE": "  ", "PRIVATE_KEY": ""})
    assert settings.slippage_pct == Decimal("0.1")
    assert settings.private_key is None


def test_unknown_network_rejected():
    with pytest.raises(ConfigError, match="Unknown network"):
        Settings.from_env({"NETWORK": "localnet"})


@pytest.mark.parametrize(
    "env",
    [
        {"SLIPPAGE_PERCENTAGE": "lots"},
        {"GAS_BUDGET": "1.5"},
        {"DEFAULT_PRICE": "abc"},
    ],
)
def test_malformed_numbers_rejected(env):
    with pytest.raises(ConfigError, match="Invalid value"):
        Settings.from_env(env)


def test_default_price_must_be_positive():
    with pytest.raises(ConfigError, match="DEFAULT_PRICE"):
        Settings.from_env({"DEFAULT_PRICE": "0"})


def test_explorer_url_is_network_specific():
    assert Settings(network="testnet").explorer_tx_url("D1") == "https://suiscan.xyz/testnet/tx/D1"


def test_get_env_cast_and_default():
    assert get_env({"N": "5"}, "N", cast=int) == 5
    assert get_env({}, "N", 7, int) == 7


@pytest.mark.parametrize("raw, expected", [("1", True), ("TRUE", True), ("y", True), ("no", False), ("0", False)])
def test_str_to_bool(raw, expected):
    assert str_to_bool(raw) is expected


def test_pool_lookup_case_insensitive():
    assert get_pool("usdt-usdc") is POOLS["USDT-USDC"]
    with pytest.raises(ConfigError, match="Unknown pool"):
        get_pool("BTC-USDC")


def test_token_lookup():
    assert get_token("sui").decimals == 9
    with pytest.raises(ConfigError):
        get_token("BTC")


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        POOLS["NEW"] = POOLS["USDT-USDC"]
