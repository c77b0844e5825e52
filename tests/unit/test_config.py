"""
tests/unit/test_config.py - Configuration loading and env overrides.
"""

import pytest
from decimal import Decimal

import yaml

from config import DEFAULT_CONFIG_FILE, load_yaml
from core.constants import BridgeProvider, ErrorCode, ExecutionMode
from core.exceptions import ConfigError
from strategy.config import load_arb_config, parse_arb_config


class TestBundledConfig:
    def test_loads_without_env(self):
        config = load_arb_config(env={})

        assert config.venue_a.name == "Pharaoh"
        assert config.venue_a.chain == "avalanche"
        assert config.venue_b.chain == "sonic"
        assert config.chains["sonic"].chain_id == 146
        assert config.start_amount == Decimal("10")
        assert config.profit_threshold == Decimal("0.01")
        assert config.execution_mode == ExecutionMode.SIMULATED
        assert config.max_retries == 3
        assert config.signer == ""

    def test_bridge_assignment(self):
        config = load_arb_config(env={})
        assert config.bridge_for("USDT").provider == BridgeProvider.STARGATE
        assert config.bridge_for("USDC").provider == BridgeProvider.CCIP
        assert config.bridges[BridgeProvider.STARGATE].simulated_delay_seconds == 7
        assert config.bridges[BridgeProvider.CCIP].simulated_delay_seconds == 5

    def test_token_addresses_differ_per_chain(self):
        config = load_arb_config(env={})
        assert config.token_address("avalanche", "USDC") != config.token_address("sonic", "USDC")
        assert config.symbol_for(config.token_address("sonic", "USDT").lower()) == "USDT"

    def test_unknown_token_raises(self):
        config = load_arb_config(env={})
        with pytest.raises(ConfigError):
            config.token("avalanche", "DAI")
        with pytest.raises(ConfigError):
            config.bridge_for("DAI")

    def test_signer_not_in_repr(self):
        config = load_arb_config(env={"PRIVATE_KEY": "0xsecret"})
        assert config.signer == "0xsecret"
        assert "0xsecret" not in repr(config)


class TestEnvOverrides:
    def test_numeric_overrides(self):
        config = load_arb_config(
            env={
                "PHARAOH_SWAP_FEE": "0.0003",
                "SHADOW_SWAP_FEE": "0.0004",
                "BRIDGE_COST_USDT": "0.25",
                "BRIDGE_COST_USDC": "0.05",
                "PROFIT_THRESHOLD": "0.5",
                "START_USDC": "250",
                "POLL_INTERVAL_SECONDS": "30",
            }
        )
        assert config.venue_a.swap_fee == Decimal("0.0003")
        assert config.venue_b.swap_fee == Decimal("0.0004")
        assert config.bridge_cost("USDT") == Decimal("0.25")
        assert config.bridge_cost("USDC") == Decimal("0.05")
        assert config.profit_threshold == Decimal("0.5")
        assert config.start_amount == Decimal("250")
        assert config.poll_interval_seconds == 30.0

    def test_router_overrides(self):
        config = load_arb_config(
            env={"SHADOW_ROUTER": "0xshadow", "CCIP_ROUTER": "0xccip", "STARGATE_ROUTER": "0xsg"}
        )
        assert config.venue_b.router == "0xshadow"
        assert config.bridges[BridgeProvider.CCIP].router == "0xccip"
        assert config.bridges[BridgeProvider.STARGATE].router == "0xsg"

    @pytest.mark.parametrize("value,expected", [
        ("true", ExecutionMode.LIVE),
        ("1", ExecutionMode.LIVE),
        ("false", ExecutionMode.SIMULATED),
        ("", ExecutionMode.SIMULATED),
    ])
    def test_live_mode(self, value, expected):
        assert load_arb_config(env={"LIVE_MODE": value}).execution_mode == expected

    def test_journal_path(self):
        assert load_arb_config(env={"ARB_LOG_FILE": "/tmp/x.log"}).journal_path == "/tmp/x.log"

    def test_with_overrides_returns_copy(self):
        config = load_arb_config(env={})
        changed = config.with_overrides(poll_interval_seconds=1.0)
        assert changed.poll_interval_seconds == 1.0
        assert config.poll_interval_seconds == 10.0


class TestValidation:
    @pytest.mark.parametrize("env", [
        {"PHARAOH_SWAP_FEE": "1"},
        {"SHADOW_SWAP_FEE": "-0.1"},
        {"START_USDC": "0"},
        {"PROFIT_THRESHOLD": "abc"},
        {"BRIDGE_COST_USDC": "-1"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigError) as exc_info:
            load_arb_config(env=env)
        assert exc_info.value.code == ErrorCode.CONFIG_ERROR

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_arb_config(tmp_path / "missing.yaml", env={})

    def test_missing_venue(self):
        data = load_yaml(DEFAULT_CONFIG_FILE)
        del data["venues"]["b"]
        with pytest.raises(ConfigError):
            parse_arb_config(data)

    def test_venue_on_unknown_chain(self):
        data = load_yaml(DEFAULT_CONFIG_FILE)
        data["venues"]["b"]["chain"] = "fantom"
        with pytest.raises(ConfigError) as exc_info:
            parse_arb_config(data)
        assert "unknown chain" in exc_info.value.message

    def test_retry_count(self):
        data = load_yaml(DEFAULT_CONFIG_FILE)
        data["execution"]["retry"]["max_retries"] = 0
        assert parse_arb_config(data).max_retries == 0

        data["execution"]["retry"]["max_retries"] = -1
        with pytest.raises(ConfigError):
            parse_arb_config(data)

    def test_custom_yaml(self, tmp_path):
        data = load_yaml(DEFAULT_CONFIG_FILE)
        data["strategy"]["start_amount"] = "42"
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")

        assert load_arb_config(path, env={}).start_amount == Decimal("42")
