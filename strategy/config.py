"""
strategy/config.py - Arbitrage configuration.

Built once at startup from config/arbitrage.yaml plus environment overrides,
then passed explicitly to the scheduler, evaluator and pipeline. The value is
frozen: nothing mutates it while the bot runs.
"""

import os
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from config import DEFAULT_CONFIG_FILE, load_yaml
from core.constants import (
    BRIDGE_FOR_TOKEN,
    DEFAULT_BACKOFF_BASE_SECONDS,
    DEFAULT_LIVE_SLIPPAGE_BOUND,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MIN_AMOUNT_OUT_FACTOR,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PROFIT_THRESHOLD,
    DEFAULT_SIMULATED_SLIPPAGE,
    DEFAULT_START_AMOUNT,
    UNKNOWN_SYMBOL,
    BridgeProvider,
    ExecutionMode,
)
from core.exceptions import ConfigError
from core.models import same_address


@dataclass(frozen=True)
class ChainConfig:
    """RPC access for one chain."""
    name: str
    chain_id: int
    rpc_urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class TokenConfig:
    """A stablecoin deployment on one chain."""
    symbol: str
    address: str
    decimals: int = 6


@dataclass(frozen=True)
class VenueConfig:
    """A DEX pool the round trip swaps through."""
    name: str
    chain: str
    pool_address: str
    router: str
    swap_fee: Decimal


@dataclass(frozen=True)
class BridgeConfig:
    """Bridge abstraction: router, flat cost, and simulated latency."""
    provider: BridgeProvider
    router: str
    cost: Decimal
    simulated_delay_seconds: float


@dataclass(frozen=True)
class ArbConfig:
    """Full arbitrage configuration."""

    venue_a: VenueConfig
    venue_b: VenueConfig
    chains: Mapping[str, ChainConfig]
    tokens: Mapping[str, Mapping[str, TokenConfig]]
    bridges: Mapping[BridgeProvider, BridgeConfig]

    start_amount: Decimal = DEFAULT_START_AMOUNT
    profit_threshold: Decimal = DEFAULT_PROFIT_THRESHOLD
    min_amount_out_factor: Decimal = DEFAULT_MIN_AMOUNT_OUT_FACTOR
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS

    execution_mode: ExecutionMode = ExecutionMode.SIMULATED
    simulated_slippage: Decimal = DEFAULT_SIMULATED_SLIPPAGE
    live_slippage_bound: Decimal = DEFAULT_LIVE_SLIPPAGE_BOUND
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS
    journal_path: str = "arb-bot.log"

    # Never logged
    signer: str = field(default="", repr=False)

    @property
    def is_live(self) -> bool:
        return self.execution_mode == ExecutionMode.LIVE

    def token(self, chain: str, symbol: str) -> TokenConfig:
        """Look up a token deployment, raising ConfigError if missing."""
        try:
            return self.tokens[chain][symbol]
        except KeyError:
            raise ConfigError(
                f"Token {symbol} not configured on {chain}",
                details={"chain": chain, "symbol": symbol},
            ) from None

    def token_address(self, chain: str, symbol: str) -> str:
        return self.token(chain, symbol).address

    def symbol_for(self, address: str) -> str:
        """Resolve a token address on any configured chain to its symbol."""
        for chain_tokens in self.tokens.values():
            for token in chain_tokens.values():
                if same_address(token.address, address):
                    return token.symbol
        return UNKNOWN_SYMBOL

    @property
    def symbols(self) -> dict[str, str]:
        """Lower-cased address -> symbol for every configured token."""
        return {
            token.address.lower(): token.symbol
            for chain_tokens in self.tokens.values()
            for token in chain_tokens.values()
        }

    def bridge_for(self, symbol: str) -> BridgeConfig:
        """USDT always moves over Stargate, USDC over CCIP."""
        if symbol not in BRIDGE_FOR_TOKEN:
            raise ConfigError(f"No bridge for token {symbol}", details={"symbol": symbol})
        return self.bridges[BRIDGE_FOR_TOKEN[symbol]]

    def bridge_cost(self, symbol: str) -> Decimal:
        return self.bridge_for(symbol).cost

    def with_overrides(self, **changes: Any) -> "ArbConfig":
        """Copy with some fields replaced (used by CLI flags)."""
        return replace(self, **changes)


# =============================================================================
# LOADING
# =============================================================================

def _decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigError(f"Invalid decimal for {name}: {value!r}", details={name: value}) from e


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _fraction(value: Decimal, name: str, upper_inclusive: bool = False) -> Decimal:
    too_high = value > 1 if upper_inclusive else value >= 1
    if value < 0 or too_high:
        raise ConfigError(f"{name} out of range: {value}", details={name: str(value)})
    return value


def _parse_venue(data: dict[str, Any], key: str) -> VenueConfig:
    if key not in data:
        raise ConfigError(f"Missing venue '{key}'")
    venue = data[key]
    return VenueConfig(
        name=venue.get("name", key),
        chain=venue["chain"],
        pool_address=venue["pool"],
        router=venue.get("router", "") or "",
        swap_fee=_fraction(_decimal(venue.get("swap_fee", "0"), f"{key}.swap_fee"), f"{key}.swap_fee"),
    )


def _apply_env(data: dict[str, Any], env: Mapping[str, str]) -> None:
    """Layer the legacy environment variables on top of the YAML values."""
    venues = data.setdefault("venues", {})
    bridges = data.setdefault("bridges", {})
    strategy = data.setdefault("strategy", {})
    execution = data.setdefault("execution", {})

    venue_env = {
        "a": ("PHARAOH_ROUTER", "PHARAOH_SWAP_FEE"),
        "b": ("SHADOW_ROUTER", "SHADOW_SWAP_FEE"),
    }
    for key, (router_var, fee_var) in venue_env.items():
        venue = venues.setdefault(key, {})
        if env.get(router_var):
            venue["router"] = env[router_var]
        if env.get(fee_var):
            venue["swap_fee"] = env[fee_var]

    bridge_env = {
        "CCIP": ("CCIP_ROUTER", "BRIDGE_COST_USDC"),
        "STARGATE": ("STARGATE_ROUTER", "BRIDGE_COST_USDT"),
    }
    for key, (router_var, cost_var) in bridge_env.items():
        bridge = bridges.setdefault(key, {})
        if env.get(router_var):
            bridge["router"] = env[router_var]
        if env.get(cost_var):
            bridge["cost"] = env[cost_var]

    if env.get("PROFIT_THRESHOLD"):
        strategy["profit_threshold"] = env["PROFIT_THRESHOLD"]
    if env.get("START_USDC"):
        strategy["start_amount"] = env["START_USDC"]
    if env.get("POLL_INTERVAL_SECONDS"):
        strategy["poll_interval_seconds"] = env["POLL_INTERVAL_SECONDS"]
    if "LIVE_MODE" in env:
        execution["live_mode"] = _env_bool(env["LIVE_MODE"])
    if env.get("ARB_LOG_FILE"):
        execution["journal_path"] = env["ARB_LOG_FILE"]


def parse_arb_config(data: dict[str, Any], signer: str = "") -> ArbConfig:
    """
    Build an ArbConfig from a parsed YAML dict.

    Raises:
        ConfigError: on missing sections or out-of-range values
    """
    try:
        chains = {
            name: ChainConfig(
                name=name,
                chain_id=int(chain["chain_id"]),
                rpc_urls=tuple(chain.get("rpc_urls", [])),
            )
            for name, chain in data.get("chains", {}).items()
        }

        tokens = {
            chain: {
                symbol: TokenConfig(
                    symbol=symbol,
                    address=token["address"],
                    decimals=int(token.get("decimals", 6)),
                )
                for symbol, token in chain_tokens.items()
            }
            for chain, chain_tokens in data.get("tokens", {}).items()
        }

        venues = data.get("venues", {})
        venue_a = _parse_venue(venues, "a")
        venue_b = _parse_venue(venues, "b")

        bridges = {}
        for provider in BridgeProvider:
            bridge = data.get("bridges", {}).get(provider.value, {})
            bridges[provider] = BridgeConfig(
                provider=provider,
                router=bridge.get("router", "") or "",
                cost=_decimal(bridge.get("cost", "0.1"), f"{provider.value}.cost"),
                simulated_delay_seconds=float(bridge.get("simulated_delay_seconds", 0)),
            )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Malformed configuration: {e}") from e

    for venue in (venue_a, venue_b):
        if venue.chain not in chains:
            raise ConfigError(
                f"Venue {venue.name} references unknown chain {venue.chain}",
                details={"venue": venue.name, "chain": venue.chain},
            )
    for bridge in bridges.values():
        if bridge.cost < 0:
            raise ConfigError(f"Negative bridge cost for {bridge.provider.value}")

    strategy = data.get("strategy", {})
    execution = data.get("execution", {})
    retry = execution.get("retry", {})

    max_retries = int(retry.get("max_retries", DEFAULT_MAX_RETRIES))
    if max_retries < 0:
        raise ConfigError(f"max_retries must be >= 0, got {max_retries}")

    start_amount = _decimal(strategy.get("start_amount", DEFAULT_START_AMOUNT), "start_amount")
    if start_amount <= 0:
        raise ConfigError(f"start_amount must be positive, got {start_amount}")

    return ArbConfig(
        venue_a=venue_a,
        venue_b=venue_b,
        chains=chains,
        tokens=tokens,
        bridges=bridges,
        start_amount=start_amount,
        profit_threshold=_decimal(
            strategy.get("profit_threshold", DEFAULT_PROFIT_THRESHOLD), "profit_threshold"
        ),
        min_amount_out_factor=_fraction(
            _decimal(
                strategy.get("min_amount_out_factor", DEFAULT_MIN_AMOUNT_OUT_FACTOR),
                "min_amount_out_factor",
            ),
            "min_amount_out_factor",
            upper_inclusive=True,
        ),
        poll_interval_seconds=float(
            strategy.get("poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS)
        ),
        execution_mode=(
            ExecutionMode.LIVE if execution.get("live_mode", False) else ExecutionMode.SIMULATED
        ),
        simulated_slippage=_decimal(
            execution.get("simulated_slippage", DEFAULT_SIMULATED_SLIPPAGE), "simulated_slippage"
        ),
        live_slippage_bound=_decimal(
            execution.get("live_slippage_bound", DEFAULT_LIVE_SLIPPAGE_BOUND), "live_slippage_bound"
        ),
        max_retries=max_retries,
        backoff_base_seconds=float(
            retry.get("backoff_base_seconds", DEFAULT_BACKOFF_BASE_SECONDS)
        ),
        journal_path=execution.get("journal_path", "arb-bot.log"),
        signer=signer,
    )


def load_arb_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ArbConfig:
    """
    Load arbitrage configuration from YAML with environment overrides.

    Args:
        config_path: Path to a YAML file (default: bundled config/arbitrage.yaml)
        env: Environment mapping (default: os.environ after loading .env)

    Returns:
        Frozen ArbConfig
    """
    if env is None:
        load_dotenv()
        env = os.environ

    try:
        data = load_yaml(config_path or DEFAULT_CONFIG_FILE)
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e

    _apply_env(data, env)
    return parse_arb_config(data, signer=env.get("PRIVATE_KEY", ""))
