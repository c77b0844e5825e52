"""
Pytest configuration and fixtures for arbitrage bot tests.
"""

import sys
from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import DEFAULT_CONFIG_FILE, load_yaml  # noqa: E402
from core.models import PoolQuote  # noqa: E402
from strategy.config import parse_arb_config  # noqa: E402

USDC_AVAX = "0xB97EF9Ef8734C71904D8002F8b6Bc66Dd9c48a6E"
USDT_AVAX = "0xc7198437980c041c805A1EDcbA50c1Ce5db95118"
USDC_SONIC = "0x29219dd400f2Bf60E5a23d13Be72B486D4038894"
USDT_SONIC = "0x6047828dc181963ba44974801FF68e538dA5eaF9"


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture
def arb_config():
    """Bundled configuration, no env overrides, journal disabled."""
    return parse_arb_config(load_yaml(DEFAULT_CONFIG_FILE)).with_overrides(journal_path="")


@pytest.fixture
def free_bridges_config(arb_config):
    """Configuration with zero-cost bridges."""
    bridges = {p: replace(b, cost=Decimal("0")) for p, b in arb_config.bridges.items()}
    return arb_config.with_overrides(bridges=bridges)


def make_pool_a(price: str = "1.03") -> PoolQuote:
    """Avalanche pool, USDC is token0 (price = USDT per USDC)."""
    return PoolQuote(
        token0=USDC_AVAX,
        token1=USDT_AVAX,
        price=Decimal(price),
        pool_address="0x184b487c7e811f1d9734d49e78293e00b3768079",
        chain="avalanche",
    )


def make_pool_b(price: str = "1.0") -> PoolQuote:
    """Sonic pool, USDC is token0 (price = USDT per USDC)."""
    return PoolQuote(
        token0=USDC_SONIC,
        token1=USDT_SONIC,
        price=Decimal(price),
        pool_address="0x9053fe060f412ad5677f934f89e07524343ee8e7",
        chain="sonic",
    )


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()
