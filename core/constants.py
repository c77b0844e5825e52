"""
core/constants.py - Enums, defaults, and constants.

Only truly constant values here. Config values go to config/*.yaml
"""

from decimal import Decimal
from enum import Enum
from typing import Final


# =============================================================================
# FIXED POINT
# =============================================================================

# Uniswap V3 style sqrt price: sqrt(token1/token0) * 2**96
Q96: Final[int] = 2**96
Q192: Final[int] = 2**192

# slot0().sqrtPriceX96 is a uint160
MAX_UINT160: Final[int] = 2**160 - 1

# ERC20 decimals() is a uint8
MAX_TOKEN_DECIMALS: Final[int] = 255


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_POLL_INTERVAL_SECONDS = 10
DEFAULT_PROFIT_THRESHOLD = Decimal("0.01")
DEFAULT_START_AMOUNT = Decimal("10")
DEFAULT_MIN_AMOUNT_OUT_FACTOR = Decimal("0.995")

# Mock swap slippage (5 bps)
DEFAULT_SIMULATED_SLIPPAGE = Decimal("0.0005")

# Slippage bound handed to live swaps
DEFAULT_LIVE_SLIPPAGE_BOUND = Decimal("0.001")

# Live retry policy
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE_SECONDS = 1.0

UNKNOWN_SYMBOL = "UNKNOWN"


class ExecutionMode(str, Enum):
    """How pipeline legs are resolved."""
    SIMULATED = "SIMULATED"
    LIVE = "LIVE"


class LegKind(str, Enum):
    """Execution leg kind."""
    SWAP = "SWAP"
    BRIDGE = "BRIDGE"


class BridgeProvider(str, Enum):
    """Bridge abstractions. USDT moves over Stargate, USDC over CCIP."""
    CCIP = "CCIP"
    STARGATE = "STARGATE"


# Which bridge carries which stablecoin, independent of direction
BRIDGE_FOR_TOKEN: Final[dict[str, BridgeProvider]] = {
    "USDC": BridgeProvider.CCIP,
    "USDT": BridgeProvider.STARGATE,
}


class ErrorCode(str, Enum):
    """Error codes carried by ArbError subclasses."""
    # Infra
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"

    # Market data
    PRICE_FETCH_FAILED = "PRICE_FETCH_FAILED"
    DECIMALS_FETCH_FAILED = "DECIMALS_FETCH_FAILED"
    DECODE_FAILED = "DECODE_FAILED"

    # Arithmetic
    ZERO_PRICE = "ZERO_PRICE"
    MALFORMED_SQRT_PRICE = "MALFORMED_SQRT_PRICE"
    INVALID_DECIMALS = "INVALID_DECIMALS"

    # Validation / config
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"

    # Execution
    EXECUTION_STAGE_FAILED = "EXECUTION_STAGE_FAILED"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    UNKNOWN = "UNKNOWN"
