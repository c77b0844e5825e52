"""
core - Core utilities and models for the cross-chain arbitrage bot.

This package contains:
- models.py: Data models (PoolQuote, DirectionInput/Result, ExecutionLeg, LegFill)
- constants.py: Enums and constants
- exceptions.py: Typed exceptions with error codes
- math.py: Q96 price conversion, fee/slippage model (no float)
- time.py: Timestamp helpers
- logging.py: Structured JSON logging
"""

from core.constants import (
    BridgeProvider,
    ErrorCode,
    ExecutionMode,
    LegKind,
)
from core.exceptions import (
    ArbError,
    ArithmeticDomainError,
    ConfigError,
    ExecutionStageError,
    InfraError,
    InvalidTransitionError,
    NotImplementedOperationError,
    PriceFetchError,
    ValidationError,
)
from core.logging import get_logger, setup_logging
from core.math import (
    FeeModel,
    apply_fee,
    apply_slippage,
    price_from_sqrt_price_x96,
)
from core.models import (
    DirectionInput,
    DirectionResult,
    ExecutionLeg,
    ExecutionReport,
    LegFill,
    PoolQuote,
)

__all__ = [
    # Constants
    "BridgeProvider",
    "ErrorCode",
    "ExecutionMode",
    "LegKind",
    # Exceptions
    "ArbError",
    "ArithmeticDomainError",
    "ConfigError",
    "ExecutionStageError",
    "InfraError",
    "InvalidTransitionError",
    "NotImplementedOperationError",
    "PriceFetchError",
    "ValidationError",
    # Math
    "FeeModel",
    "apply_fee",
    "apply_slippage",
    "price_from_sqrt_price_x96",
    # Models
    "DirectionInput",
    "DirectionResult",
    "ExecutionLeg",
    "ExecutionReport",
    "LegFill",
    "PoolQuote",
    # Logging
    "get_logger",
    "setup_logging",
]
