"""
core/exceptions.py - Typed exceptions with error codes.

Every error raised by the bot derives from ArbError so the scheduler can
tell expected failures (logged as a failed cycle) from programming errors.
"""

from decimal import Decimal
from typing import Any, Optional

from core.constants import ErrorCode


class ArbError(Exception):
    """Base exception for the arbitrage bot."""

    default_code = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str = "",
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_class": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class InfraError(ArbError):
    """Infrastructure-related errors (RPC, timeouts)."""
    default_code = ErrorCode.INFRA_RPC_ERROR


class PriceFetchError(ArbError):
    """Pool state or token decimals could not be read."""
    default_code = ErrorCode.PRICE_FETCH_FAILED


class ArithmeticDomainError(ArbError):
    """Input outside the domain of a price/amount calculation."""
    default_code = ErrorCode.ZERO_PRICE


class ValidationError(ArbError):
    """Caller passed a value outside the documented range."""
    default_code = ErrorCode.VALIDATION_ERROR


class ConfigError(ArbError):
    """Configuration could not be loaded or is invalid."""
    default_code = ErrorCode.CONFIG_ERROR


class NotImplementedOperationError(ArbError):
    """Live operation has no real implementation yet."""

    default_code = ErrorCode.NOT_IMPLEMENTED

    def __init__(self, operation: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            f"{operation} not implemented",
            details={"operation": operation, **(details or {})},
        )
        self.operation = operation


class InvalidTransitionError(ArbError):
    """Pipeline state machine was asked for a transition it does not allow."""
    default_code = ErrorCode.INVALID_TRANSITION


class ExecutionStageError(ArbError):
    """
    A swap or bridge leg failed after retries were exhausted.

    Carries the failed stage and the amount left stranded there so the
    operator knows where the funds are. No compensation is attempted.
    """

    default_code = ErrorCode.EXECUTION_STAGE_FAILED

    def __init__(
        self,
        stage: str,
        stranded_amount: Decimal,
        stranded_token: str,
        chain: str,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(
            f"Stage {stage} failed with {stranded_amount} {stranded_token} "
            f"stranded on {chain}: {cause}",
            details={
                "stage": stage,
                "stranded_amount": str(stranded_amount),
                "stranded_token": stranded_token,
                "chain": chain,
                "cause": repr(cause) if cause is not None else None,
            },
        )
        self.stage = stage
        self.stranded_amount = stranded_amount
        self.stranded_token = stranded_token
        self.chain = chain
        self.cause = cause
