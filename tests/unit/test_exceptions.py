"""
tests/unit/test_exceptions.py - Error codes and exception payloads.
"""

import pytest
from decimal import Decimal

from core.constants import ErrorCode
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


class TestErrorCodes:
    @pytest.mark.parametrize("cls,code", [
        (ArbError, ErrorCode.UNKNOWN),
        (InfraError, ErrorCode.INFRA_RPC_ERROR),
        (PriceFetchError, ErrorCode.PRICE_FETCH_FAILED),
        (ArithmeticDomainError, ErrorCode.ZERO_PRICE),
        (ValidationError, ErrorCode.VALIDATION_ERROR),
        (ConfigError, ErrorCode.CONFIG_ERROR),
        (InvalidTransitionError, ErrorCode.INVALID_TRANSITION),
    ])
    def test_default_codes(self, cls, code):
        assert cls("boom").code == code

    def test_explicit_code_wins(self):
        error = PriceFetchError("bad", code=ErrorCode.DECODE_FAILED)
        assert error.code == ErrorCode.DECODE_FAILED
        assert str(error) == "[DECODE_FAILED] bad"

    def test_to_dict(self):
        error = ConfigError("missing", details={"key": "venues"})
        assert error.to_dict() == {
            "error_class": "ConfigError",
            "code": "CONFIG_ERROR",
            "message": "missing",
            "details": {"key": "venues"},
        }

    def test_all_derive_from_arb_error(self):
        assert issubclass(ExecutionStageError, ArbError)
        assert issubclass(NotImplementedOperationError, ArbError)


class TestNotImplementedOperationError:
    def test_names_operation(self):
        error = NotImplementedOperationError("live CCIP bridge", details={"amount": 1})
        assert error.operation == "live CCIP bridge"
        assert error.message == "live CCIP bridge not implemented"
        assert error.code == ErrorCode.NOT_IMPLEMENTED
        assert error.details == {"operation": "live CCIP bridge", "amount": 1}


class TestExecutionStageError:
    def test_carries_stranded_position(self):
        cause = InfraError("rpc down")
        error = ExecutionStageError(
            stage="BRIDGE_1",
            stranded_amount=Decimal("10.25"),
            stranded_token="USDT",
            chain="avalanche",
            cause=cause,
        )

        assert error.stage == "BRIDGE_1"
        assert error.stranded_amount == Decimal("10.25")
        assert error.cause is cause
        assert "10.25 USDT stranded on avalanche" in error.message
        assert error.details["stranded_amount"] == "10.25"
        assert error.details["stage"] == "BRIDGE_1"
