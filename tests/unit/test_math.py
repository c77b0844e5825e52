"""
tests/unit/test_math.py - Tests for core/math.py

Critical tests for:
- sqrtPriceX96 -> price conversion
- Fee and slippage attenuation
- Base-unit conversions
- No-float enforcement
"""

import pytest
from decimal import Decimal

from core.constants import MAX_UINT160, Q96, ErrorCode
from core.exceptions import ArithmeticDomainError, ValidationError
from core.math import (
    FeeModel,
    apply_fee,
    apply_slippage,
    divide_by_price,
    human_to_wei,
    price_from_sqrt_price_x96,
    safe_decimal,
    truncate_to_decimals,
    wei_to_human,
)


class TestPriceFromSqrtPrice:
    """Q96 fixed point -> decimal price."""

    @pytest.mark.parametrize("decimals", [0, 6, 8, 18])
    def test_one_to_one_pool(self, decimals):
        """2**96 with equal decimals is exactly 1."""
        price = price_from_sqrt_price_x96(Q96, decimals, decimals)
        assert abs(price - Decimal("1")) < Decimal("1e-6")

    def test_default_decimals_are_six(self):
        assert price_from_sqrt_price_x96(Q96) == Decimal("1")

    def test_double_sqrt_price_quadruples_price(self):
        assert price_from_sqrt_price_x96(2 * Q96, 6, 6) == Decimal("4")

    def test_positive_decimal_exponent_scales_up(self):
        """decimals0 > decimals1 multiplies by 10**diff."""
        assert price_from_sqrt_price_x96(Q96, 18, 6) == Decimal(10**12)

    def test_negative_decimal_exponent_scales_down(self):
        """decimals0 < decimals1 divides instead of raising."""
        price = price_from_sqrt_price_x96(Q96, 6, 18)
        assert price == Decimal("1e-12")

    def test_realistic_weth_usdc_pool(self):
        """WETH(18)/USDC(6) at ~3000 USDC per WETH."""
        # sqrt(3000 * 10**6 / 10**18) * 2**96
        sqrt_price = 4339505179874779489431521
        price = price_from_sqrt_price_x96(sqrt_price, 18, 6)
        assert Decimal("2999") < price < Decimal("3001")

    def test_max_uint160_does_not_overflow(self):
        price = price_from_sqrt_price_x96(MAX_UINT160, 6, 6)
        assert price > 0

    @pytest.mark.parametrize("decimals0,decimals1", [(6, 6), (18, 6), (6, 18)])
    def test_monotonic_in_sqrt_price(self, decimals0, decimals1):
        inputs = [Q96 // 2, Q96 - 2**64, Q96, Q96 + 2**64, 3 * Q96]
        prices = [price_from_sqrt_price_x96(x, decimals0, decimals1) for x in inputs]
        assert prices == sorted(prices)
        assert len(set(prices)) == len(prices)

    @pytest.mark.parametrize("bad", [0, -1, MAX_UINT160 + 1])
    def test_rejects_out_of_range_sqrt_price(self, bad):
        with pytest.raises(ArithmeticDomainError) as exc_info:
            price_from_sqrt_price_x96(bad)
        assert exc_info.value.code == ErrorCode.MALFORMED_SQRT_PRICE

    def test_rejects_non_int_sqrt_price(self):
        with pytest.raises(ArithmeticDomainError):
            price_from_sqrt_price_x96(1.5)

    def test_rejects_bad_decimals(self):
        with pytest.raises(ArithmeticDomainError) as exc_info:
            price_from_sqrt_price_x96(Q96, -1, 6)
        assert exc_info.value.code == ErrorCode.INVALID_DECIMALS


class TestFeeModel:
    """Multiplicative fee and slippage attenuation."""

    def test_zero_fee_is_identity(self):
        assert apply_fee(Decimal("10"), Decimal("0")) == Decimal("10")

    def test_fee_attenuates(self):
        assert apply_fee(Decimal("10"), Decimal("0.0005")) == Decimal("9.995")

    def test_strictly_decreasing_in_fee(self):
        fees = [Decimal("0"), Decimal("0.0001"), Decimal("0.003"), Decimal("0.5"), Decimal("0.99")]
        outs = [apply_fee(Decimal("100"), f) for f in fees]
        assert all(a > b for a, b in zip(outs, outs[1:]))

    @pytest.mark.parametrize("fee", ["-0.01", "1", "1.5"])
    def test_rejects_fee_outside_unit_interval(self, fee):
        with pytest.raises(ValidationError):
            apply_fee(Decimal("10"), Decimal(fee))

    def test_default_slippage_is_five_bps(self):
        assert apply_slippage(Decimal("100")) == Decimal("99.95")

    def test_negative_slippage_is_improvement(self):
        assert apply_slippage(Decimal("100"), Decimal("-0.001")) == Decimal("100.1")

    def test_rejects_slippage_of_one(self):
        with pytest.raises(ValidationError):
            apply_slippage(Decimal("100"), Decimal("1"))

    def test_fee_then_slippage(self):
        model = FeeModel(slippage=Decimal("0.001"))
        # 100 * 0.99 = 99, then 99 - 0.099
        assert model.fee_then_slippage(Decimal("100"), Decimal("0.01")) == Decimal("98.901")


class TestConversions:
    def test_wei_to_human(self):
        assert wei_to_human(1_500_000, 6) == Decimal("1.5")

    def test_human_to_wei_truncates(self):
        assert human_to_wei("1.0000019", 6) == 1_000_001

    def test_truncate_rounds_down(self):
        assert truncate_to_decimals(Decimal("1.2345679"), 6) == Decimal("1.234567")

    def test_divide_by_zero_price(self):
        with pytest.raises(ArithmeticDomainError) as exc_info:
            divide_by_price(Decimal("10"), Decimal("0"))
        assert exc_info.value.code == ErrorCode.ZERO_PRICE


class TestNoFloatEnforcement:
    def test_safe_decimal_rejects_float(self):
        with pytest.raises(ValidationError) as exc_info:
            safe_decimal(1.5)
        assert "Float values are not allowed" in str(exc_info.value)

    def test_safe_decimal_accepts_str(self):
        assert safe_decimal("123.456") == Decimal("123.456")

    def test_safe_decimal_rejects_garbage(self):
        with pytest.raises(ValidationError):
            safe_decimal("not-a-number")
