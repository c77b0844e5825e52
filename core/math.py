"""
core/math.py - Mathematical utilities.

CRITICAL: No float allowed in pricing/amounts/PnL.
All monetary values use int (base units) or Decimal.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN

from core.constants import (
    DEFAULT_SIMULATED_SLIPPAGE,
    ErrorCode,
    MAX_TOKEN_DECIMALS,
    MAX_UINT160,
    Q192,
)
from core.exceptions import ArithmeticDomainError, ValidationError


# =============================================================================
# SQRT PRICE (Q96)
# =============================================================================

def _check_decimals(decimals: int, name: str) -> None:
    if not isinstance(decimals, int) or isinstance(decimals, bool):
        raise ArithmeticDomainError(
            f"{name} must be int, got {type(decimals).__name__}",
            code=ErrorCode.INVALID_DECIMALS,
            details={name: decimals},
        )
    if decimals < 0 or decimals > MAX_TOKEN_DECIMALS:
        raise ArithmeticDomainError(
            f"{name} out of range: {decimals}",
            code=ErrorCode.INVALID_DECIMALS,
            details={name: decimals},
        )


def price_from_sqrt_price_x96(
    sqrt_price_x96: int,
    decimals0: int = 6,
    decimals1: int = 6,
) -> Decimal:
    """
    Convert a pool's sqrtPriceX96 into a token1-per-token0 price.

    price = sqrtPriceX96**2 * 10**(decimals0 - decimals1) / 2**192

    The square and the decimal scaling stay in int (up to ~2**320 for a
    uint160 input); only the final division produces a Decimal. A negative
    decimal exponent scales the denominator instead of the numerator.

    Example: price_from_sqrt_price_x96(2**96, 6, 6) -> Decimal('1')
    """
    if not isinstance(sqrt_price_x96, int) or isinstance(sqrt_price_x96, bool):
        raise ArithmeticDomainError(
            f"sqrtPriceX96 must be int, got {type(sqrt_price_x96).__name__}",
            code=ErrorCode.MALFORMED_SQRT_PRICE,
        )
    if sqrt_price_x96 <= 0 or sqrt_price_x96 > MAX_UINT160:
        raise ArithmeticDomainError(
            f"sqrtPriceX96 out of range: {sqrt_price_x96}",
            code=ErrorCode.MALFORMED_SQRT_PRICE,
            details={"sqrt_price_x96": str(sqrt_price_x96)},
        )
    _check_decimals(decimals0, "decimals0")
    _check_decimals(decimals1, "decimals1")

    numerator = sqrt_price_x96 * sqrt_price_x96
    denominator = Q192
    exponent = decimals0 - decimals1
    if exponent >= 0:
        numerator *= 10**exponent
    else:
        denominator *= 10**(-exponent)

    return Decimal(numerator) / Decimal(denominator)


# =============================================================================
# FEES / SLIPPAGE
# =============================================================================

def apply_fee(amount: Decimal, fee: Decimal) -> Decimal:
    """
    Apply a proportional swap fee: amount * (1 - fee).

    Raises ValidationError unless 0 <= fee < 1.
    """
    if fee < 0 or fee >= 1:
        raise ValidationError(
            f"Fee fraction out of range [0, 1): {fee}",
            details={"fee": str(fee)},
        )
    return amount * (Decimal("1") - fee)


def apply_slippage(
    amount: Decimal,
    slippage: Decimal = DEFAULT_SIMULATED_SLIPPAGE,
) -> Decimal:
    """
    Apply simulated slippage: amount - amount * slippage.

    Negative slippage is a price improvement. Raises ValidationError
    if slippage >= 1.
    """
    if slippage >= 1:
        raise ValidationError(
            f"Slippage fraction must be < 1: {slippage}",
            details={"slippage": str(slippage)},
        )
    return amount - amount * slippage


@dataclass(frozen=True)
class FeeModel:
    """Swap fee followed by simulated slippage."""
    slippage: Decimal = DEFAULT_SIMULATED_SLIPPAGE

    def apply_fee(self, amount: Decimal, fee: Decimal) -> Decimal:
        return apply_fee(amount, fee)

    def apply_slippage(self, amount: Decimal) -> Decimal:
        return apply_slippage(amount, self.slippage)

    def fee_then_slippage(self, amount: Decimal, fee: Decimal) -> Decimal:
        return self.apply_slippage(self.apply_fee(amount, fee))


# =============================================================================
# TOKEN AMOUNT CONVERSIONS
# =============================================================================

def wei_to_human(wei: int, decimals: int) -> Decimal:
    """
    Convert base-unit amount to human-readable Decimal.

    Example: wei_to_human(1000000, 6) -> Decimal('1')  # 1 USDC
    """
    _check_decimals(decimals, "decimals")
    return Decimal(wei) / Decimal(10**decimals)


def human_to_wei(amount: Decimal | str, decimals: int) -> int:
    """
    Convert human-readable amount to base units (truncating).

    Example: human_to_wei('1.5', 6) -> 1500000
    """
    _check_decimals(decimals, "decimals")
    return int(safe_decimal(amount) * Decimal(10**decimals))


def truncate_to_decimals(amount: Decimal, decimals: int) -> Decimal:
    """Round an amount down to what a token with `decimals` can represent."""
    _check_decimals(decimals, "decimals")
    return amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)


def divide_by_price(amount: Decimal, price: Decimal) -> Decimal:
    """amount / price, with a zero price reported as ArithmeticDomainError."""
    if price == 0:
        raise ArithmeticDomainError(
            "Division by zero price",
            code=ErrorCode.ZERO_PRICE,
            details={"amount": str(amount)},
        )
    return amount / price


# =============================================================================
# SAFE CONVERSIONS (NO FLOAT)
# =============================================================================

def safe_decimal(value: int | str | Decimal) -> Decimal:
    """
    Safely convert value to Decimal.

    Raises ValidationError if float is passed or conversion fails.
    """
    if isinstance(value, float):
        raise ValidationError(
            "Float values are not allowed. Use int, str, or Decimal.",
            details={"value": value, "type": type(value).__name__},
        )

    try:
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(
            f"Cannot convert to Decimal: {value}",
            details={"value": value, "type": type(value).__name__, "error": str(e)},
        ) from e


def format_amount(amount: Decimal, places: int = 6) -> str:
    """Render an amount with fixed decimal places for logs."""
    return f"{amount:.{places}f}"
