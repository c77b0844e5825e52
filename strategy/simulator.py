"""
strategy/simulator.py - Round-trip direction simulator.

Composes swap A -> bridge -> swap B -> bridge back into a profit estimate.
Pure arithmetic, no I/O.

Swap orientation follows the pool's token order only: the pool price is
token1 per token0, so selling token0 multiplies and selling token1 divides.
There is no fallback when neither token matches.
"""

from decimal import Decimal
from typing import Mapping, Optional

from core.constants import UNKNOWN_SYMBOL
from core.math import apply_fee, divide_by_price
from core.models import DirectionInput, DirectionResult, same_address


def _symbol(address: str, symbols: Optional[Mapping[str, str]]) -> str:
    if not symbols:
        return UNKNOWN_SYMBOL
    return symbols.get(address.lower(), UNKNOWN_SYMBOL)


def simulate_direction(
    direction: DirectionInput,
    symbols: Optional[Mapping[str, str]] = None,
) -> DirectionResult:
    """
    Simulate one round trip.

    Args:
        direction: Fully specified round trip
        symbols: Lower-cased address -> symbol, used for reporting only

    Returns:
        DirectionResult; profit may be negative

    Raises:
        ArithmeticDomainError: if a pool price is zero
        ValidationError: if a swap fee is outside [0, 1)
    """
    start = direction.start_amount
    pool_a = direction.pool_a
    pool_b = direction.pool_b

    # Swap on pool A
    if same_address(pool_a.token0, direction.token_in):
        after_swap_a = apply_fee(start * pool_a.price, direction.swap_fee_a)
    else:
        after_swap_a = apply_fee(divide_by_price(start, pool_a.price), direction.swap_fee_a)

    # Bridge to chain B (not clamped at zero)
    after_bridge_a = after_swap_a - direction.bridge_cost_a

    # Swap on pool B back into the start token
    if same_address(pool_b.token0, direction.token_out):
        after_swap_b = apply_fee(divide_by_price(after_bridge_a, pool_b.price), direction.swap_fee_b)
    else:
        after_swap_b = apply_fee(after_bridge_a * pool_b.price, direction.swap_fee_b)

    # Bridge back to chain A
    final_amount = after_swap_b - direction.bridge_cost_b
    profit = final_amount - start

    # Reported for a downstream slippage guard; not applied to profit
    min_amount_out: Decimal = start * direction.min_amount_out_factor

    return DirectionResult(
        direction_label=direction.direction_label,
        start_amount=start,
        final_amount=final_amount,
        profit=profit,
        min_amount_out=min_amount_out,
        token_in_symbol=_symbol(direction.token_in, symbols),
        token_out_symbol=_symbol(direction.token_out, symbols),
    )
