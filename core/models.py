"""
core/models.py - Core data models.

All monetary values are Decimal. NO FLOATS.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.constants import (
    DEFAULT_MIN_AMOUNT_OUT_FACTOR,
    BridgeProvider,
    LegKind,
)


def same_address(a: str, b: str) -> bool:
    """Case-insensitive address compare."""
    return a.lower() == b.lower()


@dataclass(frozen=True)
class PoolQuote:
    """
    Snapshot of a concentrated-liquidity pool for one polling cycle.

    price is token1 per token0, already scaled by token decimals.
    """
    token0: str
    token1: str
    price: Decimal
    pool_address: str = ""
    chain: str = ""
    decimals0: int = 6
    decimals1: int = 6
    sqrt_price_x96: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool_address": self.pool_address,
            "chain": self.chain,
            "token0": self.token0,
            "token1": self.token1,
            "price": str(self.price),
            "decimals0": self.decimals0,
            "decimals1": self.decimals1,
            "sqrt_price_x96": str(self.sqrt_price_x96),
        }


@dataclass(frozen=True)
class DirectionInput:
    """Everything needed to simulate one A -> B -> A round trip."""
    start_amount: Decimal
    pool_a: PoolQuote
    pool_b: PoolQuote
    swap_fee_a: Decimal
    swap_fee_b: Decimal
    bridge_cost_a: Decimal
    bridge_cost_b: Decimal
    direction_label: str
    token_in: str
    token_out: str
    min_amount_out_factor: Decimal = DEFAULT_MIN_AMOUNT_OUT_FACTOR


@dataclass(frozen=True)
class DirectionResult:
    """Simulated outcome of a round trip. profit may be negative."""
    direction_label: str
    start_amount: Decimal
    final_amount: Decimal
    profit: Decimal
    min_amount_out: Decimal
    token_in_symbol: str
    token_out_symbol: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction_label": self.direction_label,
            "start_amount": str(self.start_amount),
            "final_amount": str(self.final_amount),
            "profit": str(self.profit),
            "min_amount_out": str(self.min_amount_out),
            "token_in": self.token_in_symbol,
            "token_out": self.token_out_symbol,
        }


@dataclass(frozen=True)
class ExecutionLeg:
    """
    One step of the round trip.

    Swaps stay on from_chain (to_chain == from_chain) and name a venue;
    bridges move the same token across chains and name a provider.
    from_token/to_token are addresses on from_chain/to_chain.
    """
    kind: LegKind
    stage: str
    from_token: str
    to_token: str
    from_chain: str
    to_chain: str
    from_symbol: str
    to_symbol: str
    venue: str = ""
    provider: Optional[BridgeProvider] = None
    router: str = ""

    @property
    def is_swap(self) -> bool:
        return self.kind == LegKind.SWAP


@dataclass(frozen=True)
class LegFill:
    """Outcome of one executed leg."""
    stage: str
    amount_in: Decimal
    amount_out: Decimal
    tx_ref: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "amount_in": str(self.amount_in),
            "amount_out": str(self.amount_out),
            "tx_ref": self.tx_ref,
        }


@dataclass
class ExecutionReport:
    """Result of a completed pipeline run."""
    run_id: str
    direction_label: str
    start_token: str
    start_amount: Decimal
    final_amount: Decimal
    fills: List[LegFill] = field(default_factory=list)
    history: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def profit(self) -> Decimal:
        return self.final_amount - self.start_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "direction_label": self.direction_label,
            "start_token": self.start_token,
            "start_amount": str(self.start_amount),
            "final_amount": str(self.final_amount),
            "profit": str(self.profit),
            "fills": [f.to_dict() for f in self.fills],
            "history": self.history,
        }
