"""
strategy/evaluator.py - Opportunity evaluation.

Each cycle both round-trip orientations are simulated against the same two
pool quotes:

  1. USDC (A) -> USDT (pool A) -> bridge USDT -> USDC (pool B) -> bridge USDC
  2. USDT (A) -> USDC (pool A) -> bridge USDC -> USDT (pool B) -> bridge USDT

SELECTION CONTRACT:
  Directions are checked in the fixed order above and the FIRST one whose
  profit is strictly above the threshold is chosen, even if a later one is
  more profitable. At most one direction is executed per cycle.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from core.constants import UNKNOWN_SYMBOL
from core.logging import get_logger, log_direction
from core.math import format_amount
from core.models import DirectionInput, DirectionResult, PoolQuote
from strategy.config import ArbConfig
from strategy.simulator import simulate_direction

logger = get_logger(__name__)


@dataclass(frozen=True)
class ArbDirection:
    """
    One round-trip orientation.

    start_symbol is held at the beginning and end; mid_symbol is the token
    in flight across the first bridge.
    """
    label: str
    start_symbol: str
    mid_symbol: str


USDC_FIRST = ArbDirection(label="USDC→USDT→USDC", start_symbol="USDC", mid_symbol="USDT")
USDT_FIRST = ArbDirection(label="USDT→USDC→USDT", start_symbol="USDT", mid_symbol="USDC")

# Evaluation order is part of the selection contract
DIRECTIONS: tuple[ArbDirection, ...] = (USDC_FIRST, USDT_FIRST)


@dataclass(frozen=True)
class Candidate:
    """A direction paired with its simulated result."""
    direction: ArbDirection
    result: DirectionResult


@dataclass
class Evaluation:
    """Outcome of one evaluation cycle."""
    candidates: List[Candidate] = field(default_factory=list)
    selected: Optional[Candidate] = None

    @property
    def has_opportunity(self) -> bool:
        return self.selected is not None


def select_first_profitable(
    candidates: Sequence[Candidate],
    threshold: Decimal,
) -> Optional[Candidate]:
    """Return the first candidate with profit > threshold, or None."""
    for candidate in candidates:
        if candidate.result.profit > threshold:
            return candidate
    return None


def format_results_table(candidates: Sequence[Candidate]) -> str:
    """Fixed-width table of start, end and profit per direction."""
    rows = [f"{'Direction':<18} {'Start':>14} {'End':>14} {'Net profit':>14}"]
    for c in candidates:
        r = c.result
        rows.append(
            f"{r.direction_label:<18} {format_amount(r.start_amount):>14} "
            f"{format_amount(r.final_amount):>14} {format_amount(r.profit):>14}"
        )
    return "\n".join(rows)


def describe_pool(label: str, pool: PoolQuote, config: ArbConfig) -> str:
    """Human description of a pool's token order and price orientation."""
    symbol0 = config.symbol_for(pool.token0)
    symbol1 = config.symbol_for(pool.token1)
    if symbol0 != UNKNOWN_SYMBOL and symbol1 != UNKNOWN_SYMBOL:
        orientation = f"{symbol1} per {symbol0}"
    else:
        orientation = "unknown token order"
    return (
        f"{label} pool: token0={pool.token0} ({symbol0}) "
        f"token1={pool.token1} ({symbol1}) price={pool.price} {orientation}"
    )


class OpportunityEvaluator:
    """
    Simulates every direction and picks the one to execute.

    Usage:
        evaluator = OpportunityEvaluator(config)
        evaluation = evaluator.evaluate(pool_a, pool_b)
        if evaluation.has_opportunity:
            ...
    """

    def __init__(
        self,
        config: ArbConfig,
        directions: Sequence[ArbDirection] = DIRECTIONS,
    ):
        self.config = config
        self.directions = tuple(directions)

    def build_input(
        self,
        direction: ArbDirection,
        pool_a: PoolQuote,
        pool_b: PoolQuote,
    ) -> DirectionInput:
        """
        Assemble the simulator input for a direction.

        The first bridge carries mid_symbol, the second carries start_symbol,
        so each leg pays the cost of the bridge used for that token.
        """
        config = self.config
        return DirectionInput(
            start_amount=config.start_amount,
            pool_a=pool_a,
            pool_b=pool_b,
            swap_fee_a=config.venue_a.swap_fee,
            swap_fee_b=config.venue_b.swap_fee,
            bridge_cost_a=config.bridge_cost(direction.mid_symbol),
            bridge_cost_b=config.bridge_cost(direction.start_symbol),
            direction_label=direction.label,
            token_in=config.token_address(config.venue_a.chain, direction.start_symbol),
            token_out=config.token_address(config.venue_b.chain, direction.start_symbol),
            min_amount_out_factor=config.min_amount_out_factor,
        )

    def evaluate(self, pool_a: PoolQuote, pool_b: PoolQuote) -> Evaluation:
        """Simulate all directions in order and select per the contract."""
        logger.info(describe_pool(self.config.venue_a.name, pool_a, self.config))
        logger.info(describe_pool(self.config.venue_b.name, pool_b, self.config))

        for pool in (pool_a, pool_b):
            known = [t for t in (pool.token0, pool.token1) if self.config.symbol_for(t) != UNKNOWN_SYMBOL]
            if len(known) < 2:
                logger.warning(
                    "Pool tokens not fully recognised; swap orientation falls back to token1 side",
                    extra={"context": {"pool": pool.pool_address, "chain": pool.chain}},
                )

        symbols = self.config.symbols
        evaluation = Evaluation()
        for direction in self.directions:
            result = simulate_direction(self.build_input(direction, pool_a, pool_b), symbols)
            evaluation.candidates.append(Candidate(direction=direction, result=result))
            log_direction(
                logger,
                direction_label=result.direction_label,
                start_amount=f"{format_amount(result.start_amount)} {result.token_in_symbol}",
                final_amount=f"{format_amount(result.final_amount)} {result.token_out_symbol}",
                profit=f"{format_amount(result.profit)} {result.token_out_symbol}",
            )

        logger.info("Simulation results\n" + format_results_table(evaluation.candidates))

        evaluation.selected = select_first_profitable(
            evaluation.candidates, self.config.profit_threshold
        )

        if evaluation.selected is None:
            logger.info(
                "No profitable arbitrage opportunity found",
                extra={"context": {"threshold": str(self.config.profit_threshold)}},
            )
        else:
            selected = evaluation.selected
            position = self.directions.index(selected.direction) + 1
            logger.info(
                f"Profitable opportunity in direction {position}: {selected.direction.label} "
                f"(profit {format_amount(selected.result.profit)} {selected.direction.start_symbol})",
                extra={"context": selected.result.to_dict()},
            )

        return evaluation

