"""
Four-stage round-trip execution pipeline.

  SWAP_1    start token -> mid token on venue A (chain A)
  BRIDGE_1  mid token chain A -> chain B (Stargate for USDT, CCIP for USDC)
  SWAP_2    mid token -> start token on venue B (chain B)
  BRIDGE_2  start token chain B -> chain A

Stages run strictly in order, each consuming the previous stage's output.
A failing stage moves the run to FAILED and raises ExecutionStageError with
the amount stranded at that point. Nothing is unwound.
"""

import uuid
from decimal import Decimal
from typing import Mapping, Optional

from core.constants import BRIDGE_FOR_TOKEN, ExecutionMode, LegKind
from core.exceptions import ExecutionStageError
from core.logging import get_logger, log_error
from core.math import format_amount
from core.models import ExecutionLeg, ExecutionReport, LegFill, PoolQuote
from execution.journal import ExecutionJournal
from execution.legs import LegExecutor, LiveLegExecutor, SimulatedLegExecutor
from execution.state_machine import STAGES, PipelineState, PipelineStateMachine
from strategy.config import ArbConfig
from strategy.evaluator import ArbDirection

logger = get_logger(__name__)


def build_route(direction: ArbDirection, config: ArbConfig) -> list[ExecutionLeg]:
    """Lay out the four legs of a direction, in stage order."""
    chain_a = config.venue_a.chain
    chain_b = config.venue_b.chain
    start = direction.start_symbol
    mid = direction.mid_symbol

    def bridge_leg(stage: PipelineState, symbol: str, from_chain: str, to_chain: str) -> ExecutionLeg:
        provider = BRIDGE_FOR_TOKEN[symbol]
        return ExecutionLeg(
            kind=LegKind.BRIDGE,
            stage=stage.value,
            from_token=config.token_address(from_chain, symbol),
            to_token=config.token_address(to_chain, symbol),
            from_chain=from_chain,
            to_chain=to_chain,
            from_symbol=symbol,
            to_symbol=symbol,
            provider=provider,
            router=config.bridges[provider].router,
        )

    return [
        ExecutionLeg(
            kind=LegKind.SWAP,
            stage=PipelineState.SWAP_1.value,
            from_token=config.token_address(chain_a, start),
            to_token=config.token_address(chain_a, mid),
            from_chain=chain_a,
            to_chain=chain_a,
            from_symbol=start,
            to_symbol=mid,
            venue=config.venue_a.name,
            router=config.venue_a.router,
        ),
        bridge_leg(PipelineState.BRIDGE_1, mid, chain_a, chain_b),
        ExecutionLeg(
            kind=LegKind.SWAP,
            stage=PipelineState.SWAP_2.value,
            from_token=config.token_address(chain_b, mid),
            to_token=config.token_address(chain_b, start),
            from_chain=chain_b,
            to_chain=chain_b,
            from_symbol=mid,
            to_symbol=start,
            venue=config.venue_b.name,
            router=config.venue_b.router,
        ),
        bridge_leg(PipelineState.BRIDGE_2, start, chain_b, chain_a),
    ]


class ExecutionPipeline:
    """
    Drives one direction through SWAP_1 .. BRIDGE_2.

    Usage:
        pipeline = ExecutionPipeline(config)
        report = await pipeline.run(direction, pool_a, pool_b)
    """

    def __init__(
        self,
        config: ArbConfig,
        journal: Optional[ExecutionJournal] = None,
        executors: Optional[Mapping[ExecutionMode, LegExecutor]] = None,
    ):
        self.config = config
        self.journal = journal or ExecutionJournal(config.journal_path)
        if executors is None:
            executors = {
                ExecutionMode.SIMULATED: SimulatedLegExecutor(config, self.journal),
                ExecutionMode.LIVE: LiveLegExecutor(config, self.journal),
            }
        self.executors = dict(executors)
        self.last_machine: Optional[PipelineStateMachine] = None

    def select_executor(self) -> LegExecutor:
        """Pick the leg strategy for this run from the execution mode."""
        return self.executors[self.config.execution_mode]

    async def run(
        self,
        direction: ArbDirection,
        pool_a: PoolQuote,
        pool_b: PoolQuote,
    ) -> ExecutionReport:
        """
        Execute a round trip.

        Raises:
            ExecutionStageError: if any leg fails (after retries, in live mode)
        """
        executor = self.select_executor()
        machine = PipelineStateMachine(run_id=uuid.uuid4().hex[:12])
        self.last_machine = machine

        if executor.mode == ExecutionMode.SIMULATED:
            logger.info(
                "[DRY RUN] All swaps and bridges are simulated. "
                "Set LIVE_MODE=true for real execution."
            )

        route = build_route(direction, self.config)
        pools = {PipelineState.SWAP_1: pool_a, PipelineState.SWAP_2: pool_b}

        amount: Decimal = self.config.start_amount
        fills: list[LegFill] = []

        for stage, leg in zip(STAGES, route):
            machine.transition_to(stage, metadata={"amount_in": str(amount)})
            try:
                if leg.is_swap:
                    fill = await executor.swap(leg, amount, pools[stage])
                else:
                    fill = await executor.bridge(leg, amount)
            except Exception as e:
                machine.fail(reason=str(e), metadata={"stranded_amount": str(amount)})
                error = ExecutionStageError(
                    stage=stage.value,
                    stranded_amount=amount,
                    stranded_token=leg.from_symbol,
                    chain=leg.from_chain,
                    cause=e,
                )
                error.details["run_id"] = machine.run_id
                log_error(
                    logger,
                    error.code.value,
                    error.message,
                    run_id=machine.run_id,
                    direction=direction.label,
                    stage=stage.value,
                )
                self.journal.append(f"[EXECUTION][{direction.start_symbol}] FAILED: {error.message}")
                raise error from e

            fills.append(fill)
            amount = fill.amount_out

        machine.transition_to(PipelineState.COMPLETE)

        report = ExecutionReport(
            run_id=machine.run_id,
            direction_label=direction.label,
            start_token=direction.start_symbol,
            start_amount=self.config.start_amount,
            final_amount=amount,
            fills=fills,
            history=[t.to_dict() for t in machine.history],
        )

        summary = (
            f"[EXECUTION][{direction.start_symbol}] Round-trip complete. "
            f"Started with {report.start_amount} {direction.start_symbol}, "
            f"ended with {report.final_amount} {direction.start_symbol}. "
            f"Net profit: {format_amount(report.profit)} {direction.start_symbol}."
        )
        logger.info(summary, extra={"context": {"run_id": machine.run_id, "mode": executor.mode.value}})
        self.journal.append(summary)

        return report
