"""
strategy/scheduler.py - Polling loop.

Each cycle: fetch both pool quotes -> evaluate -> execute the selected
direction, if any. Cycles never overlap, and an exception anywhere in a
cycle is logged and counted without stopping the loop. stop() takes effect
at the next cycle boundary.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from core.exceptions import ArbError
from core.logging import get_logger, log_error
from core.models import ExecutionReport, PoolQuote
from core.time import elapsed_seconds, now_utc
from execution.pipeline import ExecutionPipeline
from strategy.config import ArbConfig
from strategy.evaluator import Evaluation, OpportunityEvaluator

logger = get_logger(__name__)

QuoteSource = Callable[[], Awaitable[tuple[PoolQuote, PoolQuote]]]


@dataclass
class CycleResult:
    """What happened in one polling cycle."""
    cycle: int
    evaluation: Optional[Evaluation] = None
    report: Optional[ExecutionReport] = None
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class SessionStats:
    """Running totals for a scheduler session."""
    started_at: datetime = field(default_factory=now_utc)
    cycles: int = 0
    failed_cycles: int = 0
    opportunities: int = 0
    executions: int = 0
    realized_profit: Decimal = Decimal("0")

    def record(self, result: CycleResult) -> None:
        self.cycles += 1
        if result.failed:
            self.failed_cycles += 1
        if result.evaluation is not None and result.evaluation.has_opportunity:
            self.opportunities += 1
        if result.report is not None:
            self.executions += 1
            self.realized_profit += result.report.profit

    def get_summary(self) -> dict:
        return {
            "session_start": self.started_at.isoformat(),
            "elapsed_seconds": elapsed_seconds(self.started_at),
            "cycles": self.cycles,
            "failed_cycles": self.failed_cycles,
            "opportunities": self.opportunities,
            "executions": self.executions,
            "realized_profit": str(self.realized_profit),
        }


class PollingScheduler:
    """
    Runs evaluation (and execution) on a fixed interval.

    Usage:
        scheduler = PollingScheduler(config, quote_source)
        await scheduler.run()
    """

    def __init__(
        self,
        config: ArbConfig,
        quote_source: QuoteSource,
        evaluator: Optional[OpportunityEvaluator] = None,
        pipeline: Optional[ExecutionPipeline] = None,
        interval_seconds: Optional[float] = None,
        summary_every: int = 10,
    ):
        self.config = config
        self.quote_source = quote_source
        self.evaluator = evaluator or OpportunityEvaluator(config)
        self.pipeline = pipeline or ExecutionPipeline(config)
        self.interval_seconds = (
            config.poll_interval_seconds if interval_seconds is None else interval_seconds
        )
        self.summary_every = summary_every
        self.stats = SessionStats()
        self._stop = asyncio.Event()

    def stop(self) -> None:
        """Request shutdown; the current cycle is allowed to finish."""
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    async def run_cycle(self) -> CycleResult:
        """Run one isolated cycle. Never raises."""
        result = CycleResult(cycle=self.stats.cycles + 1)
        try:
            pool_a, pool_b = await self.quote_source()
            result.evaluation = self.evaluator.evaluate(pool_a, pool_b)

            selected = result.evaluation.selected
            if selected is not None:
                result.report = await self.pipeline.run(selected.direction, pool_a, pool_b)
        except ArbError as e:
            result.error = e
            log_error(logger, e.code.value, f"Cycle {result.cycle} failed: {e.message}", **e.details)
        except Exception as e:
            result.error = e
            logger.error(
                f"Cycle {result.cycle} failed: {e}",
                extra={"context": {"error_class": type(e).__name__}},
                exc_info=True,
            )

        self.stats.record(result)
        return result

    async def _wait_interval(self) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            pass

    async def run(self, max_cycles: Optional[int] = None) -> SessionStats:
        """
        Poll until stop() is called or max_cycles cycles have run.

        Returns:
            Session statistics
        """
        if not self.config.is_live:
            logger.warning("Running in DRY RUN mode. No real swaps or bridges will be executed.")

        logger.info(
            "Scheduler started",
            extra={"context": {
                "interval_seconds": self.interval_seconds,
                "mode": self.config.execution_mode.value,
                "threshold": str(self.config.profit_threshold),
            }},
        )

        while not self.stopping:
            await self.run_cycle()

            if self.stats.cycles % self.summary_every == 0:
                logger.info("Session progress", extra={"context": self.stats.get_summary()})

            if max_cycles is not None and self.stats.cycles >= max_cycles:
                break

            await self._wait_interval()

        logger.info("Scheduler stopped", extra={"context": self.stats.get_summary()})
        return self.stats
