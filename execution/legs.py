"""
Leg executors: how a single swap or bridge step is resolved.

SimulatedLegExecutor
  Deterministic mock fills. Swap output is computed from the pool price, the
  venue fee and a fixed slippage, truncated to token decimals; bridges wait a
  fixed delay and deduct the configured bridge cost. Never fails and never
  touches a live collaborator.

LiveLegExecutor
  Converts amounts to base units and delegates to SwapClient / BridgeClient,
  each call wrapped in retry_async.

The pipeline picks one of them per run from ArbConfig.execution_mode.
"""

import asyncio
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Awaitable, Callable, Mapping, Optional

from core.constants import BridgeProvider, ExecutionMode
from core.exceptions import ConfigError
from core.logging import get_logger, log_fill
from core.math import (
    FeeModel,
    divide_by_price,
    human_to_wei,
    truncate_to_decimals,
    wei_to_human,
)
from core.models import ExecutionLeg, LegFill, PoolQuote, same_address
from execution.journal import ExecutionJournal
from execution.live import (
    BridgeClient,
    RouterSwapClient,
    SwapClient,
    default_bridge_clients,
)
from execution.retry import RetryPolicy, retry_async
from strategy.config import ArbConfig

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class LegExecutor(ABC):
    """Resolves swap and bridge legs for one pipeline run."""

    mode: ExecutionMode

    def __init__(self, config: ArbConfig, journal: Optional[ExecutionJournal] = None):
        self.config = config
        self.journal = journal or ExecutionJournal(None)

    def _record(self, message: str) -> None:
        logger.info(message)
        self.journal.append(message)

    def _decimals(self, chain: str, symbol: str) -> int:
        return self.config.token(chain, symbol).decimals

    def _swap_fee(self, leg: ExecutionLeg) -> Decimal:
        for venue in (self.config.venue_a, self.config.venue_b):
            if venue.name == leg.venue:
                return venue.swap_fee
        raise ConfigError(
            f"Venue {leg.venue} not configured",
            details={"venue": leg.venue, "stage": leg.stage},
        )

    @abstractmethod
    async def swap(self, leg: ExecutionLeg, amount_in: Decimal, pool: PoolQuote) -> LegFill:
        ...

    @abstractmethod
    async def bridge(self, leg: ExecutionLeg, amount: Decimal) -> LegFill:
        ...


class SimulatedLegExecutor(LegExecutor):
    """Mock swaps and bridges."""

    mode = ExecutionMode.SIMULATED

    def __init__(
        self,
        config: ArbConfig,
        journal: Optional[ExecutionJournal] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(config, journal)
        self.fee_model = FeeModel(slippage=config.simulated_slippage)
        self._sleep = sleep

    async def swap(self, leg: ExecutionLeg, amount_in: Decimal, pool: PoolQuote) -> LegFill:
        decimals = self._decimals(leg.to_chain, leg.to_symbol)
        fee = self._swap_fee(leg)
        amount_in = truncate_to_decimals(amount_in, decimals)
        price = truncate_to_decimals(pool.price, decimals)

        if same_address(leg.from_token, leg.to_token):
            before_fee = amount_in
        elif same_address(leg.from_token, pool.token0):
            before_fee = truncate_to_decimals(amount_in * price, decimals)
        else:
            before_fee = truncate_to_decimals(divide_by_price(amount_in, price), decimals)

        after_fee = truncate_to_decimals(self.fee_model.apply_fee(before_fee, fee), decimals)
        slippage = truncate_to_decimals(after_fee * self.fee_model.slippage, decimals)
        amount_out = after_fee - slippage
        tx_ref = f"0xmock{leg.venue.lower()}{leg.stage.lower().replace('_', '')}"

        self._record(
            f"[SWAP][{leg.venue}] Swapping {amount_in} {leg.from_symbol} for {leg.to_symbol} "
            f"on {leg.from_chain} | Price: {pool.price}, Fee: {fee * 100}% | "
            f"Amount out (after fee, before slippage): {after_fee} | "
            f"Simulated slippage: {slippage} | Final amount out: {amount_out} | "
            f"Simulated tx hash: {tx_ref}"
        )
        return LegFill(stage=leg.stage, amount_in=amount_in, amount_out=amount_out, tx_ref=tx_ref)

    async def bridge(self, leg: ExecutionLeg, amount: Decimal) -> LegFill:
        bridge = self.config.bridges[leg.provider]
        name = "CCIP" if leg.provider == BridgeProvider.CCIP else "Stargate"

        self._record(
            f"[BRIDGE][{name}] Initiating {name} bridge for {amount} {leg.from_symbol} "
            f"from {leg.from_chain} to {leg.to_chain} | Simulated cost: ${bridge.cost}, "
            f"estimated time: {bridge.simulated_delay_seconds:g}s"
        )
        await self._sleep(bridge.simulated_delay_seconds)

        received = amount - bridge.cost
        self._record(
            f"[BRIDGE][{name}] Bridge complete: {received} {leg.to_symbol} received on {leg.to_chain}"
        )
        return LegFill(
            stage=leg.stage,
            amount_in=amount,
            amount_out=received,
            tx_ref=f"0xmock{name.lower()}",
        )


class LiveLegExecutor(LegExecutor):
    """Real swaps and bridges through external collaborators, with retry."""

    mode = ExecutionMode.LIVE

    def __init__(
        self,
        config: ArbConfig,
        journal: Optional[ExecutionJournal] = None,
        swap_client: Optional[SwapClient] = None,
        bridge_clients: Optional[Mapping[BridgeProvider, BridgeClient]] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(config, journal)
        self.swap_client = swap_client or RouterSwapClient()
        self.bridge_clients = dict(bridge_clients or default_bridge_clients())
        self.policy = RetryPolicy(
            max_retries=config.max_retries,
            backoff_base_seconds=config.backoff_base_seconds,
        )
        self._sleep = sleep

    async def swap(self, leg: ExecutionLeg, amount_in: Decimal, pool: PoolQuote) -> LegFill:
        amount_in_wei = human_to_wei(amount_in, self._decimals(leg.from_chain, leg.from_symbol))

        # TODO: pass DirectionResult.min_amount_out (in base units) once live swaps are implemented
        receipt = await retry_async(
            lambda: self.swap_client.execute_swap(
                router=leg.router,
                from_token=leg.from_token,
                to_token=leg.to_token,
                amount_in=amount_in_wei,
                min_amount_out=0,
                slippage=self.config.live_slippage_bound,
                chain=leg.from_chain,
                signer=self.config.signer,
            ),
            policy=self.policy,
            operation=f"swap {leg.stage} on {leg.venue}",
            sleep=self._sleep,
        )

        amount_out = wei_to_human(receipt.amount_out, self._decimals(leg.to_chain, leg.to_symbol))
        log_fill(logger, leg.stage, str(amount_in), str(amount_out), receipt.tx_ref, venue=leg.venue)
        self.journal.append(
            f"[SWAP][{leg.venue}] {amount_in} {leg.from_symbol} -> {amount_out} {leg.to_symbol} "
            f"on {leg.from_chain} tx {receipt.tx_ref}"
        )
        return LegFill(stage=leg.stage, amount_in=amount_in, amount_out=amount_out, tx_ref=receipt.tx_ref)

    async def bridge(self, leg: ExecutionLeg, amount: Decimal) -> LegFill:
        client = self.bridge_clients[leg.provider]
        amount_wei = human_to_wei(amount, self._decimals(leg.from_chain, leg.from_symbol))

        receipt = await retry_async(
            lambda: client.execute_bridge(
                from_chain=leg.from_chain,
                to_chain=leg.to_chain,
                amount=amount_wei,
                token=leg.from_token,
                signer=self.config.signer,
            ),
            policy=self.policy,
            operation=f"bridge {leg.stage} via {leg.provider.value}",
            sleep=self._sleep,
        )

        received = wei_to_human(receipt.amount_out, self._decimals(leg.to_chain, leg.to_symbol))
        log_fill(logger, leg.stage, str(amount), str(received), receipt.tx_ref, provider=leg.provider.value)
        self.journal.append(
            f"[BRIDGE][{leg.provider.value}] {amount} {leg.from_symbol} {leg.from_chain} -> "
            f"{received} {leg.to_symbol} {leg.to_chain} tx {receipt.tx_ref}"
        )
        return LegFill(stage=leg.stage, amount_in=amount, amount_out=received, tx_ref=receipt.tx_ref)
