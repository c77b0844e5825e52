"""
Live swap and bridge collaborators.

These are the seams where real transaction construction and broadcast plug
in. Amounts cross this boundary in token base units (int). The shipped
clients have no implementation and fail with NotImplementedOperationError.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from core.constants import BridgeProvider
from core.exceptions import NotImplementedOperationError


@dataclass(frozen=True)
class LiveReceipt:
    """What a live swap or bridge reports back."""
    amount_out: int
    tx_ref: str


class SwapClient(Protocol):
    async def execute_swap(
        self,
        router: str,
        from_token: str,
        to_token: str,
        amount_in: int,
        min_amount_out: int,
        slippage: Decimal,
        chain: str,
        signer: str,
    ) -> LiveReceipt:
        ...


class BridgeClient(Protocol):
    provider: BridgeProvider

    async def execute_bridge(
        self,
        from_chain: str,
        to_chain: str,
        amount: int,
        token: str,
        signer: str,
    ) -> LiveReceipt:
        ...


class RouterSwapClient:
    """Swap through a venue's router contract."""

    async def execute_swap(
        self,
        router: str,
        from_token: str,
        to_token: str,
        amount_in: int,
        min_amount_out: int,
        slippage: Decimal,
        chain: str,
        signer: str,
    ) -> LiveReceipt:
        raise NotImplementedOperationError(
            "live swap",
            details={"router": router, "chain": chain, "amount_in": amount_in},
        )


class CcipBridgeClient:
    """Chainlink CCIP token transfer (carries USDC)."""

    provider = BridgeProvider.CCIP

    async def execute_bridge(
        self,
        from_chain: str,
        to_chain: str,
        amount: int,
        token: str,
        signer: str,
    ) -> LiveReceipt:
        raise NotImplementedOperationError(
            "live CCIP bridge",
            details={"from_chain": from_chain, "to_chain": to_chain, "amount": amount},
        )


class StargateBridgeClient:
    """Stargate transfer (carries USDT)."""

    provider = BridgeProvider.STARGATE

    async def execute_bridge(
        self,
        from_chain: str,
        to_chain: str,
        amount: int,
        token: str,
        signer: str,
    ) -> LiveReceipt:
        raise NotImplementedOperationError(
            "live Stargate bridge",
            details={"from_chain": from_chain, "to_chain": to_chain, "amount": amount},
        )


def default_bridge_clients() -> dict[BridgeProvider, BridgeClient]:
    return {
        BridgeProvider.CCIP: CcipBridgeClient(),
        BridgeProvider.STARGATE: StargateBridgeClient(),
    }
