"""
Execution layer.

This module contains the execution layer components:
- state_machine: Round-trip stage machine with validated transitions
- legs: Simulated and live leg executors
- live: External swap/bridge collaborators
- retry: Bounded exponential-backoff retry
- journal: Append-only execution journal
- pipeline: Four-stage round-trip pipeline
"""

from execution.journal import ExecutionJournal
from execution.legs import LegExecutor, LiveLegExecutor, SimulatedLegExecutor
from execution.live import (
    CcipBridgeClient,
    LiveReceipt,
    RouterSwapClient,
    StargateBridgeClient,
)
from execution.pipeline import ExecutionPipeline, build_route
from execution.retry import RetryPolicy, retry_async
from execution.state_machine import (
    STAGES,
    VALID_TRANSITIONS,
    PipelineState,
    PipelineStateMachine,
    StateTransition,
)

__all__ = [
    # State machine
    "PipelineState",
    "PipelineStateMachine",
    "StateTransition",
    "STAGES",
    "VALID_TRANSITIONS",
    # Legs
    "LegExecutor",
    "LiveLegExecutor",
    "SimulatedLegExecutor",
    # Live collaborators
    "CcipBridgeClient",
    "LiveReceipt",
    "RouterSwapClient",
    "StargateBridgeClient",
    # Retry
    "RetryPolicy",
    "retry_async",
    # Journal / pipeline
    "ExecutionJournal",
    "ExecutionPipeline",
    "build_route",
]
