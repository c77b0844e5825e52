"""
Strategy package: configuration, direction simulation, opportunity evaluation.

The polling loop lives in strategy.scheduler and is imported directly to keep
this package free of execution-layer imports.
"""

from strategy.config import ArbConfig, load_arb_config
from strategy.evaluator import (
    DIRECTIONS,
    ArbDirection,
    Candidate,
    Evaluation,
    OpportunityEvaluator,
    select_first_profitable,
)
from strategy.simulator import simulate_direction

__all__ = [
    "ArbConfig",
    "load_arb_config",
    "DIRECTIONS",
    "ArbDirection",
    "Candidate",
    "Evaluation",
    "OpportunityEvaluator",
    "select_first_profitable",
    "simulate_direction",
]
