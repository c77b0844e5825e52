"""
Round-trip execution state machine.

EXECUTION STATE CONTRACT:
=========================

States (PipelineState):
  IDLE      → pipeline created, nothing sent
  SWAP_1    → swapping the start token on venue A
  BRIDGE_1  → bridging the mid token A → B
  SWAP_2    → swapping back to the start token on venue B
  BRIDGE_2  → bridging the start token B → A
  COMPLETE  → round trip finished
  FAILED    → a stage failed after retries (absorbing)

Transitions are strictly forward, one stage at a time:
  IDLE → SWAP_1 → BRIDGE_1 → SWAP_2 → BRIDGE_2 → COMPLETE
  any non-terminal stage → FAILED

=========================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from core.exceptions import InvalidTransitionError


class PipelineState(str, Enum):
    """Pipeline execution states."""
    IDLE = "IDLE"
    SWAP_1 = "SWAP_1"
    BRIDGE_1 = "BRIDGE_1"
    SWAP_2 = "SWAP_2"
    BRIDGE_2 = "BRIDGE_2"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


# Stage order for a round trip
STAGES: tuple[PipelineState, ...] = (
    PipelineState.SWAP_1,
    PipelineState.BRIDGE_1,
    PipelineState.SWAP_2,
    PipelineState.BRIDGE_2,
)

VALID_TRANSITIONS: Dict[PipelineState, List[PipelineState]] = {
    PipelineState.IDLE: [PipelineState.SWAP_1, PipelineState.FAILED],
    PipelineState.SWAP_1: [PipelineState.BRIDGE_1, PipelineState.FAILED],
    PipelineState.BRIDGE_1: [PipelineState.SWAP_2, PipelineState.FAILED],
    PipelineState.SWAP_2: [PipelineState.BRIDGE_2, PipelineState.FAILED],
    PipelineState.BRIDGE_2: [PipelineState.COMPLETE, PipelineState.FAILED],
    PipelineState.COMPLETE: [],  # Terminal state
    PipelineState.FAILED: [],  # Terminal state
}


@dataclass
class StateTransition:
    """Record of a state transition."""
    from_state: PipelineState
    to_state: PipelineState
    timestamp: str = ""
    reason: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "timestamp": self.timestamp,
            "reason": self.reason,
            "metadata": self.metadata,
        }


@dataclass
class PipelineStateMachine:
    """
    Tracks the current stage of one round trip and its transition history.
    """
    run_id: str
    state: PipelineState = PipelineState.IDLE
    history: List[StateTransition] = field(default_factory=list)

    def can_transition_to(self, new_state: PipelineState) -> bool:
        return new_state in VALID_TRANSITIONS.get(self.state, [])

    def transition_to(
        self,
        new_state: PipelineState,
        reason: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> StateTransition:
        """
        Move to new_state.

        Raises InvalidTransitionError if the transition is not allowed.
        """
        if not self.can_transition_to(new_state):
            raise InvalidTransitionError(
                f"Cannot transition from {self.state.value} to {new_state.value}. "
                f"Valid transitions: {[s.value for s in VALID_TRANSITIONS.get(self.state, [])]}",
                details={"run_id": self.run_id},
            )

        transition = StateTransition(
            from_state=self.state,
            to_state=new_state,
            reason=reason,
            metadata=metadata or {},
        )
        self.history.append(transition)
        self.state = new_state
        return transition

    def fail(self, reason: str, metadata: Optional[Dict[str, Any]] = None) -> StateTransition:
        return self.transition_to(PipelineState.FAILED, reason=reason, metadata=metadata)

    @property
    def is_terminal(self) -> bool:
        return len(VALID_TRANSITIONS.get(self.state, [])) == 0

    @property
    def is_success(self) -> bool:
        return self.state == PipelineState.COMPLETE

    @property
    def is_failed(self) -> bool:
        return self.state == PipelineState.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "state": self.state.value,
            "is_terminal": self.is_terminal,
            "is_success": self.is_success,
            "history": [t.to_dict() for t in self.history],
        }
