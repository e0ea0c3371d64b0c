"""Per-call state machine for the diversification pipeline."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class PipelineState(Enum):
    """Diversification pipeline states.

    State transitions:
        STARTED -> HISTORY_LOADED: Recent history fetched
        HISTORY_LOADED -> SCORED: Diversity and freshness boosts computed
        SCORED -> ECHO_CHAMBER_ADJUSTED: Echo chamber prevention applied
        SCORED | ECHO_CHAMBER_ADJUSTED -> BALANCED: Content quotas applied
        SCORED | ECHO_CHAMBER_ADJUSTED | BALANCED -> RANKED: Final sort and cut
        RANKED -> COMPLETED: Metrics and recommendations produced
        Any non-terminal -> FAILED: An error occurred
    """

    STARTED = auto()
    HISTORY_LOADED = auto()
    SCORED = auto()
    ECHO_CHAMBER_ADJUSTED = auto()
    BALANCED = auto()
    RANKED = auto()
    COMPLETED = auto()
    FAILED = auto()


class PipelineStateTransitionError(Exception):
    """Raised when an invalid pipeline state transition is attempted."""

    def __init__(self, from_state: PipelineState, to_state: PipelineState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid pipeline transition: {from_state.name} -> {to_state.name}"
        )


class PipelineStateMachine:
    """Tracks the progress of one diversification call.

    Args:
        user_id: User the call is for, used in logs.
    """

    VALID_TRANSITIONS: ClassVar[dict[PipelineState, set[PipelineState]]] = {
        PipelineState.STARTED: {PipelineState.HISTORY_LOADED, PipelineState.FAILED},
        PipelineState.HISTORY_LOADED: {PipelineState.SCORED, PipelineState.FAILED},
        PipelineState.SCORED: {
            PipelineState.ECHO_CHAMBER_ADJUSTED,
            PipelineState.BALANCED,
            PipelineState.RANKED,
            PipelineState.FAILED,
        },
        PipelineState.ECHO_CHAMBER_ADJUSTED: {
            PipelineState.BALANCED,
            PipelineState.RANKED,
            PipelineState.FAILED,
        },
        PipelineState.BALANCED: {PipelineState.RANKED, PipelineState.FAILED},
        PipelineState.RANKED: {PipelineState.COMPLETED, PipelineState.FAILED},
        PipelineState.COMPLETED: set(),
        PipelineState.FAILED: set(),
    }

    def __init__(self, user_id: str = "") -> None:
        self._state = PipelineState.STARTED
        self._history: list[PipelineState] = [PipelineState.STARTED]
        self._log = logger.bind(
            component="orchestrator", subcomponent="state_machine", user_id=user_id
        )

    @property
    def state(self) -> PipelineState:
        """Get the current state."""
        return self._state

    @property
    def history(self) -> list[PipelineState]:
        """States visited so far, in order."""
        return list(self._history)

    def can_transition(self, to_state: PipelineState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: PipelineState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            PipelineStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            raise PipelineStateTransitionError(self._state, to_state)
        self._log.debug(
            "state_transition", from_state=self._state.name, to_state=to_state.name
        )
        self._state = to_state
        self._history.append(to_state)

    def fail(self) -> None:
        """Move to FAILED unless the pipeline already finished."""
        if self.can_transition(PipelineState.FAILED):
            self.transition(PipelineState.FAILED)

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return self._state in (PipelineState.COMPLETED, PipelineState.FAILED)
