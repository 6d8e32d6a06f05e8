"""Refresh cycle lifecycle state machine."""

from enum import Enum, auto
from typing import ClassVar

import structlog


logger = structlog.get_logger()


class CycleState(Enum):
    """Refresh cycle states.

    State transitions:
        CYCLE_STARTED -> FETCHING_RANKING: Begin fetching the ranked id list
        FETCHING_RANKING -> PROCESSING_ITEMS: Ranking stored, process each id
        PROCESSING_ITEMS -> FINALIZING: All ids handled, stamp and mirror
        FINALIZING -> CYCLE_FINISHED_SUCCESS: Cycle complete
        any non-terminal -> CYCLE_FINISHED_FAILURE: Failure at any stage
    """

    CYCLE_STARTED = auto()
    FETCHING_RANKING = auto()
    PROCESSING_ITEMS = auto()
    FINALIZING = auto()
    CYCLE_FINISHED_SUCCESS = auto()
    CYCLE_FINISHED_FAILURE = auto()


class CycleStateError(Exception):
    """Raised when an invalid cycle state transition is attempted."""

    def __init__(self, from_state: CycleState, to_state: CycleState) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid cycle state transition: {from_state.name} -> {to_state.name}"
        )


class CycleStateMachine:
    """State machine for one refresh cycle.

    Enforces valid state transitions and logs invariant violations
    when invalid transitions are attempted.
    """

    VALID_TRANSITIONS: ClassVar[dict[CycleState, set[CycleState]]] = {
        CycleState.CYCLE_STARTED: {
            CycleState.FETCHING_RANKING,
            CycleState.CYCLE_FINISHED_FAILURE,
        },
        CycleState.FETCHING_RANKING: {
            CycleState.PROCESSING_ITEMS,
            CycleState.CYCLE_FINISHED_FAILURE,
        },
        CycleState.PROCESSING_ITEMS: {
            CycleState.FINALIZING,
            CycleState.CYCLE_FINISHED_FAILURE,
        },
        CycleState.FINALIZING: {
            CycleState.CYCLE_FINISHED_SUCCESS,
            CycleState.CYCLE_FINISHED_FAILURE,
        },
        CycleState.CYCLE_FINISHED_SUCCESS: set(),  # Terminal state
        CycleState.CYCLE_FINISHED_FAILURE: set(),  # Terminal state
    }

    def __init__(self, cycle_id: str) -> None:
        """Initialize the state machine in CYCLE_STARTED state.

        Args:
            cycle_id: Unique cycle identifier for logging.
        """
        self._cycle_id = cycle_id
        self._state = CycleState.CYCLE_STARTED
        self._log = logger.bind(cycle_id=cycle_id, component="refresh")

    @property
    def state(self) -> CycleState:
        """Get the current state."""
        return self._state

    @property
    def cycle_id(self) -> str:
        """Get the cycle ID."""
        return self._cycle_id

    def can_transition(self, to_state: CycleState) -> bool:
        """Check if a transition to the given state is valid."""
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: CycleState) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.

        Raises:
            CycleStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.name,
                to_state=to_state.name,
            )
            raise CycleStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._log.debug(
            "cycle_state_transition",
            from_state=old_state.name,
            to_state=to_state.name,
        )

    def fail(self) -> None:
        """Move to CYCLE_FINISHED_FAILURE unless already terminal."""
        if not self.is_terminal():
            self.transition(CycleState.CYCLE_FINISHED_FAILURE)

    def is_terminal(self) -> bool:
        """Check if the current state is terminal."""
        return self._state in (
            CycleState.CYCLE_FINISHED_SUCCESS,
            CycleState.CYCLE_FINISHED_FAILURE,
        )

    def is_success(self) -> bool:
        """Check if the cycle finished successfully."""
        return self._state == CycleState.CYCLE_FINISHED_SUCCESS
