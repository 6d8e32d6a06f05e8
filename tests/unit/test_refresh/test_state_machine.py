"""Unit tests for the refresh cycle state machine."""

import pytest

from hn30.refresh import CycleState, CycleStateError, CycleStateMachine


class TestCycleStateMachine:
    """Tests for CycleStateMachine."""

    def test_initial_state(self) -> None:
        """Test that a machine starts in CYCLE_STARTED."""
        machine = CycleStateMachine("c1")

        assert machine.state == CycleState.CYCLE_STARTED
        assert machine.cycle_id == "c1"
        assert not machine.is_terminal()

    def test_happy_path(self) -> None:
        """Test the full successful transition chain."""
        machine = CycleStateMachine("c1")
        for state in (
            CycleState.FETCHING_RANKING,
            CycleState.PROCESSING_ITEMS,
            CycleState.FINALIZING,
            CycleState.CYCLE_FINISHED_SUCCESS,
        ):
            machine.transition(state)

        assert machine.is_terminal()
        assert machine.is_success()

    def test_skipping_a_stage_is_rejected(self) -> None:
        """Test that a transition outside the table raises."""
        machine = CycleStateMachine("c1")

        with pytest.raises(CycleStateError) as exc_info:
            machine.transition(CycleState.FINALIZING)

        assert exc_info.value.from_state == CycleState.CYCLE_STARTED
        assert exc_info.value.to_state == CycleState.FINALIZING
        assert machine.state == CycleState.CYCLE_STARTED

    def test_fail_from_any_active_state(self) -> None:
        """Test that fail() reaches the failure state from mid-cycle."""
        machine = CycleStateMachine("c1")
        machine.transition(CycleState.FETCHING_RANKING)
        machine.transition(CycleState.PROCESSING_ITEMS)

        machine.fail()

        assert machine.state == CycleState.CYCLE_FINISHED_FAILURE
        assert not machine.is_success()

    def test_fail_is_noop_when_terminal(self) -> None:
        """Test that failing a finished cycle changes nothing."""
        machine = CycleStateMachine("c1")
        machine.fail()
        machine.fail()

        assert machine.state == CycleState.CYCLE_FINISHED_FAILURE

    def test_terminal_states_have_no_exits(self) -> None:
        """Test that nothing follows success."""
        machine = CycleStateMachine("c1")
        machine.transition(CycleState.FETCHING_RANKING)
        machine.transition(CycleState.PROCESSING_ITEMS)
        machine.transition(CycleState.FINALIZING)
        machine.transition(CycleState.CYCLE_FINISHED_SUCCESS)

        assert not machine.can_transition(CycleState.CYCLE_STARTED)
        assert not machine.can_transition(CycleState.CYCLE_FINISHED_FAILURE)
