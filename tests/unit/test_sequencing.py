"""
Unit Tests for the Action Sequencer
"""
from paeds_engines.core.engines import (
    complete_action,
    evaluate_and_trigger_engines,
    get_current_action,
    get_next_action,
    is_engine_active,
)


def _activation(state, engine_id):
    return next(a for a in state.active_engines if a.engine_id == engine_id)


class TestCurrentAndNext:
    """Current and next actions by sequence."""

    def test_fresh_activation_starts_at_first_action(self, septic_state):
        """Nothing done: step 1 is current, step 2 next."""
        activation = _activation(septic_state, "septic-shock")
        assert get_current_action(activation).id == "sepsis-1-recognize"
        assert get_next_action(activation).id == "sepsis-2-cultures"

    def test_out_of_order_completion(self, septic_state):
        """Skipped steps stay current."""
        # Completing step 2 first leaves step 1 current and makes step 3 next
        state = complete_action(septic_state, "septic-shock", "sepsis-2-cultures")
        activation = _activation(state, "septic-shock")
        assert get_current_action(activation).id == "sepsis-1-recognize"
        assert get_next_action(activation).id == "sepsis-3-fluids"

    def test_last_action_has_no_next(self, septic_state):
        """The final pending action has no successor."""
        state = septic_state
        for action_id in ("sepsis-1-recognize", "sepsis-2-cultures", "sepsis-3-fluids", "sepsis-4-antibiotics"):
            state = complete_action(state, "septic-shock", action_id)
        activation = _activation(state, "septic-shock")
        assert get_current_action(activation).id == "sepsis-5-vasopressors"
        assert get_next_action(activation) is None


class TestCompleteAction:
    """Marking actions done."""

    def test_records_completion_in_order(self, septic_state):
        """Completions are kept in the order they happened."""
        state = complete_action(septic_state, "septic-shock", "sepsis-3-fluids")
        state = complete_action(state, "septic-shock", "sepsis-1-recognize")
        assert _activation(state, "septic-shock").completed_action_ids == (
            "sepsis-3-fluids",
            "sepsis-1-recognize",
        )

    def test_does_not_touch_other_engines(self, septic_state):
        """Only the named activation changes."""
        state = complete_action(septic_state, "septic-shock", "sepsis-1-recognize")
        assert _activation(state, "cardiogenic-shock") == _activation(septic_state, "cardiogenic-shock")
        assert _activation(septic_state, "septic-shock").completed_action_ids == ()

    def test_duplicate_completion_is_noop(self, septic_state):
        """Completing twice returns the same state."""
        once = complete_action(septic_state, "septic-shock", "sepsis-1-recognize")
        twice = complete_action(once, "septic-shock", "sepsis-1-recognize")
        assert twice is once

    def test_inactive_engine_is_noop(self, septic_state):
        """Stale events for inactive engines are ignored."""
        assert complete_action(septic_state, "dka", "dka-1-recognize") is septic_state

    def test_foreign_action_is_noop(self, septic_state):
        """Another engine's action id is ignored."""
        assert complete_action(septic_state, "septic-shock", "dka-1-recognize") is septic_state

    def test_unknown_engine_is_noop(self, septic_state):
        """Unknown engine ids are ignored."""
        assert complete_action(septic_state, "no-such-engine", "x") is septic_state

    def test_all_actions_done_keeps_engine_active(self, seizure_findings, toddler, empty_state):
        """Finishing the checklist does not dismiss the engine."""
        state = evaluate_and_trigger_engines(seizure_findings, 15, toddler, empty_state)
        activation = _activation(state, "status-epilepticus")
        for action in activation.engine.ordered_actions:
            state = complete_action(state, "status-epilepticus", action.id)

        done = _activation(state, "status-epilepticus")
        assert is_engine_active(state, "status-epilepticus")
        assert get_current_action(done) is None
        assert get_next_action(done) is None
        assert len(done.completed_action_ids) == 6
