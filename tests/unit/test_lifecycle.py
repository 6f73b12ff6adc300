"""
Unit Tests for the Lifecycle Controller

Deactivation, reactivation and the audit trail of completed engines.
"""
from paeds_engines.core.engines import (
    complete_action,
    deactivate_engine,
    evaluate_and_trigger_engines,
    get_current_action,
    get_engine_by_id,
    is_engine_active,
    reactivate_engine,
)


class TestLookup:
    """Finding activations in a state."""

    def test_get_engine_by_id(self, septic_state):
        """Active engines are found, inactive ones give None."""
        activation = get_engine_by_id(septic_state, "septic-shock")
        assert activation.engine_id == "septic-shock"
        assert get_engine_by_id(septic_state, "dka") is None

    def test_is_engine_active(self, septic_state):
        """Active, inactive and unknown ids."""
        assert is_engine_active(septic_state, "septic-shock")
        assert not is_engine_active(septic_state, "dka")
        assert not is_engine_active(septic_state, "no-such-engine")


class TestDeactivate:
    """Dismissing an engine."""

    def test_moves_activation_with_progress(self, septic_state):
        """The activation moves to completed with its progress."""
        state = complete_action(septic_state, "septic-shock", "sepsis-1-recognize")
        state = deactivate_engine(state, "septic-shock")

        assert not is_engine_active(state, "septic-shock")
        assert state.active_engine_ids == ("cardiogenic-shock",)
        assert len(state.completed_engines) == 1
        record = state.completed_engines[0]
        assert record.engine_id == "septic-shock"
        assert record.completed_action_ids == ("sepsis-1-recognize",)

    def test_not_active_is_noop(self, septic_state):
        """Dismissing an inactive engine returns the same state."""
        assert deactivate_engine(septic_state, "dka") is septic_state

    def test_history_untouched(self, septic_state):
        """Dismissal does not alter assessment history."""
        state = deactivate_engine(septic_state, "septic-shock")
        assert state.assessment_history == septic_state.assessment_history


class TestReactivate:
    """Bringing a dismissed engine back."""

    def test_fresh_checklist_and_snapshot(self, septic_state, later):
        """Reactivation starts a new checklist with the new findings."""
        state = complete_action(septic_state, "septic-shock", "sepsis-1-recognize")
        state = deactivate_engine(state, "septic-shock")
        state = reactivate_engine(state, "septic-shock", {"temperature": 40}, now=later)

        activation = get_engine_by_id(state, "septic-shock")
        assert activation.completed_action_ids == ()
        assert activation.triggered_at == later
        assert activation.findings == {"temperature": 40}
        assert get_current_action(activation).id == "sepsis-1-recognize"
        assert all(a.engine_id != "septic-shock" for a in state.completed_engines)

    def test_appended_after_existing_activations(self, septic_state):
        """The new activation goes to the end."""
        state = deactivate_engine(septic_state, "septic-shock")
        state = reactivate_engine(state, "septic-shock", {})
        assert state.active_engine_ids == ("cardiogenic-shock", "septic-shock")

    def test_never_dismissed_engine(self, septic_state):
        """An engine that never fired can be started directly."""
        state = reactivate_engine(septic_state, "dka", {"glucose": 400})
        assert is_engine_active(state, "dka")

    def test_already_active_is_noop(self, septic_state):
        """An active engine is left alone."""
        assert reactivate_engine(septic_state, "septic-shock", {}) is septic_state

    def test_unknown_engine_is_noop(self, septic_state):
        """Unknown ids are ignored."""
        assert reactivate_engine(septic_state, "no-such-engine", {}) is septic_state

    def test_removes_every_completed_entry(self, seizure_findings, toddler, empty_state):
        """All earlier dismissals of the engine are cleared."""
        state = evaluate_and_trigger_engines(seizure_findings, 15, toddler, empty_state)
        state = deactivate_engine(state, "status-epilepticus")
        state = evaluate_and_trigger_engines(
            seizure_findings, 15, toddler, state, retrigger_dismissed=True
        )
        state = deactivate_engine(state, "status-epilepticus")
        assert len(state.completed_engines) == 2

        state = reactivate_engine(state, "status-epilepticus", seizure_findings)
        assert state.completed_engines == ()
        assert state.active_engine_ids == ("status-epilepticus",)

    def test_history_untouched(self, septic_state):
        """Reactivation does not alter assessment history."""
        state = deactivate_engine(septic_state, "septic-shock")
        state = reactivate_engine(state, "septic-shock", {})
        assert state.assessment_history == septic_state.assessment_history
