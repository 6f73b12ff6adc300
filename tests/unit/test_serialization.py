"""
Unit Tests for Manager State Serialisation

The state is shared between devices as JSON and must restore to an
equivalent value.
"""
import json
import pytest
from datetime import datetime, timedelta, timezone

from paeds_engines.core.engines import (
    EngineManagerState,
    PatientAge,
    complete_action,
    deactivate_engine,
    evaluate_and_trigger_engines,
    get_engine_elapsed_time,
    get_engine_priority_queue,
    reactivate_engine,
)
from paeds_engines.utils import StateSerializationError


class TestRoundTrip:
    """JSON out and back gives an equal state."""

    def test_state_survives_json(self, septic_state):
        """Progress, dismissals and the queue survive the round trip."""
        state = complete_action(septic_state, "septic-shock", "sepsis-2-cultures")
        state = deactivate_engine(state, "cardiogenic-shock")

        restored = EngineManagerState.from_dict(json.loads(json.dumps(state.to_dict())))

        assert restored == state
        assert restored.active_engines[0].engine.name == state.active_engines[0].engine.name
        assert [a.engine_id for a in get_engine_priority_queue(restored)] == ["septic-shock"]

    def test_empty_state(self, empty_state):
        """An empty manager restores to an empty manager."""
        assert EngineManagerState.from_dict(empty_state.to_dict()) == empty_state


class TestRejectedPayloads:
    """Payloads that cannot describe a valid state."""

    def _payload(self, state):
        return json.loads(json.dumps(state.to_dict()))

    def test_unknown_engine_id(self, septic_state):
        """Engine ids missing from the catalog are rejected."""
        data = self._payload(septic_state)
        data["active_engines"][0]["engine_id"] = "no-such-engine"
        with pytest.raises(StateSerializationError) as exc_info:
            EngineManagerState.from_dict(data)
        assert exc_info.value.details["engine_id"] == "no-such-engine"

    def test_duplicate_live_activation(self, septic_state):
        """One engine cannot be active twice."""
        data = self._payload(septic_state)
        data["active_engines"].append(data["active_engines"][0])
        with pytest.raises(StateSerializationError):
            EngineManagerState.from_dict(data)

    def test_bad_timestamp(self, septic_state):
        """Unparseable timestamps are rejected."""
        data = self._payload(septic_state)
        data["active_engines"][0]["triggered_at"] = "yesterday"
        with pytest.raises(StateSerializationError):
            EngineManagerState.from_dict(data)

    def test_missing_fields(self):
        """An activation without a timestamp is rejected."""
        with pytest.raises(StateSerializationError):
            EngineManagerState.from_dict({"active_engines": [{"engine_id": "septic-shock"}]})

    def test_not_a_mapping(self):
        """The top level must be an object."""
        with pytest.raises(StateSerializationError):
            EngineManagerState.from_dict(["septic-shock"])


class TestSanitising:
    """Recoverable damage is repaired on restore."""

    def test_foreign_and_duplicate_action_ids_dropped(self, septic_state):
        """Action ids from other engines and repeats are dropped."""
        data = json.loads(json.dumps(septic_state.to_dict()))
        data["active_engines"][0]["completed_action_ids"] = [
            "sepsis-1-recognize",
            "dka-1-recognize",
            "sepsis-1-recognize",
        ]
        restored = EngineManagerState.from_dict(data)
        assert restored.active_engines[0].completed_action_ids == ("sepsis-1-recognize",)


class TestTimezones:
    """Timestamps without a zone are read as UTC."""

    def _naive_payload(self, state):
        data = json.loads(json.dumps(state.to_dict()))
        data["active_engines"][0]["triggered_at"] = "2024-03-01T14:30:00"
        data["assessment_history"][0]["evaluated_at"] = "2024-03-01T14:30:00"
        return data

    def test_naive_timestamps_restore_as_utc(self, septic_state, now):
        """Zone-less ISO strings restore as aware UTC datetimes."""
        restored = EngineManagerState.from_dict(self._naive_payload(septic_state))

        triggered_at = restored.active_engines[0].triggered_at
        assert triggered_at.tzinfo is not None
        assert triggered_at == now
        assert restored.assessment_history[0].evaluated_at == now

    def test_elapsed_time_from_naive_payload(self, septic_state, later):
        """Elapsed time works against a restored zone-less timestamp."""
        restored = EngineManagerState.from_dict(self._naive_payload(septic_state))
        assert get_engine_elapsed_time(restored.active_engines[0], later) == 450

    def test_naive_clock_arguments(self, seizure_findings, empty_state, now):
        """A zone-less `now` is stamped as UTC and compares with aware times."""
        naive = now.replace(tzinfo=None)
        state = evaluate_and_trigger_engines(seizure_findings, 15, PatientAge(2), empty_state, now=naive)

        activation = state.active_engines[0]
        assert activation.triggered_at == now
        assert state.assessment_history[0].evaluated_at == now
        assert get_engine_elapsed_time(activation, naive + timedelta(seconds=90)) == 90

    def test_naive_reactivation_clock(self, septic_state, now):
        """Reactivation accepts a zone-less clock too."""
        state = deactivate_engine(septic_state, "septic-shock")
        state = reactivate_engine(state, "septic-shock", {}, now=datetime(2024, 3, 1, 15, 0))

        activation = next(a for a in state.active_engines if a.engine_id == "septic-shock")
        assert activation.triggered_at == datetime(2024, 3, 1, 15, 0, tzinfo=timezone.utc)
        assert activation.triggered_at - now == timedelta(minutes=30)
