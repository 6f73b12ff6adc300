"""
Engine Manager State and Trigger Evaluator

The manager state is a plain, immutable value: every operation takes a
state and returns a new one.  Activations reference their engine by id
only, so the whole state round-trips through JSON and can be re-resolved
against the catalog on any device in a collaborative session.

Usage:
    from paeds_engines.core.engines import (
        create_engine_manager, evaluate_and_trigger_engines, PatientAge,
    )

    state = create_engine_manager()
    state = evaluate_and_trigger_engines(
        {"seizures": True}, 15, PatientAge(2, 0), state,
    )
    print([a.engine_id for a in state.active_engines])
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from paeds_engines import config
from paeds_engines.utils import StateSerializationError, get_logger
from . import catalog
from .base import EngineDefinition, FindingSnapshot, PatientAge, Severity

logger = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Timestamps without a zone are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_timestamp(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    try:
        return as_utc(datetime.fromisoformat(value))
    except (TypeError, ValueError) as exc:
        raise StateSerializationError(
            f"Invalid timestamp for {field_name}: {value!r}",
            details={"field": field_name},
        ) from exc


# ── Value types ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EngineActivation:
    """
    One live or historical firing of an engine.

    `completed_action_ids` keeps insertion order and never holds the same
    id twice.
    """
    engine_id: str
    triggered_at: datetime
    findings: FindingSnapshot
    completed_action_ids: Tuple[str, ...] = ()

    @property
    def engine(self) -> EngineDefinition:
        engine = catalog.lookup(self.engine_id)
        if engine is None:
            # Only reachable if an activation was built by hand for an
            # id the catalog does not know; from_dict rejects these.
            raise StateSerializationError(
                f"Activation references unknown engine {self.engine_id}",
                details={"engine_id": self.engine_id},
            )
        return engine

    @property
    def priority(self) -> Severity:
        return self.engine.severity

    def is_completed(self, action_id: str) -> bool:
        return action_id in self.completed_action_ids

    def to_dict(self) -> dict:
        return {
            "engine_id": self.engine_id,
            "triggered_at": self.triggered_at.isoformat(),
            "findings": self.findings.to_dict(),
            "completed_action_ids": list(self.completed_action_ids),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineActivation":
        try:
            engine_id = data["engine_id"]
            triggered_at = data["triggered_at"]
        except (KeyError, TypeError) as exc:
            raise StateSerializationError(f"Malformed activation: {data!r}") from exc

        engine = catalog.lookup(engine_id)
        if engine is None:
            raise StateSerializationError(
                f"Activation references unknown engine {engine_id}",
                details={"engine_id": engine_id},
            )

        completed = []
        for action_id in data.get("completed_action_ids") or ():
            if engine.action(action_id) is not None and action_id not in completed:
                completed.append(action_id)

        return cls(
            engine_id=engine_id,
            triggered_at=_parse_timestamp(triggered_at, "triggered_at"),
            findings=FindingSnapshot.from_mapping(data.get("findings") or {}),
            completed_action_ids=tuple(completed),
        )


@dataclass(frozen=True)
class AssessmentRecord:
    """A finding snapshot tagged with the moment it was evaluated."""
    findings: FindingSnapshot
    evaluated_at: datetime
    weight_kg: Optional[float] = None
    age: Optional[PatientAge] = None

    def to_dict(self) -> dict:
        return {
            "findings": self.findings.to_dict(),
            "evaluated_at": self.evaluated_at.isoformat(),
            "weight_kg": self.weight_kg,
            "age": self.age.to_dict() if self.age else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssessmentRecord":
        if not isinstance(data, Mapping) or "evaluated_at" not in data:
            raise StateSerializationError(f"Malformed assessment record: {data!r}")
        age = data.get("age")
        return cls(
            findings=FindingSnapshot.from_mapping(data.get("findings") or {}),
            evaluated_at=_parse_timestamp(data["evaluated_at"], "evaluated_at"),
            weight_kg=data.get("weight_kg"),
            age=PatientAge.from_value(age) if age is not None else None,
        )


@dataclass(frozen=True)
class EngineManagerState:
    """
    Aggregate state threaded through every engine operation.

    active_engines     – at most one activation per engine id
    completed_engines  – activations explicitly deactivated (audit trail)
    assessment_history – every snapshot ever evaluated, oldest first
    """
    active_engines: Tuple[EngineActivation, ...] = ()
    completed_engines: Tuple[EngineActivation, ...] = ()
    assessment_history: Tuple[AssessmentRecord, ...] = ()

    @property
    def active_engine_ids(self) -> Tuple[str, ...]:
        return tuple(a.engine_id for a in self.active_engines)

    @property
    def latest_findings(self) -> Optional[FindingSnapshot]:
        if not self.assessment_history:
            return None
        return self.assessment_history[-1].findings

    def to_dict(self) -> dict:
        return {
            "active_engines": [a.to_dict() for a in self.active_engines],
            "completed_engines": [a.to_dict() for a in self.completed_engines],
            "assessment_history": [r.to_dict() for r in self.assessment_history],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineManagerState":
        """
        Restore a state received from another participant.

        Raises:
            StateSerializationError: malformed payload, unknown engine ids,
                or two live activations for the same engine.
        """
        if not isinstance(data, Mapping):
            raise StateSerializationError("Manager state must be a mapping")

        active = tuple(EngineActivation.from_dict(a) for a in data.get("active_engines") or ())
        ids = [a.engine_id for a in active]
        if len(ids) != len(set(ids)):
            raise StateSerializationError(
                "Manager state holds more than one live activation for an engine",
                details={"active_engine_ids": ids},
            )

        return cls(
            active_engines=active,
            completed_engines=tuple(
                EngineActivation.from_dict(a) for a in data.get("completed_engines") or ()
            ),
            assessment_history=tuple(
                AssessmentRecord.from_dict(r) for r in data.get("assessment_history") or ()
            ),
        )


def create_engine_manager() -> EngineManagerState:
    """Empty initial state: nothing active, nothing completed, no history."""
    return EngineManagerState()


# ── Trigger evaluator ────────────────────────────────────────────────────────

def _fires(engine: EngineDefinition, findings: FindingSnapshot,
           weight_kg: Optional[float], age: PatientAge) -> bool:
    try:
        return engine.evaluate(findings, weight_kg, age)
    except Exception as exc:
        # Isolate failures: one broken predicate must not block the others
        logger.error(f"Trigger for {engine.id} raised {exc}", exc_info=True)
        return False


def evaluate_and_trigger_engines(
    findings: Mapping[str, Any],
    weight_kg: Optional[float],
    age: Any,
    state: EngineManagerState,
    *,
    now: Optional[datetime] = None,
    retrigger_dismissed: Optional[bool] = None,
) -> EngineManagerState:
    """
    Record an assessment and activate every engine whose trigger now fires.

    Args:
        findings: Finding snapshot (mapping; camelCase keys are accepted).
        weight_kg: Patient weight; may be an upstream estimate.
        age: PatientAge, {"years", "months"} mapping, or years as a number.
        state: Current manager state (not modified).
        now: Timestamp for the history entry and new activations.
             Defaults to the current UTC time; pass it for replay.
        retrigger_dismissed: Whether engines the team deactivated may fire
             again automatically.  Defaults to RETRIGGER_DISMISSED_ENGINES.

    Returns:
        A new state with the snapshot appended to the history and one new
        activation per newly satisfied trigger, in catalog order.
    """
    snapshot = FindingSnapshot.from_mapping(findings)
    patient_age = PatientAge.from_value(age)
    stamp = as_utc(now) if now else utcnow()
    if retrigger_dismissed is None:
        retrigger_dismissed = config.RETRIGGER_DISMISSED_ENGINES

    skip = set(state.active_engine_ids)
    if not retrigger_dismissed:
        skip.update(a.engine_id for a in state.completed_engines)

    triggered = tuple(
        EngineActivation(engine_id=engine.id, triggered_at=stamp, findings=snapshot)
        for engine in catalog.all_engines()
        if engine.id not in skip and _fires(engine, snapshot, weight_kg, patient_age)
    )

    if triggered:
        logger.info(
            f"Engine evaluation: {len(triggered)} engine(s) triggered: "
            + ", ".join(a.engine_id for a in triggered)
        )
    else:
        logger.debug("Engine evaluation: no new engines triggered")

    record = AssessmentRecord(
        findings=snapshot,
        evaluated_at=stamp,
        weight_kg=weight_kg,
        age=patient_age,
    )
    return replace(
        state,
        active_engines=state.active_engines + triggered,
        assessment_history=state.assessment_history + (record,),
    )
