"""
Status & Priority Reporter

Read-only projections of the manager state for checklists, priority
banners and handover.  Nothing in this module changes a state.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from .base import ActionDefinition, SEVERITY_ORDER, Severity
from .manager import EngineActivation, EngineManagerState, as_utc, utcnow
from .sequencing import get_current_action, get_next_action


@dataclass(frozen=True)
class EngineStatus:
    """Progress summary for one activation."""
    engine_id: str
    engine_name: str
    severity: Severity
    tier: str
    total_actions: int
    completed_count: int
    progress_percent: int
    current_action: Optional[ActionDefinition]
    next_action: Optional[ActionDefinition]
    is_complete: bool

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        return {
            "engine_id": self.engine_id,
            "engine_name": self.engine_name,
            "severity": self.severity.value,
            "tier": self.tier,
            "total_actions": self.total_actions,
            "completed_count": self.completed_count,
            "progress_percent": self.progress_percent,
            "current_action": self.current_action.to_dict(weight_kg) if self.current_action else None,
            "next_action": self.next_action.to_dict(weight_kg) if self.next_action else None,
            "is_complete": self.is_complete,
        }


def progress_percent(completed: int, total: int) -> int:
    """
    round(completed / total × 100), halves rounded up, clamped to [0, 100].
    An engine with no actions is vacuously complete.
    """
    if total <= 0:
        return 100
    percent = math.floor(completed * 100 / total + 0.5)
    return max(0, min(100, percent))


def get_engine_completion_percent(activation: EngineActivation) -> int:
    return progress_percent(len(activation.completed_action_ids), len(activation.engine.actions))


def get_engine_status(activation: EngineActivation) -> EngineStatus:
    engine = activation.engine
    total = len(engine.actions)
    completed = len(activation.completed_action_ids)
    return EngineStatus(
        engine_id=engine.id,
        engine_name=engine.name,
        severity=engine.severity,
        tier=engine.tier.value,
        total_actions=total,
        completed_count=completed,
        progress_percent=progress_percent(completed, total),
        current_action=get_current_action(activation),
        next_action=get_next_action(activation),
        is_complete=completed >= total,
    )


def get_all_engine_statuses(state: EngineManagerState) -> List[EngineStatus]:
    return [get_engine_status(a) for a in state.active_engines]


def _priority_key(activation: EngineActivation) -> int:
    return SEVERITY_ORDER.get(activation.priority, 99)


def get_engine_priority_queue(state: EngineManagerState) -> List[EngineActivation]:
    """
    Active engines, critical before urgent before info.

    The sort is stable: engines of equal severity keep their activation
    order (which, within one evaluation, is catalog order).
    """
    return sorted(state.active_engines, key=_priority_key)


def get_critical_engines(state: EngineManagerState) -> List[EngineActivation]:
    return [a for a in state.active_engines if a.priority == Severity.CRITICAL]


def has_critical_engines(state: EngineManagerState) -> bool:
    return any(a.priority == Severity.CRITICAL for a in state.active_engines)


def get_engine_elapsed_time(activation: EngineActivation, now: Optional[datetime] = None) -> int:
    """Whole seconds since the engine was activated, measured against `now`."""
    reference = as_utc(now) if now else utcnow()
    return round((reference - as_utc(activation.triggered_at)).total_seconds())


# ── Handover ─────────────────────────────────────────────────────────────────

def generate_engine_summary(state: EngineManagerState) -> Dict:
    """
    Build a compact summary for a handover generator.

    Example output:
    {
        "active_engines": [
            {"engine_id": "septic-shock", "name": "Septic Shock Engine",
             "severity": "critical", "progress": "2/5 actions",
             "current_action": "Administer Fluid Bolus"}
        ],
        "completed_engines": [...],
        "total_assessments": 3,
        "latest_findings": {...}
    }
    """
    active = []
    for activation in get_engine_priority_queue(state):
        current = get_current_action(activation)
        active.append({
            "engine_id": activation.engine_id,
            "name": activation.engine.name,
            "severity": activation.priority.value,
            "progress": f"{len(activation.completed_action_ids)}/{len(activation.engine.actions)} actions",
            "current_action": current.title if current else None,
        })

    completed = [
        {
            "engine_id": a.engine_id,
            "name": a.engine.name,
            "triggered_at": a.triggered_at.isoformat(),
            "completed_actions": len(a.completed_action_ids),
            "total_actions": len(a.engine.actions),
        }
        for a in state.completed_engines
    ]

    latest = state.latest_findings
    return {
        "active_engines": active,
        "completed_engines": completed,
        "total_assessments": len(state.assessment_history),
        "latest_findings": latest.to_dict() if latest is not None else None,
    }


def export_manager_state(state: EngineManagerState) -> str:
    """Compact JSON fingerprint of a state (ids and assessment count only)."""
    return json.dumps({
        "active_engine_ids": [a.engine_id for a in state.active_engines],
        "completed_engine_ids": [a.engine_id for a in state.completed_engines],
        "assessment_count": len(state.assessment_history),
    })
