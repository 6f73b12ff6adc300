"""
Lifecycle Controller

Moves engines between the active set and the completed (dismissed) set.

    Inactive → (trigger fires) → Active → (deactivate) → Completed record
             → (reactivate) → Active (new activation, empty checklist)

There is no terminal state; an engine may cycle any number of times in
one encounter.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional

from paeds_engines.utils import get_logger
from . import catalog
from .base import FindingSnapshot
from .manager import EngineActivation, EngineManagerState, as_utc, utcnow

logger = get_logger(__name__)


def get_engine_by_id(state: EngineManagerState, engine_id: str) -> Optional[EngineActivation]:
    for activation in state.active_engines:
        if activation.engine_id == engine_id:
            return activation
    return None


def is_engine_active(state: EngineManagerState, engine_id: str) -> bool:
    return get_engine_by_id(state, engine_id) is not None


def deactivate_engine(state: EngineManagerState, engine_id: str) -> EngineManagerState:
    """
    Move the live activation of `engine_id` to `completed_engines`,
    however far through its checklist it is.  No-op if not active.
    """
    activation = get_engine_by_id(state, engine_id)
    if activation is None:
        logger.debug("deactivate_engine: not active, ignoring", extra={"engine_id": engine_id})
        return state

    logger.info(
        f"Engine deactivated ({len(activation.completed_action_ids)}/{len(activation.engine.actions)} actions)",
        extra={"engine_id": engine_id},
    )
    return replace(
        state,
        active_engines=tuple(a for a in state.active_engines if a.engine_id != engine_id),
        completed_engines=state.completed_engines + (activation,),
    )


def reactivate_engine(
    state: EngineManagerState,
    engine_id: str,
    findings: Mapping[str, Any],
    *,
    now: Optional[datetime] = None,
) -> EngineManagerState:
    """
    Bring `engine_id` back with a brand-new activation.

    Any matching entries leave `completed_engines`; the new activation
    uses `findings` as its triggering snapshot and starts with an empty
    checklist.  No-op if the engine is already active or is not in the
    catalog.
    """
    if catalog.lookup(engine_id) is None:
        logger.debug("reactivate_engine: not in the catalog, ignoring", extra={"engine_id": engine_id})
        return state
    if is_engine_active(state, engine_id):
        logger.debug("reactivate_engine: already active, ignoring", extra={"engine_id": engine_id})
        return state

    activation = EngineActivation(
        engine_id=engine_id,
        triggered_at=as_utc(now) if now else utcnow(),
        findings=FindingSnapshot.from_mapping(findings),
    )
    logger.info("Engine reactivated", extra={"engine_id": engine_id})
    return replace(
        state,
        active_engines=state.active_engines + (activation,),
        completed_engines=tuple(a for a in state.completed_engines if a.engine_id != engine_id),
    )
