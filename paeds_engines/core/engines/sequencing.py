"""
Action Sequencer

One action at a time: the current action is always the lowest-sequence
action not yet completed.  Completing an action is defensive: a stale or
duplicate click from the bedside returns the state unchanged.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Optional

from paeds_engines.utils import get_logger
from .base import ActionDefinition
from .manager import EngineActivation, EngineManagerState

logger = get_logger(__name__)


def get_current_action(activation: EngineActivation) -> Optional[ActionDefinition]:
    """Lowest-sequence uncompleted action, or None when the checklist is done."""
    for action in activation.engine.ordered_actions:
        if action.id not in activation.completed_action_ids:
            return action
    return None


def get_next_action(activation: EngineActivation) -> Optional[ActionDefinition]:
    """The uncompleted action that follows the current one, if any."""
    pending = [
        a for a in activation.engine.ordered_actions
        if a.id not in activation.completed_action_ids
    ]
    return pending[1] if len(pending) > 1 else None


def complete_action(state: EngineManagerState, engine_id: str, action_id: str) -> EngineManagerState:
    """
    Mark `action_id` done on the live activation of `engine_id`.

    No-op (same state returned) when the engine is not active, the action
    does not belong to the engine, or it is already completed.  Completing
    the last action does not deactivate the engine.
    """
    for index, activation in enumerate(state.active_engines):
        if activation.engine_id != engine_id:
            continue

        if activation.engine.action(action_id) is None:
            logger.debug("complete_action: not an action of this engine, ignoring",
                         extra={"engine_id": engine_id, "action_id": action_id})
            return state
        if activation.is_completed(action_id):
            logger.debug("complete_action: already completed, ignoring",
                         extra={"engine_id": engine_id, "action_id": action_id})
            return state

        updated = replace(
            activation,
            completed_action_ids=activation.completed_action_ids + (action_id,),
        )
        active = state.active_engines[:index] + (updated,) + state.active_engines[index + 1:]
        logger.info("Action completed", extra={"engine_id": engine_id, "action_id": action_id})
        return replace(state, active_engines=active)

    logger.debug("complete_action: engine not active, ignoring", extra={"engine_id": engine_id})
    return state
