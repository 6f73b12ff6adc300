"""
FastAPI endpoints for the emergency engines
Stateless: every call posts the manager state it holds and gets the next one
"""

from fastapi import APIRouter, Query
from typing import Optional, List, Dict, Any

from paeds_engines.core.engines import (
    CATALOG_VERSION,
    EngineManagerState,
    PatientAge,
    all_engines,
    complete_action,
    create_engine_manager,
    deactivate_engine,
    evaluate_and_trigger_engines,
    export_manager_state,
    generate_engine_summary,
    get_engine,
    get_engine_elapsed_time,
    get_engine_priority_queue,
    get_engine_status,
    has_critical_engines,
    reactivate_engine,
)
from paeds_engines.models.engines import (
    CompleteActionRequest,
    DeactivateRequest,
    EngineListResponse,
    EngineStatusResponse,
    EvaluateRequest,
    ReactivateRequest,
    StateRequest,
    StateResponse,
    SummaryResponse,
)
import json

router = APIRouter(prefix="/api/v1/engines", tags=["Engines"])


# ---- Helpers ----

def _dose_weight(state: EngineManagerState, weight_kg: Optional[float]) -> Optional[float]:
    """Explicit weight wins; otherwise the weight of the latest assessment."""
    if weight_kg is not None:
        return weight_kg
    for record in reversed(state.assessment_history):
        if record.weight_kg:
            return record.weight_kg
    return None


def _state_response(
    state: EngineManagerState,
    weight_kg: Optional[float] = None,
    triggered: Optional[List[str]] = None,
) -> StateResponse:
    weight = _dose_weight(state, weight_kg)
    statuses = []
    for activation in get_engine_priority_queue(state):
        data = get_engine_status(activation).to_dict(weight)
        data["elapsed_seconds"] = max(0, get_engine_elapsed_time(activation))
        statuses.append(EngineStatusResponse(**data))

    return StateResponse(
        state=state.to_dict(),
        active_engine_ids=list(state.active_engine_ids),
        triggered_engine_ids=triggered or [],
        statuses=statuses,
        has_critical=has_critical_engines(state),
    )


# ---- Catalog ----

@router.get("", response_model=EngineListResponse)
async def list_engines(weight_kg: Optional[float] = Query(default=None, gt=0, le=150)):
    """List every engine in the catalog, with doses rendered when a weight is given."""
    engines = [engine.to_dict(weight_kg) for engine in all_engines()]
    return EngineListResponse(catalog_version=CATALOG_VERSION, count=len(engines), engines=engines)


@router.get("/{engine_id}")
async def engine_detail(engine_id: str, weight_kg: Optional[float] = Query(default=None, gt=0, le=150)) -> Dict[str, Any]:
    return get_engine(engine_id).to_dict(weight_kg)


# ---- State transitions ----

@router.post("/evaluate", response_model=StateResponse)
async def evaluate(request: EvaluateRequest):
    """Record an assessment and activate every engine whose trigger fires."""
    state = EngineManagerState.from_dict(request.state) if request.state else create_engine_manager()
    before = set(state.active_engine_ids)

    state = evaluate_and_trigger_engines(
        request.findings,
        request.weight_kg,
        PatientAge(request.age.years, request.age.months),
        state,
        retrigger_dismissed=request.retrigger_dismissed,
    )
    triggered = [eid for eid in state.active_engine_ids if eid not in before]
    return _state_response(state, request.weight_kg, triggered)


@router.post("/complete-action", response_model=StateResponse)
async def complete(request: CompleteActionRequest):
    get_engine(request.engine_id)
    state = EngineManagerState.from_dict(request.state)
    state = complete_action(state, request.engine_id, request.action_id)
    return _state_response(state, request.weight_kg)


@router.post("/deactivate", response_model=StateResponse)
async def deactivate(request: DeactivateRequest):
    get_engine(request.engine_id)
    state = EngineManagerState.from_dict(request.state)
    return _state_response(deactivate_engine(state, request.engine_id), request.weight_kg)


@router.post("/reactivate", response_model=StateResponse)
async def reactivate(request: ReactivateRequest):
    """Bring a dismissed engine back with a fresh checklist."""
    get_engine(request.engine_id)
    state = EngineManagerState.from_dict(request.state)
    before = set(state.active_engine_ids)
    state = reactivate_engine(state, request.engine_id, request.findings)
    triggered = [eid for eid in state.active_engine_ids if eid not in before]
    return _state_response(state, request.weight_kg, triggered)


# ---- Read-only views ----

@router.post("/status", response_model=StateResponse)
async def status(request: StateRequest):
    return _state_response(EngineManagerState.from_dict(request.state), request.weight_kg)


@router.post("/summary", response_model=SummaryResponse)
async def summary(request: StateRequest):
    """Handover summary of the posted state."""
    state = EngineManagerState.from_dict(request.state)
    return SummaryResponse(
        summary=generate_engine_summary(state),
        fingerprint=json.loads(export_manager_state(state)),
    )
