"""
Request / response models for the engine API.

The manager state travels as its JSON form (EngineManagerState.to_dict)
so any participant in a session can post the state it holds and get the
next one back.
"""
from pydantic import BaseModel, Field
from typing import Dict, Any, List, Optional


class AgeInput(BaseModel):
    """Patient age split into whole years and remaining months."""
    years: int = Field(..., ge=0, le=18)
    months: int = Field(default=0, ge=0, le=11)


class EvaluateRequest(BaseModel):
    """One assessment to run against the catalog."""
    findings: Dict[str, Any] = Field(default_factory=dict, description="Finding snapshot; camelCase keys accepted")
    weight_kg: float = Field(..., gt=0, le=150, description="Measured or estimated weight")
    age: AgeInput
    state: Optional[Dict[str, Any]] = Field(default=None, description="Current manager state; omit to start a new one")
    retrigger_dismissed: Optional[bool] = None


class StateRequest(BaseModel):
    state: Dict[str, Any]
    weight_kg: Optional[float] = Field(default=None, gt=0, le=150, description="Weight for dose rendering")


class CompleteActionRequest(StateRequest):
    engine_id: str
    action_id: str


class DeactivateRequest(StateRequest):
    engine_id: str


class ReactivateRequest(StateRequest):
    engine_id: str
    findings: Dict[str, Any] = Field(default_factory=dict)


class EngineStatusResponse(BaseModel):
    engine_id: str
    engine_name: str
    severity: str
    tier: str
    total_actions: int
    completed_count: int
    progress_percent: int
    current_action: Optional[Dict[str, Any]] = None
    next_action: Optional[Dict[str, Any]] = None
    is_complete: bool
    elapsed_seconds: int


class StateResponse(BaseModel):
    """Next manager state plus the priority-ordered checklist view of it."""
    state: Dict[str, Any]
    active_engine_ids: List[str]
    triggered_engine_ids: List[str] = Field(default_factory=list)
    statuses: List[EngineStatusResponse]
    has_critical: bool


class SummaryResponse(BaseModel):
    summary: Dict[str, Any]
    fingerprint: Dict[str, Any]


class EngineListResponse(BaseModel):
    catalog_version: str
    count: int
    engines: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    catalog_version: str
    engine_count: int
