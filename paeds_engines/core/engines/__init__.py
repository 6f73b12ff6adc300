"""
Emergency Engines

Decides which paediatric emergency protocols apply to the current
assessment, sequences their checklists and reports progress.

Usage:
    from paeds_engines.core.engines import (
        create_engine_manager, evaluate_and_trigger_engines,
        complete_action, get_engine_priority_queue,
    )

    state = create_engine_manager()
    state = evaluate_and_trigger_engines(findings, weight_kg, age, state)
    for activation in get_engine_priority_queue(state):
        print(activation.engine_id, get_current_action(activation).title)
"""
from .base import (
    ActionDefinition,
    ActionPhase,
    DoseComponent,
    DosingRule,
    EngineDefinition,
    FindingSnapshot,
    PatientAge,
    Severity,
    UrgencyTier,
    render_dose,
)
from .catalog import CATALOG_VERSION, all_engines, engines_by_tier, get_engine, lookup
from .manager import (
    AssessmentRecord,
    EngineActivation,
    EngineManagerState,
    create_engine_manager,
    evaluate_and_trigger_engines,
)
from .sequencing import complete_action, get_current_action, get_next_action
from .lifecycle import deactivate_engine, get_engine_by_id, is_engine_active, reactivate_engine
from .status import (
    EngineStatus,
    export_manager_state,
    generate_engine_summary,
    get_all_engine_statuses,
    get_critical_engines,
    get_engine_completion_percent,
    get_engine_elapsed_time,
    get_engine_priority_queue,
    get_engine_status,
    has_critical_engines,
)

__all__ = [
    "ActionDefinition",
    "ActionPhase",
    "DoseComponent",
    "DosingRule",
    "EngineDefinition",
    "FindingSnapshot",
    "PatientAge",
    "Severity",
    "UrgencyTier",
    "render_dose",
    "CATALOG_VERSION",
    "all_engines",
    "engines_by_tier",
    "get_engine",
    "lookup",
    "AssessmentRecord",
    "EngineActivation",
    "EngineManagerState",
    "create_engine_manager",
    "evaluate_and_trigger_engines",
    "complete_action",
    "get_current_action",
    "get_next_action",
    "deactivate_engine",
    "get_engine_by_id",
    "is_engine_active",
    "reactivate_engine",
    "EngineStatus",
    "export_manager_state",
    "generate_engine_summary",
    "get_all_engine_statuses",
    "get_critical_engines",
    "get_engine_completion_percent",
    "get_engine_elapsed_time",
    "get_engine_priority_queue",
    "get_engine_status",
    "has_critical_engines",
]
