"""
End-to-End Demo Script for the Paediatric Emergency Engines

Replays a scripted encounter with a fixed clock:
1. A febrile, poorly perfused toddler is assessed
2. Engines trigger and are prioritised
3. The team works through the septic shock checklist
4. Cardiogenic shock is dismissed, then brought back
5. The child seizes on reassessment
6. A handover summary is produced

Run: python demo.py
"""
from datetime import datetime, timedelta, timezone

from paeds_engines.core.engines import (
    PatientAge,
    complete_action,
    create_engine_manager,
    deactivate_engine,
    evaluate_and_trigger_engines,
    export_manager_state,
    generate_engine_summary,
    get_engine_elapsed_time,
    get_engine_priority_queue,
    get_engine_status,
    reactivate_engine,
)

WEIGHT_KG = 12
AGE = PatientAge(years=2, months=0)
T0 = datetime(2024, 3, 1, 14, 30, tzinfo=timezone.utc)


def show_queue(state, now):
    for activation in get_engine_priority_queue(state):
        status = get_engine_status(activation)
        current = status.current_action.title if status.current_action else "(checklist complete)"
        print(f"   [{status.severity.value:<8}] {status.engine_name:<40} "
              f"{status.progress_percent:>3}%  {get_engine_elapsed_time(activation, now):>4}s  -> {current}")


print("=" * 60)
print("PAEDIATRIC EMERGENCY ENGINES - ENCOUNTER DEMO")
print("=" * 60)
print()

# ---- 1. First assessment ----
print("[1/6] Initial assessment...")
state = create_engine_manager()
state = evaluate_and_trigger_engines(
    {"temperature": 39.5, "heartRate": 170, "respiratoryRate": 45, "capillaryRefill": 4},
    WEIGHT_KG, AGE, state, now=T0,
)
print(f"   ✓ Triggered: {', '.join(state.active_engine_ids)}")
print()

# ---- 2. Priority queue ----
print("[2/6] Priority queue...")
show_queue(state, T0)
print()

# ---- 3. Work the sepsis checklist ----
print("[3/6] Septic shock checklist...")
for minute, action_id in enumerate(("sepsis-1-recognize", "sepsis-2-cultures"), start=1):
    state = complete_action(state, "septic-shock", action_id)
    print(f"   ✓ T+{minute}min completed {action_id}")

activation = next(a for a in state.active_engines if a.engine_id == "septic-shock")
current = get_engine_status(activation).to_dict(WEIGHT_KG)["current_action"]
print(f"   → Now: {current['title']} ({current['dosing']['dose']}, {current['dosing']['route']})")
print()

# ---- 4. Dismiss and restore ----
print("[4/6] Dismissing cardiogenic shock...")
state = deactivate_engine(state, "cardiogenic-shock")
print(f"   ✓ Active: {', '.join(state.active_engine_ids)}")
state = reactivate_engine(state, "cardiogenic-shock", {"hepatomegaly": True}, now=T0 + timedelta(minutes=4))
print(f"   ✓ Reactivated: {', '.join(state.active_engine_ids)}")
print()

# ---- 5. Reassessment ----
print("[5/6] Reassessment at T+10min...")
t10 = T0 + timedelta(minutes=10)
state = evaluate_and_trigger_engines(
    {"temperature": 39.8, "heartRate": 165, "capillaryRefill": 3, "seizures": True},
    WEIGHT_KG, AGE, state, now=t10,
)
show_queue(state, t10)
print()

# ---- 6. Handover ----
print("[6/6] Handover summary...")
summary = generate_engine_summary(state)
for entry in summary["active_engines"]:
    print(f"   • {entry['name']}: {entry['progress']} ({entry['severity']})")
print(f"   Assessments recorded: {summary['total_assessments']}")
print(f"   Fingerprint: {export_manager_state(state)}")
print()

print("=" * 60)
print("DEMO COMPLETE")
print("=" * 60)
