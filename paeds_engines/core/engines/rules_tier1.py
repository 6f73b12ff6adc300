"""
Minutes-Tier Engines

Protocols whose untreated time-to-harm is measured in minutes.  Each one
carries a full, ordered checklist with weight-based dosing.

Design principles:
  - Each trigger is pure: (FindingSnapshot, weight_kg, PatientAge) → bool
  - Shared vital-sign thresholds live in `findings.py`; protocol-specific ones sit below.
  - Engines are listed from the most common presentation to the least.
"""
from __future__ import annotations

from typing import Tuple

from .base import (
    ActionDefinition as A,
    ActionPhase,
    DoseComponent,
    DosingRule,
    EngineDefinition,
    FindingSnapshot,
    PatientAge,
    Severity,
    UrgencyTier,
)
from . import findings as fx

CRITICAL = Severity.CRITICAL
URGENT = Severity.URGENT

AIRWAY = ActionPhase.AIRWAY
BREATHING = ActionPhase.BREATHING
CIRCULATION = ActionPhase.CIRCULATION
DISABILITY = ActionPhase.DISABILITY
EXPOSURE = ActionPhase.EXPOSURE

SIRS_MIN_CRITERIA = 2
ANAPHYLAXIS_MIN_SYSTEMS = 2
CARDIOGENIC_HR_BPM = 150
DKA_PH = 7.3
DKA_BICARBONATE = 15
MALNUTRITION_WEIGHT_FRACTION = 0.6
MUAC_SEVERE_CM = 11.5

_RL_BOLUS_20 = DosingRule(
    calculation="20 mL/kg bolus over 15 min",
    route="IV or IO",
    components=(DoseComponent("RL", 20, unit="mL", decimals=0),),
)


# ── Septic shock ─────────────────────────────────────────────────────────────

def trigger_septic_shock(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """
    Fever or hypothermia + ≥ 2 SIRS criteria + a perfusion abnormality.
    """
    if not (fx.febrile(f) or fx.hypothermic(f)):
        return False

    sirs = sum([
        fx.tachypnoeic(f, age),
        fx.tachycardic(f, age),
        fx.abnormal_temperature(f),
        fx.increased_work_of_breathing(f),
    ])
    if sirs < SIRS_MIN_CRITERIA:
        return False

    return fx.perfusion_abnormal(f) or fx.low_systolic(f, age)


SEPTIC_SHOCK = EngineDefinition(
    id="septic-shock",
    name="Septic Shock Engine",
    category="shock",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_septic_shock,
    description="Recognition and management of septic shock in pediatric patients",
    time_to_harm_minutes=30,
    intervention_window="30-60 minutes (septic shock); antibiotics within 1 hour",
    actions=(
        A(
            id="sepsis-1-recognize", sequence=1, title="Recognize Septic Shock", urgency=CRITICAL,
            description="Confirm infection source, fever/hypothermia, SIRS criteria and perfusion abnormality",
            rationale="Every hour of delay in treatment increases mortality.",
            expected_outcome="Septic shock confirmed, team alerted, management initiated",
            phase=CIRCULATION, timeframe="Immediate",
            monitoring=("Temperature", "Heart rate", "Respiratory rate", "Perfusion signs", "Lactate"),
        ),
        A(
            id="sepsis-2-cultures", sequence=2, title="Obtain Blood Cultures", urgency=URGENT,
            description="Draw blood cultures BEFORE antibiotics if this does not delay treatment",
            rationale="Cultures guide de-escalation and identify resistant organisms",
            expected_outcome="Blood cultures obtained",
            phase=CIRCULATION, timeframe="5 minutes",
            monitoring=("Culture results (48-72 hours)",),
        ),
        A(
            id="sepsis-3-fluids", sequence=3, title="Administer Fluid Bolus", urgency=CRITICAL,
            description="Give RL 20 mL/kg IV over 15 minutes. Reassess perfusion after each 10 mL/kg.",
            rationale="Fluid resuscitation restores circulating volume and improves perfusion.",
            expected_outcome="CRT < 2 sec, HR normalising, BP and urine output improving",
            phase=CIRCULATION, timeframe="15 minutes",
            dosing=_RL_BOLUS_20,
            monitoring=("Perfusion signs", "Heart rate", "Blood pressure", "Urine output", "Edema/crackles"),
        ),
        A(
            id="sepsis-4-antibiotics", sequence=4, title="Administer Broad-Spectrum Antibiotics",
            urgency=CRITICAL,
            description="Give empiric antibiotics within 1 hour of recognition; adjust to cultures.",
            rationale="Empiric coverage reduces bacterial load before culture results are back.",
            expected_outcome="Fever response, clinical improvement",
            phase=CIRCULATION, timeframe="Within 1 hour",
            monitoring=("Temperature", "Perfusion signs", "Culture results"),
        ),
        A(
            id="sepsis-5-vasopressors", sequence=5, title="Consider Vasopressors if Hypotensive After Fluids",
            urgency=CRITICAL,
            description="If SBP stays < 90 + 2×age after 60 mL/kg, start epinephrine 0.05-0.1 mcg/kg/min",
            rationale="Vasopressors maintain perfusion pressure when fluids alone are insufficient",
            expected_outcome="Blood pressure normalised, perfusion maintained",
            phase=CIRCULATION, timeframe="After fluid reassessment",
            prerequisites=("IV access established", "Fluids given (60 mL/kg)", "Still hypotensive"),
            dosing=DosingRule(
                calculation="Epinephrine 0.05-0.1 mcg/kg/min",
                route="IV infusion",
                components=(DoseComponent("Epinephrine", 0.05, 0.1, unit="mcg/min"),),
            ),
            monitoring=("Blood pressure", "Perfusion", "Urine output", "Lactate clearance"),
        ),
    ),
    monitoring=(
        "Temperature (target normothermia)",
        "Heart rate (should decrease with treatment)",
        "Blood pressure (target age-appropriate)",
        "Capillary refill (target <2 sec)",
        "Urine output (target 0.5-1 mL/kg/hr)",
        "Lactate (target <2 mmol/L)",
        "Mental status (target alert)",
    ),
)


# ── Respiratory failure ──────────────────────────────────────────────────────

def trigger_respiratory_failure(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """Inadequate breathing signs or hypoxaemia."""
    inadequate = (
        f.get("breath_sounds") in ("decreased", "absent")
        or fx.flag(f, "grunting")
        or fx.flag(f, "retractions")
        or fx.flag(f, "nasal_flare")
    )
    return inadequate or fx.hypoxaemic(f)


RESPIRATORY_FAILURE = EngineDefinition(
    id="respiratory-failure",
    name="Respiratory Failure Engine",
    category="respiratory",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_respiratory_failure,
    description="Recognition and management of respiratory failure in pediatric patients",
    time_to_harm_minutes=5,
    intervention_window="4-10 minutes (hypoxic arrest)",
    actions=(
        A(
            id="resp-1-oxygen", sequence=1, title="Apply High-Flow Oxygen", urgency=CRITICAL,
            description="Non-rebreather mask at 10-15 L/min to achieve SpO2 > 94%",
            rationale="Hypoxaemia is immediately life-threatening.",
            expected_outcome="SpO2 > 94%", phase=BREATHING, timeframe="Immediate",
            monitoring=("SpO2 (target >94%)", "Respiratory effort", "Color"),
        ),
        A(
            id="resp-2-position", sequence=2, title="Position for Optimal Breathing", urgency=URGENT,
            description="Sniffing position for infants; neutral for older children",
            rationale="Positioning maximises airway diameter and air exchange",
            expected_outcome="Improved air movement", phase=BREATHING, timeframe="Immediate",
            monitoring=("Respiratory effort", "Air movement", "SpO2"),
        ),
        A(
            id="resp-3-assess", sequence=3, title="Assess Breathing Adequacy", urgency=URGENT,
            description="Check rate, work of breathing, air movement, breath sounds and chest rise",
            rationale="Decides whether ventilation support is needed",
            expected_outcome="Clear assessment of breathing status", phase=BREATHING, timeframe="30 seconds",
            monitoring=("Respiratory rate", "Work of breathing", "Air movement", "Breath sounds"),
        ),
        A(
            id="resp-4-bvm", sequence=4, title="Provide Bag-Valve-Mask Ventilation", urgency=CRITICAL,
            description="Appropriate mask size with 100% oxygen at 20 breaths/min",
            rationale="Inadequate breathing requires ventilation support",
            expected_outcome="Adequate ventilation, SpO2 > 94%", phase=BREATHING, timeframe="1-2 minutes",
            dosing=DosingRule(
                calculation="Tidal volume 6-8 mL/kg, rate 20/min",
                route="Bag-valve-mask",
                components=(DoseComponent("", 6, 8, unit="mL per breath", decimals=0),),
            ),
            monitoring=("Chest rise", "SpO2", "Breath sounds", "Gastric distension"),
        ),
        A(
            id="resp-5-intubation", sequence=5, title="Prepare for Intubation", urgency=CRITICAL,
            description="If BVM is ineffective, prepare for intubation (ETT size = age/4 + 4 mm)",
            rationale="Intubation secures the airway and allows controlled ventilation",
            expected_outcome="Secured airway, SpO2 > 94%", phase=BREATHING, timeframe="5-10 minutes",
            prerequisites=("BVM attempted", "Still inadequate ventilation", "Airway patent"),
            monitoring=("ETT position", "Breath sounds (bilateral)", "SpO2", "Chest rise"),
        ),
    ),
    monitoring=(
        "SpO2 (target >94%)",
        "Respiratory rate (age-appropriate)",
        "Work of breathing (should decrease)",
        "Breath sounds (bilateral, equal)",
        "Mental status (target alert)",
    ),
)


# ── Status epilepticus ───────────────────────────────────────────────────────

def trigger_status_epilepticus(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    return fx.flag(f, "seizures")


STATUS_EPILEPTICUS = EngineDefinition(
    id="status-epilepticus",
    name="Status Epilepticus Engine",
    category="neurological",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_status_epilepticus,
    description="Recognition and management of status epilepticus in pediatric patients",
    time_to_harm_minutes=30,
    intervention_window="5 minutes for first-line benzodiazepine; 30-60 minutes to refractory status",
    actions=(
        A(
            id="seizure-1-safety", sequence=1, title="Ensure Scene Safety", urgency=CRITICAL,
            description="Protect from injury, remove nearby objects, do NOT restrain",
            expected_outcome="Child protected from injury", phase=DISABILITY, timeframe="Immediate",
            monitoring=("Seizure activity", "Injuries"),
        ),
        A(
            id="seizure-2-position", sequence=2, title="Position on Side", urgency=CRITICAL,
            description="Recovery position (left lateral) to prevent aspiration",
            expected_outcome="Airway protected", phase=AIRWAY, timeframe="Immediate",
            monitoring=("Airway patency", "Breathing"),
        ),
        A(
            id="seizure-3-oxygen", sequence=3, title="Apply Oxygen", urgency=CRITICAL,
            description="High-flow oxygen to prevent hypoxaemia during the seizure",
            rationale="Seizures increase metabolic demand",
            expected_outcome="SpO2 > 94%", phase=BREATHING, timeframe="Immediate",
            monitoring=("SpO2", "Respiratory effort"),
        ),
        A(
            id="seizure-4-benzodiazepine", sequence=4, title="Administer First-Line Benzodiazepine",
            urgency=CRITICAL,
            description="Diazepam 0.1-0.3 mg/kg IV/IO (max 10 mg) or lorazepam 0.05-0.1 mg/kg (max 4 mg)",
            rationale="Benzodiazepines are first-line for acute seizure termination",
            expected_outcome="Seizure stops within 2-5 minutes",
            phase=DISABILITY, timeframe="Within 5 minutes of seizure onset",
            prerequisites=("IV or IO access", "Airway patent", "Oxygen applied"),
            dosing=DosingRule(
                calculation="Diazepam 0.1-0.3 mg/kg IV or Lorazepam 0.05-0.1 mg/kg IV",
                route="IV or IO",
                components=(
                    DoseComponent("Diazepam", 0.1, 0.3, max_dose=10),
                    DoseComponent("Lorazepam", 0.05, 0.1, max_dose=4),
                ),
            ),
            monitoring=("Seizure cessation", "Respiratory depression", "Blood pressure"),
        ),
        A(
            id="seizure-5-anticonvulsant", sequence=5, title="Administer Second-Line Anticonvulsant",
            urgency=CRITICAL,
            description="If seizing after 5 min: phenytoin 15-20 mg/kg or levetiracetam 20-30 mg/kg IV",
            expected_outcome="Seizure termination",
            phase=DISABILITY, timeframe="5-10 minutes after first-line",
            prerequisites=("Benzodiazepine given", "Seizure continuing"),
            dosing=DosingRule(
                calculation="Phenytoin 15-20 mg/kg IV or Levetiracetam 20-30 mg/kg IV",
                route="IV",
                components=(
                    DoseComponent("Phenytoin", 15, 20, decimals=0),
                    DoseComponent("Levetiracetam", 20, 30, decimals=0),
                ),
            ),
            monitoring=("Seizure cessation", "Cardiac rhythm", "Blood pressure"),
        ),
        A(
            id="seizure-6-intubation", sequence=6, title="Prepare for Intubation if Refractory",
            urgency=CRITICAL,
            description="If seizing after 20 min, prepare for intubation and ICU care",
            expected_outcome="Secured airway, controlled ventilation",
            phase=AIRWAY, timeframe="20 minutes after onset",
            prerequisites=("Multiple anticonvulsants given", "Seizure continuing"),
            monitoring=("Airway", "Ventilation", "Seizure activity"),
        ),
    ),
    monitoring=(
        "Seizure activity (timing, duration, type)",
        "SpO2 (target >94%)",
        "Heart rate",
        "Pupil size and reactivity",
        "Blood glucose (check for hypoglycemia)",
    ),
)


# ── Diabetic ketoacidosis ────────────────────────────────────────────────────

def trigger_dka(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """Hyperglycaemia (> 250 mg/dL) with metabolic acidosis."""
    if not fx.hyperglycaemic(f):
        return False
    ph = fx.number(f, "ph")
    bicarbonate = fx.number(f, "bicarbonate")
    return (
        fx.flag(f, "metabolic_acidosis")
        or (ph is not None and ph < DKA_PH)
        or (bicarbonate is not None and bicarbonate < DKA_BICARBONATE)
    )


DKA = EngineDefinition(
    id="dka",
    name="DKA Engine",
    category="metabolic",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_dka,
    description="Recognition and management of diabetic ketoacidosis in pediatric patients",
    time_to_harm_minutes=240,
    intervention_window="4-6 hours (cerebral edema risk)",
    actions=(
        A(
            id="dka-1-recognize", sequence=1, title="Recognize DKA", urgency=CRITICAL,
            description="Confirm glucose > 250 mg/dL, pH < 7.3 or HCO3 < 15, and ketosis",
            expected_outcome="DKA confirmed, severity assessed", phase=DISABILITY, timeframe="Immediate",
            monitoring=("Glucose", "pH", "HCO3", "Ketones", "Osmolality"),
        ),
        A(
            id="dka-2-fluids", sequence=2, title="Initiate Fluid Resuscitation", urgency=CRITICAL,
            description="RL 10-20 mL/kg IV over 1 hour",
            rationale="DKA causes severe dehydration",
            expected_outcome="Improved perfusion and urine output", phase=CIRCULATION, timeframe="1 hour",
            dosing=DosingRule(
                calculation="10-20 mL/kg over 1 hour",
                route="IV",
                components=(DoseComponent("RL", 10, 20, unit="mL", decimals=0),),
            ),
            monitoring=("Urine output", "Perfusion", "Glucose", "Osmolality"),
        ),
        A(
            id="dka-3-insulin", sequence=3, title="Start Insulin Infusion", urgency=CRITICAL,
            description="After initial fluids, insulin 0.1 units/kg/hr IV",
            rationale="Lowers glucose gradually and stops ketone production",
            expected_outcome="Glucose falls 50-100 mg/dL/hr", phase=DISABILITY,
            timeframe="After initial fluid bolus",
            prerequisites=("IV access", "Initial fluids given", "Glucose >250"),
            dosing=DosingRule(
                calculation="0.1 units/kg/hr IV infusion",
                route="IV infusion",
                components=(DoseComponent("Insulin", 0.1, unit="units/hr"),),
            ),
            monitoring=("Glucose", "pH", "HCO3", "Potassium"),
        ),
        A(
            id="dka-4-electrolytes", sequence=4, title="Monitor and Correct Electrolytes", urgency=URGENT,
            description="Check K+, Na+, Cl-, HCO3 frequently; replace K+ if < 5.5 mEq/L",
            expected_outcome="Electrolytes normalised, rhythm stable", phase=CIRCULATION,
            timeframe="Ongoing during treatment",
            monitoring=("Potassium (target 4-5 mEq/L)", "Sodium", "Cardiac rhythm"),
        ),
    ),
    monitoring=(
        "Glucose (target 50-100 mg/dL/hr decrease)",
        "pH (target >7.3)",
        "Potassium (target 4-5 mEq/L)",
        "Mental status (watch for cerebral edema)",
    ),
)


# ── Anaphylaxis ──────────────────────────────────────────────────────────────

def trigger_anaphylaxis(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """Two or more organ systems involved."""
    systems = sum([
        fx.flag(f, "rash") or fx.flag(f, "urticaria"),
        fx.increased_work_of_breathing(f) or fx.flag(f, "stridor") or fx.flag(f, "wheeze"),
        fx.hypotensive(f, age),
        fx.flag(f, "vomiting"),
    ])
    return systems >= ANAPHYLAXIS_MIN_SYSTEMS


ANAPHYLAXIS = EngineDefinition(
    id="anaphylaxis",
    name="Anaphylaxis Engine",
    category="allergy",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_anaphylaxis,
    description="Recognition and management of anaphylaxis in pediatric patients",
    time_to_harm_minutes=10,
    intervention_window="10-30 minutes (airway obstruction/shock)",
    actions=(
        A(
            id="ana-1-recognize", sequence=1, title="Recognize Anaphylaxis", urgency=CRITICAL,
            description="Acute onset with 2+ systems: skin, respiratory, cardiovascular, GI",
            expected_outcome="Anaphylaxis confirmed, team alerted", phase=CIRCULATION, timeframe="Immediate",
            monitoring=("Respiratory status", "Blood pressure", "Heart rate", "Skin signs"),
        ),
        A(
            id="ana-2-epinephrine", sequence=2, title="Administer Epinephrine IM", urgency=CRITICAL,
            description="Epinephrine 0.01 mg/kg IM (max 0.5 mg) into the anterolateral thigh",
            rationale="Epinephrine is the only treatment for anaphylaxis",
            expected_outcome="Symptoms resolve within 5-15 minutes", phase=CIRCULATION, timeframe="Immediate",
            dosing=DosingRule(
                calculation="0.01 mg/kg IM (1:1000 concentration)",
                route="Intramuscular (anterolateral thigh)",
                components=(DoseComponent("Epinephrine", 0.01, unit="mg IM", max_dose=0.5, decimals=2),),
            ),
            monitoring=("Respiratory status", "Blood pressure", "Heart rate"),
        ),
        A(
            id="ana-3-oxygen", sequence=3, title="Apply Oxygen and Position", urgency=CRITICAL,
            description="High-flow oxygen; supine with legs elevated",
            expected_outcome="SpO2 > 94%, improved perfusion", phase=BREATHING, timeframe="Immediate",
            monitoring=("SpO2", "Respiratory effort", "Blood pressure"),
        ),
        A(
            id="ana-4-iv-access", sequence=4, title="Establish IV Access and Give Fluids", urgency=CRITICAL,
            description="Start IV, give RL 20 mL/kg bolus over 15 minutes",
            expected_outcome="Blood pressure normalised", phase=CIRCULATION, timeframe="15 minutes",
            dosing=_RL_BOLUS_20,
            monitoring=("Blood pressure", "Heart rate", "Perfusion signs"),
        ),
        A(
            id="ana-5-antihistamines", sequence=5, title="Administer Antihistamines and Steroids",
            urgency=URGENT,
            description="Diphenhydramine 1 mg/kg IV (max 50 mg) and methylprednisolone 1-2 mg/kg IV",
            rationale="Prevents biphasic reactions",
            expected_outcome="No recurrence", phase=CIRCULATION, timeframe="After epinephrine and fluids",
            dosing=DosingRule(
                calculation="Diphenhydramine 1 mg/kg IV + Methylprednisolone 1-2 mg/kg IV",
                route="IV",
                components=(
                    DoseComponent("Diphenhydramine", 1, max_dose=50, decimals=0),
                    DoseComponent("Methylprednisolone", 1, 2, decimals=0),
                ),
                joiner=" + ",
            ),
            monitoring=("Symptoms", "Respiratory status"),
        ),
    ),
    monitoring=(
        "Respiratory status (stridor, wheeze)",
        "Blood pressure (target age-appropriate)",
        "SpO2 (target >94%)",
        "Watch for biphasic reaction (1-72 hours later)",
    ),
)


# ── Hypovolaemic shock ───────────────────────────────────────────────────────

_VOLUME_LOSS_FLAGS = ("hemorrhage", "bleeding", "dehydration", "diarrhea", "vomiting")


def trigger_hypovolemic_shock(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """Perfusion abnormality with documented volume loss."""
    perfusion = fx.perfusion_abnormal(f) or fx.low_systolic(f, age)
    urine = fx.number(f, "urine_output")
    volume_loss = any(fx.flag(f, k) for k in _VOLUME_LOSS_FLAGS) or urine == 0
    return perfusion and volume_loss


HYPOVOLEMIC_SHOCK = EngineDefinition(
    id="hypovolemic-shock",
    name="Hypovolemic Shock Engine",
    category="shock",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_hypovolemic_shock,
    description="Recognition and management of hypovolemic shock (hemorrhage/dehydration)",
    time_to_harm_minutes=15,
    intervention_window="15-30 minutes (hemorrhagic shock)",
    actions=(
        A(
            id="hypo-1-hemorrhage-control", sequence=1, title="Control External Hemorrhage", urgency=CRITICAL,
            description="Direct pressure with sterile gauze. Do NOT remove embedded objects.",
            expected_outcome="Bleeding controlled", phase=CIRCULATION, timeframe="Immediate",
            monitoring=("Bleeding status", "Vital signs"),
        ),
        A(
            id="hypo-2-iv-access", sequence=2, title="Establish Large-Bore IV Access", urgency=CRITICAL,
            description="Two large-bore IVs, or IO if unable",
            expected_outcome="Rapid access established", phase=CIRCULATION, timeframe="Immediate",
            monitoring=("IV patency", "Fluid flow rate"),
        ),
        A(
            id="hypo-3-fluid-bolus", sequence=3, title="Administer Rapid Fluid Bolus", urgency=CRITICAL,
            description="RL 20 mL/kg IV over 15 minutes; reassess after each 10 mL/kg",
            expected_outcome="CRT < 2 sec, HR normalising, BP improving", phase=CIRCULATION,
            timeframe="15 minutes",
            dosing=_RL_BOLUS_20,
            monitoring=("Perfusion signs", "Heart rate", "Blood pressure", "Urine output"),
        ),
        A(
            id="hypo-4-type-cross", sequence=4, title="Type & Cross, Prepare for Transfusion", urgency=URGENT,
            description="If hemorrhage is significant, order type & cross; have O-negative available",
            expected_outcome="Blood products available", phase=CIRCULATION, timeframe="Ongoing",
            monitoring=("Hemoglobin/hematocrit", "Continued bleeding"),
        ),
    ),
    monitoring=(
        "Bleeding status (controlled vs. ongoing)",
        "Heart rate (should decrease with fluids)",
        "Capillary refill (target <2 sec)",
        "Urine output (target 0.5-1 mL/kg/hr)",
    ),
)


# ── Cardiogenic shock ────────────────────────────────────────────────────────

def trigger_cardiogenic_shock(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """Poor perfusion with signs of heart failure."""
    hr = fx.number(f, "heart_rate")
    heart_failure = (
        (hr is not None and hr > CARDIOGENIC_HR_BPM)
        or f.get("work_of_breathing") == "severe"
        or fx.flag(f, "retractions")
        or fx.flag(f, "hepatomegaly")
    )
    return fx.perfusion_abnormal(f) and heart_failure


CARDIOGENIC_SHOCK = EngineDefinition(
    id="cardiogenic-shock",
    name="Cardiogenic Shock Engine",
    category="shock",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_cardiogenic_shock,
    description="Recognition and management of cardiogenic shock in pediatric patients",
    time_to_harm_minutes=20,
    intervention_window="20-60 minutes (cardiogenic shock)",
    actions=(
        A(
            id="cardio-1-recognize", sequence=1, title="Recognize Cardiogenic Shock", urgency=CRITICAL,
            description="Tachycardia, respiratory distress, poor perfusion, possible murmur/gallop",
            expected_outcome="Cardiogenic shock confirmed, cardiology consulted", phase=CIRCULATION,
            timeframe="Immediate",
            monitoring=("Heart rate", "Respiratory effort", "Perfusion signs", "Cardiac sounds"),
        ),
        A(
            id="cardio-2-oxygen", sequence=2, title="Apply Oxygen and Position", urgency=CRITICAL,
            description="High-flow oxygen; semi-Fowler position to reduce pulmonary edema",
            expected_outcome="SpO2 > 94%, easier breathing", phase=BREATHING, timeframe="Immediate",
            monitoring=("SpO2", "Respiratory effort", "Crackles/edema"),
        ),
        A(
            id="cardio-3-iv-access", sequence=3, title="Establish IV Access", urgency=URGENT,
            description="IV for medication; limit fluid boluses (risk of pulmonary edema)",
            expected_outcome="IV access established, fluids limited", phase=CIRCULATION, timeframe="Immediate",
            monitoring=("IV patency", "Fluid balance"),
        ),
        A(
            id="cardio-4-inotropes", sequence=4, title="Start Inotropic Support", urgency=CRITICAL,
            description="Dobutamine 5-10 mcg/kg/min IV",
            rationale="Improves cardiac output without excessive vasoconstriction",
            expected_outcome="Improved perfusion, decreased tachycardia", phase=CIRCULATION,
            timeframe="After IV access",
            dosing=DosingRule(
                calculation="Dobutamine 5-10 mcg/kg/min IV infusion",
                route="IV infusion",
                components=(DoseComponent("Dobutamine", 5, 10, unit="mcg/min"),),
            ),
            monitoring=("Heart rate", "Blood pressure", "Perfusion", "Urine output"),
        ),
        A(
            id="cardio-5-diuretics", sequence=5, title="Consider Diuretics if Pulmonary Edema", urgency=URGENT,
            description="If crackles/pulmonary edema, furosemide 1 mg/kg IV",
            expected_outcome="Reduced crackles", phase=BREATHING, timeframe="After inotropes started",
            prerequisites=("Inotropes started", "Pulmonary edema present"),
            dosing=DosingRule(
                calculation="Furosemide 1 mg/kg IV",
                route="IV",
                components=(DoseComponent("Furosemide", 1, decimals=0),),
            ),
            monitoring=("Urine output", "Crackles", "Respiratory effort"),
        ),
    ),
    monitoring=(
        "Heart rate (should decrease with treatment)",
        "Perfusion signs (CRT, skin color)",
        "SpO2 (target >94%)",
        "Crackles/pulmonary edema",
    ),
)


# ── Severe acute malnutrition ────────────────────────────────────────────────

def trigger_severe_malnutrition(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """
    Weight < 60% of the expected weight for age, MUAC < 11.5 cm, or
    bilateral pitting edema.
    """
    muac = fx.number(f, "muac")
    if fx.flag(f, "bilateral_pitting_edema") or (muac is not None and muac < MUAC_SEVERE_CM):
        return True
    if weight_kg is None or weight_kg <= 0:
        return False
    return weight_kg < MALNUTRITION_WEIGHT_FRACTION * fx.expected_weight_kg(age)


SEVERE_MALNUTRITION = EngineDefinition(
    id="severe-malnutrition",
    name="Severe Malnutrition Engine",
    category="nutrition",
    severity=URGENT,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_severe_malnutrition,
    description="Recognition and management of severe acute malnutrition (SAM)",
    time_to_harm_minutes=1440,
    intervention_window="24-48 hours stabilisation",
    actions=(
        A(
            id="sam-1-recognize", sequence=1, title="Recognize Severe Acute Malnutrition", urgency=URGENT,
            description="Weight < 60% expected for age OR MUAC < 11.5 cm OR bilateral pitting edema",
            rationale="SAM needs WHO-guided management to avoid refeeding syndrome",
            expected_outcome="SAM confirmed, nutritionist consulted", phase=EXPOSURE, timeframe="Immediate",
            monitoring=("Weight", "MUAC", "Edema", "Vital signs"),
        ),
        A(
            id="sam-2-stabilization", sequence=2, title="Stabilization Phase (First 24-48 hours)",
            urgency=URGENT,
            description="Treat infections, correct electrolytes, modest calories (50-100 kcal/kg/day)",
            expected_outcome="Stable vital signs, no refeeding syndrome", phase=CIRCULATION,
            timeframe="24-48 hours",
            dosing=DosingRule(
                calculation="50-100 kcal/kg/day divided into frequent meals",
                route="Oral or NG tube",
                components=(DoseComponent("", 50, 100, unit="kcal/day", decimals=0),),
            ),
            monitoring=("Vital signs", "Electrolytes", "Urine output"),
        ),
        A(
            id="sam-3-micronutrients", sequence=3, title="Provide Micronutrient Supplementation",
            urgency=URGENT,
            description="Vitamin A, zinc, iron and folic acid per WHO guidelines",
            expected_outcome="Micronutrient repletion started", phase=EXPOSURE, timeframe="Within 24 hours",
            monitoring=("Recovery progress",),
        ),
        A(
            id="sam-4-rehabilitation", sequence=4, title="Rehabilitation Phase (After Stabilization)",
            urgency=URGENT,
            description="Increase to 150-200 kcal/kg/day with therapeutic food",
            expected_outcome="Weight gain", phase=EXPOSURE, timeframe="Days 3-7 and beyond",
            dosing=DosingRule(
                calculation="150-200 kcal/kg/day divided into frequent meals",
                route="Oral or NG tube",
                components=(DoseComponent("", 150, 200, unit="kcal/day", decimals=0),),
            ),
            monitoring=("Weight gain", "Edema resolution", "Appetite"),
        ),
    ),
    monitoring=("Weight (daily)", "MUAC (weekly)", "Edema (daily)", "Electrolytes (K+, Mg2+, PO4)"),
)


# ── Meningitis ───────────────────────────────────────────────────────────────

def trigger_meningitis(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
    """Fever with meningeal signs, a non-blanching rash, or altered mental status."""
    if not fx.febrile(f):
        return False
    meningeal = (
        fx.flag(f, "neck_stiffness")
        or f.get("rash_type") in ("petechial", "purpuric")
        or fx.flag(f, "rash")
    )
    return meningeal or fx.altered_mental_status(f)


MENINGITIS = EngineDefinition(
    id="meningitis",
    name="Meningitis Engine",
    category="infection",
    severity=CRITICAL,
    tier=UrgencyTier.MINUTES,
    trigger=trigger_meningitis,
    description="Recognition and management of meningitis in pediatric patients",
    time_to_harm_minutes=120,
    intervention_window="1 hour for antibiotics (every hour of delay increases mortality)",
    actions=(
        A(
            id="mening-1-recognize", sequence=1, title="Recognize Meningitis", urgency=CRITICAL,
            description="Fever + neck stiffness/Kernig/Brudzinski + altered mental status",
            expected_outcome="Meningitis suspected, antibiotics initiated", phase=DISABILITY,
            timeframe="Immediate",
            monitoring=("Temperature", "Neck stiffness", "Mental status", "Rash"),
        ),
        A(
            id="mening-2-antibiotics", sequence=2, title="Administer Empiric Antibiotics", urgency=CRITICAL,
            description="Ceftriaxone 50-80 mg/kg IV (max 2 g) + vancomycin 15-20 mg/kg IV IMMEDIATELY",
            rationale="Do NOT wait for LP or imaging",
            expected_outcome="Survival improved", phase=CIRCULATION, timeframe="Within 1 hour of recognition",
            dosing=DosingRule(
                calculation="Ceftriaxone 50-80 mg/kg IV + Vancomycin 15-20 mg/kg IV",
                route="IV",
                components=(
                    DoseComponent("Ceftriaxone", 50, 80, max_dose=2000, decimals=0),
                    DoseComponent("Vancomycin", 15, 20, decimals=0),
                ),
                joiner=" + ",
            ),
            monitoring=("Temperature", "Mental status", "Vital signs"),
        ),
        A(
            id="mening-3-fluids", sequence=3, title="Fluid Management", urgency=URGENT,
            description="Maintenance fluids only (NOT bolus); monitor for SIADH",
            expected_outcome="Appropriate fluid balance, normal sodium", phase=CIRCULATION, timeframe="Ongoing",
            monitoring=("Urine output", "Sodium level", "Fluid balance"),
        ),
        A(
            id="mening-4-dexamethasone", sequence=4, title="Consider Dexamethasone", urgency=URGENT,
            description="Dexamethasone 0.15 mg/kg IV (max 10 mg) with the first antibiotic dose",
            expected_outcome="Improved neurological outcomes", phase=DISABILITY, timeframe="With first antibiotic",
            dosing=DosingRule(
                calculation="Dexamethasone 0.15 mg/kg IV",
                route="IV",
                components=(DoseComponent("Dexamethasone", 0.15, max_dose=10),),
            ),
            monitoring=("Mental status", "Neurological signs"),
        ),
        A(
            id="mening-5-lp", sequence=5, title="Lumbar Puncture (After Antibiotics)", urgency=URGENT,
            description="LP for CSF analysis. Do NOT delay antibiotics for LP.",
            expected_outcome="CSF results guide therapy", phase=DISABILITY, timeframe="After antibiotics started",
            prerequisites=("Antibiotics given", "No papilledema"),
            monitoring=("CSF results", "Organism identification"),
        ),
    ),
    monitoring=(
        "Temperature (target normothermia)",
        "Mental status (should improve)",
        "Rash (petechial/purpuric)",
        "Sodium level (watch for hyponatremia)",
    ),
)


TIER1_ENGINES: Tuple[EngineDefinition, ...] = (
    SEPTIC_SHOCK,
    RESPIRATORY_FAILURE,
    STATUS_EPILEPTICUS,
    DKA,
    ANAPHYLAXIS,
    HYPOVOLEMIC_SHOCK,
    CARDIOGENIC_SHOCK,
    SEVERE_MALNUTRITION,
    MENINGITIS,
)
