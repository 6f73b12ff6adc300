"""
Hours-Tier Engines

The long tail of conditions whose untreated time-to-harm is measured in
hours.  They are stored as flat records (name, key indicators,
time-to-harm) and expanded into EngineDefinitions with a short generic
checklist when this module is imported.

A condition fires once at least TIER2_MIN_INDICATORS of its key
indicators are present.  An indicator is present when the snapshot
records True under that name, or when one of the derived
indicators below can be computed from the core vital signs.
"""
from __future__ import annotations

from typing import Callable, Dict, Tuple

from paeds_engines import config
from .base import (
    ActionDefinition,
    ActionPhase,
    EngineDefinition,
    FindingSnapshot,
    PatientAge,
    Severity,
    UrgencyTier,
)
from . import findings as fx

# Conditions at or below this time-to-harm are urgent, the rest informational
URGENT_TIME_TO_HARM_MINUTES = 180

NEONATE_MAX_MONTHS = 1


# ── Flat condition records ───────────────────────────────────────────────────
# id: (name, category, key indicators, time-to-harm in minutes)
TIER2_CONDITIONS: Dict[str, Tuple[str, str, Tuple[str, ...], int]] = {
    # Renal
    "acute_kidney_injury": ("Acute Kidney Injury (AKI, Anuria)", "renal",
                            ("oliguria", "anuria", "elevated_creatinine", "hyperkalemia", "metabolic_acidosis"), 180),
    "hemolytic_uremic_syndrome": ("Hemolytic Uremic Syndrome (HUS)", "renal",
                                  ("bloody_diarrhea", "anemia", "thrombocytopenia", "aki", "pallor"), 240),
    "nephrotic_syndrome": ("Nephrotic Syndrome (Severe, Hypovolemia)", "renal",
                           ("edema", "hypoalbuminemia", "proteinuria", "hypotension"), 360),
    "renal_failure": ("Renal Failure (Acute on Chronic)", "renal",
                      ("oliguria", "hyperkalemia", "metabolic_acidosis", "uremia"), 240),

    # Endocrine
    "thyroid_storm": ("Thyroid Storm (Thyrotoxicosis)", "endocrine",
                      ("extreme_tachycardia", "hyperthermia", "altered_mental_status", "hypertension"), 180),
    "adrenal_crisis": ("Adrenal Crisis (Addisonian Crisis)", "endocrine",
                       ("hypotension", "hyponatremia", "hyperkalemia", "hypoglycemia", "shock"), 120),
    "hypercalcemia": ("Hypercalcemia (Severe, Symptomatic)", "endocrine",
                      ("altered_mental_status", "arrhythmias", "polyuria", "constipation"), 360),
    "siadh": ("SIADH (Hyponatremia, Seizures)", "endocrine",
              ("hyponatremia", "seizures", "altered_mental_status", "euvolemia"), 180),

    # Haematologic
    "sickle_cell_crisis": ("Sickle Cell Crisis (Vaso-occlusive, Acute Chest Syndrome)", "hematologic",
                           ("severe_pain", "hypoxia", "fever", "chest_pain", "known_sickle_cell"), 240),
    "hemophilia_bleeding": ("Hemophilia Bleeding (Intracranial, Joint)", "hematologic",
                            ("bleeding", "known_hemophilia", "head_trauma", "joint_swelling"), 180),
    "itp": ("ITP (Immune Thrombocytopenia, Severe Bleeding)", "hematologic",
            ("petechiae", "purpura", "bleeding", "thrombocytopenia"), 240),
    "leukemia_complications": ("Leukemia Complications (Tumor Lysis, Hyperleukocytosis)", "hematologic",
                               ("hyperkalemia", "hypercalcemia", "aki", "extreme_wbc", "known_leukemia"), 180),

    # Toxicologic
    "paracetamol_overdose": ("Paracetamol (Acetaminophen) Overdose", "toxicologic",
                             ("ingestion_history", "nausea", "vomiting", "elevated_alt_ast"), 480),
    "salicylate_overdose": ("Salicylate (Aspirin) Overdose", "toxicologic",
                            ("tinnitus", "tachypnea", "metabolic_acidosis", "altered_mental_status"), 240),
    "iron_overdose": ("Iron Overdose", "toxicologic",
                      ("vomiting", "bloody_diarrhea", "abdominal_pain", "shock", "ingestion_history"), 240),
    "carbon_monoxide_poisoning": ("Carbon Monoxide Poisoning", "toxicologic",
                                  ("headache", "confusion", "cherry_red_skin", "exposure_history"), 180),
    "organophosphate_poisoning": ("Organophosphate Poisoning", "toxicologic",
                                  ("salivation", "lacrimation", "urination", "miosis", "bradycardia",
                                   "exposure_history"), 120),
    "caustic_ingestion": ("Caustic Ingestion (Acid/Alkali)", "toxicologic",
                          ("oral_burns", "drooling", "dysphagia", "chest_pain", "ingestion_history"), 240),
    "tricyclic_overdose": ("Tricyclic Antidepressant Overdose", "toxicologic",
                           ("altered_mental_status", "seizures", "arrhythmias", "widened_qrs"), 120),
    "beta_blocker_overdose": ("Beta-blocker/Calcium Channel Blocker Overdose", "toxicologic",
                              ("bradycardia", "hypotension", "altered_mental_status", "hypoglycemia"), 180),

    # Trauma
    "traumatic_brain_injury": ("Traumatic Brain Injury (TBI, Severe)", "trauma",
                               ("head_trauma", "altered_mental_status", "gcs_low", "pupil_abnormalities"), 180),
    "spinal_cord_injury": ("Spinal Cord Injury", "trauma",
                           ("trauma", "paralysis", "sensory_loss", "neurogenic_shock"), 240),
    "abdominal_trauma": ("Abdominal Trauma (Solid Organ Injury)", "trauma",
                         ("abdominal_trauma", "abdominal_pain", "distension", "shock"), 180),
    "pelvic_fracture": ("Pelvic Fracture (Hemorrhage)", "trauma",
                        ("pelvic_trauma", "pelvic_instability", "shock", "hematuria"), 120),
    "long_bone_fracture": ("Long Bone Fracture (Fat Embolism)", "trauma",
                           ("long_bone_fracture", "hypoxia", "petechiae", "altered_mental_status"), 240),
    "crush_injury": ("Crush Injury (Compartment Syndrome, Rhabdomyolysis)", "trauma",
                     ("crush_mechanism", "severe_pain", "swelling", "dark_urine", "hyperkalemia"), 180),

    # Neonatal
    "necrotizing_enterocolitis": ("Necrotizing Enterocolitis (NEC)", "neonatal",
                                  ("abdominal_distension", "bloody_stools", "feeding_intolerance", "neonate"), 240),
    "congenital_heart_disease": ("Congenital Heart Disease (Ductal-dependent Lesions)", "neonatal",
                                 ("cyanosis", "shock", "neonate", "murmur", "differential_cyanosis"), 120),
    "inborn_errors_metabolism": ("Inborn Errors of Metabolism (Metabolic Crisis)", "neonatal",
                                 ("lethargy", "vomiting", "seizures", "metabolic_acidosis", "neonate"), 180),
    "neonatal_abstinence": ("Neonatal Abstinence Syndrome (Severe Withdrawal)", "neonatal",
                            ("irritability", "tremors", "seizures", "maternal_drug_use", "neonate"), 360),
    "kernicterus_risk": ("Hyperbilirubinemia (Kernicterus Risk)", "neonatal",
                         ("jaundice", "extreme_bilirubin", "lethargy", "neonate"), 240),
    "congenital_diaphragmatic_hernia": ("Congenital Diaphragmatic Hernia", "neonatal",
                                        ("respiratory_distress", "scaphoid_abdomen", "bowel_sounds_chest",
                                         "neonate"), 180),

    # Environmental
    "severe_hypothermia": ("Hypothermia (Severe, <28°C)", "environmental",
                           ("low_temperature", "altered_mental_status", "bradycardia", "arrhythmias"), 180),
    "heat_stroke": ("Hyperthermia (Heat Stroke)", "environmental",
                    ("high_temperature", "altered_mental_status", "anhidrosis", "heat_exposure"), 120),
    "drowning": ("Drowning (Near-drowning, ARDS)", "environmental",
                 ("submersion_history", "hypoxia", "altered_mental_status", "pulmonary_edema"), 240),
    "electrical_injury": ("Electrical Injury", "environmental",
                          ("electrical_exposure", "burns", "arrhythmias", "muscle_injury"), 180),

    # Metabolic
    "hyperkalemia": ("Hyperkalemia (Cardiac Arrest Risk)", "metabolic",
                     ("elevated_potassium", "arrhythmias", "peaked_t_waves", "muscle_weakness", "aki"), 60),
    "hypoglycemia": ("Hypoglycemia (Symptomatic)", "metabolic",
                     ("hypoglycemia", "altered_mental_status", "seizures", "sweating", "lethargy"), 60),

    # Respiratory
    "status_asthmaticus": ("Status Asthmaticus", "respiratory",
                           ("wheeze", "respiratory_distress", "hypoxia", "silent_chest", "known_asthma"), 180),
    "pulmonary_embolism": ("Pulmonary Embolism (Massive)", "respiratory",
                           ("chest_pain", "hypoxia", "tachycardia", "central_line", "shock"), 180),

    # Neonatal infection
    "neonatal_sepsis": ("Neonatal Sepsis", "neonatal",
                        ("neonate", "fever", "hypothermia", "lethargy", "poor_feeding", "apnea"), 60),

    # Burns
    "severe_burns": ("Severe Burns (Fluid Resuscitation Window)", "burns",
                     ("burns", "large_burn_area", "inhalation_injury", "shock"), 180),
}


# ── Derived indicators ───────────────────────────────────────────────────────

def _neonate(f: FindingSnapshot, age: PatientAge) -> bool:
    return age.in_months < NEONATE_MAX_MONTHS or fx.flag(f, "neonate")


def _low_temperature(f: FindingSnapshot, age: PatientAge) -> bool:
    temp = fx.number(f, "temperature")
    return temp is not None and temp < fx.SEVERE_HYPOTHERMIA_C


def _high_temperature(f: FindingSnapshot, age: PatientAge) -> bool:
    temp = fx.number(f, "temperature")
    return temp is not None and temp >= fx.HYPERPYREXIA_C


def _extreme_tachycardia(f: FindingSnapshot, age: PatientAge) -> bool:
    hr = fx.number(f, "heart_rate")
    return hr is not None and hr > fx.EXTREME_TACHYCARDIA_BPM


def _bradycardia(f: FindingSnapshot, age: PatientAge) -> bool:
    hr = fx.number(f, "heart_rate")
    return fx.flag(f, "bradycardia") or (hr is not None and hr < fx.BRADYCARDIA_BPM)


def _decreased_breath_sounds(f: FindingSnapshot, age: PatientAge) -> bool:
    return f.get("breath_sounds") in ("decreased", "absent")


def _shock(f: FindingSnapshot, age: PatientAge) -> bool:
    return fx.perfusion_abnormal(f) and fx.hypotensive(f, age)


DERIVED_INDICATORS: Dict[str, Callable[[FindingSnapshot, PatientAge], bool]] = {
    "altered_mental_status": lambda f, age: fx.altered_mental_status(f),
    "hypoxia": lambda f, age: fx.hypoxaemic(f),
    "hypotension": lambda f, age: fx.hypotensive(f, age),
    "hypothermia": lambda f, age: fx.hypothermic(f),
    "hypoglycemia": lambda f, age: fx.hypoglycaemic(f),
    "fever": lambda f, age: fx.febrile(f),
    "hyperthermia": _high_temperature,
    "high_temperature": _high_temperature,
    "low_temperature": _low_temperature,
    "tachypnea": lambda f, age: fx.tachypnoeic(f, age),
    "tachycardia": lambda f, age: fx.tachycardic(f, age),
    "extreme_tachycardia": _extreme_tachycardia,
    "bradycardia": _bradycardia,
    "respiratory_distress": lambda f, age: fx.increased_work_of_breathing(f),
    "decreased_breath_sounds": _decreased_breath_sounds,
    "anuria": lambda f, age: fx.number(f, "urine_output") == 0 or fx.flag(f, "anuria"),
    "metabolic_acidosis": lambda f, age: fx.flag(f, "metabolic_acidosis"),
    "petechiae": lambda f, age: f.get("rash_type") == "petechial" or fx.flag(f, "petechiae"),
    "purpura": lambda f, age: f.get("rash_type") == "purpuric" or fx.flag(f, "purpura"),
    "cyanosis": lambda f, age: f.get("skin_color") == "cyanotic" or fx.flag(f, "cyanosis"),
    "pallor": lambda f, age: f.get("skin_color") == "pale" or fx.flag(f, "pallor"),
    "shock": _shock,
    "neonate": _neonate,
    "infant": lambda f, age: age.in_months < 12,
    "pupil_abnormalities": lambda f, age: (
        f.get("pupil_reactivity") in ("sluggish", "fixed")
        or f.get("pupil_size") in ("dilated", "constricted")
    ),
    "miosis": lambda f, age: f.get("pupil_size") == "constricted" or fx.flag(f, "miosis"),
    "drooling": lambda f, age: fx.flag(f, "drooling"),
    "stridor": lambda f, age: fx.flag(f, "stridor"),
}


def indicator_present(name: str, f: FindingSnapshot, age: PatientAge) -> bool:
    """
    True if a key indicator is recorded as present or derivable from vitals.

    A directly recorded indicator counts only when it is exactly True;
    enumerated observations go through DERIVED_INDICATORS.
    """
    if fx.flag(f, name):
        return True
    derived = DERIVED_INDICATORS.get(name)
    return derived is not None and derived(f, age)


def make_indicator_trigger(key_indicators: Tuple[str, ...], minimum: int):
    """Build a pure trigger that fires once `minimum` indicators are present."""
    def trigger(f: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
        present = sum(1 for name in key_indicators if indicator_present(name, f, age))
        return present >= minimum
    return trigger


# ── Generic checklist ────────────────────────────────────────────────────────

_ESCALATION_TEAM = {
    "renal": "Paediatric nephrology",
    "endocrine": "Paediatric endocrinology",
    "hematologic": "Paediatric haematology/oncology",
    "toxicologic": "Poison control centre and toxicology",
    "trauma": "Paediatric surgery / trauma team",
    "neonatal": "Neonatology (NICU)",
    "environmental": "Paediatric intensive care",
    "metabolic": "Paediatric intensive care",
    "respiratory": "Paediatric intensive care",
    "burns": "Burns unit",
}


def _short_name(name: str) -> str:
    return name.split(" (")[0]


def _checklist(engine_id: str, name: str, category: str, key_indicators: Tuple[str, ...],
               urgency: Severity) -> Tuple[ActionDefinition, ...]:
    short = _short_name(name)
    indicators = ", ".join(k.replace("_", " ") for k in key_indicators)
    team = _ESCALATION_TEAM.get(category, "Senior clinician")
    return (
        ActionDefinition(
            id=f"{engine_id}-1-recognize", sequence=1, title=f"Recognize {short}", urgency=urgency,
            description=f"Confirm key indicators: {indicators}",
            expected_outcome=f"{short} suspected and documented",
            phase=ActionPhase.EXPOSURE, timeframe="Immediate",
        ),
        ActionDefinition(
            id=f"{engine_id}-2-stabilize", sequence=2, title="Stabilize ABCDE", urgency=urgency,
            description="Secure airway, support breathing and circulation, correct glucose",
            expected_outcome="Physiology stabilised while definitive care is arranged",
            phase=ActionPhase.CIRCULATION, timeframe="Within 15 minutes",
            monitoring=("Heart rate", "Blood pressure", "SpO2", "Mental status"),
        ),
        ActionDefinition(
            id=f"{engine_id}-3-escalate", sequence=3, title=f"Escalate to {team}", urgency=urgency,
            description=f"Discuss with {team} and arrange definitive management",
            expected_outcome="Specialist plan agreed",
            phase=ActionPhase.EXPOSURE, timeframe="Within 1 hour",
        ),
    )


def _intervention_window(minutes: int) -> str:
    hours = minutes / 60
    return f"{hours:g} hours (untreated time-to-harm)"


def build_tier2_engines(minimum: int = config.TIER2_MIN_INDICATORS) -> Tuple[EngineDefinition, ...]:
    """Expand the flat condition records into EngineDefinitions."""
    engines = []
    for key, (name, category, indicators, minutes) in TIER2_CONDITIONS.items():
        engine_id = key.replace("_", "-")
        severity = Severity.URGENT if minutes <= URGENT_TIME_TO_HARM_MINUTES else Severity.INFO
        engines.append(EngineDefinition(
            id=engine_id,
            name=name,
            category=category,
            severity=severity,
            tier=UrgencyTier.HOURS,
            trigger=make_indicator_trigger(indicators, minimum),
            actions=_checklist(engine_id, name, category, indicators, severity),
            description=f"Recognition and escalation of {_short_name(name).lower()}",
            key_indicators=indicators,
            time_to_harm_minutes=minutes,
            intervention_window=_intervention_window(minutes),
        ))
    return tuple(engines)


TIER2_ENGINES: Tuple[EngineDefinition, ...] = build_tier2_engines()
