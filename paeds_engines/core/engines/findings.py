"""
Shared clinical predicates over a FindingSnapshot.

Every helper is total: a missing, non-numeric or nonsensical observation
simply fails the predicate.  Nothing here raises on clinical input.
"""
from __future__ import annotations

from typing import Optional

from .base import FindingSnapshot, PatientAge

# ── Thresholds ───────────────────────────────────────────────────────────────
FEVER_C              = 38.5
HYPOTHERMIA_C        = 36.0
HYPERPYREXIA_C       = 40.0
SEVERE_HYPOTHERMIA_C = 28.0

HYPOXAEMIA_SPO2      = 90     # %
CAP_REFILL_SLOW_S    = 2      # seconds
LACTATE_HIGH         = 2      # mmol/L
HYPOGLYCAEMIA_MG_DL  = 60
HYPERGLYCAEMIA_MG_DL = 250

# Age-banded SIRS limits: (upper age bound in years, limit)
_RESP_RATE_LIMITS  = ((1, 40), (5, 35), (float("inf"), 30))
_HEART_RATE_LIMITS = ((1, 160), (5, 150), (float("inf"), 110))

EXTREME_TACHYCARDIA_BPM = 180
BRADYCARDIA_BPM         = 60

_ALTERED_AVPU = ("verbal", "pain", "unresponsive")


def number(findings: FindingSnapshot, key: str) -> Optional[float]:
    """Return a numeric observation, or None if absent or not a number."""
    value = findings.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def flag(findings: FindingSnapshot, key: str) -> bool:
    """True only when the observation is explicitly recorded as present."""
    return findings.get(key) is True


def _age_limit(limits, age_years: float) -> float:
    for bound, limit in limits:
        if age_years < bound:
            return limit
    return limits[-1][1]


# ── Temperature ──────────────────────────────────────────────────────────────

def febrile(findings: FindingSnapshot) -> bool:
    temp = number(findings, "temperature")
    return flag(findings, "fever") or (temp is not None and temp > FEVER_C)


def hypothermic(findings: FindingSnapshot) -> bool:
    temp = number(findings, "temperature")
    return flag(findings, "hypothermia") or (temp is not None and temp < HYPOTHERMIA_C)


def abnormal_temperature(findings: FindingSnapshot) -> bool:
    temp = number(findings, "temperature")
    return temp is not None and (temp > FEVER_C or temp < HYPOTHERMIA_C)


# ── Breathing ────────────────────────────────────────────────────────────────

def tachypnoeic(findings: FindingSnapshot, age: PatientAge) -> bool:
    rr = number(findings, "respiratory_rate")
    return rr is not None and rr > _age_limit(_RESP_RATE_LIMITS, age.in_years)


def increased_work_of_breathing(findings: FindingSnapshot) -> bool:
    return findings.get("work_of_breathing") in ("increased", "severe")


def hypoxaemic(findings: FindingSnapshot) -> bool:
    spo2 = number(findings, "spo2")
    return flag(findings, "hypoxemia") or (spo2 is not None and spo2 < HYPOXAEMIA_SPO2)


# ── Circulation ──────────────────────────────────────────────────────────────

def tachycardic(findings: FindingSnapshot, age: PatientAge) -> bool:
    hr = number(findings, "heart_rate")
    return hr is not None and hr > _age_limit(_HEART_RATE_LIMITS, age.in_years)


def low_systolic(findings: FindingSnapshot, age: PatientAge) -> bool:
    """Systolic BP below 90 + 2 × age in years."""
    sbp = number(findings, "systolic_bp")
    return sbp is not None and sbp < 90 + 2 * age.in_years


def hypotensive(findings: FindingSnapshot, age: PatientAge) -> bool:
    return flag(findings, "hypotension") or low_systolic(findings, age)


def perfusion_abnormal(findings: FindingSnapshot) -> bool:
    """Slow capillary refill, pale or mottled skin, or raised lactate."""
    crt = number(findings, "capillary_refill")
    lactate = number(findings, "lactate")
    return (
        (crt is not None and crt > CAP_REFILL_SLOW_S)
        or findings.get("skin_color") in ("mottled", "pale")
        or (lactate is not None and lactate > LACTATE_HIGH)
    )


# ── Disability ───────────────────────────────────────────────────────────────

def altered_mental_status(findings: FindingSnapshot) -> bool:
    return findings.get("avpu") in _ALTERED_AVPU or flag(findings, "altered_mental_status")


def hypoglycaemic(findings: FindingSnapshot) -> bool:
    glucose = number(findings, "glucose")
    return flag(findings, "hypoglycemia") or (glucose is not None and glucose < HYPOGLYCAEMIA_MG_DL)


def hyperglycaemic(findings: FindingSnapshot) -> bool:
    glucose = number(findings, "glucose")
    return glucose is not None and glucose > HYPERGLYCAEMIA_MG_DL


# ── Growth ───────────────────────────────────────────────────────────────────

def expected_weight_kg(age: PatientAge) -> float:
    """
    APLS weight-for-age estimate.

      < 12 months : (months / 2) + 4
      1 – 5 years : (2 × years) + 8
      6 – 12 years: (3 × years) + 7
      > 12 years  : capped at the 12-year estimate
    """
    if age.in_months < 12:
        return age.in_months / 2 + 4
    if age.years <= 5:
        return 2 * age.years + 8
    return 3 * min(age.years, 12) + 7
