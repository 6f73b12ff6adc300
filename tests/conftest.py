"""
Pytest Configuration and Fixtures

Shared fixtures for emergency engine tests.
"""
import pytest
from datetime import datetime, timezone, timedelta
from typing import Dict, Any

from paeds_engines.core.engines import (
    EngineManagerState,
    PatientAge,
    create_engine_manager,
    evaluate_and_trigger_engines,
)


@pytest.fixture
def now() -> datetime:
    """Fixed clock for deterministic activations."""
    return datetime(2024, 3, 1, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def later(now) -> datetime:
    """Seven and a half minutes after `now`."""
    return now + timedelta(minutes=7, seconds=30)


@pytest.fixture
def toddler() -> PatientAge:
    """Two-year-old: SIRS limits RR > 35, HR > 150."""
    return PatientAge(years=2, months=0)


@pytest.fixture
def septic_findings() -> Dict[str, Any]:
    """Febrile, tachycardic, tachypnoeic and poorly perfused."""
    return {
        "temperature": 39.5,
        "heart_rate": 170,
        "respiratory_rate": 45,
        "capillary_refill": 4,
    }


@pytest.fixture
def bedside_septic_findings() -> Dict[str, Any]:
    """Septic toddler as charted at the bedside, camelCase keys and all."""
    return {
        "fever": True,
        "temperature": 39.5,
        "respiratoryRate": 45,
        "heartRate": 170,
        "capillaryRefill": 3,
        "skinColor": "mottled",
        "lactate": 3,
    }


@pytest.fixture
def seizure_findings() -> Dict[str, Any]:
    """Actively seizing, nothing else observed."""
    return {"seizures": True}


@pytest.fixture
def empty_state() -> EngineManagerState:
    """Fresh manager with no history."""
    return create_engine_manager()


@pytest.fixture
def septic_state(septic_findings, toddler, empty_state, now) -> EngineManagerState:
    """Septic shock and cardiogenic shock active, nothing completed."""
    return evaluate_and_trigger_engines(septic_findings, 12, toddler, empty_state, now=now)
