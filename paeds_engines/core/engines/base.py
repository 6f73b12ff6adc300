"""
Emergency Engines - Base Types

Defines the data contracts shared by the catalog, the trigger evaluator,
the action sequencer and the status reporter.  Everything here is
immutable: definitions are built once when the catalog is imported, and
finding snapshots are frozen the moment they are captured.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple


class Severity(str, Enum):
    """
    How strongly an engine (or a single action) claims the team's attention.

    CRITICAL – life threat, work it now
    URGENT   – act within the current resuscitation phase
    INFO     – keep in view; no immediate intervention expected
    """
    CRITICAL = "critical"
    URGENT   = "urgent"
    INFO     = "info"


class UrgencyTier(str, Enum):
    """Informal classification by how quickly untreated harm occurs."""
    MINUTES = "tier_1_minutes"
    HOURS   = "tier_2_hours"


class ActionPhase(str, Enum):
    """ABCDE phase an action belongs to."""
    AIRWAY      = "airway"
    BREATHING   = "breathing"
    CIRCULATION = "circulation"
    DISABILITY  = "disability"
    EXPOSURE    = "exposure"


# Severity sort order (lower = more urgent → appears first in a queue)
SEVERITY_ORDER = {
    Severity.CRITICAL: 0,
    Severity.URGENT:   1,
    Severity.INFO:     2,
}


# ── Patient context ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PatientAge:
    """Age as recorded at the bedside: whole years plus months."""
    years: int = 0
    months: int = 0

    @property
    def in_years(self) -> float:
        return self.years + self.months / 12

    @property
    def in_months(self) -> int:
        return self.years * 12 + self.months

    def to_dict(self) -> dict:
        return {"years": self.years, "months": self.months}

    @classmethod
    def from_value(cls, value: Any) -> "PatientAge":
        """Accept a PatientAge, a {years, months} mapping or a number of years."""
        if isinstance(value, PatientAge):
            return value
        if isinstance(value, Mapping):
            return cls(years=int(value.get("years", 0)), months=int(value.get("months", 0)))
        return cls(years=int(value), months=0)


# ── Finding snapshot ─────────────────────────────────────────────────────────

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")

# Historic spellings that do not survive a plain camelCase → snake_case pass
_KEY_ALIASES = {
    "sp_o2": "spo2",
    "urin_output": "urine_output",
}


def normalise_key(key: str) -> str:
    """`capillaryRefill` → `capillary_refill`, `systolicBP` → `systolic_bp`."""
    snake = _CAMEL_BOUNDARY.sub(r"\1_\2", key).lower()
    return _KEY_ALIASES.get(snake, snake)


class FindingSnapshot(Mapping):
    """
    A sparse, immutable mapping of clinical observation → observed value.

    Absence of a key means "not observed", never "normal".  Keys given as
    None are dropped for the same reason.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        cleaned: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            if value is None:
                continue
            cleaned[normalise_key(str(key))] = value
        object.__setattr__(self, "_values", cleaned)

    @classmethod
    def from_mapping(cls, values: Any) -> "FindingSnapshot":
        if isinstance(values, FindingSnapshot):
            return values
        return cls(values)

    def __setattr__(self, name, value):
        raise AttributeError("FindingSnapshot is immutable")

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FindingSnapshot):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted((k, repr(v)) for k, v in self._values.items())))

    def __repr__(self) -> str:
        return f"FindingSnapshot({self._values!r})"

    def to_dict(self) -> dict:
        return dict(self._values)


# ── Actions ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DoseComponent:
    """One drug (or fluid) in a weight-based dosing rule."""
    drug: str
    low_per_kg: float
    high_per_kg: Optional[float] = None
    unit: str = "mg"
    max_dose: Optional[float] = None
    decimals: int = 1

    def render(self, weight_kg: float) -> str:
        low = self.low_per_kg * weight_kg
        high = self.high_per_kg * weight_kg if self.high_per_kg is not None else None
        if self.max_dose is not None:
            low = min(low, self.max_dose)
            high = min(high, self.max_dose) if high is not None else None
        amount = f"{low:.{self.decimals}f}"
        if high is not None:
            amount += f"-{high:.{self.decimals}f}"
        text = f"{amount} {self.unit}"
        return f"{self.drug} {text}" if self.drug else text


@dataclass(frozen=True)
class DosingRule:
    """Weight-based dosing attached to an action."""
    calculation: str                          # e.g. "20 mL/kg bolus over 15 min"
    route: str
    components: Tuple[DoseComponent, ...] = ()
    joiner: str = " or "

    def render(self, weight_kg: float) -> str:
        return self.joiner.join(c.render(weight_kg) for c in self.components)


@dataclass(frozen=True)
class ActionDefinition:
    """
    One step in an engine's checklist.

    `sequence` is a 1-based ordinal; within an engine sequences are
    strictly increasing and `id`s are unique (checked at catalog build).
    """
    id: str
    sequence: int
    title: str
    urgency: Severity
    description: str = ""
    rationale: str = ""
    expected_outcome: str = ""
    phase: Optional[ActionPhase] = None
    timeframe: str = ""
    prerequisites: Tuple[str, ...] = ()
    monitoring: Tuple[str, ...] = ()
    dosing: Optional[DosingRule] = None

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        data = {
            "id": self.id,
            "sequence": self.sequence,
            "title": self.title,
            "urgency": self.urgency.value,
            "description": self.description,
            "rationale": self.rationale,
            "expected_outcome": self.expected_outcome,
            "phase": self.phase.value if self.phase else None,
            "timeframe": self.timeframe,
            "prerequisites": list(self.prerequisites),
            "monitoring": list(self.monitoring),
            "dosing": None,
        }
        if self.dosing is not None:
            data["dosing"] = {
                "calculation": self.dosing.calculation,
                "route": self.dosing.route,
                "dose": render_dose(self, weight_kg),
            }
        return data


def render_dose(action: ActionDefinition, weight_kg: Optional[float]) -> Optional[str]:
    """
    Format the weight-based dose for an action, e.g. "RL 300 mL".

    Returns None when the action carries no dosing rule or no usable
    weight is available.
    """
    if action.dosing is None or weight_kg is None or weight_kg <= 0:
        return None
    return action.dosing.render(weight_kg)


# ── Engines ──────────────────────────────────────────────────────────────────

TriggerFn = Callable[[FindingSnapshot, float, PatientAge], bool]


@dataclass(frozen=True)
class EngineDefinition:
    """
    A named emergency protocol: trigger predicate plus ordered checklist.

    Definitions are built once at import and never mutated.  Activations
    refer to them by `id` only, so a serialised manager state can always be
    re-resolved against the catalog on another device.
    """
    # ── Identity ──────────────────────────────────────────────────────────
    id: str
    name: str
    category: str
    severity: Severity
    tier: UrgencyTier

    # ── Behaviour ─────────────────────────────────────────────────────────
    trigger: TriggerFn = field(compare=False, repr=False)
    actions: Tuple[ActionDefinition, ...] = ()

    # ── Reference data ────────────────────────────────────────────────────
    description: str = ""
    monitoring: Tuple[str, ...] = ()
    key_indicators: Tuple[str, ...] = ()
    time_to_harm_minutes: Optional[int] = None
    intervention_window: str = ""

    def evaluate(self, findings: FindingSnapshot, weight_kg: float, age: PatientAge) -> bool:
        return bool(self.trigger(findings, weight_kg, age))

    def action(self, action_id: str) -> Optional[ActionDefinition]:
        for a in self.actions:
            if a.id == action_id:
                return a
        return None

    @property
    def action_ids(self) -> Tuple[str, ...]:
        return tuple(a.id for a in self.actions)

    @property
    def ordered_actions(self) -> Tuple[ActionDefinition, ...]:
        return tuple(sorted(self.actions, key=lambda a: a.sequence))

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "severity": self.severity.value,
            "tier": self.tier.value,
            "description": self.description,
            "monitoring": list(self.monitoring),
            "key_indicators": list(self.key_indicators),
            "time_to_harm_minutes": self.time_to_harm_minutes,
            "intervention_window": self.intervention_window,
            "actions": [a.to_dict(weight_kg) for a in self.ordered_actions],
        }
