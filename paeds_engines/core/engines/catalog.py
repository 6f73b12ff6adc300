"""
Engine Catalog

The full, fixed set of supported emergency protocols.  Enumeration is
total and decided at import time; there is no runtime registration.

Usage:
    from paeds_engines.core.engines import catalog

    engine = catalog.lookup("septic-shock")
    for e in catalog.engines_by_tier(UrgencyTier.MINUTES):
        print(e.id, e.severity.value)

Adding a new protocol:
    1. Define it in rules_tier1.py (action-rich) or add a flat record to
       TIER2_CONDITIONS in rules_tier2.py.
    2. Append it to TIER1_ENGINES if it is a tier-1 protocol.
    3. Bump CATALOG_VERSION.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from paeds_engines.utils import CatalogIntegrityError, EngineNotFoundError, get_logger
from .base import EngineDefinition, UrgencyTier
from .rules_tier1 import TIER1_ENGINES
from .rules_tier2 import TIER2_ENGINES

logger = get_logger(__name__)

CATALOG_VERSION = "2024.2"


def validate_engines(engines: Iterable[EngineDefinition]) -> None:
    """
    Enforce the catalog invariants.

    Raises:
        CatalogIntegrityError: duplicate engine ids, duplicate action ids
            within an engine, or sequences that are not strictly increasing.
    """
    seen_engines = set()
    for engine in engines:
        if engine.id in seen_engines:
            raise CatalogIntegrityError(f"Duplicate engine id: {engine.id}", engine_id=engine.id)
        seen_engines.add(engine.id)

        seen_actions = set()
        last_sequence = 0
        for action in engine.actions:
            if action.id in seen_actions:
                raise CatalogIntegrityError(
                    f"Duplicate action id {action.id} in {engine.id}",
                    engine_id=engine.id,
                    details={"action_id": action.id},
                )
            seen_actions.add(action.id)

            if action.sequence <= last_sequence:
                raise CatalogIntegrityError(
                    f"Action sequence must be strictly increasing in {engine.id}",
                    engine_id=engine.id,
                    details={"action_id": action.id, "sequence": action.sequence},
                )
            last_sequence = action.sequence


def _build_registry(engines: Tuple[EngineDefinition, ...]) -> Dict[str, EngineDefinition]:
    validate_engines(engines)
    return {engine.id: engine for engine in engines}


# ── Registry: engine id → definition ─────────────────────────────────────────
# Tier 1 first, then tier 2; dict order is the evaluation order.
_ENGINES: Tuple[EngineDefinition, ...] = TIER1_ENGINES + TIER2_ENGINES
_REGISTRY: Dict[str, EngineDefinition] = _build_registry(_ENGINES)

logger.debug(
    f"Engine catalog {CATALOG_VERSION}: {len(TIER1_ENGINES)} tier-1, "
    f"{len(TIER2_ENGINES)} tier-2 engines"
)


def lookup(engine_id: str) -> Optional[EngineDefinition]:
    """Return the definition for `engine_id`, or None if it is not in the catalog."""
    return _REGISTRY.get(engine_id)


def get_engine(engine_id: str) -> EngineDefinition:
    """Strict variant of `lookup` for the boundary layer."""
    engine = _REGISTRY.get(engine_id)
    if engine is None:
        raise EngineNotFoundError(engine_id)
    return engine


def all_engines() -> Tuple[EngineDefinition, ...]:
    return _ENGINES


def engine_ids() -> Tuple[str, ...]:
    return tuple(_REGISTRY)


def engines_by_tier(tier: UrgencyTier) -> Tuple[EngineDefinition, ...]:
    return tuple(e for e in _ENGINES if e.tier == tier)
