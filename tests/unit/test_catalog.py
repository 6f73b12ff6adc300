"""
Unit Tests for the Engine Catalog

Tests for catalog integrity, lookups, tier split and dose rendering.
"""
import pytest

from paeds_engines.core.engines import (
    ActionDefinition,
    DoseComponent,
    DosingRule,
    EngineDefinition,
    FindingSnapshot,
    PatientAge,
    Severity,
    UrgencyTier,
    catalog,
    render_dose,
)
from paeds_engines.core.engines.rules_tier2 import TIER2_CONDITIONS, build_tier2_engines
from paeds_engines.utils import CatalogIntegrityError, EngineNotFoundError


TIER1_IDS = [
    "septic-shock",
    "respiratory-failure",
    "status-epilepticus",
    "dka",
    "anaphylaxis",
    "hypovolemic-shock",
    "cardiogenic-shock",
    "severe-malnutrition",
    "meningitis",
]


def _action(action_id: str, sequence: int) -> ActionDefinition:
    return ActionDefinition(id=action_id, sequence=sequence, title=action_id, urgency=Severity.URGENT)


def _engine(engine_id: str, actions) -> EngineDefinition:
    return EngineDefinition(
        id=engine_id,
        name=engine_id,
        category="test",
        severity=Severity.INFO,
        tier=UrgencyTier.HOURS,
        trigger=lambda f, w, a: False,
        actions=tuple(actions),
    )


class TestCatalogIntegrity:
    """Catalog-wide invariants."""

    def test_engine_ids_unique(self):
        """No two engines share an id."""
        ids = [e.id for e in catalog.all_engines()]
        assert len(ids) == len(set(ids))

    def test_action_ids_unique_and_sequences_increasing(self):
        """Action ids are unique and sequences strictly increase."""
        for engine in catalog.all_engines():
            assert len(engine.action_ids) == len(set(engine.action_ids)), engine.id
            sequences = [a.sequence for a in engine.actions]
            assert sequences == sorted(sequences), engine.id
            assert len(sequences) == len(set(sequences)), engine.id

    def test_every_engine_has_actions(self):
        """Every engine has a checklist."""
        for engine in catalog.all_engines():
            assert engine.actions, engine.id

    def test_tier1_engines_present_in_catalog_order(self):
        """The nine minutes-tier engines in declaration order."""
        tier1 = [e.id for e in catalog.engines_by_tier(UrgencyTier.MINUTES)]
        assert tier1 == TIER1_IDS

    def test_tier2_expanded_from_condition_records(self):
        """One hours-tier engine per condition record."""
        tier2 = catalog.engines_by_tier(UrgencyTier.HOURS)
        assert len(tier2) == len(TIER2_CONDITIONS)
        assert catalog.lookup("acute-kidney-injury") is not None

    def test_tier1_evaluated_before_tier2(self):
        """Minutes-tier engines all precede hours-tier ones."""
        tiers = [e.tier for e in catalog.all_engines()]
        first_hours = tiers.index(UrgencyTier.HOURS)
        assert UrgencyTier.MINUTES not in tiers[first_hours:]

    def test_duplicate_engine_id_rejected(self):
        """Validation names the duplicated engine."""
        engine = _engine("dup", [_action("a", 1)])
        with pytest.raises(CatalogIntegrityError) as exc_info:
            catalog.validate_engines([engine, engine])
        assert exc_info.value.engine_id == "dup"

    def test_duplicate_action_id_rejected(self):
        """Repeated action ids fail validation."""
        engine = _engine("bad", [_action("a", 1), _action("a", 2)])
        with pytest.raises(CatalogIntegrityError):
            catalog.validate_engines([engine])

    def test_non_increasing_sequence_rejected(self):
        """Repeated sequence numbers fail validation."""
        engine = _engine("bad", [_action("a", 2), _action("b", 2)])
        with pytest.raises(CatalogIntegrityError) as exc_info:
            catalog.validate_engines([engine])
        assert exc_info.value.code == "CATALOG_INTEGRITY_ERROR"


class TestLookup:
    """Lenient and strict lookups."""

    def test_lookup_known(self):
        """Known ids return the definition."""
        engine = catalog.lookup("septic-shock")
        assert engine.name
        assert engine.severity == Severity.CRITICAL
        assert engine.action_ids[0] == "sepsis-1-recognize"

    def test_lookup_unknown_returns_none(self):
        """Lenient lookup returns None for unknown ids."""
        assert catalog.lookup("not-an-engine") is None

    def test_get_engine_unknown_raises(self):
        """Strict lookup raises EngineNotFoundError."""
        with pytest.raises(EngineNotFoundError) as exc_info:
            catalog.get_engine("not-an-engine")
        assert exc_info.value.to_dict()["error"] == "ENGINE_NOT_FOUND"

    def test_engine_ids_match_all_engines(self):
        """engine_ids mirrors all_engines."""
        assert catalog.engine_ids() == tuple(e.id for e in catalog.all_engines())


class TestTier2Severity:
    """Severity derives from untreated time-to-harm."""

    def test_short_time_to_harm_is_urgent(self):
        """180 minutes or less is urgent."""
        assert catalog.lookup("acute-kidney-injury").severity == Severity.URGENT  # 180 min

    def test_long_time_to_harm_is_info(self):
        """Longer than 180 minutes is info."""
        assert catalog.lookup("renal-failure").severity == Severity.INFO  # 240 min

    def test_generic_checklist(self):
        """Hours-tier engines get recognise, stabilise, escalate."""
        engine = catalog.lookup("heat-stroke")
        assert engine.action_ids == (
            "heat-stroke-1-recognize",
            "heat-stroke-2-stabilize",
            "heat-stroke-3-escalate",
        )

    def test_build_respects_minimum(self):
        """The indicator threshold is configurable."""
        engines = {e.id: e for e in build_tier2_engines(minimum=1)}
        assert engines["acute-kidney-injury"].evaluate(
            FindingSnapshot({"oliguria": True}), 18, PatientAge(5)
        )


class TestDoseRendering:
    """Weight-based dose text."""

    def test_fluid_bolus_for_15kg(self):
        """20 mL/kg at 15 kg is 300 mL."""
        action = catalog.lookup("septic-shock").action("sepsis-3-fluids")
        assert render_dose(action, 15) == "RL 300 mL"

    def test_no_weight_no_dose(self):
        """Missing or zero weight gives no dose text."""
        action = catalog.lookup("septic-shock").action("sepsis-3-fluids")
        assert render_dose(action, None) is None
        assert render_dose(action, 0) is None

    def test_action_without_dosing(self):
        """Actions without a dosing rule render None."""
        action = catalog.lookup("septic-shock").action("sepsis-1-recognize")
        assert render_dose(action, 15) is None

    def test_range_and_cap(self):
        """Ranges render both ends and respect the cap."""
        rule = DosingRule(
            calculation="0.01 mg/kg",
            route="IM",
            components=(DoseComponent("Epinephrine", 0.01, 0.02, max_dose=0.5, decimals=2),),
        )
        assert rule.render(10) == "Epinephrine 0.10-0.20 mg"
        assert rule.render(40) == "Epinephrine 0.40-0.50 mg"

    def test_engine_to_dict_renders_doses(self):
        """Engine serialisation renders doses for the weight."""
        data = catalog.lookup("septic-shock").to_dict(weight_kg=15)
        fluids = next(a for a in data["actions"] if a["id"] == "sepsis-3-fluids")
        assert fluids["dosing"]["dose"] == "RL 300 mL"
        assert data["tier"] == "tier_1_minutes"
