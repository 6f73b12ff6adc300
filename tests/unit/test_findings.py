"""
Unit Tests for Finding Snapshots and Clinical Predicates
"""
import pytest

from paeds_engines.core.engines import FindingSnapshot, PatientAge
from paeds_engines.core.engines import findings as fx


class TestFindingSnapshot:
    """Key normalisation and immutability."""

    def test_camel_case_keys_normalised(self):
        """camelCase and acronym keys map to snake_case."""
        snap = FindingSnapshot({"heartRate": 120, "capillaryRefill": 3, "systolicBP": 80})
        assert snap["heart_rate"] == 120
        assert snap["capillary_refill"] == 3
        assert snap["systolic_bp"] == 80

    def test_key_aliases(self):
        """Known misspellings resolve to the canonical key."""
        snap = FindingSnapshot({"spO2": 88, "urinOutput": 0})
        assert snap["spo2"] == 88
        assert snap["urine_output"] == 0

    def test_none_means_not_observed(self):
        """None values are dropped rather than stored."""
        snap = FindingSnapshot({"temperature": None, "seizures": True})
        assert "temperature" not in snap
        assert len(snap) == 1

    def test_immutable(self):
        """Neither attributes nor items can be assigned."""
        snap = FindingSnapshot({"seizures": True})
        with pytest.raises(AttributeError):
            snap.extra = 1
        with pytest.raises(TypeError):
            snap["seizures"] = False

    def test_source_mapping_not_shared(self):
        """The snapshot copies its source."""
        source = {"seizures": True}
        snap = FindingSnapshot(source)
        source["seizures"] = False
        assert snap["seizures"] is True

    def test_equality_with_plain_mapping(self):
        """Snapshots compare equal to dicts and hash by content."""
        assert FindingSnapshot({"heartRate": 100}) == {"heart_rate": 100}
        assert hash(FindingSnapshot({"a": 1})) == hash(FindingSnapshot({"a": 1}))

    def test_from_mapping_passthrough(self):
        """An existing snapshot is reused as is."""
        snap = FindingSnapshot({"a": 1})
        assert FindingSnapshot.from_mapping(snap) is snap


class TestPatientAge:
    """Age coercion from request values."""

    def test_from_number(self):
        """A bare number is whole years."""
        assert PatientAge.from_value(3) == PatientAge(3, 0)

    def test_from_mapping(self):
        """Years and months combine into one age."""
        age = PatientAge.from_value({"years": 1, "months": 6})
        assert age.in_months == 18
        assert age.in_years == pytest.approx(1.5)


class TestPredicates:
    """Clinical predicates are total over sparse snapshots."""

    def test_missing_values_fail_predicates(self):
        """An empty snapshot satisfies no predicate."""
        empty = FindingSnapshot()
        age = PatientAge(2)
        assert not fx.febrile(empty)
        assert not fx.tachycardic(empty, age)
        assert not fx.low_systolic(empty, age)
        assert not fx.perfusion_abnormal(empty)
        assert not fx.altered_mental_status(empty)

    def test_non_numeric_values_ignored(self):
        """Strings and booleans are not read as numbers."""
        snap = FindingSnapshot({"temperature": "hot", "heart_rate": True})
        assert fx.number(snap, "temperature") is None
        assert fx.number(snap, "heart_rate") is None
        assert not fx.febrile(snap)

    @pytest.mark.parametrize("years,rate,expected", [
        (0, 41, True),
        (0, 40, False),
        (3, 36, True),
        (8, 30, False),
        (8, 31, True),
    ])
    def test_tachypnoea_age_bands(self, years, rate, expected):
        """Respiratory rate limits follow the SIRS age bands."""
        snap = FindingSnapshot({"respiratory_rate": rate})
        assert fx.tachypnoeic(snap, PatientAge(years)) is expected

    def test_low_systolic_scales_with_age(self):
        """The hypotension limit rises with age."""
        snap = FindingSnapshot({"systolic_bp": 95})
        assert not fx.low_systolic(snap, PatientAge(2))   # limit 94
        assert fx.low_systolic(snap, PatientAge(5))       # limit 100

    def test_flag_requires_explicit_true(self):
        """Truthy strings are not flags."""
        assert not fx.flag(FindingSnapshot({"fever": "yes"}), "fever")
        assert fx.flag(FindingSnapshot({"fever": True}), "fever")

    @pytest.mark.parametrize("age,expected", [
        (PatientAge(0, 6), 7),
        (PatientAge(3), 14),
        (PatientAge(10), 37),
        (PatientAge(15), 43),
    ])
    def test_expected_weight(self, age, expected):
        """APLS expected weight across infant, child and teen formulas."""
        assert fx.expected_weight_kg(age) == expected


class TestPerfusion:
    """Each perfusion sign is sufficient on its own."""

    @pytest.mark.parametrize("findings", [
        {"capillaryRefill": 3},
        {"skinColor": "mottled"},
        {"skinColor": "pale"},
        {"lactate": 3},
    ])
    def test_single_sign_abnormal(self, findings):
        """Slow refill, mottled or pale skin, or lactate above 2."""
        assert fx.perfusion_abnormal(FindingSnapshot(findings))

    @pytest.mark.parametrize("findings", [
        {"capillaryRefill": 2},
        {"skinColor": "pink"},
        {"lactate": 2},
        {"lactate": "high"},
    ])
    def test_normal_or_unreadable(self, findings):
        """Values at the limit or not numeric leave perfusion normal."""
        assert not fx.perfusion_abnormal(FindingSnapshot(findings))
