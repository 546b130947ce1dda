"""
Unit tests for stats_engine.py - family computation and lookups.
"""
import math

import numpy as np
import pytest

from config import StatsConfig
from rates import DOUBLE_FOCUS_RATES, SINGLE_FOCUS_RATES, Rarity
from spark import SparkPolicy
from stats_engine import DistributionFamily, StatsEngine, compute_family, raw_family

P = 0.0075


@pytest.fixture(scope="module")
def family():
    return compute_family(P, 5, 1000)


@pytest.fixture(scope="module")
def sparked():
    return compute_family(P, 5, 1000, apply_spark=True, hits_per_spark=200)


class TestComputeFamily:
    """Tests for compute_family without sparks."""

    def test_shape(self, family):
        assert family.values.shape == (5, 1000)
        assert len(family) == 5
        assert family.max_pulls == 1000

    def test_first_hit_within_200(self, family):
        expected = 1 - (1 - P) ** 200
        assert family[0][199] == pytest.approx(expected, abs=1e-6)
        assert family[0][199] == pytest.approx(0.779, abs=2e-3)

    def test_single_pull(self, family):
        assert family[0][0] == pytest.approx(P, rel=1e-10)

    @pytest.mark.parametrize("r", range(5))
    def test_structural_zeros(self, family, r):
        assert np.all(family[r][:r] == 0.0)
        assert family[r][r] > 0.0

    def test_more_hits_is_less_likely(self, family):
        for upper, lower in zip(family.values, family.values[1:]):
            assert np.all(upper >= lower)

    def test_not_sparked(self, family):
        assert not family.sparks_applied
        assert family.hits_per_spark is None

    def test_certain_rate(self):
        fam = compute_family(1.0, 3, 10)
        assert fam[2][1] == 0.0
        assert fam[2][2] == 1.0

    def test_zero_rate(self):
        fam = compute_family(0.0, 3, 50)
        assert np.all(fam.values == 0.0)

    @pytest.mark.parametrize("p,hits,pulls", [(1.5, 5, 100), (-0.1, 5, 100), (0.1, 0, 100), (0.1, 5, 0)])
    def test_boundary_guards(self, p, hits, pulls):
        with pytest.raises(ValueError):
            compute_family(p, hits, pulls)

    def test_raw_family_matches(self, family):
        np.testing.assert_array_equal(raw_family(P, 5, 1000), family.values)


class TestSparkedFamily:
    """Tests for compute_family with sparks."""

    def test_metadata(self, sparked):
        assert sparked.sparks_applied
        assert sparked.hits_per_spark == 200

    def test_spark_points(self, sparked, family):
        assert sparked[0][199] == 1.0
        assert sparked[0][198] == family[0][198]
        assert sparked[4][999] == 1.0

    def test_policy_is_configurable(self, family):
        lagged = compute_family(P, 5, 1000, apply_spark=True, hits_per_spark=200,
                                spark_policy=SparkPolicy.NEXT_PULL)
        assert lagged[0][199] == family[0][199]
        assert lagged[0][200] == 1.0


class TestLookups:
    """Tests for point-of-interest and chart helpers."""

    def test_probability_is_indexed_read(self, family):
        assert family.probability(1, 200) == family[0][199]
        assert family.probability(3, 450) == family[2][449]

    def test_probability_out_of_range(self, family):
        with pytest.raises(IndexError):
            family.probability(6, 10)
        with pytest.raises(IndexError):
            family.probability(1, 0)
        with pytest.raises(IndexError):
            family.probability(1, 1001)

    def test_point_of_interest(self, family):
        assert family.point_of_interest(2, 300) == (300, family.probability(2, 300))

    def test_pulls_needed(self, family):
        expected = math.ceil(math.log(0.5) / math.log(1 - P))
        assert family.pulls_needed(1, 0.5) == expected
        assert family.pulls_needed(5, 0.99) is None

    def test_datasets(self, family):
        data = family.datasets()
        assert len(data) == 5
        assert len(data[0]) == 1000
        assert data[0][0][0] == 1
        assert data[0][199] == (200, family[0][199])

    def test_highlight(self, family):
        assert family.highlight == 4
        picked = family.with_highlight(0)
        assert picked.highlight == 0
        assert picked.values is not None
        with pytest.raises(IndexError):
            family.with_highlight(5)

    def test_values_are_read_only(self, family):
        with pytest.raises(ValueError):
            family.values[0, 0] = 1.0

    def test_accepts_lists(self):
        fam = DistributionFamily([[0.1, 0.5], [0.0, 0.2]], focus_probability=0.1)
        assert fam.probability(2, 2) == 0.2


class TestStatsEngine:
    """Tests for the config-bound StatsEngine."""

    def test_uses_config_window(self):
        engine = StatsEngine(StatsConfig(max_hits=2, hits_per_spark=50))
        fam = engine.compute_family(0.02)
        assert fam.values.shape == (2, 100)

    def test_spark_toggle_from_config(self):
        engine = StatsEngine(StatsConfig(max_hits=2, hits_per_spark=50, apply_sparks=True))
        assert engine.compute_family(0.02).sparks_applied
        assert not engine.compute_family(0.02, apply_spark=False).sparks_applied

    def test_family_for_rate_table(self):
        engine = StatsEngine(StatsConfig(max_hits=3, hits_per_spark=100))
        fam = engine.family_for(SINGLE_FOCUS_RATES)
        assert fam.focus_probability == 0.0075
        assert engine.family_for(DOUBLE_FOCUS_RATES).focus_probability == 0.015
        assert engine.family_for(SINGLE_FOCUS_RATES, Rarity.SR_FOCUS).focus_probability == 0.0225

    @pytest.mark.parametrize("override", [{"max_hits": 0}, {"max_pulls": 0}])
    def test_explicit_zero_is_not_replaced_by_default(self, override):
        engine = StatsEngine(StatsConfig(max_hits=2, hits_per_spark=50))
        with pytest.raises(ValueError):
            engine.compute_family(0.02, **override)

    def test_explicit_window_overrides_config(self):
        engine = StatsEngine(StatsConfig(max_hits=2, hits_per_spark=50))
        assert engine.compute_family(0.02, max_hits=1, max_pulls=30).values.shape == (1, 30)

    def test_default_config(self):
        engine = StatsEngine()
        assert engine.config.max_pulls == 1000
