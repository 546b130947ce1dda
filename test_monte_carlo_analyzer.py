"""
Unit tests for monte_carlo_analyzer.py - empirical checks against the analytic results.
"""
import numpy as np
import pytest

from config import StatsConfig
from monte_carlo_analyzer import MonteCarloAnalyzer
from rates import SINGLE_FOCUS_RATES, PullType, Rarity
from spark import apply_sparks
from stats_engine import raw_family


@pytest.fixture
def analyzer():
    return MonteCarloAnalyzer(StatsConfig(seed=7), iterations=4000)


class TestRarityFrequencies:
    """Tests for estimate_rarity_frequencies."""

    def test_single_pull_frequencies(self):
        analyzer = MonteCarloAnalyzer(StatsConfig(seed=11), iterations=20000)
        freq = analyzer.estimate_rarity_frequencies(SINGLE_FOCUS_RATES, PullType.ONE)
        assert sum(freq.values()) == pytest.approx(1.0)
        assert freq[Rarity.R] == pytest.approx(0.79, abs=0.015)
        assert freq[Rarity.R_FOCUS] == 0.0

    def test_ten_pull_matches_expected(self, analyzer):
        freq = analyzer.estimate_rarity_frequencies(SINGLE_FOCUS_RATES, PullType.TEN)
        expected = analyzer.expected_frequencies(SINGLE_FOCUS_RATES, PullType.TEN)
        assert expected[Rarity.R] == pytest.approx(0.79 * 9 / 10)
        for rarity in Rarity:
            assert freq[rarity] == pytest.approx(expected[rarity], abs=0.01)

    def test_seed_is_reproducible(self):
        a = MonteCarloAnalyzer(StatsConfig(seed=3), iterations=500)
        b = MonteCarloAnalyzer(StatsConfig(seed=3), iterations=500)
        assert a.estimate_rarity_frequencies(SINGLE_FOCUS_RATES) == \
            b.estimate_rarity_frequencies(SINGLE_FOCUS_RATES)


class TestHitFamily:
    """Tests for simulate_hit_family."""

    def test_matches_analytic(self, analyzer):
        empirical = analyzer.simulate_hit_family(0.05, 3, 200)
        assert empirical.shape == (3, 200)
        assert np.max(np.abs(empirical - raw_family(0.05, 3, 200))) < 0.05

    def test_matches_analytic_with_sparks(self, analyzer):
        empirical = analyzer.simulate_hit_family(0.02, 3, 200, hits_per_spark=50)
        analytic = np.vstack(apply_sparks(raw_family(0.02, 3, 200), 50))
        assert np.max(np.abs(empirical - analytic)) < 0.05
        assert np.all(empirical[:, 149] == 1.0)

    def test_uses_config_iterations(self):
        analyzer = MonteCarloAnalyzer(StatsConfig(mc_iterations=123))
        assert analyzer.iterations == 123

    def test_zero_iterations_is_rejected(self):
        with pytest.raises(ValueError):
            MonteCarloAnalyzer(StatsConfig(mc_iterations=123), iterations=0)

    def test_progress_and_report(self, analyzer, capsys):
        empirical = analyzer.simulate_hit_family(0.05, 2, 100)
        analyzer.print_results(empirical, raw_family(0.05, 2, 100))
        out = capsys.readouterr().out
        assert "进度: 4000/4000" in out
        assert "蒙特卡洛验证" in out
