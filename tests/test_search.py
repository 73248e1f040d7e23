"""Tests for the critical-time searches."""

import pytest

from chaos.search import SearchResult, bracket_critical_time, butterfly_time, reversal_divergence_time
from config import SearchConfig, SimulationConfig
from core.errors import SnapshotMismatchError
from simulation.entities import Particle
from simulation.generators import make_rng, random_pair


def drifting(vx):
    """Lone disk drifting right; it meets no wall before t=436."""
    return [Particle(0.5, 0.5, vx, 0.0, 0.02, 0.5)]


class TestBracketCriticalTime:
    """Tests for the generic doubling-then-bisection search."""

    def test_linear_measure(self):
        """A measure crossing 1.3 at t=130 is located within the tolerance."""
        result = bracket_critical_time(lambda t: t / 100, 1.3, 1.0)
        assert result.converged
        assert abs(result.time - 130) <= 1.0
        assert abs(result.time - result.previous_time) <= 1.0

    def test_exclusive_comparison(self):
        """A measure equal to the threshold does not diverge by default."""
        result = bracket_critical_time(lambda t: 1.0, 1.0, 1.0, max_iterations=10)
        assert not result.converged
        assert result.iterations == 10
        assert result.time == 100.0 * 2 ** 10

    def test_inclusive_comparison(self):
        """With ``inclusive`` equality diverges, so the search halves toward zero."""
        result = bracket_critical_time(lambda t: 1.0, 1.0, 1.0, inclusive=True)
        assert result.converged
        assert result.time == 0.78125
        assert result.previous_time == 0.0

    def test_initial_time(self):
        result = bracket_critical_time(lambda t: t, 10.0, 0.5, initial_time=1.0)
        assert result.converged
        assert abs(result.time - 10) <= 0.5

    def test_gives_up_past_max_time(self):
        """A threshold that is never reached stops once the candidate passes ``max_time``."""
        result = bracket_critical_time(lambda t: 0.0, 1.0, 1.0, max_time=10000.0)
        assert not result.converged
        assert result.iterations == 7
        assert result.time == 12800.0
        assert result.previous_time == 6400.0

    def test_to_dict(self):
        result = SearchResult(1.0, 0.5, 3, True, 0.2)
        assert result.to_dict() == {"time": 1.0, "previous_time": 0.5, "iterations": 3, "converged": True,
                                    "last_distance": 0.2}


class TestButterflyTime:
    """Tests for butterfly_time()."""

    def test_separating_twins(self):
        """Velocities differing by 1e-4 part by 0.013 at t=130."""
        result = butterfly_time(drifting(0.001), drifting(0.0011), 0.013, 1.0)
        assert result.converged
        assert result.time == pytest.approx(130, abs=2)

    def test_larger_perturbation_diverges_sooner(self):
        small = butterfly_time(drifting(0.001), drifting(0.0011), 0.013, 1.0)
        large = butterfly_time(drifting(0.001), drifting(0.0012), 0.013, 1.0)
        assert large.time < small.time
        assert large.time == pytest.approx(65, abs=2)

    def test_larger_threshold_takes_longer(self):
        low = butterfly_time(drifting(0.001), drifting(0.0011), 0.013, 1.0)
        high = butterfly_time(drifting(0.001), drifting(0.0011), 0.026, 1.0)
        assert high.time > low.time

    def test_identical_twins_never_diverge(self):
        result = butterfly_time(drifting(0.001), drifting(0.001), 0.013, 1.0,
                                search=SearchConfig(max_iterations=5))
        assert not result.converged
        assert result.iterations == 5

    def test_unreachable_threshold_stops_at_horizon(self):
        """A threshold wider than the box is never crossed; default settings still return promptly."""
        base, twin = random_pair(5, 0.001, rng=make_rng(1))
        result = butterfly_time(base, twin, 5.0, 1.0, search=SearchConfig())
        assert not result.converged
        assert result.iterations == 7
        assert result.time > SimulationConfig().horizon

    def test_inputs_are_not_mutated(self):
        base, twin = drifting(0.001), drifting(0.0011)
        butterfly_time(base, twin, 0.013, 1.0)
        assert base[0].position() == (0.5, 0.5)
        assert twin[0].count == 0

    def test_length_mismatch(self, head_on):
        with pytest.raises(SnapshotMismatchError):
            butterfly_time(head_on, drifting(0.001), 0.1, 1.0)


class TestReversalDivergenceTime:
    """Tests for reversal_divergence_time()."""

    def test_reversible_system_does_not_converge(self):
        """A lone disk always retraces its path, so the search runs out of iterations."""
        result = reversal_divergence_time(drifting(0.001), 0.1, 1.0, search=SearchConfig(max_iterations=5))
        assert not result.converged
        assert result.iterations == 5
        assert result.last_distance < 1e-9

    def test_default_search_stops_at_horizon(self):
        """A lone disk never diverges; the default search ends past the horizon instead of doubling on."""
        result = reversal_divergence_time(drifting(0.001), 0.1, 1.0, search=SearchConfig())
        assert not result.converged
        assert result.iterations == 7
        assert result.time > SimulationConfig().horizon

    def test_zero_threshold_diverges_immediately(self):
        """Distance 0 already meets a zero threshold."""
        result = reversal_divergence_time(drifting(0.001), 0.0, 1.0)
        assert result.converged
        assert result.time < 1.0
