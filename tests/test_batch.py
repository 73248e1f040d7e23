"""Tests for batch drivers."""

import pytest

from chaos import batch
from config import SearchConfig, SimulationConfig
from simulation.entities import Particle
from simulation.generators import make_rng


def drifting(vx):
    return [Particle(0.5, 0.5, vx, 0.0, 0.02, 0.5)]


class TestBatch:
    """Tests for the threshold sweeps and random trials."""

    def test_geometric_thresholds(self):
        assert batch.geometric_thresholds(0.1, 2.0, 4) == pytest.approx([0.1, 0.2, 0.4, 0.8])
        assert batch.geometric_thresholds(0.1, 2.0, 0) == []

    def test_butterfly_over_thresholds(self):
        """Doubling the threshold roughly doubles the critical time of a linear drift."""
        report = batch.butterfly_over_thresholds(drifting(0.001), drifting(0.0011), 0.013, 2.0, 2, 1.0)
        assert report.parameters == pytest.approx([0.013, 0.026])
        first, second = report.times
        assert first == pytest.approx(130, abs=2)
        assert second == pytest.approx(260, abs=2)
        data = report.to_dict()
        assert data["kind"] == "butterfly_thresholds"
        assert data["parameter"] == "threshold"
        assert data["converged"] == [True, True]
        assert data["summary"]["count"] == 2

    def test_reversal_over_thresholds(self):
        search = SearchConfig(max_iterations=3)
        report = batch.reversal_over_thresholds(drifting(0.001), 0.1, 2.0, 3, 1.0, search=search)
        assert len(report.results) == 3
        assert not any(result.converged for result in report.results)

    def test_butterfly_over_trials(self):
        config = SimulationConfig(particle_radius=0.02)
        search = SearchConfig(max_iterations=6)
        report = batch.butterfly_over_trials(3, 2, 0.1, 0.001, 1.0, config=config, search=search, rng=make_rng(5))
        assert report.parameters == [0, 1, 2]
        assert len(report.times) == 3
        assert all(time > 0 for time in report.times)

    def test_trials_are_reproducible(self):
        search = SearchConfig(max_iterations=4)
        first = batch.reversal_over_trials(2, 3, 0.1, 1.0, search=search, rng=make_rng(9))
        second = batch.reversal_over_trials(2, 3, 0.1, 1.0, search=search, rng=make_rng(9))
        assert first.times == second.times

    def test_summary(self):
        report = batch.butterfly_over_thresholds(drifting(0.001), drifting(0.0011), 0.013, 2.0, 2, 1.0)
        summary = report.summary
        assert summary.minimum == min(report.times)
        assert summary.maximum == max(report.times)
        assert not summary.flat
