"""Tests for time-reversal experiments."""

import threading

import pytest

from chaos.metrics import distance
from chaos.reversal import reversal_echo, reversal_trace, run_displayed_reversal
from config import SimulationConfig
from simulation.entities import Particle
from simulation.scheduler import EventScheduler
from simulation.state import Snapshot


class TestReversalEcho:
    """Tests for reversal_echo()."""

    def test_head_on_returns_home(self, head_on):
        """Forward, invert, forward lands back on the start."""
        echo = reversal_echo(head_on, 40)
        assert distance(Snapshot.of(head_on), echo) == pytest.approx(0.0, abs=1e-9)

    def test_walls_return_home(self):
        particles = [Particle(0.5, 0.5, 0.01, 0.004, 0.05, 1.0)]
        echo = reversal_echo(particles, 250)
        assert echo[0] == pytest.approx((0.5, 0.5), abs=1e-9)

    def test_zero_duration(self, head_on):
        assert reversal_echo(head_on, 0) == Snapshot.of(head_on)


class TestReversalTrace:
    """Tests for reversal_trace()."""

    def test_trace_mirrors_forward_run(self, head_on):
        """Start, collision, reversal instant, collision replayed."""
        distances = reversal_trace(head_on, 40)
        assert len(distances) == 4
        assert distances[0] == 0.0
        assert distances[1] == pytest.approx(0.15)
        assert distances[2] == pytest.approx(0.1)
        assert distances[3] == pytest.approx(0.15)


class TestDisplayedReversal:
    """Tests for run_displayed_reversal()."""

    def test_timed_session(self, head_on):
        """Timed sessions replay the forward phase backwards for the same duration."""
        frames = []
        reversed_at = []
        scheduler = EventScheduler(head_on, config=SimulationConfig(redraw_hz=1.0))
        elapsed = run_displayed_reversal(scheduler, 4.0, on_redraw=lambda s: frames.append(s.clock),
                                         on_reverse=lambda s: reversed_at.append(s.clock))
        assert elapsed == 4.0
        assert reversed_at == [4.0]
        assert frames == [0.0, 1.0, 2.0, 3.0, 4.0] * 2
        assert distance(scheduler.snapshot(), Snapshot.of(head_on)) < 1e-9

    def test_interactive_session(self, head_on):
        cancel = threading.Event()

        def redraw(s):
            if s.clock >= 2.0:
                cancel.set()

        scheduler = EventScheduler(head_on, config=SimulationConfig(redraw_hz=1.0))
        elapsed = run_displayed_reversal(scheduler, cancel=cancel, on_redraw=redraw)
        assert elapsed == 2.0
        assert scheduler.clock == 2.0
        assert distance(scheduler.snapshot(), Snapshot.of(head_on)) < 1e-9

    def test_abort_skips_backward_phase(self, head_on):
        reversed_at = []
        scheduler = EventScheduler(head_on)
        run_displayed_reversal(scheduler, 10.0, on_reverse=reversed_at.append, should_stop=lambda: True)
        assert reversed_at == []
        assert scheduler.stats.cancelled
