"""
Critical-time searches.

A measure maps a simulated duration to a divergence distance. The search
doubles the duration while the measure stays under the threshold and bisects
back toward the last good duration once it overshoots, stopping when two
consecutive candidates are within ``tolerance``. Chaotic dynamics make the
measure non-monotone, so the answer is an estimate. When the bracket never
closes, ``max_iterations`` bounds the number of measurements and the simulation
horizon bounds the duration of each one.
"""

from chaos.metrics import distance
from chaos.reversal import reversal_echo
from config import SearchConfig, SimulationConfig
from core.errors import SnapshotMismatchError
from internal.logging import get_logger
from simulation.scheduler import EventScheduler
from simulation.state import Snapshot


class SearchResult:
    __slots__ = ("time", "previous_time", "iterations", "converged", "last_distance")

    def __init__(self, time, previous_time, iterations, converged, last_distance):
        self.time = time
        self.previous_time = previous_time
        self.iterations = iterations
        self.converged = converged
        self.last_distance = last_distance

    def to_dict(self):
        return {"time": self.time,
                "previous_time": self.previous_time,
                "iterations": self.iterations,
                "converged": self.converged,
                "last_distance": self.last_distance}

    def __repr__(self):
        return f"SearchResult(time={self.time!r}, iterations={self.iterations}, converged={self.converged})"


def bracket_critical_time(measure, threshold, tolerance, initial_time=100.0, max_iterations=200, inclusive=False,
                          max_time=None):
    """Doubling-then-bisection search for the duration at which ``measure`` crosses ``threshold``.

    A measure value diverges when it is above ``threshold`` (or equal to it
    with ``inclusive``). The search gives up, unconverged, after
    ``max_iterations`` measurements or once the candidate passes ``max_time``.
    """
    log = get_logger()
    previous, current = 0.0, float(initial_time)
    iterations = 0
    last = None

    while abs(current - previous) > tolerance:
        if iterations >= max_iterations:
            log.warn("search did not converge", time=current, previous=previous, iterations=iterations,
                     threshold=threshold)
            return SearchResult(current, previous, iterations, False, last)
        if max_time is not None and current > max_time:
            log.warn("search passed the horizon", time=current, previous=previous, horizon=max_time,
                     threshold=threshold)
            return SearchResult(current, previous, iterations, False, last)
        last = measure(current)
        iterations += 1
        diverged = last >= threshold if inclusive else last > threshold
        log.debug("measure", t=current, distance=last, diverged=diverged)
        if diverged:
            current = (previous + current) / 2
        else:
            previous, current = current, 2 * current

    return SearchResult(current, previous, iterations, True, last)


def butterfly_time(base, twin, threshold, tolerance, world=None, config=None, search=None):
    """Time at which ``base`` and its perturbed ``twin`` drift more than ``threshold`` apart."""
    if len(base) != len(twin):
        raise SnapshotMismatchError(len(base), len(twin))
    search = search or SearchConfig()
    config = config or SimulationConfig()

    def measure(duration):
        first = EventScheduler(base, world, config)
        first.run_silent(duration)
        second = EventScheduler(twin, world, config)
        second.run_silent(duration)
        return distance(first.snapshot(), second.snapshot())

    result = bracket_critical_time(measure, threshold, tolerance, search.initial_time, search.max_iterations,
                                   max_time=config.horizon)
    get_logger().info("butterfly search", particles=len(base), threshold=threshold, **result.to_dict())
    return result


def reversal_divergence_time(particles, threshold, tolerance, world=None, config=None, search=None):
    """Time beyond which a forward/invert/forward replay no longer lands within ``threshold`` of the start."""
    search = search or SearchConfig()
    config = config or SimulationConfig()
    origin = Snapshot.of(particles)

    def measure(duration):
        return distance(origin, reversal_echo(particles, duration, world, config))

    result = bracket_critical_time(measure, threshold, tolerance, search.initial_time, search.max_iterations,
                                   inclusive=True, max_time=config.horizon)
    get_logger().info("reversal search", particles=len(particles), threshold=threshold, **result.to_dict())
    return result
