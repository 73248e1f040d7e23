"""Batch drivers: repeat a search over a geometric range of thresholds or over random trials."""

import random

from chaos.report import summarize
from chaos.search import butterfly_time, reversal_divergence_time
from internal.logging import get_logger
from simulation.generators import random_configuration, random_pair


class BatchReport:
    __slots__ = ("kind", "parameter", "parameters", "results")

    def __init__(self, kind, parameter, parameters, results):
        self.kind = kind
        self.parameter = parameter
        self.parameters = parameters
        self.results = results

    @property
    def times(self):
        return [result.time for result in self.results]

    @property
    def summary(self):
        return summarize(self.times)

    def to_dict(self):
        return {"kind": self.kind,
                "parameter": self.parameter,
                "parameters": self.parameters,
                "times": self.times,
                "converged": [result.converged for result in self.results],
                "summary": self.summary.to_dict()}


def geometric_thresholds(threshold, factor, steps):
    return [threshold * factor ** i for i in range(steps)]


def _collect(kind, parameter, parameters, run):
    log = get_logger().bind(batch=kind)
    results = []
    for i, value in enumerate(parameters):
        result = run(value)
        log.info("trial", index=i, parameter=value, time=result.time, converged=result.converged)
        results.append(result)
    return BatchReport(kind, parameter, parameters, results)


def butterfly_over_thresholds(base, twin, threshold, factor, steps, tolerance, world=None, config=None,
                              search=None):
    """One fixed pair, thresholds ``threshold * factor**i``."""
    return _collect("butterfly_thresholds", "threshold", geometric_thresholds(threshold, factor, steps),
                    lambda eps: butterfly_time(base, twin, eps, tolerance, world, config, search))


def butterfly_over_trials(trials, count, threshold, magnitude, tolerance, world=None, config=None, search=None,
                          rng=random):
    """``trials`` fresh random pairs at a fixed threshold."""
    def run(_):
        base, twin = random_pair(count, magnitude, config, rng)
        return butterfly_time(base, twin, threshold, tolerance, world, config, search)

    return _collect("butterfly_trials", "trial", list(range(trials)), run)


def reversal_over_thresholds(particles, threshold, factor, steps, tolerance, world=None, config=None,
                             search=None):
    """One fixed configuration, thresholds ``threshold * factor**i``."""
    return _collect("reversal_thresholds", "threshold", geometric_thresholds(threshold, factor, steps),
                    lambda eps: reversal_divergence_time(particles, eps, tolerance, world, config, search))


def reversal_over_trials(trials, count, threshold, tolerance, world=None, config=None, search=None, rng=random):
    """``trials`` fresh random configurations at a fixed threshold."""
    def run(_):
        particles = random_configuration(count, config, rng)
        return reversal_divergence_time(particles, threshold, tolerance, world, config, search)

    return _collect("reversal_trials", "trial", list(range(trials)), run)
