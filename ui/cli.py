"""Positional command-line modes.

    python asimov.py <mode> [args...] [< configuration.txt]

Butterfly modes: b, ba, bl, bla, bn. Reversal-divergence modes: d, da, de,
dea, dn. Displayed sessions: ac, pc, rc (interactive, Ctrl-C reverses),
at, pt, rt (timed). Reversal traces: ag, pg, rg.
"""

import argparse
import os
import signal
import sys
import threading
import time

from chaos import batch
from chaos.report import save_plot, summarize
from chaos.reversal import reversal_trace, run_displayed_reversal
from chaos.search import butterfly_time, reversal_divergence_time
from config import load_config
from core.errors import ConfigurationError, SnapshotMismatchError
from internal.logging import StructuredLogger, get_logger, parse_level
from simulation.generators import make_rng, perturbed_twin, random_configuration, random_pair
from simulation.loader import parse_configuration, parse_positions
from simulation.scheduler import EventScheduler
from utils.crash import set_context
from utils.timestamp import file_stamp


class Context:
    """What a mode handler needs: config, input stream, output stream and the shared RNG."""

    def __init__(self, config, stdin, stdout):
        self.config = config
        self.stdin = stdin
        self.stdout = stdout
        self.rng = make_rng(config.simulation.seed)
        self.log = get_logger()

    def say(self, message):
        print(message, file=self.stdout)

    def read_particles(self):
        return parse_configuration(self.stdin.read())

    def read_positions(self, divisor):
        return parse_positions(self.stdin.read(), divisor, self.rng)

    def report(self, mode, values, ylabel):
        summary = summarize(values)
        self.say(summary.describe())
        if summary.flat:
            return None
        path = os.path.join(self.config.report.output_dir, f"{mode}-{file_stamp()}.png")
        save_plot(values, path, title=mode, xlabel="index", ylabel=ylabel)
        self.say(f"plot written to {path}")
        return path


# Butterfly ------------------------------------------------------------------

def butterfly_fixed(ctx, eps, dif, delta):
    """Butterfly time of a configuration read from stdin."""
    base = ctx.read_particles()
    twin = perturbed_twin(base, dif, ctx.rng)
    result = butterfly_time(base, twin, eps, delta, None, ctx.config.simulation, ctx.config.search)
    ctx.say(f"time until the two states diverge: {result.time}")
    return result


def butterfly_random(ctx, n, eps, dif, delta):
    """Butterfly time of a random configuration."""
    base, twin = random_pair(n, dif, ctx.config.simulation, ctx.rng)
    result = butterfly_time(base, twin, eps, delta, None, ctx.config.simulation, ctx.config.search)
    ctx.say(f"time until the two states diverge: {result.time}")
    return result


def _print_batch(ctx, mode, report):
    for i, time_ in enumerate(report.times):
        ctx.say(f"time {i}: {time_}")
    ctx.report(mode, report.times, "critical time")
    return report


def butterfly_thresholds(ctx, steps, eps, dif, factor, delta):
    """Butterfly times over a geometric range of thresholds (stdin configuration)."""
    base = ctx.read_particles()
    twin = perturbed_twin(base, dif, ctx.rng)
    report = batch.butterfly_over_thresholds(base, twin, eps, factor, steps, delta, None, ctx.config.simulation,
                                             ctx.config.search)
    return _print_batch(ctx, "bl", report)


def butterfly_thresholds_random(ctx, steps, n, eps, dif, factor, delta):
    """Butterfly times over a geometric range of thresholds (random configuration)."""
    base, twin = random_pair(n, dif, ctx.config.simulation, ctx.rng)
    report = batch.butterfly_over_thresholds(base, twin, eps, factor, steps, delta, None, ctx.config.simulation,
                                             ctx.config.search)
    return _print_batch(ctx, "bla", report)


def butterfly_trials(ctx, trials, n, eps, dif, delta):
    """Butterfly times of several random configurations."""
    report = batch.butterfly_over_trials(trials, n, eps, dif, delta, None, ctx.config.simulation,
                                         ctx.config.search, ctx.rng)
    return _print_batch(ctx, "bn", report)


# Reversal divergence ---------------------------------------------------------

def diverge_fixed(ctx, eps, delta):
    """Reversal divergence time of a configuration read from stdin."""
    result = reversal_divergence_time(ctx.read_particles(), eps, delta, None, ctx.config.simulation,
                                      ctx.config.search)
    ctx.say(f"time until the system diverges: {result.time}")
    return result


def diverge_random(ctx, n, eps, delta):
    """Reversal divergence time of a random configuration."""
    particles = random_configuration(n, ctx.config.simulation, ctx.rng)
    result = reversal_divergence_time(particles, eps, delta, None, ctx.config.simulation, ctx.config.search)
    ctx.say(f"time until a random system diverges: {result.time}")
    return result


def diverge_thresholds(ctx, steps, eps, factor, delta):
    """Reversal divergence times over a geometric range of thresholds (stdin configuration)."""
    report = batch.reversal_over_thresholds(ctx.read_particles(), eps, factor, steps, delta, None,
                                            ctx.config.simulation, ctx.config.search)
    return _print_batch(ctx, "de", report)


def diverge_thresholds_random(ctx, steps, n, eps, factor, delta):
    """Reversal divergence times over a geometric range of thresholds (random configuration)."""
    particles = random_configuration(n, ctx.config.simulation, ctx.rng)
    report = batch.reversal_over_thresholds(particles, eps, factor, steps, delta, None, ctx.config.simulation,
                                            ctx.config.search)
    return _print_batch(ctx, "dea", report)


def diverge_trials(ctx, trials, n, eps, delta):
    """Reversal divergence times of several random configurations."""
    report = batch.reversal_over_trials(trials, n, eps, delta, None, ctx.config.simulation, ctx.config.search,
                                        ctx.rng)
    return _print_batch(ctx, "dn", report)


# Displayed sessions ---------------------------------------------------------

def _session(ctx, particles, duration=None):
    config = ctx.config.simulation
    scheduler = EventScheduler(particles, None, config)
    log = ctx.log.bind(mode="session")

    def redraw(s):
        log.debug("frame", frame=s.stats.frames, sim_time=s.clock)
        if config.redraw_pause:
            time.sleep(config.redraw_pause)

    def on_reverse(s):
        ctx.say(f"reversing at t={s.clock}")
        time.sleep(config.reversal_pause)

    if duration is not None:
        elapsed = run_displayed_reversal(scheduler, duration, None, redraw, on_reverse)
    else:
        cancel = threading.Event()
        previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
        ctx.say("running; press Ctrl-C to reverse")
        try:
            elapsed = run_displayed_reversal(scheduler, None, cancel, redraw, on_reverse)
        finally:
            signal.signal(signal.SIGINT, previous)
    ctx.say(f"session finished after {elapsed} forward and {scheduler.clock} backward")
    return scheduler


def interactive_random(ctx, n):
    """Interactive session on random particles, Ctrl-C reverses."""
    return _session(ctx, random_configuration(n, ctx.config.simulation, ctx.rng))


def interactive_file(ctx):
    """Interactive session on a stdin configuration, Ctrl-C reverses."""
    return _session(ctx, ctx.read_particles())


def interactive_positions(ctx, divisor):
    """Interactive session on stdin positions with random velocities."""
    return _session(ctx, ctx.read_positions(divisor))


def timed_random(ctx, n, duration):
    """Timed session on random particles."""
    return _session(ctx, random_configuration(n, ctx.config.simulation, ctx.rng), duration)


def timed_file(ctx, duration):
    """Timed session on a stdin configuration."""
    return _session(ctx, ctx.read_particles(), duration)


def timed_positions(ctx, divisor, duration):
    """Timed session on stdin positions with random velocities."""
    return _session(ctx, ctx.read_positions(divisor), duration)


# Reversal traces ------------------------------------------------------------

def _trace(ctx, mode, particles, duration):
    distances = reversal_trace(particles, duration, None, ctx.config.simulation)
    ctx.report(mode, distances, "mean distance to start")
    return distances


def graph_random(ctx, n, duration):
    """Reversal trace of random particles."""
    return _trace(ctx, "ag", random_configuration(n, ctx.config.simulation, ctx.rng), duration)


def graph_file(ctx, duration):
    """Reversal trace of a stdin configuration."""
    return _trace(ctx, "pg", ctx.read_particles(), duration)


def graph_positions(ctx, divisor, duration):
    """Reversal trace of stdin positions with random velocities."""
    return _trace(ctx, "rg", ctx.read_positions(divisor), duration)


def _count(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value!r}")
    return number


STEPS = ("steps", _count, "number of thresholds in the sweep")
TRIALS = ("trials", _count, "number of random trials")
COUNT = ("count", _count, "number of random particles")
THRESHOLD = ("threshold", float, "divergence threshold (mean distance)")
PERTURBATION = ("perturbation", float, "perturbation magnitude of the twin")
FACTOR = ("factor", float, "threshold growth factor")
TOLERANCE = ("tolerance", float, "search tolerance (simulated time)")
DIVISOR = ("divisor", float, "velocity divisor for position-only input")
DURATION = ("duration", float, "simulated duration")

MODES = {
    "b": (butterfly_fixed, (THRESHOLD, PERTURBATION, TOLERANCE)),
    "ba": (butterfly_random, (COUNT, THRESHOLD, PERTURBATION, TOLERANCE)),
    "bl": (butterfly_thresholds, (STEPS, THRESHOLD, PERTURBATION, FACTOR, TOLERANCE)),
    "bla": (butterfly_thresholds_random, (STEPS, COUNT, THRESHOLD, PERTURBATION, FACTOR, TOLERANCE)),
    "bn": (butterfly_trials, (TRIALS, COUNT, THRESHOLD, PERTURBATION, TOLERANCE)),
    "d": (diverge_fixed, (THRESHOLD, TOLERANCE)),
    "da": (diverge_random, (COUNT, THRESHOLD, TOLERANCE)),
    "de": (diverge_thresholds, (STEPS, THRESHOLD, FACTOR, TOLERANCE)),
    "dea": (diverge_thresholds_random, (STEPS, COUNT, THRESHOLD, FACTOR, TOLERANCE)),
    "dn": (diverge_trials, (TRIALS, COUNT, THRESHOLD, TOLERANCE)),
    "ac": (interactive_random, (COUNT,)),
    "pc": (interactive_file, ()),
    "rc": (interactive_positions, (DIVISOR,)),
    "at": (timed_random, (COUNT, DURATION)),
    "pt": (timed_file, (DURATION,)),
    "rt": (timed_positions, (DIVISOR, DURATION)),
    "ag": (graph_random, (COUNT, DURATION)),
    "pg": (graph_file, (DURATION,)),
    "rg": (graph_positions, (DIVISOR, DURATION)),
}


def build_parser():
    """One subcommand per mode letter, positional arguments in the order the handler takes them."""
    parser = argparse.ArgumentParser(prog="asimov.py", description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    modes = parser.add_subparsers(dest="mode", metavar="mode", required=True)
    for mode, (handler, arguments) in MODES.items():
        sub = modes.add_parser(mode, help=handler.__doc__)
        for name, kind, help_text in arguments:
            sub.add_argument(name, type=kind, help=help_text)
        sub.set_defaults(handler=handler, names=[name for name, _, _ in arguments])
    return parser


def parse_arguments(argv):
    """Resolve ``argv`` (without the program name) to a mode, its handler and its converted arguments.

    Usage errors exit with status 2.
    """
    args = build_parser().parse_args(argv)
    return args.mode, args.handler, [getattr(args, name) for name in args.names]


def main(argv=None, stdin=None, stdout=None, config=None):
    argv = sys.argv[1:] if argv is None else argv
    mode, handler, args = parse_arguments(argv)
    config = config or load_config()
    StructuredLogger.configure(min_level=parse_level(config.logging.level))
    ctx = Context(config, stdin or sys.stdin, stdout or sys.stdout)

    set_context(mode=mode, args=args)
    ctx.log.info("mode start", mode=mode, args=args)
    try:
        handler(ctx, *args)
    except (ConfigurationError, SnapshotMismatchError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0
