"""Time-reversal experiments: run forward, invert every velocity, run forward again."""

from internal.logging import get_logger
from simulation.scheduler import EventScheduler
from simulation.state import Snapshot


def reversal_echo(particles, duration, world=None, config=None):
    """Snapshot after ``duration`` forward, a velocity inversion, and ``duration`` more.

    For a perfectly reversible run this equals the initial snapshot.
    """
    scheduler = EventScheduler(particles, world, config)
    scheduler.run_silent(duration)
    scheduler.invert_velocities()
    scheduler.run_silent(duration)
    return scheduler.snapshot()


def reversal_trace(particles, duration, world=None, config=None):
    """Distance to the initial positions after every event of the forward and the reversed run."""
    origin = Snapshot.of(particles)
    scheduler = EventScheduler(particles, world, config)
    forward = scheduler.run_tracked(duration, origin)
    scheduler.invert_velocities()
    backward = scheduler.run_tracked(duration, origin)
    get_logger().debug("reversal trace", duration=duration, forward=len(forward), backward=len(backward))
    return forward + backward


def run_displayed_reversal(scheduler, duration=None, cancel=None, on_redraw=None, on_reverse=None,
                           should_stop=None):
    """Drive a displayed forward/backward session on ``scheduler``.

    With ``cancel`` the forward phase is interactive and lasts until the
    signal fires; otherwise it is timed for ``duration``. ``on_reverse`` is
    called at the reversal instant (to pause, announce, ...). Returns the
    simulated duration of each phase.
    """
    if cancel is not None:
        elapsed = scheduler.run_interactive(cancel, on_redraw)
    else:
        elapsed = scheduler.run_timed(duration, on_redraw, should_stop)
    if should_stop is not None and should_stop():
        return elapsed
    if on_reverse is not None:
        on_reverse(scheduler)
    scheduler.invert_velocities()
    scheduler.run_timed(elapsed, on_redraw, should_stop)
    return elapsed
