"""
Event-driven scheduler for hard disks in a box.

Each run owns a copy of the configuration and a fresh event queue. Events
are predicted for every particle up front and re-predicted for the
participants of each processed event; stale predictions are never removed
from the queue, they fail the collision-count check when popped.
"""

import math

from chaos.metrics import distance
from config import SimulationConfig
from internal.logging import LogLevel, get_logger
from simulation.events import Event, EventKind, ParticleRef
from simulation.queue import EventQueue
from simulation.state import Snapshot
from simulation.world import World


class RunStats:
    __slots__ = ("processed", "discarded", "frames", "cancelled")

    def __init__(self):
        self.processed = 0
        self.discarded = 0
        self.frames = 0
        self.cancelled = False

    def to_dict(self):
        return {"processed": self.processed, "discarded": self.discarded,
                "frames": self.frames, "cancelled": self.cancelled}


class EventScheduler:
    def __init__(self, particles, world=None, config=None):
        self.config = config or SimulationConfig()
        self.world = world or World.from_config(self.config)
        self.particles = [particle.copy() for particle in particles]
        self.clock = 0.0
        self.stats = RunStats()
        self._queue = EventQueue()
        self._log = get_logger()

    def __len__(self):
        return len(self.particles)

    def snapshot(self):
        return Snapshot.of(self.particles, self.clock)

    def invert_velocities(self):
        """Reverse every particle. Pending predictions become stale, so the next run rebuilds the queue."""
        for particle in self.particles:
            particle.invert_velocity()

    def predict(self, index, horizon):
        """Queue every event particle ``index`` would take part in before ``horizon``."""
        if index is None:
            return
        particles = self.particles
        particle = particles[index]

        for other, target in enumerate(particles):
            when = self._when(particle.time_to_hit(target), horizon)
            if when is not None:
                self._queue.push(Event.collision(when, ParticleRef.to(particles, index),
                                                 ParticleRef.to(particles, other)))

        when = self._when(particle.time_to_hit_vertical_wall(self.world), horizon)
        if when is not None:
            self._queue.push(Event.vertical_wall(when, ParticleRef.to(particles, index)))
        when = self._when(particle.time_to_hit_horizontal_wall(self.world), horizon)
        if when is not None:
            self._queue.push(Event.horizontal_wall(when, ParticleRef.to(particles, index)))

    def _when(self, dt, horizon):
        # overlaps predict negative times; those fire immediately
        if dt == math.inf or self.clock + dt > horizon:
            return None
        return self.clock + max(dt, 0.0)

    def _drift(self, dt):
        if dt:
            for particle in self.particles:
                particle.move(dt)

    def _apply(self, event):
        particles = self.particles
        kind = event.kind
        if kind is EventKind.COLLISION:
            particles[event.a.index].bounce_off(particles[event.b.index])
        elif kind is EventKind.VERTICAL_WALL:
            particles[event.a.index].bounce_off_vertical_wall()
        elif kind is EventKind.HORIZONTAL_WALL:
            particles[event.b.index].bounce_off_horizontal_wall()

    def run(self, budget=math.inf, horizon=None, should_stop=None, on_redraw=None, on_event=None):
        """Process events in time order until the queue drains, ``budget`` is reached or ``should_stop()``.

        ``horizon`` bounds prediction (defaults to ``budget``). Redraw ticks
        are only rescheduled while an ``on_redraw`` hook is installed.
        Unless cancelled, the particles finish by drifting to exactly
        ``clock == budget`` when the budget is finite.
        """
        if horizon is None:
            horizon = budget
        self.clock = 0.0
        self.stats = RunStats()
        self._queue = EventQueue()
        queue = self._queue
        tick = 1.0 / self.config.redraw_hz

        for index in range(len(self.particles)):
            self.predict(index, horizon)
        queue.push(Event.redraw(0.0))
        self._log.debug("run start", particles=len(self.particles), budget=budget, queued=len(queue))

        while queue:
            if should_stop is not None and should_stop():
                self.stats.cancelled = True
                break
            if queue.peek().time > budget:
                break
            event = queue.pop()
            if not event.is_valid(self.particles):
                self.stats.discarded += 1
                continue

            self._drift(event.time - self.clock)
            self.clock = event.time
            self._apply(event)

            if event.kind is EventKind.REDRAW:
                if on_redraw is not None:
                    self.stats.frames += 1
                    on_redraw(self)
                    if self.clock < horizon:
                        queue.push(Event.redraw(self.clock + tick))
            else:
                for ref in event.participants:
                    self.predict(ref.index, horizon)

            self.stats.processed += 1
            if on_event is not None:
                on_event(self, event)

        if not self.stats.cancelled and math.isfinite(budget) and self.clock < budget:
            self._drift(budget - self.clock)
            self.clock = budget

        if self._log.enabled(LogLevel.DEBUG):
            self._log.debug("run done", clock=self.clock, energy=sum(p.kinetic_energy() for p in self.particles),
                            **self.stats.to_dict())
        return self.clock

    def run_interactive(self, cancel, on_redraw=None):
        """Run until ``cancel`` (a ``threading.Event``) is set; returns the simulated time reached."""
        horizon = self.config.horizon
        return self.run(horizon, horizon, should_stop=cancel.is_set, on_redraw=on_redraw)

    def run_timed(self, duration, on_redraw=None, should_stop=None):
        return self.run(duration, should_stop=should_stop, on_redraw=on_redraw)

    def run_silent(self, duration):
        """Timed run without hooks. Nothing past ``config.horizon`` is predicted, so beyond it the particles only drift."""
        return self.run(duration, horizon=min(duration, self.config.horizon))

    def run_tracked(self, duration, reference):
        """Timed run that records ``distance(snapshot, reference)`` after every processed event."""
        distances = []

        def record(scheduler, event):
            distances.append(distance(reference, scheduler.snapshot()))

        self.run(duration, on_event=record)
        return distances
