import asyncio
import threading
import time
from config import load_config
from chaos.reversal import run_displayed_reversal
from communication.bus import FRAMES, SESSIONS
from core.errors import SessionError
from internal.logging import get_logger
from simulation.generators import make_rng, random_configuration
from simulation.scheduler import EventScheduler
from simulation.state import StateSnapshot
from simulation.world import World
from utils.ksuid import new_run_id

class EngineState:
    IDLE = "idle"
    FORWARD = "forward"
    REVERSING = "reversing"
    BACKWARD = "backward"

class SimulationEngine:
    """Runs one displayed forward/backward session at a time on a worker thread.

    Redraw ticks become ``StateSnapshot`` frames on the bus. ``reverse()``
    is the stop gesture that ends an interactive forward phase; ``stop()``
    aborts the whole session.
    """

    def __init__(self, bus, config=None):
        self.bus = bus
        self.config = config or load_config().simulation
        self.world = World.from_config(self.config)
        self._log = get_logger()
        self._lock = threading.Lock()
        self._state = EngineState.IDLE
        self._task = None
        self._cancel = threading.Event()
        self._abort = threading.Event()
        self.session_id = None
        self.interactive = False
        self.frame = 0
        self.sim_time = 0.0
        self.last_stats = None
        self.particles = []
        self._latest = None
        self.reset()

    @property
    def state(self):
        return self._state

    @property
    def running(self):
        return self._task is not None and not self._task.done()

    def reset(self, particles=None):
        """Replace the seed configuration (random when ``particles`` is None)."""
        if self.running:
            raise SessionError("cannot reset while a session is running", state=self._state)
        if particles is None:
            particles = random_configuration(self.config.particle_count, self.config, make_rng(self.config.seed))
        self.particles = [particle.copy() for particle in particles]
        outside = sum(1 for particle in self.particles if not self.world.contains(particle))
        if outside:
            self._log.warn("particles outside the box", count=outside, particles=len(self.particles))
        self.frame = 0
        self.sim_time = 0.0
        with self._lock:
            self._latest = self._frame_of(self.particles, 0.0)

    async def start(self, particles=None, duration=None):
        """Begin a session: timed when ``duration`` is given, interactive otherwise."""
        if self.running:
            raise SessionError("a session is already running", state=self._state)
        if particles is not None or not self.particles:
            self.reset(particles)
        self._cancel.clear()
        self._abort.clear()
        self.frame = 0
        self.interactive = duration is None
        self.session_id = new_run_id("sess")
        loop = asyncio.get_running_loop()
        self._task = asyncio.create_task(self._run(loop, duration))
        self._log.info("session start", session=self.session_id, interactive=self.interactive,
                       duration=duration, particles=len(self.particles))
        return self.session_id

    async def reverse(self):
        if not (self.running and self.interactive and self._state == EngineState.FORWARD):
            raise SessionError("no interactive forward phase to reverse", state=self._state)
        self._cancel.set()

    async def stop(self):
        self._abort.set()
        self._cancel.set()
        if self._task:
            await self._task
            self._task = None

    async def wait(self):
        if self._task:
            await self._task

    async def get_snapshot(self):
        with self._lock:
            return self._latest

    async def _run(self, loop, duration):
        try:
            elapsed = await asyncio.to_thread(self._session, loop, duration)
            await self.bus.publish({"kind": "session_done", "session": self.session_id, "elapsed": elapsed,
                                    "aborted": self._abort.is_set()}, SESSIONS)
            self._log.info("session done", session=self.session_id, elapsed=elapsed, frames=self.frame)
        except Exception as exc:
            self._log.error("session failed", error=exc, session=self.session_id)
            await self.bus.publish({"kind": "session_failed", "session": self.session_id, "err": str(exc)},
                                   SESSIONS)
        finally:
            self._state = EngineState.IDLE

    def _frame_of(self, particles, clock):
        return StateSnapshot(self.frame, clock, [p.to_state(f"p{i:02d}") for i, p in enumerate(particles)],
                             phase=self._state)

    def _session(self, loop, duration):
        scheduler = EventScheduler(self.particles, self.world, self.config)
        pause = self.config.redraw_pause

        def redraw(s):
            self.frame += 1
            self.sim_time = s.clock
            frame = self._frame_of(s.particles, s.clock)
            with self._lock:
                self._latest = frame
            self.bus.publish_threadsafe(loop, frame, FRAMES)
            if pause:
                self._abort.wait(pause)

        def on_reverse(s):
            self._state = EngineState.REVERSING
            self.bus.publish_threadsafe(loop, {"kind": "reversing", "session": self.session_id,
                                               "sim_time": s.clock, "timestamp": time.time()}, SESSIONS)
            self._abort.wait(self.config.reversal_pause)
            self._state = EngineState.BACKWARD

        self._state = EngineState.FORWARD
        elapsed = run_displayed_reversal(scheduler, duration, self._cancel if duration is None else None,
                                         redraw, on_reverse, should_stop=self._abort.is_set)
        self.last_stats = scheduler.stats.to_dict()
        return elapsed
