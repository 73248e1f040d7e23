import asyncio
import time
from enum import Enum
from utils.timestamp import format_timestamp

class Status(Enum):
    OK = "healthy"
    DEGRADED = "degraded"
    FAIL = "unhealthy"

class CheckResult:
    __slots__ = ("name", "status", "msg")

    def __init__(self, name, status, msg=""):
        self.name = name
        self.status = status
        self.msg = msg

    def to_dict(self):
        return {"name": self.name,
                "status": self.status.value,
                "msg": self.msg}

class HealthReport:
    __slots__ = ("status", "checks", "uptime", "timestamp")

    def __init__(self, status, checks, uptime=0):
        self.status = status
        self.checks = checks
        self.uptime = uptime
        self.timestamp = format_timestamp()

    def to_dict(self):
        return {"status": self.status.value,
                "timestamp": self.timestamp,
                "uptime": round(self.uptime, 1),
                "checks": [check.to_dict() for check in self.checks]}

def overall_status(results):
    """Worst status among ``(result, critical)`` pairs; non-critical failures only degrade."""
    status = Status.OK
    for result, critical in results:
        if result.status == Status.FAIL and critical:
            return Status.FAIL
        if result.status != Status.OK:
            status = Status.DEGRADED
    return status

class HealthChecker:
    """Runs the registered checks concurrently and caches the report for ``ttl`` seconds."""

    def __init__(self, ttl=1.0, timeout=5.0):
        self._checks = {}
        self._cache = None
        self._cache_time = 0
        self._ttl = ttl
        self._timeout = timeout
        self._start_time = time.time()

    def register(self, name, check_fn, critical=True):
        self._checks[name] = (check_fn, critical)

    async def _run(self, name, check_fn):
        try:
            return await asyncio.wait_for(check_fn(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return CheckResult(name, Status.FAIL, "timeout")
        except Exception as exc:
            return CheckResult(name, Status.FAIL, str(exc))

    async def check(self):
        now = time.time()
        if self._cache and now - self._cache_time < self._ttl:
            return self._cache

        entries = list(self._checks.items())
        results = await asyncio.gather(*(self._run(name, check_fn) for name, (check_fn, _) in entries))
        status = overall_status([(result, critical) for result, (_, (_, critical)) in zip(results, entries)])

        self._cache = HealthReport(status, list(results), now - self._start_time)
        self._cache_time = now
        return self._cache

# Checks
async def check_event_loop():
    await asyncio.sleep(0)
    return CheckResult("loop", Status.OK)

def create_bus_check(bus):
    async def check():
        stats = bus.get_stats()

        # frame drops above 10% mean a display can't keep up
        if stats["total_published"] > 0 and stats["total_dropped"] / stats["total_published"] > 0.1:
            return CheckResult("bus", Status.DEGRADED, f"drops {stats['total_dropped']}/{stats['total_published']}")

        return CheckResult("bus", Status.OK, f"{stats['subscriber_count']}sub")
    return check

def create_engine_check(engine, threshold=5.0):
    """Fails when a running session has produced no frame for ``threshold`` seconds."""
    last_seen = [None, time.time()]

    async def check():
        now = time.time()
        state = engine.state

        if not engine.running:
            last_seen[0], last_seen[1] = None, now
            return CheckResult("engine", Status.OK, state)

        # the pause at the reversal instant produces no frames
        if state == "reversing":
            last_seen[0], last_seen[1] = engine.frame, now
            return CheckResult("engine", Status.OK, f"reversing@{engine.frame}")

        if last_seen[0] is not None and engine.frame == last_seen[0] and now - last_seen[1] > threshold:
            return CheckResult("engine", Status.FAIL, f"stuck@{engine.frame}")

        if engine.frame != last_seen[0]:
            last_seen[0], last_seen[1] = engine.frame, now
        return CheckResult("engine", Status.OK, f"{state}@{engine.frame}")
    return check

def create_logger_check(logger):
    async def check():
        queue_size, max_size = logger.queue.qsize(), logger.queue.maxsize

        if queue_size / max_size > 0.9:
            return CheckResult("log", Status.DEGRADED, f"{queue_size}/{max_size}")
        if logger.dropped:
            return CheckResult("log", Status.DEGRADED, f"dropped {logger.dropped}")

        return CheckResult("log", Status.OK, f"written {logger.written}")
    return check
