from utils.ksuid import generate_ksuid
from utils.timestamp import format_timestamp


class ParticleState:
    __slots__ = ("id", "x", "y", "vx", "vy", "radius", "color")

    def __init__(self, id, x, y, vx, vy, radius=0.0, color=(0, 0, 0)):
        self.id, self.x, self.y, self.vx, self.vy = id, x, y, vx, vy
        self.radius, self.color = radius, color

    def to_dict(self):
        return {"id": self.id, "x": self.x, "y": self.y, "vx": self.vx, "vy": self.vy,
                "radius": self.radius, "color": list(self.color)}


class StateSnapshot:
    """Redraw frame published on the bus."""

    __slots__ = ("id", "timestamp", "frame", "time", "phase", "particles")

    def __init__(self, frame, time, particles, phase="forward", id=None, timestamp=None):
        self.id = id or generate_ksuid()
        self.timestamp = timestamp or format_timestamp()
        self.frame = frame
        self.time = time
        self.phase = phase
        self.particles = particles

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "frame": self.frame,
            "sim_time": self.time,
            "phase": self.phase,
            "particles": [p.to_dict() for p in self.particles]
        }


class Snapshot:
    """Positions of a configuration at one instant. Never mutated."""

    __slots__ = ("time", "positions")

    def __init__(self, positions, time=0.0):
        self.positions = tuple((float(x), float(y)) for x, y in positions)
        self.time = time

    @classmethod
    def of(cls, particles, time=0.0):
        return cls(((p.x, p.y) for p in particles), time)

    def __len__(self):
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)

    def __getitem__(self, index):
        return self.positions[index]

    def __eq__(self, other):
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self.positions == other.positions

    def __hash__(self):
        return hash(self.positions)

    def __repr__(self):
        return f"Snapshot(n={len(self.positions)}, time={self.time!r})"
