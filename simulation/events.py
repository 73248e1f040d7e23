"""Scheduled events and the versioned particle handles they carry."""

from enum import Enum


class EventKind(Enum):
    COLLISION = "collision"
    VERTICAL_WALL = "vertical_wall"
    HORIZONTAL_WALL = "horizontal_wall"
    REDRAW = "redraw"


class ParticleRef:
    """Index into a scheduler's particle list, stamped with the particle's collision count."""

    __slots__ = ("index", "count")

    def __init__(self, index, count):
        self.index = index
        self.count = count

    @classmethod
    def to(cls, particles, index):
        return cls(index, particles[index].count)

    def is_current(self, particles):
        return particles[self.index].count == self.count

    def __eq__(self, other):
        if not isinstance(other, ParticleRef):
            return NotImplemented
        return self.index == other.index and self.count == other.count

    def __hash__(self):
        return hash((self.index, self.count))

    def __repr__(self):
        return f"ParticleRef({self.index}@{self.count})"


class Event:
    """Immutable prediction: at ``time`` something happens to ``a`` and/or ``b``.

    Vertical-wall hits carry the particle in ``a``, horizontal-wall hits
    carry it in ``b``; redraw ticks carry neither.
    """

    __slots__ = ("time", "kind", "a", "b")

    def __init__(self, time, kind, a=None, b=None):
        object.__setattr__(self, "time", time)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", b)

    def __setattr__(self, name, value):
        raise AttributeError("Event is immutable")

    @classmethod
    def collision(cls, time, a, b):
        return cls(time, EventKind.COLLISION, a, b)

    @classmethod
    def vertical_wall(cls, time, a):
        return cls(time, EventKind.VERTICAL_WALL, a=a)

    @classmethod
    def horizontal_wall(cls, time, b):
        return cls(time, EventKind.HORIZONTAL_WALL, b=b)

    @classmethod
    def redraw(cls, time):
        return cls(time, EventKind.REDRAW)

    @property
    def participants(self):
        return tuple(ref for ref in (self.a, self.b) if ref is not None)

    def is_valid(self, particles):
        """False once any participant has changed velocity since the prediction."""
        return all(ref.is_current(particles) for ref in self.participants)

    def __repr__(self):
        return f"Event({self.kind.value} t={self.time!r} a={self.a!r} b={self.b!r})"
