"""Whitespace-separated particle configurations.

Full format: a count, then per particle ``x y vx vy radius mass r g b``.
Position-only format: a count, then per particle ``x y radius mass r g b``.
"""

import random

from core.errors import ConfigurationError
from simulation.entities import Particle
from simulation.generators import with_random_velocities


class _Tokens:
    def __init__(self, text):
        self._tokens = text.split()
        self.position = 0

    def _next(self, what):
        if self.position >= len(self._tokens):
            raise ConfigurationError(f"unexpected end of input, expected {what}", position=self.position)
        token = self._tokens[self.position]
        self.position += 1
        return token

    def read_float(self, what):
        token = self._next(what)
        try:
            return float(token)
        except ValueError:
            raise ConfigurationError(f"expected {what}, got {token!r}", position=self.position - 1) from None

    def read_int(self, what):
        token = self._next(what)
        try:
            return int(token)
        except ValueError:
            raise ConfigurationError(f"expected {what}, got {token!r}", position=self.position - 1) from None

    def read_positive(self, what):
        value = self.read_float(what)
        if value <= 0:
            raise ConfigurationError(f"{what} must be positive, got {value!r}", position=self.position - 1)
        return value

    def read_count(self):
        count = self.read_int("particle count")
        if count < 0:
            raise ConfigurationError(f"particle count must be non-negative, got {count}", position=0)
        return count

    def read_color(self):
        color = tuple(self.read_int(f"{channel} channel") for channel in ("red", "green", "blue"))
        if any(not 0 <= c <= 255 for c in color):
            raise ConfigurationError(f"colour channels must be in 0..255, got {color}", position=self.position - 3)
        return color


def parse_configuration(text):
    """Particles with explicit velocities."""
    tokens = _Tokens(text)
    particles = []
    for _ in range(tokens.read_count()):
        x = tokens.read_float("x")
        y = tokens.read_float("y")
        vx = tokens.read_float("vx")
        vy = tokens.read_float("vy")
        radius = tokens.read_positive("radius")
        mass = tokens.read_positive("mass")
        particles.append(Particle(x, y, vx, vy, radius, mass, tokens.read_color()))
    return particles


def parse_positions(text, divisor, rng=random):
    """Particles without velocities; each component is drawn as ``random() / divisor``."""
    if not divisor:
        raise ConfigurationError("velocity divisor must be non-zero")
    tokens = _Tokens(text)
    records = []
    for _ in range(tokens.read_count()):
        x = tokens.read_float("x")
        y = tokens.read_float("y")
        radius = tokens.read_positive("radius")
        mass = tokens.read_positive("mass")
        records.append((x, y, radius, mass, tokens.read_color()))
    return with_random_velocities(records, divisor, rng)


def format_configuration(particles):
    """Inverse of ``parse_configuration``."""
    lines = [str(len(particles))]
    for p in particles:
        r, g, b = p.color
        lines.append(f"{p.x!r} {p.y!r} {p.vx!r} {p.vy!r} {p.radius!r} {p.mass!r} {r} {g} {b}")
    return "\n".join(lines) + "\n"
