import math

from simulation.state import ParticleState

INFINITY = math.inf

BLACK = (0, 0, 0)


class Particle:
    """A hard disk moving in free flight between elastic collisions.

    ``count`` is bumped by every mutator that changes the velocity, so a
    scheduled event can tell whether its participants changed course since
    it was predicted.
    """

    __slots__ = ("x", "y", "vx", "vy", "radius", "mass", "color", "count")

    def __init__(self, x, y, vx, vy, radius, mass, color=BLACK):
        self.x = x
        self.y = y
        self.vx = vx
        self.vy = vy
        self.radius = radius
        self.mass = mass
        self.color = tuple(color)
        self.count = 0

    def copy(self):
        """Fresh particle with the same kinematics and a zero collision count."""
        return Particle(self.x, self.y, self.vx, self.vy, self.radius, self.mass, self.color)

    def position(self):
        return self.x, self.y

    def velocity(self):
        return self.vx, self.vy

    def kinetic_energy(self):
        return 0.5 * self.mass * (self.vx * self.vx + self.vy * self.vy)

    def move(self, dt):
        """Free flight for ``dt`` time units."""
        self.x += self.vx * dt
        self.y += self.vy * dt

    def time_to_hit(self, that):
        """Time until this disk touches ``that``, or infinity if they never meet."""
        if self is that:
            return INFINITY
        dx = that.x - self.x
        dy = that.y - self.y
        dvx = that.vx - self.vx
        dvy = that.vy - self.vy
        dvdr = dx * dvx + dy * dvy
        if dvdr > 0:
            return INFINITY
        dvdv = dvx * dvx + dvy * dvy
        if dvdv == 0:
            return INFINITY
        drdr = dx * dx + dy * dy
        sigma = self.radius + that.radius
        d = dvdr * dvdr - dvdv * (drdr - sigma * sigma)
        if d < 0:
            return INFINITY
        return -(dvdr + math.sqrt(d)) / dvdv

    def time_to_hit_vertical_wall(self, world):
        """Time until the disk touches the left or right side of ``world``."""
        if self.vx > 0:
            return (world.width - self.x - self.radius) / self.vx
        if self.vx < 0:
            return (self.radius - self.x) / self.vx
        return INFINITY

    def time_to_hit_horizontal_wall(self, world):
        """Time until the disk touches the bottom or top side of ``world``."""
        if self.vy > 0:
            return (world.height - self.y - self.radius) / self.vy
        if self.vy < 0:
            return (self.radius - self.y) / self.vy
        return INFINITY

    def bounce_off(self, that):
        """Elastic impulse along the line of centres; both counts advance."""
        dx = that.x - self.x
        dy = that.y - self.y
        dvx = that.vx - self.vx
        dvy = that.vy - self.vy
        dvdr = dx * dvx + dy * dvy
        dist = self.radius + that.radius

        magnitude = 2 * self.mass * that.mass * dvdr / ((self.mass + that.mass) * dist)
        fx = magnitude * dx / dist
        fy = magnitude * dy / dist

        self.vx += fx / self.mass
        self.vy += fy / self.mass
        that.vx -= fx / that.mass
        that.vy -= fy / that.mass

        self.count += 1
        that.count += 1

    def bounce_off_vertical_wall(self):
        self.vx = -self.vx
        self.count += 1

    def bounce_off_horizontal_wall(self):
        self.vy = -self.vy
        self.count += 1

    def invert_velocity(self):
        """Reverse the direction of motion, as for a time-reversed replay."""
        self.vx = -self.vx
        self.vy = -self.vy
        self.count += 1

    def to_state(self, id):
        """Immutable copy for publishing on the bus."""
        return ParticleState(id, self.x, self.y, self.vx, self.vy, self.radius, self.color)

    def __repr__(self):
        return (f"Particle(x={self.x!r}, y={self.y!r}, vx={self.vx!r}, vy={self.vy!r}, "
                f"radius={self.radius!r}, mass={self.mass!r})")
