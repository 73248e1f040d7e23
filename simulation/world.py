"""World defines the box the particles bounce around in."""


class World:
    """Axis-aligned box ``[0, width] x [0, height]``; the walls are its four sides."""

    __slots__ = ("width", "height")

    def __init__(self, width=1.0, height=1.0):
        self.width = width
        self.height = height

    @classmethod
    def from_config(cls, config):
        return cls(config.world_width, config.world_height)

    def contains(self, particle):
        """True when the whole disk lies inside the box."""
        r = particle.radius
        return r <= particle.x <= self.width - r and r <= particle.y <= self.height - r
