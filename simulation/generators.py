"""Random configurations and perturbed twins.

All randomness of the project lives here; pass a seeded ``random.Random``
as ``rng`` for reproducible configurations.
"""

import random

from config import SimulationConfig
from simulation.entities import Particle


def make_rng(seed=None):
    return random.Random(seed)


def random_sign(rng=random):
    """+1 or -1, each with probability 1/2."""
    return 1 if rng.random() < 0.5 else -1


def random_particle(config=None, rng=random):
    """Disk placed uniformly inside the box with velocity components in ``[-max_speed, max_speed]``."""
    config = config or SimulationConfig()
    r = config.particle_radius
    return Particle(rng.uniform(r, config.world_width - r),
                    rng.uniform(r, config.world_height - r),
                    rng.uniform(-config.max_speed, config.max_speed),
                    rng.uniform(-config.max_speed, config.max_speed),
                    r, config.particle_mass)


def random_configuration(count, config=None, rng=random):
    return [random_particle(config, rng) for _ in range(count)]


def perturb(particle, magnitude, rng=random):
    """Copy of ``particle`` nudged by up to ``magnitude`` in position and ``magnitude / 200`` in velocity."""
    return Particle(particle.x + random_sign(rng) * magnitude * rng.random(),
                    particle.y + random_sign(rng) * magnitude * rng.random(),
                    particle.vx + random_sign(rng) * magnitude * rng.random() / 200,
                    particle.vy + random_sign(rng) * magnitude * rng.random() / 200,
                    particle.radius, particle.mass, particle.color)


def perturbed_twin(particles, magnitude, rng=random):
    return [perturb(particle, magnitude, rng) for particle in particles]


def random_pair(count, magnitude, config=None, rng=random):
    """Random configuration drifting up and to the right (velocities in ``[0, 1/200)``) and its perturbed twin."""
    config = config or SimulationConfig()
    r = config.particle_radius
    base = [Particle(rng.uniform(r, config.world_width - r),
                     rng.uniform(r, config.world_height - r),
                     rng.random() / 200,
                     rng.random() / 200,
                     r, config.particle_mass)
            for _ in range(count)]
    return base, perturbed_twin(base, magnitude, rng)


def with_random_velocities(positions, divisor, rng=random):
    """Particles from ``(x, y, radius, mass, color)`` records with velocities ``random() / divisor``."""
    return [Particle(x, y, rng.random() / divisor, rng.random() / divisor, radius, mass, color)
            for x, y, radius, mass, color in positions]
