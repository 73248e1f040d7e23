"""Tests for random configurations and perturbations."""

from config import SimulationConfig
from simulation.entities import Particle
from simulation.generators import (
    make_rng,
    perturb,
    perturbed_twin,
    random_configuration,
    random_pair,
    random_sign,
    with_random_velocities,
)


class TestGenerators:
    """Tests for the generator functions."""

    def test_random_sign_takes_both_values(self):
        rng = make_rng(1)
        signs = [random_sign(rng) for _ in range(200)]
        assert set(signs) == {-1, 1}
        assert 60 < signs.count(1) < 140

    def test_random_configuration_inside_box(self, world):
        config = SimulationConfig(particle_radius=0.05, max_speed=0.01)
        particles = random_configuration(50, config, make_rng(2))
        assert len(particles) == 50
        for p in particles:
            assert world.contains(p)
            assert abs(p.vx) <= 0.01 and abs(p.vy) <= 0.01
            assert p.radius == 0.05
            assert p.mass == config.particle_mass

    def test_seed_reproduces(self):
        first = random_configuration(5, None, make_rng(42))
        second = random_configuration(5, None, make_rng(42))
        assert [p.position() for p in first] == [p.position() for p in second]

    def test_perturb_bounds(self, particle):
        rng = make_rng(3)
        for _ in range(50):
            nudged = perturb(particle, 0.01, rng)
            assert abs(nudged.x - particle.x) <= 0.01
            assert abs(nudged.y - particle.y) <= 0.01
            assert abs(nudged.vx - particle.vx) <= 0.01 / 200
            assert abs(nudged.vy - particle.vy) <= 0.01 / 200
            assert nudged.radius == particle.radius
            assert nudged is not particle

    def test_perturb_zero_is_identity(self, particle):
        nudged = perturb(particle, 0.0, make_rng(4))
        assert nudged.position() == particle.position()
        assert nudged.velocity() == particle.velocity()

    def test_perturbed_twin_leaves_original(self, head_on):
        twin = perturbed_twin(head_on, 0.001, make_rng(5))
        assert len(twin) == 2
        assert head_on[0].position() == (0.3, 0.5)
        assert twin[0].position() != head_on[0].position()

    def test_random_pair_velocities(self):
        base, twin = random_pair(10, 0.001, None, make_rng(6))
        assert len(base) == len(twin) == 10
        for p in base:
            assert 0 <= p.vx < 1 / 200
            assert 0 <= p.vy < 1 / 200

    def test_with_random_velocities(self):
        particles = with_random_velocities([(0.5, 0.5, 0.02, 1.0, (255, 0, 0))], 100, make_rng(7))
        (p,) = particles
        assert isinstance(p, Particle)
        assert p.color == (255, 0, 0)
        assert 0 <= p.vx < 0.01 and 0 <= p.vy < 0.01
