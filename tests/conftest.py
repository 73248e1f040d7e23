"""Pytest fixtures for all tests."""

import pytest
from httpx import AsyncClient, ASGITransport

from communication.bus import EventBus
from config import Config, LoggingConfig, ReportConfig, SearchConfig, SimulationConfig
from simulation.engine import SimulationEngine
from simulation.entities import Particle
from simulation.world import World
from ui.app import create_app


@pytest.fixture
def world():
    """Unit box."""
    return World(width=1.0, height=1.0)


@pytest.fixture
def particle():
    """Single test particle."""
    return Particle(0.5, 0.5, 0.01, -0.005, 0.02, 0.5)


@pytest.fixture
def sim_config():
    """Fast simulation config: no redraw or reversal pauses."""
    return SimulationConfig(redraw_hz=2.0, redraw_pause=0.0, reversal_pause=0.0, particle_count=5, seed=7)


@pytest.fixture
def search_config():
    return SearchConfig(initial_time=100.0, max_iterations=8)


@pytest.fixture
def head_on():
    """Two equal disks approaching each other along y = 0.5."""
    return [Particle(0.3, 0.5, 0.01, 0.0, 0.05, 1.0),
            Particle(0.7, 0.5, -0.01, 0.0, 0.05, 1.0)]


@pytest.fixture
def app_config(tmp_path, sim_config, search_config):
    return Config(simulation=sim_config, search=search_config,
                  logging=LoggingConfig(level="ERROR", file=str(tmp_path / "asimov.log"),
                                        crash_file=str(tmp_path / "crash.log")),
                  report=ReportConfig(output_dir=str(tmp_path / "reports")))


@pytest.fixture
async def bus():
    """Create test event bus."""
    return EventBus(queue_size=10)


@pytest.fixture
async def engine(bus, sim_config):
    """Create test session engine."""
    eng = SimulationEngine(bus=bus, config=sim_config)
    yield eng
    if eng._task:
        await eng.stop()


@pytest.fixture
async def app(app_config):
    """Create test FastAPI app."""
    return create_app(app_config)


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
