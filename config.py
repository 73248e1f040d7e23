import json
from pathlib import Path

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"


class SimulationConfig:
    __slots__ = ("world_width", "world_height", "horizon", "redraw_hz", "redraw_pause", "reversal_pause",
                 "particle_count", "particle_radius", "particle_mass", "max_speed", "seed")

    def __init__(self, world_width=1.0, world_height=1.0, horizon=10000.0, redraw_hz=0.5, redraw_pause=0.02,
                 reversal_pause=1.5, particle_count=20, particle_radius=0.02, particle_mass=0.5, max_speed=0.005,
                 seed=None):
        self.world_width = world_width
        self.world_height = world_height
        self.horizon = horizon
        self.redraw_hz = redraw_hz
        self.redraw_pause = redraw_pause
        self.reversal_pause = reversal_pause
        self.particle_count = particle_count
        self.particle_radius = particle_radius
        self.particle_mass = particle_mass
        self.max_speed = max_speed
        self.seed = seed


class SearchConfig:
    __slots__ = ("initial_time", "threshold", "tolerance", "perturbation", "factor", "trials", "max_iterations")

    def __init__(self, initial_time=100.0, threshold=0.1, tolerance=1.0, perturbation=0.001, factor=2.0, trials=5,
                 max_iterations=200):
        self.initial_time = initial_time
        self.threshold = threshold
        self.tolerance = tolerance
        self.perturbation = perturbation
        self.factor = factor
        self.trials = trials
        self.max_iterations = max_iterations


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "file", "crash_file")

    def __init__(self, level="INFO", file="logs/asimov.log", crash_file="logs/crash.log"):
        self.level = level
        self.file = file
        self.crash_file = crash_file


class ReportConfig:
    __slots__ = ("output_dir",)

    def __init__(self, output_dir="reports"):
        self.output_dir = output_dir


class Config:
    __slots__ = ("simulation", "search", "server", "logging", "report")

    def __init__(self, simulation=None, search=None, server=None, logging=None, report=None):
        self.simulation = simulation or SimulationConfig()
        self.search = search or SearchConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()
        self.report = report or ReportConfig()

    @classmethod
    def from_dict(cls, d):
        return cls(
            SimulationConfig(**d.get("simulation", {})),
            SearchConfig(**d.get("search", {})),
            ServerConfig(**d.get("server", {})),
            LoggingConfig(**d.get("logging", {})),
            ReportConfig(**d.get("report", {})),
        )


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        return Config.from_dict(json.load(file))
