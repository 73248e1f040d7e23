"""Request bodies for the control and experiment routes."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from simulation.entities import Particle


class ParticleSpec(BaseModel):
    x: float
    y: float
    vx: float
    vy: float
    radius: float = Field(gt=0)
    mass: float = Field(gt=0)
    color: Tuple[int, int, int] = (0, 0, 0)

    def build(self):
        return Particle(self.x, self.y, self.vx, self.vy, self.radius, self.mass, self.color)


class ConfigurationSource(BaseModel):
    """Explicit particles, or ``count`` random ones (seeded by ``seed``)."""

    particles: Optional[List[ParticleSpec]] = None
    count: Optional[int] = Field(default=None, ge=0)
    seed: Optional[int] = None


class SessionRequest(ConfigurationSource):
    duration: Optional[float] = Field(default=None, gt=0)


class ButterflyRequest(ConfigurationSource):
    threshold: Optional[float] = Field(default=None, gt=0)
    perturbation: Optional[float] = Field(default=None, ge=0)
    tolerance: Optional[float] = Field(default=None, gt=0)


class ReversalRequest(ConfigurationSource):
    threshold: Optional[float] = Field(default=None, gt=0)
    tolerance: Optional[float] = Field(default=None, gt=0)


class ThresholdSweep(BaseModel):
    steps: int = Field(default=5, ge=1)
    factor: Optional[float] = Field(default=None, gt=0)


class ButterflySweepRequest(ButterflyRequest, ThresholdSweep):
    pass


class ReversalSweepRequest(ReversalRequest, ThresholdSweep):
    pass


class ButterflyTrialsRequest(ButterflyRequest):
    trials: Optional[int] = Field(default=None, ge=1)


class ReversalTrialsRequest(ReversalRequest):
    trials: Optional[int] = Field(default=None, ge=1)


class TraceRequest(ConfigurationSource):
    duration: float = Field(gt=0)


class PlotRequest(BaseModel):
    values: List[float]
    title: str = ""
    xlabel: str = "index"
    ylabel: str = "value"
