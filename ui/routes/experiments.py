"""Chaos experiment routes: butterfly and reversal searches, batches, traces and plots.

Searches are CPU bound and run on the thread pool.
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from chaos import batch
from chaos.report import render_plot, summarize
from chaos.reversal import reversal_trace
from chaos.search import butterfly_time, reversal_divergence_time
from core.errors import ConfigurationError, SnapshotMismatchError
from simulation.generators import make_rng, perturbed_twin, random_configuration, random_pair
from ui.auth import verify_basic_auth
from ui.routes.control import seed_particles
from ui.schemas import (
    ButterflyRequest,
    ButterflySweepRequest,
    ButterflyTrialsRequest,
    PlotRequest,
    ReversalRequest,
    ReversalSweepRequest,
    ReversalTrialsRequest,
    TraceRequest,
)

router = APIRouter(prefix="/api/v1/experiments", tags=["experiments"])

# These will be set by app.py
_config = None


def init(config):
    """Initialize with the application config."""
    global _config
    _config = config


async def _offload(fn, *args):
    try:
        return await asyncio.to_thread(fn, *args)
    except (ConfigurationError, SnapshotMismatchError) as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict())


def _particles(body):
    particles = seed_particles(body, _config.simulation)
    if particles is None:
        particles = random_configuration(_config.simulation.particle_count, _config.simulation,
                                         make_rng(_config.simulation.seed))
    return particles


def _pair(body):
    magnitude = body.perturbation if body.perturbation is not None else _config.search.perturbation
    rng = make_rng(body.seed)
    if body.particles is not None:
        base = [spec.build() for spec in body.particles]
        return base, perturbed_twin(base, magnitude, rng)
    count = body.count if body.count is not None else _config.simulation.particle_count
    return random_pair(count, magnitude, _config.simulation, rng)


def _pick(value, default):
    return default if value is None else value


@router.post("/butterfly")
async def butterfly(body: ButterflyRequest, username=Depends(verify_basic_auth)):
    """Time until a configuration and its perturbed twin diverge."""
    base, twin = _pair(body)
    result = await _offload(butterfly_time, base, twin, _pick(body.threshold, _config.search.threshold),
                            _pick(body.tolerance, _config.search.tolerance), None, _config.simulation,
                            _config.search)
    return result.to_dict()


@router.post("/butterfly/thresholds")
async def butterfly_thresholds(body: ButterflySweepRequest, username=Depends(verify_basic_auth)):
    base, twin = _pair(body)
    report = await _offload(batch.butterfly_over_thresholds, base, twin,
                            _pick(body.threshold, _config.search.threshold), _pick(body.factor, _config.search.factor),
                            body.steps, _pick(body.tolerance, _config.search.tolerance), None, _config.simulation,
                            _config.search)
    return report.to_dict()


@router.post("/butterfly/trials")
async def butterfly_trials(body: ButterflyTrialsRequest, username=Depends(verify_basic_auth)):
    report = await _offload(batch.butterfly_over_trials, _pick(body.trials, _config.search.trials),
                            _pick(body.count, _config.simulation.particle_count),
                            _pick(body.threshold, _config.search.threshold),
                            _pick(body.perturbation, _config.search.perturbation),
                            _pick(body.tolerance, _config.search.tolerance), None, _config.simulation,
                            _config.search, make_rng(body.seed))
    return report.to_dict()


@router.post("/reversal")
async def reversal(body: ReversalRequest, username=Depends(verify_basic_auth)):
    """Time beyond which a reversed replay no longer returns to the start."""
    result = await _offload(reversal_divergence_time, _particles(body),
                            _pick(body.threshold, _config.search.threshold),
                            _pick(body.tolerance, _config.search.tolerance), None, _config.simulation,
                            _config.search)
    return result.to_dict()


@router.post("/reversal/thresholds")
async def reversal_thresholds(body: ReversalSweepRequest, username=Depends(verify_basic_auth)):
    report = await _offload(batch.reversal_over_thresholds, _particles(body),
                            _pick(body.threshold, _config.search.threshold), _pick(body.factor, _config.search.factor),
                            body.steps, _pick(body.tolerance, _config.search.tolerance), None, _config.simulation,
                            _config.search)
    return report.to_dict()


@router.post("/reversal/trials")
async def reversal_trials(body: ReversalTrialsRequest, username=Depends(verify_basic_auth)):
    report = await _offload(batch.reversal_over_trials, _pick(body.trials, _config.search.trials),
                            _pick(body.count, _config.simulation.particle_count),
                            _pick(body.threshold, _config.search.threshold),
                            _pick(body.tolerance, _config.search.tolerance), None, _config.simulation,
                            _config.search, make_rng(body.seed))
    return report.to_dict()


@router.post("/trace")
async def trace(body: TraceRequest, username=Depends(verify_basic_auth)):
    """Distance to the initial positions after every event, forward then reversed."""
    distances = await _offload(reversal_trace, _particles(body), body.duration, None, _config.simulation)
    return {"distances": distances, "summary": summarize(distances).to_dict()}


@router.post("/plot")
async def plot(body: PlotRequest, username=Depends(verify_basic_auth)):
    """Render a series as a PNG line plot."""
    png = await asyncio.to_thread(render_plot, body.values, body.title, body.xlabel, body.ylabel)
    return Response(content=png, media_type="image/png")
