"""Session control routes."""

import time

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from communication.bus import SESSIONS
from core.errors import SessionError
from simulation.generators import make_rng, random_configuration
from simulation.loader import format_configuration
from ui.auth import verify_basic_auth
from ui.schemas import SessionRequest

router = APIRouter(prefix="/api/v1/control", tags=["control"])

# These will be set by app.py
_engine = None
_bus = None


def init(engine, bus):
    """Initialize with engine and bus references."""
    global _engine, _bus
    _engine = engine
    _bus = bus


def _conflict(exc):
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.to_dict())


def seed_particles(source, config):
    """Particles described by a request body, or None to keep the engine's current seed."""
    if source.particles is not None:
        return [spec.build() for spec in source.particles]
    if source.count is not None:
        return random_configuration(source.count, config, make_rng(source.seed))
    return None


@router.post("/start")
async def start(body: SessionRequest, username=Depends(verify_basic_auth)):
    """Start a displayed session; interactive unless ``duration`` is given (requires basic auth)."""
    try:
        session = await _engine.start(seed_particles(body, _engine.config), body.duration)
    except SessionError as exc:
        raise _conflict(exc)
    await _bus.publish({"kind": "started", "session": session, "timestamp": time.time()}, SESSIONS)
    return {"ok": True, "session": session, "interactive": body.duration is None}


@router.post("/reverse")
async def reverse(username=Depends(verify_basic_auth)):
    """End the interactive forward phase and replay it backwards (requires basic auth)."""
    try:
        await _engine.reverse()
    except SessionError as exc:
        raise _conflict(exc)
    return {"ok": True}


@router.post("/stop")
async def stop(username=Depends(verify_basic_auth)):
    """Abort the running session (requires basic auth)."""
    await _engine.stop()
    await _bus.publish({"kind": "stopped", "timestamp": time.time()}, SESSIONS)
    return {"ok": True, "stats": _engine.last_stats}


@router.get("/configuration", response_class=PlainTextResponse)
async def configuration(username=Depends(verify_basic_auth)):
    """Seed configuration of the current session in the stdin format of the command line (requires basic auth)."""
    return format_configuration(_engine.particles)
