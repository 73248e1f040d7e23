"""API routes for stats and subscribers."""

from fastapi import APIRouter, Depends

from utils.timestamp import format_timestamp
from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1", tags=["api"])

# These will be set by app.py
_engine = None
_bus = None
_file_logger = None


def init(engine, bus, file_logger):
    """Initialize with engine, bus, and logger references."""
    global _engine, _bus, _file_logger
    _engine = engine
    _bus = bus
    _file_logger = file_logger


@router.get("/stats")
async def stats(username=Depends(verify_basic_auth)):
    """Return session, bus and file logger statistics (requires basic auth)."""
    snapshot = await _engine.get_snapshot()
    return {
        "timestamp": format_timestamp(),
        "session": {
            "id": _engine.session_id,
            "state": _engine.state,
            "interactive": _engine.interactive,
            "frame": _engine.frame,
            "sim_time": snapshot.time,
            "particle_count": len(snapshot.particles),
            "last_run": _engine.last_stats,
        },
        "bus": _bus.get_stats(),
        "logger": _file_logger.get_stats(),
    }


@router.get("/subscribers")
async def subscribers(username=Depends(verify_basic_auth)):
    """Return info about all current subscribers (requires basic auth)."""
    return await _bus.get_subscriber_info()
