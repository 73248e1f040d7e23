"""Health and heartbeat routes (no auth, for liveness checks and polling displays)."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from core.health import Status
from utils.timestamp import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["health"])

# These will be set by app.py
_engine = None
_health_checker = None


def init(engine, health_checker):
    """Initialize with engine and health checker references."""
    global _engine, _health_checker
    _engine = engine
    _health_checker = health_checker


@router.get("/health")
async def health():
    """Component status; 503 when a critical check fails."""
    report = await _health_checker.check()
    status_code = 503 if report.status == Status.FAIL else 200
    return JSONResponse(content=report.to_dict(), status_code=status_code)


@router.get("/heartbeat")
async def heartbeat():
    """Latest frame counter and simulated time of the current session."""
    snapshot = await _engine.get_snapshot()
    return {
        "status": "ok",
        "timestamp": format_timestamp(),
        "session": _engine.session_id,
        "engine_state": _engine.state,
        "phase": snapshot.phase,
        "frame": snapshot.frame,
        "sim_time": snapshot.time,
    }
