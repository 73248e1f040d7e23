"""FastAPI application factory."""

import asyncio
import json
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import StreamingResponse

from communication.bus import EventBus, FRAMES, SESSIONS
from config import load_config
from core.health import (
    HealthChecker,
    check_event_loop,
    create_bus_check,
    create_engine_check,
    create_logger_check,
)
from internal.logging import get_logger, parse_level, StructuredLogger, AsyncFileLogger
from utils.crash import create_async_handler
from simulation.engine import SimulationEngine
from simulation.state import StateSnapshot
from ui.routes import control, api, experiments, health


def create_app(config=None):
    """Create and configure the FastAPI application."""
    config = config or load_config()

    StructuredLogger.configure(min_level=parse_level(config.logging.level))
    logger_instance = get_logger()

    bus = EventBus(queue_size=100)
    engine = SimulationEngine(bus=bus, config=config.simulation)
    file_logger = AsyncFileLogger(file_path=config.logging.file)
    health_checker = HealthChecker()
    health_checker.register("event_loop", check_event_loop, critical=True)
    health_checker.register("event_bus", create_bus_check(bus), critical=True)
    health_checker.register("simulation_engine", create_engine_check(engine), critical=True)
    health_checker.register("async_logger", create_logger_check(file_logger), critical=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger_instance.info("Application starting", version="1.0.0")
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))

        await file_logger.start()
        # frames are too chatty for the file log; session notices only
        log_sub = await bus.subscribe("logger", max_queue_size=200, topics={SESSIONS})

        async def log_worker():
            while True:
                item = await log_sub.queue.get()
                file_logger.try_log("session", item)

        app.state.log_worker = asyncio.create_task(log_worker())
        logger_instance.info("Application started successfully")

        yield

        logger_instance.info("Application shutting down")
        await engine.stop()
        app.state.log_worker.cancel()
        try:
            await app.state.log_worker
        except asyncio.CancelledError:
            pass
        await file_logger.stop()
        logger_instance.info("Application shutdown complete")

    app = FastAPI(
        title="Asimov",
        version="1.0.0",
        description="event-driven hard-disk simulation and chaos explorer",
        lifespan=lifespan,
    )

    control.init(engine, bus)
    api.init(engine, bus, file_logger)
    experiments.init(config)
    health.init(engine, health_checker)

    app.include_router(control.router)
    app.include_router(api.router)
    app.include_router(experiments.router)
    app.include_router(health.router)

    app.state.engine = engine
    app.state.bus = bus

    @app.get("/events")
    async def events(request: Request):
        """SSE endpoint - streams redraw frames and session notices."""
        subscriber_name = f"ui-{uuid.uuid4().hex[:8]}"
        sub = await bus.subscribe(subscriber_name, max_queue_size=10, topics={FRAMES, SESSIONS})

        async def event_generator():
            try:
                snapshot = await engine.get_snapshot()
                yield format_sse("frame", snapshot.to_dict())

                while True:
                    if await request.is_disconnected():
                        break

                    try:
                        item = await asyncio.wait_for(sub.queue.get(), timeout=1.0)
                    except asyncio.TimeoutError:
                        yield ": keep-alive\n\n"
                        continue

                    if isinstance(item, StateSnapshot):
                        yield format_sse("frame", item.to_dict())
                    else:
                        yield format_sse("session", item)
            finally:
                await bus.unsubscribe(subscriber_name)

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    return app


def format_sse(event, data):
    """Format data as Server-Sent Event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"
