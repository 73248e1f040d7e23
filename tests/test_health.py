"""Unit tests for health checks, errors and the structured logger."""

import json

import pytest

from core.errors import ConfigurationError, SessionError
from core.health import (
    HealthChecker,
    Status,
    check_event_loop,
    create_bus_check,
    create_engine_check,
)
from internal.logging import LogLevel, StructuredLogger, parse_level


class TestHealthChecker:
    """Tests for HealthChecker and the component checks."""

    @pytest.mark.asyncio
    async def test_all_ok(self, bus):
        checker = HealthChecker()
        checker.register("event_loop", check_event_loop)
        checker.register("event_bus", create_bus_check(bus))
        report = await checker.check()
        assert report.status == Status.OK
        assert [check["name"] for check in report.to_dict()["checks"]] == ["loop", "bus"]

    @pytest.mark.asyncio
    async def test_critical_failure(self):
        async def broken():
            raise RuntimeError("down")

        checker = HealthChecker()
        checker.register("broken", broken, critical=True)
        report = await checker.check()
        assert report.status == Status.FAIL
        assert report.checks[0].msg == "down"

    @pytest.mark.asyncio
    async def test_non_critical_failure_degrades(self):
        async def broken():
            raise RuntimeError("down")

        checker = HealthChecker()
        checker.register("loop", check_event_loop)
        checker.register("optional", broken, critical=False)
        assert (await checker.check()).status == Status.DEGRADED

    @pytest.mark.asyncio
    async def test_bus_drops_degrade(self, bus):
        await bus.subscribe("slow", max_queue_size=1)
        for i in range(5):
            await bus.publish({"i": i})
        result = await create_bus_check(bus)()
        assert result.status == Status.DEGRADED

    @pytest.mark.asyncio
    async def test_idle_engine_is_healthy(self, engine):
        result = await create_engine_check(engine)()
        assert result.status == Status.OK
        assert result.msg == "idle"


class TestErrors:
    """Tests for the tracked error types."""

    def test_error_carries_id_and_context(self):
        exc = ConfigurationError("bad token", position=4)
        assert len(exc.error_id) == 27
        assert str(exc).startswith(f"[{exc.error_id}] ")
        data = exc.to_dict()
        assert data["type"] == "ConfigurationError"
        assert data["msg"] == "bad token"
        assert data["context"] == {"position": 4}

    def test_session_error_state(self):
        assert SessionError("busy", state="forward").context == {"state": "forward"}


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_emits_json_with_bound_fields(self, capsys):
        log = StructuredLogger(LogLevel.DEBUG).bind(mode="b")
        log.info("search", time=1.5)
        record = json.loads(capsys.readouterr().err)
        assert record["level"] == "INFO"
        assert record["msg"] == "search"
        assert record["mode"] == "b"
        assert record["time"] == 1.5

    def test_level_filter(self, capsys):
        log = StructuredLogger(LogLevel.WARN)
        log.info("hidden")
        log.warn("shown", error=ValueError("x"))
        lines = capsys.readouterr().err.splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["err"] == "x"

    def test_parse_level(self):
        assert parse_level("warning") == LogLevel.WARN
        assert parse_level("DEBUG") == LogLevel.DEBUG
        assert parse_level(None) == LogLevel.INFO
