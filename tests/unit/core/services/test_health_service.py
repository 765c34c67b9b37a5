import pytest

from collabnotes.core.services import HealthService


class StubRedis:
    def __init__(self, ok):
        self.ok = ok

    async def ping(self):
        return self.ok


class StubNotifier:
    def __init__(self, running=True):
        self.is_running = running


class BrokenSession:
    async def execute(self, *args, **kwargs):
        raise RuntimeError("db down")


@pytest.mark.asyncio
async def test_all_healthy(test_session):
    svc = HealthService(test_session, redis_client=StubRedis(True), notifier=StubNotifier())
    status = await svc.get_health_status()

    assert status.status == "healthy"
    assert status.checks["database"]["connected"] is True
    assert status.checks["redis"]["connected"] is True
    assert status.checks["notifications"] == {"running": True}


@pytest.mark.asyncio
async def test_redis_down_is_degraded(test_session):
    svc = HealthService(test_session, redis_client=StubRedis(False), notifier=StubNotifier())
    status = await svc.get_health_status()

    assert status.status == "degraded"
    assert status.checks["redis"]["status"] == "unhealthy"


@pytest.mark.asyncio
async def test_dispatcher_stopped_is_degraded(test_session):
    svc = HealthService(test_session, redis_client=StubRedis(True), notifier=StubNotifier(False))
    assert (await svc.get_health_status()).status == "degraded"


@pytest.mark.asyncio
async def test_database_down_is_unhealthy():
    svc = HealthService(BrokenSession(), redis_client=StubRedis(True), notifier=StubNotifier())
    status = await svc.get_health_status()

    assert status.status == "unhealthy"
    assert status.checks["database"]["error"] == "db down"
