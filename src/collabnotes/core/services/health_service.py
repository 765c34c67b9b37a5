"""Health service implementation."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..redis_client import RedisClient, get_redis_client
from ..schemas.common import HealthCheckResponse
from .interfaces import IHealthService
from .notification_service import NotificationDispatcher, get_notification_dispatcher


class HealthService(IHealthService):
    """Health check service implementation."""

    def __init__(
        self,
        session: AsyncSession,
        redis_client: Optional[RedisClient] = None,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        self.session = session
        self.settings = get_settings()
        self.redis_client = redis_client or get_redis_client()
        self.notifier = notifier or get_notification_dispatcher()

    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status.

        The database is required; Redis only carries notifications, so
        losing it degrades the service rather than taking it down.
        """
        db_health = await self.check_database_health()
        redis_health = await self.check_redis_health()

        if not db_health["connected"]:
            overall_status = "unhealthy"
        elif not redis_health["connected"] or not self.notifier.is_running:
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        return HealthCheckResponse(
            status=overall_status,
            timestamp=datetime.now(timezone.utc),
            version=self.settings.app_version,
            checks={
                "database": db_health,
                "redis": redis_health,
                "notifications": {"running": self.notifier.is_running},
            },
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        try:
            start_time = asyncio.get_running_loop().time()
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
            response_time = (asyncio.get_running_loop().time() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": 0.0,
            }

    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        start_time = asyncio.get_running_loop().time()
        ok = await self.redis_client.ping()
        response_time = (asyncio.get_running_loop().time() - start_time) * 1000

        if ok:
            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        return {
            "connected": False,
            "status": "unhealthy",
            "response_time_ms": None,
        }
