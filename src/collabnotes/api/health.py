"""Health check API endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import HealthCheckResponse
from ..core.services import HealthService
from ..core.services.notification_service import NotificationDispatcher, get_notification_dispatcher
from ..database import get_db_session

router = APIRouter(prefix="/health", tags=["health"])


def get_health_service(
    session: AsyncSession = Depends(get_db_session),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> HealthService:
    return HealthService(session, notifier=notifier)


@router.get("/", response_model=HealthCheckResponse)
async def health_check(health_service: HealthService = Depends(get_health_service)):
    """Get overall system health status."""
    return await health_service.get_health_status()


@router.get("/database", response_model=Dict[str, Any])
async def database_health(health_service: HealthService = Depends(get_health_service)):
    """Check database connectivity."""
    return await health_service.check_database_health()


@router.get("/redis", response_model=Dict[str, Any])
async def redis_health(health_service: HealthService = Depends(get_health_service)):
    """Check Redis connectivity."""
    return await health_service.check_redis_health()
