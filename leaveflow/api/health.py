import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from leaveflow.config import get_settings
from leaveflow.db import SessionDep
from leaveflow.services.notification import NotificationChannel, notification_channel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

DatabaseState = Literal["ok", "unreachable"]


class HealthResponse(BaseModel):
    """Liveness, database reachability and the configured notification channel."""

    status: Literal["ok", "degraded"]
    database: DatabaseState
    notifications: NotificationChannel
    version: str
    environment: str


async def _probe_database(session: AsyncSession) -> DatabaseState:
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        return "unreachable"
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report service health. An unreachable database degrades it; disabled notifications do not."""
    settings = get_settings()
    database = await _probe_database(session)

    return HealthResponse(
        status="ok" if database == "ok" else "degraded",
        database=database,
        notifications=notification_channel(),
        version=settings.app_version,
        environment=settings.environment,
    )
