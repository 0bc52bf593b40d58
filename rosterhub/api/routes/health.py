from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.api.deps import get_db_session
from rosterhub.core.config import Settings, get_settings

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database(session: AsyncSession) -> dict:
    """Run a trivial query against the roster store."""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("health_database_unreachable", error=str(exc))
        return {"status": "error"}
    return {"status": "ok"}


@router.get("/health", summary="Service health probe")
async def health_check(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict:
    """Return basic service and datastore status information."""
    database_status = await check_database(session)

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": "ok" if database_status["status"] == "ok" else "degraded",
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {"database": database_status},
    }
    logger.info("health_probe", **payload)
    return payload
