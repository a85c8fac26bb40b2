"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from partpicker.dependencies import get_db
from partpicker.schemas import HealthCheckResponse
from partpicker.services.cache_service import get_cache_service

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Return service health status.

    Checks connectivity to:
    - Database
    - Redis page cache (reported as "disabled" when caching is off)
    """
    services = {}

    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    services["database"] = db_status

    cache = get_cache_service()
    if cache is None:
        cache_status = "disabled"
    else:
        cache_status = "ok" if await cache.health_check() else "error: ping failed"

    services["cache"] = cache_status

    # A disabled cache does not degrade the service
    overall_status = "ok" if all(s in ("ok", "disabled") for s in services.values()) else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        cache=cache_status,
        services=services,
    )
