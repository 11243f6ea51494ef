from fastapi import APIRouter
from sqlalchemy import text

from app.database import engine
from app.utils.cache import cache_service

router = APIRouter(prefix="/health", tags=["Health"])


def _check_database(checks: dict) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        checks["database_error"] = str(e)


def _check_listing_cache(checks: dict) -> None:
    # Same client the admin listing is cached through.
    try:
        cache_service.client.ping()
        checks["redis"] = True
    except Exception as e:
        checks["redis_error"] = str(e)


@router.get("/", summary="Health check")
def health_check():
    """Liveness only; touches neither the database nor the cache."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check that the product table and the admin listing cache are reachable."
)
def readiness_check():
    """
    Ready when the database answers.

    The listing cache is reported as well. The admin page still works
    without Redis, only uncached, so a cache failure shows up as
    ``degraded`` rather than ``not_ready``.
    """
    checks = {"database": False, "redis": False}
    _check_database(checks)
    _check_listing_cache(checks)

    if not checks["database"]:
        state = "not_ready"
    elif not checks["redis"]:
        state = "degraded"
    else:
        state = "ready"

    return {"status": state, "checks": checks}
