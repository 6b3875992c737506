"""
Health probes

- /health/live  - process is up
- /health/ready - database answers and the schema exists (use for load balancers)
- /health/deep  - per-dependency diagnostics, tenant counts and config sanity
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from datetime import datetime
from typing import Dict, Any
import asyncio
import time

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import get_session_local
from app.core.logging_config import logger
from app.models.school import School, SchoolStatus


router = APIRouter(prefix="/health", tags=["Health Checks"])

PLACEHOLDER_SECRETS = ("CHANGE_ME", "your-secret-key")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


async def check_database() -> Dict[str, Any]:
    """Connectivity plus per-status school counts (which also proves the schema exists)"""
    started = time.perf_counter()
    try:
        async with get_session_local()() as session:
            await session.execute(text("SELECT 1"))
            try:
                rows = await session.execute(
                    select(School.status, func.count(School.id)).group_by(School.status)
                )
                tenants = {row[0].value: row[1] for row in rows.all()}
                tables_ready = True
            except SQLAlchemyError:
                tenants = {}
                tables_ready = False
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": _elapsed_ms(started),
            "connection": "failed",
            "tables_ready": False,
            "error": str(e),
        }

    return {
        "status": "healthy",
        "latency_ms": _elapsed_ms(started),
        "connection": "ok",
        "tables_ready": tables_ready,
        "schools": {
            "total": sum(tenants.values()),
            "active": tenants.get(SchoolStatus.ACTIVE.value, 0),
        },
    }


async def check_redis() -> Dict[str, Any]:
    """Rate-limit store; without REDIS_URL counters live in process memory"""
    if not settings.REDIS_URL:
        return {"status": "healthy", "connection": "memory", "message": "Rate limits stored in memory"}

    started = time.perf_counter()
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.warning(f"[HealthCheck] Redis check failed: {e}")
        return {"status": "unhealthy", "latency_ms": _elapsed_ms(started), "connection": "failed", "error": str(e)}
    finally:
        await client.aclose()
    return {"status": "healthy", "latency_ms": _elapsed_ms(started), "connection": "ok"}


def check_configuration() -> Dict[str, Any]:
    """Secrets present; reports the school-year settings the services run with"""
    critical = {
        "DATABASE_URL": settings.DATABASE_URL,
        "SECRET_KEY": settings.SECRET_KEY,
        "JWT_SECRET_KEY": settings.JWT_SECRET_KEY,
    }
    missing = [name for name, value in critical.items() if not value or value in PLACEHOLDER_SECRETS]
    result = {
        "status": "unhealthy" if missing else "healthy",
        "missing_critical": missing,
        "academic_year": settings.CURRENT_ACADEMIC_YEAR,
        "currency": settings.DEFAULT_CURRENCY,
    }
    if missing:
        result["message"] = f"Missing critical env vars: {', '.join(missing)}"
    return result


@router.get("/live")
async def liveness_check():
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "app": settings.APP_NAME,
    }


@router.get("/ready")
async def readiness_check():
    """503 until the database answers and the schema exists"""
    db_check = await check_database()
    is_ready = db_check["status"] == "healthy" and db_check["tables_ready"]

    body = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {"database": db_check},
    }
    if not is_ready:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body


@router.get("/deep")
async def deep_health_check():
    db_check, redis_check = await asyncio.gather(check_database(), check_redis())
    checks = {"database": db_check, "redis": redis_check, "environment": check_configuration()}

    if db_check["status"] != "healthy":
        overall = "unhealthy"
    elif all(c["status"] == "healthy" for c in checks.values()):
        overall = "healthy"
    else:
        overall = "degraded"

    return {
        "status": overall,
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "checks": checks,
    }
