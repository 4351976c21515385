"""Health, ping and info endpoints."""

import time
from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .database import Database
from .dependencies import get_database

logger = structlog.get_logger("health")

START_TIME = time.time()

router = APIRouter(tags=["health"])


def available_endpoints(prefix: str) -> dict:
    """Map of the public endpoints, used by /info and the 404 handler."""
    return {
        "health": f"GET {prefix}/health",
        "ping": f"GET {prefix}/ping",
        "calculations": {
            "list": f"GET {prefix}/calculations",
            "create": f"POST {prefix}/calculations",
            "getById": f"GET {prefix}/calculations/:id",
            "deleteAll": f"DELETE {prefix}/calculations",
            "deleteById": f"DELETE {prefix}/calculations/:id",
        },
    }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check(
    request: Request,
    database: Annotated[Database, Depends(get_database)],
) -> JSONResponse:
    """Report server and database status; 503 if the store is unreachable."""
    settings = request.app.state.settings
    database_ok = await database.is_healthy()

    content = {
        "success": database_ok,
        "message": "Server is running" if database_ok else "Some services are unavailable",
        "timestamp": _now(),
        "uptime": round(time.time() - START_TIME, 3),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "services": {
            "database": database_ok,
            "server": True,
        },
    }

    if database_ok:
        return JSONResponse(status_code=200, content=content)

    logger.warning("health_check_failed", database=database_ok)
    return JSONResponse(status_code=503, content=content)


@router.get("/ping")
async def ping() -> dict:
    return {"success": True, "message": "pong", "timestamp": _now()}


@router.get("/info")
async def info(request: Request) -> dict:
    settings = request.app.state.settings
    return {
        "success": True,
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "REST API for calculator with calculation history",
        "endpoints": available_endpoints(settings.API_PREFIX),
        "timestamp": _now(),
    }
