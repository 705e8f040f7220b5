from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.cache.redis_cache import CacheService
from backoffice.infrastructure.config.settings import get_settings
from backoffice.infrastructure.persistence.database import engine, get_db
from backoffice.presentation.api.dependencies import get_cache_service, set_cache_service
from backoffice.presentation.api.errors import register_exception_handlers
from backoffice.presentation.api.v1.routes import (
    accounts,
    audit_logs,
    customers,
    permissions,
    roles,
    service_orders,
    user_roles,
)
from backoffice.presentation.middleware.trace_id import TraceIdMiddleware
from backoffice.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for application initialization and cleanup"""
    setup_logging()

    # Database schema is managed by migrations outside the application

    if settings.redis_enabled:
        cache_service = CacheService()
        await cache_service.connect()
        set_cache_service(cache_service)
        logger.info("Redis cache initialized (available=%s)", cache_service.is_available())
    else:
        logger.info("Redis cache disabled in configuration")

    yield

    if settings.redis_enabled:
        cache = await get_cache_service()
        await cache.disconnect()

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Trace id for request correlation (audit entries, denial entries, logs)
app.add_middleware(TraceIdMiddleware)

# Security: Using allow_credentials=True requires specific origins (not wildcard)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.trace_id_header_name],
)

# Routers
API_PREFIX = "/api/v1"
app.include_router(accounts.router, prefix=f"{API_PREFIX}/accounts", tags=["accounts"])
app.include_router(roles.router, prefix=f"{API_PREFIX}/roles", tags=["roles"])
app.include_router(permissions.router, prefix=f"{API_PREFIX}/permissions", tags=["permissions"])
app.include_router(user_roles.router, prefix=API_PREFIX, tags=["user-roles"])
app.include_router(customers.router, prefix=f"{API_PREFIX}/customers", tags=["customers"])
app.include_router(
    service_orders.router, prefix=f"{API_PREFIX}/service-orders", tags=["service-orders"]
)
app.include_router(audit_logs.router, prefix=API_PREFIX, tags=["audit"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
    - 200 OK if the database answers
    - 503 Service Unavailable otherwise
    """
    checks: dict[str, Any] = {"api": True, "database": False, "cache": None}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except SQLAlchemyError as e:
        checks["error"] = str(e)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "checks": checks})

    if settings.redis_enabled:
        cache = await get_cache_service()
        checks["cache"] = cache.is_available()

    return {"status": "healthy", "checks": checks}
