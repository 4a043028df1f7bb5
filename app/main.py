"""
Main FastAPI application for the Prop Edge API.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging, get_logger
from app.core.middleware import CorrelationIdMiddleware
from app.core.rate_limit import GENERAL_RATE_LIMIT, limiter
from app.core import metrics
from app.api.routes import access, ai, data, edge, parlays, players, props, schedule
from app.services.core.circuit_breaker import get_all_breaker_states

configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()

    from app.core.scheduler import start_scheduler
    if await start_scheduler():
        logger.info("Automation scheduler started")
    metrics.update_scheduler_metrics()

    logger.info("Application started")

    yield

    from app.core.scheduler import stop_scheduler
    await stop_scheduler()
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Sports betting edge analytics: odds ingestion, edge detection and AI insights for NBA, NFL, MLB, NHL and WNBA",
    lifespan=lifespan
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

# Add correlation ID middleware (must be added before CORS for proper header handling)
app.add_middleware(CorrelationIdMiddleware)

# Prometheus metrics must be set up before routes are added
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API v1 - every route is sport-agnostic and takes the sport as a parameter
for module in (edge, ai, data, props, schedule, players, access, parlays):
    app.include_router(module.router, prefix="/api/v1")


@app.get("/")
@limiter.limit(GENERAL_RATE_LIMIT)
async def root(request: Request):
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "sports": ["NBA", "NFL", "MLB", "NHL", "WNBA"],
        "endpoints": {
            "api_version": "v1",
            "edge": "/api/v1/edge",
            "ai": "/api/v1/ai",
            "data": "/api/v1/data",
            "props": "/api/v1/props",
            "schedule": "/api/v1/schedule",
            "players": "/api/v1/players",
            "access": "/api/v1/access",
            "parlays": "/api/v1/parlays",
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics",
        }
    }


@app.get("/health")
@limiter.limit("120/minute")  # Higher limit for health checks
async def health_check(request: Request):
    """Liveness check."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION
    }


@app.get("/api/health")
@limiter.limit(GENERAL_RATE_LIMIT)
async def api_health(request: Request):
    """Detailed API health check with component-level status."""
    health_status = {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "components": {}
    }
    all_healthy = True

    # 1. Database
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {"status": "connected"}
        metrics.update_db_pool_metrics()
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        health_status["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False
    finally:
        db.close()

    # 2. Scheduler
    from app.core.scheduler import get_scheduler

    scheduler = get_scheduler()
    if scheduler and scheduler.running:
        jobs = scheduler.scheduler.get_jobs() if scheduler.scheduler else []
        health_status["components"]["scheduler"] = {
            "status": "running",
            "jobs_count": len(jobs),
            "jobs": [{"id": j.id, "name": j.name} for j in jobs]
        }
    elif settings.SCHEDULER_ENABLED:
        health_status["components"]["scheduler"] = {"status": "stopped"}
        all_healthy = False
    else:
        health_status["components"]["scheduler"] = {"status": "disabled"}
    metrics.update_scheduler_metrics()

    # 3. Provider circuit breakers (informational; an open circuit means fallback data)
    health_status["components"]["providers"] = get_all_breaker_states()

    if not all_healthy:
        health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=health_status)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
