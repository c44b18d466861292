"""
SprintPulse API Main Application

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from sprintpulse.platform.config import settings
from sprintpulse.platform.logging import configure_logging, get_logger
from sprintpulse.api.routers import ai, dashboard, sprint_tasks, sprints, tasks, teams
from sprintpulse.api.dependencies import init_resources, close_resources

# Configure logging on import
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting SprintPulse API...")
    try:
        init_resources(app)
        logger.info("Resources initialized successfully.")
    except Exception as e:
        logger.error("Failed to initialize resources", error=str(e))
        raise

    yield

    logger.info("Shutting down SprintPulse API...")
    close_resources(app)
    logger.info("Resources closed.")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Sprint analytics and AI-assisted sprint insights",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(",") if settings.CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# OBSERVABILITY
# =============================================================================

if settings.METRICS_ENABLED:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================


@app.get("/health/live", tags=["Health"])
async def liveness() -> dict:
    """Liveness probe - is the service running?"""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
def readiness(request: Request) -> dict:
    """
    Readiness probe - is the service ready to accept traffic?
    Checks the database connection.
    """
    adapter = getattr(request.app.state, "postgres", None)
    postgres_healthy = adapter.health_check() if adapter else False

    return {
        "status": "ready" if postgres_healthy else "not_ready",
        "version": settings.VERSION,
        "checks": {
            "postgres": "healthy" if postgres_healthy else "unhealthy",
        },
    }


# =============================================================================
# API ROUTERS
# =============================================================================

app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
app.include_router(sprint_tasks.router, prefix="/api/sprint-tasks", tags=["Sprints"])
app.include_router(sprints.router, prefix="/api/sprints", tags=["Sprints"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(teams.router, prefix="/api/teams", tags=["Teams"])
app.include_router(ai.router, prefix="/api/ai", tags=["AI"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sprintpulse.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
