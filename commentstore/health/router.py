"""Health check endpoints."""

from fastapi import APIRouter, Request


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness probe - the comment store has been wired up."""
    settings = request.app.state.settings
    return {
        "status": "ready",
        "environment": settings.environment,
        "storage_backend": settings.storage_backend,
        "debug": settings.debug,
    }


@router.get("")
async def health(request: Request) -> dict[str, str]:
    """General health check endpoint."""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
