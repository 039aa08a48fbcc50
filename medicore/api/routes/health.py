"""Health check endpoints."""

from fastapi import APIRouter, Request

from medicore import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Basic health check, including which attachment backend is active."""
    port = request.app.state.attachment_port
    return {
        "status": "healthy",
        "service": "medicore",
        "version": __version__,
        "attachments": {
            "backend": port.name if port else None,
            "degraded": bool(port and port.degraded),
        },
    }


@router.get("/health/live")
async def liveness_check() -> dict:
    """Liveness check - basic process health."""
    return {"status": "alive"}
