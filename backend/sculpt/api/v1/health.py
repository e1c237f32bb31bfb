"""Health check endpoint."""
from fastapi import APIRouter

from sculpt.config import settings

router = APIRouter()

VERSION = "1.0.0"


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    The service keeps no state of its own, so this only reports whether
    the render service is configured.
    """
    return {
        "status": "healthy",
        "renderer_configured": bool(settings.renderer_endpoint),
        "storage_backend": settings.storage_backend,
        "version": VERSION,
    }
