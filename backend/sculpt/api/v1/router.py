"""Main API v1 router aggregating all sub-routers."""
from fastapi import APIRouter

from sculpt.api.v1.health import router as health_router
from sculpt.api.v1.projects import router as projects_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
