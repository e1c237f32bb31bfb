"""FastAPI dependencies."""
from fastapi import Request

from sculpt.services.project_orchestrator import ProjectOrchestrator


def get_orchestrator(request: Request) -> ProjectOrchestrator:
    """Orchestrator built during application startup."""
    return request.app.state.orchestrator
