"""Project endpoints."""

from fastapi import APIRouter, Depends, Path, status

from sculpt.api.dependencies import get_orchestrator
from sculpt.schemas.project import (
    GenerateVideoRequest,
    GenerateVideoResponse,
    InitiateProjectRequest,
    InitiateProjectResponse,
    InitiatedProjectData,
)
from sculpt.services.project_orchestrator import ProjectOrchestrator
from sculpt.utils.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/initiate",
    response_model=InitiateProjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def initiate_project(
    request: InitiateProjectRequest,
    orchestrator: ProjectOrchestrator = Depends(get_orchestrator),
):
    """
    Start a project from an idea.

    Returns the generated storyboard so the client can review or edit it
    before requesting the video.
    """
    logger.info("Received project initiation", idea_preview=request.user_idea[:70])

    project = await orchestrator.initiate(request.user_idea)

    return InitiateProjectResponse(
        message="Project initiated and storyboard generated successfully.",
        data=InitiatedProjectData(
            project_id=project.project_id,
            storyboard=list(project.storyboard),
        ),
    )


@router.post("/{project_id}/generate-video", response_model=GenerateVideoResponse)
async def generate_video(
    request: GenerateVideoRequest,
    project_id: str = Path(..., min_length=1),
    orchestrator: ProjectOrchestrator = Depends(get_orchestrator),
):
    """
    Generate and render every scene of a storyboard.

    Waits until all scenes finish. Individual scene failures are reported
    in the payload; the request itself still succeeds.
    """
    logger.info(
        "Received video generation request",
        project_id=project_id,
        scene_count=len(request.storyboard),
    )

    result = await orchestrator.run(project_id, request.storyboard, topic=request.user_idea)

    logger.info(
        "Video generation finished",
        project_id=project_id,
        overall_status=result.overall_status.value,
    )

    return GenerateVideoResponse(
        message="Video scene generation processing completed.",
        data=result,
    )
