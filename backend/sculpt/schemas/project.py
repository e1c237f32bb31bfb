"""Project-related schemas."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from sculpt.models import ProjectResult, StoryboardScene


class InitiateProjectRequest(BaseModel):
    """Request body for starting a project from an idea."""

    user_idea: str = Field(
        ...,
        min_length=10,
        max_length=1000,
        validation_alias=AliasChoices("user_idea", "userIdea"),
        description="Natural-language description of the animation",
    )


class GenerateVideoRequest(BaseModel):
    """Request body for rendering a (possibly edited) storyboard."""

    storyboard: List[StoryboardScene] = Field(..., min_length=1)
    user_idea: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=1000,
        validation_alias=AliasChoices("user_idea", "userIdea"),
        description="Original idea, used as the project topic",
    )


class InitiatedProjectData(BaseModel):
    """Payload of a successful initiation."""

    project_id: str
    storyboard: List[StoryboardScene]


class InitiateProjectResponse(BaseModel):
    """Envelope for POST /projects/initiate."""

    status: Literal["success"] = "success"
    message: str
    data: InitiatedProjectData


class GenerateVideoResponse(BaseModel):
    """Envelope for POST /projects/{project_id}/generate-video."""

    status: Literal["success"] = "success"
    message: str
    data: ProjectResult


class ErrorResponse(BaseModel):
    """Body of every error response."""

    status: Literal["error"] = "error"
    status_code: int
    message: str
    details: Optional[Dict[str, Any]] = None
