"""
Project and scene result models.

Projects are not persisted. A ProjectResult is built once, after every scene
has reached a terminal state, and handed back to the API layer.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from sculpt.models.enums import ProjectStatus, SceneStatus
from sculpt.models.render import RenderSuccess
from sculpt.models.storyboard import StoryboardScene


@dataclass
class GenerationArtifact:
    """Working state of one scene while it is being generated and rendered."""

    code: str = ""
    correction_attempts: int = 0


class SceneResult(BaseModel):
    """Terminal record of one scene."""

    model_config = ConfigDict(frozen=True)

    scene_number: int = Field(..., ge=1)
    scene_title: str
    narration: str
    visual_description: str
    code: str = ""
    status: SceneStatus
    media_url: Optional[str] = None
    audio_url: Optional[str] = None
    scene_identifier: Optional[str] = None
    error_message: Optional[str] = None
    correction_attempts: int = 0

    @classmethod
    def completed(
        cls,
        scene: StoryboardScene,
        scene_number: int,
        artifact: GenerationArtifact,
        render: RenderSuccess,
    ) -> "SceneResult":
        return cls(
            scene_number=scene_number,
            scene_title=scene.scene_title,
            narration=scene.narration,
            visual_description=scene.visual_description,
            code=artifact.code,
            status=SceneStatus.COMPLETED,
            media_url=render.media_url,
            audio_url=render.audio_url,
            scene_identifier=render.scene_identifier,
            correction_attempts=artifact.correction_attempts,
        )

    @classmethod
    def failed(
        cls,
        scene: StoryboardScene,
        scene_number: int,
        error_message: str,
        artifact: Optional[GenerationArtifact] = None,
    ) -> "SceneResult":
        artifact = artifact or GenerationArtifact()
        return cls(
            scene_number=scene_number,
            scene_title=scene.scene_title,
            narration=scene.narration,
            visual_description=scene.visual_description,
            code=artifact.code,
            status=SceneStatus.FAILED,
            error_message=error_message,
            correction_attempts=artifact.correction_attempts,
        )


class InitiatedProject(BaseModel):
    """A freshly generated storyboard and the id assigned to it."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    storyboard: Tuple[StoryboardScene, ...]


class ProjectResult(BaseModel):
    """Aggregate outcome of a project, scenes in storyboard order."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    topic: str
    storyboard: Tuple[StoryboardScene, ...]
    overall_status: ProjectStatus
    scene_results: Tuple[SceneResult, ...]

    @property
    def completed_count(self) -> int:
        return sum(1 for s in self.scene_results if s.status == SceneStatus.COMPLETED)


def aggregate_status(scene_results: Sequence[SceneResult]) -> ProjectStatus:
    """
    completed if every scene completed, failed if none did,
    partially_completed otherwise.
    """
    completed = sum(1 for s in scene_results if s.status == SceneStatus.COMPLETED)
    if scene_results and completed == len(scene_results):
        return ProjectStatus.COMPLETED
    if completed == 0:
        return ProjectStatus.FAILED
    return ProjectStatus.PARTIALLY_COMPLETED
