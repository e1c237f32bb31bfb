"""
Domain models for the scene pipeline.
All models are exported here for convenient imports:
    from sculpt.models import StoryboardScene, SceneResult, ...
"""

from sculpt.models.enums import SceneStatus, ProjectStatus, FailureKind
from sculpt.models.storyboard import StoryboardScene, SceneContext
from sculpt.models.render import RenderSuccess, ClassifiedFailure, RenderOutcome
from sculpt.models.project import (
    GenerationArtifact,
    SceneResult,
    InitiatedProject,
    ProjectResult,
    aggregate_status,
)

__all__ = [
    "SceneStatus",
    "ProjectStatus",
    "FailureKind",
    "StoryboardScene",
    "SceneContext",
    "RenderSuccess",
    "ClassifiedFailure",
    "RenderOutcome",
    "GenerationArtifact",
    "SceneResult",
    "InitiatedProject",
    "ProjectResult",
    "aggregate_status",
]
