"""
LangGraph state definition.
Defines the data that flows through the scene pipeline.
"""

from typing import Optional, TypedDict

from sculpt.models import GenerationArtifact, RenderOutcome, SceneContext, SceneResult, StoryboardScene


class SceneState(TypedDict):
    """State that flows through the per-scene LangGraph pipeline.

    The artifact is shared by reference with the caller, so the latest code
    and attempt count survive even if the graph raises.
    """

    # Inputs
    scene: StoryboardScene
    context: SceneContext
    scene_id: str
    max_correction_attempts: int

    # Working data
    artifact: GenerationArtifact
    outcome: Optional[RenderOutcome]

    # Error handling
    error_message: Optional[str]
    current_step: str

    # Terminal record, set by the finalize node
    result: Optional[SceneResult]
