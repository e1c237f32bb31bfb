"""
Storyboard models - the LLM's scene breakdown of a user idea.
"""
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoryboardScene(BaseModel):
    """
    One scene of a storyboard.

    Structure: {"scene_title": str, "narration": str, "visual_description": str}
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    scene_title: str = Field(..., min_length=1)
    narration: str = Field(..., min_length=1)
    visual_description: str = Field(..., min_length=1)

    @field_validator("scene_title", "narration", "visual_description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class SceneContext(BaseModel):
    """
    Everything the LLM needs to write code for one scene.

    previous_scene_context is taken from storyboard order, not from another
    scene's output. Scenes render concurrently, so it is only a prompt hint.
    """

    model_config = ConfigDict(frozen=True)

    scene_title: str
    narration: str
    visual_description: str
    scene_number: int = Field(..., ge=1)
    total_scenes: int = Field(..., ge=1)
    topic: str
    previous_scene_context: str = ""

    @classmethod
    def from_storyboard(
        cls,
        storyboard: Sequence[StoryboardScene],
        scene_index: int,
        topic: str,
    ) -> "SceneContext":
        """Build the context for storyboard[scene_index]."""
        scene = storyboard[scene_index]
        previous = storyboard[scene_index - 1].visual_description if scene_index > 0 else ""
        return cls(
            scene_title=scene.scene_title,
            narration=scene.narration,
            visual_description=scene.visual_description,
            scene_number=scene_index + 1,
            total_scenes=len(storyboard),
            topic=topic,
            previous_scene_context=previous,
        )
