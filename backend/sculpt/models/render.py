"""
Render outcome models returned by the renderer adapter.
"""
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from sculpt.models.enums import FailureKind


class RenderSuccess(BaseModel):
    """Public URLs for a rendered scene."""

    model_config = ConfigDict(frozen=True)

    media_url: str
    audio_url: Optional[str] = None
    scene_identifier: Optional[str] = None


class ClassifiedFailure(BaseModel):
    """
    A failed render attempt.

    payload holds the renderer's raw response body. Only the correction
    prompt reads it, control flow looks at kind alone.
    """

    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    detail: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def recoverable(self) -> bool:
        return self.kind.recoverable


RenderOutcome = Union[RenderSuccess, ClassifiedFailure]
