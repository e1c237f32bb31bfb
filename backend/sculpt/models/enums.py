"""
Enum types shared by the scene pipeline and the API schemas.
"""
from enum import Enum


class SceneStatus(str, Enum):
    """Terminal state of a single scene."""
    COMPLETED = "completed"
    FAILED = "failed"


class ProjectStatus(str, Enum):
    """Aggregate outcome of a project's scenes."""
    COMPLETED = "completed"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Classification of a failed render attempt."""
    LINT_ERROR = "lint_error"
    RUNTIME_ERROR = "runtime_error"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    UNEXPECTED_RESPONSE = "unexpected_response"

    @property
    def recoverable(self) -> bool:
        """Only failures caused by the generated code can be fixed by correcting it."""
        return self in (FailureKind.LINT_ERROR, FailureKind.RUNTIME_ERROR)
