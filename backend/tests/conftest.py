"""
Pytest configuration and fixtures for the scene pipeline tests.
"""
import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment before importing app modules
os.environ["DEBUG"] = "true"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="sculpt-static-")
os.environ["GROQ_API_KEY"] = ""
os.environ["TTS_ENABLED"] = "false"
os.environ["RENDERER_ENDPOINT"] = "http://renderer.test"

from sculpt.models import (  # noqa: E402
    ClassifiedFailure,
    FailureKind,
    RenderSuccess,
    StoryboardScene,
)

GENERATED_CODE = """from manim import Scene, Circle, Create

class GeneratedScene(Scene):
    def construct(self):
        self.play(Create(Circle()))
"""

CORRECTED_CODE = """from manim import Scene, Square, Create

class GeneratedScene(Scene):
    def construct(self):
        self.play(Create(Square()))
"""


def lint_failure(stdout: str = "scene.py:3:1: F821 undefined name 'Circel'") -> ClassifiedFailure:
    return ClassifiedFailure(
        kind=FailureKind.LINT_ERROR,
        detail=f"Linting failed: {stdout}",
        payload={"error": "Linting failed", "details_stdout": stdout},
    )


def runtime_failure(stderr: str = "NameError: name 'Circel' is not defined") -> ClassifiedFailure:
    return ClassifiedFailure(
        kind=FailureKind.RUNTIME_ERROR,
        detail=f"Runtime error during rendering: {stderr}",
        payload={"error": "Rendering failed", "stderr": stderr},
    )


def timeout_failure() -> ClassifiedFailure:
    return ClassifiedFailure(kind=FailureKind.TIMEOUT, detail="Render service timed out after 300s")


def render_success(scene_id: str) -> RenderSuccess:
    return RenderSuccess(
        media_url=f"https://storage.googleapis.com/sculptai-media/videos/{scene_id}.mp4",
        scene_identifier=scene_id,
    )


class ScriptedRenderer:
    """
    Renderer fake that answers from a per-scene script of outcomes.

    script maps a scene number to the outcomes of its successive render
    attempts; the last outcome repeats once the list is exhausted.
    """

    def __init__(self, script=None, default=None):
        self.script = script or {}
        self.default = default
        self.calls = []

    async def render(self, code, scene_id, narration=None):
        self.calls.append((code, scene_id, narration))
        scene_number = int(scene_id.rsplit("_", 1)[1])
        outcomes = self.script.get(scene_number)
        if outcomes is None:
            return self.default or render_success(scene_id)
        attempt = sum(1 for _, sid, _ in self.calls if sid == scene_id) - 1
        outcome = outcomes[min(attempt, len(outcomes) - 1)]
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "success":
            return render_success(scene_id)
        return outcome

    def calls_for(self, scene_number: int):
        return [c for c in self.calls if c[1].endswith(f"_scene_{scene_number}")]


@pytest.fixture
def storyboard():
    """Three-scene storyboard."""
    return [
        StoryboardScene(
            scene_title="What is a circle?",
            narration="A circle is every point at the same distance from a center.",
            visual_description="A white dot appears, then a blue circle is drawn around it.",
        ),
        StoryboardScene(
            scene_title="Radius",
            narration="That distance is called the radius.",
            visual_description="A yellow line grows from the center to the edge, labelled r.",
        ),
        StoryboardScene(
            scene_title="Circumference",
            narration="The distance around the circle is two pi r.",
            visual_description="The circle unrolls into a straight line with the formula 2 pi r above it.",
        ),
    ]


@pytest.fixture
def mock_llm():
    """LLM service fake returning fixed code."""
    llm = MagicMock()
    llm.generate_storyboard = AsyncMock()
    llm.generate_scene_code = AsyncMock(return_value=GENERATED_CODE)
    llm.correct_code = AsyncMock(return_value=CORRECTED_CODE)
    return llm


@pytest.fixture
def renderer():
    """Renderer fake that succeeds for every scene unless scripted."""
    return ScriptedRenderer()
