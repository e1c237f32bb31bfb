"""
Project orchestration: storyboard initiation and concurrent scene fan-out.
"""
import asyncio
import time
import uuid
from typing import List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from sculpt.config import Settings, settings as default_settings
from sculpt.graph.pipeline import SceneProcessor
from sculpt.models import (
    InitiatedProject,
    ProjectResult,
    SceneResult,
    StoryboardScene,
    aggregate_status,
)
from sculpt.utils.errors import OrchestrationError, StoryboardGenerationError, ValidationError
from sculpt.utils.logging import bound_context, get_logger

logger = get_logger(__name__)


def new_project_id() -> str:
    """e.g. "proj_1718049812345_a1b2c3d" """
    return f"proj_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


class ProjectOrchestrator:
    """
    Entry point for the two project operations.

    initiate() turns an idea into a storyboard. run() processes every scene
    of a storyboard concurrently and aggregates the outcome.
    """

    def __init__(self, llm, scene_processor: SceneProcessor, config: Optional[Settings] = None):
        self.llm = llm
        self.scene_processor = scene_processor
        self.config = config or default_settings

    async def initiate(self, user_idea: str) -> InitiatedProject:
        """
        Generate a storyboard for a new project.

        Raises:
            ValidationError: If the idea is outside the allowed length.
            StoryboardGenerationError: If the LLM produced no usable scenes.
            ServiceUnavailable: If the LLM could not be reached.
        """
        idea = (user_idea or "").strip()
        min_len, max_len = self.config.idea_min_length, self.config.idea_max_length
        if not min_len <= len(idea) <= max_len:
            raise ValidationError(
                f"User idea must be between {min_len} and {max_len} characters.",
                field="user_idea",
                details={"length": len(idea)},
            )

        project_id = new_project_id()
        with bound_context(project_id=project_id):
            logger.info("Initiating project", idea_length=len(idea))

            raw_storyboard = await self.llm.generate_storyboard(idea)
            storyboard = self._validate_storyboard(raw_storyboard)

            logger.info("Project initiated", scene_count=len(storyboard))
        return InitiatedProject(project_id=project_id, storyboard=tuple(storyboard))

    @staticmethod
    def _validate_storyboard(raw_storyboard) -> List[StoryboardScene]:
        if not raw_storyboard:
            logger.error("LLM returned an empty storyboard")
            raise StoryboardGenerationError("Failed to generate a storyboard for the given idea.")

        try:
            return [StoryboardScene.model_validate(scene) for scene in raw_storyboard]
        except PydanticValidationError as e:
            logger.error("LLM returned an invalid storyboard", errors=e.error_count())
            raise StoryboardGenerationError(
                "The generated storyboard has scenes with missing or empty fields.",
                field="storyboard",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    async def run(
        self,
        project_id: str,
        storyboard: Sequence[StoryboardScene],
        topic: Optional[str] = None,
    ) -> ProjectResult:
        """
        Process every scene concurrently and aggregate the results.

        Scene failures end up inside the result. Only an empty storyboard
        or a failure while aggregating is raised.
        """
        if not storyboard:
            raise ValidationError("Storyboard must contain at least one scene.", field="storyboard")

        topic = topic or self.config.default_project_topic
        with bound_context(project_id=project_id):
            logger.info("Starting scene processing", scene_count=len(storyboard), topic=topic)
            started = time.monotonic()

            tasks = [
                self._process_isolated(storyboard, index, topic, project_id)
                for index in range(len(storyboard))
            ]
            scene_results = await asyncio.gather(*tasks)

            try:
                result = ProjectResult(
                    project_id=project_id,
                    topic=topic,
                    storyboard=tuple(storyboard),
                    overall_status=aggregate_status(scene_results),
                    scene_results=tuple(scene_results),
                )
            except Exception as e:
                logger.exception("Failed to aggregate scene results")
                raise OrchestrationError(
                    "Failed to aggregate scene results.", project_id=project_id, cause=e
                ) from e

            logger.info(
                "Project processing finished",
                overall_status=result.overall_status.value,
                completed=result.completed_count,
                total=len(scene_results),
                duration_seconds=round(time.monotonic() - started, 2),
            )
        return result

    async def _process_isolated(
        self,
        storyboard: Sequence[StoryboardScene],
        index: int,
        topic: str,
        project_id: str,
    ) -> SceneResult:
        """Run one scene so that nothing it raises reaches its siblings."""
        try:
            return await self.scene_processor.process(storyboard, index, topic, project_id)
        except Exception as e:
            logger.exception("Scene processor raised", scene_number=index + 1)
            return SceneResult.failed(storyboard[index], index + 1, f"Unexpected error: {e}")
