"""
SceneRenderer nodes - submit code to the renderer and build the scene record.
"""
from langchain_core.runnables import RunnableConfig

from sculpt.graph.state import SceneState
from sculpt.models import RenderSuccess, SceneResult
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)

MAX_CORRECTION_ATTEMPTS = 3


async def render_node(state: SceneState, config: RunnableConfig) -> SceneState:
    """
    Render the current code.

    Updates:
    - outcome: RenderSuccess or ClassifiedFailure
    """
    renderer = config["configurable"]["renderer"]
    artifact = state["artifact"]

    state["current_step"] = "rendering"
    logger.info(
        "Rendering scene",
        scene_id=state["scene_id"],
        render_attempt=artifact.correction_attempts + 1,
    )

    outcome = await renderer.render(artifact.code, state["scene_id"], state["scene"].narration)
    state["outcome"] = outcome

    if isinstance(outcome, RenderSuccess):
        logger.info("Scene render succeeded", scene_id=state["scene_id"], media_url=outcome.media_url)
    else:
        logger.warning(
            "Scene render failed",
            scene_id=state["scene_id"],
            failure_kind=outcome.kind.value,
            recoverable=outcome.recoverable,
        )

    return state


def should_continue_after_render(state: SceneState) -> str:
    """
    Conditional edge: decide next step after a render attempt.

    Returns:
    - "finalize" on success, on a non-recoverable failure, or once the
      correction budget is spent
    - "correct_code" to retry a lint or runtime failure
    """
    outcome = state["outcome"]
    if isinstance(outcome, RenderSuccess) or not outcome.recoverable:
        return "finalize"

    if state["artifact"].correction_attempts >= state["max_correction_attempts"]:
        logger.warning(
            "Max correction attempts reached",
            scene_id=state["scene_id"],
            attempts=state["artifact"].correction_attempts,
        )
        return "finalize"

    return "correct_code"


async def finalize_node(state: SceneState) -> SceneState:
    """Turn the final state into an immutable SceneResult."""
    scene = state["scene"]
    scene_number = state["context"].scene_number
    artifact = state["artifact"]
    outcome = state.get("outcome")

    state["current_step"] = "finalized"

    if state.get("error_message"):
        state["result"] = SceneResult.failed(scene, scene_number, state["error_message"], artifact)
    elif isinstance(outcome, RenderSuccess):
        state["result"] = SceneResult.completed(scene, scene_number, artifact, outcome)
    else:
        if outcome.recoverable:
            message = (
                f"Rendering failed after {artifact.correction_attempts} correction attempts: {outcome.detail}"
            )
        else:
            message = f"Rendering failed ({outcome.kind.value}): {outcome.detail}"
        state["result"] = SceneResult.failed(scene, scene_number, message, artifact)

    logger.info(
        "Scene finished",
        scene_id=state["scene_id"],
        status=state["result"].status.value,
        correction_attempts=artifact.correction_attempts,
    )
    return state
