"""
CodeWriter nodes - generate and correct Manim code using the LLM.
"""
from langchain_core.runnables import RunnableConfig

from sculpt.graph.state import SceneState
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)


async def generate_code_node(state: SceneState, config: RunnableConfig) -> SceneState:
    """
    Generate the first version of the scene's code.

    Updates:
    - artifact.code: Generated source
    - error_message: Set when generation fails; the scene cannot continue
    """
    context = state["context"]
    llm = config["configurable"]["llm"]

    logger.info(
        "CodeWriter node started",
        scene_id=state["scene_id"],
        scene_number=context.scene_number,
    )
    state["current_step"] = "generating_code"

    try:
        state["artifact"].code = await llm.generate_scene_code(context)
    except Exception as e:
        error_msg = f"Code generation failed: {e}"
        logger.error(error_msg, scene_id=state["scene_id"])
        state["error_message"] = error_msg

    return state


async def correct_code_node(state: SceneState, config: RunnableConfig) -> SceneState:
    """
    Ask the LLM to fix the code after a recoverable render failure.

    The attempt is counted before the call, so a failed correction call
    still shows up in correction_attempts.
    """
    artifact = state["artifact"]
    failure = state["outcome"]
    llm = config["configurable"]["llm"]

    artifact.correction_attempts += 1
    state["current_step"] = "correcting_code"

    logger.info(
        "Correcting scene code",
        scene_id=state["scene_id"],
        attempt=artifact.correction_attempts,
        max_attempts=state["max_correction_attempts"],
        failure_kind=failure.kind.value,
    )

    try:
        artifact.code = await llm.correct_code(artifact.code, failure, state["context"])
    except Exception as e:
        error_msg = f"Code correction failed on attempt {artifact.correction_attempts}: {e}"
        logger.error(error_msg, scene_id=state["scene_id"])
        state["error_message"] = error_msg

    return state


def should_render(state: SceneState) -> str:
    """
    Conditional edge after code generation or correction.

    Returns:
    - "render" when there is code to submit
    - "finalize" when the LLM call failed
    """
    if state.get("error_message"):
        return "finalize"
    return "render"
