"""
LangGraph pipeline assembly.
Defines the per-scene generate, render and correct workflow.
"""
from typing import Sequence

from langgraph.graph import END, StateGraph

from sculpt.graph.nodes.code_writer import correct_code_node, generate_code_node, should_render
from sculpt.graph.nodes.scene_renderer import (
    MAX_CORRECTION_ATTEMPTS,
    finalize_node,
    render_node,
    should_continue_after_render,
)
from sculpt.graph.state import SceneState
from sculpt.models import GenerationArtifact, SceneContext, SceneResult, StoryboardScene
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)


def create_scene_pipeline() -> StateGraph:
    """
    Create and return the scene pipeline.

    Flow:
    1. GenerateCode -> (code) -> Render
                    -> (LLM failure) -> Finalize

    2. Render -> (success / non-recoverable / budget spent) -> Finalize
              -> (lint or runtime error) -> CorrectCode

    3. CorrectCode -> (code) -> Render
                   -> (LLM failure) -> Finalize

    4. Finalize -> END
    """
    workflow = StateGraph(SceneState)

    workflow.add_node("generate_code", generate_code_node)
    workflow.add_node("render", render_node)
    workflow.add_node("correct_code", correct_code_node)
    workflow.add_node("finalize", finalize_node)

    workflow.set_entry_point("generate_code")

    workflow.add_conditional_edges(
        "generate_code",
        should_render,
        {"render": "render", "finalize": "finalize"},
    )

    workflow.add_conditional_edges(
        "render",
        should_continue_after_render,
        {"correct_code": "correct_code", "finalize": "finalize"},
    )

    workflow.add_conditional_edges(
        "correct_code",
        should_render,
        {"render": "render", "finalize": "finalize"},
    )

    workflow.add_edge("finalize", END)

    return workflow


# Compile the graph for execution
scene_pipeline = create_scene_pipeline().compile()


class SceneProcessor:
    """
    Drives one storyboard scene to a terminal SceneResult.

    Never raises: anything escaping the graph becomes a failed result that
    keeps the code and attempt count reached so far.
    """

    def __init__(self, llm, renderer, max_correction_attempts: int = MAX_CORRECTION_ATTEMPTS):
        self.llm = llm
        self.renderer = renderer
        self.max_correction_attempts = max_correction_attempts

    async def process(
        self,
        storyboard: Sequence[StoryboardScene],
        scene_index: int,
        project_topic: str,
        project_id: str,
    ) -> SceneResult:
        scene = storyboard[scene_index]
        scene_number = scene_index + 1
        scene_id = f"{project_id}_scene_{scene_number}"
        artifact = GenerationArtifact()

        logger.info(
            "Processing scene",
            scene_id=scene_id,
            scene_number=scene_number,
            total_scenes=len(storyboard),
            title=scene.scene_title,
        )

        try:
            context = SceneContext.from_storyboard(storyboard, scene_index, project_topic)
            initial_state: SceneState = {
                "scene": scene,
                "context": context,
                "scene_id": scene_id,
                "max_correction_attempts": self.max_correction_attempts,
                "artifact": artifact,
                "outcome": None,
                "error_message": None,
                "current_step": "initializing",
                "result": None,
            }

            final_state = await scene_pipeline.ainvoke(
                initial_state,
                config={"configurable": {"llm": self.llm, "renderer": self.renderer}},
            )
            return final_state["result"]

        except Exception as e:
            logger.exception("Unexpected error while processing scene", scene_id=scene_id)
            return SceneResult.failed(scene, scene_number, f"Unexpected error: {e}", artifact)
