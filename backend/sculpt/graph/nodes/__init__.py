"""LangGraph nodes for the scene pipeline."""
from sculpt.graph.nodes.code_writer import correct_code_node, generate_code_node
from sculpt.graph.nodes.scene_renderer import finalize_node, render_node

__all__ = [
    "generate_code_node",
    "correct_code_node",
    "render_node",
    "finalize_node",
]
