"""LangGraph pipeline for per-scene code generation and rendering."""
from sculpt.graph.pipeline import SceneProcessor, scene_pipeline
from sculpt.graph.state import SceneState

__all__ = ["SceneProcessor", "scene_pipeline", "SceneState"]
