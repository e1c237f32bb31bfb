"""
Tests for LLM response parsing and prompt construction.
"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from sculpt.config import Settings
from sculpt.models import ClassifiedFailure, FailureKind, SceneContext
from sculpt.services.llm_service import (
    LLMService,
    build_correction_prompt,
    extract_code,
    parse_storyboard,
)
from sculpt.utils.errors import ServiceUnavailable

SCENES = [
    {"scene_title": "Intro", "narration": "Hello.", "visual_description": "A dot."},
    {"scene_title": "Growth", "narration": "It grows.", "visual_description": "The dot becomes a circle."},
]


def fake_chat_model(content="", side_effect=None):
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content=content), side_effect=side_effect)
    return model


@pytest.fixture
def context():
    return SceneContext(
        scene_title="Growth",
        narration="It grows.",
        visual_description="The dot becomes a circle.",
        scene_number=2,
        total_scenes=3,
        topic="Circles",
        previous_scene_context="A dot.",
    )


class TestParseStoryboard:
    def test_bare_array(self):
        assert parse_storyboard(json.dumps(SCENES)) == SCENES

    def test_fenced_json(self):
        text = f"Here you go:\n```json\n{json.dumps(SCENES)}\n```"
        assert parse_storyboard(text) == SCENES

    @pytest.mark.parametrize("key", ["storyboard", "scenes"])
    def test_wrapped_array(self, key):
        assert parse_storyboard(json.dumps({key: SCENES})) == SCENES

    def test_wrapped_empty_array(self):
        assert parse_storyboard(json.dumps({"storyboard": []})) == []

    def test_extra_keys_dropped(self):
        scene = dict(SCENES[0], duration=4)
        assert parse_storyboard(json.dumps([scene])) == [SCENES[0]]

    def test_invalid_json(self):
        with pytest.raises(ServiceUnavailable) as exc_info:
            parse_storyboard("Sure! Scene 1: a dot appears.")
        assert exc_info.value.service == "llm"

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "not a storyboard"},
            [{"scene_title": "Intro", "narration": "Hello."}],
            [{"scene_title": "Intro", "narration": 3, "visual_description": "A dot."}],
            ["Intro"],
        ],
    )
    def test_wrong_shape(self, payload):
        with pytest.raises(ServiceUnavailable):
            parse_storyboard(json.dumps(payload))


class TestExtractCode:
    def test_python_fence(self):
        text = "Here is the code:\n```python\nclass GeneratedScene(Scene):\n    def construct(self):\n        pass\n```\nEnjoy!"
        assert extract_code(text) == "class GeneratedScene(Scene):\n    def construct(self):\n        pass"

    def test_unfenced_with_language_prefix(self):
        text = "python\nclass GeneratedScene(Scene):\n    def construct(self):\n        pass"
        assert extract_code(text).startswith("class GeneratedScene(Scene):")

    def test_malformed_code_is_returned(self):
        assert extract_code("print('hi')") == "print('hi')"


class TestCorrectionPrompt:
    def test_lint_section(self, context):
        failure = ClassifiedFailure(
            kind=FailureKind.LINT_ERROR,
            detail="Linting failed",
            payload={"error": "Linting failed", "details_stdout": "F401 'numpy' imported but unused"},
        )

        prompt = build_correction_prompt("import numpy", failure, context)

        assert "Linting Error (Flake8)" in prompt
        assert "F401 'numpy' imported but unused" in prompt
        assert "import numpy" in prompt
        assert "- Scene Number: 2" in prompt
        assert "- Total Scenes: 3" in prompt
        assert prompt.endswith("Now provide ONLY the fixed Python code:")

    def test_runtime_section(self, context):
        failure = ClassifiedFailure(
            kind=FailureKind.RUNTIME_ERROR,
            detail="NameError",
            payload={
                "error_type": "NameError",
                "parsed_error": "name 'Circel' is not defined",
                "details_stderr": "Traceback ...",
            },
        )

        prompt = build_correction_prompt("x", failure, context)

        assert "Runtime Error (Manim Execution)" in prompt
        assert "Exception: NameError" in prompt
        assert "name 'Circel' is not defined" in prompt
        assert "Traceback ..." in prompt

    def test_other_kinds_dump_payload(self, context):
        failure = ClassifiedFailure(kind=FailureKind.UNEXPECTED_RESPONSE, detail="odd", payload={"foo": "bar"})

        prompt = build_correction_prompt("x", failure, context)

        assert "Error Type: unexpected_response" in prompt
        assert '"foo": "bar"' in prompt


class TestLLMService:
    async def test_generate_storyboard(self):
        model = fake_chat_model(json.dumps(SCENES))
        service = LLMService(Settings(), storyboard_llm=model)

        storyboard = await service.generate_storyboard("Explain how circles grow")

        assert storyboard == SCENES
        messages = model.ainvoke.await_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert 'User Idea: "Explain how circles grow"' in messages[1].content

    async def test_generate_scene_code_prompt(self, context):
        model = fake_chat_model("```python\nclass GeneratedScene(Scene):\n    def construct(self):\n        pass\n```")
        service = LLMService(Settings(), code_llm=model)

        code = await service.generate_scene_code(context)

        assert code.startswith("class GeneratedScene(Scene):")
        user_prompt = model.ainvoke.await_args.args[0][1].content
        assert "scene 2 of 3" in user_prompt
        assert '"Circles"' in user_prompt
        assert 'Previous Scene Context (conceptual, re-declare elements if needed): "A dot."' in user_prompt

    async def test_scene_code_prompt_without_previous_context(self, context):
        model = fake_chat_model("```python\nx\n```")
        service = LLMService(Settings(), code_llm=model)

        await service.generate_scene_code(context.model_copy(update={"previous_scene_context": ""}))

        assert "Previous Scene Context" not in model.ainvoke.await_args.args[0][1].content

    async def test_correct_code_uses_correction_model(self, context):
        code_model = fake_chat_model("unused")
        correction_model = fake_chat_model("```python\nfixed\n```")
        service = LLMService(Settings(), code_llm=code_model, correction_llm=correction_model)
        failure = ClassifiedFailure(kind=FailureKind.LINT_ERROR, detail="lint", payload={})

        fixed = await service.correct_code("broken", failure, context)

        assert fixed == "fixed"
        correction_model.ainvoke.assert_awaited_once()
        code_model.ainvoke.assert_not_awaited()

    async def test_provider_error_becomes_service_unavailable(self, context):
        model = fake_chat_model(side_effect=RuntimeError("429 Too Many Requests"))
        service = LLMService(Settings(), code_llm=model)

        with pytest.raises(ServiceUnavailable) as exc_info:
            await service.generate_scene_code(context)

        assert "429" in exc_info.value.message

    async def test_empty_response(self):
        service = LLMService(Settings(), storyboard_llm=fake_chat_model("   "))

        with pytest.raises(ServiceUnavailable):
            await service.generate_storyboard("Explain how circles grow")

    async def test_missing_api_key(self, context):
        service = LLMService(Settings(groq_api_key=""))

        with pytest.raises(ServiceUnavailable) as exc_info:
            await service.generate_scene_code(context)

        assert "GROQ_API_KEY" in exc_info.value.message
