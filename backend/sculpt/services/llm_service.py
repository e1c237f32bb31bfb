"""
Groq LLM service for storyboard generation, Manim code generation and
code correction.
"""
import json
import re
from typing import Any, Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from sculpt.config import Settings, settings as default_settings
from sculpt.models import ClassifiedFailure, FailureKind, SceneContext
from sculpt.services.prompts import (
    CORRECTION_SYSTEM_PROMPT,
    CORRECTION_USER_PROMPT,
    GENERIC_ERROR_SECTION,
    LINT_ERROR_SECTION,
    PREVIOUS_SCENE_LINE,
    RUNTIME_ERROR_SECTION,
    SCENE_CODE_SYSTEM_PROMPT,
    SCENE_CODE_USER_PROMPT,
    STORYBOARD_SYSTEM_PROMPT,
    STORYBOARD_USER_PROMPT,
)
from sculpt.utils.errors import ServiceUnavailable
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)

STORYBOARD_FIELDS = ("scene_title", "narration", "visual_description")

_JSON_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_PYTHON_FENCE = re.compile(r"```python\s*([\s\S]*?)\s*```")


def parse_storyboard(response_text: str) -> List[Dict[str, str]]:
    """
    Parse the storyboard JSON returned by the LLM.

    Accepts a bare array, an array inside a markdown fence, or an object
    wrapping the array under "storyboard" or "scenes". Each scene must carry
    the three storyboard fields as strings; emptiness is checked by the caller.

    Raises:
        ServiceUnavailable: If the text is not JSON or not a list of scenes.
    """
    match = _JSON_FENCE.search(response_text)
    raw = match.group(1) if match else response_text.strip()

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse storyboard JSON", response_preview=response_text[:200])
        raise ServiceUnavailable(
            "llm", "Failed to parse storyboard from the LLM. Expected valid JSON output."
        ) from e

    if isinstance(parsed, dict):
        for key in ("storyboard", "scenes"):
            if key in parsed:
                parsed = parsed[key]
                break

    if not isinstance(parsed, list) or not all(_is_scene_shaped(s) for s in parsed):
        logger.error("Parsed storyboard is not a valid array of scenes", parsed_type=type(parsed).__name__)
        raise ServiceUnavailable("llm", "The LLM did not return a valid storyboard array structure.")

    return [{field: scene[field] for field in STORYBOARD_FIELDS} for scene in parsed]


def _is_scene_shaped(scene: Any) -> bool:
    return isinstance(scene, dict) and all(isinstance(scene.get(f), str) for f in STORYBOARD_FIELDS)


def extract_code(response_text: str) -> str:
    """
    Pull Manim source out of an LLM response.

    Takes the body of a ```python fence when present, otherwise the whole
    text. A response missing the GeneratedScene class is only logged; the
    renderer's linter reports it as a correctable failure.
    """
    match = _PYTHON_FENCE.search(response_text)
    code = match.group(1) if match else response_text.strip()
    if code.startswith("python\n"):
        code = code[len("python\n"):].strip()

    if "class GeneratedScene(Scene):" not in code or "def construct(self):" not in code:
        logger.warning("Generated Manim code might be malformed or incomplete", preview=code[:200])

    return code


def build_correction_prompt(code: str, failure: ClassifiedFailure, context: SceneContext) -> str:
    """Render the user prompt for a correction request from a classified failure."""
    payload = failure.payload

    if failure.kind == FailureKind.LINT_ERROR:
        error_section = LINT_ERROR_SECTION.format(details=payload.get("details_stdout") or failure.detail)
    elif failure.kind == FailureKind.RUNTIME_ERROR:
        error_section = RUNTIME_ERROR_SECTION.format(
            error_type=payload.get("error_type") or "N/A",
            parsed_error=payload.get("parsed_error") or failure.detail,
            stderr=payload.get("details_stderr") or "N/A",
            stdout=payload.get("details_stdout") or "N/A",
        )
    else:
        error_section = GENERIC_ERROR_SECTION.format(
            kind=failure.kind.value,
            details=json.dumps(payload or {"detail": failure.detail}, indent=2, default=str),
        )

    return CORRECTION_USER_PROMPT.format(
        code=code,
        error_section=error_section,
        scene_number=context.scene_number,
        total_scenes=context.total_scenes,
        topic=context.topic,
    )


class LLMService:
    """
    Thin wrapper around Groq chat models.

    One chat model per purpose so each call runs at its own temperature.
    Models are created on first use; pass prebuilt ones to substitute them.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        storyboard_llm=None,
        code_llm=None,
        correction_llm=None,
    ):
        self.config = config or default_settings
        self._models = {
            "storyboard": storyboard_llm,
            "code": code_llm,
            "correction": correction_llm,
        }

    def _chat_model(self, purpose: str):
        model = self._models.get(purpose)
        if model is not None:
            return model

        if not self.config.groq_api_key:
            logger.error("GROQ_API_KEY is not configured", purpose=purpose)
            raise ServiceUnavailable("llm", "GROQ_API_KEY is not configured. Cannot call the LLM.")

        from langchain_groq import ChatGroq

        temperatures = {
            "storyboard": self.config.storyboard_temperature,
            "code": self.config.code_temperature,
            "correction": self.config.correction_temperature,
        }
        model_name = self.config.groq_scripting_model if purpose == "storyboard" else self.config.groq_code_model

        model = ChatGroq(
            model=model_name,
            temperature=temperatures[purpose],
            max_tokens=self.config.groq_max_tokens,
            api_key=self.config.groq_api_key,
        )
        self._models[purpose] = model
        return model

    async def _complete(self, purpose: str, system_prompt: str, user_prompt: str) -> str:
        llm = self._chat_model(purpose)
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]

        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            logger.error("LLM request failed", purpose=purpose, error=str(e))
            raise ServiceUnavailable("llm", f"Failed to communicate with the LLM for {purpose}: {e}") from e

        content = response.content if isinstance(response.content, str) else ""
        content = content.strip()
        if not content:
            logger.error("LLM returned empty content", purpose=purpose)
            raise ServiceUnavailable("llm", f"The LLM returned empty content for {purpose}.")

        return content

    async def generate_storyboard(self, user_idea: str) -> List[Dict[str, str]]:
        """
        Break a user idea into storyboard scenes.

        Returns:
            List of {"scene_title", "narration", "visual_description"} dicts.
        """
        logger.debug("Requesting storyboard", idea_length=len(user_idea))

        text = await self._complete(
            "storyboard",
            STORYBOARD_SYSTEM_PROMPT,
            STORYBOARD_USER_PROMPT.format(user_idea=user_idea),
        )
        storyboard = parse_storyboard(text)

        logger.info("Storyboard generated", scene_count=len(storyboard))
        return storyboard

    async def generate_scene_code(self, context: SceneContext) -> str:
        """Generate Manim source for one scene."""
        previous = (
            PREVIOUS_SCENE_LINE.format(previous_scene_context=context.previous_scene_context)
            if context.previous_scene_context
            else ""
        )
        user_prompt = SCENE_CODE_USER_PROMPT.format(
            scene_title=context.scene_title,
            scene_number=context.scene_number,
            total_scenes=context.total_scenes,
            topic=context.topic,
            previous_context=previous,
            narration=context.narration,
            visual_description=context.visual_description,
        )

        logger.debug(
            "Requesting scene code",
            scene_number=context.scene_number,
            total_scenes=context.total_scenes,
        )
        text = await self._complete("code", SCENE_CODE_SYSTEM_PROMPT, user_prompt)
        return extract_code(text)

    async def correct_code(self, code: str, failure: ClassifiedFailure, context: SceneContext) -> str:
        """Ask the LLM to fix code that failed to lint or render."""
        logger.debug(
            "Requesting code correction",
            scene_number=context.scene_number,
            failure_kind=failure.kind.value,
        )
        text = await self._complete(
            "correction",
            CORRECTION_SYSTEM_PROMPT,
            build_correction_prompt(code, failure, context),
        )
        return extract_code(text)
