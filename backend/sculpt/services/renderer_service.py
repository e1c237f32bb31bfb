"""
Client for the remote Manim render service.

The renderer answers with a JSON body whose shape depends on the outcome.
Every answer, and every transport problem, is classified into a
RenderSuccess or a ClassifiedFailure; nothing HTTP-related is raised.
"""
import re
from typing import Any, Dict, Optional

import httpx

from sculpt.config import Settings, settings as default_settings
from sculpt.models import ClassifiedFailure, FailureKind, RenderOutcome, RenderSuccess
from sculpt.services.storage_service import StorageBackend
from sculpt.services.tts_service import TTSService
from sculpt.utils.errors import ServiceUnavailable
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)

COMMON_IMPORT_FIXES = {
    "BLACK": 'Replace "from manim.constants import BLACK" with "from manim import BLACK"',
    "WHITE": 'Replace "from manim.constants import WHITE" with "from manim import WHITE"',
    "CENTER": 'Replace "from manim import CENTER" with "from manim import ORIGIN"',
    "rate_functions": 'Replace "from manim.animation.rate_functions" with "from manim.utils.rate_functions"',
}

GATEWAY_STATUSES = {502, 503, 504}


def sanitize_manim_code(code: str) -> str:
    """Fix mistakes LLMs commonly make with Manim v0.18 imports and markup."""
    code = re.sub(r"<br\s*/?>", "\n", code, flags=re.IGNORECASE)
    code = re.sub(r"from\s+manim\.constants\s+import\s+", "from manim import ", code)
    code = re.sub(
        r"from\s+manim\.animation\.rate_functions\s+import\s+",
        "from manim.utils.rate_functions import ",
        code,
    )
    return code


def suggest_import_fix(stderr: str) -> Optional[str]:
    """Return a fix hint when stderr shows a known bad import."""
    if "No module named 'manim.animation.rate_functions'" in stderr:
        return COMMON_IMPORT_FIXES["rate_functions"]
    for name, fix in COMMON_IMPORT_FIXES.items():
        if f"cannot import name '{name}'" in stderr:
            return fix
    return None


class RendererService:
    """Submits scene code to the render service and classifies its answer."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        tts: Optional[TTSService] = None,
        storage: Optional[StorageBackend] = None,
    ):
        self.config = config or default_settings
        self.endpoint = self.config.renderer_endpoint
        self.client = http_client or httpx.AsyncClient(timeout=self.config.renderer_timeout_seconds)
        self.tts = tts
        self.storage = storage

    async def aclose(self) -> None:
        await self.client.aclose()

    async def render(self, code: str, scene_id: str, narration: Optional[str] = None) -> RenderOutcome:
        """
        Render one scene.

        Args:
            code: Manim source defining GeneratedScene.
            scene_id: "{project_id}_scene_{n}", used for object naming.
            narration: Narration text; synthesized to audio when TTS is enabled.
        """
        logger.info("Sending code to render service", scene_id=scene_id)
        logger.debug("Render code preview", scene_id=scene_id, preview=code[:150])

        if not self.endpoint:
            logger.error("Render service endpoint is not configured")
            return ClassifiedFailure(kind=FailureKind.UNAVAILABLE, detail="Render service is not configured.")

        body = {
            "manim_code": sanitize_manim_code(code),
            "scene_id": scene_id,
            "scene_identifier": scene_id,
        }

        try:
            response = await self.client.post(
                f"{self.endpoint}/render",
                json=body,
                timeout=self.config.renderer_timeout_seconds,
            )
        except httpx.TimeoutException as e:
            logger.error("Render request timed out", scene_id=scene_id, error=str(e))
            return ClassifiedFailure(
                kind=FailureKind.TIMEOUT,
                detail=f"Render service timed out after {self.config.renderer_timeout_seconds:g}s",
            )
        except httpx.HTTPError as e:
            logger.error("Render service request failed", scene_id=scene_id, error=str(e))
            return ClassifiedFailure(kind=FailureKind.UNAVAILABLE, detail=f"Render service error: {e}")

        return await self._classify(response, scene_id, narration)

    async def _classify(self, response: httpx.Response, scene_id: str, narration: Optional[str]) -> RenderOutcome:
        status = response.status_code
        data = self._payload(response)
        error = data.get("error")

        if status == 200:
            if data.get("video_url"):
                logger.info("Scene rendered", scene_id=scene_id, video_url=data["video_url"])
                return await self._success(data["video_url"], data.get("scene_identifier"), scene_id, narration)

            if data.get("video_path") and not error:
                return await self._publish_local_video(data, scene_id, narration)

            if error:
                logger.error("Render service returned 200 with an error payload", scene_id=scene_id)
                return ClassifiedFailure(
                    kind=FailureKind.UNEXPECTED_RESPONSE,
                    detail=f"Render service reported an error: {error}",
                    payload=data,
                )

            logger.error("Render service returned 200 without a video", scene_id=scene_id)
            return ClassifiedFailure(
                kind=FailureKind.UNEXPECTED_RESPONSE,
                detail="Render service returned an unexpected success payload (missing video_url).",
                payload=data,
            )

        if status == 400 and isinstance(error, str) and "Linting failed" in error:
            logger.warning("Render service reported linting errors", scene_id=scene_id)
            return ClassifiedFailure(
                kind=FailureKind.LINT_ERROR,
                detail=f"Linting failed for scene {scene_id}: {data.get('details_stdout') or error}",
                payload=data,
            )

        if status == 500:
            stderr = data.get("details_stderr") or ""
            detail = data.get("parsed_error") or stderr or error or "Unknown render error"
            suggestion = suggest_import_fix(stderr)
            if suggestion:
                detail = f"{detail}. Suggestion: {suggestion}"

            logger.error(
                "Manim process failed",
                scene_id=scene_id,
                error_type=data.get("error_type"),
                import_fix=suggestion,
            )
            return ClassifiedFailure(
                kind=FailureKind.RUNTIME_ERROR,
                detail=f"Manim rendering process failed for scene {scene_id}: {detail}",
                payload=data,
            )

        if error or status in GATEWAY_STATUSES:
            logger.error("Render service returned an error", scene_id=scene_id, status=status)
            return ClassifiedFailure(
                kind=FailureKind.UNAVAILABLE,
                detail=f"Render service failed (HTTP {status}): {error or response.reason_phrase}",
                payload=data,
            )

        logger.error("Render service returned an unexpected response", scene_id=scene_id, status=status)
        return ClassifiedFailure(
            kind=FailureKind.UNEXPECTED_RESPONSE,
            detail=f"Render service returned an unexpected response (HTTP {status}).",
            payload=data,
        )

    @staticmethod
    def _payload(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {"raw": response.text[:2000]} if response.text else {}
        return data if isinstance(data, dict) else {"raw": data}

    async def _publish_local_video(self, data: Dict[str, Any], scene_id: str, narration: Optional[str]) -> RenderOutcome:
        """Upload a video the renderer left on a shared volume."""
        if self.storage is None:
            return ClassifiedFailure(
                kind=FailureKind.UNEXPECTED_RESPONSE,
                detail="Render service returned a local video path but no storage is configured.",
                payload=data,
            )

        try:
            video_url = await self.storage.upload_video(data["video_path"], scene_id)
        except ServiceUnavailable as e:
            return ClassifiedFailure(kind=FailureKind.UNAVAILABLE, detail=e.message, payload=data)

        logger.info("Scene rendered and uploaded", scene_id=scene_id, video_url=video_url)
        return await self._success(video_url, data.get("scene_identifier"), scene_id, narration)

    async def _success(
        self,
        video_url: str,
        scene_identifier: Optional[str],
        scene_id: str,
        narration: Optional[str],
    ) -> RenderSuccess:
        audio_url = None
        if narration and self.tts is not None and self.tts.enabled:
            try:
                audio_url = await self.tts.synthesize(narration, scene_id)
            except (ServiceUnavailable, OSError) as e:
                logger.warning("Narration audio skipped", scene_id=scene_id, error=str(e))

        return RenderSuccess(
            media_url=video_url,
            audio_url=audio_url,
            scene_identifier=scene_identifier or scene_id,
        )
