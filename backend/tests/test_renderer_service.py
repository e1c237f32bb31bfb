"""
Tests for render service response classification.
"""
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from sculpt.config import Settings
from sculpt.models import ClassifiedFailure, FailureKind, RenderSuccess
from sculpt.services.renderer_service import (
    COMMON_IMPORT_FIXES,
    RendererService,
    sanitize_manim_code,
    suggest_import_fix,
)
from sculpt.utils.errors import ServiceUnavailable

SCENE_ID = "proj_1_abc1234_scene_1"
CODE = "from manim import *\n\nclass GeneratedScene(Scene):\n    def construct(self):\n        pass\n"


def make_service(handler, tts=None, storage=None, **overrides):
    config = Settings(renderer_endpoint="http://renderer.test", **overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RendererService(config, http_client=client, tts=tts, storage=storage)


def respond(status_code, body=None):
    def handler(request):
        return httpx.Response(status_code, json=body) if body is not None else httpx.Response(status_code)
    return handler


class TestSanitizeManimCode:
    """Pre-submit fixes for common LLM mistakes."""

    def test_br_tags_become_newlines(self):
        assert sanitize_manim_code("a<br>b<BR/>c<br />d") == "a\nb\nc\nd"

    def test_constants_import_rewritten(self):
        code = "from manim.constants import BLACK, WHITE"
        assert sanitize_manim_code(code) == "from manim import BLACK, WHITE"

    def test_rate_functions_import_rewritten(self):
        code = "from manim.animation.rate_functions import ease_out_quad"
        assert sanitize_manim_code(code) == "from manim.utils.rate_functions import ease_out_quad"

    def test_clean_code_untouched(self):
        assert sanitize_manim_code(CODE) == CODE


class TestSuggestImportFix:
    def test_known_name(self):
        assert suggest_import_fix("ImportError: cannot import name 'CENTER' from 'manim'") == COMMON_IMPORT_FIXES["CENTER"]

    def test_rate_functions_module(self):
        stderr = "ModuleNotFoundError: No module named 'manim.animation.rate_functions'"
        assert suggest_import_fix(stderr) == COMMON_IMPORT_FIXES["rate_functions"]

    def test_unknown(self):
        assert suggest_import_fix("ZeroDivisionError") is None


class TestSuccess:
    async def test_video_url(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"video_url": "https://cdn.test/v.mp4", "scene_identifier": "abc"})

        service = make_service(handler)
        outcome = await service.render("x = 1<br>y = 2", SCENE_ID)

        assert isinstance(outcome, RenderSuccess)
        assert outcome.media_url == "https://cdn.test/v.mp4"
        assert outcome.scene_identifier == "abc"
        assert outcome.audio_url is None
        assert seen["url"] == "http://renderer.test/render"
        assert seen["body"] == {
            "manim_code": "x = 1\ny = 2",
            "scene_id": SCENE_ID,
            "scene_identifier": SCENE_ID,
        }

    async def test_narration_audio_attached(self):
        tts = MagicMock(enabled=True)
        tts.synthesize = AsyncMock(return_value="https://cdn.test/a.mp3")
        service = make_service(respond(200, {"video_url": "https://cdn.test/v.mp4"}), tts=tts)

        outcome = await service.render(CODE, SCENE_ID, narration="Hello there")

        assert outcome.audio_url == "https://cdn.test/a.mp3"
        tts.synthesize.assert_awaited_once_with("Hello there", SCENE_ID)

    async def test_tts_disabled_skips_audio(self):
        tts = MagicMock(enabled=False)
        tts.synthesize = AsyncMock()
        service = make_service(respond(200, {"video_url": "https://cdn.test/v.mp4"}), tts=tts)

        outcome = await service.render(CODE, SCENE_ID, narration="Hello there")

        assert outcome.audio_url is None
        tts.synthesize.assert_not_awaited()

    async def test_tts_failure_is_not_fatal(self):
        tts = MagicMock(enabled=True)
        tts.synthesize = AsyncMock(side_effect=ServiceUnavailable("tts", "edge-tts unreachable"))
        service = make_service(respond(200, {"video_url": "https://cdn.test/v.mp4"}), tts=tts)

        outcome = await service.render(CODE, SCENE_ID, narration="Hello there")

        assert isinstance(outcome, RenderSuccess)
        assert outcome.media_url == "https://cdn.test/v.mp4"
        assert outcome.audio_url is None

    async def test_tts_filesystem_error_is_not_fatal(self):
        tts = MagicMock(enabled=True)
        tts.synthesize = AsyncMock(side_effect=OSError(28, "No space left on device"))
        service = make_service(respond(200, {"video_url": "https://cdn.test/v.mp4"}), tts=tts)

        outcome = await service.render(CODE, SCENE_ID, narration="Hello there")

        assert isinstance(outcome, RenderSuccess)
        assert outcome.media_url == "https://cdn.test/v.mp4"
        assert outcome.audio_url is None

    async def test_local_video_path_is_uploaded(self):
        storage = MagicMock()
        storage.upload_video = AsyncMock(return_value="http://localhost:8000/static/videos/v.mp4")
        service = make_service(respond(200, {"video_path": "/shared/v.mp4"}), storage=storage)

        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.media_url == "http://localhost:8000/static/videos/v.mp4"
        storage.upload_video.assert_awaited_once_with("/shared/v.mp4", SCENE_ID)

    async def test_local_video_upload_failure(self):
        storage = MagicMock()
        storage.upload_video = AsyncMock(side_effect=ServiceUnavailable("gcs", "bucket missing"))
        service = make_service(respond(200, {"video_path": "/shared/v.mp4"}), storage=storage)

        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.UNAVAILABLE
        assert not outcome.recoverable


class TestClassifiedFailures:
    async def test_lint_error(self):
        body = {"error": "Linting failed", "details_stdout": "scene.py:4:9: F821 undefined name 'Circel'"}
        service = make_service(respond(400, body))

        outcome = await service.render(CODE, SCENE_ID)

        assert isinstance(outcome, ClassifiedFailure)
        assert outcome.kind == FailureKind.LINT_ERROR
        assert outcome.recoverable
        assert "F821" in outcome.detail
        assert outcome.payload == body

    async def test_runtime_error_with_import_suggestion(self):
        body = {
            "error": "Manim rendering failed",
            "error_type": "ImportError",
            "parsed_error": "ImportError: cannot import name 'BLACK'",
            "details_stderr": "ImportError: cannot import name 'BLACK' from 'manim.constants'",
        }
        service = make_service(respond(500, body))

        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.RUNTIME_ERROR
        assert outcome.recoverable
        assert "cannot import name 'BLACK'" in outcome.detail
        assert COMMON_IMPORT_FIXES["BLACK"] in outcome.detail
        assert outcome.payload["error_type"] == "ImportError"

    async def test_runtime_error_falls_back_to_error_field(self):
        service = make_service(respond(500, {"error": "Process exited with code 1"}))

        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.RUNTIME_ERROR
        assert "Process exited with code 1" in outcome.detail

    @pytest.mark.parametrize(
        "status_code, body, expected",
        [
            (200, {"error": "disk full"}, FailureKind.UNEXPECTED_RESPONSE),
            (200, {}, FailureKind.UNEXPECTED_RESPONSE),
            (400, {"error": "Missing manim_code"}, FailureKind.UNAVAILABLE),
            (503, None, FailureKind.UNAVAILABLE),
            (418, None, FailureKind.UNEXPECTED_RESPONSE),
        ],
    )
    async def test_other_responses(self, status_code, body, expected):
        service = make_service(respond(status_code, body))

        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == expected
        assert not outcome.recoverable

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        service = make_service(handler)
        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.TIMEOUT
        assert not outcome.recoverable

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler)
        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.UNAVAILABLE
        assert "connection refused" in outcome.detail

    async def test_missing_endpoint(self):
        service = make_service(respond(200, {"video_url": "https://cdn.test/v.mp4"}))
        service.endpoint = ""

        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.UNAVAILABLE

    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        service = make_service(handler)
        outcome = await service.render(CODE, SCENE_ID)

        assert outcome.kind == FailureKind.UNAVAILABLE
        assert outcome.payload == {"raw": "<html>Bad Gateway</html>"}
