"""
Text-to-Speech service using edge-tts.
"""
import re
import tempfile
from pathlib import Path
from typing import Optional

import edge_tts

from sculpt.config import Settings, settings as default_settings
from sculpt.services.storage_service import StorageBackend
from sculpt.utils.errors import ServiceUnavailable
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)


def sanitize_text_for_tts(text: str) -> str:
    """
    Sanitize narration so edge-tts does not produce corrupted audio.

    Removes emojis, control characters and SSML-conflicting characters, and
    collapses whitespace.
    """
    if not text:
        return ""

    # Keep letters, numbers, basic punctuation and common accented characters
    text = re.sub(r'[^\w\s.,!?;:\'"()\-–—…\u00C0-\u024F]', '', text, flags=re.UNICODE)
    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', text)
    text = re.sub(r'\s+', ' ', text)

    text = text.replace('&', 'and')
    text = text.replace('<', '')
    text = text.replace('>', '')

    text = text.strip()
    if not text:
        text = "..."

    return text


class TTSService:
    """Synthesizes scene narration and publishes it through storage."""

    def __init__(self, storage: StorageBackend, config: Optional[Settings] = None):
        self.storage = storage
        self.config = config or default_settings

    @property
    def enabled(self) -> bool:
        return self.config.tts_enabled

    async def synthesize(self, text: str, scene_id: str) -> str:
        """
        Generate narration audio for a scene and upload it.

        Returns:
            Public URL of the uploaded MP3.

        Raises:
            ServiceUnavailable: If TTS is disabled or synthesis/upload fails.
        """
        if not self.enabled:
            raise ServiceUnavailable("tts", "Text-to-speech is disabled")

        try:
            with tempfile.TemporaryDirectory(prefix="sculpt-tts-") as tmp_dir:
                output_path = Path(tmp_dir) / f"{scene_id}_narration.mp3"
                await self._generate_file(text, output_path)
                return await self.storage.upload_audio(str(output_path), scene_id)
        except OSError as e:
            logger.error("TTS scratch file handling failed", scene_id=scene_id, error=str(e))
            raise ServiceUnavailable("tts", f"Could not prepare narration audio: {e}") from e

    async def _generate_file(self, text: str, output_path: Path) -> None:
        clean_text = sanitize_text_for_tts(text)
        voice_id = self.config.tts_voice_id

        logger.debug(
            "Generating TTS audio",
            voice_id=voice_id,
            text_preview=clean_text[:50],
            rate=self.config.tts_rate,
            pitch=self.config.tts_pitch,
        )

        try:
            communicate = edge_tts.Communicate(
                clean_text,
                voice_id,
                rate=self.config.tts_rate,
                pitch=self.config.tts_pitch,
            )
            await communicate.save(str(output_path))
        except Exception as e:
            logger.error("TTS generation failed", voice_id=voice_id, text_preview=text[:30], error=str(e))
            raise ServiceUnavailable("tts", f"Speech synthesis failed: {e}") from e

        if not output_path.exists():
            raise ServiceUnavailable("tts", f"Audio file was not created: {output_path.name}")

        file_size = output_path.stat().st_size
        if file_size < 100:  # MP3 files should be at least a few hundred bytes
            logger.warning("Generated audio file is suspiciously small", path=str(output_path), size=file_size)
