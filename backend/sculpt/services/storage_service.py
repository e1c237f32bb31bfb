"""
Object storage for rendered media.

Adapters hand local files to a StorageBackend and only ever return the
resulting public URL, so the orchestrator never sees a local path.
"""

import asyncio
import hashlib
import shutil
import time
from abc import ABC, abstractmethod
from functools import partial
from pathlib import Path
from typing import Optional

import fsspec

from sculpt.config import Settings, settings as default_settings
from sculpt.utils.errors import ServiceUnavailable
from sculpt.utils.logging import get_logger

logger = get_logger(__name__)


def build_object_name(folder: str, local_path: str, scene_id: str) -> str:
    """
    Unique object name for a scene's media file.

    e.g. "videos/proj_1_scene_2-1a2b3c4d.mp4"
    """
    extension = Path(local_path).suffix
    digest = hashlib.md5(f"{scene_id}-{time.time_ns()}".encode()).hexdigest()[:8]
    return f"{folder}/{scene_id}-{digest}{extension}"


class StorageBackend(ABC):
    """Provider-agnostic upload interface."""

    name: str = "storage"

    @abstractmethod
    async def upload_file(self, local_path: str, object_name: str) -> str:
        """
        Upload a local file and return its public URL.

        Raises:
            ServiceUnavailable: If the file is missing or the upload fails.
        """

    async def upload_video(self, local_path: str, scene_id: str) -> str:
        """Upload a rendered scene video."""
        return await self.upload_file(local_path, build_object_name("videos", local_path, scene_id))

    async def upload_audio(self, local_path: str, scene_id: str) -> str:
        """Upload a narration track."""
        return await self.upload_file(local_path, build_object_name("audio", local_path, scene_id))

    def _ensure_exists(self, local_path: str) -> None:
        if not Path(local_path).is_file():
            raise ServiceUnavailable(self.name, f"File not found: {local_path}", {"local_path": local_path})


class GCSStorageBackend(StorageBackend):
    """
    Google Cloud Storage backend using the fsspec 'gs' filesystem (gcsfs).

    Objects are expected to be publicly readable through bucket-level access.
    """

    name = "gcs"

    def __init__(self, bucket: str, base_url: str, credentials_path: Optional[str] = None, fs=None):
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")
        self.fs = fs or fsspec.filesystem("gs", token=credentials_path or None)
        logger.info("GCS storage initialized", bucket=bucket)

    def public_url(self, object_name: str) -> str:
        return f"{self.base_url}/{object_name}"

    async def upload_file(self, local_path: str, object_name: str) -> str:
        self._ensure_exists(local_path)
        full_path = f"{self.bucket}/{object_name}"

        logger.info("Uploading file to GCS", local_path=local_path, destination=full_path)

        try:
            # gcsfs is blocking, keep it off the event loop
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, partial(self.fs.put, local_path, full_path))
        except Exception as e:
            logger.error("GCS upload failed", local_path=local_path, error=str(e))
            raise ServiceUnavailable(
                self.name,
                f"Failed to upload file to cloud storage: {e}",
                {"local_path": local_path, "object_name": object_name},
            ) from e

        url = self.public_url(object_name)
        logger.info("GCS upload complete", url=url)
        return url


class LocalStorageBackend(StorageBackend):
    """
    Development backend: copies files under the static directory that the
    FastAPI app mounts at /static.
    """

    name = "local"

    def __init__(self, static_dir: str, public_base_url: str):
        self.static_dir = Path(static_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def public_url(self, object_name: str) -> str:
        return f"{self.public_base_url}/static/{object_name}"

    async def upload_file(self, local_path: str, object_name: str) -> str:
        self._ensure_exists(local_path)
        destination = self.static_dir / object_name

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, shutil.copyfile, local_path, destination)
        except OSError as e:
            logger.error("Local storage copy failed", local_path=local_path, error=str(e))
            raise ServiceUnavailable(
                self.name,
                f"Failed to store file locally: {e}",
                {"local_path": local_path, "object_name": object_name},
            ) from e

        logger.debug("Stored file locally", destination=str(destination))
        return self.public_url(object_name)


def get_storage_backend(config: Optional[Settings] = None) -> StorageBackend:
    """
    Build the storage backend selected by STORAGE_BACKEND.

    Raises:
        ValueError: If the backend name is unknown or GCS is missing its bucket.
    """
    config = config or default_settings
    backend_type = config.storage_backend.lower()

    if backend_type == "gcs":
        if not config.gcs_bucket_name:
            raise ValueError("GCS_BUCKET_NAME environment variable is required")
        return GCSStorageBackend(
            bucket=config.gcs_bucket_name,
            base_url=config.storage_public_base_url,
            credentials_path=config.gcs_credentials_path,
        )

    if backend_type == "local":
        return LocalStorageBackend(
            static_dir=config.static_dir,
            public_base_url=config.public_base_url,
        )

    raise ValueError(f"Invalid STORAGE_BACKEND: {config.storage_backend}. Must be 'gcs' or 'local'")
