"""
Local file system storage provider.
"""

from pathlib import Path
from typing import Optional
from uuid import uuid4

from parley.core.config import get_settings
from parley.core.exceptions import DependencyError, ValidationError
from parley.core.logger import setup_logger
from parley.interfaces.storage_provider import IStorageProvider
from parley.utils.image_payload import decode_image_payload, is_remote_url

logger = setup_logger(__name__)


class LocalStorageProvider(IStorageProvider):
    """
    Local file system storage implementation.

    Stores images under ``base_path/<folder>/`` and serves them from the
    ``/storage`` static mount.
    """

    def __init__(self, base_path: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize local storage provider.

        Args:
            base_path: Base directory for file storage (default: ./storage)
            base_url: Public URL of the backend (default: settings.BASE_URL)
        """
        self.base_path = Path(base_path or "./storage")
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = (base_url or get_settings().BASE_URL).rstrip("/")

    async def upload_image(self, payload: str, folder: str) -> str:
        """Decode the image and write it under a fresh name. Links are never fetched."""
        if is_remote_url(payload.strip()):
            raise ValidationError("Image must be sent as a data URL or base64")
        image = decode_image_payload(payload)

        path = f"{folder.strip('/')}/{uuid4().hex}{image.extension}"
        try:
            file_path = self.base_path / path
            file_path.parent.mkdir(parents=True, exist_ok=True)

            with open(file_path, "wb") as f:
                f.write(image.data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise DependencyError(f"Failed to upload file: {e}") from e

        return self.get_public_url(path)

    async def delete(self, path: str) -> bool:
        """Delete a file from local storage."""
        try:
            file_path = self._resolve_path(path)

            if not file_path.exists():
                return False

            file_path.unlink()
            return True

        except OSError as e:
            raise DependencyError(f"Failed to delete file: {e}") from e

    async def exists(self, path: str) -> bool:
        """Check if a file exists."""
        return self._resolve_path(path).exists()

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/{path}"

    def _resolve_path(self, path: str) -> Path:
        """Resolve a stored path or public URL to a file under base_path."""
        prefix = f"{self.base_url}/storage/"
        if path.startswith(prefix):
            path = path[len(prefix):]
        resolved = (self.base_path / path).resolve()
        if self.base_path.resolve() not in resolved.parents:
            raise ValidationError(f"Path escapes storage root: {path}")
        return resolved
