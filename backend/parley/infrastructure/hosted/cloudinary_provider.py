"""
Cloudinary image storage provider.
"""

import asyncio

import cloudinary
import cloudinary.uploader

from parley.core.config import Settings
from parley.core.exceptions import DependencyError
from parley.core.logger import setup_logger
from parley.interfaces.storage_provider import IStorageProvider
from parley.utils.image_payload import to_data_url

logger = setup_logger(__name__)


class CloudinaryStorageProvider(IStorageProvider):
    """Uploads images to Cloudinary and returns their secure URL."""

    def __init__(self, settings: Settings):
        if not settings.CLOUDINARY_CLOUD_NAME:
            raise ValueError("CLOUDINARY_CLOUD_NAME must be set for cloudinary storage")
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True,
        )
        self._root_folder = settings.CLOUDINARY_FOLDER.strip("/")

    async def upload_image(self, payload: str, folder: str) -> str:
        source = to_data_url(payload)
        target_folder = "/".join(part for part in (self._root_folder, folder.strip("/")) if part)
        try:
            # The SDK is synchronous
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                source,
                folder=target_folder,
                resource_type="image",
            )
        except Exception as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise DependencyError(f"Failed to upload image: {e}") from e

        url = result.get("secure_url") if isinstance(result, dict) else None
        if not url:
            raise DependencyError("Cloudinary response did not include a secure_url")
        return url
