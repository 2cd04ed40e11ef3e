"""
Object storage interface for user-supplied images.
"""

from abc import ABC, abstractmethod


class IStorageProvider(ABC):
    """Abstract interface for image upload backends."""

    @abstractmethod
    async def upload_image(self, payload: str, folder: str) -> str:
        """
        Store an image and return its public URL.

        Args:
            payload: data URL (``data:image/png;base64,...``) or bare base64
                of a PNG, JPEG, GIF or WebP image. Whether an http(s) link is
                accepted is up to the provider; the local one refuses them.
            folder: logical folder, e.g. ``"profiles"`` or ``"messages"``

        Raises:
            ValidationError: payload could not be decoded
            DependencyError: the storage backend failed
        """
        pass
