"""
Unit tests for Storage Provider.
"""

import base64
import shutil
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from parley.core.config import Settings
from parley.core.exceptions import DependencyError, ValidationError
from parley.infrastructure.hosted.cloudinary_provider import CloudinaryStorageProvider
from parley.infrastructure.local.storage_provider import LocalStorageProvider
from parley.utils.image_payload import decode_image_payload, to_data_url

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")
SVG_B64 = base64.b64encode(b"<svg xmlns=\"http://www.w3.org/2000/svg\"><script>alert(1)</script></svg>").decode("ascii")


@pytest.fixture
def temp_storage():
    """Create temporary storage directory."""
    temp_dir = tempfile.mkdtemp()
    provider = LocalStorageProvider(base_path=temp_dir, base_url="http://test")
    yield provider
    # Cleanup
    shutil.rmtree(temp_dir, ignore_errors=True)


class TestDecodeImagePayload:
    def test_data_url(self):
        image = decode_image_payload(f"data:image/png;base64,{PNG_B64}")

        assert image.data == PNG_BYTES
        assert image.extension == ".png"
        assert image.content_type == "image/png"

    def test_bare_base64_sniffs_type(self):
        assert decode_image_payload(PNG_B64).extension == ".png"

    def test_magic_bytes_beat_declared_type(self):
        image = decode_image_payload(f"data:image/jpeg;base64,{PNG_B64}")

        assert image.content_type == "image/png"

    def test_webp_is_recognised(self):
        webp = b"RIFF\x00\x00\x00\x00WEBPVP8 "

        assert decode_image_payload(base64.b64encode(webp).decode("ascii")).extension == ".webp"

    def test_svg_is_refused_even_when_declared(self):
        with pytest.raises(ValidationError, match="Unsupported image type"):
            decode_image_payload(f"data:image/svg+xml;base64,{SVG_B64}")

    def test_unrecognised_bytes_are_refused(self):
        payload = base64.b64encode(b"just some text, not a picture").decode("ascii")

        with pytest.raises(ValidationError, match="Unsupported image type"):
            decode_image_payload(f"data:image/png;base64,{payload}")

    @pytest.mark.parametrize(
        "payload",
        ["", "   ", "data:image/png,notbase64", "data:image/png;base64,%%%", "***not base64***"],
    )
    def test_invalid_payloads(self, payload):
        with pytest.raises(ValidationError):
            decode_image_payload(payload)

    def test_to_data_url_wraps_bare_base64(self):
        assert to_data_url(PNG_B64) == f"data:image/png;base64,{PNG_B64}"

    def test_to_data_url_passes_links_through(self):
        assert to_data_url("https://example.com/a.png") == "https://example.com/a.png"

    def test_to_data_url_checks_data_urls(self):
        assert to_data_url(f"data:image/jpeg;base64,{PNG_B64}") == f"data:image/png;base64,{PNG_B64}"
        with pytest.raises(ValidationError):
            to_data_url(f"data:image/svg+xml;base64,{SVG_B64}")


@pytest.mark.asyncio
async def test_upload_image_writes_file(temp_storage):
    """Test uploading an image."""
    url = await temp_storage.upload_image(f"data:image/png;base64,{PNG_B64}", "profiles")

    assert url.startswith("http://test/storage/profiles/")
    assert url.endswith(".png")
    relative = url[len("http://test/storage/"):]
    assert (Path(temp_storage.base_path) / relative).read_bytes() == PNG_BYTES
    assert await temp_storage.exists(relative)


@pytest.mark.asyncio
async def test_upload_rejects_garbage(temp_storage):
    with pytest.raises(ValidationError):
        await temp_storage.upload_image("definitely not an image!", "profiles")


@pytest.mark.asyncio
async def test_delete_file(temp_storage):
    """Test deleting a file by its public URL."""
    url = await temp_storage.upload_image(PNG_B64, "messages")

    deleted = await temp_storage.delete(url)

    assert deleted is True
    assert not await temp_storage.exists(url)


@pytest.mark.asyncio
async def test_delete_nonexistent_file(temp_storage):
    """Test deleting a file that doesn't exist."""
    deleted = await temp_storage.delete("nonexistent/file.png")
    assert deleted is False


@pytest.mark.asyncio
async def test_paths_cannot_escape_root(temp_storage):
    with pytest.raises(ValidationError):
        await temp_storage.exists("../../etc/passwd")


@pytest.mark.asyncio
async def test_remote_link_is_refused_without_fetching(temp_storage):
    with pytest.raises(ValidationError):
        await temp_storage.upload_image("http://127.0.0.1:8080/latest/meta-data", "messages")

    assert not any(temp_storage.base_path.rglob("*.*"))


@pytest.mark.asyncio
async def test_svg_upload_is_refused(temp_storage):
    with pytest.raises(ValidationError):
        await temp_storage.upload_image(f"data:image/svg+xml;base64,{SVG_B64}", "profiles")

    assert not any(temp_storage.base_path.rglob("*.svg"))


@pytest.fixture
def cloudinary_settings():
    return Settings(
        STORAGE_PROVIDER="cloudinary",
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
        CLOUDINARY_FOLDER="parley",
    )


@pytest.mark.asyncio
async def test_cloudinary_upload_returns_secure_url(cloudinary_settings):
    provider = CloudinaryStorageProvider(cloudinary_settings)
    upload = MagicMock(return_value={"secure_url": "https://res.cloudinary.com/demo/a.png"})

    with patch("parley.infrastructure.hosted.cloudinary_provider.cloudinary.uploader.upload", upload):
        url = await provider.upload_image(PNG_B64, "profiles")

    assert url == "https://res.cloudinary.com/demo/a.png"
    source = upload.call_args.args[0]
    assert source == f"data:image/png;base64,{PNG_B64}"
    assert upload.call_args.kwargs["folder"] == "parley/profiles"


@pytest.mark.asyncio
async def test_cloudinary_failure_is_a_dependency_error(cloudinary_settings):
    provider = CloudinaryStorageProvider(cloudinary_settings)
    upload = MagicMock(side_effect=RuntimeError("quota exceeded"))

    with patch("parley.infrastructure.hosted.cloudinary_provider.cloudinary.uploader.upload", upload):
        with pytest.raises(DependencyError):
            await provider.upload_image(PNG_B64, "messages")


def test_cloudinary_requires_cloud_name():
    with pytest.raises(ValueError):
        CloudinaryStorageProvider(Settings(STORAGE_PROVIDER="cloudinary", CLOUDINARY_CLOUD_NAME=""))
