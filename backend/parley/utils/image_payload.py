"""
Parsing of client-supplied image payloads.

Clients send images as data URLs (what a browser FileReader produces) or as bare
base64. Only PNG, JPEG, GIF and WebP are accepted, recognised by content.
"""

import base64
import binascii
import re
from dataclasses import dataclass

from parley.core.exceptions import ValidationError

_DATA_URL_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w.+-]+=[\w.+-]+)*)(?P<b64>;base64)?,(?P<data>.*)$",
    re.DOTALL,
)

_MAGIC_EXTENSIONS: list[tuple[bytes, str, str]] = [
    (b"\x89PNG\r\n\x1a\n", ".png", "image/png"),
    (b"\xff\xd8\xff", ".jpg", "image/jpeg"),
    (b"GIF87a", ".gif", "image/gif"),
    (b"GIF89a", ".gif", "image/gif"),
]


@dataclass
class DecodedImage:
    data: bytes
    content_type: str
    extension: str


def is_remote_url(payload: str) -> bool:
    return payload.startswith(("http://", "https://"))


def decode_image_payload(payload: str) -> DecodedImage:
    """
    Decode a data URL or bare base64 string.

    Raises:
        ValidationError: empty, undecodable or not a supported raster image
    """
    payload = (payload or "").strip()
    if not payload:
        raise ValidationError("Image payload is empty")

    encoded = payload
    match = _DATA_URL_RE.match(payload)
    if payload.startswith("data:"):
        if not match or not match.group("b64"):
            raise ValidationError("Image data URL must be base64 encoded")
        encoded = match.group("data")

    try:
        data = base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image payload is not valid base64") from exc
    if not data:
        raise ValidationError("Image payload is empty")

    extension, content_type = sniff_image_type(data)
    return DecodedImage(data=data, content_type=content_type, extension=extension)


def sniff_image_type(data: bytes) -> tuple[str, str]:
    """
    Return (extension, content type) for a raster image recognised by its magic bytes.

    The declared type of a data URL is ignored. Anything else, SVG included,
    is refused.
    """
    for magic, extension, content_type in _MAGIC_EXTENSIONS:
        if data.startswith(magic):
            return extension, content_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp", "image/webp"
    raise ValidationError("Unsupported image type")


def to_data_url(payload: str) -> str:
    """Re-encode a checked payload as a data URL; http(s) links pass through."""
    payload = payload.strip()
    if is_remote_url(payload):
        return payload
    image = decode_image_payload(payload)
    return f"data:{image.content_type};base64,{base64.b64encode(image.data).decode('ascii')}"
