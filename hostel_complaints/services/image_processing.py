"""
Complaint photo processing

Photos are stored inline on the complaint as base64 JPEG, so they are
scaled down and recompressed to roughly 100KB first.
"""
import base64
import binascii
import logging
from io import BytesIO
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from hostel_complaints.core.config import settings
from hostel_complaints.core.exceptions import InvalidImage

logger = logging.getLogger(__name__)

MAX_IMAGE_DIMENSION = 800
TARGET_SIZE_KB = 100
JPEG_QUALITY = 70
MIN_JPEG_QUALITY = 20
SCALE_STEP = 0.8


def _open(data: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImage() from e
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return image


def _encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buf = BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def compress_image(data: bytes, max_size_kb: int = TARGET_SIZE_KB) -> bytes:
    """Scale to MAX_IMAGE_DIMENSION and lower JPEG quality until under max_size_kb"""
    image = _open(data)
    image.thumbnail((MAX_IMAGE_DIMENSION, MAX_IMAGE_DIMENSION))

    quality = JPEG_QUALITY
    while True:
        encoded = _encode_jpeg(image, quality)
        if len(encoded) <= max_size_kb * 1024:
            break
        if quality - 10 >= MIN_JPEG_QUALITY:
            quality -= 10
            continue
        # Still too large at the lowest quality: shrink and start over
        width, height = image.size
        if width <= 1 or height <= 1:
            break
        image = image.resize((max(1, int(width * SCALE_STEP)), max(1, int(height * SCALE_STEP))))
        quality = JPEG_QUALITY

    logger.debug(f"Compressed image to {len(encoded)} bytes with quality {quality}")
    return encoded


def encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_image(data: str) -> Optional[bytes]:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Stored image is not valid base64")
        return None


async def read_upload(file: UploadFile) -> bytes:
    """Read an uploaded photo, rejecting non-images and oversized files"""
    if file.content_type and not file.content_type.startswith("image/"):
        raise InvalidImage(f"Unsupported file type: {file.content_type}")

    content = await file.read()
    if not content:
        raise InvalidImage("The uploaded file is empty")
    if len(content) > settings.MAX_IMAGE_SIZE:
        raise InvalidImage(f"Photo is larger than {settings.MAX_IMAGE_SIZE // (1024 * 1024)}MB")
    return content
