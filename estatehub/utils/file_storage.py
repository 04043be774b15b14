"""
utils/file_storage.py

Saves uploaded listing images to local disk under UPLOAD_DIR/properties and
hands back the public path recorded on the Property, e.g.
'/uploads/properties/3f2a...9c.jpg'.
"""

import logging
import uuid
import aiofiles
from fastapi import UploadFile
from pathlib import Path
from estatehub.core.config import settings
from estatehub.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/properties/"

# Stored files only ever get one of these extensions
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

_CONTENT_TYPE_TO_EXT = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def property_images_dir() -> Path:
    return Path(settings.UPLOAD_DIR) / "properties"


def _ensure_dirs():
    property_images_dir().mkdir(parents=True, exist_ok=True)


def _resolve_extension(file: UploadFile) -> str:
    """
    Return the extension to store the upload under, always one of
    ALLOWED_EXTENSIONS.

    A known image MIME type decides the extension on its own. Other image/*
    types, and the 'application/octet-stream' some mobile clients send, fall
    back to the filename's extension when it is an allowed one.
    """
    content_type = (file.content_type or "").lower().split(";", 1)[0].strip()
    filename = file.filename or ""
    ext = Path(filename).suffix.lower()

    if content_type in _CONTENT_TYPE_TO_EXT:
        return _CONTENT_TYPE_TO_EXT[content_type]

    is_image = content_type.startswith("image/")
    if (is_image or content_type in ("", "application/octet-stream")) and ext in ALLOWED_EXTENSIONS:
        return ".jpg" if ext == ".jpeg" else ext

    if is_image:
        raise ValidationError(f"Unsupported image type '{content_type}'")
    raise ValidationError("Only image files are allowed")


def real_uploads(files) -> list:
    """Drop the empty parts browsers send for an untouched file input."""
    return [f for f in (files or []) if f is not None and f.filename]


def check_upload_count(files: list):
    if len(files) > settings.MAX_PROPERTY_IMAGES:
        raise ValidationError(f"A maximum of {settings.MAX_PROPERTY_IMAGES} images is allowed")


async def _read_checked(file: UploadFile) -> tuple:
    ext = _resolve_extension(file)
    max_bytes = settings.MAX_IMAGE_SIZE_MB * 1024 * 1024
    contents = await file.read()
    if len(contents) > max_bytes:
        raise ValidationError(f"Image '{file.filename}' exceeds {settings.MAX_IMAGE_SIZE_MB}MB limit")
    return ext, contents


async def _write(ext: str, contents: bytes) -> str:
    _ensure_dirs()
    filename = f"{uuid.uuid4().hex}{ext}"
    async with aiofiles.open(property_images_dir() / filename, "wb") as out:
        await out.write(contents)
    return f"{PUBLIC_PREFIX}{filename}"


async def save_property_images(files: list) -> list:
    """
    Save multiple images and return their paths in upload order.
    Every file is validated before any is written.
    """
    check_upload_count(files)
    checked = [await _read_checked(f) for f in files]
    return [await _write(ext, contents) for ext, contents in checked]


def delete_property_image(image_path: str):
    """Remove a stored image. Missing files are ignored."""
    if not image_path.startswith(PUBLIC_PREFIX):
        return
    file_path = property_images_dir() / image_path[len(PUBLIC_PREFIX):]
    try:
        file_path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove image %s", file_path, exc_info=True)
