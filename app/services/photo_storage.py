# app/services/photo_storage.py
"""Progress-photo files on local disk."""

import io
import logging
import os
import re
import time
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from app.core.config import settings

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}


class PhotoValidationError(ValueError):
    pass


USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_user_id(user_id: Optional[str]) -> None:
    """Owner tags become directory names, so only plain identifiers are allowed."""
    if user_id is not None and not USER_ID_PATTERN.match(user_id):
        raise PhotoValidationError(
            "Invalid userId. Use letters, digits, '-' or '_' (at most 64 characters)"
        )


def _user_dir(user_id: Optional[str]) -> str:
    validate_user_id(user_id)
    return f"user_{user_id}" if user_id else "general"


def generate_photo_filename(original_name: str, user_id: Optional[str] = None) -> str:
    """photo_<epoch ms>[_<user id>]<original extension>"""
    timestamp = int(time.time() * 1000)
    extension = os.path.splitext(original_name or "")[1].lower()
    user_part = f"_{user_id}" if user_id else ""
    return f"photo_{timestamp}{user_part}{extension}"


def get_photo_path(filename: str, user_id: Optional[str] = None) -> str:
    # Only bare filenames are accepted
    if os.path.basename(filename) != filename or filename in ("", ".", ".."):
        raise PhotoValidationError(f"Invalid photo filename: {filename!r}")
    return os.path.join(settings.PHOTO_STORAGE_PATH, _user_dir(user_id), filename)


def ensure_photo_directory(user_id: Optional[str] = None) -> str:
    dir_path = os.path.join(settings.PHOTO_STORAGE_PATH, _user_dir(user_id))
    os.makedirs(dir_path, exist_ok=True)
    return dir_path


def validate_photo(size: int, content_type: Optional[str]) -> None:
    """Raise PhotoValidationError when the upload is too large or not an allowed type."""
    if size > settings.max_photo_size_bytes:
        raise PhotoValidationError(
            f"File size too large. Maximum size is {settings.MAX_PHOTO_SIZE_MB}MB"
        )
    if content_type not in settings.ALLOWED_PHOTO_TYPES:
        raise PhotoValidationError(
            f"Invalid file type. Allowed types: {', '.join(settings.ALLOWED_PHOTO_TYPES)}"
        )


def save_photo_file(content: bytes, filename: str, user_id: Optional[str] = None) -> str:
    ensure_photo_directory(user_id)
    file_path = get_photo_path(filename, user_id)
    with open(file_path, "wb") as f:
        f.write(content)
    logger.info(f"Saved photo {filename} ({len(content)} bytes)")
    return file_path


def delete_photo_file(filename: str, user_id: Optional[str] = None) -> bool:
    """Remove a photo from disk. Failures are logged, not raised."""
    try:
        os.remove(get_photo_path(filename, user_id))
        return True
    except (OSError, PhotoValidationError) as e:
        logger.warning(f"Failed to delete photo file {filename}: {e}")
        return False


def get_image_dimensions(content: bytes) -> Optional[Tuple[int, int]]:
    try:
        with Image.open(io.BytesIO(content)) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not get image dimensions: {e}")
        return None


def content_type_for(filename: str) -> str:
    extension = os.path.splitext(filename)[1].lower()
    return CONTENT_TYPES.get(extension, "image/jpeg")

