"""
Image uploads stored on the local filesystem.

Files live at {media_root}/{restaurant_id}/{folder}/{uuid}{ext} and are
served by the API under {media_url_path}/... (mounted in rest_api.main).
"""

import io
import uuid
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from shared.config.constants import IMAGE_CONTENT_TYPES, Limits
from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import ValidationError
from shared.utils.validators import is_uploaded_media_path

logger = get_logger(__name__)

MAX_UPLOAD_MB = Limits.MAX_UPLOAD_BYTES // (1024 * 1024)


def check_image(data: bytes, content_type: str | None) -> str:
    """
    Validate an uploaded image and return the extension to store it with.

    Raises:
        ValidationError: Unsupported type, empty or larger than 5 MB, or
            content that is not a readable image.
    """
    extension = IMAGE_CONTENT_TYPES.get((content_type or "").lower())
    if extension is None:
        raise ValidationError(
            "Invalid file type. Allowed: PNG, JPG or WEBP",
            content_type=content_type,
        )
    if not data:
        raise ValidationError("The uploaded file is empty")
    if len(data) > Limits.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File too large. Max size: {MAX_UPLOAD_MB}MB", size=len(data))

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValidationError("The uploaded file is not a valid image", error=str(e))
    return extension


def media_root() -> Path:
    return Path(settings.media_root)


def store_image(data: bytes, restaurant_id: int, folder: str, extension: str) -> str:
    """Write the file under a fresh name and return its public path."""
    directory = media_root() / str(restaurant_id) / folder
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{extension}"
    (directory / filename).write_bytes(data)

    logger.info("Image stored", restaurant_id=restaurant_id, folder=folder, size=len(data))
    return f"{settings.media_url_path.rstrip('/')}/{restaurant_id}/{folder}/{filename}"


def delete_stored_image(url: str | None) -> bool:
    """
    Remove a previously uploaded file. External URLs are left alone.

    Returns:
        True when a file was deleted.
    """
    if not url or not is_uploaded_media_path(url):
        return False
    relative = url[len(settings.media_url_path.rstrip("/")) + 1:]
    path = media_root() / relative
    if not path.is_file():
        return False
    path.unlink()
    return True
