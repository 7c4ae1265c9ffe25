"""
IQScaler - Image Storage
Local-disk storage for question and option images
"""
import logging
import uuid
from pathlib import Path

from iqscaler.core.config import settings
from iqscaler.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ImageStorage:
    """Saves uploaded images under a directory that is served statically."""

    def __init__(
        self,
        upload_dir: str | Path,
        url_prefix: str,
        allowed_extensions: set[str],
        max_bytes: int,
    ):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.allowed_extensions = allowed_extensions
        self.max_bytes = max_bytes

    def validate(self, filename: str, content: bytes) -> str:
        """Return the lowercase extension of an acceptable image."""
        ext = Path(filename).suffix.lower().lstrip(".")
        if ext not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise ValidationError(f"Images only! Allowed types: {allowed}")
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > self.max_bytes:
            raise ValidationError(
                f"File too large. Maximum size: {self.max_bytes // (1024 * 1024)}MB"
            )
        return ext

    def save(self, filename: str, content: bytes) -> str:
        """
        Store an image under a unique name.

        Returns:
            Public URL of the stored image
        """
        ext = self.validate(filename, content)
        unique_filename = f"image-{uuid.uuid4().hex}.{ext}"

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        (self.upload_dir / unique_filename).write_bytes(content)

        logger.info(f"Image uploaded: {unique_filename} ({len(content)} bytes)")
        return f"{self.url_prefix}/{unique_filename}"


def get_image_storage() -> ImageStorage:
    return ImageStorage(
        upload_dir=settings.UPLOAD_DIR,
        url_prefix=settings.UPLOAD_URL_PREFIX,
        allowed_extensions=settings.ALLOWED_IMAGE_EXTENSIONS,
        max_bytes=settings.MAX_UPLOAD_BYTES,
    )
