"""
Local disk storage for listing images.

Files are written to ``settings.UPLOAD_DIR`` and served by the static mount at
``/uploads``.
"""
import os
import time
import uuid
from typing import BinaryIO, Optional
from app.core.config import settings
from app.core.exceptions import BusinessRuleError
from app.models.property import PropertyImage
import logging

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".webp"}
UPLOAD_URL_PREFIX = "/uploads"


class ImageStorage:
    def __init__(self, upload_dir: Optional[str] = None, max_size_bytes: Optional[int] = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.max_size_bytes = max_size_bytes or settings.MAX_UPLOAD_SIZE_BYTES

    def validate(self, filename: str, content_type: Optional[str]) -> str:
        """Return the normalized extension or reject the file"""
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in ALLOWED_EXTENSIONS or (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise BusinessRuleError("Only image files are allowed (jpeg, png, webp)")
        return extension

    def save(self, stream: BinaryIO, filename: str, content_type: Optional[str]) -> PropertyImage:
        extension = self.validate(filename, content_type)

        # Read one byte past the limit to detect oversized files
        data = stream.read(self.max_size_bytes + 1)
        if len(data) > self.max_size_bytes:
            limit_mb = self.max_size_bytes // (1024 * 1024)
            raise BusinessRuleError(f"Image {filename} exceeds the {limit_mb}MB size limit")

        os.makedirs(self.upload_dir, exist_ok=True)
        stored_name = f"property-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{extension}"
        path = os.path.join(self.upload_dir, stored_name)

        with open(path, "wb") as f:
            f.write(data)

        logger.info(f"Stored upload {filename} as {stored_name} ({len(data)} bytes)")
        return PropertyImage(url=f"{UPLOAD_URL_PREFIX}/{stored_name}", caption="")

    def delete(self, url: str) -> None:
        """Remove a stored file; URLs outside the upload prefix are ignored"""
        if not url.startswith(f"{UPLOAD_URL_PREFIX}/"):
            return
        path = os.path.join(self.upload_dir, os.path.basename(url))
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.warning(f"Upload {path} already removed")
