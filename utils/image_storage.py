"""
Recipe image storage on Cloudinary
"""
import logging
import os
import re
import time
from typing import Dict, Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from core.config import settings
from core.errors import ImageStorageError

logger = logging.getLogger(__name__)


def configure_cloudinary() -> bool:
    """Configure Cloudinary from settings; False (upload disabled) when credentials are missing"""
    if not all([settings.CLOUDINARY_CLOUD_NAME, settings.CLOUDINARY_API_KEY, settings.CLOUDINARY_API_SECRET]):
        logger.warning("Cloudinary credentials not set. Image upload will be disabled.")
        return False

    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    logger.info("Cloudinary configured successfully")
    return True


def image_name(original_filename: Optional[str]) -> str:
    """
    "My Soup.png" -> "1718000000000-My-Soup" (millisecond timestamp, whitespace to '-', no extension)
    """
    stem = os.path.splitext(original_filename or "image")[0]
    stem = re.sub(r"\s+", "-", stem.strip()) or "image"
    return f"{int(time.time() * 1000)}-{stem}"


class ImageStorage:

    def __init__(self, enabled: bool, folder: str = None):
        self.enabled = enabled
        self.folder = folder or settings.IMAGE_FOLDER

    def _upload(self, source, public_id: str) -> Dict[str, str]:
        result = cloudinary.uploader.upload(
            source,
            public_id=public_id,
            folder=self.folder,
            resource_type="image",
            transformation=[{"quality": "auto:good"}, {"fetch_format": "auto"}],
        )
        return {"path": result["public_id"], "url": result["secure_url"]}

    async def upload_file(self, data: bytes, filename: Optional[str]) -> Dict[str, str]:
        if not self.enabled:
            raise ImageStorageError("Image upload failed: image storage is not configured", status_code=503)
        if len(data) > settings.MAX_IMAGE_BYTES:
            raise ImageStorageError("Image upload failed: image too large", status_code=413)

        try:
            stored = await run_in_threadpool(self._upload, data, image_name(filename))
        except CloudinaryError as e:
            logger.error(f"Failed to upload image to cloud storage: {e}")
            raise ImageStorageError(f"Image upload failed: {e}")
        logger.info(f"Successfully uploaded image: {stored['url']}")
        return stored

    async def upload_from_url(self, image_url: str) -> Dict[str, str]:
        """Cloudinary fetches the remote image itself."""
        if not self.enabled:
            raise ImageStorageError("Image URL upload failed: image storage is not configured", status_code=503)

        try:
            stored = await run_in_threadpool(self._upload, image_url, image_name("url-image"))
        except CloudinaryError as e:
            logger.error(f"Failed to upload image from {image_url}: {e}")
            raise ImageStorageError(f"Invalid image URL: {e}")
        logger.info(f"Successfully uploaded image from URL: {stored['url']}")
        return stored

    async def delete(self, public_id: str) -> bool:
        """Best effort: failures are logged, never raised."""
        if not self.enabled or not public_id:
            return False
        try:
            result = await run_in_threadpool(cloudinary.uploader.destroy, public_id)
        except Exception as e:
            logger.error(f"Failed to delete Cloudinary image {public_id}: {e}")
            return False
        logger.info(f"Cloudinary image deleted: {public_id}, result: {result}")
        return result.get("result") == "ok"


def get_image_storage(request: Request) -> ImageStorage:
    """FastAPI dependency: the image storage configured at startup."""
    return request.app.state.images
