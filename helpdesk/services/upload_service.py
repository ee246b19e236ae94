# helpdesk/services/upload_service.py
import logging
import os
import secrets
from typing import Optional

import aiofiles
from fastapi import UploadFile

from ..core.config import settings

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"

# Stored extension -> accepted content types. Anything else is rejected,
# so /uploads never serves a file the browser would render as a page.
IMAGE_TYPES = {
    "png": {"image/png"},
    "jpg": {"image/jpeg"},
    "jpeg": {"image/jpeg"},
    "gif": {"image/gif"},
    "webp": {"image/webp"},
}


class InvalidUploadError(ValueError):
    pass


class UploadService:
    """Stores single images under UPLOAD_DIR and hands back their public URL."""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = upload_dir or settings.upload_dir

    @staticmethod
    def validate_image(file: Optional[UploadFile]) -> str:
        """Returns the extension to store the image with."""
        if file is None or not file.filename:
            raise InvalidUploadError("No se recibió ningún archivo")

        content_type = (file.content_type or "").lower()
        extension = os.path.splitext(file.filename)[1].lstrip(".").lower()
        if not extension:
            extension = next(
                (ext for ext, types in IMAGE_TYPES.items() if content_type in types), ""
            )

        if content_type not in IMAGE_TYPES.get(extension, ()):
            raise InvalidUploadError("Solo se permiten imágenes PNG, JPG, GIF o WEBP")
        return extension

    async def _write(self, file: UploadFile, relative_path: str) -> str:
        file_path = os.path.join(self.upload_dir, relative_path)
        os.makedirs(os.path.dirname(file_path), exist_ok=True)

        async with aiofiles.open(file_path, "wb") as out_file:
            content = await file.read()
            await out_file.write(content)

        logger.info("Stored upload %s (%d bytes)", relative_path, len(content))
        return f"{UPLOAD_URL_PREFIX}/{relative_path.replace(os.sep, '/')}"

    async def save_image(self, file: UploadFile) -> str:
        extension = self.validate_image(file)
        return await self._write(file, f"{secrets.token_hex(16)}.{extension}")

    async def save_avatar(self, file: UploadFile, user_id) -> str:
        extension = self.validate_image(file)
        return await self._write(file, os.path.join("avatars", f"avatar-{user_id}.{extension}"))
