# FILE: campuschat/services/upload_service.py
import logging
import secrets
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from campuschat.core.config import ALLOWED_IMAGE_EXTENSIONS, MAX_UPLOAD_BYTES, UPLOAD_DIR
from campuschat.core.errors import ValidationError

logger = logging.getLogger("campuschat.uploads")


def ensure_upload_dir(path: Optional[Path] = None) -> Path:
    path = path or UPLOAD_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


async def save_image(file: Optional[UploadFile], upload_dir: Optional[Path] = None) -> str:
    """Store an uploaded meme and return its file name."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Only image files are allowed!")

    data = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(f"File too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB)")
    if not data:
        raise ValidationError("Uploaded file is empty")

    name = f"{secrets.token_hex(16)}{ext}"
    target = ensure_upload_dir(upload_dir) / name
    target.write_bytes(data)
    logger.info("Stored upload %s (%s bytes)", name, len(data))
    return name
