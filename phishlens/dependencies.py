import logging
import random
from dataclasses import dataclass
from typing import Optional

from fastapi import File, HTTPException, Request, UploadFile

from phishlens.config import Settings
from phishlens.storage import MemStorage

logger = logging.getLogger(__name__)


def get_storage(request: Request) -> MemStorage:
    return request.app.state.storage


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rng(request: Request) -> random.Random:
    return request.app.state.rng


@dataclass
class ImageUpload:
    filename: str
    content_type: str
    content: bytes


async def image_upload(
    request: Request, image: Optional[UploadFile] = File(None)
) -> ImageUpload:
    """
    Read and check the ``image`` multipart field before any handler runs.

    Rejects a missing file, a non-image MIME type, or a body larger than
    ``max_upload_bytes``.
    """
    if image is None:
        raise HTTPException(status_code=400, detail="Image file is required")

    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        logger.warning(f"Rejected upload {image.filename!r} with type {content_type!r}")
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    max_bytes = get_settings(request).max_upload_bytes
    # read one byte past the limit so oversize bodies are never held in full
    content = await image.read(max_bytes + 1)
    if len(content) > max_bytes:
        logger.warning(f"Rejected upload {image.filename!r}: larger than {max_bytes} bytes")
        raise HTTPException(status_code=413, detail="File too large")

    return ImageUpload(
        filename=image.filename or "",
        content_type=content_type,
        content=content,
    )
