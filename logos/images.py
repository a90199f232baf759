"""
Image upload handling for the logo forms.

``upload_image`` is a route dependency: it reads the optional multipart
``image`` field, pushes the bytes to the configured bucket and yields the
public URL, or ``None`` when no file was sent.

Bodies whose declared length is already too large are turned away by
``register_upload_limit`` before Starlette spools them.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import Depends, FastAPI, File, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from logos.config import Settings
from logos.dependencies import get_app_settings, get_image_storage
from logos.error_handlers import error_response
from logos.errors import UploadError
from logos.storage import ImageStorage, object_name

logger = logging.getLogger(__name__)

# Room for the other form fields and multipart framing around the image.
FORM_OVERHEAD_BYTES = 64 * 1024


async def upload_image(
    image: Optional[UploadFile] = File(None),
    storage: ImageStorage = Depends(get_image_storage),
    settings: Settings = Depends(get_app_settings),
) -> Optional[str]:
    # Browsers send an empty part when the file input is left blank.
    if image is None or not image.filename:
        return None

    data = await image.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise UploadError(
            "Image is too large",
            http_status=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    if not data:
        return None

    path = object_name(image.filename, int(time.time() * 1000))
    content_type = image.content_type or "application/octet-stream"
    url = await run_in_threadpool(storage.upload_bytes, path, data, content_type)
    logger.info("Stored upload %s (%d bytes)", path, len(data))
    return url


def register_upload_limit(app: FastAPI, settings: Settings) -> None:
    """Refuse oversized bodies by ``Content-Length`` before the form is parsed."""
    limit = settings.max_upload_bytes + FORM_OVERHEAD_BYTES

    @app.middleware("http")
    async def upload_limit(request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdecimal() and int(declared) > limit:
            logger.warning(
                "Rejected %s %s: %s byte body", request.method, request.url.path, declared
            )
            return error_response(
                request,
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                UploadError("Image is too large").to_response(),
            )
        return await call_next(request)
