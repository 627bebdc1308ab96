"""
Upload, existence check and transform-on-read endpoints.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from ..core.config import settings
from ..core.errors import (
    ImageNotFoundError,
    InvalidKeyError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
)
from ..core.transforms import TransformRequest, render
from ..core.upload_store import UploadStore, get_upload_store, image_format_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


async def _read_body(request: Request, limit: int) -> bytes:
    """Read the raw request body, refusing anything larger than ``limit``."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeError()
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise PayloadTooLargeError()
        chunks.append(chunk)
    return b"".join(chunks)


def _format_for_read(image: str):
    try:
        return image_format_for(image)
    except InvalidKeyError:
        raise ImageNotFoundError() from None


@router.post("/{image}")
async def upload_image(
    request: Request,
    image: str = Path(..., description="Target file name, *.png or *.jpg"),
    store: UploadStore = Depends(get_upload_store),
) -> Dict[str, Any]:
    """Store the raw request body under ``image``, replacing any previous upload."""
    try:
        image_format_for(image)
    except InvalidKeyError:
        logger.warning("Rejected upload with unsupported key %r", image)
        raise

    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("image/"):
        raise UnsupportedMediaTypeError()

    data = await _read_body(request, settings.MAX_UPLOAD_BYTES)
    size = await asyncio.to_thread(store.write, image, data)
    logger.info("Stored %s (%d bytes)", image, size)
    return {"status": "ok", "size": size}


@router.head("/{image}")
async def check_image(
    image: str = Path(...),
    store: UploadStore = Depends(get_upload_store),
) -> Response:
    """200 when the image exists and is readable, 404 otherwise."""
    try:
        exists = await asyncio.to_thread(store.exists, image)
    except InvalidKeyError:
        exists = False
    return Response(status_code=200 if exists else 404)


def transform_request(
    width: str | None = Query(None, description="Target width in pixels"),
    height: str | None = Query(None, description="Target height in pixels"),
    blur: str | None = Query(None, description="Gaussian blur radius"),
    sharpen: str | None = Query(None, description="Sharpen radius"),
    greyscale: str | None = Query(None, description="'true' to desaturate"),
    flip: str | None = Query(None, description="'true' to mirror top/bottom"),
    flop: str | None = Query(None, description="'true' to mirror left/right"),
) -> TransformRequest:
    return TransformRequest.from_query({
        "width": width,
        "height": height,
        "blur": blur,
        "sharpen": sharpen,
        "greyscale": greyscale,
        "flip": flip,
        "flop": flop,
    })


@router.get(
    "/{image}",
    responses={200: {"content": {"image/png": {}, "image/jpeg": {}}}},
)
async def get_image(
    image: str = Path(..., description="File name used at upload time"),
    transform: TransformRequest = Depends(transform_request),
    store: UploadStore = Depends(get_upload_store),
):
    """Serve an uploaded image, applying any requested transformations.

    Steps run in a fixed order: resize, blur, sharpen, greyscale, flip, flop.
    Boolean parameters are enabled only by the literal value ``true``.
    """
    image_format = _format_for_read(image)

    data = await asyncio.to_thread(store.read, image)
    if transform.is_identity:
        return Response(content=data, media_type=image_format.media_type)

    output = await asyncio.to_thread(render, data, image_format, transform)
    return Response(content=output, media_type=image_format.media_type)
