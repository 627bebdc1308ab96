"""
Placeholder thumbnail endpoints.
"""

import asyncio

from fastapi import APIRouter, Depends, Query, Response

from ..core.placeholder import PlaceholderSpec, generate
from ..core.upload_store import ImageFormat

router = APIRouter(tags=["thumbnails"])

_THUMBNAIL_RESPONSES = {200: {"content": {"image/png": {}, "image/jpeg": {}}}}


# Parameters are taken as strings so malformed numbers fall back to defaults
# instead of failing request validation.
def placeholder_spec(
    width: str | None = Query(None, description="Thumbnail width in pixels (default 300)"),
    height: str | None = Query(None, description="Thumbnail height in pixels (default 200)"),
    border: str | None = Query(None, description="Border width in pixels (default 5)"),
    bgcolor: str | None = Query(None, description="Background color (default #fcfcfc)"),
    fgcolor: str | None = Query(None, description="Foreground color (default #ddd)"),
    textcolor: str | None = Query(None, description="Label color (default #aaa)"),
    textsize: str | None = Query(None, description="Label font size (default 24)"),
) -> PlaceholderSpec:
    return PlaceholderSpec.from_query({
        "width": width,
        "height": height,
        "border": border,
        "bgcolor": bgcolor,
        "fgcolor": fgcolor,
        "textcolor": textcolor,
        "textsize": textsize,
    })


async def _render(spec: PlaceholderSpec, image_format: ImageFormat) -> Response:
    content = await asyncio.to_thread(generate, spec, image_format)
    return Response(content=content, media_type=image_format.media_type)


@router.get("/thumbnail.png", responses=_THUMBNAIL_RESPONSES)
async def thumbnail_png(spec: PlaceholderSpec = Depends(placeholder_spec)) -> Response:
    """PNG placeholder with a border, diagonal cross and size label."""
    return await _render(spec, ImageFormat.PNG)


@router.get("/thumbnail.jpg", responses=_THUMBNAIL_RESPONSES)
async def thumbnail_jpg(spec: PlaceholderSpec = Depends(placeholder_spec)) -> Response:
    """JPEG placeholder with a border, diagonal cross and size label."""
    return await _render(spec, ImageFormat.JPEG)
