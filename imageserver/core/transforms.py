"""
Transform-on-read pipeline for stored images.

Steps always run in this order, each skipped when not requested:
resize, blur, sharpen, greyscale, flip (top/bottom), flop (left/right).
"""

from io import BytesIO
from typing import Mapping, Optional

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError
from pydantic import BaseModel

from .config import settings
from .errors import OutputTooLargeError, UnreadableImageError
from .params import parse_flag, parse_positive_float, parse_positive_int
from .upload_store import ImageFormat

SHARPEN_PERCENT = 150
SHARPEN_THRESHOLD = 3


class TransformRequest(BaseModel):
    width: Optional[int] = None
    height: Optional[int] = None
    blur: Optional[float] = None
    sharpen: Optional[float] = None
    greyscale: bool = False
    flip: bool = False
    flop: bool = False

    @classmethod
    def from_query(cls, query: Mapping[str, Optional[str]]) -> "TransformRequest":
        return cls(
            width=parse_positive_int(query.get("width")),
            height=parse_positive_int(query.get("height")),
            blur=parse_positive_float(query.get("blur")),
            sharpen=parse_positive_float(query.get("sharpen")),
            greyscale=parse_flag(query.get("greyscale")),
            flip=parse_flag(query.get("flip")),
            flop=parse_flag(query.get("flop")),
        )

    @property
    def is_identity(self) -> bool:
        return not (
            self.width
            or self.height
            or self.blur
            or self.sharpen
            or self.greyscale
            or self.flip
            or self.flop
        )


def _target_size(size: tuple[int, int], width: Optional[int], height: Optional[int]) -> tuple[int, int]:
    src_w, src_h = size
    if width and height:
        return width, height
    if width:
        return width, max(1, round(src_h * width / src_w))
    return max(1, round(src_w * height / src_h)), height


def _decode(data: bytes, image_format: ImageFormat) -> Image.Image:
    try:
        img = Image.open(BytesIO(data), formats=[image_format.pillow_name])
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise UnreadableImageError(f"Stored image cannot be decoded: {e}") from e
    # Filters reject palette and 16-bit modes.
    if img.mode not in ("RGB", "RGBA", "L", "LA"):
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")
    return img


def _greyscale(img: Image.Image) -> Image.Image:
    if img.mode in ("RGBA", "LA"):
        return img.convert("LA")
    return img.convert("L")


def _encode(img: Image.Image, image_format: ImageFormat) -> bytes:
    buffer = BytesIO()
    if image_format is ImageFormat.JPEG:
        if img.mode not in ("RGB", "L"):
            img = img.convert("L" if img.mode == "LA" else "RGB")
        img.save(buffer, format="JPEG", quality=settings.JPEG_QUALITY)
    else:
        img.save(buffer, format="PNG")
    return buffer.getvalue()


def render(data: bytes, image_format: ImageFormat, request: TransformRequest) -> bytes:
    """Apply ``request`` to encoded image bytes and re-encode in the same format."""
    img = _decode(data, image_format)

    if request.width or request.height:
        width, height = _target_size(img.size, request.width, request.height)
        if width * height > settings.MAX_OUTPUT_PIXELS:
            raise OutputTooLargeError()
        img = img.resize((width, height), Image.LANCZOS)
    if request.blur:
        img = img.filter(ImageFilter.GaussianBlur(radius=request.blur))
    if request.sharpen:
        img = img.filter(
            ImageFilter.UnsharpMask(radius=request.sharpen, percent=SHARPEN_PERCENT, threshold=SHARPEN_THRESHOLD)
        )
    if request.greyscale:
        img = _greyscale(img)
    if request.flip:
        img = ImageOps.flip(img)
    if request.flop:
        img = ImageOps.mirror(img)

    return _encode(img, image_format)
