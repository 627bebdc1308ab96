"""
Placeholder thumbnail generator.

Builds a framed panel with a diagonal cross and a centered "{width} x {height}"
label, then rasterizes it with Pillow. Layout is computed straight from the
requested numbers; out-of-range values give degenerate shapes, not errors.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from typing import List, Mapping, Optional, Union

from PIL import Image, ImageColor, ImageDraw, ImageFont
from pydantic import BaseModel

from .config import settings
from .params import parse_number
from .upload_store import ImageFormat

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 300
DEFAULT_HEIGHT = 200
DEFAULT_BORDER = 5
DEFAULT_BGCOLOR = "#fcfcfc"
DEFAULT_FGCOLOR = "#ddd"
DEFAULT_TEXTCOLOR = "#aaa"
DEFAULT_TEXTSIZE = 24

LABEL_BASELINE_OFFSET = 8
FONT_CANDIDATES = ("Helvetica.ttf", "Arial.ttf", "DejaVuSans.ttf")


def _number_or(raw: Optional[str], default: float) -> float:
    # Absent, zero and non-numeric all fall back to the default.
    value = parse_number(raw)
    return value if value else default


def _dimension_or(raw: Optional[str], default: int) -> int:
    value = int(_number_or(raw, default))
    return value if value > 0 else default


def _color_or(raw: Optional[str], default: str, name: str) -> str:
    if not raw:
        return default
    try:
        ImageColor.getrgb(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s %r", name, raw)
        return default
    return raw


class PlaceholderSpec(BaseModel):
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    border: float = DEFAULT_BORDER
    bgcolor: str = DEFAULT_BGCOLOR
    fgcolor: str = DEFAULT_FGCOLOR
    textcolor: str = DEFAULT_TEXTCOLOR
    textsize: int = DEFAULT_TEXTSIZE

    @classmethod
    def from_query(cls, query: Mapping[str, Optional[str]]) -> "PlaceholderSpec":
        width = _dimension_or(query.get("width"), DEFAULT_WIDTH)
        height = _dimension_or(query.get("height"), DEFAULT_HEIGHT)
        if width * height > settings.MAX_OUTPUT_PIXELS:
            logger.warning("Placeholder %dx%d exceeds the pixel limit, using defaults", width, height)
            width, height = DEFAULT_WIDTH, DEFAULT_HEIGHT
        textsize = _dimension_or(query.get("textsize"), DEFAULT_TEXTSIZE)
        # The label is rasterized as one bitmap before being clipped to the canvas.
        if len(f"{width} x {height}") * textsize * textsize > settings.MAX_OUTPUT_PIXELS:
            logger.warning("Placeholder textsize %d exceeds the pixel limit, using default", textsize)
            textsize = DEFAULT_TEXTSIZE
        return cls(
            width=width,
            height=height,
            border=_number_or(query.get("border"), DEFAULT_BORDER),
            bgcolor=_color_or(query.get("bgcolor"), DEFAULT_BGCOLOR, "bgcolor"),
            fgcolor=_color_or(query.get("fgcolor"), DEFAULT_FGCOLOR, "fgcolor"),
            textcolor=_color_or(query.get("textcolor"), DEFAULT_TEXTCOLOR, "textcolor"),
            textsize=textsize,
        )

    @property
    def label(self) -> str:
        return f"{self.width} x {self.height}"


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float


@dataclass(frozen=True)
class Label:
    x: float
    y: float
    text: str
    size: int
    fill: str


Shape = Union[Rect, Line, Label]


def build_layout(spec: PlaceholderSpec) -> List[Shape]:
    """Return the shapes to paint, back to front."""
    w, h, b, size = spec.width, spec.height, spec.border, spec.textsize
    return [
        Rect(0, 0, w, h, spec.fgcolor),
        Rect(b, b, w - b * 2, h - b * 2, spec.bgcolor),
        Line(b * 2, b * 2, w - b * 2, h - b * 2, spec.fgcolor, b),
        Line(w - b * 2, b * 2, b * 2, h - b * 2, spec.fgcolor, b),
        # Backdrop that hides the cross behind the label
        Rect(b, (h - size) / 2, w - b * 2, size, spec.bgcolor),
        Label(w / 2, h / 2 + LABEL_BASELINE_OFFSET, spec.label, size, spec.textcolor),
    ]


@lru_cache(maxsize=32)
def _load_font(size: int) -> ImageFont.ImageFont:
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _paint(draw: ImageDraw.ImageDraw, shape: Shape) -> None:
    if isinstance(shape, Rect):
        if shape.width < 1 or shape.height < 1:
            return
        draw.rectangle(
            [shape.x, shape.y, shape.x + shape.width - 1, shape.y + shape.height - 1],
            fill=shape.fill,
        )
    elif isinstance(shape, Line):
        # Pillow strokes are whole pixels.
        stroke_width = round(shape.stroke_width)
        if stroke_width <= 0:
            return
        draw.line([(shape.x1, shape.y1), (shape.x2, shape.y2)], fill=shape.stroke, width=stroke_width)
    else:
        draw.text((shape.x, shape.y), shape.text, fill=shape.fill, font=_load_font(shape.size), anchor="ms")


def generate(spec: PlaceholderSpec, image_format: ImageFormat = ImageFormat.PNG) -> bytes:
    canvas = Image.new("RGBA", (spec.width, spec.height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    for shape in build_layout(spec):
        _paint(draw, shape)

    buffer = BytesIO()
    if image_format is ImageFormat.JPEG:
        canvas.convert("RGB").save(buffer, format="JPEG", quality=settings.JPEG_QUALITY)
    else:
        canvas.save(buffer, format="PNG")
    return buffer.getvalue()
