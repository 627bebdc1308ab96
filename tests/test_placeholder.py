import pytest

from imageserver.core.config import settings
from imageserver.core.placeholder import (
    DEFAULT_BGCOLOR,
    DEFAULT_FGCOLOR,
    Label,
    Line,
    PlaceholderSpec,
    Rect,
    build_layout,
    generate,
)
from imageserver.core.upload_store import ImageFormat

from .conftest import decode


class TestPlaceholderSpec:
    def test_defaults(self):
        spec = PlaceholderSpec.from_query({})
        assert (spec.width, spec.height, spec.border, spec.textsize) == (300, 200, 5, 24)
        assert (spec.bgcolor, spec.fgcolor, spec.textcolor) == ("#fcfcfc", "#ddd", "#aaa")

    def test_non_numeric_and_zero_fall_back(self):
        spec = PlaceholderSpec.from_query({"width": "wide", "height": "0", "border": "0", "textsize": ""})
        assert (spec.width, spec.height, spec.border, spec.textsize) == (300, 200, 5, 24)

    def test_non_positive_dimensions_fall_back(self):
        spec = PlaceholderSpec.from_query({"width": "-40", "textsize": "-3"})
        assert spec.width == 300
        assert spec.textsize == 24

    def test_negative_border_is_kept(self):
        assert PlaceholderSpec.from_query({"border": "-2"}).border == -2

    def test_fractional_border_is_kept(self):
        assert PlaceholderSpec.from_query({"border": "2.5"}).border == 2.5

    def test_oversized_canvas_falls_back_to_defaults(self):
        spec = PlaceholderSpec.from_query({"width": "60000", "height": "60000"})
        assert (spec.width, spec.height) == (300, 200)

    def test_canvas_at_the_limit_is_kept(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_OUTPUT_PIXELS", 400 * 300)
        spec = PlaceholderSpec.from_query({"width": "400", "height": "300"})
        assert (spec.width, spec.height) == (400, 300)
        spec = PlaceholderSpec.from_query({"width": "401", "height": "300"})
        assert (spec.width, spec.height) == (300, 200)

    def test_oversized_textsize_falls_back(self):
        assert PlaceholderSpec.from_query({"textsize": "100000"}).textsize == 24
        assert PlaceholderSpec.from_query({"textsize": "60"}).textsize == 60

    def test_malformed_color_falls_back(self):
        spec = PlaceholderSpec.from_query({"bgcolor": "not-a-color", "fgcolor": "#123456"})
        assert spec.bgcolor == DEFAULT_BGCOLOR
        assert spec.fgcolor == "#123456"

    def test_label(self):
        assert PlaceholderSpec().label == "300 x 200"
        assert PlaceholderSpec(width=640, height=480).label == "640 x 480"


class TestLayout:
    def test_default_layout(self):
        spec = PlaceholderSpec()
        assert build_layout(spec) == [
            Rect(0, 0, 300, 200, DEFAULT_FGCOLOR),
            Rect(5, 5, 290, 190, DEFAULT_BGCOLOR),
            Line(10, 10, 290, 190, DEFAULT_FGCOLOR, 5),
            Line(290, 10, 10, 190, DEFAULT_FGCOLOR, 5),
            Rect(5, 88, 290, 24, DEFAULT_BGCOLOR),
            Label(150, 108, "300 x 200", 24, "#aaa"),
        ]

    def test_label_backdrop_drawn_before_label(self):
        shapes = build_layout(PlaceholderSpec(textsize=40))
        backdrop, label = shapes[-2], shapes[-1]
        assert isinstance(backdrop, Rect) and isinstance(label, Label)
        assert backdrop.height == 40
        assert backdrop.y == (200 - 40) / 2


class TestGenerate:
    def test_default_size(self):
        img = decode(generate(PlaceholderSpec()))
        assert img.format == "PNG"
        assert img.size == (300, 200)

    def test_border_and_panel_colors(self):
        img = decode(generate(PlaceholderSpec())).convert("RGBA")
        assert img.getpixel((1, 1)) == (0xDD, 0xDD, 0xDD, 255)
        assert img.getpixel((7, 30)) == (0xFC, 0xFC, 0xFC, 255)

    def test_bgcolor_changes_panel_only(self):
        img = decode(generate(PlaceholderSpec(bgcolor="#000000"))).convert("RGBA")
        assert img.size == (300, 200)
        assert img.getpixel((7, 30)) == (0, 0, 0, 255)
        assert img.getpixel((1, 1)) == (0xDD, 0xDD, 0xDD, 255)

    @pytest.mark.parametrize("colors", [{}, {"bgcolor": "#000"}, {"fgcolor": "red", "textcolor": "#00ff00"}])
    def test_dimensions_ignore_colors(self, colors):
        img = decode(generate(PlaceholderSpec(width=120, height=90, **colors)))
        assert img.size == (120, 90)

    def test_fractional_border_layout(self):
        shapes = build_layout(PlaceholderSpec(border=2.5))
        assert shapes[1] == Rect(2.5, 2.5, 295, 195, DEFAULT_BGCOLOR)
        assert shapes[2] == Line(5, 5, 295, 195, DEFAULT_FGCOLOR, 2.5)
        assert decode(generate(PlaceholderSpec(border=2.5))).size == (300, 200)

    @pytest.mark.parametrize("border", [150, 500, -7])
    def test_degenerate_border_does_not_raise(self, border):
        img = decode(generate(PlaceholderSpec(border=border)))
        assert img.size == (300, 200)

    def test_jpeg(self):
        img = decode(generate(PlaceholderSpec(width=100, height=80, textsize=12), ImageFormat.JPEG))
        assert img.format == "JPEG"
        assert img.size == (100, 80)
