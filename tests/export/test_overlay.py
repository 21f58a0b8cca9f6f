"""Tests for pdf2deck.export.overlay – chunk / column QA rendering."""

from __future__ import annotations

from conftest import make_block
from PIL import Image

from pdf2deck.config import ExtractionConfig
from pdf2deck.export.overlay import (
    COLUMN_COLORS,
    LABEL_PREFIXES,
    TYPE_COLORS,
    _to_image_box,
    draw_page_overlay,
)
from pdf2deck.models import BBox, Chunk, PageResult, PageStats


def _result():
    heading = make_block("Title", 50, 150, width=100, height=20, font_size=20)
    body = make_block("Body", 50, 100, width=100)
    return PageResult(
        page=1,
        text="Title\nBody",
        chunks=[Chunk.from_block(heading, "heading"), Chunk.from_block(body, "paragraph")],
        stats=PageStats(
            max_font=20,
            median_font=16,
            line_count=2,
            columns=1,
            column_boundaries=((50.0, 100.0),),
        ),
    )


class TestTables:
    def test_every_type_styled(self):
        for kind in ("heading", "list", "paragraph"):
            assert kind in TYPE_COLORS
            assert kind in LABEL_PREFIXES

    def test_column_palette(self):
        assert all(len(c) == 3 for c in COLUMN_COLORS)


class TestToImageBox:
    def test_y_flipped(self):
        assert _to_image_box(BBox(10, 20, 30, 40), 100, 1.0) == (10, 40, 40, 80)

    def test_scaled(self):
        assert _to_image_box(BBox(10, 20, 30, 40), 100, 2.0) == (20, 80, 80, 160)


class TestDrawPageOverlay:
    def test_writes_png(self, tmp_path):
        out = draw_page_overlay(_result(), 200, 200, tmp_path / "p1.png")
        assert out.exists()
        img = Image.open(out)
        assert img.format == "PNG"
        assert img.size == (200, 200)

    def test_scale(self, tmp_path):
        out = draw_page_overlay(_result(), 200, 100, tmp_path / "p1.png", scale=1.5)
        assert Image.open(out).size == (300, 150)

    def test_creates_parent_dir(self, tmp_path):
        out = draw_page_overlay(_result(), 200, 200, tmp_path / "a" / "b" / "p.png")
        assert out.exists()

    def test_background_resized(self, tmp_path):
        bg = Image.new("RGB", (50, 50), (0, 0, 0))
        out = draw_page_overlay(
            _result(), 200, 200, tmp_path / "p.png", background=bg
        )
        assert Image.open(out).size == (200, 200)

    def test_heading_outline_drawn(self, tmp_path):
        out = draw_page_overlay(_result(), 200, 200, tmp_path / "p.png")
        img = Image.open(out).convert("RGB")
        # Left edge of the heading box: x=50, image y between 30 and 50.
        r, g, b = img.getpixel((50, 40))
        assert r > 200 and g < 100 and b < 100

    def test_column_band_tinted(self, tmp_path):
        out = draw_page_overlay(_result(), 200, 200, tmp_path / "p.png")
        img = Image.open(out).convert("RGB")
        assert img.getpixel((120, 195)) != (255, 255, 255)
        assert img.getpixel((180, 195)) == (255, 255, 255)

    def test_empty_page(self, tmp_path):
        out = draw_page_overlay(PageResult(page=3), 100, 100, tmp_path / "e.png")
        img = Image.open(out).convert("RGB")
        assert img.getpixel((50, 50)) == (255, 255, 255)

    def test_band_alpha_knob(self, tmp_path):
        cfg = ExtractionConfig(overlay_column_fill_alpha=0)
        out = draw_page_overlay(_result(), 200, 200, tmp_path / "p.png", cfg=cfg)
        img = Image.open(out).convert("RGB")
        assert img.getpixel((120, 195)) == (255, 255, 255)
