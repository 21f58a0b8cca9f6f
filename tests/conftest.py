"""Shared test fixtures for pdf2deck."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from pdf2deck.config import ExtractionConfig
from pdf2deck.models import BBox, LineBlock, Span, TextRun

# ── Helpers ────────────────────────────────────────────────────────────


def make_span(
    x: float,
    y: float,
    text: str = "word",
    width: float | None = None,
    height: float = 12.0,
    font_size: float = 12.0,
    font_name: str | None = "Helvetica",
    font_family: str | None = "Helvetica",
) -> Span:
    """Create a Span with sane defaults (width from a 0.6 em advance)."""
    if width is None:
        width = 0.6 * font_size * len(text)
    return Span(
        text=text,
        x=x,
        y=y,
        width=width,
        height=height,
        font_size=font_size,
        font_name=font_name,
        font_family=font_family,
    )


def make_run(
    text: str,
    x: float,
    y: float,
    size: float = 12.0,
    width: float | None = None,
    height: float | None = None,
    font_name: str | None = "Helvetica",
) -> TextRun:
    """Create a TextRun with an unrotated scale matrix."""
    return TextRun(
        text=text,
        transform=(size, 0.0, 0.0, size, x, y),
        width=width,
        height=height,
        font_name=font_name,
    )


def make_block(
    text: str,
    x: float,
    y: float,
    width: float = 100.0,
    height: float = 12.0,
    font_size: float = 12.0,
    font_family: str | None = "Helvetica",
    bold: bool = False,
) -> LineBlock:
    """Create a single-span LineBlock whose bbox matches its span."""
    span = make_span(
        x, y, text, width=width, height=height, font_size=font_size,
        font_family=font_family,
    )
    return LineBlock(
        text=text,
        font_size=font_size,
        bbox=BBox(x, y, width, height),
        font_family=font_family,
        bold=bold,
        spans=[span],
    )


def make_mock_page(
    words: list[dict],
    width: float = 612,
    height: float = 792,
    page_number: int = 1,
) -> MagicMock:
    """Create a mock pdfplumber Page returning *words*."""
    page = MagicMock()
    page.width = width
    page.height = height
    page.page_number = page_number
    page.extract_words = MagicMock(return_value=words)
    return page


def word(
    x0: float,
    top: float,
    x1: float,
    bottom: float,
    text: str,
    fontname: str = "Helvetica",
    size: float | None = None,
) -> dict:
    """Build a dict matching pdfplumber's extract_words output."""
    return {
        "x0": x0,
        "x1": x1,
        "top": top,
        "bottom": bottom,
        "text": text,
        "fontname": fontname,
        "size": size if size is not None else bottom - top,
    }


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def default_cfg() -> ExtractionConfig:
    """Return a default ExtractionConfig."""
    return ExtractionConfig()


@pytest.fixture
def deck_pdf(tmp_path):
    """Write a three-page letter PDF: centred slide, two columns, blank.

    Page 1 is centred on x=306 so every line shares one midpoint.  Page 2
    has two columns whose rows share baselines across the gutter.
    """
    canvas_mod = pytest.importorskip("reportlab.pdfgen.canvas")

    path = tmp_path / "deck.pdf"
    c = canvas_mod.Canvas(str(path), pagesize=(612, 792))
    c.setTitle("Quarterly Review")

    c.setFont("Helvetica-Bold", 28)
    c.drawCentredString(306, 700, "Quarterly Review")
    c.setFont("Helvetica", 12)
    c.drawCentredString(306, 660, "Revenue grew twelve percent.")
    c.drawCentredString(306, 640, "Costs were flat.")
    c.drawCentredString(306, 620, "1. Expand sales team")
    c.drawCentredString(306, 600, "2. Open two offices")
    c.showPage()

    c.setFont("Helvetica", 12)
    for i in range(5):
        c.drawCentredString(150, 700 - 20 * i, f"Alpha item {i}")
        c.drawCentredString(450, 700 - 20 * i, f"Beta item {i}")
    c.showPage()

    c.showPage()
    c.save()
    return path
