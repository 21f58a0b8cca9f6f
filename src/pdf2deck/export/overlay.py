from __future__ import annotations

from pathlib import Path
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

from ..config import ExtractionConfig
from ..models import BBox, PageResult

# Outline colour per chunk type
TYPE_COLORS = {
    "heading": (255, 0, 0, 220),  # Red
    "list": (0, 0, 255, 220),  # Blue
    "paragraph": (0, 180, 0, 180),  # Green
}

# Label prefix per chunk type
LABEL_PREFIXES = {
    "heading": "H",
    "list": "L",
    "paragraph": "P",
}

# Palette for alternating column bands
COLUMN_COLORS = [
    (255, 165, 0),  # Orange
    (128, 0, 128),  # Purple
    (0, 200, 200),  # Cyan
    (255, 105, 180),  # Pink
]


def _to_image_box(
    bbox: BBox, page_height: float, scale: float
) -> Tuple[int, int, int, int]:
    """Page box (y up) → image rectangle (y down), scaled."""
    x0 = int(bbox.x * scale)
    x1 = int(bbox.right() * scale)
    y0 = int((page_height - bbox.top()) * scale)
    y1 = int((page_height - bbox.y) * scale)
    return x0, y0, x1, y1


def _load_font(size: int):
    try:
        return ImageFont.truetype("arial.ttf", size)
    except (OSError, IOError):
        return ImageFont.load_default()


def draw_page_overlay(
    result: PageResult,
    page_width: float,
    page_height: float,
    out_path: Path | str,
    scale: float = 1.0,
    background: Image.Image | None = None,
    cfg: ExtractionConfig | None = None,
) -> Path:
    """Render chunk boxes and column bands over a page for visual QA.

    Each chunk is outlined in its type colour and labelled with its type
    prefix and reading-order position (``H1``, ``P2``, ``L3`` ...).  Column
    boundaries are shaded as translucent vertical bands.

    Args:
        result: Extracted page.
        page_width: Page width in PDF points
        page_height: Page height in PDF points
        out_path: Destination PNG path
        scale: PDF-to-pixel scale factor
        background: Optional background image (resized to fit)
        cfg: ExtractionConfig (for widths, font sizing and band alpha)

    Returns:
        The path written.
    """
    if cfg is None:
        cfg = ExtractionConfig()
    out_path = Path(out_path)

    img_w = max(1, int(page_width * scale))
    img_h = max(1, int(page_height * scale))
    if background is not None:
        img = background.convert("RGBA")
        if img.size != (img_w, img_h):
            img = img.resize((img_w, img_h))
    else:
        img = Image.new("RGBA", (img_w, img_h), (255, 255, 255, 255))

    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay, "RGBA")

    for i, (x, w) in enumerate(result.stats.column_boundaries):
        r, g, b = COLUMN_COLORS[i % len(COLUMN_COLORS)]
        draw.rectangle(
            [(int(x * scale), 0), (int((x + w) * scale), img_h)],
            fill=(r, g, b, cfg.overlay_column_fill_alpha),
        )

    font_size = max(cfg.overlay_label_font_floor, int(cfg.overlay_label_font_base * scale))
    font = _load_font(font_size)

    for order, chunk in enumerate(result.chunks, start=1):
        outline = TYPE_COLORS.get(chunk.type, TYPE_COLORS["paragraph"])
        x0, y0, x1, y1 = _to_image_box(chunk.bbox, page_height, scale)
        draw.rectangle(
            [(x0, y0), (x1, y1)],
            outline=outline,
            width=cfg.overlay_block_outline_width,
        )

        label = f"{LABEL_PREFIXES.get(chunk.type, '?')}{order}"
        bbox_txt = draw.textbbox((x0, y0 - font_size - 2), label, font=font)
        bg = (bbox_txt[0] - 1, bbox_txt[1] - 1, bbox_txt[2] + 1, bbox_txt[3] + 1)
        draw.rectangle(bg, fill=(255, 255, 255, 220))
        draw.text(
            (x0, y0 - font_size - 2),
            label,
            fill=(outline[0], outline[1], outline[2]),
            font=font,
        )

    img = Image.alpha_composite(img, overlay)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(out_path, format="PNG")
    return out_path
