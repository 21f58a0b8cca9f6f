"""Structure classification of line blocks.

Each block is labelled ``list``, ``heading`` or ``paragraph``; the first
matching rule wins, so a list item is never also a heading.

Usage::

    from pdf2deck.analysis.structure import classify_blocks

    chunks = classify_blocks(blocks, max_font=28.0, median_font=12.0)
"""

from __future__ import annotations

import re
from statistics import median
from typing import List, Optional, Tuple

from ..config import ExtractionConfig
from ..models import Chunk, ChunkType, LineBlock

# ---------------------------------------------------------------------------
# List markers
# ---------------------------------------------------------------------------

_BULLET_RE = re.compile(r"^[•‣◦–—\-*]\s")
_NUMERIC_RE = re.compile(r"^(?:\d+[.)]|\(\d+\))\s")
_ALPHA_RE = re.compile(r"^[A-Za-z][.)]\s")
_CHECKBOX_RE = re.compile(r"^\[[ xX]\]\s")

_LIST_PATTERNS = (_BULLET_RE, _NUMERIC_RE, _ALPHA_RE, _CHECKBOX_RE)

# Page numbers and similar bare counters never become headings.
_BARE_NUMBER_RE = re.compile(r"^\d{1,3}$")


def is_list_item(text: str) -> bool:
    """True when *text* starts with a bullet, number, letter or checkbox marker."""
    text = text.lstrip()
    return any(p.match(text) for p in _LIST_PATTERNS)


def page_font_stats(blocks: List[LineBlock]) -> Tuple[float, float]:
    """Return ``(max_font, median_font)`` over the blocks of a page."""
    sizes = [b.font_size for b in blocks if b.font_size > 0]
    if not sizes:
        return 0.0, 0.0
    return max(sizes), float(median(sizes))


def heading_threshold(
    max_font: Optional[float], median_font: float, cfg: ExtractionConfig
) -> float:
    """Minimum font size for a heading on this page."""
    if not max_font or max_font <= 0:
        return cfg.heading_fallback_ratio * median_font
    return max(
        cfg.heading_max_font_ratio * max_font,
        cfg.heading_median_font_ratio * median_font,
    )


def classify_block(
    block: LineBlock,
    threshold: float,
    cfg: ExtractionConfig,
) -> ChunkType:
    text = block.text.strip()
    if is_list_item(text):
        return "list"
    if (
        len(text) <= cfg.heading_max_chars
        and block.font_size >= threshold
        and not _BARE_NUMBER_RE.match(text)
    ):
        return "heading"
    return "paragraph"


def classify_blocks(
    blocks: List[LineBlock],
    max_font: Optional[float],
    median_font: float,
    cfg: ExtractionConfig | None = None,
) -> List[Chunk]:
    """Label every block and wrap it in a :class:`Chunk`.

    Parameters
    ----------
    blocks : list[LineBlock]
        All blocks of one page, in any order; output order matches input.
    max_font : float or None
        Largest block font size on the page; ``None`` or ``0`` when unknown.
    median_font : float
        Median block font size on the page.
    cfg : ExtractionConfig, optional

    Returns
    -------
    list[Chunk]
    """
    if cfg is None:
        cfg = ExtractionConfig()
    threshold = heading_threshold(max_font, median_font, cfg)
    return [
        Chunk.from_block(b, classify_block(b, threshold, cfg)) for b in blocks
    ]
