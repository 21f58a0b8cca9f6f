from __future__ import annotations

import re
from collections import Counter
from statistics import median
from typing import List, Optional

from ..config import ExtractionConfig
from ..models import BBox, Line, LineBlock, Span

_BOLD_RE = re.compile(r"bold|semibold|demibold|medium|heavy|black", re.IGNORECASE)
_ITALIC_RE = re.compile(r"italic|oblique", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


def _dominant_family(spans: List[Span]) -> Optional[str]:
    """Most frequent non-empty family; ties go to the first seen."""
    families = [s.font_family for s in spans if s.font_family]
    if not families:
        return None
    # Counter.most_common keeps insertion order among equal counts.
    return Counter(families).most_common(1)[0][0]


def _join_text(spans: List[Span], font_size: float, cfg: ExtractionConfig) -> str:
    gap_min = max(cfg.space_gap_min, font_size * cfg.space_gap_font_mult)
    parts = [spans[0].text]
    for prev, cur in zip(spans, spans[1:]):
        if cur.x - prev.right() > gap_min:
            parts.append(" ")
        parts.append(cur.text)
    return _WS_RE.sub(" ", "".join(parts)).strip()


def build_line_block(line: Line, cfg: ExtractionConfig | None = None) -> LineBlock:
    """Aggregate one line's spans into a :class:`LineBlock`.

    Spans are read left to right; a single space separates neighbours whose
    horizontal gap exceeds ``max(space_gap_min, font_size × space_gap_font_mult)``.
    Bold / italic are inferred from the family and font names of the members.
    """
    if cfg is None:
        cfg = ExtractionConfig()
    if not line:
        return LineBlock(text="", font_size=0.0, bbox=BBox(0.0, 0.0, 0.0, 0.0))

    ordered = sorted(line, key=lambda s: s.x)
    font_size = float(median(s.font_size for s in ordered))
    family = _dominant_family(ordered)

    names = " ".join(
        f"{s.font_family or ''} {s.font_name or ''}" for s in ordered
    )

    return LineBlock(
        text=_join_text(ordered, font_size, cfg),
        font_size=font_size,
        font_family=family,
        bold=bool(_BOLD_RE.search(names)),
        italic=bool(_ITALIC_RE.search(names)),
        bbox=BBox.union(s.bbox() for s in ordered),
        spans=ordered,
    )


def build_line_blocks(
    lines: List[Line], cfg: ExtractionConfig | None = None
) -> List[LineBlock]:
    """Build one block per line, preserving line order."""
    return [build_line_block(line, cfg) for line in lines if line]
