from __future__ import annotations

import logging
from statistics import median
from typing import List

from ..config import ExtractionConfig
from ..models import Column, LineBlock

log = logging.getLogger(__name__)


def _sort_top_down(blocks: List[LineBlock]) -> List[LineBlock]:
    return sorted(blocks, key=lambda b: (-b.bbox.y, b.bbox.x))


def _envelope(blocks: List[LineBlock]) -> Column:
    x0 = min(b.bbox.x for b in blocks)
    x1 = max(b.bbox.right() for b in blocks)
    return Column(x=x0, w=x1 - x0, lines=_sort_top_down(blocks))


def _merge(a: Column, b: Column) -> Column:
    return _envelope(a.lines + b.lines)


def gutter_threshold(
    blocks: List[LineBlock], page_width: float, cfg: ExtractionConfig
) -> float:
    """Minimum midpoint gap that separates two columns."""
    widths = [b.bbox.width for b in blocks]
    median_w = float(median(widths)) if widths else 0.0
    return max(
        cfg.gutter_min,
        min(cfg.gutter_page_ratio * page_width, cfg.gutter_width_ratio * median_w),
    )


def merge_narrow_columns(
    columns: List[Column], page_width: float, cfg: ExtractionConfig
) -> List[Column]:
    """Fold columns narrower than the page threshold into a neighbour.

    A narrow column merges into the column before it; a narrow leading
    column merges into the one after it.  A lone column is kept as is.
    """
    narrow = max(cfg.narrow_column_min, cfg.narrow_column_page_ratio * page_width)
    merged: List[Column] = []
    pending: Column | None = None
    for col in columns:
        if pending is not None:
            col = _merge(pending, col)
            pending = None
        if col.w < narrow:
            if merged:
                merged[-1] = _merge(merged[-1], col)
            else:
                pending = col
            continue
        merged.append(col)
    if pending is not None:
        if merged:
            merged[-1] = _merge(merged[-1], pending)
        else:
            merged.append(pending)
    return merged


def resolve_columns(
    blocks: List[LineBlock],
    page_width: float,
    cfg: ExtractionConfig | None = None,
) -> List[Column]:
    """Detect columns and order each one top to bottom.

    Blocks are clustered on their horizontal midpoints with single linkage:
    a gap wider than :func:`gutter_threshold` between consecutive sorted
    midpoints starts a new column.  Narrow columns are then merged away.

    Args:
        blocks: Line blocks of one page.
        page_width: Page width in the same units as the block boxes.
        cfg: Extraction configuration.

    Returns:
        Columns left to right.  Zero or one block yields a single column.
    """
    if cfg is None:
        cfg = ExtractionConfig()
    if not blocks:
        return [Column(x=0.0, w=0.0, lines=[])]
    if len(blocks) == 1:
        return [_envelope(blocks)]

    gutter = gutter_threshold(blocks, page_width, cfg)
    by_mid = sorted(blocks, key=lambda b: b.bbox.mid_x())

    clusters: List[List[LineBlock]] = [[by_mid[0]]]
    for prev, cur in zip(by_mid, by_mid[1:]):
        if cur.bbox.mid_x() - prev.bbox.mid_x() > gutter:
            clusters.append([cur])
        else:
            clusters[-1].append(cur)

    if len(clusters) == 1:
        return [_envelope(blocks)]

    columns = sorted((_envelope(c) for c in clusters), key=lambda c: c.x)
    columns = merge_narrow_columns(columns, page_width, cfg)

    log.debug(
        "resolve_columns: %d blocks, gutter=%.1f, %d clusters -> %d columns",
        len(blocks),
        gutter,
        len(clusters),
        len(columns),
    )
    return columns


def reading_order(columns: List[Column]) -> List[LineBlock]:
    """Flatten columns: left to right, each column top to bottom."""
    return [b for col in columns for b in col.lines]
