from __future__ import annotations

import logging
from bisect import insort
from statistics import mean, median
from typing import List, Tuple

import numpy as np

from ..config import ExtractionConfig
from ..models import Line, Span

log = logging.getLogger(__name__)


def _median_font(spans: List[Span]) -> float:
    return float(median(s.font_size for s in spans)) if spans else 0.0


def _sorted_median(values: List[float]) -> float:
    n = len(values)
    mid = n // 2
    return values[mid] if n % 2 else (values[mid - 1] + values[mid]) / 2.0


def _font_ratio(a: float, b: float) -> float:
    lo, hi = min(a, b), max(a, b)
    if lo <= 0:
        return float("inf") if hi > 0 else 1.0
    return hi / lo


# =============================================================================
# Dynamic tolerance
# =============================================================================


def line_tolerance(spans: List[Span], cfg: ExtractionConfig) -> float:
    """Vertical tolerance for joining spans into one line.

    Median text height (``max(height, font_size)``) times
    ``line_tolerance_mult``, clamped to the configured range.  When the
    typical small baseline step between neighbouring spans is large relative
    to that tolerance (slightly jittered baselines), the tolerance is widened
    by half the jitter, still capped at ``line_tolerance_max``.
    """
    if not spans:
        return cfg.line_tolerance_min

    heights = [max(s.height, s.font_size) for s in spans]
    tol = float(median(heights)) * cfg.line_tolerance_mult
    tol = min(max(tol, cfg.line_tolerance_min), cfg.line_tolerance_max)

    baselines = np.sort(np.array([s.baseline_y for s in spans], dtype=float))
    steps = np.diff(baselines)
    jitter = steps[(steps > 0) & (steps < tol)]
    if jitter.size:
        j = float(np.median(jitter))
        if j > cfg.jitter_ratio * tol:
            tol = min(tol + j / 2.0, cfg.line_tolerance_max)
    return tol


# =============================================================================
# Bimodal split
# =============================================================================


def _two_means(values: np.ndarray, max_iter: int) -> np.ndarray:
    """1-D k-means with k=2; returns a 0/1 label per value.

    Centroids start at the min and max.  Ties go to the lower centroid.
    """
    centroids = np.array([values.min(), values.max()], dtype=float)
    labels = np.zeros(values.shape[0], dtype=int)
    for i in range(max_iter):
        new = (
            np.abs(values - centroids[1]) < np.abs(values - centroids[0])
        ).astype(int)
        if i > 0 and np.array_equal(new, labels):
            break
        labels = new
        for k in (0, 1):
            members = values[labels == k]
            if members.size:
                centroids[k] = members.mean()
    return labels


def split_bimodal_line(
    line: Line, tolerance: float, cfg: ExtractionConfig
) -> List[Line]:
    """Break an over-merged line into two when its baselines are bimodal.

    A line is split when its baseline range exceeds
    ``max(split_tolerance_mult × tolerance, split_font_mult × median font)``.
    The split is kept only when both clusters are non-empty; otherwise the
    line is returned unchanged.  Span order within each part is preserved.
    """
    if len(line) < 2:
        return [line]

    baselines = np.array([s.baseline_y for s in line], dtype=float)
    spread = float(baselines.max() - baselines.min())
    limit = max(
        cfg.split_tolerance_mult * tolerance,
        cfg.split_font_mult * _median_font(line),
    )
    if spread <= limit:
        return [line]

    labels = _two_means(baselines, cfg.kmeans_max_iter)
    low = [s for s, lab in zip(line, labels) if lab == 0]
    high = [s for s, lab in zip(line, labels) if lab == 1]
    if not low or not high:
        return [line]

    log.debug(
        "split_bimodal_line: spread %.2f > %.2f, split %d -> %d + %d",
        spread,
        limit,
        len(line),
        len(high),
        len(low),
    )
    return [high, low]


# =============================================================================
# Wide-gap split
# =============================================================================


def median_word_gap(lines: List[Line], cfg: ExtractionConfig) -> float:
    """Typical horizontal gap between x-adjacent spans across a page.

    Positive gaps from every line are sorted and those above the
    ``word_gap_percentile`` cutoff (column gutters, table gaps) dropped
    before taking the median.  Returns 0.0 when no line has a positive gap.
    """
    gaps: List[float] = []
    for line in lines:
        ordered = sorted(line, key=lambda s: s.x)
        for prev, cur in zip(ordered, ordered[1:]):
            gap = cur.x - prev.right()
            if gap > 0:
                gaps.append(gap)
    if not gaps:
        return 0.0
    gaps.sort()
    cutoff = int(len(gaps) * cfg.word_gap_percentile)
    small = gaps[:cutoff] or gaps
    return float(median(small))


def split_wide_line(
    line: Line, word_gap: float, cfg: ExtractionConfig
) -> List[Line]:
    """Cut a line wherever a horizontal gap is too wide to be word spacing.

    Side-by-side columns whose rows share a baseline land in one line after
    the greedy pass.  The cut threshold is
    ``max(span_gap_min, min(span_gap_mult × word_gap,
    span_gap_font_mult × median font))``; the font term caps it on pages
    whose only gaps are gutters.  Parts come back left to right.
    """
    if len(line) < 2 or word_gap <= 0:
        return [line]

    limit = max(
        cfg.span_gap_min,
        min(
            cfg.span_gap_mult * word_gap,
            cfg.span_gap_font_mult * _median_font(line),
        ),
    )
    ordered = sorted(line, key=lambda s: s.x)
    parts: List[Line] = [[ordered[0]]]
    right = ordered[0].right()
    for span in ordered[1:]:
        if span.x - right > limit:
            parts.append([span])
        else:
            parts[-1].append(span)
        right = max(right, span.right())

    if len(parts) == 1:
        return [line]
    log.debug(
        "split_wide_line: %d spans -> %d parts (gap limit %.2f)",
        len(line),
        len(parts),
        limit,
    )
    return parts


# =============================================================================
# Line grouping
# =============================================================================


def group_lines(spans: List[Span], cfg: ExtractionConfig | None = None) -> List[Line]:
    """Cluster spans into visual lines.

    Greedy pass in input order: a span joins the first existing line whose
    running mean baseline lies within the dynamic tolerance and whose median
    font size is within ``font_ratio_max`` of the span's; otherwise it starts
    a new line.  Each line is then passed through :func:`split_bimodal_line`
    and finally cut at gutter-sized gaps by :func:`split_wide_line`.

    Args:
        spans: Normalised spans of one page.
        cfg: Extraction configuration.

    Returns:
        Lines sorted top to bottom (mean baseline descending), ties broken by
        leftmost x ascending.  Every span lands in exactly one line.
    """
    if cfg is None:
        cfg = ExtractionConfig()
    if not spans:
        return []

    tol = line_tolerance(spans, cfg)

    lines: List[Line] = []
    # Running baseline sums and sorted font sizes kept alongside each line.
    sums: List[float] = []
    sizes: List[List[float]] = []
    for span in spans:
        b = span.baseline_y
        placed = False
        for idx, line in enumerate(lines):
            line_mean = sums[idx] / len(line)
            if abs(b - line_mean) > tol:
                continue
            line_font = _sorted_median(sizes[idx])
            if _font_ratio(span.font_size, line_font) > cfg.font_ratio_max:
                continue
            line.append(span)
            sums[idx] += b
            insort(sizes[idx], span.font_size)
            placed = True
            break
        if not placed:
            lines.append([span])
            sums.append(b)
            sizes.append([span.font_size])

    unstacked: List[Line] = []
    for line in lines:
        unstacked.extend(split_bimodal_line(line, tol, cfg))

    word_gap = median_word_gap(unstacked, cfg)
    result: List[Line] = []
    for line in unstacked:
        result.extend(split_wide_line(line, word_gap, cfg))

    def line_sort_key(line: Line) -> Tuple[float, float]:
        return (-mean(s.baseline_y for s in line), min(s.x for s in line))

    result.sort(key=line_sort_key)

    log.debug(
        "group_lines: %d spans -> %d lines (tol=%.2f, word gap %.2f, "
        "%d bimodal, %d wide splits)",
        len(spans),
        len(result),
        tol,
        word_gap,
        len(unstacked) - len(lines),
        len(result) - len(unstacked),
    )
    return result
