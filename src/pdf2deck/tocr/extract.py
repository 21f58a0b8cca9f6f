"""Text-layer extraction: pdfplumber words → raw text runs → normalised spans.

Two steps live here:

``read_page_runs``
    The pdfplumber adapter.  Calls ``Page.extract_words`` and converts each
    word dict into a :class:`~pdf2deck.models.TextRun` in bottom-up page
    coordinates, plus the font-style mapping for every font name seen.

``normalize_spans``
    The span normaliser.  Turns raw runs (from pdfplumber or any source
    honouring the same contract) into positioned :class:`Span` records,
    estimating missing metrics.  It never raises.
"""

from __future__ import annotations

import logging
from statistics import median
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config import ExtractionConfig
from ..models import FontStyle, Span, TextRun
from .fonts import build_style_map

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Span normalisation
# ---------------------------------------------------------------------------


def _font_size(run: TextRun, fallback: float) -> float:
    """Median of the positive size candidates (height, |a|, |d|)."""
    t = run.transform
    candidates = [abs(float(t[0])), abs(float(t[3]))]
    if run.height is not None:
        candidates.append(float(run.height))
    positive = [c for c in candidates if c > 0]
    if not positive:
        return fallback
    return float(median(positive))


def normalize_spans(
    runs: List[TextRun],
    styles: Optional[Mapping[str, FontStyle]] = None,
    cfg: ExtractionConfig | None = None,
) -> List[Span]:
    """Convert raw text runs into positioned spans.

    Whitespace-only runs are dropped.  Missing or non-positive widths are
    estimated from the font size and character count; missing or
    non-positive heights fall back to ``max(font_size, 1)``.

    Args:
        runs: Raw runs for one page, in source order.
        styles: Optional ``{font_name: FontStyle}`` mapping used to resolve
            each span's ``font_family``.
        cfg: Extraction configuration.

    Returns:
        Spans in the same order as their surviving runs.
    """
    if cfg is None:
        cfg = ExtractionConfig()
    styles = styles or {}

    spans: List[Span] = []
    for run in runs:
        text = run.text or ""
        if not text.strip():
            continue

        fs = _font_size(run, cfg.fallback_font_size)

        width = run.width
        if width is None or width <= 0:
            width = cfg.char_width_factor * fs * len(text)
        height = run.height
        if height is None or height <= 0:
            height = max(fs, 1.0)

        family = None
        if run.font_name is not None and run.font_name in styles:
            family = styles[run.font_name].font_family or None

        spans.append(
            Span(
                text=text,
                x=float(run.transform[4]),
                y=float(run.transform[5]),
                width=float(width),
                height=float(height),
                font_size=fs,
                font_name=run.font_name,
                font_family=family,
            )
        )

    log.debug("normalize_spans: %d runs -> %d spans", len(runs), len(spans))
    return spans


# ---------------------------------------------------------------------------
# pdfplumber adapter
# ---------------------------------------------------------------------------


def _build_extract_words_kwargs(cfg: ExtractionConfig) -> dict[str, Any]:
    """Build ``pdfplumber.Page.extract_words`` keyword arguments."""
    return {
        "x_tolerance": cfg.tocr_x_tolerance,
        "y_tolerance": cfg.tocr_y_tolerance,
        "keep_blank_chars": cfg.tocr_keep_blank_chars,
        "use_text_flow": cfg.tocr_use_text_flow,
        "extra_attrs": ["fontname", "size"],
    }


def _word_to_run(w: dict, page_h: float) -> TextRun:
    """Convert a pdfplumber word dict → TextRun (y flipped to bottom-up)."""
    x0 = float(w.get("x0", 0.0))
    x1 = float(w.get("x1", 0.0))
    top = float(w.get("top", 0.0))
    bottom = float(w.get("bottom", 0.0))
    size = float(w.get("size", bottom - top) or 0.0)
    return TextRun(
        text=w.get("text", ""),
        transform=(size, 0.0, 0.0, size, x0, page_h - bottom),
        width=x1 - x0,
        height=bottom - top,
        font_name=w.get("fontname") or None,
    )


def read_page_runs(
    page: Any,
    cfg: ExtractionConfig | None = None,
) -> Tuple[List[TextRun], Dict[str, FontStyle]]:
    """Read the text layer of an open pdfplumber page.

    Parameters
    ----------
    page : pdfplumber.page.Page
        Open page (anything with ``height`` and ``extract_words``).
    cfg : ExtractionConfig, optional

    Returns
    -------
    (runs, styles)
        Runs in pdfplumber word order and the font-style mapping keyed by
        font name.

    pdfplumber errors propagate unchanged.
    """
    if cfg is None:
        cfg = ExtractionConfig()

    page_h = float(page.height)
    words = page.extract_words(**_build_extract_words_kwargs(cfg))
    runs = [_word_to_run(w, page_h) for w in words]
    styles = build_style_map(r.font_name for r in runs if r.font_name)

    if not runs:
        log.warning(
            "Page %s: zero words extracted (blank or image-only page)",
            getattr(page, "page_number", "?"),
        )
    log.debug("read_page_runs: %d runs, %d fonts", len(runs), len(styles))
    return runs, styles
