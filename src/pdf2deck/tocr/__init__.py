"""Text-layer extraction (TOCR) — pdfplumber words to normalised spans.

Public API
----------
- :func:`read_page_runs` — raw runs + font styles from an open pdfplumber page
- :func:`normalize_spans` — raw runs to positioned :class:`~pdf2deck.models.Span`
- :func:`resolve_font_style` / :func:`strip_subset_prefix` — font-name helpers
"""

from .extract import normalize_spans, read_page_runs
from .fonts import build_style_map, resolve_font_style, strip_subset_prefix

__all__ = [
    "normalize_spans",
    "read_page_runs",
    "build_style_map",
    "resolve_font_style",
    "strip_subset_prefix",
]
