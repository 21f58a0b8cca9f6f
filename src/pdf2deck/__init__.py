"""Structured text extraction from PDF pages for slide-deck planning.

Frequently-used symbols are re-exported here for convenience.
For specialised imports (grouping helpers, exporters, overlay, etc.)
import directly from the relevant submodule, e.g.::

    from pdf2deck.grouping.lines import split_bimodal_line
    from pdf2deck.export.csv_export import export_chunks_csv
"""

# ── Core models & config ──────────────────────────────────────────────

from .analysis.structure import classify_blocks
from .config import ConfigValidationError, ExtractionConfig, load_config
from .grouping import build_line_block, group_lines, resolve_columns
from .ingest import IngestError, PageImage, PdfMeta, ingest_pdf, pdf_to_images
from .models import (
    BBox,
    Chunk,
    Column,
    FontInfo,
    FontStyle,
    LineBlock,
    PageResult,
    PageStats,
    Span,
    TextRun,
)
from .pipeline import (
    DocumentResult,
    StageResult,
    extract_page,
    extract_structured_text,
    run_document,
)
from .tocr import normalize_spans, read_page_runs

__version__ = "0.1.0"

__all__ = [
    # Models & config
    "ExtractionConfig",
    "ConfigValidationError",
    "load_config",
    "TextRun",
    "FontStyle",
    "Span",
    "BBox",
    "LineBlock",
    "FontInfo",
    "Chunk",
    "Column",
    "PageStats",
    "PageResult",
    # Stages
    "normalize_spans",
    "read_page_runs",
    "group_lines",
    "build_line_block",
    "classify_blocks",
    "resolve_columns",
    # Pipeline
    "DocumentResult",
    "StageResult",
    "extract_page",
    "extract_structured_text",
    "run_document",
    # Ingest
    "IngestError",
    "PageImage",
    "PdfMeta",
    "ingest_pdf",
    "pdf_to_images",
]
