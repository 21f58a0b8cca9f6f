"""Pipeline orchestration: per-page stage flow, timing, and document runs.

Every page flows through five stages::

    normalize → lines → blocks → classify → columns

Each stage is wrapped by :func:`run_stage`, which times it and records a
:class:`StageResult`.  :func:`extract_page` performs no I/O and works on raw
runs, so it is usable from scripts and tests without a PDF.
:func:`extract_structured_text` drives an open pdfplumber document page by
page, and :func:`run_document` adds ingest and file handling on top.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generator, List, Mapping, Optional

import pdfplumber

from .analysis.structure import classify_blocks, page_font_stats
from .config import ExtractionConfig
from .grouping.blocks import build_line_blocks
from .grouping.columns import reading_order, resolve_columns
from .grouping.lines import group_lines
from .ingest import PdfMeta, ingest_pdf
from .models import FontStyle, PageResult, PageStats, TextRun
from .tocr.extract import normalize_spans, read_page_runs

logger = logging.getLogger("pdf2deck.pipeline")

DEFAULT_MAX_CHARS = 4000

# Canonical per-page stage sequence.
STAGE_ORDER: List[str] = [
    "normalize",
    "lines",
    "blocks",
    "classify",
    "columns",
]

_WS_RE = re.compile(r"\s+")


# ── Stage result ───────────────────────────────────────────────────────


@dataclass
class StageResult:
    """Outcome record for a single pipeline stage."""

    stage: str
    status: str = "skipped"  # "success" | "skipped" | "failed"
    duration_ms: int = 0
    counts: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize stage result to a JSON-compatible dict."""
        d: Dict[str, Any] = {
            "stage": self.stage,
            "status": self.status,
            "duration_ms": self.duration_ms,
        }
        if self.counts:
            d["counts"] = self.counts
        if self.error is not None:
            d["error"] = self.error
        return d


# ── Stage context manager ──────────────────────────────────────────────


@contextmanager
def run_stage(
    stage: str,
    stages: Dict[str, StageResult] | None = None,
) -> Generator[StageResult, None, None]:
    """Context manager that wraps a pipeline stage with timing.

    Usage::

        with run_stage("lines", stages) as sr:
            lines = group_lines(spans, cfg)
            sr.counts["lines"] = len(lines)

    The stage is marked ``"success"`` on normal exit.  On an exception the
    error is recorded on the :class:`StageResult` and re-raised.  When
    *stages* is given the result is stored in it under *stage*.
    """
    sr = StageResult(stage=stage)
    if stages is not None:
        stages[stage] = sr

    t0 = time.perf_counter()
    try:
        yield sr
        if sr.status not in ("success", "failed"):
            sr.status = "success"
    except Exception as exc:
        sr.status = "failed"
        sr.error = {
            "type": type(exc).__name__,
            "message": str(exc),
            "stack": traceback.format_exc(),
        }
        raise
    finally:
        elapsed = time.perf_counter() - t0
        sr.duration_ms = int(elapsed * 1000)


# ── Page-level extraction ──────────────────────────────────────────────


def _check_max_chars(max_chars: int) -> None:
    if max_chars < 0:
        raise ValueError(f"max_chars must be >= 0, got {max_chars}")


def _page_text(texts: List[str], max_chars: int) -> str:
    lines = [_WS_RE.sub(" ", t).strip() for t in texts]
    return "\n".join(t for t in lines if t)[:max_chars]


def extract_page(
    runs: List[TextRun],
    styles: Optional[Mapping[str, FontStyle]],
    page: int,
    max_chars: int = DEFAULT_MAX_CHARS,
    cfg: ExtractionConfig | None = None,
    stages: Dict[str, StageResult] | None = None,
) -> PageResult:
    """Run the five extraction stages on one page's raw runs.

    Parameters
    ----------
    runs : list[TextRun]
        Raw text runs of the page.
    styles : mapping, optional
        ``{font_name: FontStyle}`` used to resolve span families.
    page : int
        1-based page number recorded on the result.
    max_chars : int
        Character budget for :attr:`PageResult.text`.
    cfg : ExtractionConfig, optional
    stages : dict, optional
        Receives one :class:`StageResult` per stage.

    Returns
    -------
    PageResult
        Chunks in reading order plus page text and statistics.

    Raises
    ------
    ValueError
        When *max_chars* is negative.
    """
    _check_max_chars(max_chars)
    if cfg is None:
        cfg = ExtractionConfig()

    with run_stage("normalize", stages) as sr:
        spans = normalize_spans(runs, styles, cfg)
        sr.counts = {"runs": len(runs), "spans": len(spans)}

    if not spans:
        logger.warning("Page %d: no text spans", page)
        return PageResult(page=page)

    with run_stage("lines", stages) as sr:
        lines = group_lines(spans, cfg)
        sr.counts = {"lines": len(lines)}

    with run_stage("blocks", stages) as sr:
        blocks = build_line_blocks(lines, cfg)
        sr.counts = {"blocks": len(blocks)}

    max_font, median_font = page_font_stats(blocks)

    with run_stage("classify", stages) as sr:
        chunks = classify_blocks(blocks, max_font, median_font, cfg)
        by_type: Dict[str, int] = {}
        for c in chunks:
            by_type[c.type] = by_type.get(c.type, 0) + 1
        sr.counts = by_type

    page_width = max(s.right() for s in spans)
    with run_stage("columns", stages) as sr:
        columns = resolve_columns(blocks, page_width, cfg)
        sr.counts = {"columns": len(columns), "page_width": round(page_width, 2)}

    # Chunks share index with their source blocks.
    chunk_for = {id(b): c for b, c in zip(blocks, chunks)}
    ordered = reading_order(columns)

    stats = PageStats(
        max_font=max_font,
        median_font=median_font,
        line_count=len(blocks),
        columns=len(columns),
        column_boundaries=tuple((c.x, c.w) for c in columns),
    )
    result = PageResult(
        page=page,
        text=_page_text([b.text for b in ordered], max_chars),
        chunks=[chunk_for[id(b)] for b in ordered],
        stats=stats,
    )
    logger.debug(
        "Page %d: %d spans, %d lines, %d columns",
        page,
        len(spans),
        len(blocks),
        len(columns),
    )
    return result


# ── Document-level extraction ──────────────────────────────────────────


async def extract_structured_text(
    document: Any,
    max_chars_per_page: int = DEFAULT_MAX_CHARS,
    cfg: ExtractionConfig | None = None,
    *,
    stage_log: List[Dict[str, StageResult]] | None = None,
) -> List[PageResult]:
    """Extract structured text from every page of an open document.

    Pages are processed sequentially in page order.  Each page's text layer
    is read in a worker thread (pdfplumber is synchronous) and awaited before
    the next page starts.  An error on any page propagates and aborts the
    whole document.

    Parameters
    ----------
    document : pdfplumber.PDF
        Open document; anything with a ``pages`` sequence of
        pdfplumber-like pages.
    max_chars_per_page : int
        Character budget per page text.
    cfg : ExtractionConfig, optional
    stage_log : list, optional
        Receives one ``{stage: StageResult}`` dict per page.

    Returns
    -------
    list[PageResult]
        One result per page, numbered from 1.
    """
    _check_max_chars(max_chars_per_page)
    if cfg is None:
        cfg = ExtractionConfig()

    results: List[PageResult] = []
    for index, page in enumerate(document.pages):
        runs, styles = await asyncio.to_thread(read_page_runs, page, cfg)
        stages: Dict[str, StageResult] = {}
        results.append(
            extract_page(runs, styles, index + 1, max_chars_per_page, cfg, stages)
        )
        if stage_log is not None:
            stage_log.append(stages)
    return results


# ── Document-level result ──────────────────────────────────────────────


@dataclass
class DocumentResult:
    """Aggregated result for a multi-page document run."""

    pdf_path: Optional[Path] = None
    meta: Optional[PdfMeta] = None
    pages: List[PageResult] = field(default_factory=list)
    stages: List[Dict[str, StageResult]] = field(default_factory=list)
    config: Optional[ExtractionConfig] = None

    def total_chunks(self) -> int:
        """Total chunks across all pages."""
        return sum(len(pr.chunks) for pr in self.pages)

    def to_summary_dict(self) -> Dict[str, Any]:
        """Serialize document result to a summary dict."""
        pages = []
        for i, pr in enumerate(self.pages):
            by_type: Dict[str, int] = {}
            for c in pr.chunks:
                by_type[c.type] = by_type.get(c.type, 0) + 1
            entry: Dict[str, Any] = {
                "page": pr.page,
                "chars": len(pr.text),
                "chunks": by_type,
                "stats": pr.stats.to_dict(),
            }
            if i < len(self.stages):
                entry["stages"] = {n: sr.to_dict() for n, sr in self.stages[i].items()}
            pages.append(entry)
        return {
            "pdf": str(self.pdf_path) if self.pdf_path else None,
            "meta": self.meta.to_dict() if self.meta else None,
            "pages_processed": len(self.pages),
            "total_chunks": self.total_chunks(),
            "pages": pages,
        }


def run_document(
    pdf_path: Path | str,
    max_chars_per_page: int = DEFAULT_MAX_CHARS,
    cfg: ExtractionConfig | None = None,
) -> DocumentResult:
    """Ingest a PDF file and extract structured text from all pages.

    Must be called outside a running event loop (it drives
    :func:`extract_structured_text` with :func:`asyncio.run`).

    Raises
    ------
    IngestError
        When the file fails validation or cannot be opened.
    """
    if cfg is None:
        cfg = ExtractionConfig()
    pdf_path = Path(pdf_path)

    meta = ingest_pdf(pdf_path)
    dr = DocumentResult(pdf_path=pdf_path, meta=meta, config=cfg)

    with pdfplumber.open(pdf_path) as pdf:
        dr.pages = asyncio.run(
            extract_structured_text(
                pdf, max_chars_per_page, cfg, stage_log=dr.stages
            )
        )

    logger.info(
        "run_document %s: %d pages, %d chunks",
        pdf_path.name,
        len(dr.pages),
        dr.total_chunks(),
    )
    return dr
