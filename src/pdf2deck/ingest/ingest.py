"""Ingest stage — PDF file validation, page metadata, and page images.

Centralises PDF opening, file validation, page-dimension extraction, and
page rendering so that downstream stages and the CLI never call
``.to_image()`` directly.

Public API
----------
- :func:`ingest_pdf` — open + validate a PDF, return a :class:`PdfMeta`
- :func:`render_page_image` — render one page to a PIL Image at a given DPI
- :func:`pdf_to_images` — every page as a PNG data URL, width-capped
- :class:`PdfMeta` — lightweight PDF-level metadata container
- :class:`PageInfo` — per-page dimensions
- :class:`PageImage` — one rendered page
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pdfplumber
from PIL import Image

log = logging.getLogger(__name__)

# pdfplumber renders at 72 DPI for scale 1.0.
_BASE_DPI = 72.0


# ---------------------------------------------------------------------------
# Data containers
# ---------------------------------------------------------------------------


@dataclass
class PageInfo:
    """Dimension metadata for a single PDF page."""

    index: int  # zero-based page number
    width: float  # points
    height: float  # points

    def to_dict(self) -> dict:
        """Serialize page info to a JSON-compatible dict."""
        return {
            "index": self.index,
            "width": round(self.width, 3),
            "height": round(self.height, 3),
        }


@dataclass
class PdfMeta:
    """PDF-level metadata returned by :func:`ingest_pdf`.

    This is a lightweight descriptor; it does **not** hold the
    ``pdfplumber.PDF`` handle open.
    """

    path: Path
    num_pages: int
    pages: List[PageInfo] = field(default_factory=list)
    file_size_bytes: int = 0
    pdf_metadata: dict = field(default_factory=dict)  # PDF info dict

    def page(self, index: int) -> PageInfo:
        """Return :class:`PageInfo` for *index* (zero-based)."""
        return self.pages[index]

    def to_dict(self) -> dict:
        """Serialize PDF metadata to a JSON-compatible dict."""
        d: dict = {
            "path": str(self.path),
            "num_pages": self.num_pages,
            "file_size_bytes": self.file_size_bytes,
        }
        if self.pdf_metadata:
            d["pdf_metadata"] = self.pdf_metadata
        d["pages"] = [p.to_dict() for p in self.pages]
        return d


@dataclass
class PageImage:
    """A rendered page ready for an image-analysis consumer."""

    page: int  # 1-based
    width: int  # pixels
    height: int  # pixels
    data_url: str

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "width": self.width,
            "height": self.height,
            "data_url": self.data_url,
        }


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


class IngestError(Exception):
    """Raised when a PDF cannot be ingested."""


def _validate_pdf_path(pdf_path: Path) -> None:
    """Raise :class:`IngestError` for missing / empty / wrong-extension files."""
    if not pdf_path.exists():
        raise IngestError(f"File not found: {pdf_path}")
    if not pdf_path.is_file():
        raise IngestError(f"Not a file: {pdf_path}")
    if pdf_path.stat().st_size == 0:
        raise IngestError(f"Empty file: {pdf_path}")
    if pdf_path.suffix.lower() != ".pdf":
        raise IngestError(f"Not a PDF (suffix={pdf_path.suffix!r}): {pdf_path}")


def _coerce_metadata(raw_meta: dict) -> dict:
    """Coerce a PDF info dict to plain ``str -> str`` (values may be bytes)."""
    out = {}
    for k, v in raw_meta.items():
        if isinstance(v, bytes):
            v = v.decode("utf-8", errors="replace")
        out[str(k)] = str(v) if v is not None else ""
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def ingest_pdf(pdf_path: Path | str) -> PdfMeta:
    """Open and validate a PDF, returning a :class:`PdfMeta` descriptor.

    Performs:

    1. Path validation (exists, non-empty, ``.pdf`` extension).
    2. Open with pdfplumber; refuse encrypted documents.
    3. Read page count, per-page dimensions and the PDF info dict.

    The PDF file handle is **closed** before returning.

    Parameters
    ----------
    pdf_path : Path or str
        Path to the PDF file.

    Returns
    -------
    PdfMeta

    Raises
    ------
    IngestError
        When the file is missing, empty, encrypted, or cannot be opened.
    """
    pdf_path = Path(pdf_path)
    _validate_pdf_path(pdf_path)

    try:
        with pdfplumber.open(pdf_path) as pdf:
            # pdfminer sets is_extractable = False on protected documents.
            if hasattr(pdf, "doc") and hasattr(pdf.doc, "is_extractable"):
                if not pdf.doc.is_extractable:
                    raise IngestError(
                        f"PDF is password-protected or encrypted "
                        f"(text extraction not permitted): {pdf_path}"
                    )

            pages = [
                PageInfo(index=i, width=float(pg.width), height=float(pg.height))
                for i, pg in enumerate(pdf.pages)
            ]
            pdf_metadata = _coerce_metadata(pdf.metadata or {})
    except IngestError:
        raise
    except Exception as exc:
        raise IngestError(f"Cannot open PDF: {exc}") from exc

    file_size = pdf_path.stat().st_size
    meta = PdfMeta(
        path=pdf_path.resolve(),
        num_pages=len(pages),
        pages=pages,
        file_size_bytes=file_size,
        pdf_metadata=pdf_metadata,
    )
    log.info(
        "Ingested %s: %d pages, %.1f KB",
        pdf_path.name,
        meta.num_pages,
        file_size / 1024,
    )
    return meta


def _page_to_rgb(page, resolution: float) -> Image.Image:
    img = page.to_image(resolution=resolution).original.copy()
    # pdfplumber may return RGBA or P images.
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def render_page_image(
    pdf_path: Path | str,
    page_num: int,
    resolution: int = 200,
) -> Image.Image:
    """Render a single PDF page to a PIL Image at *resolution* DPI.

    Parameters
    ----------
    pdf_path : Path or str
        Path to the PDF.
    page_num : int
        Zero-based page index.
    resolution : int
        Render resolution in DPI.

    Returns
    -------
    PIL.Image.Image
        RGB image of the rendered page.
    """
    with pdfplumber.open(pdf_path) as pdf:
        return _page_to_rgb(pdf.pages[page_num], resolution)


def page_scale(page_width: float, max_width: int, max_scale: float = 2.0) -> float:
    """Scale that fits *page_width* into *max_width*, capped at *max_scale*."""
    if page_width <= 0:
        return max_scale
    return min(max_width / page_width, max_scale)


def image_to_data_url(img: Image.Image) -> str:
    """Encode *img* as a ``data:image/png;base64,...`` URL."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def pdf_to_images(
    pdf_path: Path | str,
    max_width: int = 1024,
    max_scale: float = 2.0,
) -> List[PageImage]:
    """Render every page to a PNG data URL no wider than *max_width*.

    Each page is rendered at ``scale = min(max_width / page_width, max_scale)``
    (pdfplumber resolution ``72 × scale``).

    Raises
    ------
    ValueError
        When *max_width* is not positive.
    """
    if max_width <= 0:
        raise ValueError(f"max_width must be > 0, got {max_width}")

    images: List[PageImage] = []
    with pdfplumber.open(pdf_path) as pdf:
        for index, page in enumerate(pdf.pages):
            scale = page_scale(float(page.width), max_width, max_scale)
            img = _page_to_rgb(page, _BASE_DPI * scale)
            images.append(
                PageImage(
                    page=index + 1,
                    width=img.width,
                    height=img.height,
                    data_url=image_to_data_url(img),
                )
            )
    log.info("Rendered %d page images from %s", len(images), Path(pdf_path).name)
    return images
