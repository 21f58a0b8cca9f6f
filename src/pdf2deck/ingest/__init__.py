"""Ingest stage — PDF file validation, metadata, and rendering.

Public API
----------
- :func:`ingest_pdf` — open + validate a PDF, return :class:`PdfMeta`
- :func:`render_page_image` — render one page to PIL Image at a given DPI
- :func:`pdf_to_images` — every page as a PNG data URL
- :class:`PdfMeta` — PDF-level metadata container
- :class:`PageInfo` — per-page dimensions
- :class:`PageImage` — one rendered page
- :class:`IngestError` — raised on validation failures
"""

from .ingest import (
    IngestError,
    PageImage,
    PageInfo,
    PdfMeta,
    image_to_data_url,
    ingest_pdf,
    page_scale,
    pdf_to_images,
    render_page_image,
)

__all__ = [
    "IngestError",
    "PageImage",
    "PageInfo",
    "PdfMeta",
    "image_to_data_url",
    "ingest_pdf",
    "page_scale",
    "pdf_to_images",
    "render_page_image",
]
