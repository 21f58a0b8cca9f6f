"""CSV export of classified chunks.

One row per chunk, in reading order within each page::

    from pdf2deck.export import export_chunks_csv
    export_chunks_csv(results, Path("out/chunks.csv"))
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, List

from ..models import BBox, PageResult

CHUNK_FIELDS = [
    "page",
    "order",
    "type",
    "text",
    "font_size",
    "font_family",
    "bold",
    "italic",
    "bbox",
]


def _safe_str(val: Any) -> str:
    """Convert to string, handling None gracefully."""
    if val is None:
        return ""
    return str(val)


def _bbox_str(bbox: BBox | None) -> str:
    """Format a bbox as a compact ``(x, y, w, h)`` string."""
    if bbox is None:
        return ""
    return f"({bbox.x:.1f}, {bbox.y:.1f}, {bbox.width:.1f}, {bbox.height:.1f})"


def export_chunks_csv(results: List[PageResult], out_path: Path | str) -> Path:
    """Write every chunk of every page to *out_path* (overwrites).

    The header row is always written, even when there are no chunks.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    rows = []
    for pr in results:
        for order, chunk in enumerate(pr.chunks):
            rows.append(
                {
                    "page": pr.page,
                    "order": order,
                    "type": chunk.type,
                    "text": chunk.text,
                    "font_size": f"{chunk.font.size:.2f}",
                    "font_family": _safe_str(chunk.font.family),
                    "bold": chunk.font.bold,
                    "italic": chunk.font.italic,
                    "bbox": _bbox_str(chunk.bbox),
                }
            )

    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CHUNK_FIELDS)
        writer.writeheader()
        writer.writerows(rows)

    return out_path
