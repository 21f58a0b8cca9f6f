"""Serialization helpers for extracted page results.

``serialize_pages`` converts a list of :class:`~pdf2deck.models.PageResult`
into a JSON-friendly dict; ``deserialize_pages`` rebuilds the results from
that dict.  Coordinates are rounded on the way out, so a reloaded result
equals the original up to that rounding.

JSON layout
-----------
::

    {
      "version": 1,
      "pages": [ {PageResult.to_dict()}, ... ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

from ..models import PageResult

FORMAT_VERSION = 1

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def serialize_pages(results: List[PageResult]) -> dict[str, Any]:
    """Serialize page results to a JSON-friendly dict."""
    return {
        "version": FORMAT_VERSION,
        "pages": [r.to_dict() for r in results],
    }


def deserialize_pages(data: dict[str, Any]) -> List[PageResult]:
    """Rebuild page results from a dict produced by :func:`serialize_pages`.

    Raises
    ------
    ValueError
        When the payload carries an unsupported ``version``.
    """
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported page data version: {version}")
    return [PageResult.from_dict(p) for p in data.get("pages", [])]


def write_pages_json(results: List[PageResult], out_path: Path | str) -> Path:
    """Write page results to *out_path* as indented UTF-8 JSON."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(
        json.dumps(serialize_pages(results), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return out_path


def read_pages_json(path: Path | str) -> List[PageResult]:
    """Load page results written by :func:`write_pages_json`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return deserialize_pages(data)
