"""Font-name resolution for the pdfplumber text layer.

Maps PDF-internal font names (e.g. ``BCDFEE+ArialMT-Bold``,
``TimesNewRomanPS-ItalicMT``) to a :class:`~pdf2deck.models.FontStyle`
carrying a readable family name and a generic CSS-style family, so the
downstream slide renderer can pick a comparable face.

Public API
----------
* ``strip_subset_prefix(fontname)`` – remove 6-letter ``+`` prefix
* ``resolve_font_style(fontname)`` – full mapping to a ``FontStyle``
* ``build_style_map(fontnames)`` – resolve every distinct name once
"""

from __future__ import annotations

import re
from typing import Dict, Iterable

from ..models import FontStyle

# ---------------------------------------------------------------------------
# Subset-prefix stripping
# ---------------------------------------------------------------------------

_SUBSET_RE = re.compile(r"^[A-Z]{6}\+")

# Family name ends at the first style separator.
_FAMILY_SPLIT_RE = re.compile(r"[-,]")


def strip_subset_prefix(fontname: str) -> str:
    """Remove a 6-uppercase-letter subset prefix (e.g. ``BCDFEE+``)."""
    return _SUBSET_RE.sub("", fontname)


# ---------------------------------------------------------------------------
# Family name → generic family
# ---------------------------------------------------------------------------

# Checked in order; first substring match wins.
# Each entry: (substring_to_match_lowercased, generic_family)
_GENERIC_MAP: list[tuple[str, str]] = [
    ("courier", "monospace"),
    ("mono", "monospace"),
    ("consolas", "monospace"),
    ("menlo", "monospace"),
    ("inconsolata", "monospace"),
    ("sans", "sans-serif"),
    ("arial", "sans-serif"),
    ("helvetica", "sans-serif"),
    ("calibri", "sans-serif"),
    ("verdana", "sans-serif"),
    ("tahoma", "sans-serif"),
    ("trebuchet", "sans-serif"),
    ("segoe", "sans-serif"),
    ("roboto", "sans-serif"),
    ("times", "serif"),
    ("georgia", "serif"),
    ("cambria", "serif"),
    ("garamond", "serif"),
    ("palatino", "serif"),
    ("minion", "serif"),
    ("serif", "serif"),
]

_DEFAULT_GENERIC = "sans-serif"


def resolve_font_style(fontname: str) -> FontStyle:
    """Map a PDF ``fontname`` to a :class:`FontStyle`.

    Resolution order:
    1. Strip optional subset prefix (``BCDFEE+``).
    2. Take the family as the part before the first ``-`` or ``,``.
    3. Substring-match the family against ``_GENERIC_MAP``.
    4. Fall back to ``sans-serif``.
    """
    if not fontname:
        return FontStyle(font_family="", generic=_DEFAULT_GENERIC)

    clean = strip_subset_prefix(fontname)
    family = _FAMILY_SPLIT_RE.split(clean, maxsplit=1)[0].strip()
    lower = family.lower()

    generic = _DEFAULT_GENERIC
    for substr, gen in _GENERIC_MAP:
        if substr in lower:
            generic = gen
            break

    return FontStyle(font_family=family, generic=generic)


def build_style_map(fontnames: Iterable[str]) -> Dict[str, FontStyle]:
    """Resolve each distinct non-empty font name once."""
    styles: Dict[str, FontStyle] = {}
    for name in fontnames:
        if name and name not in styles:
            styles[name] = resolve_font_style(name)
    return styles
