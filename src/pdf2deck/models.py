from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Literal, Optional, Tuple

ChunkType = Literal["heading", "list", "paragraph"]

# Decimal places kept when serialising coordinates.
_COORD_DIGITS = 2


def _r(value: float) -> float:
    return round(float(value), _COORD_DIGITS)


@dataclass
class TextRun:
    """One raw glyph run as reported by the rasterizer for a page.

    ``transform`` is the six-element text matrix ``(a, b, c, d, e, f)``;
    ``e``/``f`` carry the run origin and ``a``/``d`` its scale.  Width and
    height are optional because not every source exposes them.
    """

    text: str
    transform: Tuple[float, float, float, float, float, float] = (
        1.0,
        0.0,
        0.0,
        1.0,
        0.0,
        0.0,
    )
    width: Optional[float] = None
    height: Optional[float] = None
    font_name: Optional[str] = None


@dataclass
class FontStyle:
    """Style descriptor a run's font-name key resolves to."""

    font_family: str = ""
    generic: str = "sans-serif"  # "serif" | "sans-serif" | "monospace"


@dataclass
class BBox:
    """Axis-aligned box in page units; ``y`` is the bottom edge (y grows upward)."""

    x: float
    y: float
    width: float
    height: float

    def right(self) -> float:
        return self.x + self.width

    def top(self) -> float:
        return self.y + self.height

    def mid_x(self) -> float:
        """Horizontal midpoint."""
        return self.x + self.width / 2.0

    def contains(self, other: "BBox", eps: float = 1e-6) -> bool:
        """True when *other* lies entirely inside this box."""
        return (
            other.x >= self.x - eps
            and other.y >= self.y - eps
            and other.right() <= self.right() + eps
            and other.top() <= self.top() + eps
        )

    @classmethod
    def union(cls, boxes: Iterable["BBox"]) -> "BBox":
        """Min/max envelope of *boxes*; a zero box when there are none."""
        boxes = list(boxes)
        if not boxes:
            return cls(0.0, 0.0, 0.0, 0.0)
        x0 = min(b.x for b in boxes)
        y0 = min(b.y for b in boxes)
        x1 = max(b.right() for b in boxes)
        y1 = max(b.top() for b in boxes)
        return cls(x0, y0, x1 - x0, y1 - y0)

    def to_dict(self) -> dict:
        return {
            "x": _r(self.x),
            "y": _r(self.y),
            "width": _r(self.width),
            "height": _r(self.height),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BBox":
        return cls(
            x=d.get("x", 0.0),
            y=d.get("y", 0.0),
            width=d.get("width", 0.0),
            height=d.get("height", 0.0),
        )


@dataclass
class Span:
    """A normalised, positioned glyph run on one page."""

    text: str
    x: float
    y: float
    width: float
    height: float
    font_size: float
    font_name: Optional[str] = None
    font_family: Optional[str] = None

    @property
    def baseline_y(self) -> float:
        """Vertical anchor used for line grouping."""
        return self.y + max(self.height, self.font_size)

    def right(self) -> float:
        return self.x + self.width

    def bbox(self) -> BBox:
        return BBox(self.x, self.y, self.width, self.height)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict (coordinates rounded)."""
        return {
            "text": self.text,
            "x": _r(self.x),
            "y": _r(self.y),
            "width": _r(self.width),
            "height": _r(self.height),
            "font_size": _r(self.font_size),
            "font_name": self.font_name,
            "font_family": self.font_family,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Span":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            text=d["text"],
            x=d["x"],
            y=d["y"],
            width=d.get("width", 0.0),
            height=d.get("height", 0.0),
            font_size=d.get("font_size", 0.0),
            font_name=d.get("font_name"),
            font_family=d.get("font_family"),
        )


# A visual line: spans judged to share one baseline (unordered).
Line = List[Span]


@dataclass
class LineBlock:
    """Aggregated text and typography for one visual line."""

    text: str
    font_size: float
    bbox: BBox
    font_family: Optional[str] = None
    bold: bool = False
    italic: bool = False
    spans: List[Span] = field(default_factory=list)


@dataclass
class FontInfo:
    size: float
    family: Optional[str] = None
    bold: bool = False
    italic: bool = False

    def to_dict(self) -> dict:
        return {
            "size": _r(self.size),
            "family": self.family,
            "bold": self.bold,
            "italic": self.italic,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "FontInfo":
        return cls(
            size=d.get("size", 0.0),
            family=d.get("family"),
            bold=d.get("bold", False),
            italic=d.get("italic", False),
        )


@dataclass
class Chunk:
    """A line block labelled with its structural role."""

    type: ChunkType
    text: str
    bbox: BBox
    font: FontInfo
    spans: List[Span] = field(default_factory=list)

    @classmethod
    def from_block(cls, block: LineBlock, chunk_type: ChunkType) -> "Chunk":
        return cls(
            type=chunk_type,
            text=block.text,
            bbox=block.bbox,
            font=FontInfo(
                size=block.font_size,
                family=block.font_family,
                bold=block.bold,
                italic=block.italic,
            ),
            spans=list(block.spans),
        )

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "type": self.type,
            "text": self.text,
            "bbox": self.bbox.to_dict(),
            "font": self.font.to_dict(),
            "spans": [s.to_dict() for s in self.spans],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Chunk":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            type=d["type"],
            text=d.get("text", ""),
            bbox=BBox.from_dict(d.get("bbox", {})),
            font=FontInfo.from_dict(d.get("font", {})),
            spans=[Span.from_dict(s) for s in d.get("spans", [])],
        )


@dataclass
class Column:
    """A horizontal cluster of line blocks read top to bottom."""

    x: float
    w: float
    lines: List[LineBlock] = field(default_factory=list)

    def right(self) -> float:
        return self.x + self.w


@dataclass(frozen=True)
class PageStats:
    """Per-page typography and layout summary."""

    max_font: float = 0.0
    median_font: float = 0.0
    line_count: int = 0
    columns: int = 0
    # One (x, w) pair per column, left to right.
    column_boundaries: Tuple[Tuple[float, float], ...] = ()

    def to_dict(self) -> dict:
        return {
            "max_font": _r(self.max_font),
            "median_font": _r(self.median_font),
            "line_count": self.line_count,
            "columns": self.columns,
            "column_boundaries": [
                {"x": _r(x), "w": _r(w)} for x, w in self.column_boundaries
            ],
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PageStats":
        return cls(
            max_font=d.get("max_font", 0.0),
            median_font=d.get("median_font", 0.0),
            line_count=d.get("line_count", 0),
            columns=d.get("columns", 0),
            column_boundaries=tuple(
                (b["x"], b["w"]) for b in d.get("column_boundaries", [])
            ),
        )


@dataclass(frozen=True)
class PageResult:
    """Structured text for one page: chunks in reading order plus stats."""

    page: int
    text: str = ""
    chunks: List[Chunk] = field(default_factory=list)
    stats: PageStats = field(default_factory=PageStats)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "page": self.page,
            "text": self.text,
            "chunks": [c.to_dict() for c in self.chunks],
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PageResult":
        """Deserialize from a dict produced by :meth:`to_dict`."""
        return cls(
            page=d["page"],
            text=d.get("text", ""),
            chunks=[Chunk.from_dict(c) for c in d.get("chunks", [])],
            stats=PageStats.from_dict(d.get("stats", {})),
        )
