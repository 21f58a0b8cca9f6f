from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path


class ConfigValidationError(ValueError):
    """Raised when an ExtractionConfig field has an invalid value."""


def _check_range(
    name: str, value: float, lo: float, hi: float, *, inclusive: bool = True
) -> None:
    if inclusive:
        if not (lo <= value <= hi):
            raise ConfigValidationError(f"{name}={value} out of range [{lo}, {hi}]")
    else:
        if not (lo < value < hi):
            raise ConfigValidationError(f"{name}={value} out of range ({lo}, {hi})")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name}={value} must be > 0")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ConfigValidationError(f"{name}={value} must be >= 0")


@dataclass
class ExtractionConfig:
    """Tunables for page text-structure extraction."""

    # ── Span normalisation ────────────────────────────────────────────
    # Estimated glyph advance as a fraction of font size (width fallback).
    char_width_factor: float = 0.6
    # Font size used when no positive size candidate exists on a run.
    fallback_font_size: float = 1.0

    # ── Line grouping ─────────────────────────────────────────────────
    # Vertical tolerance = median text height × this, clamped below.
    line_tolerance_mult: float = 0.35
    line_tolerance_min: float = 1.2
    line_tolerance_max: float = 4.5
    # Baseline jitter (fraction of tolerance) that triggers a tolerance bump.
    jitter_ratio: float = 0.5
    # Max font-size ratio between a span and the line it joins.
    font_ratio_max: float = 1.6
    # A line whose baseline range exceeds
    # max(split_tolerance_mult × tol, split_font_mult × median font) is re-split.
    split_tolerance_mult: float = 1.5
    split_font_mult: float = 0.65
    # Iteration cap for the two-cluster baseline k-means.
    kmeans_max_iter: int = 20
    # A line is cut at horizontal gaps wider than
    # max(span_gap_min, min(span_gap_mult × word gap, span_gap_font_mult × median font)).
    # The page word gap is the median of gaps below the word_gap_percentile cutoff.
    word_gap_percentile: float = 0.9
    span_gap_mult: float = 8.0
    span_gap_font_mult: float = 2.5
    span_gap_min: float = 12.0

    # ── Block building ────────────────────────────────────────────────
    # Insert a space when the gap exceeds max(space_gap_min, size × mult).
    space_gap_min: float = 1.5
    space_gap_font_mult: float = 0.2

    # ── Structure classification ──────────────────────────────────────
    heading_max_chars: int = 120
    # Heading when size >= max(max_ratio × page max, median_ratio × page median).
    heading_max_font_ratio: float = 0.9
    heading_median_font_ratio: float = 1.35
    # Used instead when the page max font is unknown.
    heading_fallback_ratio: float = 1.5

    # ── Columns ───────────────────────────────────────────────────────
    # Gutter = max(gutter_min, min(page_ratio × page width, width_ratio × median block width)).
    gutter_min: float = 12.0
    gutter_page_ratio: float = 0.12
    gutter_width_ratio: float = 0.8
    # Columns narrower than max(min, page_ratio × page width) merge into a neighbour.
    narrow_column_min: float = 40.0
    narrow_column_page_ratio: float = 0.08

    # ── Text extraction (pdfplumber) ──────────────────────────────────
    # extract_words() tolerances (pts).
    tocr_x_tolerance: float = 3.0
    tocr_y_tolerance: float = 3.0
    # Keep blank chars inside words (fixed-width forms).
    tocr_keep_blank_chars: bool = False
    # Preserve the PDF's internal text flow instead of spatial sort.
    tocr_use_text_flow: bool = False

    # ── Page rendering ────────────────────────────────────────────────
    render_max_width: int = 1024
    render_max_scale: float = 2.0

    # ── Overlay ───────────────────────────────────────────────────────
    overlay_label_font_base: int = 10
    overlay_label_font_floor: int = 8
    overlay_block_outline_width: int = 2
    overlay_column_fill_alpha: int = 40

    def __post_init__(self) -> None:
        """Validate field ranges to catch misconfiguration early."""
        _unit = [
            "heading_max_font_ratio",
            "gutter_page_ratio",
            "narrow_column_page_ratio",
            "jitter_ratio",
            "word_gap_percentile",
        ]
        for name in _unit:
            _check_range(name, getattr(self, name), 0.0, 1.0)

        _pos_floats = [
            "char_width_factor",
            "fallback_font_size",
            "line_tolerance_mult",
            "line_tolerance_min",
            "line_tolerance_max",
            "split_tolerance_mult",
            "split_font_mult",
            "span_gap_mult",
            "span_gap_font_mult",
            "heading_median_font_ratio",
            "heading_fallback_ratio",
            "gutter_width_ratio",
            "tocr_x_tolerance",
            "tocr_y_tolerance",
            "render_max_scale",
        ]
        for name in _pos_floats:
            _check_positive(name, getattr(self, name))

        _nn_floats = [
            "space_gap_min",
            "span_gap_min",
            "space_gap_font_mult",
            "gutter_min",
            "narrow_column_min",
        ]
        for name in _nn_floats:
            _check_non_negative(name, getattr(self, name))

        _pos_ints = [
            "kmeans_max_iter",
            "heading_max_chars",
            "render_max_width",
            "overlay_label_font_base",
            "overlay_label_font_floor",
            "overlay_block_outline_width",
        ]
        for name in _pos_ints:
            val = getattr(self, name)
            if val < 1:
                raise ConfigValidationError(f"{name}={val} must be >= 1")

        if self.font_ratio_max < 1.0:
            raise ConfigValidationError(
                f"font_ratio_max={self.font_ratio_max} must be >= 1"
            )

        if self.line_tolerance_min > self.line_tolerance_max:
            raise ConfigValidationError(
                f"line_tolerance_min ({self.line_tolerance_min}) must be <= "
                f"line_tolerance_max ({self.line_tolerance_max})"
            )

        if not (0 <= self.overlay_column_fill_alpha <= 255):
            raise ConfigValidationError(
                f"overlay_column_fill_alpha={self.overlay_column_fill_alpha} "
                f"out of range [0, 255]"
            )


def load_config(path: Path | str) -> ExtractionConfig:
    """Build an :class:`ExtractionConfig` from a JSON file of overrides.

    The file must hold a single JSON object whose keys are field names.
    Unknown keys are rejected rather than silently ignored.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigValidationError(f"Cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config {path} must contain a JSON object")

    known = {f.name for f in fields(ExtractionConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigValidationError(f"Unknown config keys: {', '.join(unknown)}")
    return ExtractionConfig(**data)
