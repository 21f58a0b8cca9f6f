"""Geometric grouping: spans → lines → line blocks → columns.

Public API
----------
- :func:`group_lines` — cluster spans into visual lines, cut at gutters
- :func:`build_line_block` / :func:`build_line_blocks` — aggregate lines
- :func:`resolve_columns` / :func:`reading_order` — column detection
"""

from .blocks import build_line_block, build_line_blocks
from .columns import reading_order, resolve_columns
from .lines import (
    group_lines,
    line_tolerance,
    median_word_gap,
    split_bimodal_line,
    split_wide_line,
)

__all__ = [
    "group_lines",
    "line_tolerance",
    "split_bimodal_line",
    "median_word_gap",
    "split_wide_line",
    "build_line_block",
    "build_line_blocks",
    "resolve_columns",
    "reading_order",
]
