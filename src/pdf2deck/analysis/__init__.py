"""Structure analysis: heading / list / paragraph classification."""

from .structure import classify_block, classify_blocks, is_list_item, page_font_stats

__all__ = [
    "classify_block",
    "classify_blocks",
    "is_list_item",
    "page_font_stats",
]
