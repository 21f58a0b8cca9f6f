from .csv_export import export_chunks_csv
from .overlay import draw_page_overlay
from .page_data import (
    deserialize_pages,
    read_pages_json,
    serialize_pages,
    write_pages_json,
)

__all__ = [
    "deserialize_pages",
    "draw_page_overlay",
    "export_chunks_csv",
    "read_pages_json",
    "serialize_pages",
    "write_pages_json",
]
