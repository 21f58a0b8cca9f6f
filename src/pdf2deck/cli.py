"""Command-line entry point.

Usage::

    pdf2deck input.pdf --out pages.json --csv chunks.csv --overlay-dir overlays/
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigValidationError, ExtractionConfig, load_config
from .export import draw_page_overlay, export_chunks_csv, write_pages_json
from .ingest import IngestError, page_scale, pdf_to_images, render_page_image
from .pipeline import DEFAULT_MAX_CHARS, DocumentResult, run_document

log = logging.getLogger("pdf2deck.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf2deck",
        description="Extract structured, reading-ordered text from a PDF",
    )
    parser.add_argument("pdf", type=Path, help="Path to PDF")
    parser.add_argument(
        "--max-chars",
        type=int,
        default=DEFAULT_MAX_CHARS,
        help=f"Character budget per page text (default {DEFAULT_MAX_CHARS})",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with ExtractionConfig overrides",
    )
    parser.add_argument(
        "--out", type=Path, default=None, help="Write page results as JSON"
    )
    parser.add_argument(
        "--csv", type=Path, default=None, help="Write one CSV row per chunk"
    )
    parser.add_argument(
        "--overlay-dir",
        type=Path,
        default=None,
        help="Write a chunk/column overlay PNG per page",
    )
    parser.add_argument(
        "--images-dir",
        type=Path,
        default=None,
        help="Write a data-URL JSON of every rendered page",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def _write_overlays(dr: DocumentResult, out_dir: Path, cfg: ExtractionConfig) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    for pr in dr.pages:
        info = dr.meta.page(pr.page - 1)
        scale = page_scale(info.width, cfg.render_max_width, cfg.render_max_scale)
        background = render_page_image(
            dr.pdf_path, info.index, resolution=int(72 * scale)
        )
        draw_page_overlay(
            pr,
            info.width,
            info.height,
            out_dir / f"page_{pr.page}_overlay.png",
            scale=scale,
            background=background,
            cfg=cfg,
        )


def _write_images(pdf: Path, out_dir: Path, cfg: ExtractionConfig) -> Path:
    images = pdf_to_images(pdf, cfg.render_max_width, cfg.render_max_scale)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"{pdf.stem}_images.json"
    out_path.write_text(
        json.dumps([img.to_dict() for img in images]), encoding="utf-8"
    )
    return out_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_chars < 0:
        parser.error("--max-chars must be >= 0")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config) if args.config else ExtractionConfig()
        dr = run_document(args.pdf, args.max_chars, cfg)
    except (IngestError, ConfigValidationError) as exc:
        log.error("%s", exc)
        return 1

    if args.out:
        write_pages_json(dr.pages, args.out)
        log.info("Wrote %s", args.out)
    if args.csv:
        export_chunks_csv(dr.pages, args.csv)
        log.info("Wrote %s", args.csv)
    if args.overlay_dir:
        _write_overlays(dr, args.overlay_dir, cfg)
        log.info("Wrote %d overlays to %s", len(dr.pages), args.overlay_dir)
    if args.images_dir:
        path = _write_images(args.pdf, args.images_dir, cfg)
        log.info("Wrote %s", path)

    json.dump(dr.to_summary_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
