"""Integration tests: raw runs and real PDFs through the whole pipeline.

The synthetic case needs no PDF at all: hand-built runs mimic a slide with a
title, body copy, a numbered list and a two-column comparison underneath.
The PDF cases build a small deck with reportlab and run it end to end
through ingest, pdfplumber extraction and export.
"""

import json

import pytest
from conftest import make_run

from pdf2deck.export import export_chunks_csv, read_pages_json, write_pages_json
from pdf2deck.pipeline import extract_page, run_document
from pdf2deck.tocr import build_style_map

# ── Synthetic page layout ─────────────────────────────────────────────


def _build_synthetic_runs():
    """Return runs for a 720-wide slide.

    Layout (y grows upward):
        Titles  (y 500):      "Market Overview" / "Hosted Plans", 28 pt bold
        Columns (y 440–380):  left x 40..320, right x 400..680
                              rows on y 440/420/400/380 in both columns

    Both titles and every pair of rows share a baseline, so only the
    horizontal gutter keeps the columns apart.
    """
    runs = [
        make_run("Market", 40, 500, size=28, width=110, font_name="ABCDEF+Arial-BoldMT"),
        make_run("Overview", 160, 500, size=28, width=140, font_name="ABCDEF+Arial-BoldMT"),
        make_run("Hosted", 420, 500, size=28, width=100, font_name="ABCDEF+Arial-BoldMT"),
        make_run("Plans", 530, 500, size=28, width=130, font_name="ABCDEF+Arial-BoldMT"),
    ]
    left = [
        ("Strengths", "Brand", "recognition"),
        ("1.", "Loyal", "customers"),
        ("2.", "Strong", "margins"),
        ("Low", "churn", "overall"),
    ]
    right = [
        ("Risks", "New", "entrants"),
        ("•", "Price", "pressure"),
        ("•", "Supply", "delays"),
        ("Rising", "input", "costs"),
    ]
    for row, words in enumerate(left):
        y = 440 - 20 * row
        runs.append(make_run(words[0], 40, y, width=70, font_name="ArialMT"))
        runs.append(make_run(words[1], 115, y, width=80, font_name="ArialMT"))
        runs.append(make_run(words[2], 200, y, width=120, font_name="ArialMT"))
    for row, words in enumerate(right):
        y = 440 - 20 * row
        runs.append(make_run(words[0], 400, y, width=70, font_name="ArialMT"))
        runs.append(make_run(words[1], 475, y, width=80, font_name="ArialMT"))
        runs.append(make_run(words[2], 560, y, width=120, font_name="ArialMT"))
    return runs


class TestSyntheticSlide:
    @pytest.fixture
    def result(self):
        runs = _build_synthetic_runs()
        styles = build_style_map(r.font_name for r in runs)
        return extract_page(runs, styles, page=1)

    def test_two_columns(self, result):
        assert result.stats.columns == 2
        (lx, lw), (rx, rw) = result.stats.column_boundaries
        assert lx == 40
        assert rx == 400
        assert lx + lw < rx

    def test_reading_order(self, result):
        assert [c.text for c in result.chunks] == [
            "Market Overview",
            "Strengths Brand recognition",
            "1. Loyal customers",
            "2. Strong margins",
            "Low churn overall",
            "Hosted Plans",
            "Risks New entrants",
            "• Price pressure",
            "• Supply delays",
            "Rising input costs",
        ]

    def test_chunk_types(self, result):
        types = {c.text: c.type for c in result.chunks}
        assert types["Market Overview"] == "heading"
        assert types["Hosted Plans"] == "heading"
        assert types["1. Loyal customers"] == "list"
        assert types["• Supply delays"] == "list"
        assert types["Low churn overall"] == "paragraph"

    def test_heading_typography(self, result):
        title = result.chunks[0]
        assert title.font.bold is True
        assert title.font.family == "Arial"
        assert title.font.size == 28

    def test_every_run_covered_once(self, result):
        runs = _build_synthetic_runs()
        covered = [s.text for c in result.chunks for s in c.spans]
        assert sorted(covered) == sorted(r.text for r in runs)

    def test_spans_inside_chunk_bbox(self, result):
        for c in result.chunks:
            for s in c.spans:
                assert c.bbox.contains(s.bbox())

    def test_page_text_matches_chunks(self, result):
        assert result.text.split("\n") == [c.text for c in result.chunks]

    def test_json_safe(self, result):
        json.dumps(result.to_dict())


# ── Real PDF ──────────────────────────────────────────────────────────


class TestRealPdf:
    def test_centred_slide(self, deck_pdf):
        dr = run_document(deck_pdf)
        assert dr.meta.num_pages == 3
        page1 = dr.pages[0]
        assert [(c.type, c.text) for c in page1.chunks] == [
            ("heading", "Quarterly Review"),
            ("paragraph", "Revenue grew twelve percent."),
            ("paragraph", "Costs were flat."),
            ("list", "1. Expand sales team"),
            ("list", "2. Open two offices"),
        ]
        assert page1.chunks[0].font.bold is True
        assert page1.chunks[0].font.family == "Helvetica"
        assert page1.stats.max_font == pytest.approx(28)
        assert page1.stats.columns == 1

    def test_two_column_page(self, deck_pdf):
        page2 = run_document(deck_pdf).pages[1]
        assert page2.stats.columns == 2
        assert [c.text for c in page2.chunks] == (
            [f"Alpha item {i}" for i in range(5)]
            + [f"Beta item {i}" for i in range(5)]
        )

    def test_blank_page(self, deck_pdf):
        page3 = run_document(deck_pdf).pages[2]
        assert page3.page == 3
        assert page3.chunks == []
        assert page3.text == ""

    def test_budget(self, deck_pdf):
        dr = run_document(deck_pdf, max_chars_per_page=10)
        assert dr.pages[0].text == "Quarterly "

    def test_exports(self, deck_pdf, tmp_path):
        dr = run_document(deck_pdf)
        json_path = write_pages_json(dr.pages, tmp_path / "pages.json")
        csv_path = export_chunks_csv(dr.pages, tmp_path / "chunks.csv")

        reloaded = read_pages_json(json_path)
        assert [p.text for p in reloaded] == [p.text for p in dr.pages]
        # header + 5 + 10 chunk rows
        assert len(csv_path.read_text(encoding="utf-8").splitlines()) == 16
