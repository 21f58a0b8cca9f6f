"""Tests for pdf2deck.config — ExtractionConfig defaults, validation, and loading."""

import json

import pytest

from pdf2deck.config import ConfigValidationError, ExtractionConfig, load_config


class TestExtractionConfig:
    def test_defaults(self):
        cfg = ExtractionConfig()
        assert cfg.line_tolerance_mult == 0.35
        assert cfg.line_tolerance_min == 1.2
        assert cfg.line_tolerance_max == 4.5
        assert cfg.font_ratio_max == 1.6
        assert cfg.span_gap_mult == 8.0
        assert cfg.span_gap_min == 12.0
        assert cfg.heading_max_font_ratio == 0.9
        assert cfg.heading_median_font_ratio == 1.35
        assert cfg.heading_fallback_ratio == 1.5
        assert cfg.gutter_min == 12.0
        assert cfg.render_max_width == 1024

    def test_override(self):
        cfg = ExtractionConfig(heading_median_font_ratio=1.2, gutter_min=20.0)
        assert cfg.heading_median_font_ratio == 1.2
        assert cfg.gutter_min == 20.0

    def test_vars_round_trip(self):
        """vars(cfg) should produce a dict that can reconstruct the config."""
        cfg = ExtractionConfig(tocr_use_text_flow=True, kmeans_max_iter=5)
        cfg2 = ExtractionConfig(**vars(cfg))
        assert cfg2.tocr_use_text_flow is True
        assert vars(cfg) == vars(cfg2)


class TestConfigValidation:
    def test_defaults_are_valid(self):
        ExtractionConfig()

    @pytest.mark.parametrize(
        "field",
        [
            "heading_max_font_ratio",
            "gutter_page_ratio",
            "jitter_ratio",
            "word_gap_percentile",
        ],
    )
    def test_unit_range(self, field):
        with pytest.raises(ConfigValidationError, match=field):
            ExtractionConfig(**{field: 1.5})

    @pytest.mark.parametrize(
        "field",
        [
            "char_width_factor",
            "line_tolerance_mult",
            "span_gap_mult",
            "render_max_scale",
        ],
    )
    def test_positive(self, field):
        with pytest.raises(ConfigValidationError, match="must be > 0"):
            ExtractionConfig(**{field: 0.0})

    def test_non_negative(self):
        with pytest.raises(ConfigValidationError, match="must be >= 0"):
            ExtractionConfig(space_gap_min=-1.0)

    def test_positive_int(self):
        with pytest.raises(ConfigValidationError, match="kmeans_max_iter"):
            ExtractionConfig(kmeans_max_iter=0)

    def test_font_ratio_below_one(self):
        with pytest.raises(ConfigValidationError, match="font_ratio_max"):
            ExtractionConfig(font_ratio_max=0.8)

    def test_tolerance_bounds_ordered(self):
        with pytest.raises(ConfigValidationError, match="line_tolerance_min"):
            ExtractionConfig(line_tolerance_min=5.0, line_tolerance_max=4.0)

    def test_alpha_range(self):
        with pytest.raises(ConfigValidationError, match="overlay_column_fill_alpha"):
            ExtractionConfig(overlay_column_fill_alpha=300)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            ExtractionConfig(gutter_min=-5)


class TestLoadConfig:
    def test_overrides(self, tmp_path):
        p = tmp_path / "cfg.json"
        p.write_text(json.dumps({"gutter_min": 20.0, "heading_max_chars": 80}))
        cfg = load_config(p)
        assert cfg.gutter_min == 20.0
        assert cfg.heading_max_chars == 80
        assert cfg.line_tolerance_min == 1.2

    def test_unknown_key(self, tmp_path):
        p = tmp_path / "cfg.json"
        p.write_text(json.dumps({"gutter_minimum": 20.0}))
        with pytest.raises(ConfigValidationError, match="Unknown config keys"):
            load_config(p)

    def test_not_an_object(self, tmp_path):
        p = tmp_path / "cfg.json"
        p.write_text("[1, 2]")
        with pytest.raises(ConfigValidationError, match="JSON object"):
            load_config(p)

    def test_bad_json(self, tmp_path):
        p = tmp_path / "cfg.json"
        p.write_text("{not json")
        with pytest.raises(ConfigValidationError, match="Cannot read config"):
            load_config(p)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigValidationError):
            load_config(tmp_path / "missing.json")

    def test_invalid_value_in_file(self, tmp_path):
        p = tmp_path / "cfg.json"
        p.write_text(json.dumps({"jitter_ratio": 2.0}))
        with pytest.raises(ConfigValidationError, match="jitter_ratio"):
            load_config(p)
