"""
Unit tests for stl_label.presets module.

Tests:
- Preset catalog and fallback
- Icon catalog and markup loading
- Bundled icons parse into shapes
"""

import logging

import pytest

from stl_label.outline import vector_markup_to_shapes
from stl_label.presets import (
    DEFAULT_ICON_DIR,
    DEFAULT_PRESET_ID,
    HARDWARE_ICONS,
    NO_ICON,
    PRESETS,
    icon_filename,
    load_icon_markup,
    resolve_preset,
)


class TestPresets:
    """Tests for the preset catalog."""

    def test_six_presets(self):
        assert [p.id for p in PRESETS] == [
            'small', 'medium', 'large', 'mu-1x0_5', 'mu-1_5x0_5', 'mu-2x0_75',
        ]

    @pytest.mark.parametrize("preset_id,width,height", [
        ('small', 36.0, 12.0),
        ('medium', 45.0, 15.0),
        ('large', 60.0, 20.0),
        ('mu-1x0_5', 25.0, 12.5),
        ('mu-1_5x0_5', 37.5, 12.5),
        ('mu-2x0_75', 50.0, 18.75),
    ])
    def test_sizes(self, preset_id, width, height):
        preset = resolve_preset(preset_id)
        assert (preset.width_mm, preset.height_mm) == (width, height)

    def test_unknown_falls_back_to_default(self, caplog):
        with caplog.at_level(logging.WARNING, logger="stl_label"):
            preset = resolve_preset("gigantic")

        assert preset.id == DEFAULT_PRESET_ID == 'medium'
        assert "gigantic" in caplog.text

    def test_none_falls_back_to_default(self):
        assert resolve_preset(None).id == 'medium'


class TestIconCatalog:
    """Tests for icon lookup and loading."""

    def test_fourteen_icons(self):
        assert len(HARDWARE_ICONS) == 14
        assert NO_ICON not in HARDWARE_ICONS

    @pytest.mark.parametrize("icon_id", sorted(HARDWARE_ICONS))
    def test_bundled_icon_exists_and_parses(self, icon_id):
        assert (DEFAULT_ICON_DIR / icon_filename(icon_id)).is_file()

        markup = load_icon_markup(icon_id)
        assert "<svg" in markup
        assert vector_markup_to_shapes(markup)

    @pytest.mark.parametrize("icon", [None, "", NO_ICON])
    def test_no_icon(self, icon):
        assert load_icon_markup(icon) == ""

    def test_unknown_id(self, caplog):
        with caplog.at_level(logging.WARNING, logger="stl_label"):
            assert load_icon_markup("spaceship") == ""
        assert "spaceship" in caplog.text

    def test_missing_icon_dir(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="stl_label"):
            assert load_icon_markup("bolt", tmp_path / "nowhere") == ""
        assert "Could not read icon" in caplog.text

    def test_custom_icon_dir(self, tmp_path, square_icon_markup):
        (tmp_path / "bolt.svg").write_text(square_icon_markup, encoding="utf-8")
        assert load_icon_markup("bolt", tmp_path) == square_icon_markup

    def test_svg_path(self, tmp_path, square_icon_markup):
        path = tmp_path / "custom.svg"
        path.write_text(square_icon_markup, encoding="utf-8")
        assert load_icon_markup(str(path)) == square_icon_markup
