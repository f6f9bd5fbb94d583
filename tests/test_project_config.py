"""
Unit tests for stl_label.project_config module.

Tests:
- Configuration dataclasses
- JSON serialization/deserialization
- Config file loading
- Config merging
"""

import json
import logging
import tempfile
from pathlib import Path

import pytest

from stl_label.project_config import (
    CONFIG_FILENAME,
    FontConfig,
    LabelConfig,
    OutputConfig,
    PreviewConfig,
    ProjectConfig,
    create_sample_config,
    find_config_file,
    load_config,
)


@pytest.fixture
def isolated_dirs(tmp_path, monkeypatch):
    """Empty working and home directories so no real config is found."""
    work = tmp_path / "work"
    home = tmp_path / "home"
    work.mkdir()
    home.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HOME", str(home))
    return work, home


class TestSectionDefaults:
    """Tests for the section dataclasses."""

    def test_label_defaults(self):
        """Request defaults match the medium preset with no icon."""
        config = LabelConfig()
        assert config.preset == "medium"
        assert config.icon == "none"
        assert config.icon_position == "left"
        assert config.relief == "emboss"
        assert config.padding_mm == 2.0
        assert config.icon_size_mm == 6.0

    def test_font_defaults(self):
        config = FontConfig()
        assert config.path == ""
        assert config.family == "DejaVu Sans"
        assert config.weight == "bold"

    def test_output_defaults(self):
        """STL and SVG are written by default."""
        config = OutputConfig()
        assert config.formats == ["stl", "svg"]
        assert config.min_triangles == 100

    def test_output_lists_not_shared(self):
        a, b = OutputConfig(), OutputConfig()
        a.formats.append("png")
        assert b.formats == ["stl", "svg"]

    def test_preview_defaults(self):
        config = PreviewConfig()
        assert config.px_per_mm == 12
        assert config.png_dpi == 300


class TestProjectConfig:
    """Tests for ProjectConfig dataclass."""

    def test_to_dict(self):
        """Test converting config to dictionary."""
        d = ProjectConfig().to_dict()

        assert set(d) == {'label', 'font', 'output', 'preview'}
        assert d['label']['preset'] == 'medium'

    def test_to_json(self):
        """Test converting config to JSON string."""
        data = json.loads(ProjectConfig().to_json())
        assert data['output']['formats'] == ['stl', 'svg']

    def test_from_dict(self):
        """Test creating config from dictionary."""
        data = {
            'label': {'preset': 'large', 'relief': 'deboss'},
            'output': {'formats': ['stl', 'dxf']},
        }
        config = ProjectConfig.from_dict(data)

        assert config.label.preset == 'large'
        assert config.label.relief == 'deboss'
        assert config.output.formats == ['stl', 'dxf']
        assert config.font.family == 'DejaVu Sans'

    def test_unknown_keys_ignored(self):
        """Comments and unknown keys or sections are skipped."""
        data = {
            '_comment': 'top',
            'label': {'_comment': 'x', 'colour': 'red', 'icon': 'nut'},
            'geometry': {'base_thickness_mm': 3.0},
            'font': 'not a section',
        }
        config = ProjectConfig.from_dict(data)

        assert config.label.icon == 'nut'
        assert not hasattr(config.label, 'colour')
        assert not hasattr(config, 'geometry')

    def test_from_json(self):
        """Test creating config from JSON string."""
        config = ProjectConfig.from_json('{"preview": {"px_per_mm": 20}}')
        assert config.preview.px_per_mm == 20

    def test_save_and_load(self, tmp_path):
        """Test saving and loading config file."""
        config = ProjectConfig()
        config.label.text = 'Washers M4'
        config.font.path = '/fonts/custom.ttf'
        path = tmp_path / "config.json"

        config.save(path)
        loaded = ProjectConfig.load(path)

        assert loaded.label.text == 'Washers M4'
        assert loaded.font.path == '/fonts/custom.ttf'

    def test_output_formats_filtered(self, caplog):
        """Unsupported formats are dropped with a warning, duplicates collapsed."""
        config = ProjectConfig()
        config.output.formats = ['STL', 'obj', 'svg', 'stl', 'png']

        with caplog.at_level(logging.WARNING, logger="stl_label"):
            formats = config.output_formats

        assert formats == ['stl', 'svg', 'png']
        assert "'obj'" in caplog.text


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_explicit_config_found(self, isolated_dirs):
        """Test finding explicit config path."""
        with tempfile.NamedTemporaryFile(suffix='.json', delete=False) as f:
            temp_path = f.name
            f.write(b'{}')

        try:
            assert find_config_file(explicit_config=temp_path) == Path(temp_path)
        finally:
            Path(temp_path).unlink(missing_ok=True)

    def test_explicit_config_not_found(self, isolated_dirs):
        """Test that missing explicit config returns None."""
        assert find_config_file(explicit_config='/nonexistent/path.json') is None

    def test_cwd_before_home(self, isolated_dirs):
        work, home = isolated_dirs
        (work / CONFIG_FILENAME).write_text('{}')
        (home / CONFIG_FILENAME).write_text('{}')

        assert find_config_file() == Path.cwd() / CONFIG_FILENAME

    def test_home_fallback(self, isolated_dirs):
        _, home = isolated_dirs
        (home / CONFIG_FILENAME).write_text('{}')

        assert find_config_file() == home / CONFIG_FILENAME

    def test_nothing_found(self, isolated_dirs):
        assert find_config_file() is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_returns_defaults_when_no_file(self, isolated_dirs):
        """Test that load_config returns defaults when no file found."""
        config = load_config()
        assert config == ProjectConfig()

    def test_load_from_explicit_file(self, tmp_path):
        """Test loading from explicit config file."""
        path = tmp_path / "labels.json"
        path.write_text(json.dumps({'label': {'icon': 'wrench'}}))

        assert load_config(explicit_config=path).label.icon == 'wrench'

    def test_load_invalid_json_returns_defaults(self, tmp_path, caplog):
        """Test that invalid JSON returns defaults with an error logged."""
        path = tmp_path / "broken.json"
        path.write_text('not valid json {{{')

        with caplog.at_level(logging.ERROR, logger="stl_label"):
            config = load_config(explicit_config=path)

        assert config.label.preset == 'medium'
        assert "Failed to load config" in caplog.text


class TestCreateSampleConfig:
    """Tests for create_sample_config function."""

    def test_creates_valid_json(self, tmp_path):
        """Test that sample config is valid JSON with every section."""
        path = create_sample_config(tmp_path / CONFIG_FILENAME)

        data = json.loads(path.read_text(encoding='utf-8'))

        for section in ('label', 'font', 'output', 'preview'):
            assert section in data
        assert '_comment' in data
        assert '_comment' in data['label']

    def test_sample_loads_as_defaults(self, tmp_path):
        """The sample documents the defaults, so loading it changes nothing."""
        path = create_sample_config(tmp_path / CONFIG_FILENAME)
        assert ProjectConfig.load(path) == ProjectConfig()
