"""
Unit tests for stl_label.preview module.

Tests:
- SVG document size, viewBox and feature paths
- PNG rasterization
- DXF layers and polylines
"""

import xml.etree.ElementTree as ET

import ezdxf
import pytest

from stl_label.layout import compute_layout
from stl_label.pipeline import generate_label
from stl_label.preview import DXF_LAYERS, LabelPreview, render_dxf, render_png, render_svg
from stl_label.presets import load_icon_markup
from stl_label.request import normalize_request

SVG_NS = "{http://www.w3.org/2000/svg}"


@pytest.fixture
def blank_preview() -> LabelPreview:
    return LabelPreview(width_mm=45.0, height_mm=15.0, layout=compute_layout(45.0, 15.0, False))


@pytest.fixture
def label_preview(font) -> LabelPreview:
    request = normalize_request("BOLTS", 45.0, 15.0, icon_markup=load_icon_markup("bolt"))
    return generate_label(request, font).preview


class TestRenderSVG:
    """Tests for render_svg."""

    def test_document_size(self, blank_preview):
        root = ET.fromstring(render_svg(blank_preview))

        assert root.get("width") == "540px"
        assert root.get("height") == "180px"
        assert root.get("viewBox") == "0 0 45 15"

    def test_plate_rect(self, blank_preview):
        root = ET.fromstring(render_svg(blank_preview))
        rect = root.find(f"{SVG_NS}rect")

        assert rect is not None
        assert float(rect.get("rx")) == pytest.approx(1.2)
        assert rect.get("fill") == "white"

    def test_blank_label_has_no_paths(self, blank_preview):
        root = ET.fromstring(render_svg(blank_preview))
        assert root.findall(f".//{SVG_NS}path") == []

    def test_feature_groups(self, label_preview):
        root = ET.fromstring(render_svg(label_preview))
        groups = {g.get("id"): g for g in root.iter(f"{SVG_NS}g")}

        assert set(groups) == {"text", "icon"}
        assert groups["text"].get("fill-rule") == "evenodd"
        assert len(groups["text"].findall(f"{SVG_NS}path")) >= 5

    def test_custom_scale(self, blank_preview):
        root = ET.fromstring(render_svg(blank_preview, px_per_mm=10))
        assert root.get("width") == "450px"

    def test_saved_to_path(self, label_preview, tmp_path):
        path = tmp_path / "label.svg"
        markup = render_svg(label_preview, path)

        assert path.exists()
        assert ET.parse(str(path)).getroot().get("viewBox") == ET.fromstring(markup).get("viewBox")


class TestRenderPNG:
    """Tests for render_png."""

    def test_png_written(self, label_preview, tmp_path):
        path = render_png(label_preview, tmp_path / "label.png", dpi=100)

        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_blank(self, blank_preview, tmp_path):
        path = render_png(blank_preview, tmp_path / "blank.png", dpi=72)
        assert path.stat().st_size > 0


class TestRenderDXF:
    """Tests for render_dxf."""

    def test_layers(self, label_preview, tmp_path):
        doc = ezdxf.readfile(str(render_dxf(label_preview, tmp_path / "label.dxf")))

        for name in DXF_LAYERS:
            assert doc.layers.has_entry(name)

    def test_outlines(self, label_preview, tmp_path):
        doc = ezdxf.readfile(str(render_dxf(label_preview, tmp_path / "label.dxf")))
        msp = doc.modelspace()

        plate = msp.query('LWPOLYLINE[layer=="PLATE"]')
        text = msp.query('LWPOLYLINE[layer=="TEXT"]')
        icon = msp.query('LWPOLYLINE[layer=="ICON"]')

        assert len(plate) == 1
        assert len(text) >= 5
        assert len(icon) >= 1
        for polyline in [*plate, *text, *icon]:
            assert polyline.closed
            for x, y in polyline.vertices():
                assert -1e-6 <= x <= 45.0 + 1e-6
                assert -1e-6 <= y <= 15.0 + 1e-6

    def test_blank_label(self, blank_preview, tmp_path):
        doc = ezdxf.readfile(str(render_dxf(blank_preview, tmp_path / "blank.dxf")))
        assert len(doc.modelspace().query('LWPOLYLINE[layer=="TEXT"]')) == 0
