"""
Glyph outlines for label text.

Fonts are read through matplotlib's font manager and TextPath. A FontHandle
is loaded once (usually at process start) and passed explicitly to every
text_to_shapes() call; it is never mutated afterwards, so one handle can be
shared between threads.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from matplotlib.font_manager import FontProperties, findfont
from matplotlib.textpath import TextPath
from shapely.affinity import scale as shp_scale
from shapely.geometry import Polygon

from stl_label.config import DEFAULT_FONT_FAMILY, DEFAULT_FONT_WEIGHT, GLYPH_REFERENCE_SIZE
from stl_label.outline.shapes import loops_to_shapes

logger = logging.getLogger(__name__)

# Glyphs are flattened at this size and scaled back down, so curve
# subdivision is not limited by the tiny reference size.
_SAMPLING_SIZE = 100.0


@dataclass(frozen=True)
class FontHandle:
    """Read-only reference to the outline font used for label text."""
    properties: FontProperties
    source: str

    @property
    def name(self) -> str:
        return Path(self.source).stem


def load_font(
    path: Optional[Union[str, Path]] = None,
    family: str = DEFAULT_FONT_FAMILY,
    weight: str = DEFAULT_FONT_WEIGHT,
) -> FontHandle:
    """Load a font file, or resolve a family/weight via matplotlib.

    The default (DejaVu Sans Bold) ships with matplotlib, so label
    generation works without any system fonts.

    Raises:
        FileNotFoundError: ``path`` was given but does not exist.
    """
    if path is not None:
        font_path = Path(path)
        if not font_path.is_file():
            raise FileNotFoundError(f"Font file not found: {font_path}")
        props = FontProperties(fname=str(font_path))
        source = str(font_path)
    else:
        props = FontProperties(family=family, weight=weight)
        source = findfont(props)
    logger.info("Font loaded: %s", source)
    return FontHandle(properties=props, source=source)


def text_to_shapes(text: str, font: FontHandle) -> List[Polygon]:
    """Convert a text string into filled glyph shapes.

    Shapes are at reference size: the em size is GLYPH_REFERENCE_SIZE,
    baseline at y=0, Y up. Scaling to millimeters happens at placement.

    Returns:
        Shapes for all visible glyphs, or [] when text is blank.
    """
    stripped = (text or "").strip()
    if not stripped:
        return []

    path = TextPath((0, 0), stripped, size=_SAMPLING_SIZE, prop=font.properties)
    loops = [loop for loop in path.to_polygons() if len(loop) >= 3]
    shapes = loops_to_shapes(loops)

    factor = GLYPH_REFERENCE_SIZE / _SAMPLING_SIZE
    shapes = [shp_scale(s, xfact=factor, yfact=factor, origin=(0, 0)) for s in shapes]
    logger.debug("Text %r -> %d shapes", stripped, len(shapes))
    return shapes
