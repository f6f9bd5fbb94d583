"""
Design constants for nameplate synthesis.

All lengths are millimeters. These values are fixed for the whole process;
project configuration (project_config.py) only supplies request defaults and
output settings, never geometry constants.
"""

# ---------------------------------------------------------------------------
# Solid body
# ---------------------------------------------------------------------------

BASE_THICKNESS_MM = 1.6
FEATURE_HEIGHT_MM = 0.8        # emboss: raised height above the plate top
ENGRAVE_DEPTH_MM = 0.5         # deboss: depth of the engraving below the top
ENGRAVE_OVERSHOOT_MM = 0.2     # deboss cutters rise this far above the top face
CORNER_RADIUS_MM = 1.2
PLATE_CURVE_SEGMENTS = 10      # points per rounded corner

# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

ICON_GAP_MM = 1.8
MIN_TEXT_BOX_MM = 2.0
FIT_MARGIN = 0.9               # features fill at most 90% of their box
MIN_REF_EXTENT = 0.1           # substitute for a zero-size reference bbox

# ---------------------------------------------------------------------------
# Request limits (applied by request.normalize_request)
# ---------------------------------------------------------------------------

MIN_WIDTH_MM = 12.0
MIN_HEIGHT_MM = 8.0
MIN_PADDING_MM = 0.5
MIN_ICON_SIZE_MM = 2.0
MAX_TEXT_LENGTH = 24

DEFAULT_PADDING_MM = 2.0
DEFAULT_ICON_SIZE_MM = 6.0

# ---------------------------------------------------------------------------
# Outlines
# ---------------------------------------------------------------------------

GLYPH_REFERENCE_SIZE = 1.0
DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_WEIGHT = "bold"
CURVE_SAMPLES = 8              # points per Bezier/arc segment in icon paths
MIN_SHAPE_AREA = 1e-9          # in reference units squared

# ---------------------------------------------------------------------------
# Binary STL
# ---------------------------------------------------------------------------

STL_HEADER_SIZE = 80
STL_COUNT_SIZE = 4
STL_RECORD_SIZE = 50
STL_HEADER_TEXT = b"stl_label binary nameplate"

MIN_EXPORT_TRIANGLES = 100
MIN_SANITY_TRIANGLES = 1

# ---------------------------------------------------------------------------
# Previews
# ---------------------------------------------------------------------------

PREVIEW_PX_PER_MM = 12
PREVIEW_STROKE_MM = 0.4
PREVIEW_INK = "#111"
PREVIEW_PNG_DPI = 300
