"""
Size presets and the hardware icon catalog.

Preset ids are common storage-bin label sizes: three generic sizes and
three fractions of the 25 mm Multiboard unit (MU).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

MU_MM = 25.0


@dataclass(frozen=True)
class Preset:
    """A named label size."""
    id: str
    name: str
    width_mm: float
    height_mm: float


PRESETS: List[Preset] = [
    Preset('small', 'Small (36 x 12 mm)', 36.0, 12.0),
    Preset('medium', 'Medium (45 x 15 mm)', 45.0, 15.0),
    Preset('large', 'Large (60 x 20 mm)', 60.0, 20.0),
    Preset('mu-1x0_5', 'MU 1.0 x 0.5 (25 x 12.5 mm)', MU_MM, MU_MM * 0.5),
    Preset('mu-1_5x0_5', 'MU 1.5 x 0.5 (37.5 x 12.5 mm)', MU_MM * 1.5, MU_MM * 0.5),
    Preset('mu-2x0_75', 'MU 2.0 x 0.75 (50 x 18.75 mm)', MU_MM * 2.0, MU_MM * 0.75),
]

DEFAULT_PRESET_ID = 'medium'

_PRESETS_BY_ID: Dict[str, Preset] = {p.id: p for p in PRESETS}


def resolve_preset(preset_id: Optional[str]) -> Preset:
    """Look up a preset, falling back to the default one on unknown ids."""
    preset = _PRESETS_BY_ID.get(preset_id or "")
    if preset is None:
        logger.warning("Unknown preset %r, using %r", preset_id, DEFAULT_PRESET_ID)
        return _PRESETS_BY_ID[DEFAULT_PRESET_ID]
    return preset


# ---------------------------------------------------------------------------
# Icons
# ---------------------------------------------------------------------------

NO_ICON = 'none'

# Bundled 24x24 line-art icons, one <id>.svg per catalog entry
DEFAULT_ICON_DIR = Path(__file__).resolve().parent / 'icons'

HARDWARE_ICONS: Dict[str, str] = {
    'screw': 'Screw',
    'bolt': 'Bolt',
    'nut': 'Nut',
    'washer': 'Washer',
    'wing-nut': 'Wing Nut',
    'hex-key': 'Hex Key',
    'wrench': 'Wrench',
    'socket': 'Socket',
    'hammer': 'Hammer',
    'drill-bit': 'Drill Bit',
    'pliers': 'Pliers',
    'tape-measure': 'Tape Measure',
    'saw-blade': 'Saw Blade',
    'clamp': 'Clamp',
}


def icon_filename(icon_id: str) -> str:
    return f"{icon_id}.svg"


def load_icon_markup(icon: Optional[str], icon_dir: Optional[Union[str, Path]] = None) -> str:
    """Resolve an icon to its SVG markup.

    ``icon`` may be a catalog id (looked up as ``<id>.svg`` in ``icon_dir``,
    the bundled icons by default) or a path to an .svg file. Returns ""
    for no icon, unknown ids and unreadable files, so the label is produced
    without the icon.
    """
    if not icon or icon == NO_ICON:
        return ""

    if icon in HARDWARE_ICONS:
        path = Path(icon_dir or DEFAULT_ICON_DIR) / icon_filename(icon)
    elif icon.lower().endswith('.svg'):
        path = Path(icon)
    else:
        logger.warning("Unknown icon %r, label will have no icon", icon)
        return ""

    try:
        return path.read_text(encoding='utf-8')
    except OSError as exc:
        logger.warning("Could not read icon %s: %s", path, exc)
        return ""
