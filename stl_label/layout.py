"""
Box layout of a nameplate: where the text and the icon go.

Layout space has its origin at the top-left corner of the label with Y
pointing down, in millimeters. Three arrangements are supported:

    left:   [pad][icon][gap][   text   ][pad]
    right:  [pad][   text   ][gap][icon][pad]
    top:         [icon] above [text], both centered horizontally

Without an icon the text box fills the whole padded interior.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from stl_label.config import ICON_GAP_MM, MIN_PADDING_MM, MIN_TEXT_BOX_MM

logger = logging.getLogger(__name__)


class IconPosition(str, Enum):
    """Placement of the icon relative to the text."""
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"


@dataclass(frozen=True)
class LayoutResult:
    """Text and icon boxes in layout space (top-left origin, Y down).

    Attributes:
        text_x, text_y: top-left corner of the text box
        text_width_mm, text_height_mm: text box size, never below 2 mm
        icon_x, icon_y: top-left corner of the square icon box
        icon_size_mm: side of the icon box
    """
    text_x: float
    text_y: float
    text_width_mm: float
    text_height_mm: float
    icon_x: float
    icon_y: float
    icon_size_mm: float

    def to_dict(self) -> dict:
        return {
            'text_x': self.text_x,
            'text_y': self.text_y,
            'text_width_mm': self.text_width_mm,
            'text_height_mm': self.text_height_mm,
            'icon_x': self.icon_x,
            'icon_y': self.icon_y,
            'icon_size_mm': self.icon_size_mm,
        }


def compute_layout(
    width_mm: float,
    height_mm: float,
    has_icon: bool,
    icon_position: IconPosition = IconPosition.LEFT,
    padding_mm: float = 2.0,
    icon_size_mm: float = 6.0,
) -> LayoutResult:
    """Compute the text and icon boxes of a label.

    Pure and total: oversized padding or icons shrink the text box down to
    MIN_TEXT_BOX_MM rather than failing. ``icon_position`` must already be
    one of IconPosition (checked by request.normalize_request).

    For left/right placement the widths add up exactly:
    ``text_width_mm + icon_size_mm + ICON_GAP_MM + 2 * padding == width_mm``
    as long as the text box is not clamped.

    Args:
        width_mm, height_mm: outer label size.
        has_icon: whether an icon box is reserved.
        icon_position: side the icon sits on.
        padding_mm: inner margin, raised to at least MIN_PADDING_MM.
        icon_size_mm: side of the square icon box.

    Returns:
        LayoutResult
    """
    position = IconPosition(icon_position)
    pad = max(MIN_PADDING_MM, padding_mm)
    gap = ICON_GAP_MM if has_icon else 0.0

    beside = has_icon and position in (IconPosition.LEFT, IconPosition.RIGHT)
    above = has_icon and position is IconPosition.TOP

    icon_space = icon_size_mm + gap if beside else 0.0
    text_x = pad + icon_space if position is IconPosition.LEFT else pad
    text_y = pad + icon_size_mm + gap if above else pad

    text_w = width_mm - 2 * pad - icon_space
    text_h = height_mm - 2 * pad - (icon_size_mm + gap if above else 0.0)

    if position is IconPosition.LEFT:
        icon_x = pad
    elif position is IconPosition.RIGHT:
        icon_x = width_mm - pad - icon_size_mm
    else:
        icon_x = (width_mm - icon_size_mm) / 2
    icon_y = pad if position is IconPosition.TOP else (height_mm - icon_size_mm) / 2

    if text_w < MIN_TEXT_BOX_MM or text_h < MIN_TEXT_BOX_MM:
        logger.debug("Text box clamped to %.1f mm minimum (%.2f x %.2f)",
                     MIN_TEXT_BOX_MM, text_w, text_h)

    return LayoutResult(
        text_x=text_x,
        text_y=text_y,
        text_width_mm=max(MIN_TEXT_BOX_MM, text_w),
        text_height_mm=max(MIN_TEXT_BOX_MM, text_h),
        icon_x=max(0.0, icon_x),
        icon_y=max(0.0, icon_y),
        icon_size_mm=icon_size_mm,
    )
