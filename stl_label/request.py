"""
Label requests and their normalization.

normalize_request() is the boundary between user input (CLI, config files,
batch job lists) and the synthesis core: out-of-range numbers are clamped
silently, unknown enum values are rejected.
"""

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

from stl_label.config import (
    DEFAULT_ICON_SIZE_MM,
    DEFAULT_PADDING_MM,
    MAX_TEXT_LENGTH,
    MIN_HEIGHT_MM,
    MIN_ICON_SIZE_MM,
    MIN_PADDING_MM,
    MIN_WIDTH_MM,
)
from stl_label.errors import InvalidRequestError
from stl_label.layout import IconPosition

logger = logging.getLogger(__name__)


class ReliefMode(str, Enum):
    """How text and icon relate to the base plate."""
    EMBOSS = "emboss"   # raised on top of the plate
    DEBOSS = "deboss"   # engraved into the plate


@dataclass(frozen=True)
class LabelRequest:
    """A fully normalized label description.

    ``icon_markup`` is the already-resolved SVG text of the icon; an empty
    string means no icon.
    """
    text: str
    width_mm: float
    height_mm: float
    icon_markup: str = ""
    icon_position: IconPosition = IconPosition.LEFT
    padding_mm: float = DEFAULT_PADDING_MM
    icon_size_mm: float = DEFAULT_ICON_SIZE_MM
    relief: ReliefMode = ReliefMode.EMBOSS

    @property
    def has_icon(self) -> bool:
        return bool(self.icon_markup.strip())

    def to_dict(self) -> dict:
        data = asdict(self)
        data['icon_position'] = self.icon_position.value
        data['relief'] = self.relief.value
        data['icon_markup'] = f"<{len(self.icon_markup)} chars>" if self.icon_markup else ""
        return data


def _clamped(value: Any, minimum: float, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric %s %r replaced by %.1f", name, value, minimum)
        return minimum
    if not math.isfinite(number) or number < minimum:
        logger.debug("%s %r clamped to %.1f", name, value, minimum)
        return minimum
    return number


def _enum_value(enum_cls, value, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidRequestError(f"Unknown {name} {value!r} (expected one of: {allowed})")


def normalize_text(text: Optional[str]) -> str:
    """Upper-case and truncate label text to MAX_TEXT_LENGTH characters."""
    return (text or "").upper()[:MAX_TEXT_LENGTH]


def normalize_request(
    text: Optional[str],
    width_mm: Any,
    height_mm: Any,
    icon_markup: Optional[str] = "",
    icon_position: Any = IconPosition.LEFT,
    padding_mm: Any = DEFAULT_PADDING_MM,
    icon_size_mm: Any = DEFAULT_ICON_SIZE_MM,
    relief: Any = ReliefMode.EMBOSS,
) -> LabelRequest:
    """Build a LabelRequest from loosely typed input.

    Clamps width >= 12, height >= 8, padding >= 0.5 and icon size >= 2 mm;
    non-numeric values fall back to the minimum.

    Raises:
        InvalidRequestError: unknown icon position or relief mode.
    """
    return LabelRequest(
        text=normalize_text(text),
        width_mm=_clamped(width_mm, MIN_WIDTH_MM, "width_mm"),
        height_mm=_clamped(height_mm, MIN_HEIGHT_MM, "height_mm"),
        icon_markup=icon_markup or "",
        icon_position=_enum_value(IconPosition, icon_position, "icon position"),
        padding_mm=_clamped(padding_mm, MIN_PADDING_MM, "padding_mm"),
        icon_size_mm=_clamped(icon_size_mm, MIN_ICON_SIZE_MM, "icon_size_mm"),
        relief=_enum_value(ReliefMode, relief, "relief mode"),
    )
