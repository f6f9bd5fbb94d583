"""
JSON-based project configuration for stl_label.

Allows overriding request defaults and output settings through:
1. Explicit config file path via CLI
2. .label.json file in the current directory
3. .label.json file in the user's home directory

Configuration hierarchy (later overrides earlier):
1. Built-in defaults (config.py)
2. Config file (first one found)
3. CLI arguments

The geometric constants (plate thickness, feature height, engraving depth,
corner radius, fit margin) are not configurable.

Example .label.json:
{
    "label": {
        "preset": "mu-1_5x0_5",
        "icon": "bolt",
        "relief": "deboss"
    },
    "font": {
        "path": "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
    },
    "output": {
        "formats": ["stl", "svg"],
        "output_dir": "labels"
    }
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from stl_label.config import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_ICON_SIZE_MM,
    DEFAULT_PADDING_MM,
    MIN_EXPORT_TRIANGLES,
    PREVIEW_PNG_DPI,
    PREVIEW_PX_PER_MM,
)

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILENAME = ".label.json"

OUTPUT_FORMATS = ("stl", "svg", "png", "dxf")


@dataclass
class LabelConfig:
    """Defaults for label requests."""
    preset: str = "medium"
    text: str = ""
    icon: str = "none"  # catalog id, path to .svg, or "none"
    icon_position: str = "left"  # "left", "right" or "top"
    padding_mm: float = DEFAULT_PADDING_MM
    icon_size_mm: float = DEFAULT_ICON_SIZE_MM
    relief: str = "emboss"  # "emboss" or "deboss"


@dataclass
class FontConfig:
    """Outline font selection. ``path`` wins over family/weight."""
    path: str = ""
    family: str = DEFAULT_FONT_FAMILY
    weight: str = DEFAULT_FONT_WEIGHT


@dataclass
class OutputConfig:
    """Output file configuration."""
    formats: List[str] = field(default_factory=lambda: ["stl", "svg"])
    output_dir: str = ""
    prefix: str = ""
    min_triangles: int = MIN_EXPORT_TRIANGLES


@dataclass
class PreviewConfig:
    """Flat preview rendering."""
    px_per_mm: float = PREVIEW_PX_PER_MM
    png_dpi: int = PREVIEW_PNG_DPI


_SECTIONS = {
    'label': LabelConfig,
    'font': FontConfig,
    'output': OutputConfig,
    'preview': PreviewConfig,
}


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    label: LabelConfig = field(default_factory=LabelConfig)
    font: FontConfig = field(default_factory=FontConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @property
    def output_formats(self) -> List[str]:
        """Requested formats that are supported, lower-cased, in order."""
        formats = []
        for fmt in self.output.formats:
            fmt = str(fmt).lower()
            if fmt not in OUTPUT_FORMATS:
                logger.warning("Unsupported output format %r ignored", fmt)
            elif fmt not in formats:
                formats.append(fmt)
        return formats

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from dictionary.

        Unknown sections and keys (including "_comment") are ignored.
        """
        config = cls()
        for name in _SECTIONS:
            section = data.get(name)
            if not isinstance(section, dict):
                continue
            target = getattr(config, name)
            for key, value in section.items():
                if hasattr(target, key):
                    setattr(target, key, value)
        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(explicit_config: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Find configuration file using search hierarchy.

    Search order:
    1. Explicit config path (if provided)
    2. .label.json in current working directory
    3. ~/.label.json in user's home directory
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_config(explicit_config: Optional[Union[str, Path]] = None) -> ProjectConfig:
    """Load configuration with fallback to defaults."""
    config_path = find_config_file(explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> Path:
    """Create a sample configuration file with documentation."""
    sample = {
        "_comment": "Nameplate label generator configuration",
        "_version": "1.0",
        "label": {
            "_comment": "Request defaults; CLI arguments override them",
            "preset": "medium",
            "text": "",
            "icon": "none",
            "icon_position": "left",
            "padding_mm": DEFAULT_PADDING_MM,
            "icon_size_mm": DEFAULT_ICON_SIZE_MM,
            "relief": "emboss",
        },
        "font": {
            "_comment": "Font file path, or family/weight resolved by matplotlib",
            "path": "",
            "family": DEFAULT_FONT_FAMILY,
            "weight": DEFAULT_FONT_WEIGHT,
        },
        "output": {
            "_comment": "Formats among stl, svg, png, dxf",
            "formats": ["stl", "svg"],
            "output_dir": "",
            "prefix": "",
            "min_triangles": MIN_EXPORT_TRIANGLES,
        },
        "preview": {
            "px_per_mm": PREVIEW_PX_PER_MM,
            "png_dpi": PREVIEW_PNG_DPI,
        },
    }

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
    return path
