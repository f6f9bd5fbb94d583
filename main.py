"""
Entry point: nameplate label generation.

Usage:
    python main.py generate "M3 BOLTS" [--preset small] [--icon bolt] [-o labels/m3]
    python main.py batch jobs.json -o labels [--parallel]
    python main.py verify [--text BOLTS]
    python main.py inspect label.stl
    python main.py init-config [.label.json]

Examples:
    python main.py generate "Washers" --relief deboss --format stl svg png
    python main.py generate "Nuts" --width 50 --height 15 --icon nut --icon-position top
    python main.py generate "Bits" --config project.label.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from stl_label.batch import generate_batch, load_jobs, slugify, verify_presets, write_outputs
from stl_label.errors import LabelError
from stl_label.io.stl_loader import STLFormat, load_stl
from stl_label.io.validator import validate_stl_file
from stl_label.logging_config import setup_logging
from stl_label.outline import FontHandle, load_font
from stl_label.pipeline import generate_label
from stl_label.presets import HARDWARE_ICONS, NO_ICON, PRESETS, load_icon_markup, resolve_preset
from stl_label.project_config import (
    CONFIG_FILENAME,
    OUTPUT_FORMATS,
    ProjectConfig,
    create_sample_config,
    load_config,
)
from stl_label.request import normalize_request

logger = logging.getLogger("stl_label.cli")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _font(args: argparse.Namespace, config: ProjectConfig) -> FontHandle:
    path = args.font or config.font.path or None
    return load_font(path, family=config.font.family, weight=config.font.weight)


def _formats(args: argparse.Namespace, config: ProjectConfig) -> List[str]:
    return list(args.formats) if args.formats else config.output_formats


def _pick(value, fallback):
    return fallback if value is None else value


def cmd_generate(args: argparse.Namespace, config: ProjectConfig) -> int:
    label = config.label
    preset = resolve_preset(_pick(args.preset, label.preset))
    text = _pick(args.text, label.text)

    request = normalize_request(
        text=text,
        width_mm=_pick(args.width, preset.width_mm),
        height_mm=_pick(args.height, preset.height_mm),
        icon_markup=load_icon_markup(_pick(args.icon, label.icon), args.icon_dir),
        icon_position=_pick(args.icon_position, label.icon_position),
        padding_mm=_pick(args.padding, label.padding_mm),
        icon_size_mm=_pick(args.icon_size, label.icon_size_mm),
        relief=_pick(args.relief, label.relief),
    )
    result = generate_label(request, _font(args, config),
                            min_triangles=config.output.min_triangles)

    if args.output:
        target = Path(args.output)
        output_dir, stem = target.parent, target.stem if target.suffix else target.name
    else:
        output_dir = Path(config.output.output_dir or ".")
        stem = f"{config.output.prefix}{slugify(request.text) or 'label'}"
    output_dir.mkdir(parents=True, exist_ok=True)

    written = write_outputs(result, output_dir, stem, _formats(args, config),
                            px_per_mm=config.preview.px_per_mm, png_dpi=config.preview.png_dpi)
    print(result.summary())
    for path in written:
        print(f"  -> {path}")
    return 0


def cmd_batch(args: argparse.Namespace, config: ProjectConfig) -> int:
    jobs = load_jobs(args.jobs)
    result = generate_batch(
        jobs,
        output_dir=args.output or config.output.output_dir or ".",
        font=_font(args, config),
        icon_dir=args.icon_dir,
        parallel=args.parallel,
        max_workers=args.max_workers,
        formats=_formats(args, config),
        prefix=config.output.prefix,
        min_triangles=config.output.min_triangles,
        px_per_mm=config.preview.px_per_mm,
        png_dpi=config.preview.png_dpi,
    )
    print("\n" + result.summary())
    if args.report:
        Path(args.report).write_text(json.dumps(result.to_dict(), indent=2), encoding='utf-8')
        logger.info("Batch report saved: %s", args.report)
    return 0 if result.failed == 0 else 1


def cmd_verify(args: argparse.Namespace, config: ProjectConfig) -> int:
    result = verify_presets(_font(args, config), text=args.text)
    for job in result.results:
        size = " x ".join(f"{v:.2f}" for v in job.dimensions) if job.dimensions else "n/a"
        print(f"{job.status:6} {job.name:12} {size} mm, {job.triangle_count} triangles"
              + (f"  ({job.error})" if job.error else ""))
    print(f"\n{result.successful}/{result.total} presets passed")
    return 0 if result.failed == 0 else 1


def cmd_inspect(args: argparse.Namespace, config: ProjectConfig) -> int:
    soup, info = load_stl(args.stl_file)
    print(f"{info.filepath} ({info.format.value}, {info.file_size_kb:.1f} KB)")
    print(soup.statistics().summary())
    if info.format is STLFormat.BINARY:
        report = validate_stl_file(args.stl_file, min_triangles=args.min_triangles)
        print(f"Validation:   OK ({report.summary()})")
    return 0


def cmd_init_config(args: argparse.Namespace, config: ProjectConfig) -> int:
    path = Path(args.path)
    if path.exists() and not args.force:
        logger.error("%s already exists (use --force to overwrite)", path)
        return 1
    create_sample_config(path)
    print(f"Sample configuration written to {path}")
    return 0


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------

def _add_font_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--font",
        default=None,
        help="Path to a TTF/OTF font (default: DejaVu Sans Bold from matplotlib).",
    )


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        choices=OUTPUT_FORMATS,
        dest="formats",
        default=None,
        help="Output formats (default from config: stl svg).",
    )
    parser.add_argument(
        "--icon-dir",
        default=None,
        dest="icon_dir",
        help="Directory with <icon>.svg files (default: bundled icons).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate 3D-printable nameplate labels (binary STL) with flat previews.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Presets: {', '.join(p.id for p in PRESETS)}\n"
               f"Icons: {', '.join([NO_ICON, *HARDWARE_ICONS])}",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"Path to a {CONFIG_FILENAME} configuration file.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging.",
    )
    parser.add_argument(
        "--log-json",
        default=None,
        dest="log_json",
        help="Also write JSON log records to this file.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate one label.")
    gen.add_argument("text", nargs="?", default=None, help="Label text (upper-cased, max 24 chars).")
    gen.add_argument("--preset", default=None, help="Size preset id (default: medium).")
    gen.add_argument("--width", type=float, default=None, help="Width in mm (overrides preset, min 12).")
    gen.add_argument("--height", type=float, default=None, help="Height in mm (overrides preset, min 8).")
    gen.add_argument("--icon", default=None, help="Icon id, path to an .svg file, or 'none'.")
    gen.add_argument("--icon-position", default=None, dest="icon_position",
                     choices=["left", "right", "top"], help="Icon placement.")
    gen.add_argument("--padding", type=float, default=None, help="Padding in mm (min 0.5).")
    gen.add_argument("--icon-size", type=float, default=None, dest="icon_size",
                     help="Icon size in mm (min 2).")
    gen.add_argument("--relief", default=None, choices=["emboss", "deboss"],
                     help="Raised (emboss) or engraved (deboss) features.")
    gen.add_argument("--output", "-o", default=None,
                     help="Output path without extension (default: <output_dir>/<text>).")
    _add_font_args(gen)
    _add_output_args(gen)
    gen.set_defaults(func=cmd_generate)

    bat = sub.add_parser("batch", help="Generate every label of a JSON job list.")
    bat.add_argument("jobs", help="JSON file with a list of label jobs.")
    bat.add_argument("--output", "-o", default=None, help="Output directory.")
    bat.add_argument("--parallel", action="store_true", help="Generate labels in parallel.")
    bat.add_argument("-j", "--jobs-max", type=int, default=None, dest="max_workers",
                     help="Maximum parallel workers.")
    bat.add_argument("--report", default=None, help="Write a JSON batch report to this file.")
    _add_font_args(bat)
    _add_output_args(bat)
    bat.set_defaults(func=cmd_batch)

    ver = sub.add_parser("verify", help="Check the exported mesh of every preset.")
    ver.add_argument("--text", default="BOLTS", help="Label text (default: BOLTS).")
    _add_font_args(ver)
    ver.set_defaults(func=cmd_verify)

    ins = sub.add_parser("inspect", help="Print statistics of an STL file.")
    ins.add_argument("stl_file", help="Path to an STL file.")
    ins.add_argument("--min-triangles", type=int, default=1, dest="min_triangles",
                     help="Validation threshold (default: 1).")
    ins.set_defaults(func=cmd_inspect)

    init = sub.add_parser("init-config", help="Write a sample configuration file.")
    init.add_argument("path", nargs="?", default=CONFIG_FILENAME, help="Target file.")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file.")
    init.set_defaults(func=cmd_init_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_file=args.log_json,
        console=True,
    )
    config = load_config(explicit_config=args.config)

    try:
        return args.func(args, config)
    except (LabelError, ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:
        logger.critical("Unexpected error: %s", exc, exc_info=True)
        return 2


if __name__ == "__main__":
    sys.exit(main())
