"""
Batch label generation.

Provides:
- Job lists from JSON (one label per entry)
- Parallel generation with a shared, read-only font
- Per-job error capture and reporting
- The preset conformance check (verify_presets)

Usage:
    from stl_label.batch import generate_batch, load_jobs

    font = load_font()
    results = generate_batch(load_jobs("bins.json"), "./labels", font, parallel=True)
    print(results.summary())

Job file format (a list, or an object with a "labels" list):
[
    {"name": "m3-bolts", "text": "M3 bolts", "preset": "small", "icon": "bolt"},
    {"text": "Washers", "width_mm": 50, "height_mm": 15, "relief": "deboss"}
]
"""

import json
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from stl_label.config import (
    DEFAULT_ICON_SIZE_MM,
    DEFAULT_PADDING_MM,
    MIN_EXPORT_TRIANGLES,
    PREVIEW_PNG_DPI,
    PREVIEW_PX_PER_MM,
)
from stl_label.errors import LabelError
from stl_label.logging_config import LogContext
from stl_label.outline import FontHandle
from stl_label.pipeline import LabelResult, generate_label
from stl_label.presets import PRESETS, load_icon_markup, resolve_preset
from stl_label.preview import render_dxf, render_png, render_svg
from stl_label.request import LabelRequest, normalize_request

logger = logging.getLogger(__name__)

# Conformance tolerances for verify_presets()
SIZE_TOLERANCE_MM = 0.35
MIN_LABEL_DEPTH_MM = 1.5
MAX_LABEL_DEPTH_MM = 2.6

_SLUG_RE = re.compile(r'[^a-z0-9]+')


@dataclass
class LabelJob:
    """One entry of a job list. Width/height override the preset when set."""
    name: str
    text: str = ""
    preset: str = "medium"
    width_mm: Optional[float] = None
    height_mm: Optional[float] = None
    icon: str = "none"
    icon_position: str = "left"
    padding_mm: float = DEFAULT_PADDING_MM
    icon_size_mm: float = DEFAULT_ICON_SIZE_MM
    relief: str = "emboss"

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> 'LabelJob':
        job = cls(name=str(data.get('name') or slugify(data.get('text', '')) or f"label_{index + 1}"))
        for key, value in data.items():
            if key != 'name' and hasattr(job, key):
                setattr(job, key, value)
        return job

    def to_request(self, icon_dir: Optional[Union[str, Path]] = None) -> LabelRequest:
        """Resolve preset and icon and normalize into a LabelRequest."""
        preset = resolve_preset(self.preset)
        return normalize_request(
            text=self.text,
            width_mm=self.width_mm if self.width_mm is not None else preset.width_mm,
            height_mm=self.height_mm if self.height_mm is not None else preset.height_mm,
            icon_markup=load_icon_markup(self.icon, icon_dir),
            icon_position=self.icon_position,
            padding_mm=self.padding_mm,
            icon_size_mm=self.icon_size_mm,
            relief=self.relief,
        )


@dataclass
class JobResult:
    """Result of a single label job."""
    name: str
    outputs: List[Path] = field(default_factory=list)
    success: bool = False
    error: Optional[str] = None
    duration_seconds: float = 0.0
    triangle_count: int = 0
    dimensions: Optional[Tuple[float, float, float]] = None

    @property
    def status(self) -> str:
        """Get status string."""
        return "OK" if self.success else "FAILED"


@dataclass
class BatchResult:
    """Result of a batch run."""
    results: List[JobResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.successful / self.total

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Label Batch Summary",
            "=" * 40,
            f"Total labels:    {self.total}",
            f"Successful:      {self.successful}",
            f"Failed:          {self.failed}",
            f"Success rate:    {self.success_rate:.1f}%",
            f"Total time:      {self.total_duration_seconds:.1f}s",
            "",
        ]

        if self.failed > 0:
            lines.append("Failed labels:")
            for r in self.results:
                if not r.success:
                    lines.append(f"  - {r.name}: {r.error}")

        return "\n".join(lines)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'total_duration_seconds': self.total_duration_seconds,
            'results': [
                {
                    'name': r.name,
                    'outputs': [str(p) for p in r.outputs],
                    'success': r.success,
                    'error': r.error,
                    'duration': r.duration_seconds,
                    'triangles': r.triangle_count,
                    'dimensions': list(r.dimensions) if r.dimensions is not None else None,
                }
                for r in self.results
            ],
        }


def slugify(text: str) -> str:
    """File-name-safe lower-case form of a label text."""
    return _SLUG_RE.sub('-', str(text).lower()).strip('-')


def load_jobs(path: Union[str, Path]) -> List[LabelJob]:
    """Read a JSON job list.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file is not valid JSON
        ValueError: If the document is not a list of objects
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('labels', [])
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"Job file {path} must contain a list of label objects")

    jobs = [LabelJob.from_dict(item, i) for i, item in enumerate(data)]
    logger.info("Loaded %d label jobs from %s", len(jobs), path)
    return jobs


def write_outputs(
    result: LabelResult,
    output_dir: Path,
    stem: str,
    formats: Sequence[str] = ("stl", "svg"),
    px_per_mm: float = PREVIEW_PX_PER_MM,
    png_dpi: int = PREVIEW_PNG_DPI,
) -> List[Path]:
    """Write the requested output files for one generated label."""
    written = []
    for fmt in formats:
        path = output_dir / f"{stem}.{fmt}"
        if fmt == "stl":
            path.write_bytes(result.stl_bytes)
            logger.info("STL saved: %s (%d triangles)", path, result.triangle_count)
        elif fmt == "svg":
            render_svg(result.preview, path, px_per_mm=px_per_mm)
        elif fmt == "png":
            render_png(result.preview, path, dpi=png_dpi)
        elif fmt == "dxf":
            render_dxf(result.preview, path)
        else:
            logger.warning("Unsupported output format %r skipped", fmt)
            continue
        written.append(path)
    return written


def run_job(
    job: LabelJob,
    output_dir: Path,
    font: FontHandle,
    icon_dir: Optional[Union[str, Path]] = None,
    formats: Sequence[str] = ("stl", "svg"),
    prefix: str = "",
    min_triangles: int = MIN_EXPORT_TRIANGLES,
    px_per_mm: float = PREVIEW_PX_PER_MM,
    png_dpi: int = PREVIEW_PNG_DPI,
) -> JobResult:
    """Generate one label and write its files; errors are captured."""
    start_time = time.perf_counter()
    result = JobResult(name=job.name)

    try:
        label = generate_label(job.to_request(icon_dir), font, min_triangles=min_triangles)
        result.outputs = write_outputs(label, output_dir, f"{prefix}{job.name}", formats,
                                       px_per_mm=px_per_mm, png_dpi=png_dpi)
        result.triangle_count = label.triangle_count
        result.dimensions = tuple(float(v) for v in label.report.bounding_box.dimensions)
        result.success = True
    except Exception as e:
        result.success = False
        result.error = str(e)
        logger.error("Failed to generate %s: %s", job.name, e)

    result.duration_seconds = time.perf_counter() - start_time
    return result


def generate_batch(
    jobs: Sequence[LabelJob],
    output_dir: Union[str, Path],
    font: FontHandle,
    icon_dir: Optional[Union[str, Path]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    formats: Sequence[str] = ("stl", "svg"),
    prefix: str = "",
    min_triangles: int = MIN_EXPORT_TRIANGLES,
    px_per_mm: float = PREVIEW_PX_PER_MM,
    png_dpi: int = PREVIEW_PNG_DPI,
    progress_callback: Optional[Callable[[int, int, JobResult], None]] = None,
) -> BatchResult:
    """Generate every job into ``output_dir``.

    Jobs share the read-only font handle. A failing job is recorded and
    the others continue. Results keep the order of ``jobs``.

    Args:
        jobs: label jobs
        output_dir: output directory (created if missing)
        font: font for all labels
        icon_dir: directory of catalog icons (bundled icons by default)
        parallel: run jobs on a thread pool
        max_workers: maximum parallel workers (None = executor default)
        formats: output formats among stl, svg, png, dxf
        prefix: prefix for output file names
        min_triangles: validation threshold
        px_per_mm, png_dpi: preview resolution
        progress_callback: called after each job: (current, total, result)
    """
    start_time = time.perf_counter()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if not jobs:
        logger.warning("No label jobs to run")
        return BatchResult(total_duration_seconds=time.perf_counter() - start_time)

    logger.info("Starting batch: %d labels, parallel=%s", len(jobs), parallel)

    results: List[Optional[JobResult]] = [None] * len(jobs)
    kwargs = dict(icon_dir=icon_dir, formats=formats, prefix=prefix, min_triangles=min_triangles,
                  px_per_mm=px_per_mm, png_dpi=png_dpi)

    def report(done: int, result: JobResult) -> None:
        if progress_callback:
            progress_callback(done, len(jobs), result)
        logger.info("[%d/%d] %s: %s (%.1fs)",
                    done, len(jobs), result.name, result.status, result.duration_seconds)

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(run_job, job, output_dir, font, **kwargs): index
                for index, job in enumerate(jobs)
            }
            for done, future in enumerate(as_completed(futures), 1):
                result = future.result()
                results[futures[future]] = result
                report(done, result)
    else:
        for index, job in enumerate(jobs):
            with LogContext(label=job.name):
                result = run_job(job, output_dir, font, **kwargs)
            results[index] = result
            report(index + 1, result)

    batch_result = BatchResult(
        results=[r for r in results if r is not None],
        total_duration_seconds=time.perf_counter() - start_time,
    )
    logger.info(
        "Batch complete: %d/%d successful (%.1f%%) in %.1fs",
        batch_result.successful, batch_result.total,
        batch_result.success_rate, batch_result.total_duration_seconds,
    )
    return batch_result


def verify_presets(font: FontHandle, text: str = "BOLTS") -> BatchResult:
    """Generate every preset in memory and check the exported mesh.

    Each preset passes when the validated mesh is within SIZE_TOLERANCE_MM
    of the preset size, between MIN_LABEL_DEPTH_MM and MAX_LABEL_DEPTH_MM
    deep, and has at least MIN_EXPORT_TRIANGLES triangles.
    """
    start_time = time.perf_counter()
    results = []

    for preset in PRESETS:
        started = time.perf_counter()
        result = JobResult(name=preset.id)
        try:
            request = normalize_request(text, preset.width_mm, preset.height_mm)
            report = generate_label(request, font).report
            result.triangle_count = report.triangle_count
            result.dimensions = tuple(float(v) for v in report.bounding_box.dimensions)

            problems = []
            if abs(report.width - preset.width_mm) > SIZE_TOLERANCE_MM:
                problems.append(f"width {report.width:.2f} != {preset.width_mm:.2f}")
            if abs(report.height - preset.height_mm) > SIZE_TOLERANCE_MM:
                problems.append(f"height {report.height:.2f} != {preset.height_mm:.2f}")
            if not MIN_LABEL_DEPTH_MM <= report.depth <= MAX_LABEL_DEPTH_MM:
                problems.append(f"depth {report.depth:.2f} outside "
                                f"{MIN_LABEL_DEPTH_MM}-{MAX_LABEL_DEPTH_MM}")
            if report.triangle_count < MIN_EXPORT_TRIANGLES:
                problems.append(f"{report.triangle_count} triangles")

            result.success = not problems
            result.error = "; ".join(problems) or None
        except LabelError as e:
            result.error = str(e)

        result.duration_seconds = time.perf_counter() - started
        level = logging.INFO if result.success else logging.ERROR
        logger.log(level, "Preset %s: %s%s", preset.id, result.status,
                   f" ({result.error})" if result.error else "")
        results.append(result)

    return BatchResult(results=results, total_duration_seconds=time.perf_counter() - start_time)
