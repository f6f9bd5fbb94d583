"""
Structured logging for the stl_label package.

Provides:
- JSON formatter for machine-readable log files
- Console formatter for human-readable terminal output
- Timing helpers (context manager and decorator) for synthesis steps
- LogContext for tagging every record of one label job

Usage:
    from stl_label.logging_config import setup_logging, log_timing

    setup_logging(level=logging.INFO, json_file="labels.log.json")

    logger = logging.getLogger(__name__)
    with log_timing(logger, "Extruding text", label="BOLTS"):
        ...
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, Union

F = TypeVar('F', bound=Callable[..., Any])

PACKAGE_LOGGER = "stl_label"

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_KEYS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'asctime', 'taskName',
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_KEYS}


class JSONFormatter(logging.Formatter):
    """Emit each record as one JSON object per line.

    Fields passed through ``extra={...}`` are merged into the object;
    values that are not JSON-serializable are stored as ``str(value)``.
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            for key, value in _extra_fields(record).items():
                try:
                    json.dumps(value)
                    entry[key] = value
                except (TypeError, ValueError):
                    entry[key] = str(value)

        return json.dumps(entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Terminal formatter: ``[HH:MM:SS] LEVEL module: message [k=v, ...]``."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_str = f"{self.COLORS[level]}{level:8}{self.COLORS['RESET']}"
        else:
            level_str = f"{level:8}"

        logger_name = record.name
        if logger_name.startswith(PACKAGE_LOGGER + "."):
            logger_name = logger_name[len(PACKAGE_LOGGER) + 1:]

        extra_str = ""
        if self.show_extra:
            parts = []
            for key, value in _extra_fields(record).items():
                if isinstance(value, float):
                    parts.append(f"{key}={value:.3g}")
                elif isinstance(value, (list, tuple)) and len(value) > 3:
                    parts.append(f"{key}=[...{len(value)} items]")
                else:
                    parts.append(f"{key}={value}")
            if parts:
                extra_str = " [" + ", ".join(parts) + "]"

        result = f"[{time_str}] {level_str} {logger_name}: {record.getMessage()}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


def setup_logging(
    level: int = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
) -> logging.Logger:
    """Configure the ``stl_label`` logger.

    Replaces any handlers installed by a previous call, so it is safe to
    call once per CLI invocation and again from tests.

    Args:
        level: Minimum log level
        json_file: Optional path of a JSON-lines log file
        console: Log to stderr
        use_colors: Use ANSI colors on the console

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(console_handler)

    if json_file:
        json_handler = logging.FileHandler(Path(json_file), encoding='utf-8')
        json_handler.setLevel(level)
        json_handler.setFormatter(JSONFormatter())
        logger.addHandler(json_handler)

    logger.propagate = False
    return logger


@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **extra_fields: Any
) -> Iterator[Dict[str, Any]]:
    """Log start, completion and elapsed time of an operation.

    The yielded dict can be filled with result details (triangle counts,
    sizes); they are attached to the completion record. Failures are logged
    at ERROR and re-raised.

    Example:
        with log_timing(logger, "Compositing", mode="deboss") as info:
            mesh = compose(plate, features, mode)
            info["triangles"] = len(mesh)
    """
    timing_info: Dict[str, Any] = {}
    start = time.perf_counter()

    logger.log(level, f"Starting: {operation}", extra={
        "event": "start", "operation": operation, **extra_fields,
    })

    try:
        yield timing_info
    except Exception as e:
        elapsed = time.perf_counter() - start
        logger.error(f"Failed: {operation} ({elapsed:.3f}s) - {e}", extra={
            "event": "error",
            "operation": operation,
            "elapsed_seconds": elapsed,
            "error": str(e),
            **extra_fields,
        })
        raise

    elapsed = time.perf_counter() - start
    timing_info['elapsed_seconds'] = elapsed
    logger.log(level, f"Completed: {operation} ({elapsed:.3f}s)", extra={
        "event": "complete",
        "operation": operation,
        **extra_fields,
        **timing_info,
    })


def timed(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    operation: Optional[str] = None,
) -> Callable[[F], F]:
    """Decorator form of :func:`log_timing`.

    Uses the decorated function's module logger and name by default.
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            func_logger = logger or logging.getLogger(func.__module__)
            with log_timing(func_logger, operation or func.__name__, level):
                return func(*args, **kwargs)

        return wrapper  # type: ignore
    return decorator


class _ContextFilter(logging.Filter):
    def __init__(self, fields: Dict[str, Any]):
        super().__init__()
        self.fields = fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.fields.items():
            setattr(record, key, value)
        return True


class LogContext:
    """Attach fields (e.g. the label name) to records in a scope.

    The filter is installed on the handlers of the package logger, so it
    sees records from every ``stl_label.*`` module.

    Example:
        with LogContext(label="bolts-m3"):
            generate_label(request, font)
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._filter = _ContextFilter(fields)

    def __enter__(self) -> 'LogContext':
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.addFilter(self._filter)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
            handler.removeFilter(self._filter)
