"""Loguru setup for pipeline runs.

Console lines carry the run id and pipeline step, followed by whatever
structured fields the call site passed (``group=Theropoda species=...``).
The file sink writes JSON lines so a run can be inspected after the fact.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator

from loguru import logger

from ..config.settings import Settings, get_settings

# Bound on every record by configure_logging / logging_context; not repeated as fields.
_CONTEXT_FIELDS = frozenset({"run_id", "step", "module", "component", "_fields"})

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <7}</level> | "
    "<cyan>{extra[run_id]}</cyan>:<magenta>{extra[step]}</magenta> | "
    "{message}{extra[_fields]}\n{exception}"
)


def _render_fields(extra: Dict[str, Any]) -> str:
    fields = [f"{key}={extra[key]}" for key in sorted(extra) if key not in _CONTEXT_FIELDS]
    return " | " + " ".join(fields) if fields else ""


def _console_format(record: Dict[str, Any]) -> str:
    extra = record["extra"]
    extra.setdefault("run_id", "-")
    extra.setdefault("step", "-")
    extra["_fields"] = _render_fields(extra)
    return _CONSOLE_FORMAT


def configure_logging(
    settings: Settings | None = None,
    level: str = "INFO",
    *,
    log_file: Path | None = None,
) -> Path:
    """Replace loguru's sinks with a coloured console sink and a JSON-lines file.

    Returns the path of the file sink.
    """

    cfg = settings or get_settings()
    log_path = Path(log_file or cfg.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"run_id": "-", "step": "-"})
    logger.add(
        sys.stderr,
        level=level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        format=_console_format,
    )
    logger.add(
        log_path,
        level=level,
        enqueue=True,
        serialize=True,
        rotation="10 MB",
        retention=5,
    )
    return log_path


def get_logger(**context: Any):
    return logger.bind(**context)


@contextmanager
def logging_context(**context: Any) -> Iterator[Any]:
    """Attach ``run_id``/``step`` (or any field) to records emitted inside the block,
    including those from worker threads started within it."""

    with logger.contextualize(**context):
        yield logger


@contextmanager
def log_timing(step: str, *, logger_=logger, **fields: Any) -> Iterator[Dict[str, Any]]:
    """Log how long a pipeline step took.

    The yielded dict is merged into the timing record, so callers can report
    counts gathered inside the block.
    """

    extra: Dict[str, Any] = dict(fields)
    start = time.perf_counter()
    try:
        yield extra
    finally:
        elapsed = round(time.perf_counter() - start, 3)
        logger_.info("Step finished", timed_step=step, seconds=elapsed, **extra)


__all__ = ["configure_logging", "get_logger", "logging_context", "log_timing"]
