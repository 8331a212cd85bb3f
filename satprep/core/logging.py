"""
Structured logging configuration using structlog.

Console output is colored in debug mode and JSON otherwise. Every process
also writes logs/satprep_YYYYMMDD_HHMMSS.log; older files beyond
settings.log_sessions_to_keep are deleted at startup.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

import structlog
from structlog.typing import Processor

from satprep.core.config import settings

LOG_FILE_GLOB = "satprep_*.log"


def _cull_old_logs(logs_dir: Path, keep: int) -> None:
    by_age = sorted(
        logs_dir.glob(LOG_FILE_GLOB), key=lambda p: p.stat().st_mtime, reverse=True
    )
    for old_file in by_age[keep:]:
        old_file.unlink(missing_ok=True)


def configure_logging(
    log_sessions_to_keep: Optional[int] = None, logs_dir: Path = Path("logs")
) -> Path:
    """Configure structlog over the stdlib root logger. Returns the new log file."""
    keep = log_sessions_to_keep or settings.log_sessions_to_keep
    logs_dir.mkdir(parents=True, exist_ok=True)
    # leave room for this process's file
    _cull_old_logs(logs_dir, keep=keep - 1)

    log_file = logs_dir / f"satprep_{datetime.now():%Y%m%d_%H%M%S}.log"

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if settings.debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    level = logging.DEBUG if settings.debug else logging.INFO
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    root.setLevel(level)
    for handler in (logging.StreamHandler(), logging.FileHandler(log_file, mode="w")):
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return log_file


@contextmanager
def request_context(request_id: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with `request_id`."""
    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        yield
    finally:
        structlog.contextvars.clear_contextvars()
