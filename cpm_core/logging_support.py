# cpm_core/logging_support.py
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator

_RUN_ID_CTX: ContextVar[str | None] = ContextVar("cpm_run_id", default=None)


def create_run_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"run-{stamp}-{uuid.uuid4().hex[:8]}"


def current_run_id() -> str | None:
    value = _RUN_ID_CTX.get()
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


@contextmanager
def bind_run_id(run_id: str | None = None) -> Iterator[str]:
    """
    Bind a run id for the duration of one scheduling call.

    Nested calls reuse the outer id so a composed analysis logs under a
    single run.
    """
    existing = current_run_id()
    if existing and not run_id:
        yield existing
        return
    normalized = (run_id or "").strip() or create_run_id()
    token = _RUN_ID_CTX.set(normalized)
    try:
        yield normalized
    finally:
        _RUN_ID_CTX.reset(token)


class RunIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = current_run_id() or "-"
        return True


def setup_logging(level: int = logging.INFO, log_file: str | Path | None = None) -> logging.Logger:
    """
    Configure the ``cpm_core`` logger for hosts that do not configure logging
    themselves. Console output always; a rotating file when ``log_file`` is given.
    """
    logger = logging.getLogger("cpm_core")
    logger.setLevel(level)
    logger.handlers.clear()

    run_filter = RunIdLogFilter()

    console = logging.StreamHandler()
    console.addFilter(run_filter)
    console.setFormatter(logging.Formatter("%(levelname)s [run=%(run_id)s]: %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=1_000_000,  # 1 MB per file
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.addFilter(run_filter)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] run=%(run_id)s %(name)s - %(message)s")
        )
        logger.addHandler(file_handler)
        logger.info("Logging initialized. Log file at %s", path)

    return logger


__all__ = [
    "bind_run_id",
    "create_run_id",
    "current_run_id",
    "RunIdLogFilter",
    "setup_logging",
]
