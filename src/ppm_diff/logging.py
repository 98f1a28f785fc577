"""loguru sinks for the ``ppm-diff`` CLI.

Every record carries a ``run_id`` extra so that the lines of one comparison
can be picked out of a shared log file. Library modules only ever call
``logger.<level>(...)``; sinks are installed here, once, by the CLI.
"""

from __future__ import annotations

import sys
import uuid
from typing import Optional

from loguru import logger

TEXT_FORMAT = "<level>{level: <8}</level> | {extra[run_id]:>8} | {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[run_id]} | {name}:{line} | {message}"


def setup_logging(
    level: str = "INFO",
    fmt: str = "text",
    run_id: Optional[str] = None,
    log_file: Optional[str] = None,
) -> str:
    """Replace loguru's sinks with a stderr sink and, optionally, a file sink.

    Args:
        level: Minimum level name, case-insensitive.
        fmt: ``"text"`` for the coloured one-line format, ``"json"`` for
            loguru's serialized records.
        run_id: Identifier bound to every record. Generated if omitted.
        log_file: Append records to this path as well. The file always gets
            the plain-text format with timestamps and call sites.

    Returns:
        The run id in effect.
    """
    run_id = run_id or new_run_id()
    logger.configure(extra={"run_id": run_id})

    logger.remove()
    level = level.upper()
    if fmt == "json":
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT)
    if log_file:
        logger.add(log_file, level=level, format=FILE_FORMAT, encoding="utf-8")
    return run_id


def new_run_id() -> str:
    return uuid.uuid4().hex[:8]
