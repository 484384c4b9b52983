"""Application-wide logging configuration utilities."""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from provisioner import app_paths

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"


def configure_logging(
    level: int = logging.INFO,
    *,
    log_path: Optional[Path] = None,
    console: bool = True,
) -> Path:
    """Configure root logging to a file and, optionally, to stderr.

    Parameters
    ----------
    level:
        The minimum logging level for the root logger.
    log_path:
        Log file location.  Defaults to ``provisioner.log`` in the per-user
        log directory.
    console:
        Also echo records to stderr, which the CLI uses for progress output.

    Returns
    -------
    pathlib.Path
        The path to the log file.
    """

    target = log_path or app_paths.log_path()
    app_paths.ensure_directory(target.parent)

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.setLevel(level)
    else:
        root_logger.setLevel(min(root_logger.level, level))

    already_configured = any(
        isinstance(handler, logging.FileHandler)
        and getattr(handler, "baseFilename", None) == os.path.abspath(target)
        for handler in root_logger.handlers
    )
    if not already_configured:
        file_handler = logging.FileHandler(target, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)

    has_console = any(getattr(handler, "_provisioner_console", False) for handler in root_logger.handlers)
    if console and not has_console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        stream_handler.setLevel(level)
        stream_handler._provisioner_console = True  # type: ignore[attr-defined]
        root_logger.addHandler(stream_handler)

    root_logger.debug("Logging configured. Writing to %s", target)
    return target
