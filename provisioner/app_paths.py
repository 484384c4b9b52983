"""Centralised helpers for the provisioner's per-user directories."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

_APP_ENV_VARS: Iterable[str] = ("LOCALAPPDATA", "APPDATA")


def _detect_base_directory() -> Path:
    for env_var in _APP_ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            return Path(value).expanduser().resolve() / "SheetProvisioner"
    return Path.home().resolve() / ".sheet-provisioner"


APP_DIR: Path = _detect_base_directory()
TOKENS_DIR: Path = APP_DIR / "tokens"
LOG_DIR: Path = APP_DIR / "logs"


def ensure_directory(path: Path) -> Path:
    """Ensure that ``path`` exists, returning the :class:`~pathlib.Path`."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def token_path(name: str = "token.json") -> Path:
    return TOKENS_DIR / name


def log_path(name: str = "provisioner.log") -> Path:
    return LOG_DIR / name


__all__ = [
    "APP_DIR",
    "LOG_DIR",
    "TOKENS_DIR",
    "ensure_directory",
    "log_path",
    "token_path",
]
