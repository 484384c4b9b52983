"""Runtime configuration for the provisioner."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from provisioner import app_paths
from provisioner.auth import AUTH_MODE_SERVICE_ACCOUNT, AUTH_MODES
from provisioner.errors import ConfigError
from provisioner.operations import ProvisionConfig, validate_config

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_PATH = os.getenv("SHEET_PROVISIONER_CREDENTIALS", "credentials.json")
DEFAULT_AUTH_MODE = os.getenv("SHEET_PROVISIONER_AUTH_MODE", AUTH_MODE_SERVICE_ACCOUNT)
DEFAULT_CLIENT_SECRET_PATH = os.getenv("SHEET_PROVISIONER_CLIENT_SECRET", "client_secret.json")
DEFAULT_TOKEN_PATH = os.getenv("SHEET_PROVISIONER_TOKEN_PATH", str(app_paths.token_path()))
DEFAULT_LOG_LEVEL = os.getenv("SHEET_PROVISIONER_LOG_LEVEL", "INFO")


@dataclass
class RuntimeSettings:
    """How to authenticate and where to log; independent of any one config."""

    credential_path: str = DEFAULT_CREDENTIALS_PATH
    auth_mode: str = DEFAULT_AUTH_MODE
    client_secret_path: str = DEFAULT_CLIENT_SECRET_PATH
    token_path: str = DEFAULT_TOKEN_PATH
    log_level: str = DEFAULT_LOG_LEVEL
    log_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.auth_mode not in AUTH_MODES:
            raise ConfigError(f"Unknown auth mode {self.auth_mode!r}; expected one of {', '.join(AUTH_MODES)}")

    @property
    def level(self) -> int:
        value = logging.getLevelName(str(self.log_level).upper())
        if not isinstance(value, int):
            raise ConfigError(f"Unknown log level: {self.log_level!r}")
        return value

    def resolve(self, candidate: str) -> Path:
        path = Path(candidate).expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


def read_config_file(path: str) -> Dict[str, Any]:
    """Return the raw JSON configuration stored at ``path``."""

    try:
        with open(path, "r", encoding="utf-8-sig") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ConfigError(f"Could not read configuration file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Configuration file {path} is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")
    return dict(data)


def load_config(path: str) -> ProvisionConfig:
    """Read and validate the provisioning configuration at ``path``."""

    config = validate_config(read_config_file(path))
    logger.debug("Loaded configuration from %s with %d operations", path, len(config.operations))
    return config


def write_config_file(path: str, raw: Mapping[str, Any]) -> None:
    """Persist ``raw`` so an interactive session can be replayed with ``run``."""

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(dict(raw), handle, indent=2)
    logger.info("Configuration saved to %s", path)
