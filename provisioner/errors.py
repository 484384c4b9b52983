"""Exception hierarchy shared by the provisioning engine and its collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from provisioner.dispatcher import BatchReport

__all__ = [
    "ConfigError",
    "CredentialsError",
    "CredentialsFileInvalidError",
    "InvalidReference",
    "ProvisionerError",
    "RemoteOperationError",
    "SourceError",
    "SourceParseError",
    "SourceReadError",
]


class ProvisionerError(Exception):
    """Base error for every failure raised by the provisioner.

    ``report`` is populated by the dispatcher when the error aborts a batch so
    callers can inspect which operations ran before the failure.
    """

    report: Optional["BatchReport"] = None


class ConfigError(ProvisionerError):
    """Raised when the caller-supplied configuration is structurally invalid."""


class InvalidReference(ProvisionerError, ValueError):
    """Raised for malformed A1 cell references or column values."""


class SourceError(ProvisionerError):
    """Base error for data source failures."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class SourceReadError(SourceError):
    """Raised when a data source cannot be read."""


class SourceParseError(SourceError):
    """Raised when a data source is not well-formed delimited text."""


class RemoteOperationError(ProvisionerError, RuntimeError):
    """Raised when the Google Sheets or Drive API returns an error."""


class CredentialsError(ProvisionerError):
    """Raised when Google credentials cannot be loaded."""


class CredentialsFileInvalidError(CredentialsError):
    """Raised when a service account key file is unreadable or incomplete."""

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
