"""Google Drive API helpers for provisioning a spreadsheet from a template."""
from __future__ import annotations

import logging
import re
from typing import Dict, List

from provisioner.errors import ConfigError, RemoteOperationError
from provisioner.sheets_client import REMOTE_ERRORS

logger = logging.getLogger(__name__)

SPREADSHEET_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{file_id}"
_FILE_ID_PATTERN = re.compile(r"[-\w]{25,}")

__all__ = [
    "SPREADSHEET_URL_TEMPLATE",
    "copy_file",
    "extract_spreadsheet_id",
    "move_file_to_folder",
    "share_with_domain",
    "spreadsheet_url",
]


def extract_spreadsheet_id(url: str) -> str:
    """Return the file id embedded in a Google Sheets URL (or a bare id)."""

    match = _FILE_ID_PATTERN.search(url or "")
    if not match:
        raise ConfigError("Invalid Google Sheets URL. Could not extract spreadsheet ID.")
    return match.group(0)


def spreadsheet_url(file_id: str) -> str:
    return SPREADSHEET_URL_TEMPLATE.format(file_id=file_id)


def copy_file(service, source_id: str, name: str) -> Dict:
    """Copy ``source_id`` to a new file called ``name`` and return its metadata."""

    try:
        created = (
            service.files()
            .copy(
                fileId=source_id,
                body={"name": name},
                supportsAllDrives=True,
                fields="id, name, parents",
            )
            .execute()
        )
    except REMOTE_ERRORS as exc:
        raise RemoteOperationError(f"Error copying spreadsheet {source_id}: {exc}") from exc
    logger.info("[Drive] Template spreadsheet copied with ID: %s", created.get("id"))
    return created


def move_file_to_folder(service, file_id: str, folder_id: str, shared_drive_id: str) -> Dict:
    """Move ``file_id`` out of its current parents into ``folder_id``."""

    try:
        current = (
            service.files()
            .get(fileId=file_id, fields="parents", supportsAllDrives=True)
            .execute()
        )
        previous_parents: List[str] = current.get("parents", [])
        updated = (
            service.files()
            .update(
                fileId=file_id,
                addParents=folder_id,
                removeParents=",".join(previous_parents),
                supportsAllDrives=True,
                fields="id, parents",
            )
            .execute()
        )
    except REMOTE_ERRORS as exc:
        raise RemoteOperationError(f"Error moving file {file_id} to folder {folder_id}: {exc}") from exc
    logger.info("[Drive] File moved to folder %s in shared drive %s", folder_id, shared_drive_id)
    return updated


def share_with_domain(service, file_id: str, domain: str, *, role: str = "reader") -> Dict:
    """Grant everyone in ``domain`` ``role`` access to ``file_id``."""

    try:
        permission = (
            service.permissions()
            .create(
                fileId=file_id,
                supportsAllDrives=True,
                body={"type": "domain", "role": role, "domain": domain},
                fields="id",
            )
            .execute()
        )
    except REMOTE_ERRORS as exc:
        raise RemoteOperationError(f"Error sharing file {file_id} with {domain}: {exc}") from exc
    logger.info("[Drive] File shared with everyone in the organization (%s)", domain)
    return permission
