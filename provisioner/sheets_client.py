"""Google Sheets client used by the data-operation engine.

This module is the only place that talks to the Sheets ``spreadsheets`` and
``spreadsheets.values`` resources.  It exposes the three calls the engine
needs:

* ``fetch_sheet_registry`` reads the title → sheetId mapping in one
  ``spreadsheets.get`` request.
* ``clear_range`` clears an A1 range.
* ``update_values`` writes a block of rows with ``USER_ENTERED`` value
  interpretation so formulas and dates behave as if typed by a user.

Every failure raised while executing a request (HTTP errors, transport and
timeout errors, credential refresh errors) is re-raised as
:class:`~provisioner.errors.RemoteOperationError` with the original error
chained, so callers never need to import googleapiclient.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Sequence

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from provisioner.errors import RemoteOperationError

logger = logging.getLogger(__name__)

USER_ENTERED = "USER_ENTERED"

# Everything a request's ``execute()`` can raise: API errors, socket and
# timeout failures, httplib2 transport errors and token refresh failures.
REMOTE_ERRORS = (HttpError, OSError, httplib2.HttpLib2Error, GoogleAuthError)

SheetRegistry = Dict[str, int]

__all__ = ["GoogleSheetsClient", "REMOTE_ERRORS", "SheetRegistry", "USER_ENTERED"]


class GoogleSheetsClient:
    """Handle on one remote spreadsheet."""

    def __init__(self, spreadsheet_id: str, service) -> None:
        self._spreadsheet_id = spreadsheet_id
        self._service = service

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    def fetch_sheet_registry(self) -> SheetRegistry:
        """Return a snapshot of sheet titles mapped to their numeric ids."""

        try:
            response = (
                self._service.spreadsheets()
                .get(
                    spreadsheetId=self._spreadsheet_id,
                    includeGridData=False,
                    fields="sheets.properties(sheetId,title)",
                )
                .execute()
            )
        except REMOTE_ERRORS as exc:
            raise RemoteOperationError(f"Failed to read sheets of {self._spreadsheet_id}: {exc}") from exc

        sheets: Sequence[Mapping[str, Any]] = response.get("sheets", [])
        registry: SheetRegistry = {}
        for sheet in sheets:
            properties = sheet.get("properties", {})
            title = properties.get("title")
            if title is None:
                continue
            registry[str(title)] = int(properties.get("sheetId", 0))
        logger.debug("[Sheets] Registry for %s: %s", self._spreadsheet_id, registry)
        return registry

    def clear_range(self, a1_range: str) -> None:
        try:
            (
                self._service.spreadsheets()
                .values()
                .clear(spreadsheetId=self._spreadsheet_id, range=a1_range, body={})
                .execute()
            )
        except REMOTE_ERRORS as exc:
            raise RemoteOperationError(f"Failed to clear {a1_range}: {exc}") from exc
        logger.debug("[Sheets] Cleared %s", a1_range)

    def update_values(
        self,
        a1_range: str,
        values: Sequence[Sequence[str]],
        *,
        value_input_option: str = USER_ENTERED,
    ) -> Dict[str, Any]:
        """Write ``values`` into ``a1_range`` and return the API response."""

        body = {
            "range": a1_range,
            "majorDimension": "ROWS",
            "values": [list(row) for row in values],
        }
        try:
            response = (
                self._service.spreadsheets()
                .values()
                .update(
                    spreadsheetId=self._spreadsheet_id,
                    range=a1_range,
                    valueInputOption=value_input_option,
                    body=body,
                )
                .execute()
            )
        except REMOTE_ERRORS as exc:
            raise RemoteOperationError(f"Failed to write {a1_range}: {exc}") from exc
        logger.debug("[Sheets] Wrote %d rows to %s", len(body["values"]), a1_range)
        return response or {}
