"""In-memory stand-ins for the googleapiclient Sheets and Drive services."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

from googleapiclient.errors import HttpError


def make_http_error(status: int = 500, reason: str = "Backend Error") -> HttpError:
    return HttpError(SimpleNamespace(status=status, reason=reason), b"{}")


class _FakeRequest:
    def __init__(self, callback):
        self._callback = callback

    def execute(self):
        return self._callback()


class _FakeValues:
    def __init__(self, service: "FakeSheetsService") -> None:
        self._service = service

    def clear(self, spreadsheetId: str, range: str, body: Dict[str, Any]):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._record("clear", range))

    def update(self, spreadsheetId: str, range: str, valueInputOption: str, body: Dict[str, Any]):  # noqa: N803
        return _FakeRequest(
            lambda: self._service._record("update", range, body["values"], valueInputOption)
        )


class _FakeSpreadsheets:
    def __init__(self, service: "FakeSheetsService") -> None:
        self._service = service

    def get(self, spreadsheetId: str, **kwargs: Any):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._handle_get(spreadsheetId))

    def values(self) -> _FakeValues:
        return _FakeValues(self._service)


class FakeSheetsService:
    """Records every Sheets call in ``calls`` in the order it executed."""

    def __init__(self, sheets: Optional[Dict[str, int]] = None) -> None:
        self.sheets: Dict[str, int] = dict(sheets or {})
        self.calls: List[Tuple[Any, ...]] = []
        self.fail_on: Dict[str, Exception] = {}

    def spreadsheets(self) -> _FakeSpreadsheets:
        return _FakeSpreadsheets(self)

    @property
    def writes(self) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] in ("clear", "update")]

    def _handle_get(self, spreadsheet_id: str) -> Dict[str, Any]:
        self.calls.append(("get", spreadsheet_id))
        if "get" in self.fail_on:
            raise self.fail_on["get"]
        return {
            "sheets": [
                {"properties": {"sheetId": sheet_id, "title": title}}
                for title, sheet_id in self.sheets.items()
            ]
        }

    def _record(self, kind: str, *args: Any) -> Dict[str, Any]:
        if kind in self.fail_on:
            raise self.fail_on[kind]
        self.calls.append((kind, *args))
        return {}


class _FakeFiles:
    def __init__(self, service: "FakeDriveService") -> None:
        self._service = service

    def copy(self, fileId: str, body: Dict[str, Any], **kwargs: Any):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._record("copy", fileId, body, kwargs))

    def get(self, fileId: str, **kwargs: Any):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._record("get", fileId, kwargs))

    def update(self, fileId: str, **kwargs: Any):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._record("update", fileId, kwargs))


class _FakePermissions:
    def __init__(self, service: "FakeDriveService") -> None:
        self._service = service

    def create(self, fileId: str, body: Dict[str, Any], **kwargs: Any):  # noqa: N803 - API compatibility
        return _FakeRequest(lambda: self._service._record("share", fileId, body, kwargs))


class FakeDriveService:
    def __init__(self, new_file_id: str = "new-file-id", parents: Optional[List[str]] = None) -> None:
        self.new_file_id = new_file_id
        self.parents = list(parents if parents is not None else ["root-folder"])
        self.calls: List[Tuple[Any, ...]] = []
        self.fail_on: Dict[str, Exception] = {}

    def files(self) -> _FakeFiles:
        return _FakeFiles(self)

    def permissions(self) -> _FakePermissions:
        return _FakePermissions(self)

    def _record(self, kind: str, *args: Any) -> Dict[str, Any]:
        if kind in self.fail_on:
            raise self.fail_on[kind]
        self.calls.append((kind, *args))
        if kind == "copy":
            return {"id": self.new_file_id, "name": args[1]["name"]}
        if kind == "get":
            return {"parents": list(self.parents)}
        if kind == "update":
            return {"id": args[0], "parents": [args[1]["addParents"]]}
        return {"id": "perm-1"}
