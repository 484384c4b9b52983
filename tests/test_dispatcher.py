from __future__ import annotations

import logging
from typing import Dict, List

import pytest

from fakes import FakeSheetsService, make_http_error
from provisioner import dispatcher
from provisioner.dispatcher import OperationStatus
from provisioner.errors import InvalidReference, RemoteOperationError, SourceReadError
from provisioner.operations import ReplaceAtCell, ReplaceEntireSheet, UnknownOperation
from provisioner.sheets_client import GoogleSheetsClient


class _Sources:
    """Data loader returning canned rows and recording each path it served."""

    def __init__(self, tables: Dict[str, List[List[str]]]) -> None:
        self.tables = tables
        self.loaded: List[str] = []

    def __call__(self, path: str) -> List[List[str]]:
        self.loaded.append(path)
        if path not in self.tables:
            raise SourceReadError(f"Failed to read CSV file {path}", path=path)
        return self.tables[path]


def _run(service: FakeSheetsService, operations, sources: _Sources):
    return dispatcher.run(GoogleSheetsClient("sheet-123", service), operations, load=sources)


def test_missing_sheet_is_skipped_and_next_operation_runs(caplog) -> None:
    service = FakeSheetsService({"Sheet1": 0})
    sources = _Sources({"d.csv": [["a", "b"]]})
    operations = [
        ReplaceEntireSheet(sheet_name="Missing", data_path="d.csv"),
        ReplaceEntireSheet(sheet_name="Sheet1", data_path="d.csv"),
    ]

    with caplog.at_level(logging.WARNING):
        report = _run(service, operations, sources)

    assert service.writes == [
        ("clear", "'Sheet1'"),
        ("update", "'Sheet1'", [["a", "b"]], "USER_ENTERED"),
    ]
    assert [result.status for result in report.results] == [OperationStatus.SKIPPED, OperationStatus.APPLIED]
    assert "Missing" in report.skipped[0].reason
    assert sources.loaded == ["d.csv"]
    assert any("Missing" in record.getMessage() for record in caplog.records)


def test_registry_is_fetched_once_per_run() -> None:
    service = FakeSheetsService({"A": 1, "B": 2})
    sources = _Sources({"a.csv": [["1"]], "b.csv": [["2"]]})
    operations = [
        ReplaceEntireSheet(sheet_name="A", data_path="a.csv"),
        ReplaceAtCell(sheet_name="B", data_path="b.csv", cell_id="C3"),
        ReplaceEntireSheet(sheet_name="A", data_path="b.csv"),
    ]

    _run(service, operations, sources)

    assert [call[0] for call in service.calls].count("get") == 1


def test_operations_apply_in_declared_order() -> None:
    service = FakeSheetsService({"First": 10, "Second": 20})
    sources = _Sources({"one.csv": [["1"]], "two.csv": [["2", "3"]]})
    operations = [
        ReplaceAtCell(sheet_name="Second", data_path="two.csv", cell_id="B2"),
        ReplaceEntireSheet(sheet_name="First", data_path="one.csv"),
    ]

    report = _run(service, operations, sources)

    assert service.writes == [
        ("update", "'Second'!B2:C2", [["2", "3"]], "USER_ENTERED"),
        ("clear", "'First'"),
        ("update", "'First'", [["1"]], "USER_ENTERED"),
    ]
    assert [result.index for result in report.applied] == [1, 2]
    assert report.ok


def test_read_failure_aborts_before_later_operations() -> None:
    service = FakeSheetsService({"S": 0})
    sources = _Sources({"one.csv": [["1"]], "three.csv": [["3"]]})
    operations = [
        ReplaceEntireSheet(sheet_name="S", data_path="one.csv"),
        ReplaceEntireSheet(sheet_name="S", data_path="two.csv"),
        ReplaceEntireSheet(sheet_name="S", data_path="three.csv"),
    ]

    with pytest.raises(SourceReadError) as excinfo:
        _run(service, operations, sources)

    assert sources.loaded == ["one.csv", "two.csv"]
    assert service.writes == [("clear", "'S'"), ("update", "'S'", [["1"]], "USER_ENTERED")]
    report = excinfo.value.report
    assert [result.status for result in report.results] == [OperationStatus.APPLIED, OperationStatus.FAILED]
    assert report.failed[0].cause is excinfo.value


def test_unknown_operation_type_is_skipped_without_writes() -> None:
    service = FakeSheetsService({"S": 0})
    sources = _Sources({"d.csv": [["1"]]})
    operations = [
        UnknownOperation(sheet_name="S", data_path="d.csv", raw_type="appendRows"),
        ReplaceAtCell(sheet_name="S", data_path="d.csv", cell_id="A1"),
    ]

    report = _run(service, operations, sources)

    assert service.writes == [("update", "'S'!A1:A1", [["1"]], "USER_ENTERED")]
    assert report.skipped[0].reason == "unknown operation type 'appendRows'"
    assert report.summary() == "1 applied, 1 skipped, 0 failed"


def test_remote_failure_is_fatal_and_not_retried() -> None:
    service = FakeSheetsService({"S": 0})
    service.fail_on["update"] = make_http_error()
    sources = _Sources({"d.csv": [["1"]], "e.csv": [["2"]]})
    operations = [
        ReplaceAtCell(sheet_name="S", data_path="d.csv", cell_id="A1"),
        ReplaceAtCell(sheet_name="S", data_path="e.csv", cell_id="A1"),
    ]

    with pytest.raises(RemoteOperationError) as excinfo:
        _run(service, operations, sources)

    assert sources.loaded == ["d.csv"]
    assert excinfo.value.report.failed[0].index == 1


def test_invalid_anchor_aborts_the_run() -> None:
    service = FakeSheetsService({"S": 0})
    sources = _Sources({"d.csv": [["1"]]})
    operations = [
        ReplaceAtCell(sheet_name="S", data_path="d.csv", cell_id="not-a-cell"),
        ReplaceEntireSheet(sheet_name="S", data_path="d.csv"),
    ]

    with pytest.raises(InvalidReference):
        _run(service, operations, sources)

    assert service.writes == []


def test_empty_data_is_reported_with_reason() -> None:
    service = FakeSheetsService({"S": 0})
    sources = _Sources({"empty.csv": []})

    report = _run(service, [ReplaceAtCell(sheet_name="S", data_path="empty.csv", cell_id="A1")], sources)

    assert report.applied[0].reason == "no data rows"
    assert service.writes == []


def test_registry_failure_propagates() -> None:
    service = FakeSheetsService({"S": 0})
    service.fail_on["get"] = make_http_error(404, "Not Found")

    with pytest.raises(RemoteOperationError):
        _run(service, [ReplaceEntireSheet(sheet_name="S", data_path="d.csv")], _Sources({}))


def test_transport_failure_is_recorded_and_aborts() -> None:
    service = FakeSheetsService({"S": 0})
    service.fail_on["update"] = TimeoutError("timed out")
    sources = _Sources({"d.csv": [["1"]], "e.csv": [["2"]]})
    operations = [
        ReplaceAtCell(sheet_name="S", data_path="d.csv", cell_id="A1"),
        ReplaceAtCell(sheet_name="S", data_path="e.csv", cell_id="A1"),
    ]

    with pytest.raises(RemoteOperationError) as excinfo:
        _run(service, operations, sources)

    failed = excinfo.value.report.failed
    assert [result.index for result in failed] == [1]
    assert isinstance(failed[0].cause.__cause__, TimeoutError)
    assert sources.loaded == ["d.csv"]


def test_titles_with_literal_quotes_target_the_registry_sheet() -> None:
    service = FakeSheetsService({"'Q1'": 0, "Q1": 1})
    sources = _Sources({"d.csv": [["x"]]})
    operations = [
        ReplaceEntireSheet(sheet_name="'Q1'", data_path="d.csv"),
        ReplaceAtCell(sheet_name="'Q1'", data_path="d.csv", cell_id="B2"),
    ]

    _run(service, operations, sources)

    assert service.writes == [
        ("clear", "'''Q1'''"),
        ("update", "'''Q1'''", [["x"]], "USER_ENTERED"),
        ("update", "'''Q1'''!B2:B2", [["x"]], "USER_ENTERED"),
    ]
