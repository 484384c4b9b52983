"""Operation model and structural validation.

A raw operation is the mapping a user declares in a JSON config or through the
interactive prompts::

    {"sheetName": "Data", "dataPath": "data.csv",
     "operationType": "replaceAtCell", "cellId": "B2"}

:func:`validate` turns a whole batch of such mappings into typed operations or
fails on the first structural problem.  Nothing here touches the network or
the file system; sheet and file existence are resolved later against live
state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from provisioner.errors import ConfigError

__all__ = [
    "CONFIG_REQUIRED_FIELDS",
    "OPERATION_REQUIRED_FIELDS",
    "Operation",
    "OperationType",
    "ProvisionConfig",
    "ReplaceAtCell",
    "ReplaceEntireSheet",
    "UnknownOperation",
    "validate",
    "validate_config",
]


class OperationType(Enum):
    REPLACE_ENTIRE_SHEET = "replaceEntireSheet"
    REPLACE_AT_CELL = "replaceAtCell"

    @classmethod
    def lookup(cls, value: str) -> Optional["OperationType"]:
        """Return the member matching ``value`` case-insensitively, if any."""

        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        return None


@dataclass(frozen=True)
class ReplaceEntireSheet:
    sheet_name: str
    data_path: str

    operation_type = OperationType.REPLACE_ENTIRE_SHEET


@dataclass(frozen=True)
class ReplaceAtCell:
    sheet_name: str
    data_path: str
    cell_id: str

    operation_type = OperationType.REPLACE_AT_CELL


@dataclass(frozen=True)
class UnknownOperation:
    """An operation whose type this version does not know how to apply."""

    sheet_name: str
    data_path: str
    raw_type: str
    cell_id: Optional[str] = None

    operation_type = None


Operation = Union[ReplaceEntireSheet, ReplaceAtCell, UnknownOperation]

OPERATION_REQUIRED_FIELDS: Tuple[str, ...] = ("sheetName", "dataPath", "operationType")
CONFIG_REQUIRED_FIELDS: Tuple[str, ...] = (
    "templateUrl",
    "newSpreadsheetName",
    "folderId",
    "sharedDriveId",
    "orgDomain",
)


def _field(raw: Mapping[str, Any], name: str) -> Optional[str]:
    value = raw.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _build_operation(raw: Mapping[str, Any], position: int) -> Operation:
    for name in OPERATION_REQUIRED_FIELDS:
        if _field(raw, name) is None:
            raise ConfigError(f"missing field {name}, operation #{position}")

    sheet_name = str(raw["sheetName"]).strip()
    data_path = str(raw["dataPath"]).strip()
    raw_type = _field(raw, "operationType") or ""
    cell_id = _field(raw, "cellId")

    kind = OperationType.lookup(raw_type)
    if kind is OperationType.REPLACE_AT_CELL:
        if cell_id is None:
            raise ConfigError(f"missing cellId, operation #{position}")
        return ReplaceAtCell(sheet_name=sheet_name, data_path=data_path, cell_id=cell_id)
    if kind is OperationType.REPLACE_ENTIRE_SHEET:
        return ReplaceEntireSheet(sheet_name=sheet_name, data_path=data_path)
    return UnknownOperation(sheet_name=sheet_name, data_path=data_path, raw_type=raw_type, cell_id=cell_id)


def validate(operations: Optional[Sequence[Mapping[str, Any]]]) -> List[Operation]:
    """Validate every raw operation before any of them is applied."""

    if not operations:
        raise ConfigError("empty batch")
    if isinstance(operations, (str, bytes, Mapping)):
        raise ConfigError("operations must be a list")

    validated: List[Operation] = []
    for position, raw in enumerate(operations, start=1):
        if not isinstance(raw, Mapping):
            raise ConfigError(f"operation #{position} must be an object")
        validated.append(_build_operation(raw, position))
    return validated


@dataclass(frozen=True)
class ProvisionConfig:
    """Everything needed to provision and populate one spreadsheet."""

    template_url: str
    new_spreadsheet_name: str
    folder_id: str
    shared_drive_id: str
    org_domain: str
    operations: List[Operation] = field(default_factory=list)


def validate_config(raw: Mapping[str, Any]) -> ProvisionConfig:
    """Validate the top-level configuration and its operation batch."""

    if not isinstance(raw, Mapping):
        raise ConfigError("configuration must be an object")
    for name in CONFIG_REQUIRED_FIELDS:
        if _field(raw, name) is None:
            raise ConfigError(f"missing required configuration: {name}")

    return ProvisionConfig(
        template_url=str(raw["templateUrl"]).strip(),
        new_spreadsheet_name=str(raw["newSpreadsheetName"]).strip(),
        folder_id=str(raw["folderId"]).strip(),
        shared_drive_id=str(raw["sharedDriveId"]).strip(),
        org_domain=str(raw["orgDomain"]).strip(),
        operations=validate(raw.get("operations")),
    )
