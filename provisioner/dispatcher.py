"""Sequential dispatcher applying validated operations to one spreadsheet."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from provisioner import csv_loader, strategies
from provisioner.csv_loader import TabularData
from provisioner.errors import ProvisionerError
from provisioner.operations import Operation

logger = logging.getLogger(__name__)

__all__ = ["BatchReport", "OperationResult", "OperationStatus", "run"]


class OperationStatus(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class OperationResult:
    """Outcome of a single operation in a batch."""

    index: int
    operation: Operation
    status: OperationStatus
    reason: str = ""
    cause: Optional[BaseException] = None


@dataclass
class BatchReport:
    results: List[OperationResult] = field(default_factory=list)

    def _with_status(self, status: OperationStatus) -> List[OperationResult]:
        return [result for result in self.results if result.status is status]

    @property
    def applied(self) -> List[OperationResult]:
        return self._with_status(OperationStatus.APPLIED)

    @property
    def skipped(self) -> List[OperationResult]:
        return self._with_status(OperationStatus.SKIPPED)

    @property
    def failed(self) -> List[OperationResult]:
        return self._with_status(OperationStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return (
            f"{len(self.applied)} applied, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed"
        )


Loader = Callable[[str], TabularData]


def _skip(report: BatchReport, index: int, operation: Operation, reason: str) -> None:
    logger.warning("Operation #%d on sheet %r skipped: %s", index, operation.sheet_name, reason)
    report.results.append(OperationResult(index, operation, OperationStatus.SKIPPED, reason))


def run(handle, operations: Sequence[Operation], *, load: Loader = csv_loader.load) -> BatchReport:
    """Apply ``operations`` in declared order and return the batch report.

    The sheet registry is fetched once up front.  Operations targeting a
    missing sheet or carrying an unknown type are skipped.  Any
    :class:`~provisioner.errors.ProvisionerError` raised while loading data or
    writing aborts the batch: it is recorded as failed, the report is attached
    to the exception as ``report`` and the exception is re-raised.
    """

    report = BatchReport()
    registry = handle.fetch_sheet_registry()

    for index, operation in enumerate(operations, start=1):
        logger.info("Processing operation #%d for sheet: %s", index, operation.sheet_name)

        if operation.sheet_name not in registry:
            _skip(report, index, operation, f"sheet {operation.sheet_name!r} not found")
            continue

        try:
            data = load(operation.data_path)

            strategy = strategies.strategy_for(operation)
            if strategy is None:
                raw_type = getattr(operation, "raw_type", type(operation).__name__)
                _skip(report, index, operation, f"unknown operation type {raw_type!r}")
                continue

            written = strategy(handle, operation, data)
        except ProvisionerError as exc:
            logger.error("Operation #%d on sheet %r failed: %s", index, operation.sheet_name, exc)
            report.results.append(
                OperationResult(index, operation, OperationStatus.FAILED, str(exc), cause=exc)
            )
            exc.report = report
            raise

        reason = "" if written else "no data rows"
        report.results.append(OperationResult(index, operation, OperationStatus.APPLIED, reason))

    logger.info("All operations processed: %s", report.summary())
    return report
