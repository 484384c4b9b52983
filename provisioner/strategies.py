"""Write strategies applied by the dispatcher.

Each strategy receives a spreadsheet handle exposing ``clear_range`` and
``update_values`` (see :class:`provisioner.sheets_client.GoogleSheetsClient`)
and issues its writes synchronously.

Rows are written exactly as loaded.  For ``replace_at_cell`` the target range
is as wide as the longest row; when a shorter row is sent, the Sheets API
leaves the cells it does not supply unchanged rather than blanking them.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Type

from provisioner import a1
from provisioner.csv_loader import TabularData
from provisioner.operations import Operation, ReplaceAtCell, ReplaceEntireSheet

logger = logging.getLogger(__name__)

__all__ = ["STRATEGIES", "replace_at_cell", "replace_entire_sheet", "strategy_for"]


def replace_entire_sheet(handle, sheet_name: str, data: TabularData) -> bool:
    """Clear ``sheet_name`` and write ``data`` from its top-left cell.

    Returns ``False`` when there was nothing to write after clearing.
    """

    target = a1.sheet_range(sheet_name)
    handle.clear_range(target)
    if not data:
        logger.info("Cleared sheet %s; no rows to write", sheet_name)
        return False
    handle.update_values(target, data)
    logger.info("Replaced all data in sheet: %s", sheet_name)
    return True


def replace_at_cell(handle, sheet_name: str, cell_id: str, data: TabularData) -> bool:
    """Write ``data`` into the rectangle anchored at ``cell_id``.

    Returns ``False`` without touching the sheet when ``data`` is empty.
    """

    a1.CellReference.parse(cell_id)
    if not data or a1.max_row_length(data) == 0:
        logger.info("No rows to write at %s in sheet %s", cell_id, sheet_name)
        return False
    write_range = a1.WriteRange.for_data(sheet_name, cell_id, data)
    handle.update_values(write_range.to_a1(), data)
    logger.info("Replaced data at cell %s in sheet: %s (%s)", cell_id, sheet_name, write_range)
    return True


def _apply_entire_sheet(handle, operation: ReplaceEntireSheet, data: TabularData) -> bool:
    return replace_entire_sheet(handle, operation.sheet_name, data)


def _apply_at_cell(handle, operation: ReplaceAtCell, data: TabularData) -> bool:
    return replace_at_cell(handle, operation.sheet_name, operation.cell_id, data)


Strategy = Callable[..., bool]

STRATEGIES: Dict[Type, Strategy] = {
    ReplaceEntireSheet: _apply_entire_sheet,
    ReplaceAtCell: _apply_at_cell,
}


def strategy_for(operation: Operation) -> Optional[Strategy]:
    """Return the strategy for ``operation`` or ``None`` for unknown types."""

    return STRATEGIES.get(type(operation))
